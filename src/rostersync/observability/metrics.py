"""Metrics hook protocol, metric names, and the no-op default.

A :class:`~rostersync.presence.Presence` tracker reports counters, gauges
and timings as it reconciles.  Without configuration the
:class:`NoopMetricsHook` swallows them.  Any object with matching
``increment`` / ``timing`` / ``gauge`` methods can be passed as
``PresenceConfig(metrics=...)`` to forward them to StatsD, Prometheus or
similar.

The emitted names are the module constants below; dashboards can import
them instead of repeating the strings.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

SNAPSHOTS_TOTAL = "rostersync.snapshots_total"
"""Counter: snapshots reconciled."""

DIFFS_APPLIED_TOTAL = "rostersync.diffs_applied_total"
"""Counter: diffs merged, tagged ``source`` = ``snapshot``, ``live`` or ``replay``."""

DIFFS_QUEUED_TOTAL = "rostersync.diffs_queued_total"
"""Counter: diffs buffered while the tracker was pending."""

CHANGES_TOTAL = "rostersync.changes_total"
"""Counter: per-key change records produced."""

KEYS_REMOVED_TOTAL = "rostersync.keys_removed_total"
"""Counter: keys whose last meta left."""

PENDING_DEPTH = "rostersync.pending_depth"
"""Gauge: diffs waiting for the next snapshot."""

SYNC_DURATION_MS = "rostersync.sync_duration_ms"
"""Timing: snapshot reconciliation including replay."""

Tags = dict[str, str]


@runtime_checkable
class MetricsHook(Protocol):
    """What a tracker needs from a metrics backend.

    *tags* map onto the backend's own labels; the tracker only sets them
    on :data:`DIFFS_APPLIED_TOTAL`.
    """

    def increment(self, name: str, value: int = 1, tags: Tags | None = None) -> None:
        ...

    def timing(self, name: str, ms: float, tags: Tags | None = None) -> None:
        ...

    def gauge(self, name: str, value: float, tags: Tags | None = None) -> None:
        ...


class NoopMetricsHook:
    """Backend used when ``PresenceConfig.metrics`` is ``None``."""

    __slots__ = ()

    def increment(self, name: str, value: int = 1, tags: Tags | None = None) -> None:
        return None

    def timing(self, name: str, ms: float, tags: Tags | None = None) -> None:
        return None

    def gauge(self, name: str, value: float, tags: Tags | None = None) -> None:
        return None
