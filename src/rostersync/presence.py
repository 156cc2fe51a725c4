"""Channel-bound presence tracker.

:class:`Presence` subscribes to a channel's snapshot and diff events and
keeps a local roster in step with the server across reconnects.

Usage::

    from rostersync import Presence

    presence = Presence(channel)
    presence.on_change(lambda key, old, new: print(key, old, new))
    presence.on_sync(lambda: render(presence.list()))

The tracker is *synced* while the join ref recorded at the last snapshot
equals ``channel.join_ref()``.  When the channel rejoins, its join ref
changes and the tracker becomes *pending*: diffs are queued until the
snapshot for the new join arrives, then replayed in order on top of it.
"""

from __future__ import annotations

import time
from collections.abc import Callable, Hashable, Mapping
from types import MappingProxyType
from typing import Any, Protocol, runtime_checkable

from rostersync.config import PresenceConfig
from rostersync.diff.apply import apply_diff
from rostersync.diff.compute import compute_diff
from rostersync.diff.legacy import (
    PresenceCallback,
    legacy_sync_diff,
    legacy_sync_state,
    warn_deprecated,
)
from rostersync.diff.synchronize import OnChange
from rostersync.listing import list_presences
from rostersync.models import PresenceChange, PresenceEntry, PresenceState, SyncStatus
from rostersync.observability import NoopMetricsHook, get_logger
from rostersync.observability.metrics import (
    CHANGES_TOTAL,
    DIFFS_APPLIED_TOTAL,
    DIFFS_QUEUED_TOTAL,
    KEYS_REMOVED_TOTAL,
    PENDING_DEPTH,
    SNAPSHOTS_TOTAL,
    SYNC_DURATION_MS,
)
from rostersync.pending import PendingQueue
from rostersync.validate import validate_diff, validate_state

log = get_logger("rostersync.presence")


@runtime_checkable
class Channel(Protocol):
    """What a tracker needs from the realtime channel.

    ``on`` holds one handler per event name.  ``join_ref`` returns a token
    for the current join that only has to support ``==`` and must change
    whenever the channel rejoins; ``None`` means "not joined".
    """

    def on(self, event: str, callback: Callable[[Any], Any]) -> Any:
        ...

    def join_ref(self) -> Hashable | None:
        ...


def _noop() -> None:
    pass


class Presence:
    """Keeps a presence roster in sync with one channel.

    Parameters
    ----------
    channel:
        Any object satisfying :class:`Channel`.
    opts:
        A :class:`PresenceConfig`, or the mapping
        ``{"events": {"state": ..., "diff": ...}}``.  Defaults listen on
        ``presence_state`` / ``presence_diff``.
    """

    def __init__(
        self,
        channel: Channel,
        opts: PresenceConfig | Mapping[str, Any] | None = None,
    ) -> None:
        self._config = PresenceConfig.from_opts(opts)
        self._metrics = (
            self._config.metrics if self._config.metrics is not None else NoopMetricsHook()
        )
        self._channel = channel
        self._state: PresenceState = {}
        self._pending = PendingQueue()
        self._join_ref: Hashable | None = None

        self._on_change: OnChange | None = None
        self._on_join: PresenceCallback | None = None
        self._on_leave: PresenceCallback | None = None
        self._on_sync: Callable[[], Any] = _noop

        channel.on(self._config.state_event, self._handle_state)
        channel.on(self._config.diff_event, self._handle_diff)

    # ── Callback slots ─────────────────────────────────────────────────

    def on_change(self, callback: OnChange) -> None:
        """Set the handler called as ``callback(key, old, new)`` per change.

        Replaces any previously registered handler.
        """
        self._on_change = callback

    def on_sync(self, callback: Callable[[], Any]) -> None:
        """Set the handler called after a snapshot (and its queued diffs)
        or a live diff has been applied.  Replaces the previous handler.
        """
        self._on_sync = callback

    def on_join(self, callback: PresenceCallback) -> None:
        """Set a per-key join handler.

        .. deprecated::
            Use :meth:`on_change`.  While a join or leave handler is set the
            tracker reconciles with the copying legacy functions.
        """
        warn_deprecated("on_join", "on_change")
        self._on_join = callback

    def on_leave(self, callback: PresenceCallback) -> None:
        """Set a per-key leave handler.

        .. deprecated::
            Use :meth:`on_change`.
        """
        warn_deprecated("on_leave", "on_change")
        self._on_leave = callback

    # ── Read access ─────────────────────────────────────────────────────

    def list(self, chooser: Callable[[str, PresenceEntry], Any] | None = None) -> list[Any]:
        """Return ``chooser(key, entry)`` for every present key, in key order."""
        return list_presences(self._state, chooser)

    @property
    def state(self) -> Mapping[str, PresenceEntry]:
        """Read-only view of the current roster."""
        return MappingProxyType(self._state)

    @property
    def pending_diffs(self) -> tuple[Mapping[str, Any], ...]:
        """Diffs waiting for the next snapshot, oldest first."""
        return tuple(self._pending)

    @property
    def status(self) -> SyncStatus:
        return SyncStatus.PENDING if self.in_pending_sync_state() else SyncStatus.SYNCED

    def in_pending_sync_state(self) -> bool:
        """``True`` until a snapshot has been received for the current join."""
        return self._join_ref is None or self._join_ref != self._channel.join_ref()

    # ── Channel handlers ───────────────────────────────────────────────

    def _handle_state(self, new_state: Mapping[str, PresenceEntry]) -> None:
        if self._config.validate_payloads:
            validate_state(new_state)

        started = time.perf_counter()
        join_ref = self._channel.join_ref()

        if self._uses_legacy_callbacks():
            self._state = legacy_sync_state(
                self._state, new_state, self._on_join, self._on_leave,
            )
            self._join_ref = join_ref
        else:
            changes = self._merge(compute_diff(self._state, new_state), source="snapshot")
            self._join_ref = join_ref
            self._notify(changes)
        replayed = self._replay_pending()

        elapsed_ms = (time.perf_counter() - started) * 1000
        self._metrics.increment(SNAPSHOTS_TOTAL)
        self._metrics.timing(SYNC_DURATION_MS, elapsed_ms)
        self._metrics.gauge(PENDING_DEPTH, 0)
        if self._config.debug_dump_diff:
            log.debug(
                "snapshot reconciled",
                extra={
                    "extra_fields": {
                        "op": "state",
                        "join_ref": self._join_ref,
                        "keys": len(self._state),
                        "replayed": replayed,
                        "duration_ms": round(elapsed_ms, 3),
                    }
                },
            )
        self._on_sync()

    def _handle_diff(self, diff: Mapping[str, Any]) -> None:
        if self._config.validate_payloads:
            validate_diff(diff)

        if self.in_pending_sync_state():
            self._pending.push(diff)
            self._metrics.increment(DIFFS_QUEUED_TOTAL)
            self._metrics.gauge(PENDING_DEPTH, len(self._pending))
            if self._config.debug_dump_diff:
                log.debug(
                    "diff queued",
                    extra={"extra_fields": {"op": "diff", "pending": len(self._pending), "diff": diff}},
                )
            return

        if self._pending:
            self._replay_pending()
            self._metrics.gauge(PENDING_DEPTH, 0)
        if self._uses_legacy_callbacks():
            self._state = legacy_sync_diff(self._state, diff, self._on_join, self._on_leave)
        else:
            self._notify(self._merge(diff, source="live"))
        self._on_sync()

    # ── Internals ──────────────────────────────────────────────────────

    def _uses_legacy_callbacks(self) -> bool:
        return self._on_join is not None or self._on_leave is not None

    def _replay_pending(self) -> int:
        """Apply queued diffs oldest first; return how many were applied.

        Each diff is popped only once it is part of the roster, so an error
        raised by a handler leaves the rest queued for the next event.
        """
        replayed = 0
        while self._pending:
            diff = self._pending.peek()
            if self._uses_legacy_callbacks():
                self._state = legacy_sync_diff(
                    self._state, diff, self._on_join, self._on_leave,
                )
                self._pending.pop()
            else:
                changes = self._merge(diff, source="replay")
                self._pending.pop()
                self._notify(changes)
            replayed += 1
        return replayed

    def _merge(self, diff: Mapping[str, Any], *, source: str) -> list[PresenceChange]:
        """Merge *diff* into the roster and return the per-key changes."""
        if self._config.debug_dump_diff:
            log.debug(
                "applying diff",
                extra={"extra_fields": {"op": "apply", "source": source, "diff": diff}},
            )
        self._state, changes = apply_diff(self._state, diff)
        self._metrics.increment(DIFFS_APPLIED_TOTAL, tags={"source": source})
        if changes:
            self._metrics.increment(CHANGES_TOTAL, len(changes))
            removed = sum(1 for change in changes if change.removed)
            if removed:
                self._metrics.increment(KEYS_REMOVED_TOTAL, removed)
        return changes

    def _notify(self, changes: list[PresenceChange]) -> None:
        if self._on_change is not None:
            for change in changes:
                self._on_change(*change.as_args())
