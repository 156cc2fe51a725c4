"""Configuration for rostersync.

:class:`PresenceConfig` is a plain dataclass that captures every tuneable
knob of a :class:`~rostersync.presence.Presence` tracker.  The only knobs
that change reconciliation are the two channel event names; the rest
switch on validation and observability.

Two module-level constants hold the conventional event names:

* :data:`DEFAULT_STATE_EVENT`: full-state snapshot event.
* :data:`DEFAULT_DIFF_EVENT`: incremental join/leave event.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from rostersync.observability.metrics import MetricsHook

DEFAULT_STATE_EVENT: str = "presence_state"
"""Event name the server uses to push a full roster snapshot."""

DEFAULT_DIFF_EVENT: str = "presence_diff"
"""Event name the server uses to push a join/leave diff."""


@dataclass
class PresenceConfig:
    """Complete configuration for a presence tracker.

    Every parameter has a default, so ``PresenceConfig()`` listens on the
    conventional event names.

    Parameters
    ----------
    state_event:
        Channel event carrying full-state snapshots.
    diff_event:
        Channel event carrying join/leave diffs.
    validate_payloads:
        Run :func:`~rostersync.validate.validate_state` and
        :func:`~rostersync.validate.validate_diff` on every incoming
        payload and reject malformed ones with
        :class:`~rostersync.errors.RosterValidationError`.  Off by default:
        the merge functions accept any payload that follows the wire
        shape and do not deduplicate references.
    metrics:
        A :class:`~rostersync.observability.MetricsHook` implementation.
        ``None`` selects the no-op hook.
    debug_dump_diff:
        Log every diff the tracker computes or applies at ``DEBUG`` level.
    """

    # ── Events ──────────────────────────────────────────────────────────
    state_event: str = DEFAULT_STATE_EVENT

    diff_event: str = DEFAULT_DIFF_EVENT

    # ── Robustness ──────────────────────────────────────────────────────
    validate_payloads: bool = False

    # ── Observability ──────────────────────────────────────────────────
    metrics: MetricsHook | None = None

    # ── Debug ───────────────────────────────────────────────────────────
    debug_dump_diff: bool = False

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if not self.state_event:
            raise ValueError("state_event must be a non-empty event name")
        if not self.diff_event:
            raise ValueError("diff_event must be a non-empty event name")
        if self.state_event == self.diff_event:
            raise ValueError(
                f"state_event and diff_event must differ, both are '{self.state_event}'"
            )

    @classmethod
    def from_opts(cls, opts: Mapping[str, Any] | PresenceConfig | None) -> PresenceConfig:
        """Build a config from the ``{"events": {"state": ..., "diff": ...}}``
        options mapping.

        A :class:`PresenceConfig` is returned unchanged and ``None`` yields
        the defaults.  Missing event names fall back to the conventional
        ones.
        """
        if opts is None:
            return cls()
        if isinstance(opts, PresenceConfig):
            return opts
        events = opts.get("events") or {}
        return cls(
            state_event=events.get("state", DEFAULT_STATE_EVENT),
            diff_event=events.get("diff", DEFAULT_DIFF_EVENT),
        )
