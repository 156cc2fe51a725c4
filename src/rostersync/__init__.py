"""rostersync: presence roster reconciliation for realtime channels.

Public re-exports
-----------------

* **Tracker:** :class:`Presence`, :class:`Channel`
* **Pure functions:** :func:`compute_diff`, :func:`apply_diff`,
  :func:`list_presences`, :func:`synchronize_state`,
  :func:`synchronize_diff` and the deprecated :func:`sync_state` /
  :func:`sync_diff`
* **Configuration:** :class:`PresenceConfig`
* **Errors:** every :class:`RosterError` subclass and :class:`ErrorCode`
* **Models:** :class:`PresenceChange`, :class:`SyncStatus` and wire names

Usage::

    from rostersync import Presence

    presence = Presence(channel)
    presence.on_change(on_change)
    users = presence.list(lambda key, entry: entry["metas"][0])
"""

from __future__ import annotations

# ── Configuration ───────────────────────────────────────────────────────
from rostersync.config import (
    DEFAULT_DIFF_EVENT,
    DEFAULT_STATE_EVENT,
    PresenceConfig,
)

# ── Pure functions ──────────────────────────────────────────────────────
from rostersync.diff import (
    apply_diff,
    compute_diff,
    sync_diff,
    sync_state,
    synchronize_diff,
    synchronize_state,
)

# ── Errors ──────────────────────────────────────────────────────────────
from rostersync.errors import (
    ErrorCode,
    RosterDuplicateRefError,
    RosterError,
    RosterValidationError,
)
from rostersync.listing import list_presences

# ── Models ──────────────────────────────────────────────────────────────
from rostersync.models import (
    METAS_KEY,
    REF_KEY,
    PresenceChange,
    SyncStatus,
)
from rostersync.pending import PendingQueue

# ── Tracker ─────────────────────────────────────────────────────────────
from rostersync.presence import Channel, Presence
from rostersync.validate import validate_diff, validate_state

# ── Public surface ──────────────────────────────────────────────────────

__all__ = [
    # Tracker
    "Presence",
    "Channel",
    "PendingQueue",
    # Pure functions
    "compute_diff",
    "apply_diff",
    "list_presences",
    "synchronize_state",
    "synchronize_diff",
    "sync_state",
    "sync_diff",
    "validate_state",
    "validate_diff",
    # Configuration
    "PresenceConfig",
    "DEFAULT_STATE_EVENT",
    "DEFAULT_DIFF_EVENT",
    # Errors
    "RosterError",
    "ErrorCode",
    "RosterValidationError",
    "RosterDuplicateRefError",
    # Models
    "PresenceChange",
    "SyncStatus",
    "METAS_KEY",
    "REF_KEY",
]
