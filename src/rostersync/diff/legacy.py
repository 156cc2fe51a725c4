"""Deprecated join/leave-callback reconciliation.

Older consumers registered separate ``on_join`` and ``on_leave`` callbacks
and expected the reconcile functions to leave their inputs untouched.
:func:`sync_state` and :func:`sync_diff` keep that contract: inputs are
deep-copied and a new state is returned.  New code should use
:func:`~rostersync.diff.synchronize.synchronize_state` and
:func:`~rostersync.diff.synchronize.synchronize_diff`.

The join and leave passes run separately here, so a key that both joins
and leaves in one diff triggers both callbacks and a joined key keeps its
surviving metas *in front of* the joined ones.
"""

from __future__ import annotations

import copy
import warnings
from collections.abc import Callable, Mapping
from typing import Any

from rostersync.models import JOINS_KEY, LEAVES_KEY, METAS_KEY, PresenceEntry, PresenceState
from rostersync.observability import get_logger
from rostersync.utils.refs import metas_of, refs_of, without_refs

log = get_logger("rostersync.diff")

PresenceCallback = Callable[[str, PresenceEntry | None, PresenceEntry], Any]


def _noop(*_args: Any) -> None:
    pass


def warn_deprecated(name: str, replacement: str) -> None:
    """Emit a :class:`DeprecationWarning` and a structured WARNING record."""
    message = f"{name} is deprecated, use {replacement} instead"
    warnings.warn(message, DeprecationWarning, stacklevel=3)
    log.warning(
        message,
        extra={"extra_fields": {"op": "deprecation", "name": name, "replacement": replacement}},
    )


def sync_state(
    state: Mapping[str, PresenceEntry],
    new_state: Mapping[str, PresenceEntry],
    on_join: PresenceCallback | None = None,
    on_leave: PresenceCallback | None = None,
) -> PresenceState:
    """Return a copy of *state* reconciled against the snapshot *new_state*.

    .. deprecated::
        Use :func:`~rostersync.diff.synchronize.synchronize_state`.
    """
    warn_deprecated("sync_state", "synchronize_state")
    return legacy_sync_state(state, new_state, on_join, on_leave)


def sync_diff(
    state: Mapping[str, PresenceEntry],
    diff: Mapping[str, Any] | None,
    on_join: PresenceCallback | None = None,
    on_leave: PresenceCallback | None = None,
) -> PresenceState:
    """Return a copy of *state* with *diff* applied.

    .. deprecated::
        Use :func:`~rostersync.diff.synchronize.synchronize_diff`.
    """
    warn_deprecated("sync_diff", "synchronize_diff")
    return legacy_sync_diff(state, diff, on_join, on_leave)


# ---------------------------------------------------------------------------
# Implementations shared with the Presence tracker, which warns once at
# callback registration instead of on every event.
# ---------------------------------------------------------------------------

def legacy_sync_state(
    state: Mapping[str, PresenceEntry],
    new_state: Mapping[str, PresenceEntry],
    on_join: PresenceCallback | None = None,
    on_leave: PresenceCallback | None = None,
) -> PresenceState:
    current_state: PresenceState = copy.deepcopy(dict(state))
    new_state = copy.deepcopy(dict(new_state))
    joins: dict[str, PresenceEntry] = {}
    leaves: dict[str, PresenceEntry] = {}

    for key, presence in current_state.items():
        if key not in new_state:
            leaves[key] = copy.deepcopy(presence)

    for key, new_presence in new_state.items():
        current = current_state.get(key)
        if current is None:
            joins[key] = new_presence
            continue
        new_metas = metas_of(new_presence)
        cur_metas = metas_of(current)
        joined_metas = without_refs(new_metas, refs_of(cur_metas))
        left_metas = without_refs(cur_metas, refs_of(new_metas))
        if joined_metas:
            joins[key] = {**new_presence, METAS_KEY: joined_metas}
        if left_metas:
            leaves[key] = {**copy.deepcopy(current), METAS_KEY: left_metas}

    return _merge(current_state, joins, leaves, on_join, on_leave)


def legacy_sync_diff(
    state: Mapping[str, PresenceEntry],
    diff: Mapping[str, Any] | None,
    on_join: PresenceCallback | None = None,
    on_leave: PresenceCallback | None = None,
) -> PresenceState:
    diff = copy.deepcopy(dict(diff or {}))
    return _merge(
        copy.deepcopy(dict(state)),
        diff.get(JOINS_KEY) or {},
        diff.get(LEAVES_KEY) or {},
        on_join,
        on_leave,
    )


def _merge(
    state: PresenceState,
    joins: Mapping[str, PresenceEntry],
    leaves: Mapping[str, PresenceEntry],
    on_join: PresenceCallback | None,
    on_leave: PresenceCallback | None,
) -> PresenceState:
    on_join = on_join or _noop
    on_leave = on_leave or _noop

    for key, new_presence in joins.items():
        current = state.get(key)
        merged = copy.deepcopy(new_presence)
        if current is not None:
            kept = without_refs(metas_of(current), refs_of(metas_of(merged)))
            merged[METAS_KEY] = kept + metas_of(merged)
        state[key] = merged
        on_join(key, current, new_presence)

    for key, left_presence in leaves.items():
        current = state.get(key)
        if current is None:
            continue
        current[METAS_KEY] = without_refs(metas_of(current), refs_of(metas_of(left_presence)))
        on_leave(key, current, left_presence)
        if not current[METAS_KEY]:
            del state[key]

    return state
