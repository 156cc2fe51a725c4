"""Callback-style wrappers around the canonical merge.

:func:`synchronize_state` and :func:`synchronize_diff` mutate the state
they are given, call ``on_change(key, old, new)`` once per touched key,
and return the state.  They are what a tracker without a channel (for
example, one fed from a message queue) calls directly.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

from rostersync.models import PresenceEntry, PresenceState

from .apply import apply_diff
from .compute import compute_diff

OnChange = Callable[[str, PresenceEntry | None, PresenceEntry], Any]


def synchronize_state(
    state: PresenceState,
    new_state: Mapping[str, PresenceEntry],
    on_change: OnChange | None = None,
) -> PresenceState:
    """Bring *state* in line with the snapshot *new_state*.

    **Note:** *state* is mutated and returned.
    """
    return synchronize_diff(state, compute_diff(state, new_state), on_change)


def synchronize_diff(
    state: PresenceState,
    diff: Mapping[str, Any] | None,
    on_change: OnChange | None = None,
) -> PresenceState:
    """Apply a live join/leave *diff* to *state*.

    **Note:** *state* is mutated and returned.
    """
    state, changes = apply_diff(state, diff)
    if on_change is not None:
        for change in changes:
            on_change(*change.as_args())
    return state
