"""Presence diff engine.

Exports
-------
compute_diff
    Convert a (current, snapshot) pair into an equivalent join/leave diff.
apply_diff
    Merge a join/leave diff into a state, returning per-key changes.
synchronize_state, synchronize_diff
    Callback-style wrappers that mutate and return the state.
sync_state, sync_diff
    Deprecated copying variants with separate join/leave callbacks.
"""

from .apply import apply_diff
from .compute import compute_diff
from .legacy import sync_diff, sync_state
from .synchronize import synchronize_diff, synchronize_state

__all__ = [
    "apply_diff",
    "compute_diff",
    "sync_diff",
    "sync_state",
    "synchronize_diff",
    "synchronize_state",
]
