"""The canonical merge: apply a join/leave diff to a presence state.

Every mutation of a roster goes through :func:`apply_diff`, whether the
diff arrived live from the server or was computed from a snapshot by
:func:`~rostersync.diff.compute.compute_diff`.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, NamedTuple

from rostersync.models import (
    JOINS_KEY,
    LEAVES_KEY,
    METAS_KEY,
    Meta,
    PresenceChange,
    PresenceEntry,
    PresenceState,
)
from rostersync.utils.refs import custom_fields, metas_of, refs_of, without_refs


class _KeyDelta(NamedTuple):
    """Everything a diff says about a single key."""

    joined: list[Meta]
    left: list[Meta]
    update: Mapping[str, Any]


def apply_diff(
    state: PresenceState,
    diff: Mapping[str, Any] | None,
) -> tuple[PresenceState, list[PresenceChange]]:
    """Merge *diff* into *state* in place.

    For each key named by either side of the diff the new meta list is::

        existing metas - joined refs + joined metas - left refs

    so a join never duplicates a ref already present and a sibling meta of
    the same key survives an unrelated join or leave.  Custom fields are
    replaced wholesale by the join entry when the key joined, otherwise by
    the leave entry; they are never merged field by field.

    A key whose meta list ends up empty is deleted.  A leave for a key that
    is not in *state* changes nothing and yields no change record.

    Applying the same diff twice leaves the state as after the first
    application.

    Parameters
    ----------
    state:
        The roster to update.  It is mutated; callers should keep using the
        returned mapping, which is the same object.
    diff:
        ``{"joins": {...}, "leaves": {...}}``.  A missing or ``None`` side
        counts as empty.

    Returns
    -------
    tuple[PresenceState, list[PresenceChange]]
        The updated state and one change record per touched key: joined
        keys first in join order, then leave-only keys in leave order.
    """
    diff = diff or {}
    joins: Mapping[str, PresenceEntry] = diff.get(JOINS_KEY) or {}
    leaves: Mapping[str, PresenceEntry] = diff.get(LEAVES_KEY) or {}

    deltas: dict[str, _KeyDelta] = {}
    for key, joined_presence in joins.items():
        deltas[key] = _KeyDelta(metas_of(joined_presence), [], joined_presence)
    for key, left_presence in leaves.items():
        if key in deltas:
            deltas[key] = deltas[key]._replace(left=metas_of(left_presence))
        else:
            deltas[key] = _KeyDelta([], metas_of(left_presence), left_presence)

    changes: list[PresenceChange] = []
    for key, delta in deltas.items():
        old_presence = state.get(key)
        metas = without_refs(metas_of(old_presence), refs_of(delta.joined))
        metas = without_refs(metas + list(delta.joined), refs_of(delta.left))

        if old_presence is None and not metas:
            continue

        new_presence: PresenceEntry = {METAS_KEY: metas, **custom_fields(delta.update)}
        if metas:
            state[key] = new_presence
        else:
            del state[key]
        changes.append(PresenceChange(key=key, old=old_presence, new=new_presence))

    return state, changes
