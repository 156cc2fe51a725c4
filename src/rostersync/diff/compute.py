"""Snapshot-to-diff conversion.

A fresh ``presence_state`` snapshot is never written over local state
directly.  :func:`compute_diff` turns the pair *(current, snapshot)* into
an equivalent join/leave diff so that snapshots and live diffs share the
single merge path in :func:`~rostersync.diff.apply.apply_diff`, and so
that per-key change notifications are produced the same way for both.
"""

from __future__ import annotations

from collections.abc import Mapping

from rostersync.models import (
    JOINS_KEY,
    LEAVES_KEY,
    METAS_KEY,
    PresenceDiff,
    PresenceEntry,
)
from rostersync.utils.refs import metas_of, refs_of, with_metas, without_refs


def compute_diff(
    old_state: Mapping[str, PresenceEntry],
    new_state: Mapping[str, PresenceEntry],
) -> PresenceDiff:
    """Express the move from *old_state* to *new_state* as joins and leaves.

    Per key:

    - **only in old** -- the whole old entry leaves.
    - **only in new** -- the whole new entry joins.
    - **in both** -- metas are compared by ``phx_ref``.  Metas new to the
      key join, metas missing from the snapshot leave.  Custom fields
      travel with the join side when there is one; a pure removal carries
      the snapshot's custom fields on the leave side instead.

    A rotated reference (same connection, new ``phx_ref``) therefore shows
    up as one leave plus one join for that key, not as "no change".

    Neither argument is modified.

    Parameters
    ----------
    old_state:
        The roster as currently held locally.
    new_state:
        The authoritative snapshot from the server.

    Returns
    -------
    PresenceDiff
        ``{"joins": {...}, "leaves": {...}}``.  Joins are ordered by
        *new_state*; leaves list vanished keys first (in *old_state*
        order), then keys that lost some metas.
    """
    joins: dict[str, PresenceEntry] = {}
    leaves: dict[str, PresenceEntry] = {}

    for key, presence in old_state.items():
        if key not in new_state:
            leaves[key] = presence

    for key, new_presence in new_state.items():
        current = old_state.get(key)
        if current is None:
            joins[key] = new_presence
            continue

        new_metas = metas_of(new_presence)
        cur_metas = metas_of(current)
        joined_metas = without_refs(new_metas, refs_of(cur_metas))
        left_metas = without_refs(cur_metas, refs_of(new_metas))

        if joined_metas:
            joins[key] = with_metas(new_presence, joined_metas)
        if left_metas:
            if joined_metas:
                # The join side already carries the snapshot's custom fields.
                leaves[key] = {METAS_KEY: left_metas}
            else:
                leaves[key] = with_metas(new_presence, left_metas)

    return {JOINS_KEY: joins, LEAVES_KEY: leaves}
