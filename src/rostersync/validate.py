"""Payload validation for snapshots and diffs.

The merge functions trust their input: a meta without ``phx_ref`` or two
metas sharing one ref produce undefined rosters rather than errors.  When
a tracker runs with ``PresenceConfig(validate_payloads=True)`` every
incoming payload is checked here first and rejected with a
:class:`~rostersync.errors.RosterValidationError` before anything is
mutated or queued.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from rostersync.errors import RosterDuplicateRefError, RosterValidationError
from rostersync.models import JOINS_KEY, LEAVES_KEY, METAS_KEY, REF_KEY


def _validate_entry(side: str, key: Any, entry: Any) -> None:
    """Check one presence entry: a mapping with a list of unique-ref metas."""
    if not isinstance(key, str):
        raise RosterValidationError(
            f"Presence key {key!r} is not a string",
            context={"side": side, "key": key, "reason": "key_type"},
        )
    if not isinstance(entry, Mapping):
        raise RosterValidationError(
            f"Presence entry for '{key}' is not a mapping",
            context={"side": side, "key": key, "reason": "entry_type"},
        )
    metas = entry.get(METAS_KEY)
    if not isinstance(metas, list):
        raise RosterValidationError(
            f"Presence entry for '{key}' has no '{METAS_KEY}' list",
            context={"side": side, "key": key, "reason": "missing_metas"},
        )

    seen: set[str] = set()
    for meta in metas:
        ref = meta.get(REF_KEY) if isinstance(meta, Mapping) else None
        if not isinstance(ref, str):
            raise RosterValidationError(
                f"Meta of '{key}' has no string '{REF_KEY}'",
                context={"side": side, "key": key, "reason": "missing_ref"},
            )
        if ref in seen:
            raise RosterDuplicateRefError(
                f"Reference '{ref}' appears twice in '{key}'",
                context={"side": side, "key": key, "ref": ref},
            )
        seen.add(ref)


def validate_state(state: Any) -> None:
    """Raise if *state* is not a valid full-roster snapshot.

    Raises
    ------
    RosterValidationError
        The snapshot or one of its entries has the wrong shape.
    RosterDuplicateRefError
        An entry lists the same ``phx_ref`` twice.
    """
    if not isinstance(state, Mapping):
        raise RosterValidationError(
            "Presence state is not a mapping",
            context={"side": "state", "reason": "payload_type"},
        )
    for key, entry in state.items():
        _validate_entry("state", key, entry)


def validate_diff(diff: Any) -> None:
    """Raise if *diff* is not a valid join/leave diff.

    A missing or ``None`` side is accepted and means "nothing on this side".

    Raises
    ------
    RosterValidationError
        The diff, a side, or one of its entries has the wrong shape.
    RosterDuplicateRefError
        An entry lists the same ``phx_ref`` twice.
    """
    if not isinstance(diff, Mapping):
        raise RosterValidationError(
            "Presence diff is not a mapping",
            context={"side": "diff", "reason": "payload_type"},
        )
    for side in (JOINS_KEY, LEAVES_KEY):
        entries = diff.get(side)
        if entries is None:
            continue
        if not isinstance(entries, Mapping):
            raise RosterValidationError(
                f"Presence diff '{side}' is not a mapping",
                context={"side": side, "reason": "payload_type"},
            )
        for key, entry in entries.items():
            _validate_entry(side, key, entry)
