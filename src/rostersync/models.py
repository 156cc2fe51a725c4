"""Data shapes the reconciliation functions operate on.

Presence payloads stay plain dicts, exactly as they arrive from the
server, so callers can feed decoded channel messages straight in:

* a **meta** is one connection of a key and carries a ``phx_ref``;
* a **presence entry** is ``{"metas": [meta, ...], **custom_fields}``;
* a **state** maps each key to its entry, in insertion order;
* a **diff** is ``{"joins": {key: entry}, "leaves": {key: entry}}`` where
  each entry lists only the metas that joined or left.

The only behaviour-carrying types here are :class:`PresenceChange` and
:class:`SyncStatus`.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

# ---------------------------------------------------------------------------
# Wire names
# ---------------------------------------------------------------------------

METAS_KEY = "metas"
"""Entry field holding the ordered list of metas."""

REF_KEY = "phx_ref"
"""Meta field holding the reference that identifies a live connection."""

JOINS_KEY = "joins"
LEAVES_KEY = "leaves"

# ---------------------------------------------------------------------------
# Type aliases
# ---------------------------------------------------------------------------

Meta = dict[str, Any]
PresenceEntry = dict[str, Any]
PresenceState = dict[str, PresenceEntry]
PresenceDiff = dict[str, dict[str, PresenceEntry]]


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class SyncStatus(str, Enum):
    """Whether the local roster belongs to the channel's current join."""

    SYNCED = "synced"
    """The local epoch matches the channel's join ref; diffs apply live."""

    PENDING = "pending"
    """No snapshot yet for the current join; diffs are queued."""


# ---------------------------------------------------------------------------
# Change records
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PresenceChange:
    """One per-key result of applying a diff.

    Attributes
    ----------
    key:
        The presence key that was touched.
    old:
        The entry before the diff, or ``None`` if the key was absent.
    new:
        The entry after the diff.  When the last meta left, this is an
        entry with an empty ``metas`` list and the key is gone from state.
    """

    key: str
    old: PresenceEntry | None
    new: PresenceEntry

    @property
    def removed(self) -> bool:
        """``True`` when the key no longer exists after the diff."""
        return not self.new.get(METAS_KEY)

    def as_args(self) -> tuple[str, PresenceEntry | None, PresenceEntry]:
        """Return ``(key, old, new)`` in ``on_change`` callback order."""
        return (self.key, self.old, self.new)
