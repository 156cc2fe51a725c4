"""Flatten a presence state into a list."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

from rostersync.models import PresenceEntry


def _entry(key: str, presence: PresenceEntry) -> PresenceEntry:
    return presence


def list_presences(
    presences: Mapping[str, PresenceEntry],
    chooser: Callable[[str, PresenceEntry], Any] | None = None,
) -> list[Any]:
    """Return ``chooser(key, entry)`` for every key, in key order.

    Without a *chooser* the entries themselves are returned.

    Examples
    --------
    >>> state = {"u1": {"metas": [{"phx_ref": "1"}]}}
    >>> list_presences(state, lambda key, entry: key)
    ['u1']
    """
    chooser = chooser or _entry
    return [chooser(key, presence) for key, presence in presences.items()]
