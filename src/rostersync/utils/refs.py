"""Reference helpers shared by the diff functions.

Every set operation on a key's metas is keyed by ``phx_ref``, never by
meta equality: two metas with the same ref are the same connection even
if their other fields changed.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from rostersync.models import METAS_KEY, REF_KEY, Meta, PresenceEntry


def metas_of(entry: Mapping[str, Any] | None) -> list[Meta]:
    """Return the meta list of *entry*, or an empty list.

    Examples
    --------
    >>> metas_of({"metas": [{"phx_ref": "1"}]})
    [{'phx_ref': '1'}]
    >>> metas_of(None)
    []
    """
    if not entry:
        return []
    return entry.get(METAS_KEY) or []


def refs_of(metas: Iterable[Meta]) -> list[Any]:
    """Return the references of *metas*, in order.

    Examples
    --------
    >>> refs_of([{"phx_ref": "1"}, {"phx_ref": "1.2"}])
    ['1', '1.2']
    """
    return [meta.get(REF_KEY) for meta in metas]


def without_refs(metas: Iterable[Meta], refs: Iterable[Any]) -> list[Meta]:
    """Return the metas whose reference is not in *refs*.

    Order is preserved.

    Examples
    --------
    >>> without_refs([{"phx_ref": "1"}, {"phx_ref": "2"}], ["1"])
    [{'phx_ref': '2'}]
    """
    excluded = set(refs)
    return [meta for meta in metas if meta.get(REF_KEY) not in excluded]


def with_metas(entry: Mapping[str, Any] | None, metas: list[Meta]) -> PresenceEntry:
    """Return a shallow copy of *entry* whose meta list is *metas*.

    Custom fields are carried over; *entry* itself is left untouched.
    """
    copied: PresenceEntry = dict(entry) if entry else {}
    copied[METAS_KEY] = metas
    return copied


def custom_fields(entry: Mapping[str, Any] | None) -> dict[str, Any]:
    """Return every field of *entry* except the meta list."""
    if not entry:
        return {}
    return {k: v for k, v in entry.items() if k != METAS_KEY}
