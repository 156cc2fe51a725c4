"""Buffer for diffs that arrive between a reconnect and its snapshot.

After the channel rejoins, the server may push ``presence_diff`` events
before the ``presence_state`` snapshot of the new join.  Applying them to
the old roster would be wrong, and dropping them would lose real leaves,
so they wait here until the snapshot has been reconciled.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Iterator, Mapping
from typing import Any


class PendingQueue:
    """FIFO of diffs.

    Consumers :meth:`peek` at the oldest diff and :meth:`pop` it only after
    it has been merged, so a failure part way through a replay leaves the
    unprocessed diffs queued.
    """

    __slots__ = ("_diffs",)

    def __init__(self) -> None:
        self._diffs: deque[Mapping[str, Any]] = deque()

    def push(self, diff: Mapping[str, Any]) -> None:
        """Queue *diff* behind everything already waiting."""
        self._diffs.append(diff)

    def peek(self) -> Mapping[str, Any]:
        """Return the oldest queued diff without removing it.

        Raises
        ------
        IndexError
            If the queue is empty.
        """
        if not self._diffs:
            raise IndexError("peek from an empty PendingQueue")
        return self._diffs[0]

    def pop(self) -> Mapping[str, Any]:
        """Remove and return the oldest queued diff.

        Raises
        ------
        IndexError
            If the queue is empty.
        """
        if not self._diffs:
            raise IndexError("pop from an empty PendingQueue")
        return self._diffs.popleft()

    def __len__(self) -> int:
        return len(self._diffs)

    def __bool__(self) -> bool:
        return bool(self._diffs)

    def __iter__(self) -> Iterator[Mapping[str, Any]]:
        return iter(tuple(self._diffs))

    def __repr__(self) -> str:
        return f"PendingQueue(depth={len(self._diffs)})"
