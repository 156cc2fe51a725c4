"""Tests for pending.py"""

import pytest

from rostersync.pending import PendingQueue


def _drain(queue):
    out = []
    while queue:
        out.append(queue.pop())
    return out


class TestPendingQueue:
    def test_starts_empty(self):
        queue = PendingQueue()
        assert len(queue) == 0
        assert not queue
        assert list(queue) == []

    def test_pops_in_arrival_order(self):
        queue = PendingQueue()
        diffs = [{"joins": {str(i): {"metas": [{"phx_ref": str(i)}]}}} for i in range(5)]
        for diff in diffs:
            queue.push(diff)
        assert len(queue) == 5
        assert _drain(queue) == diffs
        assert len(queue) == 0

    def test_peek_does_not_remove(self):
        queue = PendingQueue()
        queue.push({"joins": {}})
        queue.push({"leaves": {}})
        assert queue.peek() == {"joins": {}}
        assert queue.peek() == {"joins": {}}
        assert len(queue) == 2

    def test_peek_and_pop_on_empty_raise(self):
        queue = PendingQueue()
        with pytest.raises(IndexError):
            queue.peek()
        with pytest.raises(IndexError):
            queue.pop()

    def test_iteration_is_a_snapshot(self):
        queue = PendingQueue()
        queue.push({"leaves": {}})
        it = iter(queue)
        queue.push({"joins": {}})
        assert list(it) == [{"leaves": {}}]

    def test_repr_shows_depth(self):
        queue = PendingQueue()
        queue.push({})
        assert repr(queue) == "PendingQueue(depth=1)"
