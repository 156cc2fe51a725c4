"""Tests for diff/apply.py: the canonical merge."""

import copy

import pytest

from rostersync.diff.apply import apply_diff
from rostersync.diff.compute import compute_diff
from rostersync.models import PresenceChange


class TestApplyDiffState:
    def test_join_into_empty_state(self):
        joins = {"u1": {"metas": [{"id": 1, "phx_ref": "1"}]}}
        state = {}
        returned, _ = apply_diff(state, {"joins": joins, "leaves": {}})
        assert state == {"u1": {"metas": [{"id": 1, "phx_ref": "1"}]}}
        assert returned is state

    def test_removes_key_when_last_meta_leaves_and_appends_meta(self, roster):
        state, _ = apply_diff(roster, {
            "joins": {"u1": {"metas": [{"id": 1, "phx_ref": "1.2"}]}},
            "leaves": {"u2": {"metas": [{"id": 2, "phx_ref": "2"}]}},
        })
        assert state == {
            "u1": {"metas": [{"id": 1, "phx_ref": "1"}, {"id": 1, "phx_ref": "1.2"}]},
            "u3": {"metas": [{"id": 3, "phx_ref": "3"}]},
        }

    def test_removes_meta_but_keeps_key_with_survivors(self):
        state = {"u1": {"metas": [{"id": 1, "phx_ref": "1"}, {"id": 1, "phx_ref": "1.2"}]}}
        apply_diff(state, {"joins": {}, "leaves": {"u1": {"metas": [{"id": 1, "phx_ref": "1"}]}}})
        assert state == {"u1": {"metas": [{"id": 1, "phx_ref": "1.2"}]}}

    def test_rotation_in_one_diff_keeps_sibling_first(self):
        state = {}
        apply_diff(state, {
            "joins": {"u1": {"metas": [{"id": 1, "phx_ref": 1}, {"id": 2, "phx_ref": 2}]}},
        })
        apply_diff(state, {
            "joins": {"u1": {"metas": [{"id": 1, "phx_ref_prev": 1, "phx_ref": 1.1}]}},
            "leaves": {"u1": {"metas": [{"id": 1, "phx_ref": 1}]}},
        })
        assert state == {"u1": {"metas": [
            {"id": 2, "phx_ref": 2},
            {"id": 1, "phx_ref": 1.1, "phx_ref_prev": 1},
        ]}}

    def test_rejoin_of_existing_ref_is_not_duplicated(self):
        state = {"u1": {"metas": [{"id": 1, "phx_ref": "1", "v": 1}]}}
        apply_diff(state, {"joins": {"u1": {"metas": [{"id": 1, "phx_ref": "1", "v": 2}]}}})
        assert state == {"u1": {"metas": [{"id": 1, "phx_ref": "1", "v": 2}]}}

    def test_custom_fields_come_from_join_side(self):
        state = {}
        apply_diff(state, {"joins": {"u1": {"foo": "bar", "metas": [{"id": 1, "phx_ref": 1}]}}})
        apply_diff(state, {
            "joins": {"u1": {"foo": "baz", "metas": [{"id": 1, "phx_ref_prev": 1, "phx_ref": 1.1}]}},
            "leaves": {"u1": {"foo": "bar", "metas": [{"id": 1, "phx_ref": 1}]}},
        })
        assert state == {"u1": {"foo": "baz", "metas": [{"id": 1, "phx_ref": 1.1, "phx_ref_prev": 1}]}}

    def test_custom_fields_replaced_wholesale_not_merged(self):
        state = {"u1": {"a": 1, "b": 2, "metas": [{"phx_ref": "1"}, {"phx_ref": "2"}]}}
        apply_diff(state, {"leaves": {"u1": {"c": 3, "metas": [{"phx_ref": "1"}]}}})
        assert state == {"u1": {"c": 3, "metas": [{"phx_ref": "2"}]}}

    def test_missing_sides_are_empty(self, roster):
        before = copy.deepcopy(roster)
        state, changes = apply_diff(roster, {})
        assert state == before
        assert changes == []
        state, changes = apply_diff(roster, {"joins": None, "leaves": None})
        assert state == before
        assert changes == []

    def test_none_diff_is_empty(self):
        state, changes = apply_diff({}, None)
        assert state == {}
        assert changes == []

    def test_leave_for_unknown_key_is_silent_noop(self, roster):
        before = copy.deepcopy(roster)
        state, changes = apply_diff(roster, {"leaves": {"ghost": {"metas": [{"phx_ref": "x"}]}}})
        assert state == before
        assert changes == []

    def test_key_order_preserved_for_updates(self, roster):
        apply_diff(roster, {"joins": {"u1": {"metas": [{"phx_ref": "1.9"}]}}})
        assert list(roster) == ["u1", "u2", "u3"]


class TestApplyDiffChanges:
    def test_one_change_per_key(self):
        state = {"u1": {"metas": [{"phx_ref": "1"}]}}
        _, changes = apply_diff(state, {
            "joins": {"u1": {"metas": [{"phx_ref": "2"}, {"phx_ref": "3"}]}},
            "leaves": {"u1": {"metas": [{"phx_ref": "1"}]}},
        })
        assert changes == [PresenceChange(
            key="u1",
            old={"metas": [{"phx_ref": "1"}]},
            new={"metas": [{"phx_ref": "2"}, {"phx_ref": "3"}]},
        )]

    def test_join_keys_before_leave_only_keys(self, roster):
        _, changes = apply_diff(roster, {
            "joins": {"u9": {"metas": [{"phx_ref": "9"}]}},
            "leaves": {"u1": {"metas": [{"phx_ref": "1"}]}},
        })
        assert [c.key for c in changes] == ["u9", "u1"]

    def test_removed_key_reports_empty_new_entry(self):
        state = {"u1": {"metas": [{"phx_ref": "1"}]}}
        _, changes = apply_diff(state, {"leaves": {"u1": {"metas": [{"phx_ref": "1"}]}}})
        (change,) = changes
        assert change.old == {"metas": [{"phx_ref": "1"}]}
        assert change.new == {"metas": []}
        assert change.removed is True
        assert "u1" not in state

    def test_old_entry_is_not_mutated(self):
        old_entry = {"metas": [{"phx_ref": "1"}, {"phx_ref": "2"}]}
        state = {"u1": old_entry}
        _, changes = apply_diff(state, {"leaves": {"u1": {"metas": [{"phx_ref": "1"}]}}})
        assert changes[0].old is old_entry
        assert old_entry == {"metas": [{"phx_ref": "1"}, {"phx_ref": "2"}]}

    def test_snapshot_rotation_notifies_old_and_new(self):
        state = {"u1": {"metas": [{"id": 1, "phx_ref": "1"}]}}
        new = {"u1": {"metas": [{"id": 1, "phx_ref": "2"}]}}
        state, changes = apply_diff(state, compute_diff(state, new))
        assert state == new
        assert [c.as_args() for c in changes] == [
            ("u1", {"metas": [{"id": 1, "phx_ref": "1"}]}, {"metas": [{"id": 1, "phx_ref": "2"}]}),
        ]


class TestApplyDiffIdempotence:
    @pytest.mark.parametrize("diff", [
        {"joins": {"u1": {"metas": [{"phx_ref": "1.2"}]}}, "leaves": {}},
        {"joins": {}, "leaves": {"u2": {"metas": [{"phx_ref": "2"}]}}},
        {
            "joins": {"u3": {"metas": [{"phx_ref": "3.1"}]}},
            "leaves": {"u3": {"metas": [{"phx_ref": "3"}]}},
        },
    ])
    def test_repeated_delivery_is_harmless(self, roster, diff):
        once, _ = apply_diff(copy.deepcopy(roster), diff)
        twice, _ = apply_diff(copy.deepcopy(once), diff)
        assert twice == once
