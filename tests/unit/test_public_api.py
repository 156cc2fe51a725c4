"""Tests for the top-level package surface."""

import rostersync


class TestPublicSurface:
    def test_all_names_resolve(self):
        for name in rostersync.__all__:
            assert hasattr(rostersync, name), name

    def test_pure_functions_work_without_channel(self):
        state, changes = rostersync.apply_diff(
            {}, {"joins": {"u1": {"metas": [{"id": 1, "phx_ref": "1"}]}}},
        )
        assert state == {"u1": {"metas": [{"id": 1, "phx_ref": "1"}]}}
        assert [c.key for c in changes] == ["u1"]
        assert rostersync.list_presences(state, lambda key, _: key) == ["u1"]
        assert rostersync.compute_diff(state, {}) == {"joins": {}, "leaves": state}
