"""Shared test fixtures for the rostersync test suite."""

from __future__ import annotations

from typing import Any, Callable

import pytest

from rostersync.config import PresenceConfig


class ChannelStub:
    """In-memory channel: one handler per event, join ref bumped on rejoin."""

    def __init__(self) -> None:
        self.ref = 1
        self.events: dict[str, Callable[[Any], Any]] = {}

    def on(self, event: str, callback: Callable[[Any], Any]) -> None:
        self.events[event] = callback

    def trigger(self, event: str, payload: Any) -> None:
        self.events[event](payload)

    def join_ref(self) -> str:
        return f"{self.ref}"

    def simulate_disconnect_and_reconnect(self) -> None:
        self.ref += 1


def list_by_first(key: str, presence: dict) -> dict:
    """Chooser returning the first meta of each entry."""
    return presence["metas"][0]


@pytest.fixture
def channel() -> ChannelStub:
    return ChannelStub()


@pytest.fixture
def config() -> PresenceConfig:
    """Default configuration."""
    return PresenceConfig()


@pytest.fixture
def roster() -> dict:
    """Three single-connection users."""
    return {
        "u1": {"metas": [{"id": 1, "phx_ref": "1"}]},
        "u2": {"metas": [{"id": 2, "phx_ref": "2"}]},
        "u3": {"metas": [{"id": 3, "phx_ref": "3"}]},
    }
