"""Shared fixtures: a fake clock, test settings and the shutdown token."""

from __future__ import annotations

import pytest

from mongo_warehouse.core.cancellation import process_token
from mongo_warehouse.core.config import Settings
from mongo_warehouse.db import mongo


class FakeClock:
    def __init__(self) -> None:
        self.now = 1_000.0
        self.pauses: list[float] = []

    def __call__(self) -> float:
        return self.now

    def pause(self, token, seconds: float) -> None:
        self.pauses.append(seconds)
        self.now += seconds


@pytest.fixture
def clock(monkeypatch) -> FakeClock:
    fake = FakeClock()
    monkeypatch.setattr(mongo, "_clock", fake)
    monkeypatch.setattr(mongo, "_pause", fake.pause)
    return fake


@pytest.fixture
def settings() -> Settings:
    return Settings(
        connect_timeout_seconds=300.0,
        drop_timeout_seconds=60.0,
        retry_interval_seconds=1.0,
        server_selection_timeout_ms=5_000,
        auth_failure_policy="warn",
        log_level="DEBUG",
        parameter_prefix="",
    )


@pytest.fixture(autouse=True)
def reset_process_token():
    process_token.reset()
    yield
    process_token.reset()
