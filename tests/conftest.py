"""Shared fixtures: clean MONIT_* environment and in-memory sinks."""

from __future__ import annotations

import json
import os
import threading

import pytest

from monit.errors import DeliveryError
from monit.sink import Sink


class RecordingSink(Sink):
    def __init__(self) -> None:
        self.bodies: list[bytes] = []
        self.closed = False
        self._cond = threading.Condition()

    def send(self, body: bytes) -> None:
        with self._cond:
            self.bodies.append(body)
            self._cond.notify_all()

    def close(self) -> None:
        self.closed = True

    @property
    def reports(self) -> list[dict]:
        return [json.loads(b) for b in self.bodies]

    def wait_for(self, count: int, timeout: float = 5.0) -> bool:
        with self._cond:
            return self._cond.wait_for(lambda: len(self.bodies) >= count, timeout)


class FailingSink(Sink):
    def __init__(self) -> None:
        self.attempts = 0

    def send(self, body: bytes) -> None:
        self.attempts += 1
        raise DeliveryError("connection refused")


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for key in list(os.environ):
        if key.startswith("MONIT_"):
            monkeypatch.delenv(key)


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def failing_sink() -> FailingSink:
    return FailingSink()
