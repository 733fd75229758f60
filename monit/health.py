"""Process health readings."""

from __future__ import annotations

import abc

import psutil


class HealthProvider(abc.ABC):
    @abc.abstractmethod
    def memory_bytes(self) -> int:
        """Current memory in use by this process, in bytes."""


class PsutilHealthProvider(HealthProvider):
    def __init__(self, pid: int | None = None) -> None:
        self._process = psutil.Process(pid)

    def memory_bytes(self) -> int:
        return self._process.memory_info().rss


class StaticHealthProvider(HealthProvider):
    """Fixed reading, for tests and hosts where process stats are unavailable."""

    def __init__(self, value: int = 0) -> None:
        self._value = value

    def memory_bytes(self) -> int:
        return self._value
