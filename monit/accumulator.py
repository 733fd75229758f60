"""In-process request counters for one reporting interval."""

from __future__ import annotations

import threading
from dataclasses import dataclass


@dataclass(frozen=True)
class Snapshot:
    requests: int = 0
    total_duration: int = 0  # microseconds

    @property
    def mean_duration(self) -> int:
        if not self.requests:
            return 0
        return self.total_duration // self.requests


class Accumulator:
    """Thread-safe request count and cumulative duration.

    Every read-modify-write happens under a single lock, so concurrent
    ``record_request`` calls never lose updates and ``snapshot_and_reset``
    hands each observation to exactly one snapshot.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._requests = 0
        self._total_duration = 0

    def record_request(self, duration: int | None = None) -> None:
        """Count one request, optionally adding its duration in microseconds."""
        with self._lock:
            self._requests += 1
            if duration:
                self._total_duration += duration

    def snapshot_and_reset(self) -> Snapshot:
        with self._lock:
            snapshot = Snapshot(self._requests, self._total_duration)
            self._requests = 0
            self._total_duration = 0
        return snapshot

    def peek(self) -> Snapshot:
        with self._lock:
            return Snapshot(self._requests, self._total_duration)
