"""Test request counters under concurrent access."""

import threading

import pytest

from monit.accumulator import Accumulator, Snapshot


def test_counts_and_durations():
    acc = Accumulator()
    acc.record_request(100)
    acc.record_request()
    acc.record_request(250)
    assert acc.peek() == Snapshot(requests=3, total_duration=350)


def test_snapshot_resets():
    acc = Accumulator()
    acc.record_request(10)
    assert acc.snapshot_and_reset() == Snapshot(1, 10)
    assert acc.peek() == Snapshot(0, 0)
    assert acc.snapshot_and_reset() == Snapshot(0, 0)


def test_mean_duration():
    assert Snapshot(3, 600).mean_duration == 200
    assert Snapshot(2, 5).mean_duration == 2
    assert Snapshot(0, 0).mean_duration == 0


def test_concurrent_records_are_not_lost():
    acc = Accumulator()
    threads_n, per_thread = 8, 2000

    def worker(i: int) -> None:
        for n in range(per_thread):
            acc.record_request(i if n % 2 else None)

    threads = [threading.Thread(target=worker, args=(i,)) for i in range(threads_n)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    snapshot = acc.snapshot_and_reset()
    assert snapshot.requests == threads_n * per_thread
    assert snapshot.total_duration == sum(i * (per_thread // 2) for i in range(threads_n))


def test_snapshots_partition_concurrent_records():
    acc = Accumulator()
    done = threading.Event()
    snapshots: list[Snapshot] = []

    def recorder() -> None:
        for _ in range(5000):
            acc.record_request(3)

    def flusher() -> None:
        while not done.is_set():
            snapshots.append(acc.snapshot_and_reset())

    recorders = [threading.Thread(target=recorder) for _ in range(4)]
    flush_thread = threading.Thread(target=flusher)
    flush_thread.start()
    for t in recorders:
        t.start()
    for t in recorders:
        t.join()
    done.set()
    flush_thread.join()
    snapshots.append(acc.snapshot_and_reset())

    assert sum(s.requests for s in snapshots) == 20000
    assert sum(s.total_duration for s in snapshots) == 60000
