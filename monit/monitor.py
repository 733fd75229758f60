"""Background reporting loop: snapshot counters, merge health metrics, deliver."""

from __future__ import annotations

import json
import logging
import threading
import time
from enum import Enum
from typing import Any

from monit.accumulator import Accumulator
from monit.config import ReportConfig
from monit.errors import DeliveryError, SerializationError
from monit.health import HealthProvider, PsutilHealthProvider
from monit.sink import HttpSink, Sink

logger = logging.getLogger(__name__)

BYTES_PER_MB = 1_000_000


class MonitorState(str, Enum):
    IDLE = "idle"
    WAITING = "waiting"
    FLUSHING = "flushing"
    STOPPED = "stopped"


def encode_report(payload: dict[str, Any]) -> bytes:
    try:
        return json.dumps(payload).encode("utf-8")
    except (TypeError, ValueError) as e:
        raise SerializationError(f"Report is not JSON serializable: {e}") from e


class Monitor:
    """Reports process metrics to ``config.host`` every ``config.interval`` seconds.

    Call ``record_request`` once per handled request from any thread. ``start``
    runs the reporting loop on a daemon thread and may be called at most once
    per instance; ``stop`` ends it at the next wait boundary.

    Delivery is best-effort: counters are reset before each send, and a report
    that fails to serialize or deliver is logged and dropped.
    """

    def __init__(
        self,
        config: ReportConfig,
        sink: Sink | None = None,
        health: HealthProvider | None = None,
    ) -> None:
        self._config = config
        self._owns_sink = sink is None
        self._sink = sink or HttpSink(config.host, verify_tls=config.verify_tls, timeout=config.timeout)
        self._health = health or PsutilHealthProvider()
        self._accumulator = Accumulator()
        self._started_at = time.monotonic()
        self._stop_event = threading.Event()
        self._lock = threading.Lock()
        self._thread: threading.Thread | None = None
        self._state = MonitorState.IDLE

    @classmethod
    def from_settings(
        cls,
        sink: Sink | None = None,
        health: HealthProvider | None = None,
        **overrides: Any,
    ) -> Monitor:
        """Resolve config from ``overrides`` + MONIT_* env vars and build a Monitor."""
        return cls(ReportConfig.resolve(**overrides), sink=sink, health=health)

    @property
    def config(self) -> ReportConfig:
        return self._config

    @property
    def accumulator(self) -> Accumulator:
        return self._accumulator

    @property
    def state(self) -> MonitorState:
        return self._state

    def record_request(self, duration: int | None = None) -> None:
        self._accumulator.record_request(duration)

    # -- Lifecycle --

    def start(self) -> None:
        with self._lock:
            if self._thread is not None:
                raise RuntimeError("Monitor.start() may only be called once per instance")
            if self._stop_event.is_set():
                raise RuntimeError("Monitor has been stopped")
            self._thread = threading.Thread(target=self._run, name="monit-reporter", daemon=True)
            self._state = MonitorState.WAITING
            self._thread.start()
        logger.info("Reporting to %s every %ds", self._config.host, self._config.interval)

    def stop(self, wait: bool = False, timeout: float | None = None) -> None:
        """Stop scheduling reports. An in-flight delivery is allowed to finish."""
        with self._lock:
            first = not self._stop_event.is_set()
            self._stop_event.set()
            thread = self._thread
            if first and thread is None:
                self._state = MonitorState.STOPPED
                self._close_sink()
        if wait:
            self.join(timeout)

    def join(self, timeout: float | None = None) -> None:
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)

    def __enter__(self) -> Monitor:
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop(wait=True)

    def _run(self) -> None:
        try:
            while not self._stop_event.wait(self._config.interval):
                self._state = MonitorState.FLUSHING
                try:
                    self.flush()
                except Exception:
                    logger.exception("Unexpected error during flush")
                if not self._stop_event.is_set():
                    self._state = MonitorState.WAITING
        finally:
            self._state = MonitorState.STOPPED
            self._close_sink()
            logger.info("Reporting loop stopped")

    def _close_sink(self) -> None:
        if self._owns_sink:
            self._sink.close()

    # -- Reporting --

    def flush(self) -> dict[str, Any] | None:
        """Build and deliver one report. Returns the payload, or None if it was dropped."""
        try:
            memory = self._health.memory_bytes()
        except Exception:
            logger.exception("Health query failed; dropping report")
            self._accumulator.snapshot_and_reset()
            return None

        snapshot = self._accumulator.snapshot_and_reset()

        # Computed fields win over base fields of the same name
        payload = dict(self._config.base)
        payload.update(
            app_used_memory=memory / BYTES_PER_MB,
            uptime=int(time.monotonic() - self._started_at),
            requests=snapshot.requests,
            response_times=snapshot.mean_duration,
        )

        try:
            body = encode_report(payload)
        except SerializationError as e:
            logger.warning("Dropping report: %s", e)
            return None

        try:
            self._sink.send(body)
        except DeliveryError as e:
            logger.warning("Dropping report (%d requests): %s", snapshot.requests, e)
            return None

        logger.debug("Delivered report: requests=%d response_times=%d", snapshot.requests, snapshot.mean_duration)
        return payload
