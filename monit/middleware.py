"""FastAPI integration — count and time every handled HTTP request."""

from __future__ import annotations

import logging
import time
from typing import Awaitable, Callable

from fastapi import FastAPI, Request, Response

from monit.monitor import Monitor, MonitorState

logger = logging.getLogger(__name__)


def instrument(app: FastAPI, monitor: Monitor, manage_lifecycle: bool = True) -> FastAPI:
    """Record each request on ``monitor``; optionally start/stop it with the app.

    A monitor runs once: if the app starts again after shutdown, the stopped
    monitor is left as is and requests are still counted but no longer reported.
    """

    @app.middleware("http")
    async def record_request(request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
        started = time.perf_counter()
        try:
            return await call_next(request)
        finally:
            monitor.record_request(int((time.perf_counter() - started) * 1_000_000))

    if manage_lifecycle:

        @app.on_event("startup")
        async def start_monitor():
            if monitor.state == MonitorState.IDLE:
                monitor.start()
            else:
                logger.warning("Monitor already %s; not restarting", monitor.state.value)

        @app.on_event("shutdown")
        async def stop_monitor():
            monitor.stop()
            logger.info("Monitor stopped with app shutdown")

    return app
