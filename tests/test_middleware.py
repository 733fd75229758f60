"""Test FastAPI request instrumentation."""

from fastapi import FastAPI
from fastapi.testclient import TestClient

from monit.config import ReportConfig
from monit.health import StaticHealthProvider
from monit.middleware import instrument
from monit.monitor import Monitor, MonitorState


def _app(sink, manage_lifecycle: bool = False) -> tuple[FastAPI, Monitor]:
    config = ReportConfig.resolve(host="https://metrics.example.com/", interval=60)
    monitor = Monitor(config, sink=sink, health=StaticHealthProvider())
    app = FastAPI()

    @app.get("/ping")
    async def ping():
        return {"ok": True}

    @app.get("/boom")
    async def boom():
        raise RuntimeError("handler failed")

    instrument(app, monitor, manage_lifecycle=manage_lifecycle)
    return app, monitor


def test_requests_are_recorded(sink):
    app, monitor = _app(sink)
    client = TestClient(app)
    for _ in range(3):
        assert client.get("/ping").status_code == 200

    snapshot = monitor.accumulator.peek()
    assert snapshot.requests == 3
    assert snapshot.total_duration >= 0


def test_failed_requests_are_recorded(sink):
    app, monitor = _app(sink)
    client = TestClient(app, raise_server_exceptions=False)
    assert client.get("/boom").status_code == 500
    assert monitor.accumulator.peek().requests == 1


def test_monitor_follows_app_lifecycle(sink):
    app, monitor = _app(sink, manage_lifecycle=True)
    with TestClient(app) as client:
        assert monitor.state == MonitorState.WAITING
        client.get("/ping")
    monitor.join(timeout=5)
    assert monitor.state == MonitorState.STOPPED


def test_second_app_startup_does_not_restart_monitor(sink):
    app, monitor = _app(sink, manage_lifecycle=True)
    with TestClient(app):
        pass
    monitor.join(timeout=5)

    with TestClient(app) as client:
        assert client.get("/ping").status_code == 200
    assert monitor.state == MonitorState.STOPPED
    assert monitor.accumulator.peek().requests == 1
