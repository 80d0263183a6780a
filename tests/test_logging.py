import json
import logging

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from stokosor.core.logging import JsonLogFormatter, setup_logging
from stokosor.middlewares import RequestIdMiddleware, request_id_ctx_var


def _record(message, **extra):
    record = logging.LogRecord("stokosor.test", logging.INFO, __file__, 1, message, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_formatter_emits_service_request_id_and_fields():
    formatter = JsonLogFormatter(service="Stokosor")
    token = request_id_ctx_var.set("req-1")
    try:
        line = formatter.format(_record("item.created", extra_data={"item_id": "x1", "event": "spoofed"}))
    finally:
        request_id_ctx_var.reset(token)

    payload = json.loads(line)
    assert payload["service"] == "Stokosor"
    assert payload["request_id"] == "req-1"
    assert payload["event"] == "item.created"
    assert payload["item_id"] == "x1"
    assert payload["ts"].endswith("Z")


def test_formatter_omits_request_id_outside_requests():
    payload = json.loads(JsonLogFormatter().format(_record("Inventory loaded")))

    assert "request_id" not in payload
    assert payload["service"] == "stokosor"


def test_setup_logging_silences_uvicorn_access_log():
    root_handlers = logging.root.handlers[:]
    root_level = logging.root.level
    access = logging.getLogger("uvicorn.access")
    try:
        setup_logging("DEBUG", service="Stokosor")

        assert isinstance(logging.root.handlers[0].formatter, JsonLogFormatter)
        assert logging.root.level == logging.DEBUG
        assert access.disabled
        assert logging.getLogger("uvicorn.error").propagate
    finally:
        logging.root.handlers = root_handlers
        logging.root.setLevel(root_level)
        access.disabled = False


@pytest.fixture()
def app():
    app = FastAPI()
    app.add_middleware(RequestIdMiddleware)

    @app.get("/health")
    async def health():
        return {"ok": True}

    @app.get("/ok")
    async def ok():
        return {"request_id": request_id_ctx_var.get()}

    @app.get("/boom")
    async def boom():
        raise RuntimeError("shelf collapsed")

    return app


def _request_records(caplog):
    return [record for record in caplog.records if record.name == "stokosor.request"]


def test_middleware_reuses_client_id_and_logs_completion(app, caplog):
    client = TestClient(app)

    with caplog.at_level(logging.INFO, logger="stokosor.request"):
        response = client.get("/ok", headers={"X-Request-ID": "abc-123"})

    assert response.headers["X-Request-ID"] == "abc-123"
    assert response.json() == {"request_id": "abc-123"}
    [record] = _request_records(caplog)
    assert record.getMessage() == "request.completed"
    assert record.levelno == logging.INFO
    assert record.extra_data["path"] == "/ok"
    assert record.extra_data["status"] == 200


def test_middleware_replaces_oversized_ids_and_skips_quiet_paths(app, caplog):
    client = TestClient(app)

    with caplog.at_level(logging.INFO, logger="stokosor.request"):
        response = client.get("/health", headers={"X-Request-ID": "x" * 500})

    assert len(response.headers["X-Request-ID"]) == 36
    assert _request_records(caplog) == []


def test_middleware_logs_failures_at_error_level(app, caplog):
    client = TestClient(app, raise_server_exceptions=False)

    with caplog.at_level(logging.INFO, logger="stokosor.request"):
        missing = client.get("/nope")
        failed = client.get("/boom")

    assert missing.status_code == 404
    assert failed.status_code == 500
    not_found, crashed = _request_records(caplog)
    assert not_found.levelno == logging.WARNING
    assert crashed.getMessage() == "request.failed"
    assert crashed.levelno == logging.ERROR
    assert crashed.exc_info[0] is RuntimeError
