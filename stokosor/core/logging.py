"""One-line JSON logs for the API process.

Every record carries the service name and, inside a request, the correlation
id set by ``RequestIdMiddleware``. Structured fields travel in
``extra={"extra_data": {...}}`` and are merged into the top-level object.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any, Mapping

from ..middlewares import request_id_ctx_var

# Uvicorn's own access log would duplicate ``request.completed``.
SILENCED_LOGGERS = ("uvicorn.access",)
FORWARDED_LOGGERS = ("uvicorn", "uvicorn.error")


class JsonLogFormatter(logging.Formatter):
    def __init__(self, service: str = "stokosor") -> None:
        super().__init__()
        self.service = service

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        payload: dict[str, Any] = {
            "ts": created.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            "level": record.levelname,
            "service": self.service,
            "logger": record.name,
            "event": record.getMessage(),
        }
        request_id = request_id_ctx_var.get()
        if request_id:
            payload["request_id"] = request_id
        fields = getattr(record, "extra_data", None)
        if isinstance(fields, Mapping):
            # Reserved keys are never overwritten.
            payload.update({key: value for key, value in fields.items() if key not in payload})
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, separators=(",", ":"), default=str)


def setup_logging(level: str | int = logging.INFO, *, service: str = "stokosor") -> None:
    handler = logging.StreamHandler()
    handler.setFormatter(JsonLogFormatter(service))
    logging.root.handlers = [handler]
    logging.root.setLevel(level)
    for name in FORWARDED_LOGGERS:
        forwarded = logging.getLogger(name)
        forwarded.handlers = []
        forwarded.propagate = True
    for name in SILENCED_LOGGERS:
        logging.getLogger(name).disabled = True
