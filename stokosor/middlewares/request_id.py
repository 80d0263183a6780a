from __future__ import annotations

import logging
import time
from contextvars import ContextVar
from typing import Iterable
from uuid import uuid4

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

request_id_ctx_var: ContextVar[str | None] = ContextVar("request_id", default=None)
logger = logging.getLogger("stokosor.request")

# Logged only when they fail.
QUIET_PATHS = ("/health", "/metrics")
MAX_REQUEST_ID_LENGTH = 128


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Tag each request with a correlation id and log one line when it ends.

    A client-supplied ``X-Request-ID`` is reused when it is short enough to be
    an id; otherwise a fresh one is generated. 5xx responses and unhandled
    exceptions log at error level, 4xx at warning.
    """

    def __init__(
        self,
        app,
        header_name: str = "X-Request-ID",
        quiet_paths: Iterable[str] = QUIET_PATHS,
    ) -> None:  # type: ignore[override]
        super().__init__(app)
        self.header_name = header_name
        self.quiet_paths = frozenset(quiet_paths)

    def _incoming_id(self, request: Request) -> str:
        supplied = (request.headers.get(self.header_name) or "").strip()
        if supplied and len(supplied) <= MAX_REQUEST_ID_LENGTH:
            return supplied
        return str(uuid4())

    def _log(self, request: Request, status: int, duration_ms: float, exc: BaseException | None = None) -> None:
        if request.url.path in self.quiet_paths and exc is None and status < 400:
            return
        if exc is not None or status >= 500:
            level = logging.ERROR
        elif status >= 400:
            level = logging.WARNING
        else:
            level = logging.INFO
        fields = {
            "method": request.method,
            "path": request.url.path,
            "status": status,
            "duration_ms": round(duration_ms, 2),
        }
        event = "request.failed" if exc is not None else "request.completed"
        logger.log(level, event, exc_info=exc, extra={"extra_data": fields})

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = self._incoming_id(request)
        token = request_id_ctx_var.set(request_id)
        request.state.request_id = request_id
        start = time.perf_counter()
        try:
            try:
                response = await call_next(request)
            except Exception as exc:
                self._log(request, 500, (time.perf_counter() - start) * 1000, exc)
                raise
            duration_ms = (time.perf_counter() - start) * 1000
            response.headers[self.header_name] = request_id
            response.headers.setdefault("X-Response-Time", f"{duration_ms:.2f}ms")
            self._log(request, response.status_code, duration_ms)
            return response
        finally:
            request_id_ctx_var.reset(token)
