from __future__ import annotations

from .request_id import RequestIdMiddleware, request_id_ctx_var

__all__ = [
    "RequestIdMiddleware",
    "request_id_ctx_var",
]
