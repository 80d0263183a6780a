from __future__ import annotations

import hmac

from fastapi import Header, HTTPException, status

from ..core.config import get_settings


async def require_api_key(x_api_key: str | None = Header(default=None, alias="X-API-Key")) -> None:
    """Reject requests without the configured key; no key configured means open."""

    expected = get_settings().API_KEY
    if not expected:
        return
    provided = (x_api_key or "").strip()
    if not provided or not hmac.compare_digest(expected, provided):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid API key")
