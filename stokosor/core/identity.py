from __future__ import annotations

from datetime import datetime, timezone
from uuid import UUID, uuid4

QR_CODE_PREFIX = "STOKOSOR:"


def new_id() -> str:
    """Random (version 4) UUID in canonical hyphenated form."""

    return str(uuid4())


def now_iso() -> str:
    """Current UTC time as ``2024-05-01T09:00:00.123Z``; sorts lexically."""

    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def qr_code_for(container_id: str) -> str:
    return f"{QR_CODE_PREFIX}{container_id}"


def parse_qr_code(raw: str | None) -> str | None:
    """Return the container id carried by a scanned code, or ``None``.

    Codes printed by other applications are ignored rather than rejected so a
    scanner screen can keep scanning.
    """

    if not raw:
        return None
    cleaned = raw.strip()
    if not cleaned.startswith(QR_CODE_PREFIX):
        return None
    candidate = cleaned[len(QR_CODE_PREFIX):]
    try:
        UUID(candidate)
    except ValueError:
        return None
    return candidate
