"""Field cleaners shared by the entity schemas."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable


def clean_name(value: Any) -> str:
    name = str(value).strip() if value is not None else ""
    if not name:
        raise ValueError("name is required")
    return name


def clean_optional_text(value: Any) -> str | None:
    """Trim text; blank strings are stored as ``None``."""

    if value is None:
        return None
    cleaned = str(value).strip()
    return cleaned or None


def clean_string_list(value: Any, *, unique: bool = False) -> list[str] | None:
    """Normalise photo URIs or tags; an empty result is ``None``."""

    if value is None:
        return None
    if isinstance(value, str):
        raise ValueError("expected a list of strings")
    if not isinstance(value, Iterable):
        raise ValueError("expected a list of strings")
    cleaned: list[str] = []
    for entry in value:
        if entry is None:
            continue
        text = str(entry).strip()
        if not text:
            continue
        if unique and text in cleaned:
            continue
        cleaned.append(text)
    return cleaned or None


def clean_amount(value: Any) -> float | None:
    """Convert user-entered currency values to a non-negative float.

    Accepts numbers and strings such as ``"12.50"``, ``"$12"`` or ``"12,50 €"``.
    """

    if value is None:
        return None
    if isinstance(value, bool):
        raise ValueError("amount must be a number")
    if isinstance(value, (int, float, Decimal)):
        amount = float(value)
    elif isinstance(value, str):
        cleaned = value.strip().replace("$", "").replace("€", "").replace(" ", "")
        if not cleaned:
            return None
        if "," in cleaned and "." not in cleaned:
            cleaned = cleaned.replace(",", ".")
        else:
            cleaned = cleaned.replace(",", "")
        try:
            amount = float(Decimal(cleaned))
        except InvalidOperation as exc:
            raise ValueError(f"invalid amount: {value!r}") from exc
    else:
        raise ValueError("amount must be a number")
    if amount < 0:
        raise ValueError("amount cannot be negative")
    return amount


def clean_date_text(value: Any) -> str | None:
    """Accept ``date``/``datetime`` objects or ISO-8601 strings, keep text."""

    if value is None:
        return None
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    cleaned = str(value).strip()
    if not cleaned:
        return None
    try:
        datetime.fromisoformat(cleaned.replace("Z", "+00:00"))
    except ValueError as exc:
        raise ValueError(f"invalid ISO-8601 date: {cleaned!r}") from exc
    return cleaned
