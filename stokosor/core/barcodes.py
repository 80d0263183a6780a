"""Barcode helpers for items scanned from retail packaging.

Scanners and product catalogues disagree on small details: a UPC-A code has
12 digits while the same product as EAN-13 has a leading zero, some apps
insert spaces or dashes (``978-2-07-036822-8``), others upper-case letters in
Code 128 labels. Items keep whatever the user stored; lookups compare every
equivalent spelling.
"""

from __future__ import annotations

import re

__all__ = ["normalize_barcode", "barcode_aliases", "is_isbn"]


_HAS_LETTER_RE = re.compile(r"[A-Za-z]")
_NON_DIGIT_RE = re.compile(r"\D")
_SPACES_RE = re.compile(r"\s+")


def _clean(value: str) -> str:
    return _SPACES_RE.sub(" ", value.strip())


def normalize_barcode(raw: str | None) -> str | None:
    """Canonical spelling of a barcode, or ``None`` when blank.

    Numeric codes lose their punctuation and UPC-A (12 digits) becomes EAN-13.
    Alphanumeric codes are trimmed and upper-cased.
    """

    if raw is None:
        return None
    cleaned = _clean(raw)
    if not cleaned:
        return None
    if not _HAS_LETTER_RE.search(cleaned):
        digits = _NON_DIGIT_RE.sub("", cleaned)
        if digits:
            return "0" + digits if len(digits) == 12 else digits
    return cleaned.upper()


def barcode_aliases(raw: str | None) -> list[str]:
    """Every spelling that should match ``raw``, canonical form first."""

    if raw is None:
        return []
    cleaned = _clean(raw)
    if not cleaned:
        return []

    aliases: list[str] = []

    def add(candidate: str | None) -> None:
        if candidate and candidate not in aliases:
            aliases.append(candidate)

    add(normalize_barcode(cleaned))
    if not _HAS_LETTER_RE.search(cleaned):
        digits = _NON_DIGIT_RE.sub("", cleaned)
        add(digits)
        if len(digits) == 13 and digits.startswith("0"):
            add(digits[1:])
    add(cleaned)
    add(cleaned.upper())
    return aliases


def is_isbn(raw: str | None) -> bool:
    """True for EAN-13 book codes (Bookland prefixes 978/979)."""

    code = normalize_barcode(raw)
    return bool(code) and len(code) == 13 and code.isdigit() and code[:3] in {"978", "979"}
