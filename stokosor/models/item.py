from __future__ import annotations

import json
from typing import Iterable

from sqlalchemy import Column, Float, ForeignKey, Index, Text

from ..db.session import Base


def pack_strings(values: Iterable[str] | None) -> str | None:
    """Serialise a list of strings for a TEXT column; empty lists become NULL."""

    cleaned = [str(value) for value in (values or [])]
    if not cleaned:
        return None
    return json.dumps(cleaned, ensure_ascii=False)


def unpack_strings(raw: str | None) -> list[str] | None:
    """Inverse of ``pack_strings``; unreadable or empty blobs read as ``None``."""

    if not raw:
        return None
    try:
        decoded = json.loads(raw)
    except (TypeError, json.JSONDecodeError):
        return None
    if not isinstance(decoded, list):
        return None
    values = [str(value) for value in decoded if value is not None]
    return values or None


class Item(Base):
    """A tracked object stored in exactly one container."""

    __tablename__ = "items"
    __table_args__ = (
        Index("idx_items_container", "container_id"),
        Index("idx_items_category", "category"),
        Index("idx_items_expiration", "expiration_date"),
    )

    id = Column(Text, primary_key=True)
    container_id = Column(Text, ForeignKey("containers.id", ondelete="CASCADE"), nullable=False)
    name = Column(Text, nullable=False)
    photos_blob = Column("photos", Text, nullable=True)
    category = Column(Text, nullable=False)
    barcode = Column(Text, nullable=True)
    brand = Column(Text, nullable=True)
    model = Column(Text, nullable=True)
    serial_number = Column(Text, nullable=True)
    purchase_price = Column(Float, nullable=True)
    estimated_value = Column(Float, nullable=True)
    purchase_date = Column(Text, nullable=True)
    expiration_date = Column(Text, nullable=True)
    warranty_date = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)
    tags_blob = Column("tags", Text, nullable=True)
    created_at = Column(Text, nullable=False)
    updated_at = Column(Text, nullable=False)

    @property
    def photos(self) -> list[str] | None:
        return unpack_strings(self.photos_blob)

    @photos.setter
    def photos(self, value: Iterable[str] | None) -> None:
        self.photos_blob = pack_strings(value)

    @property
    def tags(self) -> list[str] | None:
        return unpack_strings(self.tags_blob)

    @tags.setter
    def tags(self, value: Iterable[str] | None) -> None:
        self.tags_blob = pack_strings(value)


__all__ = ["Item", "pack_strings", "unpack_strings"]
