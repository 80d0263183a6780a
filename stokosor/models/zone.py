from __future__ import annotations

from sqlalchemy import Column, ForeignKey, Index, Text

from ..db.session import Base


class Zone(Base):
    """A named area inside a place, typically a room."""

    __tablename__ = "zones"
    __table_args__ = (Index("idx_zones_place", "place_id"),)

    id = Column(Text, primary_key=True)
    place_id = Column(Text, ForeignKey("places.id", ondelete="CASCADE"), nullable=False)
    name = Column(Text, nullable=False)
    icon = Column(Text, nullable=True)
    created_at = Column(Text, nullable=False)
    updated_at = Column(Text, nullable=False)


__all__ = ["Zone"]
