"""Places: the root of the storage hierarchy (a house, a garage, a cellar)."""

from __future__ import annotations

from sqlalchemy import Column, Text

from ..db.session import Base


class Place(Base):
    __tablename__ = "places"

    id = Column(Text, primary_key=True)
    name = Column(Text, nullable=False)
    address = Column(Text, nullable=True)
    photo = Column(Text, nullable=True)
    created_at = Column(Text, nullable=False)
    updated_at = Column(Text, nullable=False)


__all__ = ["Place"]
