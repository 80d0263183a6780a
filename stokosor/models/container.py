from __future__ import annotations

from sqlalchemy import Column, ForeignKey, Index, Text

from ..core.categories import DEFAULT_CONTAINER_TYPE
from ..db.session import Base


class Container(Base):
    """Something that holds items: a drawer, a box, a bag inside a box.

    ``parent_container_id`` is NULL for containers sitting directly in their
    zone. A child always lives in the same zone as its parent; the schema does
    not check this, the repository does.
    """

    __tablename__ = "containers"
    __table_args__ = (
        Index("idx_containers_zone", "zone_id"),
        Index("idx_containers_parent", "parent_container_id"),
        Index("idx_containers_qr", "qr_code"),
    )

    id = Column(Text, primary_key=True)
    zone_id = Column(Text, ForeignKey("zones.id", ondelete="CASCADE"), nullable=False)
    parent_container_id = Column(Text, ForeignKey("containers.id", ondelete="CASCADE"), nullable=True)
    name = Column(Text, nullable=False)
    type = Column(Text, nullable=False, default=DEFAULT_CONTAINER_TYPE.value, server_default=DEFAULT_CONTAINER_TYPE.value)
    qr_code = Column(Text, nullable=False, unique=True)
    photo = Column(Text, nullable=True)
    created_at = Column(Text, nullable=False)
    updated_at = Column(Text, nullable=False)


__all__ = ["Container"]
