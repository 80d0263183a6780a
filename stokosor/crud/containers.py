from __future__ import annotations

from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session, sessionmaker

from ..core.errors import InventoryValidationError
from ..core.identity import parse_qr_code, qr_code_for
from ..db.session import transaction
from ..models.container import Container
from ..schemas.container import ContainerCreate, ContainerMove, ContainerOut, ContainerUpdate
from .base import Repository, validate_payload
from .cache import EntityCache

DEFAULT_MAX_DEPTH = 64


class ContainerRepository(Repository[ContainerOut]):
    """Containers form one forest per zone.

    Root containers have no parent; children must live in their parent's
    zone. The QR code is derived from the id at creation time and never
    changes, which makes it safe to print on a label.
    """

    entity_name = "container"
    model = Container
    out_schema = ContainerOut
    create_schema = ContainerCreate
    update_schema = ContainerUpdate

    def __init__(
        self,
        session_factory: sessionmaker,
        cache: EntityCache[ContainerOut] | None = None,
        *,
        max_depth: int = DEFAULT_MAX_DEPTH,
    ) -> None:
        super().__init__(session_factory, cache)
        self.max_depth = max_depth

    def _chain_length(self, db: Session, parent: Container, moving_id: str | None = None) -> int:
        """Containers from ``parent`` up to its root, ``parent`` included.

        Meeting ``moving_id`` on the way means the move would close a loop.
        """

        seen: set[str] = set()
        cursor: Container | None = parent
        while cursor is not None:
            if moving_id is not None and cursor.id == moving_id:
                raise InventoryValidationError("a container cannot be moved inside itself or its descendants")
            if cursor.id in seen:
                raise InventoryValidationError("container parent links are already cyclic")
            if len(seen) >= self.max_depth:
                break
            seen.add(cursor.id)
            parent_id = cursor.parent_container_id
            cursor = db.get(Container, parent_id) if parent_id else None
        return len(seen) + (1 if cursor is not None else 0)

    def _subtree_height(self, db: Session, container_id: str) -> int:
        """Levels below and including ``container_id``; a leaf has height 1."""

        height = 0
        seen: set[str] = set()
        level = [container_id]
        while level and height <= self.max_depth:
            height += 1
            seen.update(level)
            rows = db.execute(select(Container.id).where(Container.parent_container_id.in_(level))).scalars()
            level = [child_id for child_id in rows if child_id not in seen]
        return height

    def _check_depth(self, levels: int) -> None:
        if levels > self.max_depth:
            raise InventoryValidationError(f"containers cannot be nested more than {self.max_depth} levels deep")

    def _check_create(self, payload: ContainerCreate) -> None:
        if not payload.parent_container_id:
            return
        with self._store_errors("create"), transaction(self.session_factory) as db:
            parent = db.get(Container, payload.parent_container_id)
            if parent is None:
                raise InventoryValidationError(f"parent container {payload.parent_container_id} not found")
            if parent.zone_id != payload.zone_id:
                raise InventoryValidationError("a child container must be in the same zone as its parent")
            self._check_depth(self._chain_length(db, parent) + 1)

    def _build_row(self, entity_id: str, data: dict[str, Any], now: str) -> Container:
        return Container(
            id=entity_id,
            qr_code=qr_code_for(entity_id),
            created_at=now,
            updated_at=now,
            **data,
        )

    def fetch_by_zone(self, zone_id: str) -> list[ContainerOut]:
        """Refresh every container (roots and nested) of one zone."""

        return self._fetch_scope("zone_id", zone_id)

    def by_zone(self, zone_id: str) -> list[ContainerOut]:
        return self.cache.filter(lambda container: container.zone_id == zone_id)

    def by_qr_code(self, code: str | None) -> ContainerOut | None:
        """Resolve a scanned label to a cached container.

        Codes printed by other applications resolve to ``None``.
        """

        container_id = parse_qr_code(code)
        if container_id is None:
            return None
        wanted = qr_code_for(container_id)
        return self.cache.find(lambda container: container.qr_code == wanted)

    def move(self, container_id: str, parent_container_id: str | None) -> ContainerOut | None:
        """Re-parent a container inside its zone; ``None`` makes it a root.

        The moved subtree keeps its shape, so the new parent's chain plus the
        subtree height must stay within ``max_depth``. Returns ``None`` when
        the container does not exist.
        """

        payload = validate_payload(ContainerMove, {"parent_container_id": parent_container_id})
        target = payload.parent_container_id
        with self._store_errors("move"), transaction(self.session_factory) as db:
            row = db.get(Container, container_id)
            if row is None:
                return None
            if target is not None:
                parent = db.get(Container, target)
                if parent is None:
                    raise InventoryValidationError(f"parent container {target} not found")
                if parent.zone_id != row.zone_id:
                    raise InventoryValidationError("containers can only be moved within their zone")
                above = self._chain_length(db, parent, moving_id=container_id)
                self._check_depth(above + self._subtree_height(db, container_id))
        return self._apply_changes(container_id, {"parent_container_id": target})
