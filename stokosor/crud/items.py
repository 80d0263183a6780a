from __future__ import annotations

from ..core.barcodes import barcode_aliases
from ..models.item import Item
from ..schemas.item import ItemCreate, ItemOut, ItemUpdate
from .base import Repository


class ItemRepository(Repository[ItemOut]):
    """Items are leaves: deleting one never cascades further.

    Photos and tags are stored as JSON text and come back as lists, or
    ``None`` when there are none.
    """

    entity_name = "item"
    model = Item
    out_schema = ItemOut
    create_schema = ItemCreate
    update_schema = ItemUpdate

    def fetch_by_container(self, container_id: str) -> list[ItemOut]:
        return self._fetch_scope("container_id", container_id)

    def by_container(self, container_id: str) -> list[ItemOut]:
        return self.cache.filter(lambda item: item.container_id == container_id)

    def by_barcode(self, code: str | None) -> list[ItemOut]:
        """Cached items whose barcode matches ``code`` in any equivalent spelling."""

        aliases = set(barcode_aliases(code))
        if not aliases:
            return []
        return self.cache.filter(lambda item: bool(item.barcode) and item.barcode in aliases)
