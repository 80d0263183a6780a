"""One object that owns the repositories and keeps their caches in step.

Repository deletes only drop the deleted row from their own cache while the
database cascades much further. ``Inventory`` performs the refetch callers
would otherwise have to remember, and bundles the cache-backed queries used
by the API (paths, search, statistics).
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Optional

from sqlalchemy.orm import sessionmaker

from ..core.categories import Category
from ..core.config import AppSettings, get_settings
from ..core.errors import InventoryValidationError
from ..crud import ContainerRepository, ItemRepository, PlaceRepository, ZoneRepository
from ..schemas.backup import RestoreSummary
from ..schemas.container import ContainerOut
from ..schemas.item import ItemOut, ItemSearchResult
from . import backup, csv_export
from .hierarchy import ContainerHierarchy
from .paths import item_full_path
from .search import search_items
from .stats import inventory_stats

logger = logging.getLogger(__name__)


class Inventory:
    def __init__(self, session_factory: sessionmaker, settings: Optional[AppSettings] = None) -> None:
        self.settings = settings or get_settings()
        self.session_factory = session_factory
        max_depth = self.settings.MAX_CONTAINER_DEPTH
        self.places = PlaceRepository(session_factory)
        self.zones = ZoneRepository(session_factory)
        self.containers = ContainerRepository(session_factory, max_depth=max_depth)
        self.items = ItemRepository(session_factory)
        self.hierarchy = ContainerHierarchy(self.containers, max_depth=max_depth)

    def refresh(self) -> None:
        """Reload all four caches from the database."""

        self.places.fetch_all()
        self.zones.fetch_all()
        self.containers.fetch_all()
        self.items.fetch_all()
        logger.info(
            "Inventory loaded",
            extra={
                "extra_data": {
                    "places": len(self.places.cache),
                    "zones": len(self.zones.cache),
                    "containers": len(self.containers.cache),
                    "items": len(self.items.cache),
                }
            },
        )

    # ---- cascading deletes

    def delete_place(self, place_id: str) -> bool:
        removed = self.places.delete(place_id)
        if removed:
            self.zones.fetch_all()
            self.containers.fetch_all()
            self.items.fetch_all()
        return removed

    def delete_zone(self, zone_id: str) -> bool:
        removed = self.zones.delete(zone_id)
        if removed:
            self.containers.fetch_all()
            self.items.fetch_all()
        return removed

    def delete_container(self, container_id: str) -> bool:
        removed = self.containers.delete(container_id)
        if removed:
            self.containers.fetch_all()
            self.items.fetch_all()
        return removed

    def move_container(self, container_id: str, parent_container_id: str | None) -> ContainerOut | None:
        """Re-parent a container; loops visible in the cache fail without a store round trip."""

        if self.hierarchy.would_create_cycle(container_id, parent_container_id):
            raise InventoryValidationError("a container cannot be moved inside itself or its descendants")
        return self.containers.move(container_id, parent_container_id)

    # ---- cache-backed queries

    def item_path(self, item: ItemOut) -> str:
        return item_full_path(
            item,
            places=self.places.cache.as_mapping(),
            zones=self.zones.cache.as_mapping(),
            containers=self.containers.cache.as_mapping(),
            max_depth=self.settings.MAX_CONTAINER_DEPTH,
        )

    def search(self, query: str | None, category: Category | str | None = None) -> list[ItemSearchResult]:
        return search_items(
            self.items.all(),
            query,
            category,
            limit=self.settings.SEARCH_RESULT_LIMIT,
            path_for=self.item_path,
        )

    def stats(self, today: date | None = None) -> dict[str, Any]:
        return inventory_stats(
            places=self.places.all(),
            zones=self.zones.all(),
            containers=self.containers.all(),
            items=self.items.all(),
            today=today,
            expiring_within_days=self.settings.EXPIRING_SOON_DAYS,
        )

    # ---- backup

    def export_snapshot(self) -> dict[str, Any]:
        return backup.full_snapshot(self.session_factory)

    def export_csv(self) -> str:
        return csv_export.export_items_csv(self.session_factory)

    def restore(self, document: Any) -> RestoreSummary:
        summary = backup.restore_snapshot(self.session_factory, document)
        self.refresh()
        return summary
