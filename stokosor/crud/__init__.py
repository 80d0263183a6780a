from __future__ import annotations

from .cache import EntityCache
from .containers import ContainerRepository
from .items import ItemRepository
from .places import PlaceRepository
from .zones import ZoneRepository

__all__ = [
    "EntityCache",
    "PlaceRepository",
    "ZoneRepository",
    "ContainerRepository",
    "ItemRepository",
]
