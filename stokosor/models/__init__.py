"""Importing this package registers every table with ``Base.metadata``."""

from __future__ import annotations

from .container import Container
from .item import Item
from .place import Place
from .zone import Zone

__all__ = ["Place", "Zone", "Container", "Item"]
