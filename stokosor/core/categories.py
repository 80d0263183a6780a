"""Closed vocabularies for item categories and container kinds.

Icons, labels and per-category form fields belong to the UI and are not kept
here; the core only needs to know which values are legal.
"""

from __future__ import annotations

from enum import Enum

__all__ = ["Category", "ContainerType", "DEFAULT_CONTAINER_TYPE"]


class Category(str, Enum):
    ELECTRONICS = "electronics"
    APPLIANCES = "appliances"
    FURNITURE = "furniture"
    CLOTHING = "clothing"
    BOOKS = "books"
    DOCUMENTS = "documents"
    FOOD = "food"
    HOUSEHOLD = "household"
    TOOLS = "tools"
    LEISURE = "leisure"
    DECORATION = "decoration"
    OTHER = "other"


class ContainerType(str, Enum):
    FURNITURE = "furniture"
    DRAWER = "drawer"
    SHELF = "shelf"
    CABINET = "cabinet"
    BOX = "box"
    BAG = "bag"
    BASKET = "basket"
    BIN = "bin"
    FOLDER = "folder"
    OTHER = "other"


DEFAULT_CONTAINER_TYPE = ContainerType.BOX
