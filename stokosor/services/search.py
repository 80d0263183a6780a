from __future__ import annotations

from typing import Callable, Iterable

from ..core.categories import Category
from ..core.errors import InventoryValidationError
from ..schemas.item import ItemOut, ItemSearchResult

DEFAULT_LIMIT = 50


def _matches(item: ItemOut, query: str) -> bool:
    fields = (item.name, item.notes, item.barcode, item.brand, item.model)
    if any(value and query in value.lower() for value in fields):
        return True
    return any(query in tag.lower() for tag in item.tags or ())


def search_items(
    items: Iterable[ItemOut],
    query: str | None,
    category: Category | str | None = None,
    *,
    limit: int = DEFAULT_LIMIT,
    path_for: Callable[[ItemOut], str] | None = None,
) -> list[ItemSearchResult]:
    """Linear, case-insensitive substring search over cached items.

    Matches name, notes, tags, barcode, brand and model. With only a category
    every item of that category is returned; with neither, nothing is.
    """

    needle = (query or "").strip().lower()
    try:
        wanted = Category(category).value if category else None
    except ValueError as exc:
        raise InventoryValidationError(f"unknown category: {category!r}") from exc
    if not needle and not wanted:
        return []

    results: list[ItemSearchResult] = []
    for item in items:
        if wanted and item.category != wanted:
            continue
        if needle and not _matches(item, needle):
            continue
        path = path_for(item) if path_for else ""
        results.append(ItemSearchResult(**item.model_dump(), path=path))
        if len(results) >= limit:
            break
    return results
