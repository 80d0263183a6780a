"""In-memory cache owned by each repository.

Screens fetch narrow slices ("zones of this place") but also ask global
questions ("every zone"). The cache therefore merges fetch results by scope:
a scoped fetch replaces only the cached entries of that scope, a full fetch
replaces everything. Entries are immutable pydantic models; updates swap in a
patched copy.
"""

from __future__ import annotations

import threading
from typing import Any, Callable, Generic, Iterable, Mapping, Protocol, TypeVar


class _HasId(Protocol):
    id: str

    def model_copy(self, *, update: Mapping[str, Any] | None = None, deep: bool = False) -> Any: ...


T = TypeVar("T", bound=_HasId)


class EntityCache(Generic[T]):
    def __init__(self, entries: Iterable[T] = ()) -> None:
        self._entries: list[T] = list(entries)
        # FastAPI runs sync endpoints in a worker pool; one lock per cache is enough.
        self._lock = threading.RLock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def all(self) -> list[T]:
        with self._lock:
            return list(self._entries)

    def as_mapping(self) -> dict[str, T]:
        with self._lock:
            return {entry.id: entry for entry in self._entries}

    def get(self, entity_id: str) -> T | None:
        return self.find(lambda entry: entry.id == entity_id)

    def find(self, predicate: Callable[[T], bool]) -> T | None:
        with self._lock:
            for entry in self._entries:
                if predicate(entry):
                    return entry
        return None

    def filter(self, predicate: Callable[[T], bool]) -> list[T]:
        with self._lock:
            return [entry for entry in self._entries if predicate(entry)]

    def prepend(self, entity: T) -> None:
        with self._lock:
            self._entries = [entity] + [entry for entry in self._entries if entry.id != entity.id]

    def upsert(self, entity: T) -> None:
        """Replace the entry with the same id in place, or prepend it."""

        with self._lock:
            for index, entry in enumerate(self._entries):
                if entry.id == entity.id:
                    self._entries[index] = entity
                    return
            self._entries.insert(0, entity)

    def replace_all(self, entities: Iterable[T]) -> None:
        with self._lock:
            self._entries = list(entities)

    def replace_scope(self, in_scope: Callable[[T], bool], entities: Iterable[T]) -> None:
        """Swap the cached members of one scope for freshly fetched rows.

        Entries outside the scope survive untouched. A fetched row that was
        cached under another scope (it moved) is not duplicated.
        """

        fetched = list(entities)
        fetched_ids = {entity.id for entity in fetched}
        with self._lock:
            others = [
                entry for entry in self._entries
                if not in_scope(entry) and entry.id not in fetched_ids
            ]
            self._entries = others + fetched

    def patch(self, entity_id: str, changes: Mapping[str, Any]) -> T | None:
        with self._lock:
            for index, entry in enumerate(self._entries):
                if entry.id == entity_id:
                    updated = entry.model_copy(update=dict(changes))
                    self._entries[index] = updated
                    return updated
        return None

    def remove(self, entity_id: str) -> bool:
        with self._lock:
            before = len(self._entries)
            self._entries = [entry for entry in self._entries if entry.id != entity_id]
            return len(self._entries) != before

    def clear(self) -> None:
        with self._lock:
            self._entries = []
