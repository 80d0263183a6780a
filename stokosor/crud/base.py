"""Shared repository behaviour: store first, cache second.

Every write goes to SQLite and is committed before the cache is touched, so a
failed statement leaves the cache exactly as it was. Reads such as ``get`` or
``all`` only look at the cache and never hit the database; call one of the
``fetch_*`` methods first.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Generic, Iterator, Mapping, TypeVar

from pydantic import BaseModel, ValidationError
from sqlalchemy import delete, desc, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from ..core.errors import InventoryValidationError, StoreOperationError
from ..core.identity import new_id, now_iso
from ..db.session import transaction
from .cache import EntityCache

logger = logging.getLogger(__name__)

OutT = TypeVar("OutT", bound=BaseModel)
SchemaT = TypeVar("SchemaT", bound=BaseModel)


def validate_payload(schema: type[SchemaT], fields: Any) -> SchemaT:
    """Coerce a mapping (or an existing schema instance) into ``schema``."""

    if isinstance(fields, schema):
        return fields
    if isinstance(fields, BaseModel):
        fields = fields.model_dump(exclude_unset=True)
    if not isinstance(fields, Mapping):
        raise InventoryValidationError(f"expected a mapping of {schema.__name__} fields")
    try:
        return schema.model_validate(dict(fields))
    except ValidationError as exc:
        messages = "; ".join(
            f"{'.'.join(str(part) for part in error['loc']) or 'payload'}: {error['msg']}"
            for error in exc.errors()
        )
        raise InventoryValidationError(messages) from exc


class Repository(Generic[OutT]):
    """CRUD against one table plus the owned cache of its rows."""

    entity_name: str = "entity"
    model: Any = None
    out_schema: type[BaseModel] = BaseModel
    create_schema: type[BaseModel] = BaseModel
    update_schema: type[BaseModel] = BaseModel

    def __init__(self, session_factory: sessionmaker, cache: EntityCache[OutT] | None = None) -> None:
        self.session_factory = session_factory
        self.cache: EntityCache[OutT] = cache if cache is not None else EntityCache()

    # ---- store plumbing

    @contextmanager
    def _store_errors(self, action: str) -> Iterator[None]:
        try:
            yield
        except SQLAlchemyError as exc:
            reason = getattr(exc, "orig", None) or exc
            logger.error("%s %s failed: %s", self.entity_name, action, reason)
            raise StoreOperationError(f"{self.entity_name} {action} failed: {reason}") from exc

    def _to_out(self, row: Any) -> OutT:
        return self.out_schema.model_validate(row, from_attributes=True)  # type: ignore[return-value]

    def _select_rows(self, *criteria: Any) -> list[OutT]:
        stmt = select(self.model).where(*criteria).order_by(desc(self.model.updated_at), desc(self.model.id))
        with self._store_errors("fetch"), transaction(self.session_factory) as db:
            rows = db.execute(stmt).scalars().all()
            return [self._to_out(row) for row in rows]

    def _fetch_scope(self, column: str, value: str) -> list[OutT]:
        fetched = self._select_rows(getattr(self.model, column) == value)
        self.cache.replace_scope(lambda entry: getattr(entry, column) == value, fetched)
        return fetched

    # ---- fetches (store -> cache)

    def fetch_all(self) -> list[OutT]:
        """Load every row, most recently updated first, replacing the cache."""

        fetched = self._select_rows()
        self.cache.replace_all(fetched)
        return fetched

    def fetch_one(self, entity_id: str) -> OutT | None:
        """Load one row by id into the cache; ``None`` when it does not exist."""

        found = self._select_rows(self.model.id == entity_id)
        if not found:
            self.cache.remove(entity_id)
            return None
        self.cache.upsert(found[0])
        return found[0]

    # ---- writes (store, then cache)

    def _check_create(self, payload: Any) -> None:
        """Hook for cross-row checks that must pass before inserting."""

    def _build_row(self, entity_id: str, data: dict[str, Any], now: str) -> Any:
        return self.model(id=entity_id, created_at=now, updated_at=now, **data)

    def create(self, fields: Any) -> OutT:
        payload = validate_payload(self.create_schema, fields)
        self._check_create(payload)
        now = now_iso()
        row = self._build_row(new_id(), payload.model_dump(mode="json"), now)
        with self._store_errors("create"), transaction(self.session_factory) as db:
            db.add(row)
        entity = self._to_out(row)
        self.cache.prepend(entity)
        return entity

    def update(self, entity_id: str, patch: Any) -> OutT | None:
        """Write only the fields present in ``patch`` plus ``updated_at``.

        Returns ``None`` when no row has this id.
        """

        payload = validate_payload(self.update_schema, patch)
        changes = payload.model_dump(mode="json", exclude_unset=True)
        return self._apply_changes(entity_id, changes)

    def _apply_changes(self, entity_id: str, changes: dict[str, Any]) -> OutT | None:
        now = now_iso()
        with self._store_errors("update"), transaction(self.session_factory) as db:
            row = db.get(self.model, entity_id)
            if row is None:
                return None
            for key, value in changes.items():
                setattr(row, key, value)
            row.updated_at = now
            stored = self._to_out(row)
        cached = self.cache.patch(entity_id, {**changes, "updated_at": now})
        return cached if cached is not None else stored

    def delete(self, entity_id: str) -> bool:
        """Remove the row; the database cascades to its dependents.

        Only this entity leaves the cache. Cached descendants stay until the
        caller refetches the affected repositories.
        """

        with self._store_errors("delete"), transaction(self.session_factory) as db:
            result = db.execute(delete(self.model).where(self.model.id == entity_id))
            removed = bool(result.rowcount)
        self.cache.remove(entity_id)
        if removed:
            logger.info("Deleted %s %s", self.entity_name, entity_id)
        return removed

    # ---- cache-only lookups

    def get(self, entity_id: str) -> OutT | None:
        return self.cache.get(entity_id)

    def all(self) -> list[OutT]:
        return self.cache.all()
