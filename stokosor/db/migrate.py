"""Versioned, idempotent schema migrations for the SQLite store.

The schema version lives in SQLite's ``PRAGMA user_version``. Three starting
points are handled:

* a brand-new file (version 0, no tables): create everything at the current
  version;
* a file created before versioning existed (version 0, tables present): treat
  it as version 1 and replay every step;
* any older version: replay the steps it has not seen yet.

Every step checks what already exists before altering anything, so rerunning
after a crash halfway through is safe. The version is written only once all
pending steps have succeeded.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Iterable

from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from ..core.errors import MigrationError
from .session import Base

logger = logging.getLogger(__name__)

CURRENT_SCHEMA_VERSION = 3
LEGACY_BASE_VERSION = 1


def _table_columns(engine: Engine, table: str) -> list[dict[str, object]]:
    """Fetch SQLite's description of a table so we know what columns exist."""

    with engine.connect() as conn:
        return conn.execute(text(f"PRAGMA table_info({table})")).mappings().all()


def _column_names(engine: Engine, table: str) -> set[str]:
    return {record["name"] for record in _table_columns(engine, table)}


def _table_exists(engine: Engine, table: str) -> bool:
    with engine.connect() as conn:
        row = conn.execute(
            text("SELECT name FROM sqlite_master WHERE type = 'table' AND name = :name"),
            {"name": table},
        ).first()
    return row is not None


def _add_column_sqlite(engine: Engine, table: str, col_def: str) -> None:
    with engine.begin() as conn:
        conn.execute(text(f"ALTER TABLE {table} ADD COLUMN {col_def}"))


def _add_missing_columns(engine: Engine, table: str, wanted: dict[str, str]) -> None:
    existing = _column_names(engine, table)
    for name, dtype in wanted.items():
        if name in existing:
            continue
        logger.info("Adding column %s.%s", table, name)
        _add_column_sqlite(engine, table, f"{name} {dtype}")


def _create_index_if_not_exists(engine: Engine, table: str, name: str, cols: Iterable[str], unique: bool = False) -> None:
    cols_sql = ", ".join(cols)
    unique_sql = "UNIQUE " if unique else ""
    with engine.begin() as conn:
        conn.execute(text(f"CREATE {unique_sql}INDEX IF NOT EXISTS {name} ON {table} ({cols_sql})"))


def _add_container_hierarchy(engine: Engine) -> None:
    _add_missing_columns(
        engine,
        "containers",
        {
            "parent_container_id": "TEXT REFERENCES containers(id) ON DELETE CASCADE",
            "type": "TEXT DEFAULT 'box'",
        },
    )
    with engine.begin() as conn:
        conn.execute(text("UPDATE containers SET type = 'box' WHERE type IS NULL"))
    _create_index_if_not_exists(engine, "containers", "idx_containers_parent", ["parent_container_id"])


def _add_item_product_details(engine: Engine) -> None:
    _add_missing_columns(
        engine,
        "items",
        {
            "brand": "TEXT",
            "model": "TEXT",
            "serial_number": "TEXT",
            "warranty_date": "TEXT",
        },
    )


@dataclass(frozen=True)
class MigrationStep:
    version: int
    description: str
    apply: Callable[[Engine], None]


# Append new steps here and bump CURRENT_SCHEMA_VERSION with them.
MIGRATIONS: tuple[MigrationStep, ...] = (
    MigrationStep(2, "container nesting and container type", _add_container_hierarchy),
    MigrationStep(3, "item brand, model, serial number and warranty date", _add_item_product_details),
)


def schema_version(engine: Engine) -> int:
    with engine.connect() as conn:
        return int(conn.execute(text("PRAGMA user_version")).scalar() or 0)


def _set_schema_version(engine: Engine, version: int) -> None:
    # PRAGMA does not accept bound parameters; ``version`` is always an int.
    with engine.begin() as conn:
        conn.execute(text(f"PRAGMA user_version = {int(version)}"))


def _apply_migrations(engine: Engine, from_version: int) -> None:
    pending = [step for step in MIGRATIONS if step.version > from_version]
    for step in pending:
        logger.info("Applying migration v%s: %s", step.version, step.description)
        step.apply(engine)


def ensure_schema(engine: Engine) -> int:
    """Bring the database to ``CURRENT_SCHEMA_VERSION`` and return it.

    Raises ``MigrationError`` when any step fails; the stored version is left
    untouched in that case so the next start retries the same steps.
    """

    # Imported for its side effect of registering the tables on Base.metadata.
    from .. import models  # noqa: F401

    try:
        version = schema_version(engine)
        if version == 0 and not _table_exists(engine, "containers"):
            logger.info("Creating schema v%s", CURRENT_SCHEMA_VERSION)
            Base.metadata.create_all(bind=engine)
            _set_schema_version(engine, CURRENT_SCHEMA_VERSION)
        elif version < CURRENT_SCHEMA_VERSION:
            if version == 0:
                logger.info("Unversioned database found, treating it as v%s", LEGACY_BASE_VERSION)
                version = LEGACY_BASE_VERSION
            _apply_migrations(engine, version)
            # Tables the older file never had; existing tables are left alone.
            Base.metadata.create_all(bind=engine)
            _set_schema_version(engine, CURRENT_SCHEMA_VERSION)
            logger.info("Schema upgraded from v%s to v%s", version, CURRENT_SCHEMA_VERSION)
        return schema_version(engine)
    except SQLAlchemyError as exc:
        logger.exception("Schema migration failed")
        raise MigrationError(f"schema migration failed: {exc}") from exc
