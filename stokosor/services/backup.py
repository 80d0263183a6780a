"""Full-database backup and restore.

``full_snapshot`` reads the tables directly rather than the repository caches
so the document is a consistent picture of what is on disk. ``restore_snapshot``
validates the whole document first, then replaces every row inside a single
transaction: either the backup is fully restored or nothing changes.
"""

from __future__ import annotations

import json
import logging
from datetime import date, datetime, timezone
from typing import Any, Iterable, Mapping

from pydantic import ValidationError
from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from ..core.errors import SnapshotFormatError, StoreOperationError
from ..core.identity import now_iso
from ..db.session import transaction
from ..models.container import Container
from ..models.item import Item
from ..models.place import Place
from ..models.zone import Zone
from ..schemas.backup import SNAPSHOT_FORMAT_VERSION, RestoreSummary, Snapshot
from ..schemas.container import ContainerOut
from ..schemas.item import ItemOut
from ..schemas.place import PlaceOut
from ..schemas.zone import ZoneOut

logger = logging.getLogger(__name__)

REQUIRED_KEYS = ("version", "places", "zones", "containers", "items")


def backup_filename(kind: str = "backup", *, today: date | None = None) -> str:
    """``stokosor_backup_20240501.json`` or ``stokosor_items_20240501.csv``."""

    stamp = (today or datetime.now(timezone.utc).date()).strftime("%Y%m%d")
    extension = "csv" if kind == "items" else "json"
    return f"stokosor_{kind}_{stamp}.{extension}"


def read_snapshot(session_factory: sessionmaker) -> Snapshot:
    with transaction(session_factory) as db:
        try:
            places = db.execute(select(Place).order_by(Place.name)).scalars().all()
            zones = db.execute(select(Zone).order_by(Zone.name)).scalars().all()
            containers = db.execute(select(Container).order_by(Container.name)).scalars().all()
            items = db.execute(select(Item).order_by(Item.name)).scalars().all()
        except SQLAlchemyError as exc:
            raise StoreOperationError(f"snapshot read failed: {getattr(exc, 'orig', None) or exc}") from exc
        return Snapshot(
            version=SNAPSHOT_FORMAT_VERSION,
            export_date=now_iso(),
            places=[PlaceOut.model_validate(row) for row in places],
            zones=[ZoneOut.model_validate(row) for row in zones],
            containers=[ContainerOut.model_validate(row) for row in containers],
            items=[ItemOut.model_validate(row) for row in items],
        )


def full_snapshot(session_factory: sessionmaker) -> dict[str, Any]:
    """The JSON-ready backup document: ``{version, exportDate, places, ...}``."""

    return read_snapshot(session_factory).to_document()


def _unique_ids(kind: str, entities: Iterable[Any]) -> set[str]:
    ids: set[str] = set()
    for entity in entities:
        if entity.id in ids:
            raise SnapshotFormatError(f"duplicate {kind} id {entity.id}")
        ids.add(entity.id)
    return ids


def _check_references(snapshot: Snapshot) -> None:
    place_ids = _unique_ids("place", snapshot.places)
    zone_ids = _unique_ids("zone", snapshot.zones)
    container_ids = _unique_ids("container", snapshot.containers)
    _unique_ids("item", snapshot.items)

    for zone in snapshot.zones:
        if zone.place_id not in place_ids:
            raise SnapshotFormatError(f"zone {zone.id} points to a missing place")
    zone_of = {container.id: container.zone_id for container in snapshot.containers}
    for container in snapshot.containers:
        if container.zone_id not in zone_ids:
            raise SnapshotFormatError(f"container {container.id} points to a missing zone")
        parent = container.parent_container_id
        if parent and parent not in container_ids:
            raise SnapshotFormatError(f"container {container.id} points to a missing parent")
        if parent and zone_of[parent] != container.zone_id:
            raise SnapshotFormatError(f"container {container.id} is not in its parent's zone")
    qr_codes = [container.qr_code for container in snapshot.containers]
    if len(set(qr_codes)) != len(qr_codes):
        raise SnapshotFormatError("duplicate container QR codes")
    for item in snapshot.items:
        if item.container_id not in container_ids:
            raise SnapshotFormatError(f"item {item.id} points to a missing container")


def _parents_first(containers: list[ContainerOut]) -> list[ContainerOut]:
    ordered: list[ContainerOut] = []
    placed: set[str] = set()
    pending = list(containers)
    while pending:
        remaining = []
        for container in pending:
            parent = container.parent_container_id
            if not parent or parent in placed:
                ordered.append(container)
                placed.add(container.id)
            else:
                remaining.append(container)
        if len(remaining) == len(pending):
            raise SnapshotFormatError("container parent links form a cycle")
        pending = remaining
    return ordered


def parse_snapshot(document: Any) -> Snapshot:
    """Validate a backup (dict, JSON text or ``Snapshot``) without touching the store."""

    if isinstance(document, Snapshot):
        snapshot = document
    else:
        if isinstance(document, (bytes, bytearray)):
            document = document.decode("utf-8-sig")
        if isinstance(document, str):
            try:
                document = json.loads(document.lstrip("\ufeff"))
            except json.JSONDecodeError as exc:
                raise SnapshotFormatError(f"backup is not valid JSON: {exc}") from exc
        if not isinstance(document, Mapping):
            raise SnapshotFormatError("backup must be a JSON object")
        missing = [key for key in REQUIRED_KEYS if document.get(key) is None]
        if missing:
            raise SnapshotFormatError(f"backup is missing: {', '.join(missing)}")
        try:
            snapshot = Snapshot.model_validate(document)
        except ValidationError as exc:
            raise SnapshotFormatError(f"backup rows are invalid: {exc.error_count()} error(s)") from exc
    _check_references(snapshot)
    return snapshot


def restore_snapshot(session_factory: sessionmaker, document: Any) -> RestoreSummary:
    """Replace the whole database with the contents of a backup.

    Ids and timestamps are preserved. Nothing is deleted unless the document
    validates; the delete-and-reinsert runs in one transaction that rolls back
    on any failure.
    """

    snapshot = parse_snapshot(document)
    containers = _parents_first(list(snapshot.containers))

    try:
        with transaction(session_factory) as db:
            # Children first, although the cascades would cope either way.
            for model in (Item, Container, Zone, Place):
                db.execute(delete(model))
            db.add_all(Place(**place.model_dump()) for place in snapshot.places)
            db.flush()
            db.add_all(Zone(**zone.model_dump()) for zone in snapshot.zones)
            db.flush()
            for container in containers:
                db.add(Container(**container.model_dump(mode="json")))
                db.flush()
            db.add_all(Item(**item.model_dump(mode="json")) for item in snapshot.items)
            db.flush()
    except SQLAlchemyError as exc:
        reason = getattr(exc, "orig", None) or exc
        logger.error("Restore rolled back: %s", reason)
        raise StoreOperationError(f"restore failed: {reason}") from exc

    summary = RestoreSummary(
        places=len(snapshot.places),
        zones=len(snapshot.zones),
        containers=len(snapshot.containers),
        items=len(snapshot.items),
    )
    logger.info("Restored backup", extra={"extra_data": summary.model_dump()})
    return summary
