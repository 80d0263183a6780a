"""Spreadsheet-friendly item export (semicolon separated, UTF-8 with BOM)."""

from __future__ import annotations

import csv
import io

from sqlalchemy.orm import sessionmaker

from ..schemas.item import ItemOut
from .backup import read_snapshot
from .paths import index_by_id, item_full_path

BOM = "\ufeff"
DELIMITER = ";"
CSV_HEADERS = (
    "Name",
    "Category",
    "Location",
    "Brand",
    "Model",
    "Serial number",
    "Barcode",
    "Purchase price",
    "Estimated value",
    "Purchase date",
    "Expiration date",
    "Warranty date",
    "Tags",
    "Notes",
)


def format_amount(value: float | None) -> str:
    if value is None:
        return ""
    if float(value).is_integer():
        return str(int(value))
    return str(value)


def _row(item: ItemOut, location: str) -> list[str]:
    return [
        item.name,
        str(item.category),
        location,
        item.brand or "",
        item.model or "",
        item.serial_number or "",
        item.barcode or "",
        format_amount(item.purchase_price),
        format_amount(item.estimated_value),
        item.purchase_date or "",
        item.expiration_date or "",
        item.warranty_date or "",
        ", ".join(item.tags or ()),
        item.notes or "",
    ]


def export_items_csv(session_factory: sessionmaker) -> str:
    """Every item with its location, ordered by name.

    Fields containing the delimiter, a quote or a line break are quoted with
    inner quotes doubled; everything else is written as is.
    """

    snapshot = read_snapshot(session_factory)
    places = index_by_id(snapshot.places)
    zones = index_by_id(snapshot.zones)
    containers = index_by_id(snapshot.containers)

    buffer = io.StringIO()
    writer = csv.writer(buffer, delimiter=DELIMITER, quotechar='"', lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for item in snapshot.items:
        location = item_full_path(item, places=places, zones=zones, containers=containers)
        writer.writerow(_row(item, location))
    return BOM + buffer.getvalue()
