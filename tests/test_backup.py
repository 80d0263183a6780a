import json
from datetime import date

import pytest
from sqlalchemy import text

from stokosor.core.errors import SnapshotFormatError, StoreOperationError
from stokosor.services import backup
from stokosor.services.backup import backup_filename, full_snapshot, restore_snapshot
from stokosor.services.csv_export import CSV_HEADERS, export_items_csv, format_amount


def _counts(session_factory):
    with session_factory() as db:
        return {
            table: db.execute(text(f"SELECT COUNT(*) FROM {table}")).scalar()
            for table in ("places", "zones", "containers", "items")
        }


def test_snapshot_document_shape(garage, session_factory):
    document = full_snapshot(session_factory)

    assert document["version"] == 1
    assert document["exportDate"].endswith("Z")
    assert [place["name"] for place in document["places"]] == ["Home"]
    assert [c["name"] for c in document["containers"]] == ["Bag 1", "Bin A", "Shelf Unit"]
    assert document["items"][0]["category"] == "tools"
    json.dumps(document)


def test_restore_round_trip_preserves_ids_and_timestamps(garage, inventory, session_factory):
    inventory.items.update(garage["hammer"].id, {"tags": ["steel"]})
    document = full_snapshot(session_factory)

    inventory.delete_place(garage["place"].id)
    inventory.places.create({"name": "Temporary"})
    summary = inventory.restore(json.dumps(document))

    assert summary.model_dump() == {"places": 1, "zones": 1, "containers": 3, "items": 1}
    restored = full_snapshot(session_factory)
    for key in ("places", "zones", "containers", "items"):
        assert restored[key] == document[key]
    assert inventory.items.get(garage["hammer"].id).tags == ["steel"]
    assert inventory.item_path(garage["hammer"]) == "Home › Garage › Shelf Unit › Bin A"


def test_restore_inserts_parents_before_children(garage, session_factory):
    document = full_snapshot(session_factory)
    document["containers"] = list(reversed(document["containers"]))
    document["containers"].sort(key=lambda c: c["parent_container_id"] is None)

    restore_snapshot(session_factory, document)

    assert _counts(session_factory)["containers"] == 3


@pytest.mark.parametrize(
    "mutate",
    [
        lambda doc: doc.pop("version"),
        lambda doc: doc.pop("items"),
        lambda doc: doc.update(places=None),
        lambda doc: doc["items"][0].update(category="weapons"),
        lambda doc: doc["zones"][0].update(place_id="missing"),
        lambda doc: doc["containers"].append(dict(doc["containers"][0])),
    ],
)
def test_invalid_documents_are_rejected_before_any_delete(garage, session_factory, mutate):
    document = full_snapshot(session_factory)
    mutate(document)

    with pytest.raises(SnapshotFormatError):
        restore_snapshot(session_factory, document)
    assert _counts(session_factory) == {"places": 1, "zones": 1, "containers": 3, "items": 1}


def test_cyclic_containers_in_document_are_rejected(garage, session_factory):
    document = full_snapshot(session_factory)
    by_name = {c["name"]: c for c in document["containers"]}
    by_name["Shelf Unit"]["parent_container_id"] = by_name["Bag 1"]["id"]

    with pytest.raises(SnapshotFormatError):
        restore_snapshot(session_factory, document)


def test_non_json_text_is_rejected(session_factory):
    with pytest.raises(SnapshotFormatError):
        restore_snapshot(session_factory, "{not json")
    with pytest.raises(SnapshotFormatError):
        restore_snapshot(session_factory, "[]")


def test_failed_insert_rolls_back_whole_restore(garage, session_factory, monkeypatch):
    document = full_snapshot(session_factory)
    # Passes validation but breaks the NOT NULL constraint on insert.
    monkeypatch.setattr(backup, "_parents_first", lambda containers: [
        container.model_copy(update={"name": None}) for container in containers
    ])

    with pytest.raises(StoreOperationError):
        restore_snapshot(session_factory, document)
    assert _counts(session_factory) == {"places": 1, "zones": 1, "containers": 3, "items": 1}


def test_restore_empty_document_clears_store(garage, session_factory):
    summary = restore_snapshot(
        session_factory, {"version": 1, "places": [], "zones": [], "containers": [], "items": []}
    )

    assert summary.places == 0
    assert _counts(session_factory) == {"places": 0, "zones": 0, "containers": 0, "items": 0}


def test_backup_filenames():
    day = date(2024, 5, 1)
    assert backup_filename("backup", today=day) == "stokosor_backup_20240501.json"
    assert backup_filename("items", today=day) == "stokosor_items_20240501.csv"


def test_csv_export_has_bom_header_and_location(garage, session_factory):
    content = export_items_csv(session_factory)

    assert content.startswith("\ufeff")
    lines = content[1:].splitlines()
    assert lines[0] == ";".join(CSV_HEADERS)
    assert lines[1].split(";")[:3] == ["Hammer", "tools", "Home › Garage › Shelf Unit › Bin A"]
    assert lines[1].split(";")[8] == "25"


def test_csv_export_quotes_special_values(garage, inventory, session_factory):
    inventory.items.create(
        {
            "container_id": garage["bag"].id,
            "name": 'Tape; "duct"',
            "notes": "line one\nline two",
            "tags": ["repair", "grey"],
            "purchase_price": 4.5,
        }
    )

    content = export_items_csv(session_factory)

    assert '"Tape; ""duct"""' in content
    assert '"line one\nline two"' in content
    assert ";repair, grey;" in content
    assert ";4.5;" in content


def test_csv_rows_are_ordered_by_name(garage, inventory, session_factory):
    inventory.items.create({"container_id": garage["bag"].id, "name": "Anvil"})

    rows = export_items_csv(session_factory)[1:].splitlines()[1:]

    assert [row.split(";")[0] for row in rows] == ["Anvil", "Hammer"]


def test_format_amount_matches_plain_numbers():
    assert format_amount(None) == ""
    assert format_amount(12.0) == "12"
    assert format_amount(12.5) == "12.5"
    assert format_amount(0) == "0"
