import pytest
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError

from stokosor.core.errors import InventoryValidationError, StoreOperationError
from stokosor.crud import ContainerRepository, ItemRepository, PlaceRepository, ZoneRepository
from stokosor.schemas.item import ItemPrefill


def test_create_trims_fields_and_prepends_to_cache(inventory):
    first = inventory.places.create({"name": "  Home  ", "address": "   "})
    second = inventory.places.create({"name": "Cabin"})

    assert first.name == "Home"
    assert first.address is None
    assert first.created_at == first.updated_at
    assert first.created_at.endswith("Z")
    assert [place.id for place in inventory.places.all()] == [second.id, first.id]


def test_create_rejects_blank_name_before_touching_store(inventory, session_factory):
    with pytest.raises(InventoryValidationError):
        inventory.places.create({"name": "   "})

    assert inventory.places.all() == []
    with session_factory() as db:
        assert db.execute(text("SELECT COUNT(*) FROM places")).scalar() == 0


def test_unknown_category_is_a_validation_error(garage, inventory):
    with pytest.raises(InventoryValidationError):
        inventory.items.create({"container_id": garage["bin"].id, "name": "Thing", "category": "weapons"})


def test_update_patches_only_given_fields(garage, inventory):
    hammer = garage["hammer"]

    updated = inventory.items.update(hammer.id, {"notes": "Claw hammer"})

    assert updated.notes == "Claw hammer"
    assert updated.name == "Hammer"
    assert updated.estimated_value == 25
    assert updated.updated_at >= hammer.updated_at
    assert inventory.items.get(hammer.id).notes == "Claw hammer"

    refetched = ItemRepository(inventory.session_factory).fetch_one(hammer.id)
    assert refetched.notes == "Claw hammer"
    assert refetched.category == "tools"


def test_update_can_clear_optional_field(garage, inventory):
    hammer = garage["hammer"]

    updated = inventory.items.update(hammer.id, {"estimated_value": None})

    assert updated.estimated_value is None
    assert inventory.items.fetch_one(hammer.id).estimated_value is None


def test_update_rejects_unknown_and_readonly_fields(garage, inventory):
    with pytest.raises(InventoryValidationError):
        inventory.items.update(garage["hammer"].id, {"container_id": garage["shelf"].id})
    with pytest.raises(InventoryValidationError):
        inventory.zones.update(garage["zone"].id, {"place_id": "elsewhere"})


def test_update_missing_entity_returns_none(inventory):
    assert inventory.places.update("does-not-exist", {"name": "Nowhere"}) is None


def test_store_failure_leaves_cache_untouched(inventory):
    before = inventory.zones.all()

    with pytest.raises(StoreOperationError):
        inventory.zones.create({"place_id": "no-such-place", "name": "Attic"})

    assert inventory.zones.all() == before


def test_lookups_read_only_the_cache(garage, session_factory):
    fresh = PlaceRepository(session_factory)

    assert fresh.get(garage["place"].id) is None
    fresh.fetch_all()
    assert fresh.get(garage["place"].id).name == "Home"


def test_scoped_fetch_merges_without_dropping_other_scopes(inventory, session_factory):
    home = inventory.places.create({"name": "Home"})
    cabin = inventory.places.create({"name": "Cabin"})
    kitchen = inventory.zones.create({"place_id": home.id, "name": "Kitchen"})
    porch = inventory.zones.create({"place_id": cabin.id, "name": "Porch"})

    zones = ZoneRepository(session_factory)
    zones.fetch_by_place(home.id)
    zones.fetch_by_place(cabin.id)
    zones.fetch_by_place(home.id)

    assert sorted(zone.id for zone in zones.all()) == sorted([kitchen.id, porch.id])
    assert [zone.id for zone in zones.by_place(cabin.id)] == [porch.id]


def test_scoped_fetch_drops_rows_deleted_elsewhere(inventory, session_factory):
    home = inventory.places.create({"name": "Home"})
    kitchen = inventory.zones.create({"place_id": home.id, "name": "Kitchen"})
    inventory.zones.create({"place_id": home.id, "name": "Cellar"})

    other = ZoneRepository(session_factory)
    other.delete(kitchen.id)

    remaining = inventory.zones.fetch_by_place(home.id)
    assert [zone.name for zone in remaining] == ["Cellar"]
    assert inventory.zones.get(kitchen.id) is None


def test_fetch_one_removes_vanished_entity(garage, inventory, session_factory):
    ItemRepository(session_factory).delete(garage["hammer"].id)

    assert inventory.items.fetch_one(garage["hammer"].id) is None
    assert inventory.items.get(garage["hammer"].id) is None


def test_delete_missing_entity_is_false(inventory):
    assert inventory.items.delete("missing") is False


def test_container_gets_immutable_qr_code(garage, inventory):
    shelf = garage["shelf"]
    assert shelf.qr_code == f"STOKOSOR:{shelf.id}"
    assert shelf.type == "shelf"

    renamed = inventory.containers.update(shelf.id, {"name": "Metal Shelf"})
    assert renamed.qr_code == shelf.qr_code

    with pytest.raises(InventoryValidationError):
        inventory.containers.update(shelf.id, {"qr_code": "STOKOSOR:other"})


def test_container_type_defaults_to_box(garage, inventory):
    box = inventory.containers.create({"zone_id": garage["zone"].id, "name": "Box"})
    assert box.type == "box"


def test_qr_code_lookup(garage, inventory):
    assert inventory.containers.by_qr_code(garage["bag"].qr_code).id == garage["bag"].id
    assert inventory.containers.by_qr_code(" " + garage["bag"].qr_code + " ").id == garage["bag"].id
    assert inventory.containers.by_qr_code("STOKOSOR:unknown") is None
    assert inventory.containers.by_qr_code("") is None


def test_qr_codes_are_unique_in_store(garage, session_factory):
    with pytest.raises(IntegrityError):
        with session_factory.begin() as db:
            db.execute(
                text(
                    "INSERT INTO containers (id, zone_id, name, type, qr_code, created_at, updated_at) "
                    "VALUES ('dup', :zone, 'Copy', 'box', :qr, 't', 't')"
                ),
                {"zone": garage["zone"].id, "qr": garage["shelf"].qr_code},
            )


def test_child_container_must_share_parent_zone(garage, inventory):
    attic = inventory.zones.create({"place_id": garage["place"].id, "name": "Attic"})

    with pytest.raises(InventoryValidationError):
        inventory.containers.create(
            {"zone_id": attic.id, "name": "Stray", "parent_container_id": garage["shelf"].id}
        )
    with pytest.raises(InventoryValidationError):
        inventory.containers.create(
            {"zone_id": attic.id, "name": "Orphan", "parent_container_id": "missing"}
        )


def test_fetch_by_zone_loads_nested_containers(garage, session_factory):
    containers = ContainerRepository(session_factory)

    fetched = containers.fetch_by_zone(garage["zone"].id)

    assert {container.name for container in fetched} == {"Shelf Unit", "Bin A", "Bag 1"}


def test_items_round_trip_lists_and_absent_values(garage, inventory):
    item = inventory.items.create(
        {
            "container_id": garage["bag"].id,
            "name": "Screws",
            "tags": ["diy", " diy ", "", "metal"],
            "photos": [],
            "purchase_price": "3,50",
        }
    )

    assert item.tags == ["diy", "metal"]
    assert item.photos is None
    assert item.purchase_price == 3.5
    assert item.category == "other"

    stored = ItemRepository(inventory.session_factory).fetch_one(item.id)
    assert stored.tags == ["diy", "metal"]
    assert stored.photos is None


def test_item_dates_must_be_iso(garage, inventory):
    with pytest.raises(InventoryValidationError):
        inventory.items.create({"container_id": garage["bin"].id, "name": "Milk", "expiration_date": "soon"})


def test_barcode_lookup_matches_equivalent_spellings(garage, inventory):
    inventory.items.create({"container_id": garage["bin"].id, "name": "Glue", "barcode": "036000291452"})

    found = inventory.items.by_barcode("0036000291452")
    assert [item.name for item in found] == ["Glue"]
    assert found[0].barcode == "0036000291452"
    assert inventory.items.by_barcode("036000291452")[0].name == "Glue"
    assert inventory.items.by_barcode("999") == []


def test_prefill_becomes_ordinary_create(garage, inventory):
    prefill = ItemPrefill(name="Dune", barcode="9780441013593", brand="Ace", category="books")

    item = inventory.items.create(prefill.to_create(garage["bag"].id, notes="Paperback"))

    assert item.name == "Dune"
    assert item.brand == "Ace"
    assert item.category == "books"
    assert item.notes == "Paperback"
    assert item.container_id == garage["bag"].id


def test_prefill_category_follows_isbn(garage, inventory):
    book = ItemPrefill(name="Dune", barcode="978-0-441-01359-3")
    soda = ItemPrefill(name="Cola", barcode="036000291452")
    manual = ItemPrefill(name="Atlas", barcode="9780441013593", category="other")

    assert book.category == "books"
    assert soda.category == "other"
    assert manual.category == "other"
    assert inventory.items.create(book.to_create(garage["bag"].id)).category == "books"


def _snapshot(entities):
    return {entity.id: entity.model_dump() for entity in entities}


def test_cache_matches_store_after_writes(inventory, session_factory):
    home = inventory.places.create({"name": "Home", "address": "1 Main St"})
    cabin = inventory.places.create({"name": "Cabin"})
    garage = inventory.zones.create({"place_id": home.id, "name": "Garage"})
    porch = inventory.zones.create({"place_id": cabin.id, "name": "Porch"})
    shelf = inventory.containers.create({"zone_id": garage.id, "name": "Shelf", "type": "shelf"})
    box = inventory.containers.create({"zone_id": garage.id, "name": "Box", "parent_container_id": shelf.id})
    crate = inventory.containers.create({"zone_id": porch.id, "name": "Crate"})
    glue = inventory.items.create({"container_id": box.id, "name": "Glue", "tags": ["diy"]})
    saw = inventory.items.create({"container_id": shelf.id, "name": "Saw", "photos": ["saw.jpg"]})
    lantern = inventory.items.create({"container_id": crate.id, "name": "Lantern"})

    inventory.places.update(home.id, {"address": "  2 Side St  "})
    inventory.zones.update(garage.id, {"icon": "  car  "})
    inventory.containers.update(box.id, {"name": " Tool Box ", "photo": "   "})
    inventory.items.update(
        glue.id,
        {
            "tags": ["a", " a ", "", "b"],
            "photos": [],
            "purchase_price": "12,50",
            "barcode": "036000291452",
        },
    )
    inventory.items.update(saw.id, {"photos": [], "notes": "Rusty"})

    inventory.items.delete(saw.id)
    inventory.items.delete(lantern.id)
    inventory.containers.delete(crate.id)
    inventory.zones.delete(porch.id)
    inventory.places.delete(cabin.id)

    for cached, fresh in (
        (inventory.places, PlaceRepository(session_factory)),
        (inventory.zones, ZoneRepository(session_factory)),
        (inventory.containers, ContainerRepository(session_factory)),
        (inventory.items, ItemRepository(session_factory)),
    ):
        assert _snapshot(cached.all()) == _snapshot(fresh.fetch_all())

    stored_glue = inventory.items.get(glue.id)
    assert stored_glue.tags == ["a", "b"]
    assert stored_glue.photos is None
    assert stored_glue.purchase_price == 12.5
    assert stored_glue.barcode == "0036000291452"
