import os
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Keep the module-level app in stokosor.main away from a real database file.
os.environ.setdefault("DB_URL", "sqlite://")
os.environ.setdefault("DATA_DIR", str(ROOT / "data"))

from stokosor.core.config import AppSettings
from stokosor.db.migrate import ensure_schema
from stokosor.db.session import make_engine, make_session_factory
from stokosor.services.inventory import Inventory


@pytest.fixture()
def engine():
    engine = make_engine("sqlite://")
    ensure_schema(engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return make_session_factory(engine)


@pytest.fixture()
def settings():
    return AppSettings(DB_URL="sqlite://", API_KEY="", MAX_CONTAINER_DEPTH=64)


@pytest.fixture()
def inventory(session_factory, settings):
    inv = Inventory(session_factory, settings)
    inv.refresh()
    return inv


@pytest.fixture()
def garage(inventory):
    """Home › Garage › Shelf Unit › Bin A › Bag 1, with a hammer in Bin A."""

    home = inventory.places.create({"name": "Home", "address": "1 Main St"})
    garage = inventory.zones.create({"place_id": home.id, "name": "Garage"})
    shelf = inventory.containers.create({"zone_id": garage.id, "name": "Shelf Unit", "type": "shelf"})
    bin_a = inventory.containers.create(
        {"zone_id": garage.id, "name": "Bin A", "type": "bin", "parent_container_id": shelf.id}
    )
    bag = inventory.containers.create(
        {"zone_id": garage.id, "name": "Bag 1", "type": "bag", "parent_container_id": bin_a.id}
    )
    hammer = inventory.items.create(
        {"container_id": bin_a.id, "name": "Hammer", "category": "tools", "estimated_value": 25}
    )
    return {
        "place": home,
        "zone": garage,
        "shelf": shelf,
        "bin": bin_a,
        "bag": bag,
        "hammer": hammer,
    }
