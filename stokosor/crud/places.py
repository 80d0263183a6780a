from __future__ import annotations

from ..models.place import Place
from ..schemas.place import PlaceCreate, PlaceOut, PlaceUpdate
from .base import Repository


class PlaceRepository(Repository[PlaceOut]):
    """Places sit at the top of the hierarchy; deleting one cascades to
    its zones, their containers and every item inside them."""

    entity_name = "place"
    model = Place
    out_schema = PlaceOut
    create_schema = PlaceCreate
    update_schema = PlaceUpdate
