from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from ..deps.auth import require_api_key
from ..deps.inventory import get_inventory
from ..schemas.place import PlaceCreate, PlaceOut, PlaceUpdate
from ..services.inventory import Inventory

router = APIRouter(prefix="/api/v1/places", tags=["places"], dependencies=[Depends(require_api_key)])


@router.get("", response_model=list[PlaceOut])
def api_list_places(inventory: Inventory = Depends(get_inventory)):
    return inventory.places.all()


@router.post("", response_model=PlaceOut, status_code=201)
def api_create_place(payload: PlaceCreate, inventory: Inventory = Depends(get_inventory)):
    return inventory.places.create(payload)


@router.get("/{place_id}", response_model=PlaceOut)
def api_get_place(place_id: str, inventory: Inventory = Depends(get_inventory)):
    place = inventory.places.get(place_id)
    if not place:
        raise HTTPException(status_code=404, detail="Place not found")
    return place


@router.patch("/{place_id}", response_model=PlaceOut)
def api_update_place(place_id: str, payload: PlaceUpdate, inventory: Inventory = Depends(get_inventory)):
    place = inventory.places.update(place_id, payload)
    if not place:
        raise HTTPException(status_code=404, detail="Place not found")
    return place


@router.delete("/{place_id}")
def api_delete_place(place_id: str, inventory: Inventory = Depends(get_inventory)):
    if not inventory.delete_place(place_id):
        raise HTTPException(status_code=404, detail="Place not found")
    return {"status": "deleted"}
