from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from ..deps.auth import require_api_key
from ..deps.inventory import get_inventory
from ..schemas.container import ContainerOut
from ..schemas.zone import ZoneCreate, ZoneOut, ZoneUpdate
from ..services.inventory import Inventory

router = APIRouter(prefix="/api/v1/zones", tags=["zones"], dependencies=[Depends(require_api_key)])


@router.get("", response_model=list[ZoneOut])
def api_list_zones(place_id: str | None = None, inventory: Inventory = Depends(get_inventory)):
    if place_id:
        return inventory.zones.by_place(place_id)
    return inventory.zones.all()


@router.post("", response_model=ZoneOut, status_code=201)
def api_create_zone(payload: ZoneCreate, inventory: Inventory = Depends(get_inventory)):
    return inventory.zones.create(payload)


@router.get("/{zone_id}", response_model=ZoneOut)
def api_get_zone(zone_id: str, inventory: Inventory = Depends(get_inventory)):
    zone = inventory.zones.get(zone_id)
    if not zone:
        raise HTTPException(status_code=404, detail="Zone not found")
    return zone


@router.get("/{zone_id}/containers", response_model=list[ContainerOut])
def api_zone_root_containers(zone_id: str, inventory: Inventory = Depends(get_inventory)):
    """Top-level containers of a zone; nested ones hang off ``/containers/{id}/children``."""

    if not inventory.zones.get(zone_id):
        raise HTTPException(status_code=404, detail="Zone not found")
    return inventory.hierarchy.root_containers(zone_id)


@router.patch("/{zone_id}", response_model=ZoneOut)
def api_update_zone(zone_id: str, payload: ZoneUpdate, inventory: Inventory = Depends(get_inventory)):
    zone = inventory.zones.update(zone_id, payload)
    if not zone:
        raise HTTPException(status_code=404, detail="Zone not found")
    return zone


@router.delete("/{zone_id}")
def api_delete_zone(zone_id: str, inventory: Inventory = Depends(get_inventory)):
    if not inventory.delete_zone(zone_id):
        raise HTTPException(status_code=404, detail="Zone not found")
    return {"status": "deleted"}
