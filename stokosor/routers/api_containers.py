from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from ..deps.auth import require_api_key
from ..deps.inventory import get_inventory
from ..schemas.container import ContainerCreate, ContainerMove, ContainerOut, ContainerUpdate
from ..schemas.item import ItemOut
from ..services.inventory import Inventory

router = APIRouter(prefix="/api/v1/containers", tags=["containers"], dependencies=[Depends(require_api_key)])


def _require(inventory: Inventory, container_id: str) -> ContainerOut:
    container = inventory.containers.get(container_id)
    if not container:
        raise HTTPException(status_code=404, detail="Container not found")
    return container


@router.get("", response_model=list[ContainerOut])
def api_list_containers(zone_id: str | None = None, inventory: Inventory = Depends(get_inventory)):
    if zone_id:
        return inventory.containers.by_zone(zone_id)
    return inventory.containers.all()


@router.post("", response_model=ContainerOut, status_code=201)
def api_create_container(payload: ContainerCreate, inventory: Inventory = Depends(get_inventory)):
    return inventory.containers.create(payload)


@router.get("/qr/{code}", response_model=ContainerOut)
def api_container_by_qr(code: str, inventory: Inventory = Depends(get_inventory)):
    container = inventory.containers.by_qr_code(code)
    if not container:
        raise HTTPException(status_code=404, detail="No container with this QR code")
    return container


@router.get("/{container_id}", response_model=ContainerOut)
def api_get_container(container_id: str, inventory: Inventory = Depends(get_inventory)):
    return _require(inventory, container_id)


@router.get("/{container_id}/children", response_model=list[ContainerOut])
def api_container_children(container_id: str, inventory: Inventory = Depends(get_inventory)):
    _require(inventory, container_id)
    return inventory.hierarchy.children(container_id)


@router.get("/{container_id}/descendants", response_model=list[ContainerOut])
def api_container_descendants(container_id: str, inventory: Inventory = Depends(get_inventory)):
    _require(inventory, container_id)
    return inventory.hierarchy.descendants(container_id)


@router.get("/{container_id}/items", response_model=list[ItemOut])
def api_container_items(container_id: str, inventory: Inventory = Depends(get_inventory)):
    _require(inventory, container_id)
    return inventory.items.by_container(container_id)


@router.get("/{container_id}/path", response_model=list[ContainerOut])
def api_container_path(container_id: str, inventory: Inventory = Depends(get_inventory)):
    _require(inventory, container_id)
    return inventory.hierarchy.ancestor_path(container_id)


@router.patch("/{container_id}", response_model=ContainerOut)
def api_update_container(
    container_id: str, payload: ContainerUpdate, inventory: Inventory = Depends(get_inventory)
):
    container = inventory.containers.update(container_id, payload)
    if not container:
        raise HTTPException(status_code=404, detail="Container not found")
    return container


@router.post("/{container_id}/move", response_model=ContainerOut)
def api_move_container(container_id: str, payload: ContainerMove, inventory: Inventory = Depends(get_inventory)):
    container = inventory.move_container(container_id, payload.parent_container_id)
    if not container:
        raise HTTPException(status_code=404, detail="Container not found")
    return container


@router.delete("/{container_id}")
def api_delete_container(container_id: str, inventory: Inventory = Depends(get_inventory)):
    if not inventory.delete_container(container_id):
        raise HTTPException(status_code=404, detail="Container not found")
    return {"status": "deleted"}
