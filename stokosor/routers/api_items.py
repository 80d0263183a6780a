from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from ..deps.auth import require_api_key
from ..deps.inventory import get_inventory
from ..schemas.item import ItemCreate, ItemOut, ItemSearchResult, ItemUpdate
from ..services.inventory import Inventory

router = APIRouter(prefix="/api/v1/items", tags=["items"], dependencies=[Depends(require_api_key)])


@router.get("", response_model=list[ItemOut])
def api_list_items(container_id: str | None = None, inventory: Inventory = Depends(get_inventory)):
    if container_id:
        return inventory.items.by_container(container_id)
    return inventory.items.all()


@router.post("", response_model=ItemOut, status_code=201)
def api_create_item(payload: ItemCreate, inventory: Inventory = Depends(get_inventory)):
    return inventory.items.create(payload)


@router.get("/search", response_model=list[ItemSearchResult])
def api_search_items(q: str = "", category: str | None = None, inventory: Inventory = Depends(get_inventory)):
    return inventory.search(q, category)


@router.get("/barcode/{code}", response_model=list[ItemOut])
def api_items_by_barcode(code: str, inventory: Inventory = Depends(get_inventory)):
    return inventory.items.by_barcode(code)


@router.get("/{item_id}", response_model=ItemOut)
def api_get_item(item_id: str, inventory: Inventory = Depends(get_inventory)):
    item = inventory.items.get(item_id)
    if not item:
        raise HTTPException(status_code=404, detail="Item not found")
    return item


@router.get("/{item_id}/path")
def api_item_path(item_id: str, inventory: Inventory = Depends(get_inventory)):
    item = inventory.items.get(item_id)
    if not item:
        raise HTTPException(status_code=404, detail="Item not found")
    return {"id": item.id, "path": inventory.item_path(item)}


@router.patch("/{item_id}", response_model=ItemOut)
def api_update_item(item_id: str, payload: ItemUpdate, inventory: Inventory = Depends(get_inventory)):
    item = inventory.items.update(item_id, payload)
    if not item:
        raise HTTPException(status_code=404, detail="Item not found")
    return item


@router.delete("/{item_id}")
def api_delete_item(item_id: str, inventory: Inventory = Depends(get_inventory)):
    if not inventory.items.delete(item_id):
        raise HTTPException(status_code=404, detail="Item not found")
    return {"status": "deleted"}
