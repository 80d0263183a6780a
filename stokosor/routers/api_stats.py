from __future__ import annotations

from fastapi import APIRouter, Depends

from ..deps.auth import require_api_key
from ..deps.inventory import get_inventory
from ..services.inventory import Inventory

router = APIRouter(prefix="/api/v1", tags=["stats"], dependencies=[Depends(require_api_key)])


@router.get("/stats")
def api_stats(inventory: Inventory = Depends(get_inventory)):
    return inventory.stats()
