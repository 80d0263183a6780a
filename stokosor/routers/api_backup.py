from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends
from fastapi.responses import JSONResponse, Response

from ..deps.auth import require_api_key
from ..deps.inventory import get_inventory
from ..schemas.backup import RestoreSummary
from ..services.backup import backup_filename
from ..services.inventory import Inventory

router = APIRouter(prefix="/api/v1/backup", tags=["backup"], dependencies=[Depends(require_api_key)])


def _attachment(filename: str) -> dict[str, str]:
    return {"Content-Disposition": f'attachment; filename="{filename}"'}


@router.get("/export.json")
def api_export_json(inventory: Inventory = Depends(get_inventory)):
    return JSONResponse(inventory.export_snapshot(), headers=_attachment(backup_filename("backup")))


@router.get("/export.csv")
def api_export_csv(inventory: Inventory = Depends(get_inventory)):
    return Response(
        content=inventory.export_csv(),
        media_type="text/csv; charset=utf-8",
        headers=_attachment(backup_filename("items")),
    )


@router.post("/import", response_model=RestoreSummary)
def api_import_backup(document: Any = Body(...), inventory: Inventory = Depends(get_inventory)):
    """Replace the whole inventory with an exported backup document."""

    return inventory.restore(document)
