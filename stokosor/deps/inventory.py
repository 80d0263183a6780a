from __future__ import annotations

from fastapi import Request

from ..services.inventory import Inventory


def get_inventory(request: Request) -> Inventory:
    # Built once by the application lifespan (or handed to ``create_app`` in tests).
    return request.app.state.inventory
