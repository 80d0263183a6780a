from __future__ import annotations

from ..models.zone import Zone
from ..schemas.zone import ZoneCreate, ZoneOut, ZoneUpdate
from .base import Repository


class ZoneRepository(Repository[ZoneOut]):
    entity_name = "zone"
    model = Zone
    out_schema = ZoneOut
    create_schema = ZoneCreate
    update_schema = ZoneUpdate

    def fetch_by_place(self, place_id: str) -> list[ZoneOut]:
        """Refresh the zones of one place, keeping other places' zones cached."""

        return self._fetch_scope("place_id", place_id)

    def by_place(self, place_id: str) -> list[ZoneOut]:
        return self.cache.filter(lambda zone: zone.place_id == place_id)
