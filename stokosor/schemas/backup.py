"""Shape of the JSON backup document produced by ``full_snapshot``."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from .container import ContainerOut
from .item import ItemOut
from .place import PlaceOut
from .zone import ZoneOut

SNAPSHOT_FORMAT_VERSION = 1


class Snapshot(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    version: int = Field(ge=1)
    export_date: str = Field(default="", alias="exportDate")
    places: list[PlaceOut]
    zones: list[ZoneOut]
    containers: list[ContainerOut]
    items: list[ItemOut]

    def to_document(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class RestoreSummary(BaseModel):
    places: int
    zones: int
    containers: int
    items: int
