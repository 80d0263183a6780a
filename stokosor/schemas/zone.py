from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator

from .common import clean_name, clean_optional_text


class ZoneCreate(BaseModel):
    place_id: str
    name: str
    icon: Optional[str] = None

    @field_validator("name", mode="before")
    @classmethod
    def _name(cls, value):
        return clean_name(value)

    @field_validator("icon", mode="before")
    @classmethod
    def _icon(cls, value):
        return clean_optional_text(value)


class ZoneUpdate(BaseModel):
    # place_id is deliberately absent: zones do not move between places.
    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = None
    icon: Optional[str] = None

    @field_validator("name", mode="before")
    @classmethod
    def _name(cls, value):
        return clean_name(value)

    @field_validator("icon", mode="before")
    @classmethod
    def _icon(cls, value):
        return clean_optional_text(value)


class ZoneOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    place_id: str
    name: str
    icon: Optional[str] = None
    created_at: str
    updated_at: str
