from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator

from .common import clean_name, clean_optional_text


class PlaceBase(BaseModel):
    name: str
    address: Optional[str] = None
    photo: Optional[str] = None

    @field_validator("name", mode="before")
    @classmethod
    def _name(cls, value):
        return clean_name(value)

    @field_validator("address", "photo", mode="before")
    @classmethod
    def _optional_text(cls, value):
        return clean_optional_text(value)


class PlaceCreate(PlaceBase):
    pass


class PlaceUpdate(BaseModel):
    """Partial update; only fields that were explicitly set are written."""

    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = None
    address: Optional[str] = None
    photo: Optional[str] = None

    @field_validator("name", mode="before")
    @classmethod
    def _name(cls, value):
        return clean_name(value)

    @field_validator("address", "photo", mode="before")
    @classmethod
    def _optional_text(cls, value):
        return clean_optional_text(value)


class PlaceOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    address: Optional[str] = None
    photo: Optional[str] = None
    created_at: str
    updated_at: str
