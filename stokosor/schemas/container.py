from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator

from ..core.categories import DEFAULT_CONTAINER_TYPE, ContainerType
from .common import clean_name, clean_optional_text


class ContainerCreate(BaseModel):
    zone_id: str
    name: str
    type: ContainerType = DEFAULT_CONTAINER_TYPE
    parent_container_id: Optional[str] = None
    photo: Optional[str] = None

    @field_validator("name", mode="before")
    @classmethod
    def _name(cls, value):
        return clean_name(value)

    @field_validator("parent_container_id", "photo", mode="before")
    @classmethod
    def _optional_text(cls, value):
        return clean_optional_text(value)


class ContainerUpdate(BaseModel):
    """Editable container fields. Zone, parent and QR code are fixed here;
    re-parenting goes through ``ContainerMove``."""

    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = None
    type: Optional[ContainerType] = None
    photo: Optional[str] = None

    @field_validator("name", mode="before")
    @classmethod
    def _name(cls, value):
        return clean_name(value)

    @field_validator("type", mode="before")
    @classmethod
    def _type(cls, value):
        if value is None:
            raise ValueError("type cannot be cleared")
        return value

    @field_validator("photo", mode="before")
    @classmethod
    def _photo(cls, value):
        return clean_optional_text(value)


class ContainerMove(BaseModel):
    parent_container_id: Optional[str] = None

    @field_validator("parent_container_id", mode="before")
    @classmethod
    def _parent(cls, value):
        return clean_optional_text(value)


class ContainerOut(BaseModel):
    model_config = ConfigDict(from_attributes=True, use_enum_values=True)

    id: str
    zone_id: str
    parent_container_id: Optional[str] = None
    name: str
    type: ContainerType = DEFAULT_CONTAINER_TYPE
    qr_code: str
    photo: Optional[str] = None
    created_at: str
    updated_at: str

    @field_validator("type", mode="before")
    @classmethod
    def _legacy_type(cls, value):
        # Rows migrated from the unversioned schema may carry NULL.
        return value or DEFAULT_CONTAINER_TYPE
