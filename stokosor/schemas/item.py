from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from ..core.barcodes import is_isbn, normalize_barcode
from ..core.categories import Category
from .common import (
    clean_amount,
    clean_date_text,
    clean_name,
    clean_optional_text,
    clean_string_list,
)

TEXT_FIELDS = ("brand", "model", "serial_number", "notes")
DATE_FIELDS = ("purchase_date", "expiration_date", "warranty_date")
AMOUNT_FIELDS = ("purchase_price", "estimated_value")


class _ItemFields(BaseModel):
    """Descriptive item fields plus the cleaners shared by create and update."""

    photos: Optional[list[str]] = None
    barcode: Optional[str] = None
    brand: Optional[str] = None
    model: Optional[str] = None
    serial_number: Optional[str] = None
    purchase_price: Optional[float] = None
    estimated_value: Optional[float] = None
    purchase_date: Optional[str] = None
    expiration_date: Optional[str] = None
    warranty_date: Optional[str] = None
    notes: Optional[str] = None
    tags: Optional[list[str]] = None

    @field_validator(*TEXT_FIELDS, mode="before")
    @classmethod
    def _text(cls, value):
        return clean_optional_text(value)

    @field_validator("barcode", mode="before")
    @classmethod
    def _barcode(cls, value):
        return normalize_barcode(value) if isinstance(value, str) else clean_optional_text(value)

    @field_validator(*AMOUNT_FIELDS, mode="before")
    @classmethod
    def _amount(cls, value):
        return clean_amount(value)

    @field_validator(*DATE_FIELDS, mode="before")
    @classmethod
    def _date(cls, value):
        return clean_date_text(value)

    @field_validator("photos", mode="before")
    @classmethod
    def _photos(cls, value):
        return clean_string_list(value)

    @field_validator("tags", mode="before")
    @classmethod
    def _tags(cls, value):
        return clean_string_list(value, unique=True)


class ItemCreate(_ItemFields):
    container_id: str
    name: str
    category: Category = Category.OTHER

    @field_validator("name", mode="before")
    @classmethod
    def _name(cls, value):
        return clean_name(value)


class ItemUpdate(_ItemFields):
    """Partial update. ``container_id`` is not editable."""

    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = None
    category: Optional[Category] = None

    @field_validator("name", mode="before")
    @classmethod
    def _name(cls, value):
        return clean_name(value)

    @field_validator("category", mode="before")
    @classmethod
    def _category(cls, value):
        if value is None:
            raise ValueError("category cannot be cleared")
        return value


class ItemPrefill(BaseModel):
    """Product data returned by a barcode or ISBN catalogue lookup.

    Without an explicit category, book codes (ISBN-13) file the item under
    books and anything else under other.
    """

    name: str
    barcode: str
    brand: Optional[str] = None
    category: Optional[Category] = None

    @model_validator(mode="after")
    def _default_category(self):
        if self.category is None:
            self.category = Category.BOOKS if is_isbn(self.barcode) else Category.OTHER
        return self

    def to_create(self, container_id: str, **extra: Any) -> ItemCreate:
        payload: dict[str, Any] = self.model_dump(exclude_none=True)
        payload.update(extra)
        payload["container_id"] = container_id
        return ItemCreate.model_validate(payload)


class ItemOut(BaseModel):
    model_config = ConfigDict(from_attributes=True, use_enum_values=True)

    id: str
    container_id: str
    name: str
    photos: Optional[list[str]] = None
    category: Category
    barcode: Optional[str] = None
    brand: Optional[str] = None
    model: Optional[str] = None
    serial_number: Optional[str] = None
    purchase_price: Optional[float] = None
    estimated_value: Optional[float] = None
    purchase_date: Optional[str] = None
    expiration_date: Optional[str] = None
    warranty_date: Optional[str] = None
    notes: Optional[str] = None
    tags: Optional[list[str]] = None
    created_at: str
    updated_at: str

    @field_validator("photos", "tags", mode="before")
    @classmethod
    def _absent_when_empty(cls, value):
        return value or None


class ItemSearchResult(ItemOut):
    path: str = ""
