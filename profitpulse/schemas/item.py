from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from profitpulse.models.item import ItemStatus


def _strip_required(value: str, field_name: str) -> str:
    cleaned = value.strip()
    if not cleaned:
        raise ValueError(f"{field_name} is required")
    return cleaned


def _strip_optional(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    cleaned = value.strip()
    return cleaned or None


class ItemCreate(BaseModel):
    item_number: str = Field(max_length=50)
    name: str = Field(max_length=255)
    description: Optional[str] = None
    category: Optional[str] = Field(default=None, max_length=100)
    sku: Optional[str] = Field(default=None, max_length=100)
    barcode: Optional[str] = Field(default=None, max_length=100)
    image_url: Optional[str] = Field(default=None, max_length=500)
    qty_in_stock: int = Field(default=0, ge=0)
    reorder_level: int = Field(default=0, ge=0)
    purchase_price: Decimal = Field(default=Decimal("0"), ge=0)
    selling_price: Decimal = Field(ge=0)
    status: ItemStatus = ItemStatus.ACTIVE

    @field_validator("item_number")
    @classmethod
    def validate_item_number(cls, value: str) -> str:
        return _strip_required(value, "item_number")

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        return _strip_required(value, "name")

    @field_validator("description", "category", "sku", "barcode", "image_url")
    @classmethod
    def normalize_optional(cls, value: Optional[str]) -> Optional[str]:
        return _strip_optional(value)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "item_number": "A1",
                "name": "Widget",
                "category": "hardware",
                "sku": "WDG-001",
                "qty_in_stock": 10,
                "reorder_level": 5,
                "purchase_price": 6.5,
                "selling_price": 9.99,
            }
        }
    )


class ItemUpdate(BaseModel):
    item_number: Optional[str] = Field(default=None, max_length=50)
    name: Optional[str] = Field(default=None, max_length=255)
    description: Optional[str] = None
    category: Optional[str] = Field(default=None, max_length=100)
    sku: Optional[str] = Field(default=None, max_length=100)
    barcode: Optional[str] = Field(default=None, max_length=100)
    image_url: Optional[str] = Field(default=None, max_length=500)
    qty_in_stock: Optional[int] = Field(default=None, ge=0)
    reorder_level: Optional[int] = Field(default=None, ge=0)
    purchase_price: Optional[Decimal] = Field(default=None, ge=0)
    selling_price: Optional[Decimal] = Field(default=None, ge=0)

    @field_validator("item_number")
    @classmethod
    def validate_item_number(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return _strip_required(value, "item_number")

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return _strip_required(value, "name")

    @field_validator("description", "category", "sku", "barcode", "image_url")
    @classmethod
    def normalize_optional(cls, value: Optional[str]) -> Optional[str]:
        return _strip_optional(value)

    @model_validator(mode="after")
    def validate_has_update(self) -> "ItemUpdate":
        if not self.model_fields_set:
            raise ValueError("At least one field must be provided")
        return self

    model_config = ConfigDict(
        json_schema_extra={"example": {"selling_price": 10.49, "reorder_level": 8}}
    )


class ItemOut(BaseModel):
    item_id: int
    item_number: str
    name: str
    description: Optional[str] = None
    category: Optional[str] = None
    sku: Optional[str] = None
    barcode: Optional[str] = None
    image_url: Optional[str] = None
    qty_in_stock: int
    reorder_level: int
    purchase_price: float
    selling_price: float
    status: ItemStatus
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ItemListOut(BaseModel):
    items: list[ItemOut]
    total: int
    page: int
    limit: int
