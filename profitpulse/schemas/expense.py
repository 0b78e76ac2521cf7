from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

# Field names below shadow the `date` type inside class bodies.
DateValue = date


class ExpenseCreate(BaseModel):
    date: DateValue
    category: str = Field(max_length=50)
    amount: Decimal = Field(gt=0)
    notes: Optional[str] = None
    receipt_url: Optional[str] = Field(default=None, max_length=500)

    @field_validator("category")
    @classmethod
    def validate_category(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("category is required")
        return cleaned

    @field_validator("notes", "receipt_url")
    @classmethod
    def normalize_optional(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        cleaned = value.strip()
        return cleaned or None

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "date": "2026-02-16",
                "category": "utilities",
                "amount": 45.0,
                "notes": "Generator fuel",
            }
        }
    )


class ExpenseUpdate(BaseModel):
    date: Optional[DateValue] = None
    category: Optional[str] = Field(default=None, max_length=50)
    amount: Decimal | None = Field(default=None, gt=0)
    notes: Optional[str] = None
    receipt_url: Optional[str] = Field(default=None, max_length=500)

    @field_validator("category")
    @classmethod
    def validate_category(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("category cannot be empty")
        return cleaned

    @field_validator("notes", "receipt_url")
    @classmethod
    def normalize_optional(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        cleaned = value.strip()
        return cleaned or None

    @model_validator(mode="after")
    def validate_has_update(self) -> "ExpenseUpdate":
        if not self.model_fields_set:
            raise ValueError("At least one field must be provided")
        return self


class ExpenseOut(BaseModel):
    expense_id: int
    admin_id: int
    username: Optional[str] = None
    date: DateValue
    category: str
    amount: float
    notes: Optional[str] = None
    receipt_url: Optional[str] = None
    created_at: datetime | None = None


class ExpenseListOut(BaseModel):
    expenses: list[ExpenseOut]
    total: int
    page: int
    limit: int
