from datetime import datetime
from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

PaymentMethod = Literal["cash", "card", "transfer", "mobile_money", "other"]


class SaleItemIn(BaseModel):
    item_id: int
    quantity: int = Field(gt=0)
    price_at_sale: Decimal = Field(ge=0)


class SaleCreate(BaseModel):
    # An empty list passes schema validation; the sale service rejects it as InvalidSale.
    items: List[SaleItemIn] = Field(default_factory=list)
    payment_method: PaymentMethod = "cash"
    tax_amount: Decimal = Field(default=Decimal("0"), ge=0)
    discount_amount: Decimal = Field(default=Decimal("0"), ge=0)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "payment_method": "cash",
                "tax_amount": 0,
                "discount_amount": 0,
                "items": [{"item_id": 1, "quantity": 3, "price_at_sale": 9.99}],
            }
        }
    )


class SaleCreateOut(BaseModel):
    sale_id: int
    sale_number: str
    total_amount: float
    tax_amount: float
    discount_amount: float
    payment_method: str


class SaleLineOut(BaseModel):
    sale_item_id: int
    item_id: int
    name: Optional[str] = None
    item_number: Optional[str] = None
    quantity: int
    price_at_sale: float
    subtotal: float


class SaleOut(BaseModel):
    sale_id: int
    sale_number: str
    admin_id: int
    username: Optional[str] = None
    total_amount: float
    tax_amount: float
    discount_amount: float
    payment_method: str
    created_at: datetime | None = None
    items: list[SaleLineOut] = Field(default_factory=list)


class SaleListOut(BaseModel):
    sales: list[SaleOut]
    total: int
    page: int
    limit: int
