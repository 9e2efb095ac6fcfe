"""Pydantic request/response schemas for the Ordering API.

These are external contracts (anti-corruption layer), separate from
internal Protean commands.
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field


class OrderItemSchema(BaseModel):
    product_id: int
    quantity: int = Field(ge=1)
    option_id: int | None = None
    unit_price: int = Field(ge=0)
    option_surcharge: int = Field(ge=0, default=0)
    store_id: int | None = None


class CreateOrderRequest(BaseModel):
    user_id: str
    fulfillment_type: Literal["delivery", "pickup"]
    shipping_address: str | None = None
    pickup_store_id: int | None = None
    memo: str = Field(default="", max_length=200)
    order_items: list[OrderItemSchema] = Field(min_length=1)

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "user_id": "user-001",
                    "fulfillment_type": "delivery",
                    "shipping_address": "Kim Minsu | 010-1234-5678 | (06236) 123 Teheran-ro Apt 501",
                    "order_items": [
                        {"product_id": 7, "quantity": 2, "option_id": 3, "unit_price": 10000, "option_surcharge": 500}
                    ],
                }
            ]
        }
    }


class OrderResponse(BaseModel):
    id: int
    user_id: str
    fulfillment_type: str
    status: str
    total_amount: int
    shipping_address: str | None = None
    pickup_store_id: int | None = None
    created_at: datetime
