"""Pydantic request/response schemas for the Payments API.

These are external contracts (anti-corruption layer), separate from
internal Protean commands. Field names follow the gateway's wire format.
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Payment Request Schemas
# ---------------------------------------------------------------------------
class ReadyPaymentRequest(BaseModel):
    order_id: int = Field(gt=0)

    model_config = {"json_schema_extra": {"examples": [{"order_id": 42}]}}


class RefundPaymentRequest(BaseModel):
    cancel_amount: int

    model_config = {"json_schema_extra": {"examples": [{"cancel_amount": 5000}]}}


class ConfigureGatewayRequest(BaseModel):
    should_succeed: bool = True
    failure_reason: str = "Payment declined"
    payment_method: Literal["CARD", "MONEY"] = "CARD"


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------
class ReadyPaymentResponse(BaseModel):
    tid: str
    next_redirect_pc_url: str | None = None
    next_redirect_mobile_url: str | None = None
    next_redirect_app_url: str | None = None
    android_app_scheme: str | None = None
    ios_app_scheme: str | None = None


class ApprovePaymentResponse(BaseModel):
    order_id: int
    tid: str | None = None
    aid: str | None = None
    total_amount: int | None = None
    payment_method: str | None = None
    approved_at: datetime | None = None


class PaymentStatusResponse(BaseModel):
    order_id: int
    payment_status: Literal["pending", "ready", "completed", "failed", "refunded"]
    payment_provider: str | None = None
    payment_tid: str | None = None
    payment_aid: str | None = None
    payment_method: str | None = None
    payment_approved_at: datetime | None = None
    total_amount: int | None = None
    refunded_amount: int = 0


class RefundPaymentResponse(BaseModel):
    tid: str | None = None
    canceled_amount: int
    remaining_amount: int
    status: str


class GatewayConfigResponse(BaseModel):
    gateway: str
    should_succeed: bool
    failure_reason: str
    payment_method: str

