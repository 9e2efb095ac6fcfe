"""FastAPI routes for the Payments domain: the redirect handshake and refunds.

The success/cancel/fail endpoints are the URLs the gateway redirects the
buyer back to, so they take their input from the query string.
"""

import os

from fastapi import APIRouter, HTTPException

from payments.api.schemas import (
    ApprovePaymentResponse,
    ConfigureGatewayRequest,
    GatewayConfigResponse,
    PaymentStatusResponse,
    ReadyPaymentRequest,
    ReadyPaymentResponse,
    RefundPaymentRequest,
    RefundPaymentResponse,
)
from payments.gateway import get_gateway
from payments.gateway.fake_adapter import FakeGateway
from payments.payment.handshake import (
    HandshakeError,
    HandshakeErrorCode,
    PaymentHandshake,
    PaymentView,
    RefundError,
    RefundErrorCode,
)

_HANDSHAKE_STATUS = {
    HandshakeErrorCode.MISSING_CALLBACK_PARAMETER: 400,
    HandshakeErrorCode.APPROVAL_FAILED: 400,
    HandshakeErrorCode.INVALID_HANDSHAKE_STATE: 409,
    HandshakeErrorCode.ORDER_NOT_FOUND: 404,
    HandshakeErrorCode.GATEWAY_UNAVAILABLE: 502,
}

_REFUND_STATUS = {
    RefundErrorCode.INVALID_REFUND_STATE: 409,
    RefundErrorCode.INVALID_REFUND_AMOUNT: 400,
    RefundErrorCode.GATEWAY_REJECTED: 502,
}


def _raise_for(error: HandshakeError | RefundError):
    status_map = _HANDSHAKE_STATUS if isinstance(error, HandshakeError) else _REFUND_STATUS
    raise HTTPException(
        status_code=status_map[error.code],
        detail={"code": error.code.value, "message": error.message},
    )


def _status_response(view: PaymentView) -> PaymentStatusResponse:
    return PaymentStatusResponse(
        order_id=view.order_id,
        payment_status=view.status.value,
        payment_provider=view.provider,
        payment_tid=view.tid,
        payment_aid=view.aid,
        payment_method=view.method,
        payment_approved_at=view.approved_at,
        total_amount=view.total_amount,
        refunded_amount=view.refunded_amount,
    )


# ---------------------------------------------------------------------------
# Payment Router
# ---------------------------------------------------------------------------
payment_router = APIRouter(prefix="/payments", tags=["payments"])


@payment_router.post("/ready", response_model=ReadyPaymentResponse)
async def ready_payment(body: ReadyPaymentRequest) -> ReadyPaymentResponse:
    """Open a gateway transaction and return the redirect targets."""
    result = PaymentHandshake().initiate(body.order_id)
    if isinstance(result, HandshakeError):
        _raise_for(result)
    return ReadyPaymentResponse(
        tid=result.tid,
        next_redirect_pc_url=result.pc_url,
        next_redirect_mobile_url=result.mobile_url,
        next_redirect_app_url=result.app_url,
        android_app_scheme=result.android_app_scheme,
        ios_app_scheme=result.ios_app_scheme,
    )


@payment_router.get("/success", response_model=ApprovePaymentResponse)
async def payment_success(order_id: int | None = None, pg_token: str | None = None) -> ApprovePaymentResponse:
    """Gateway success callback."""
    result = PaymentHandshake().complete(order_id, pg_token)
    if isinstance(result, HandshakeError):
        _raise_for(result)
    return ApprovePaymentResponse(
        order_id=result.order_id,
        tid=result.tid,
        aid=result.aid,
        total_amount=result.total_amount,
        payment_method=result.method,
        approved_at=result.approved_at,
    )


@payment_router.get("/cancel", response_model=PaymentStatusResponse)
async def payment_cancel(order_id: int | None = None) -> PaymentStatusResponse:
    """Gateway cancel callback. The payment is left untouched."""
    result = PaymentHandshake().cancel(order_id)
    if isinstance(result, HandshakeError):
        _raise_for(result)
    return _status_response(result)


@payment_router.get("/fail", response_model=PaymentStatusResponse)
async def payment_fail(order_id: int | None = None, error_msg: str | None = None) -> PaymentStatusResponse:
    """Gateway fail callback."""
    result = PaymentHandshake().fail(order_id, error_msg)
    if isinstance(result, HandshakeError):
        _raise_for(result)
    return _status_response(result)


@payment_router.get("/status/{order_id}", response_model=PaymentStatusResponse)
async def payment_status(order_id: int) -> PaymentStatusResponse:
    return _status_response(PaymentHandshake().query(order_id))


@payment_router.post("/refund/{order_id}", response_model=RefundPaymentResponse)
async def refund_payment(order_id: int, body: RefundPaymentRequest) -> RefundPaymentResponse:
    result = PaymentHandshake().refund(order_id, body.cancel_amount)
    if isinstance(result, RefundError):
        _raise_for(result)
    return RefundPaymentResponse(
        tid=result.tid,
        canceled_amount=body.cancel_amount,
        remaining_amount=result.remaining_amount,
        status=result.status.value,
    )


@payment_router.post("/gateway/configure", response_model=GatewayConfigResponse)
async def configure_gateway(body: ConfigureGatewayRequest) -> GatewayConfigResponse:
    """Configure the FakeGateway behavior (non-production only).

    This endpoint is only available when PROTEAN_ENV is not 'production'.
    It allows toggling success/failure behavior for manual API testing.
    """
    if os.environ.get("PROTEAN_ENV") == "production":
        raise HTTPException(status_code=403, detail="Gateway configuration not available in production")

    gateway = get_gateway()
    if not isinstance(gateway, FakeGateway):
        raise HTTPException(status_code=400, detail="Gateway configuration only available for FakeGateway")

    gateway.configure(
        should_succeed=body.should_succeed,
        failure_reason=body.failure_reason,
        payment_method=body.payment_method,
    )
    return GatewayConfigResponse(
        gateway=type(gateway).__name__,
        should_succeed=gateway.should_succeed,
        failure_reason=gateway.failure_reason,
        payment_method=gateway.payment_method,
    )
