"""Payment handshake: the redirect payment flow of one order.

    initiate()  ready a gateway transaction, hand back redirect targets
    complete()  success callback: exchange the token for an approval
    cancel()    cancel callback: the buyer backed out, nothing changes
    fail()      fail callback: the transaction is marked failed
    query()     current status, without side effects
    refund()    cancel part or all of a completed payment

The facade keeps no state of its own. Every call goes through the Payment
repository, so a new PaymentHandshake (or a restarted process) continues
wherever the previous one left off. Calls must run inside the payments
domain context.

Results are typed values rather than exceptions: callers get a
PaymentView / RedirectTargets on success and a HandshakeError / RefundError
otherwise. Gateway failure reasons are logged, never returned.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

import structlog
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain

from payments.payment.approval import ApprovePayment, FailPayment
from payments.payment.initiation import ReadyPayment
from payments.payment.orders import OrderLookup, get_order_lookup
from payments.payment.payment import Payment, PaymentStatus
from payments.payment.refund import RefundPayment

logger = structlog.get_logger(__name__)


class HandshakeErrorCode(Enum):
    MISSING_CALLBACK_PARAMETER = "MissingCallbackParameter"
    APPROVAL_FAILED = "ApprovalFailed"
    INVALID_HANDSHAKE_STATE = "InvalidHandshakeState"
    ORDER_NOT_FOUND = "OrderNotFound"
    GATEWAY_UNAVAILABLE = "GatewayUnavailable"


class RefundErrorCode(Enum):
    INVALID_REFUND_STATE = "InvalidRefundState"
    INVALID_REFUND_AMOUNT = "InvalidRefundAmount"
    GATEWAY_REJECTED = "GatewayRejected"


@dataclass(frozen=True)
class HandshakeError:
    code: HandshakeErrorCode
    message: str


@dataclass(frozen=True)
class RefundError:
    code: RefundErrorCode
    message: str


@dataclass(frozen=True)
class RedirectTargets:
    """Where to send the buyer to approve the payment."""

    order_id: int
    tid: str
    pc_url: str | None
    mobile_url: str | None
    app_url: str | None
    android_app_scheme: str | None
    ios_app_scheme: str | None


@dataclass(frozen=True)
class PaymentView:
    order_id: int
    status: PaymentStatus
    total_amount: int | None
    provider: str | None = None
    tid: str | None = None
    aid: str | None = None
    method: str | None = None
    approved_at: datetime | None = None
    refunded_amount: int = 0

    @property
    def remaining_amount(self) -> int | None:
        if self.total_amount is None:
            return None
        return self.total_amount - self.refunded_amount

    @classmethod
    def from_payment(cls, payment: Payment) -> "PaymentView":
        return cls(
            order_id=payment.order_number,
            status=PaymentStatus(payment.status),
            total_amount=payment.total_amount,
            provider=payment.provider,
            tid=payment.tid,
            aid=payment.aid,
            method=payment.method,
            approved_at=payment.approved_at,
            refunded_amount=payment.refunded_amount or 0,
        )

    @classmethod
    def pending(cls, order_id: int, total_amount: int | None) -> "PaymentView":
        return cls(order_id=order_id, status=PaymentStatus.PENDING, total_amount=total_amount)


def _missing(name: str) -> HandshakeError:
    return HandshakeError(HandshakeErrorCode.MISSING_CALLBACK_PARAMETER, f"Missing callback parameter: {name}")


def _first_message(exc: ValidationError) -> str:
    for messages in exc.messages.values():
        if messages:
            return messages[0]
    return "Invalid request"


class PaymentHandshake:
    def __init__(self, order_lookup: OrderLookup | None = None) -> None:
        self.order_lookup = order_lookup or get_order_lookup()

    def initiate(self, order_id: int) -> RedirectTargets | HandshakeError:
        summary = self.order_lookup.get(order_id)
        if summary is None:
            return HandshakeError(HandshakeErrorCode.ORDER_NOT_FOUND, f"Order {order_id} not found")

        try:
            result = current_domain.process(
                ReadyPayment(
                    order_id=str(order_id),
                    total_amount=summary.total_amount,
                    item_name=summary.item_name,
                    quantity=summary.quantity,
                ),
                asynchronous=False,
            )
        except ValidationError as exc:
            if "gateway" in exc.messages:
                logger.warning("Gateway ready failed", order_id=order_id, reason=_first_message(exc))
                return HandshakeError(
                    HandshakeErrorCode.GATEWAY_UNAVAILABLE, "Payment could not be started. Please try again."
                )
            return HandshakeError(HandshakeErrorCode.INVALID_HANDSHAKE_STATE, _first_message(exc))

        logger.info("Payment ready", order_id=order_id, tid=result.tid, total_amount=summary.total_amount)
        return RedirectTargets(
            order_id=order_id,
            tid=result.tid,
            pc_url=result.redirect_pc_url,
            mobile_url=result.redirect_mobile_url,
            app_url=result.redirect_app_url,
            android_app_scheme=result.android_app_scheme,
            ios_app_scheme=result.ios_app_scheme,
        )

    def complete(self, order_id: int | None, pg_token: str | None) -> PaymentView | HandshakeError:
        if order_id is None:
            return _missing("order_id")
        if not pg_token:
            return _missing("pg_token")

        try:
            result = current_domain.process(
                ApprovePayment(order_id=str(order_id), pg_token=pg_token),
                asynchronous=False,
            )
        except ObjectNotFoundError:
            return HandshakeError(
                HandshakeErrorCode.INVALID_HANDSHAKE_STATE, f"No payment in progress for order {order_id}"
            )
        except ValidationError as exc:
            return HandshakeError(HandshakeErrorCode.INVALID_HANDSHAKE_STATE, _first_message(exc))

        if not result.success:
            logger.warning("Payment approval declined", order_id=order_id, reason=result.failure_reason)
            return HandshakeError(HandshakeErrorCode.APPROVAL_FAILED, "The payment was not approved.")

        logger.info("Payment approved", order_id=order_id, aid=result.aid, method=result.payment_method)
        return self.query(order_id)

    def cancel(self, order_id: int | None) -> PaymentView | HandshakeError:
        """The buyer cancelled on the gateway's page. The payment stays as it was."""
        if order_id is None:
            return _missing("order_id")
        logger.info("Payment cancelled by buyer", order_id=order_id)
        return self.query(order_id)

    def fail(self, order_id: int | None, error_message: str | None = None) -> PaymentView | HandshakeError:
        if order_id is None:
            return _missing("order_id")

        logger.warning("Gateway reported payment failure", order_id=order_id, error_message=error_message)
        try:
            current_domain.process(FailPayment(order_id=str(order_id), reason=error_message), asynchronous=False)
        except ObjectNotFoundError:
            return HandshakeError(
                HandshakeErrorCode.INVALID_HANDSHAKE_STATE, f"No payment in progress for order {order_id}"
            )
        except ValidationError as exc:
            return HandshakeError(HandshakeErrorCode.INVALID_HANDSHAKE_STATE, _first_message(exc))
        return self.query(order_id)

    def query(self, order_id: int) -> PaymentView:
        try:
            payment = current_domain.repository_for(Payment).get(str(order_id))
        except ObjectNotFoundError:
            return PaymentView.pending(order_id, self.order_lookup.get_total(order_id))
        return PaymentView.from_payment(payment)

    def refund(self, order_id: int, amount: int) -> PaymentView | RefundError:
        try:
            result = current_domain.process(
                RefundPayment(order_id=str(order_id), amount=amount),
                asynchronous=False,
            )
        except ObjectNotFoundError:
            return RefundError(RefundErrorCode.INVALID_REFUND_STATE, f"Order {order_id} has not been paid")
        except ValidationError as exc:
            messages = exc.messages
            if "gateway" in messages:
                logger.warning("Gateway refused refund", order_id=order_id, amount=amount, reason=_first_message(exc))
                return RefundError(RefundErrorCode.GATEWAY_REJECTED, "The refund was refused by the payment provider.")
            if "amount" in messages:
                return RefundError(RefundErrorCode.INVALID_REFUND_AMOUNT, _first_message(exc))
            return RefundError(RefundErrorCode.INVALID_REFUND_STATE, _first_message(exc))

        logger.info(
            "Payment refunded",
            order_id=order_id,
            amount=result.canceled_amount,
            remaining_amount=result.remaining_amount,
        )
        return self.query(order_id)


# ---------------------------------------------------------------------------
# Module-level helpers
# ---------------------------------------------------------------------------
def initiate_payment(order_id: int) -> RedirectTargets | HandshakeError:
    return PaymentHandshake().initiate(order_id)


def complete_payment(order_id: int | None, pg_token: str | None) -> PaymentView | HandshakeError:
    return PaymentHandshake().complete(order_id, pg_token)


def cancel_payment(order_id: int | None) -> PaymentView | HandshakeError:
    return PaymentHandshake().cancel(order_id)


def fail_payment(order_id: int | None, error_message: str | None = None) -> PaymentView | HandshakeError:
    return PaymentHandshake().fail(order_id, error_message)


def query_payment(order_id: int) -> PaymentView:
    return PaymentHandshake().query(order_id)


def refund_payment(order_id: int, amount: int) -> PaymentView | RefundError:
    return PaymentHandshake().refund(order_id, amount)
