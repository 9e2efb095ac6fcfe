"""Payment aggregate: settlement state of one order's redirect payment.

A payment is keyed by its order id and created the first time the buyer is
sent to the gateway. The aggregate is the only place the handshake's state
lives, so any process can pick up an interrupted flow by loading it.

State Machine:
    (none) → READY → COMPLETED → REFUNDED
    READY → FAILED → READY (new transaction)
    READY → READY (buyer retried after cancelling or abandoning)

PENDING is never persisted; it describes an order without a payment yet.
Partial refunds keep the payment COMPLETED until the whole amount is gone.
"""

from datetime import UTC, datetime
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, HasMany, Identifier, Integer, String

from payments.domain import payments
from payments.payment.events import PaymentApproved, PaymentFailed, PaymentReady, PaymentRefunded


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class PaymentStatus(Enum):
    PENDING = "pending"
    READY = "ready"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"


class PaymentMethod(Enum):
    CARD = "CARD"
    MONEY = "MONEY"


_VALID_TRANSITIONS = {
    PaymentStatus.READY: {PaymentStatus.READY, PaymentStatus.COMPLETED, PaymentStatus.FAILED},
    PaymentStatus.FAILED: {PaymentStatus.READY},
    PaymentStatus.COMPLETED: {PaymentStatus.REFUNDED},
    PaymentStatus.REFUNDED: set(),  # Terminal
}


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@payments.entity(part_of="Payment")
class Refund:
    """A confirmed cancellation of part of the payment."""

    amount = Integer(required=True, min_value=1)
    remaining_amount = Integer(required=True, min_value=0)
    canceled_at = DateTime(required=True)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@payments.aggregate
class Payment:
    order_id = Identifier(identifier=True)
    provider = String(max_length=50, required=True)
    tid = String(max_length=255, required=True)
    aid = String(max_length=255)
    status = String(choices=PaymentStatus, default=PaymentStatus.READY.value)
    method = String(choices=PaymentMethod)
    approved_at = DateTime()
    total_amount = Integer(required=True, min_value=0)
    refunded_amount = Integer(default=0, min_value=0)
    refunds = HasMany(Refund)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def refunds_cannot_exceed_total(self):
        if (self.refunded_amount or 0) > self.total_amount:
            raise ValidationError({"refunded_amount": ["Refunded amount cannot exceed the payment total"]})

    @invariant.post
    def approval_id_only_on_settled_payments(self):
        settled = self.status in (PaymentStatus.COMPLETED.value, PaymentStatus.REFUNDED.value)
        if settled and not self.aid:
            raise ValidationError({"aid": ["Completed payments must carry an approval id"]})
        if not settled and self.aid:
            raise ValidationError({"aid": ["Only completed payments carry an approval id"]})

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def open(cls, order_id, total_amount: int, tid: str, provider: str):
        """Create the payment for an order with its first gateway transaction."""
        now = datetime.now(UTC)
        payment = cls(
            order_id=str(order_id),
            provider=provider,
            tid=tid,
            status=PaymentStatus.READY.value,
            total_amount=total_amount,
            refunded_amount=0,
            created_at=now,
            updated_at=now,
        )
        payment.raise_(
            PaymentReady(
                order_id=str(payment.order_id),
                tid=tid,
                provider=provider,
                total_amount=total_amount,
                ready_at=now,
            )
        )
        return payment

    # -------------------------------------------------------------------
    # State transition helpers
    # -------------------------------------------------------------------
    def can_transition(self, target_status: PaymentStatus) -> bool:
        return target_status in _VALID_TRANSITIONS.get(PaymentStatus(self.status), set())

    def _assert_can_transition(self, target_status: PaymentStatus) -> None:
        if not self.can_transition(target_status):
            raise ValidationError(
                {"status": [f"Cannot transition from {PaymentStatus(self.status).value} to {target_status.value}"]}
            )

    @property
    def remaining_amount(self) -> int:
        return self.total_amount - (self.refunded_amount or 0)

    @property
    def order_number(self) -> int:
        return int(self.order_id)

    # -------------------------------------------------------------------
    # Handshake
    # -------------------------------------------------------------------
    def reopen(self, tid: str, total_amount: int) -> None:
        """Start a new gateway transaction for a payment that was not completed."""
        self._assert_can_transition(PaymentStatus.READY)
        now = datetime.now(UTC)
        with atomic_change(self):
            self.tid = tid
            self.total_amount = total_amount
            self.status = PaymentStatus.READY.value
            self.updated_at = now

        self.raise_(
            PaymentReady(
                order_id=str(self.order_id),
                tid=tid,
                provider=self.provider,
                total_amount=total_amount,
                ready_at=now,
            )
        )

    def approve(self, aid: str, payment_method: str | None, approved_at: datetime | None = None) -> None:
        self._assert_can_transition(PaymentStatus.COMPLETED)
        approved_at = approved_at or datetime.now(UTC)
        with atomic_change(self):
            self.aid = aid
            self.method = payment_method
            self.approved_at = approved_at
            self.status = PaymentStatus.COMPLETED.value
            self.updated_at = approved_at

        self.raise_(
            PaymentApproved(
                order_id=str(self.order_id),
                tid=self.tid,
                aid=aid,
                payment_method=payment_method,
                total_amount=self.total_amount,
                approved_at=approved_at,
            )
        )

    def fail(self, reason: str | None = None) -> None:
        self._assert_can_transition(PaymentStatus.FAILED)
        now = datetime.now(UTC)
        self.status = PaymentStatus.FAILED.value
        self.updated_at = now

        self.raise_(
            PaymentFailed(
                order_id=str(self.order_id),
                tid=self.tid,
                reason=(reason or "")[:500],
                failed_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Refunds
    # -------------------------------------------------------------------
    def assert_refundable(self, amount: int) -> None:
        """Raise ValidationError unless ``amount`` can be refunded right now."""
        if PaymentStatus(self.status) != PaymentStatus.COMPLETED:
            raise ValidationError({"status": ["Only completed payments can be refunded"]})
        if amount is None or amount <= 0:
            raise ValidationError({"amount": ["Refund amount must be positive"]})
        if amount > self.remaining_amount:
            raise ValidationError(
                {"amount": [f"Refund amount ({amount}) exceeds the remaining amount ({self.remaining_amount})"]}
            )

    def refund(self, amount: int, canceled_at: datetime | None = None) -> None:
        """Record a refund the gateway has already confirmed."""
        self.assert_refundable(amount)
        canceled_at = canceled_at or datetime.now(UTC)
        remaining = self.remaining_amount - amount

        with atomic_change(self):
            self.refunded_amount = (self.refunded_amount or 0) + amount
            self.add_refunds(Refund(amount=amount, remaining_amount=remaining, canceled_at=canceled_at))
            if remaining == 0:
                self.status = PaymentStatus.REFUNDED.value
            self.updated_at = canceled_at

        self.raise_(
            PaymentRefunded(
                order_id=str(self.order_id),
                tid=self.tid,
                amount=amount,
                remaining_amount=remaining,
                fully_refunded=remaining == 0,
                refunded_at=canceled_at,
            )
        )
