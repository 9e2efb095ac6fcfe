"""Domain events for the Payment aggregate.

All events are versioned, immutable facts representing payment state
changes. They are keyed by the order id, since a payment belongs to exactly
one order.
"""

from protean.fields import Boolean, DateTime, Identifier, Integer, String

from payments.domain import payments


@payments.event(part_of="Payment")
class PaymentReady:
    """A gateway transaction was opened and the buyer can be redirected."""

    __version__ = 1

    order_id = Identifier(required=True)
    tid = String(required=True)
    provider = String(required=True)
    total_amount = Integer(required=True)
    ready_at = DateTime(required=True)


@payments.event(part_of="Payment")
class PaymentApproved:
    """The gateway approved the transaction; the order is paid."""

    __version__ = 1

    order_id = Identifier(required=True)
    tid = String(required=True)
    aid = String(required=True)
    payment_method = String()
    total_amount = Integer(required=True)
    approved_at = DateTime(required=True)


@payments.event(part_of="Payment")
class PaymentFailed:
    """The gateway reported a failure, or refused the approval."""

    __version__ = 1

    order_id = Identifier(required=True)
    tid = String(required=True)
    reason = String(max_length=500)
    failed_at = DateTime(required=True)


@payments.event(part_of="Payment")
class PaymentRefunded:
    """Part or all of an approved payment was cancelled at the gateway."""

    __version__ = 1

    order_id = Identifier(required=True)
    tid = String(required=True)
    amount = Integer(required=True)
    remaining_amount = Integer(required=True)
    fully_refunded = Boolean(default=False)
    refunded_at = DateTime(required=True)
