"""Payment refund: command and handler.

The gateway is asked first; the refund is only recorded on the Payment once
the gateway has confirmed it, so a refused cancellation changes nothing.
"""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, Integer
from protean.utils.globals import current_domain

from payments.domain import payments
from payments.gateway import get_gateway
from payments.payment.payment import Payment


@payments.command(part_of="Payment")
class RefundPayment:
    """Cancel part or all of an approved payment."""

    order_id = Identifier(required=True)
    amount = Integer(required=True)


@payments.command_handler(part_of=Payment)
class RefundHandler:
    @handle(RefundPayment)
    def refund_payment(self, command):
        repo = current_domain.repository_for(Payment)
        payment = repo.get(command.order_id)
        payment.assert_refundable(command.amount)

        result = get_gateway().cancel(tid=payment.tid, cancel_amount=command.amount)
        if not result.success:
            raise ValidationError({"gateway": [result.failure_reason or "Gateway refused the refund"]})

        payment.refund(command.amount, canceled_at=result.canceled_at)
        repo.add(payment)
        return result
