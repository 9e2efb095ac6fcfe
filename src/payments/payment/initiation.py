"""Payment initiation: command and handler.

Opens a gateway transaction for an order and moves its Payment to READY,
creating the Payment on first use.
"""

from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Identifier, Integer, String
from protean.utils.globals import current_domain

from payments.domain import payments
from payments.gateway import callback_urls, get_gateway
from payments.payment.payment import Payment, PaymentStatus


@payments.command(part_of="Payment")
class ReadyPayment:
    """Open a new gateway transaction for an order."""

    order_id = Identifier(required=True)
    total_amount = Integer(required=True, min_value=0)
    item_name = String(required=True, max_length=100)
    quantity = Integer(default=1, min_value=1)


@payments.command_handler(part_of=Payment)
class ReadyPaymentHandler:
    @handle(ReadyPayment)
    def ready_payment(self, command):
        repo = current_domain.repository_for(Payment)
        try:
            payment = repo.get(command.order_id)
        except ObjectNotFoundError:
            payment = None

        if payment is not None and not payment.can_transition(PaymentStatus.READY):
            raise ValidationError({"status": [f"Payment for order {command.order_id} is already {payment.status}"]})

        order_id = int(command.order_id)
        gateway = get_gateway()
        result = gateway.ready(
            order_id=order_id,
            item_name=command.item_name,
            quantity=command.quantity,
            total_amount=command.total_amount,
            callbacks=callback_urls(order_id),
        )
        if not result.success:
            raise ValidationError({"gateway": [result.failure_reason or "Gateway did not open a transaction"]})

        if payment is None:
            payment = Payment.open(
                order_id=command.order_id,
                total_amount=command.total_amount,
                tid=result.tid,
                provider=gateway.provider,
            )
        else:
            payment.reopen(tid=result.tid, total_amount=command.total_amount)

        repo.add(payment)
        return result
