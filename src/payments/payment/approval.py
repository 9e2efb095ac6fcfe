"""Payment approval: commands and handler.

Handles the gateway's success and fail callbacks. A declined approval is a
regular outcome: the payment is moved to FAILED and persisted, and the
gateway's result is returned to the caller.
"""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from payments.domain import payments
from payments.gateway import get_gateway
from payments.payment.payment import Payment, PaymentStatus


@payments.command(part_of="Payment")
class ApprovePayment:
    """Exchange the callback token for an approval."""

    order_id = Identifier(required=True)
    pg_token = String(required=True, max_length=255)


@payments.command(part_of="Payment")
class FailPayment:
    """Record a failure reported by the gateway's fail callback."""

    order_id = Identifier(required=True)
    reason = String(max_length=500)


@payments.command_handler(part_of=Payment)
class ApprovalHandler:
    @handle(ApprovePayment)
    def approve_payment(self, command):
        repo = current_domain.repository_for(Payment)
        payment = repo.get(command.order_id)
        if not payment.can_transition(PaymentStatus.COMPLETED):
            raise ValidationError({"status": [f"Payment for order {command.order_id} is {payment.status}, not ready"]})

        result = get_gateway().approve(
            tid=payment.tid,
            order_id=int(command.order_id),
            pg_token=command.pg_token,
        )
        if result.success:
            payment.approve(
                aid=result.aid,
                payment_method=result.payment_method,
                approved_at=result.approved_at,
            )
        else:
            payment.fail(result.failure_reason)

        repo.add(payment)
        return result

    @handle(FailPayment)
    def fail_payment(self, command):
        repo = current_domain.repository_for(Payment)
        payment = repo.get(command.order_id)
        if payment.status == PaymentStatus.FAILED.value:
            return
        payment.fail(command.reason)
        repo.add(payment)
