"""Tests for the PaymentHandshake facade.

The facade keeps no state of its own, so several tests deliberately use a
fresh PaymentHandshake per step to show a flow resumes from the repository.
"""

from payments.payment.handshake import (
    HandshakeError,
    HandshakeErrorCode,
    PaymentHandshake,
    PaymentView,
    RedirectTargets,
    RefundError,
    RefundErrorCode,
    cancel_payment,
    complete_payment,
    fail_payment,
    initiate_payment,
    query_payment,
    refund_payment,
)
from payments.payment.payment import PaymentStatus


class TestInitiate:
    def test_initiate_returns_redirect_targets(self, gateway, order_lookup):
        targets = PaymentHandshake().initiate(42)
        assert isinstance(targets, RedirectTargets)
        assert targets.order_id == 42
        assert targets.tid in gateway.transactions
        assert targets.pc_url is not None
        assert targets.mobile_url is not None
        assert targets.app_url is not None

    def test_initiate_uses_order_summary(self, gateway, order_lookup):
        PaymentHandshake().initiate(42)
        call = gateway.calls[0]
        assert call["total_amount"] == 23000
        assert call["item_name"] == "Ceramic mug and 1 more"
        assert call["quantity"] == 3

    def test_unknown_order(self, gateway, order_lookup):
        error = PaymentHandshake().initiate(7)
        assert isinstance(error, HandshakeError)
        assert error.code == HandshakeErrorCode.ORDER_NOT_FOUND
        assert gateway.calls == []

    def test_gateway_failure_is_reported_without_its_reason(self, gateway, order_lookup):
        gateway.configure(should_succeed=False, failure_reason="merchant key revoked")
        error = PaymentHandshake().initiate(42)
        assert error.code == HandshakeErrorCode.GATEWAY_UNAVAILABLE
        assert "merchant key revoked" not in error.message
        assert query_payment(42).status == PaymentStatus.PENDING

    def test_completed_payment_cannot_be_initiated(self, gateway, order_lookup):
        handshake = PaymentHandshake()
        handshake.initiate(42)
        handshake.complete(42, "pg-1")
        error = handshake.initiate(42)
        assert error.code == HandshakeErrorCode.INVALID_HANDSHAKE_STATE


class TestComplete:
    def test_successful_flow(self, gateway, order_lookup):
        PaymentHandshake().initiate(42)
        view = PaymentHandshake().complete(42, "pg-1")
        assert isinstance(view, PaymentView)
        assert view.status == PaymentStatus.COMPLETED
        assert view.aid is not None
        assert view.method == "CARD"
        assert view.approved_at is not None

    def test_missing_order_id(self, gateway, order_lookup):
        error = PaymentHandshake().complete(None, "pg-1")
        assert error.code == HandshakeErrorCode.MISSING_CALLBACK_PARAMETER
        assert gateway.calls == []

    def test_missing_token(self, gateway, order_lookup):
        PaymentHandshake().initiate(42)
        error = PaymentHandshake().complete(42, "")
        assert error.code == HandshakeErrorCode.MISSING_CALLBACK_PARAMETER
        assert query_payment(42).status == PaymentStatus.READY

    def test_complete_without_initiate(self, gateway, order_lookup):
        error = PaymentHandshake().complete(42, "pg-1")
        assert error.code == HandshakeErrorCode.INVALID_HANDSHAKE_STATE

    def test_second_success_callback_is_rejected(self, gateway, order_lookup):
        PaymentHandshake().initiate(42)
        first = PaymentHandshake().complete(42, "pg-1")
        error = PaymentHandshake().complete(42, "pg-1")
        assert error.code == HandshakeErrorCode.INVALID_HANDSHAKE_STATE
        assert query_payment(42).aid == first.aid

    def test_declined_approval(self, gateway, order_lookup):
        PaymentHandshake().initiate(42)
        gateway.configure(should_succeed=False, failure_reason="Insufficient balance")
        error = PaymentHandshake().complete(42, "pg-1")
        assert error.code == HandshakeErrorCode.APPROVAL_FAILED
        assert "Insufficient balance" not in error.message
        assert query_payment(42).status == PaymentStatus.FAILED


class TestCancelAndFail:
    def test_cancel_leaves_payment_unchanged(self, gateway, order_lookup):
        targets = initiate_payment(42)
        view = cancel_payment(42)
        assert view.status == PaymentStatus.READY
        assert view.tid == targets.tid

    def test_cancel_then_initiate_again(self, gateway, order_lookup):
        first = initiate_payment(42)
        cancel_payment(42)
        second = initiate_payment(42)
        assert second.tid != first.tid
        assert query_payment(42).tid == second.tid

    def test_cancel_without_order_id(self, gateway, order_lookup):
        assert cancel_payment(None).code == HandshakeErrorCode.MISSING_CALLBACK_PARAMETER

    def test_fail_marks_failed(self, gateway, order_lookup):
        initiate_payment(42)
        view = fail_payment(42, "user aborted")
        assert view.status == PaymentStatus.FAILED

    def test_fail_twice_is_idempotent(self, gateway, order_lookup):
        initiate_payment(42)
        fail_payment(42)
        view = fail_payment(42)
        assert view.status == PaymentStatus.FAILED

    def test_fail_without_payment(self, gateway, order_lookup):
        assert fail_payment(42).code == HandshakeErrorCode.INVALID_HANDSHAKE_STATE

    def test_failed_payment_can_be_retried(self, gateway, order_lookup):
        first = initiate_payment(42)
        fail_payment(42)
        second = initiate_payment(42)
        assert second.tid != first.tid
        view = complete_payment(42, "pg-2")
        assert view.status == PaymentStatus.COMPLETED


class TestQuery:
    def test_order_without_payment_is_pending(self, gateway, order_lookup):
        view = query_payment(42)
        assert view.status == PaymentStatus.PENDING
        assert view.total_amount == 23000
        assert view.tid is None

    def test_unknown_order_is_pending_without_amount(self, gateway, order_lookup):
        view = query_payment(7)
        assert view.status == PaymentStatus.PENDING
        assert view.total_amount is None

    def test_query_has_no_side_effects(self, gateway, order_lookup):
        initiate_payment(42)
        calls = len(gateway.calls)
        assert query_payment(42) == query_payment(42)
        assert len(gateway.calls) == calls


class TestRefund:
    def _complete(self):
        initiate_payment(42)
        complete_payment(42, "pg-1")

    def test_partial_then_full_refund(self, gateway, order_lookup):
        self._complete()
        view = refund_payment(42, 10000)
        assert view.status == PaymentStatus.COMPLETED
        assert view.refunded_amount == 10000
        assert view.remaining_amount == 13000

        view = refund_payment(42, 13000)
        assert view.status == PaymentStatus.REFUNDED
        assert view.remaining_amount == 0

    def test_refund_above_remaining(self, gateway, order_lookup):
        self._complete()
        refund_payment(42, 20000)
        error = refund_payment(42, 5000)
        assert isinstance(error, RefundError)
        assert error.code == RefundErrorCode.INVALID_REFUND_AMOUNT
        assert query_payment(42).refunded_amount == 20000

    def test_zero_refund(self, gateway, order_lookup):
        self._complete()
        assert refund_payment(42, 0).code == RefundErrorCode.INVALID_REFUND_AMOUNT

    def test_refund_before_completion(self, gateway, order_lookup):
        initiate_payment(42)
        assert refund_payment(42, 1000).code == RefundErrorCode.INVALID_REFUND_STATE

    def test_refund_of_unpaid_order(self, gateway, order_lookup):
        assert query_payment(42).status == PaymentStatus.PENDING
        error = refund_payment(42, 1000)
        assert error.code == RefundErrorCode.INVALID_REFUND_STATE
        assert gateway.calls == []

    def test_gateway_rejection(self, gateway, order_lookup):
        self._complete()
        gateway.configure(should_succeed=False, failure_reason="Settlement locked")
        error = refund_payment(42, 1000)
        assert error.code == RefundErrorCode.GATEWAY_REJECTED
        assert "Settlement locked" not in error.message
        assert query_payment(42).refunded_amount == 0
