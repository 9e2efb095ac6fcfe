"""Configurable fake redirect gateway for development and testing.

This adapter simulates a redirect gateway without any external calls. It
keeps its own ledger of opened transactions so approvals and partial
cancellations behave like a real gateway's:
- approving an unknown transaction fails
- a transaction is approved at most once
- cancellations cannot exceed the approved amount

It can be configured at runtime to decline every call, making it useful for
manual API testing via /payments/gateway/configure and for tests.
"""

from datetime import UTC, datetime
from uuid import uuid4

from payments.gateway.port import ApprovalResult, CallbackUrls, ReadyResult, RedirectPaymentGateway, RefundResult


class FakeGateway(RedirectPaymentGateway):
    """Configurable fake redirect gateway."""

    provider = "fakepay"

    def __init__(self, redirect_base_url: str = "https://pay.example.test") -> None:
        self.redirect_base_url = redirect_base_url.rstrip("/")
        self.should_succeed: bool = True
        self.failure_reason: str = "Payment declined"
        self.payment_method: str = "CARD"
        self.calls: list[dict] = []
        self.transactions: dict[str, dict] = {}

    def configure(
        self,
        should_succeed: bool,
        failure_reason: str = "Payment declined",
        payment_method: str = "CARD",
    ) -> None:
        """Configure gateway behavior at runtime."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason
        self.payment_method = payment_method

    def ready(
        self,
        order_id: int,
        item_name: str,
        quantity: int,
        total_amount: int,
        callbacks: CallbackUrls,
    ) -> ReadyResult:
        self.calls.append(
            {
                "method": "ready",
                "order_id": order_id,
                "item_name": item_name,
                "quantity": quantity,
                "total_amount": total_amount,
                "callbacks": callbacks,
            }
        )

        if not self.should_succeed:
            return ReadyResult(success=False, failure_reason=self.failure_reason)

        tid = f"T{uuid4().hex[:18].upper()}"
        self.transactions[tid] = {
            "order_id": order_id,
            "amount": total_amount,
            "approved": False,
            "canceled": 0,
            "callbacks": callbacks,
        }
        return ReadyResult(
            success=True,
            tid=tid,
            redirect_pc_url=f"{self.redirect_base_url}/online/v1/payment/{tid}/info",
            redirect_mobile_url=f"{self.redirect_base_url}/mockup/v1/{tid}/info",
            redirect_app_url=f"{self.redirect_base_url}/app/v1/{tid}/info",
            android_app_scheme=f"fakepay://pay?tid={tid}",
            ios_app_scheme=f"fakepay://pay?tid={tid}",
        )

    def approve(self, tid: str, order_id: int, pg_token: str) -> ApprovalResult:
        self.calls.append({"method": "approve", "tid": tid, "order_id": order_id, "pg_token": pg_token})

        if not self.should_succeed:
            return ApprovalResult(success=False, failure_reason=self.failure_reason)

        transaction = self.transactions.get(tid)
        if transaction is None or transaction["order_id"] != order_id:
            return ApprovalResult(success=False, failure_reason="Unknown transaction")
        if transaction["approved"]:
            return ApprovalResult(success=False, failure_reason="Transaction already approved")

        transaction["approved"] = True
        return ApprovalResult(
            success=True,
            aid=f"A{uuid4().hex[:18].upper()}",
            payment_method=self.payment_method,
            amount=transaction["amount"],
            approved_at=datetime.now(UTC),
        )

    def cancel(self, tid: str, cancel_amount: int) -> RefundResult:
        self.calls.append({"method": "cancel", "tid": tid, "cancel_amount": cancel_amount})

        if not self.should_succeed:
            return RefundResult(success=False, failure_reason=self.failure_reason)

        transaction = self.transactions.get(tid)
        if transaction is None or not transaction["approved"]:
            return RefundResult(success=False, failure_reason="Transaction is not approved")

        remaining = transaction["amount"] - transaction["canceled"]
        if cancel_amount > remaining:
            return RefundResult(success=False, failure_reason="Cancel amount exceeds the remaining amount")

        transaction["canceled"] += cancel_amount
        return RefundResult(
            success=True,
            canceled_amount=cancel_amount,
            remaining_amount=remaining - cancel_amount,
            canceled_at=datetime.now(UTC),
        )
