"""Redirect payment gateway port (abstract interface).

Defines the contract for redirect-style gateways: the merchant asks for a
transaction (``ready``), the buyer is sent to the gateway's own pages, the
gateway redirects back with a one-time token, and the merchant exchanges
that token for an approval (``approve``). Approved transactions can be
cancelled in full or in part (``cancel``).

Adapters never raise for a declined or failed call; they return a result
with ``success=False`` and a ``failure_reason``.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class CallbackUrls:
    """Where the gateway sends the buyer back to after each outcome."""

    approval_url: str
    cancel_url: str
    fail_url: str


@dataclass(frozen=True)
class ReadyResult:
    """Result of opening a gateway transaction."""

    success: bool
    tid: str | None = None
    redirect_pc_url: str | None = None
    redirect_mobile_url: str | None = None
    redirect_app_url: str | None = None
    android_app_scheme: str | None = None
    ios_app_scheme: str | None = None
    failure_reason: str | None = None


@dataclass(frozen=True)
class ApprovalResult:
    """Result of exchanging a callback token for an approval."""

    success: bool
    aid: str | None = None
    payment_method: str | None = None  # CARD or MONEY
    amount: int | None = None
    approved_at: datetime | None = None
    failure_reason: str | None = None


@dataclass(frozen=True)
class RefundResult:
    """Result of a (partial) cancellation."""

    success: bool
    canceled_amount: int | None = None
    remaining_amount: int | None = None
    canceled_at: datetime | None = None
    failure_reason: str | None = None


class RedirectPaymentGateway(ABC):
    """Abstract redirect payment gateway interface."""

    provider: str = "unknown"

    @abstractmethod
    def ready(
        self,
        order_id: int,
        item_name: str,
        quantity: int,
        total_amount: int,
        callbacks: CallbackUrls,
    ) -> ReadyResult:
        """Open a transaction and return where to redirect the buyer."""
        ...

    @abstractmethod
    def approve(self, tid: str, order_id: int, pg_token: str) -> ApprovalResult:
        """Confirm a transaction with the token the gateway redirected back with."""
        ...

    @abstractmethod
    def cancel(self, tid: str, cancel_amount: int) -> RefundResult:
        """Cancel ``cancel_amount`` of an approved transaction."""
        ...
