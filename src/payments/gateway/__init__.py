"""Payment gateway factory.

Provides get_gateway() / set_gateway() to swap implementations. The adapter
is chosen by the PAYMENT_GATEWAY environment variable; only the fake
gateway ships with this package.

PAYMENT_CALLBACK_BASE_URL is the public base of the payments API, used to
build the success/cancel/fail URLs the gateway redirects the buyer back to.
"""

import os

from payments.gateway.fake_adapter import FakeGateway
from payments.gateway.port import CallbackUrls, RedirectPaymentGateway

DEFAULT_CALLBACK_BASE_URL = "http://localhost:8000/payments"

_current_gateway: RedirectPaymentGateway | None = None


def _build_gateway(name: str) -> RedirectPaymentGateway:
    if name == "fake":
        return FakeGateway()
    raise ValueError(f"Unknown payment gateway: {name}")


def get_gateway() -> RedirectPaymentGateway:
    """Return the current payment gateway. Defaults to FakeGateway."""
    global _current_gateway
    if _current_gateway is None:
        _current_gateway = _build_gateway(os.environ.get("PAYMENT_GATEWAY", "fake"))
    return _current_gateway


def set_gateway(gateway: RedirectPaymentGateway) -> None:
    """Override the active payment gateway (useful for tests)."""
    global _current_gateway
    _current_gateway = gateway


def reset_gateway() -> None:
    """Reset to default gateway."""
    global _current_gateway
    _current_gateway = None


def callback_urls(order_id: int) -> CallbackUrls:
    base = os.environ.get("PAYMENT_CALLBACK_BASE_URL", DEFAULT_CALLBACK_BASE_URL).rstrip("/")
    return CallbackUrls(
        approval_url=f"{base}/success?order_id={order_id}",
        cancel_url=f"{base}/cancel?order_id={order_id}",
        fail_url=f"{base}/fail?order_id={order_id}",
    )
