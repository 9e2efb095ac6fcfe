"""Per-user state tracking for Locust load test scenarios.

Each Locust user instance maintains its own state, with no cross-user sharing.
State tracks the ids and amounts returned by earlier steps so follow-up
requests can reference them.
"""

from dataclasses import dataclass, field


@dataclass
class CheckoutState:
    """Tracks one order from placement through payment and refunds."""

    order_id: int | None = None
    total_amount: int = 0
    tids: list[str] = field(default_factory=list)
    payment_status: str = "pending"
    refunded_amount: int = 0

    @property
    def remaining_amount(self) -> int:
        return self.total_amount - self.refunded_amount
