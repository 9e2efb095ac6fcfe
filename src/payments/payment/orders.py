"""Order lookup port for the payments context.

Payments needs the amount and a short description of the order it settles,
nothing more. The default adapter reads the ordering context's Order
aggregate; tests swap in FakeOrderLookup through set_order_lookup().
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from protean.exceptions import ObjectNotFoundError


@dataclass(frozen=True)
class OrderSummary:
    order_id: int
    total_amount: int
    item_name: str
    quantity: int


class OrderLookup(ABC):
    @abstractmethod
    def get(self, order_id: int) -> OrderSummary | None:
        """Return the order's summary, or None when no such order exists."""
        ...

    def get_total(self, order_id: int) -> int | None:
        summary = self.get(order_id)
        return summary.total_amount if summary else None


class OrderingLookup(OrderLookup):
    """Reads orders from the ordering domain's repository."""

    def get(self, order_id: int) -> OrderSummary | None:
        from ordering.domain import ordering
        from ordering.order.order import Order

        with ordering.domain_context():
            try:
                order = ordering.repository_for(Order).get(str(order_id))
            except ObjectNotFoundError:
                return None
            quantity = sum(item.quantity for item in order.items)

        return OrderSummary(
            order_id=order.number,
            total_amount=order.total_amount,
            item_name=f"Order #{order.number}",
            quantity=quantity,
        )


class FakeOrderLookup(OrderLookup):
    def __init__(self) -> None:
        self.orders: dict[int, OrderSummary] = {}

    def add(self, order_id: int, total_amount: int, item_name: str | None = None, quantity: int = 1) -> OrderSummary:
        summary = OrderSummary(
            order_id=order_id,
            total_amount=total_amount,
            item_name=item_name or f"Order #{order_id}",
            quantity=quantity,
        )
        self.orders[order_id] = summary
        return summary

    def get(self, order_id: int) -> OrderSummary | None:
        return self.orders.get(order_id)


_current_lookup: OrderLookup | None = None


def get_order_lookup() -> OrderLookup:
    global _current_lookup
    if _current_lookup is None:
        _current_lookup = OrderingLookup()
    return _current_lookup


def set_order_lookup(lookup: OrderLookup) -> None:
    global _current_lookup
    _current_lookup = lookup


def reset_order_lookup() -> None:
    global _current_lookup
    _current_lookup = None
