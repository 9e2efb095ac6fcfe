"""In-memory collaborator adapters for development and testing.

Each fake can be configured at runtime to fail its mutating calls, and
records every call it receives so tests can assert on traffic.
"""

from dataclasses import replace
from datetime import UTC, datetime

from ordering.checkout.model import CheckoutEntry
from ordering.collaborators.port import (
    Address,
    AddressBook,
    AddressFields,
    CartService,
    CollaboratorError,
    OrderPayload,
    OrderService,
    OrderServiceError,
    PlacedOrder,
)
from ordering.pricing.calculator import order_total


class FakeCartService(CartService):
    """Cart held in memory. Reads always succeed; mutations honour ``configure``."""

    def __init__(self, entries: list[CheckoutEntry] | None = None) -> None:
        self._entries: dict[int, CheckoutEntry] = {e.line_id: e for e in entries or []}
        self.should_succeed: bool = True
        self.failure_reason: str = "Cart service unavailable"
        self.calls: list[dict] = []

    def configure(self, should_succeed: bool, failure_reason: str = "Cart service unavailable") -> None:
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def _check(self) -> None:
        if not self.should_succeed:
            raise CollaboratorError(self.failure_reason)

    def get_cart(self) -> list[CheckoutEntry]:
        self.calls.append({"method": "get_cart"})
        return list(self._entries.values())

    def update_quantity(self, line_id: int, quantity: int) -> CheckoutEntry:
        self.calls.append({"method": "update_quantity", "line_id": line_id, "quantity": quantity})
        self._check()
        entry = self._entries.get(line_id)
        if entry is None:
            raise CollaboratorError(f"Cart line {line_id} not found")
        updated = entry.with_quantity(quantity)
        self._entries[line_id] = updated
        return updated

    def remove_item(self, line_id: int) -> None:
        self.calls.append({"method": "remove_item", "line_id": line_id})
        self._check()
        if line_id not in self._entries:
            raise CollaboratorError(f"Cart line {line_id} not found")
        del self._entries[line_id]

    def clear(self) -> None:
        self.calls.append({"method": "clear"})
        self._check()
        self._entries.clear()


class FakeAddressBook(AddressBook):
    def __init__(self, addresses: list[Address] | None = None) -> None:
        self._addresses: list[Address] = list(addresses or [])
        self.should_succeed: bool = True
        self.failure_reason: str = "Address book unavailable"
        self.calls: list[dict] = []

    def configure(self, should_succeed: bool, failure_reason: str = "Address book unavailable") -> None:
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def list_addresses(self) -> list[Address]:
        self.calls.append({"method": "list_addresses"})
        return list(self._addresses)

    def create(self, fields: AddressFields) -> Address:
        self.calls.append({"method": "create", "fields": fields})
        if not self.should_succeed:
            raise CollaboratorError(self.failure_reason)

        next_id = max((a.id for a in self._addresses), default=0) + 1
        # First address is always default
        is_default = fields.is_default or not self._addresses
        if is_default:
            self._addresses = [replace(a, is_default=False) for a in self._addresses]

        address = Address(
            id=next_id,
            label=fields.label,
            recipient=fields.recipient,
            phone=fields.phone,
            zip_code=fields.zip_code,
            address_line1=fields.address_line1,
            address_line2=fields.address_line2,
            is_default=is_default,
        )
        self._addresses.append(address)
        return address


class FakeOrderService(OrderService):
    """Order service that keeps placed orders in a dict keyed by integer id."""

    def __init__(self, user_id: str = "user-001") -> None:
        self.user_id = user_id
        self.orders: dict[int, PlacedOrder] = {}
        self.should_succeed: bool = True
        self.failure_reason: str = "Order service unavailable"
        self.calls: list[dict] = []

    def configure(self, should_succeed: bool, failure_reason: str = "Order service unavailable") -> None:
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def create(self, payload: OrderPayload) -> PlacedOrder:
        self.calls.append({"method": "create", "payload": payload})
        if not self.should_succeed:
            raise OrderServiceError(self.failure_reason)

        order = PlacedOrder(
            id=len(self.orders) + 1,
            user_id=self.user_id,
            fulfillment_type=payload.fulfillment_type,
            status="Pending",
            total_amount=order_total(payload.items, payload.fulfillment_type),
            created_at=datetime.now(UTC),
            shipping_address=payload.shipping_address,
            pickup_store_id=payload.pickup_store_id,
        )
        self.orders[order.id] = order
        return order

    def get(self, order_id: int) -> PlacedOrder:
        self.calls.append({"method": "get", "order_id": order_id})
        try:
            return self.orders[order_id]
        except KeyError:
            raise OrderServiceError(f"Order {order_id} not found") from None
