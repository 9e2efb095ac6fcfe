"""Order aggregate: the immutable result of a successful checkout.

An order is created exactly once per successful submission. Its items,
fulfillment target and total amount are locked at creation; only ``status``
may change afterwards, and that is owned by the order service rather than
the checkout client.

Order ids are positive integers (they travel in payment callback URLs), so
the repository allocates them instead of relying on generated UUIDs.
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, HasMany, Identifier, Integer, String, Text

from ordering.checkout.model import MAX_MEMO_LENGTH, FulfillmentMode
from ordering.domain import ordering
from ordering.order.events import OrderPlaced
from ordering.pricing.calculator import order_total


class OrderStatus(Enum):
    PENDING = "Pending"
    PAID = "Paid"
    CANCELLED = "Cancelled"
    REFUNDED = "Refunded"


@ordering.entity(part_of="Order")
class OrderItem:
    """A purchased line with the price snapshot it was charged at."""

    product_id = Integer(required=True)
    option_id = Integer()
    store_id = Integer()
    quantity = Integer(required=True, min_value=1)
    unit_price = Integer(required=True, min_value=0)
    option_surcharge = Integer(default=0, min_value=0)


@ordering.aggregate
class Order:
    id = Identifier(identifier=True)
    user_id = Identifier(required=True)
    fulfillment_type = String(choices=FulfillmentMode, required=True)
    shipping_address = Text()
    pickup_store_id = Integer()
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    total_amount = Integer(required=True, min_value=0)
    memo = String(max_length=MAX_MEMO_LENGTH)
    items = HasMany(OrderItem)
    created_at = DateTime()

    @invariant.post
    def fulfillment_target_must_match_type(self):
        if self.fulfillment_type == FulfillmentMode.DELIVERY.value and not self.shipping_address:
            raise ValidationError({"shipping_address": ["Delivery orders require a shipping address"]})
        if self.fulfillment_type == FulfillmentMode.PICKUP.value and not self.pickup_store_id:
            raise ValidationError({"pickup_store_id": ["Pickup orders require a pickup store"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def place(
        cls,
        order_id,
        user_id,
        fulfillment_type,
        items_data,
        shipping_address=None,
        pickup_store_id=None,
        memo="",
    ):
        """Create an order from a checkout payload.

        Args:
            order_id: Integer id allocated by the repository.
            user_id: The account placing the order.
            fulfillment_type: "delivery" or "pickup".
            items_data: List of dicts with product_id, quantity, option_id,
                        unit_price, option_surcharge, store_id.
            shipping_address: Composed address string (delivery only).
            pickup_store_id: Store to collect from (pickup only).
            memo: Optional note for the seller.
        """
        if not items_data:
            raise ValidationError({"items": ["An order needs at least one item"]})

        mode = FulfillmentMode(fulfillment_type)
        items = [
            OrderItem(
                product_id=item["product_id"],
                option_id=item.get("option_id"),
                store_id=item.get("store_id"),
                quantity=item["quantity"],
                unit_price=item["unit_price"],
                option_surcharge=item.get("option_surcharge") or 0,
            )
            for item in items_data
        ]
        now = datetime.now(UTC)

        order = cls(
            id=str(order_id),
            user_id=str(user_id),
            fulfillment_type=mode.value,
            shipping_address=shipping_address if mode == FulfillmentMode.DELIVERY else None,
            pickup_store_id=pickup_store_id if mode == FulfillmentMode.PICKUP else None,
            status=OrderStatus.PENDING.value,
            total_amount=order_total(items, mode),
            memo=memo or "",
            items=items,
            created_at=now,
        )

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                user_id=str(order.user_id),
                fulfillment_type=order.fulfillment_type,
                shipping_address=order.shipping_address,
                pickup_store_id=order.pickup_store_id,
                items=json.dumps(items_data),
                total_amount=order.total_amount,
                placed_at=now,
            )
        )
        return order

    @property
    def number(self) -> int:
        return int(self.id)


@ordering.repository(part_of=Order)
class OrderRepository:
    def next_order_id(self) -> int:
        """Next integer order id. Ids are never reused since orders are never deleted."""
        return self._dao.query.all().total + 1
