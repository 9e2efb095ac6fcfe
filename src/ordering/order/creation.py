"""Order placement: command and handler."""

import json

from protean import handle
from protean.fields import Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.order.order import MAX_MEMO_LENGTH, Order


@ordering.command(part_of="Order")
class PlaceOrder:
    user_id = Identifier(required=True)
    fulfillment_type = String(required=True, max_length=20)
    items = Text(required=True)  # JSON: list of item dicts
    shipping_address = Text()
    pickup_store_id = Integer()
    memo = String(max_length=MAX_MEMO_LENGTH)


@ordering.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        items_data = json.loads(command.items) if isinstance(command.items, str) else command.items

        repo = current_domain.repository_for(Order)
        order = Order.place(
            order_id=repo.next_order_id(),
            user_id=command.user_id,
            fulfillment_type=command.fulfillment_type,
            items_data=items_data,
            shipping_address=command.shipping_address,
            pickup_store_id=command.pickup_store_id,
            memo=command.memo,
        )
        repo.add(order)
        return order.number
