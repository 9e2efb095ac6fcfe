"""Order service adapter backed by the ordering domain's own Order aggregate."""

import json

import structlog
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain

from ordering.checkout.model import FulfillmentMode
from ordering.collaborators.port import OrderPayload, OrderService, OrderServiceError, PlacedOrder
from ordering.order.creation import PlaceOrder
from ordering.order.order import Order

logger = structlog.get_logger(__name__)


def to_placed_order(order: Order) -> PlacedOrder:
    return PlacedOrder(
        id=order.number,
        user_id=str(order.user_id),
        fulfillment_type=FulfillmentMode(order.fulfillment_type),
        status=order.status,
        total_amount=order.total_amount,
        created_at=order.created_at,
        shipping_address=order.shipping_address,
        pickup_store_id=order.pickup_store_id,
    )


class DomainOrderService(OrderService):
    """Places orders through the PlaceOrder command in the active ordering context."""

    def __init__(self, user_id: str | None = None) -> None:
        self.user_id = user_id

    def create(self, payload: OrderPayload) -> PlacedOrder:
        items = [
            {
                "product_id": line.product_id,
                "quantity": line.quantity,
                "option_id": line.option_id,
                "unit_price": line.unit_price,
                "option_surcharge": line.option_surcharge,
                "store_id": line.store_id,
            }
            for line in payload.items
        ]
        try:
            order_id = current_domain.process(
                PlaceOrder(
                    user_id=self.user_id,
                    fulfillment_type=payload.fulfillment_type.value,
                    items=json.dumps(items),
                    shipping_address=payload.shipping_address,
                    pickup_store_id=payload.pickup_store_id,
                    memo=payload.memo,
                ),
                asynchronous=False,
            )
        except ValidationError as exc:
            logger.warning("Order placement rejected", user_id=self.user_id, errors=exc.messages)
            raise OrderServiceError(_first_message(exc)) from exc

        logger.info("Order placed", order_id=order_id, user_id=self.user_id)
        return self.get(order_id)

    def get(self, order_id: int) -> PlacedOrder:
        try:
            order = current_domain.repository_for(Order).get(str(order_id))
        except ObjectNotFoundError as exc:
            raise OrderServiceError(f"Order {order_id} not found") from exc
        return to_placed_order(order)


def _first_message(exc: ValidationError) -> str:
    for field_name, messages in exc.messages.items():
        if messages:
            return f"{field_name}: {messages[0]}"
    return "Order could not be created"
