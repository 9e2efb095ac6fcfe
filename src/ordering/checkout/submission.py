"""Order submission.

Turns a frozen checkout snapshot into an order service payload and calls
the order service exactly once. Failures come back as a SubmissionError
value; nothing here retries.
"""

from dataclasses import dataclass
from enum import Enum

import structlog

from ordering.checkout.model import CheckoutEntry, Delivery, FulfillmentMode, Pickup, ShippingTarget
from ordering.collaborators.port import CollaboratorError, OrderLine, OrderPayload, OrderService, PlacedOrder

logger = structlog.get_logger(__name__)


class SubmissionErrorCode(Enum):
    EMPTY_SELECTION = "EmptySelection"
    INSUFFICIENT_STOCK = "InsufficientStock"
    INVALID_SHIPPING_ADDRESS = "InvalidShippingAddress"
    NO_PICKUP_STORE = "NoPickupStore"
    ALREADY_SUBMITTING = "AlreadySubmitting"
    ALREADY_SUBMITTED = "AlreadySubmitted"
    ORDER_SERVICE_FAILED = "OrderServiceFailed"
    ADDRESS_SAVE_FAILED = "AddressSaveFailed"


@dataclass(frozen=True)
class SubmissionError:
    code: SubmissionErrorCode
    message: str


@dataclass(frozen=True)
class CheckoutSnapshot:
    """What gets submitted. Taken once when submission starts and reused on retry."""

    entries: tuple[CheckoutEntry, ...]
    target: ShippingTarget
    memo: str = ""

    @property
    def mode(self) -> FulfillmentMode:
        return self.target.mode


def pickup_stores(entries) -> list[Pickup]:
    """Distinct stores the entries can be collected from, in line order."""
    stores: dict[int, Pickup] = {}
    for entry in entries:
        if entry.store_id is not None and entry.store_id not in stores:
            stores[entry.store_id] = Pickup(store_id=entry.store_id, store_name=entry.store_name)
    return list(stores.values())


def build_payload(snapshot: CheckoutSnapshot) -> OrderPayload:
    items = tuple(
        OrderLine(
            product_id=entry.product_id,
            quantity=entry.quantity,
            option_id=entry.option_id,
            unit_price=entry.unit_price,
            option_surcharge=entry.option_surcharge,
            store_id=entry.store_id,
        )
        for entry in snapshot.entries
    )

    target = snapshot.target
    if isinstance(target, Delivery):
        return OrderPayload(
            items=items,
            fulfillment_type=FulfillmentMode.DELIVERY,
            shipping_address=target.composed_address(),
            memo=snapshot.memo,
        )
    return OrderPayload(
        items=items,
        fulfillment_type=FulfillmentMode.PICKUP,
        pickup_store_id=target.store_id,
        memo=snapshot.memo,
    )


def submit_order(snapshot: CheckoutSnapshot, order_service: OrderService) -> PlacedOrder | SubmissionError:
    payload = build_payload(snapshot)
    try:
        order = order_service.create(payload)
    except CollaboratorError as exc:
        logger.warning(
            "Order submission failed",
            fulfillment_type=payload.fulfillment_type.value,
            item_count=len(payload.items),
            error=str(exc),
        )
        return SubmissionError(SubmissionErrorCode.ORDER_SERVICE_FAILED, str(exc) or "Order could not be created")

    logger.info(
        "Order submitted",
        order_id=order.id,
        fulfillment_type=order.fulfillment_type.value,
        total_amount=order.total_amount,
    )
    return order
