"""FastAPI routes for the Ordering domain: order creation and lookup."""

from fastapi import APIRouter, HTTPException

from ordering.api.schemas import CreateOrderRequest, OrderResponse
from ordering.checkout.model import FulfillmentMode
from ordering.collaborators.port import OrderLine, OrderPayload, OrderServiceError, PlacedOrder
from ordering.order.service import DomainOrderService

order_router = APIRouter(prefix="/orders", tags=["orders"])


def _to_response(order: PlacedOrder) -> OrderResponse:
    return OrderResponse(
        id=order.id,
        user_id=order.user_id,
        fulfillment_type=order.fulfillment_type.value,
        status=order.status,
        total_amount=order.total_amount,
        shipping_address=order.shipping_address,
        pickup_store_id=order.pickup_store_id,
        created_at=order.created_at,
    )


@order_router.post("", status_code=201, response_model=OrderResponse)
async def create_order(body: CreateOrderRequest) -> OrderResponse:
    payload = OrderPayload(
        items=tuple(OrderLine(**item.model_dump()) for item in body.order_items),
        fulfillment_type=FulfillmentMode(body.fulfillment_type),
        shipping_address=body.shipping_address,
        pickup_store_id=body.pickup_store_id,
        memo=body.memo,
    )
    try:
        order = DomainOrderService(user_id=body.user_id).create(payload)
    except OrderServiceError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return _to_response(order)


@order_router.get("/{order_id}", response_model=OrderResponse)
async def get_order(order_id: int) -> OrderResponse:
    try:
        order = DomainOrderService().get(order_id)
    except OrderServiceError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return _to_response(order)
