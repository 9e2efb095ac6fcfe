"""Tests for turning a checkout snapshot into an order."""

from ordering.checkout.model import CheckoutEntry, Delivery, FulfillmentMode, Pickup
from ordering.checkout.submission import (
    CheckoutSnapshot,
    SubmissionError,
    SubmissionErrorCode,
    build_payload,
    pickup_stores,
    submit_order,
)
from ordering.collaborators.fake_adapters import FakeOrderService

DELIVERY = Delivery(
    recipient="Kim Minsu",
    phone="010-1234-5678",
    zip_code="06236",
    address_line1="123 Teheran-ro",
    address_line2="Apt 501",
)


def _entries():
    return (
        CheckoutEntry(
            line_id=1,
            product_id=7,
            quantity=1,
            unit_price=100000,
            option_surcharge=20000,
            option_id=2,
            available_stock=5,
            store_id=30,
            store_name="Gangnam",
        ),
        CheckoutEntry(line_id=2, product_id=8, quantity=2, unit_price=50000, available_stock=5, store_id=31),
        CheckoutEntry(line_id=3, product_id=9, quantity=1, unit_price=1000, available_stock=5, store_id=30),
    )


class TestPickupStores:
    def test_distinct_stores_in_line_order(self):
        stores = pickup_stores(_entries())
        assert [s.store_id for s in stores] == [30, 31]
        assert stores[0].store_name == "Gangnam"

    def test_entries_without_store(self):
        entry = CheckoutEntry(line_id=1, product_id=1, quantity=1, unit_price=1, available_stock=1)
        assert pickup_stores([entry]) == []


class TestBuildPayload:
    def test_delivery_payload_carries_composed_address(self):
        payload = build_payload(CheckoutSnapshot(entries=_entries(), target=DELIVERY, memo="Leave at door"))

        assert payload.fulfillment_type == FulfillmentMode.DELIVERY
        assert payload.shipping_address == "Kim Minsu | 010-1234-5678 | (06236) 123 Teheran-ro Apt 501"
        assert payload.pickup_store_id is None
        assert payload.memo == "Leave at door"

    def test_pickup_payload_carries_store(self):
        payload = build_payload(CheckoutSnapshot(entries=_entries(), target=Pickup(store_id=30)))

        assert payload.fulfillment_type == FulfillmentMode.PICKUP
        assert payload.pickup_store_id == 30
        assert payload.shipping_address is None

    def test_items_keep_price_snapshot(self):
        payload = build_payload(CheckoutSnapshot(entries=_entries(), target=DELIVERY))

        first = payload.items[0]
        assert (first.product_id, first.quantity, first.option_id) == (7, 1, 2)
        assert first.unit_price == 100000
        assert first.option_surcharge == 20000


class TestSubmitOrder:
    def test_calls_order_service_once(self):
        service = FakeOrderService()

        order = submit_order(CheckoutSnapshot(entries=_entries(), target=DELIVERY), service)

        assert order.id == 1
        assert order.total_amount == 100000 + 20000 + 100000 + 1000 + 3000
        assert len(service.calls) == 1

    def test_failure_returns_error_without_retry(self):
        service = FakeOrderService()
        service.configure(should_succeed=False, failure_reason="Out of stock")

        result = submit_order(CheckoutSnapshot(entries=_entries(), target=DELIVERY), service)

        assert isinstance(result, SubmissionError)
        assert result.code == SubmissionErrorCode.ORDER_SERVICE_FAILED
        assert result.message == "Out of stock"
        assert len(service.calls) == 1
