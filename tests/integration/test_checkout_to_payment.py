"""End-to-end: check out a cart, pay for the order, then refund part of it."""

import pytest
from ordering.checkout.model import CheckoutEntry, FulfillmentMode
from ordering.checkout.session import SessionState, start_checkout
from ordering.collaborators import set_address_book, set_cart_service
from ordering.collaborators.fake_adapters import FakeAddressBook, FakeCartService
from ordering.collaborators.port import Address
from payments.gateway import set_gateway
from payments.gateway.fake_adapter import FakeGateway
from payments.payment.handshake import (
    HandshakeErrorCode,
    complete_payment,
    initiate_payment,
    query_payment,
    refund_payment,
)
from payments.payment.payment import PaymentStatus


@pytest.fixture()
def cart():
    service = FakeCartService(
        [
            CheckoutEntry(line_id=1, product_id=11, quantity=2, unit_price=10000, available_stock=5, store_id=30),
            CheckoutEntry(line_id=2, product_id=12, quantity=1, unit_price=4000, available_stock=5, store_id=30),
        ]
    )
    set_cart_service(service)
    return service


@pytest.fixture()
def address_book():
    book = FakeAddressBook(
        [
            Address(
                id=1,
                label="Home",
                recipient="Kim Minsu",
                phone="010-1234-5678",
                zip_code="06236",
                address_line1="123 Teheran-ro",
                is_default=True,
            )
        ]
    )
    set_address_book(book)
    return book


@pytest.fixture()
def gateway():
    fake = FakeGateway()
    set_gateway(fake)
    return fake


def _place_order(ordering_domain):
    with ordering_domain.domain_context():
        session = start_checkout()
        order = session.submit()
        assert session.state == SessionState.SUBMITTED
    return order


class TestCheckoutToPayment:
    def test_delivery_order_is_paid_and_partially_refunded(
        self, _ordering_domain, _payments_domain, cart, address_book, gateway
    ):
        order = _place_order(_ordering_domain)
        assert order.total_amount == 27000
        assert cart.get_cart() == []

        with _payments_domain.domain_context():
            assert query_payment(order.id).status == PaymentStatus.PENDING
            assert query_payment(order.id).total_amount == 27000

            targets = initiate_payment(order.id)
            assert gateway.calls[0]["total_amount"] == 27000
            assert gateway.calls[0]["quantity"] == 3

            view = complete_payment(order.id, "pg-e2e")
            assert view.status == PaymentStatus.COMPLETED
            assert view.tid == targets.tid

            view = refund_payment(order.id, 7000)
            assert view.status == PaymentStatus.COMPLETED
            assert view.remaining_amount == 20000

    def test_pickup_order_has_no_delivery_fee(self, _ordering_domain, _payments_domain, cart, address_book, gateway):
        with _ordering_domain.domain_context():
            session = start_checkout()
            session.set_fulfillment(FulfillmentMode.PICKUP)
            order = session.submit()
        assert order.total_amount == 24000

        with _payments_domain.domain_context():
            initiate_payment(order.id)
            assert gateway.calls[0]["total_amount"] == 24000

    def test_payment_for_unknown_order(self, _ordering_domain, _payments_domain, gateway):
        with _payments_domain.domain_context():
            error = initiate_payment(999)
        assert error.code == HandshakeErrorCode.ORDER_NOT_FOUND
