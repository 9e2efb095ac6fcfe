"""Shared BDD fixtures and step definitions for checkout."""

import pytest
from ordering.checkout.model import CheckoutEntry
from ordering.collaborators import set_address_book, set_cart_service, set_order_service
from ordering.collaborators.fake_adapters import FakeAddressBook, FakeCartService, FakeOrderService
from ordering.collaborators.port import Address
from pytest_bdd import given, parsers, then


@pytest.fixture()
def lines():
    return []


@pytest.fixture()
def cart_outage():
    return {"failing": False}


@given("the shopper has a default delivery address")
def _():
    set_address_book(
        FakeAddressBook(
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
    )


def _add_line(lines, line_id, price, surcharge, quantity, stock):
    lines.append(
        CheckoutEntry(
            line_id=line_id,
            product_id=100 + line_id,
            quantity=quantity,
            unit_price=price,
            option_surcharge=surcharge,
            available_stock=stock,
            store_id=30,
        )
    )


@given(parsers.cfparse("a cart line {line_id:d} priced {price:d} with surcharge {surcharge:d} and quantity {quantity:d}"))
def _(lines, line_id, price, surcharge, quantity):
    _add_line(lines, line_id, price, surcharge, quantity, stock=10)


@given(
    parsers.cfparse(
        "a cart line {line_id:d} priced {price:d} with surcharge {surcharge:d} "
        "and quantity {quantity:d} and stock {stock:d}"
    )
)
def _(lines, line_id, price, surcharge, quantity, stock):
    _add_line(lines, line_id, price, surcharge, quantity, stock)


@given("the cart service is failing")
def _(cart_outage):
    cart_outage["failing"] = True


@then(parsers.cfparse('the order is rejected with "{code}"'))
def _(submission_result, code):
    assert submission_result.code.value == code


@pytest.fixture()
def services(lines):
    cart = FakeCartService(lines)
    orders = FakeOrderService()
    set_cart_service(cart)
    set_order_service(orders)
    return {"cart": cart, "orders": orders}
