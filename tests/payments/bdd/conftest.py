"""Shared BDD fixtures and step definitions for the payment handshake."""

import pytest
from payments.payment.handshake import complete_payment, initiate_payment
from payments.payment.orders import FakeOrderLookup, set_order_lookup
from pytest_bdd import given, parsers


@pytest.fixture()
def tids():
    return []


@given(parsers.cfparse("order {order_id:d} totals {amount:d}"))
def _(gateway, order_id, amount):
    lookup = FakeOrderLookup()
    lookup.add(order_id=order_id, total_amount=amount)
    set_order_lookup(lookup)


@given(parsers.cfparse("order {order_id:d} has been paid"))
def _(order_id, tids):
    tids.append(initiate_payment(order_id).tid)
    complete_payment(order_id, "pg-bdd")
