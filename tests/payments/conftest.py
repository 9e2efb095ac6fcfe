import pytest
from protean.integrations.pytest import DomainFixture


@pytest.fixture(scope="session")
def payments_bed():
    from payments.domain import payments

    bed = DomainFixture(payments)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(payments_bed):
    from payments.gateway import reset_gateway
    from payments.payment.orders import reset_order_lookup
    from protean import current_domain

    with payments_bed.domain_context():
        yield

        # Clear all databases and drain the event store
        for _, provider in current_domain.providers.items():
            provider._data_reset()
        current_domain.event_store.store._data_reset()

    reset_gateway()
    reset_order_lookup()


@pytest.fixture()
def gateway():
    from payments.gateway import set_gateway
    from payments.gateway.fake_adapter import FakeGateway

    fake = FakeGateway()
    set_gateway(fake)
    return fake


@pytest.fixture()
def order_lookup():
    from payments.payment.orders import FakeOrderLookup, set_order_lookup

    lookup = FakeOrderLookup()
    lookup.add(order_id=42, total_amount=23000, item_name="Ceramic mug and 1 more", quantity=3)
    set_order_lookup(lookup)
    return lookup
