import pytest
from protean.integrations.pytest import DomainFixture


@pytest.fixture(scope="session")
def ordering_bed():
    from ordering.domain import ordering

    bed = DomainFixture(ordering)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(ordering_bed):
    from ordering.collaborators import reset_collaborators
    from protean import current_domain

    with ordering_bed.domain_context():
        yield

        # Clear all databases and drain the event store
        for _, provider in current_domain.providers.items():
            provider._data_reset()
        current_domain.event_store.store._data_reset()

    reset_collaborators()


@pytest.fixture()
def cart_entries():
    from ordering.checkout.model import CheckoutEntry

    return [
        CheckoutEntry(
            line_id=1,
            product_id=101,
            quantity=1,
            unit_price=100000,
            option_id=5,
            option_surcharge=20000,
            available_stock=10,
            store_id=30,
            store_name="Gangnam",
            product_name="Ceramic vase",
        ),
        CheckoutEntry(
            line_id=2,
            product_id=102,
            quantity=2,
            unit_price=50000,
            available_stock=10,
            store_id=31,
            store_name="Hongdae",
            product_name="Linen apron",
        ),
        CheckoutEntry(
            line_id=3,
            product_id=103,
            quantity=1,
            unit_price=8000,
            available_stock=2,
            store_id=30,
            store_name="Gangnam",
            product_name="Tea towel",
        ),
    ]


@pytest.fixture()
def cart(cart_entries):
    from ordering.collaborators import set_cart_service
    from ordering.collaborators.fake_adapters import FakeCartService

    service = FakeCartService(cart_entries)
    set_cart_service(service)
    return service


@pytest.fixture()
def address_book():
    from ordering.collaborators import set_address_book
    from ordering.collaborators.fake_adapters import FakeAddressBook
    from ordering.collaborators.port import Address

    book = FakeAddressBook(
        [
            Address(
                id=1,
                label="Home",
                recipient="Kim Minsu",
                phone="010-1234-5678",
                zip_code="06236",
                address_line1="123 Teheran-ro",
                address_line2="Apt 501",
                is_default=True,
            )
        ]
    )
    set_address_book(book)
    return book


@pytest.fixture()
def order_service():
    from ordering.collaborators import set_order_service
    from ordering.collaborators.fake_adapters import FakeOrderService

    service = FakeOrderService(user_id="user-001")
    set_order_service(service)
    return service


@pytest.fixture()
def profile():
    from ordering.collaborators.port import AccountProfile

    return AccountProfile(name="Kim Minsu", phone="010-1234-5678")
