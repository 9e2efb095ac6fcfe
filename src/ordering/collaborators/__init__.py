"""Collaborator factory.

Provides get_*/set_*/reset_* helpers for the cart, the address book and the
order service. Fakes are the defaults for the cart and the address book; the
order service defaults to the ordering domain's own Order aggregate.
"""

from ordering.collaborators.fake_adapters import FakeAddressBook, FakeCartService
from ordering.collaborators.port import AddressBook, CartService, OrderService

DEFAULT_USER_ID = "guest"

_cart_service: CartService | None = None
_address_book: AddressBook | None = None
_order_service: OrderService | None = None


def get_cart_service() -> CartService:
    global _cart_service
    if _cart_service is None:
        _cart_service = FakeCartService()
    return _cart_service


def set_cart_service(service: CartService) -> None:
    global _cart_service
    _cart_service = service


def get_address_book() -> AddressBook:
    global _address_book
    if _address_book is None:
        _address_book = FakeAddressBook()
    return _address_book


def set_address_book(book: AddressBook) -> None:
    global _address_book
    _address_book = book


def get_order_service() -> OrderService:
    global _order_service
    if _order_service is None:
        from ordering.order.service import DomainOrderService

        _order_service = DomainOrderService(user_id=DEFAULT_USER_ID)
    return _order_service


def set_order_service(service: OrderService) -> None:
    global _order_service
    _order_service = service


def reset_collaborators() -> None:
    """Reset to default adapters (useful for tests)."""
    global _cart_service, _address_book, _order_service
    _cart_service = None
    _address_book = None
    _order_service = None
