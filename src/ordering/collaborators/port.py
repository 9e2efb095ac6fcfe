"""Collaborator ports consumed by checkout.

The cart, the address book and the order service are owned elsewhere; the
checkout core only talks to them through these interfaces. Adapters signal
a failed call by raising CollaboratorError.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime

from ordering.checkout.model import CheckoutEntry, FulfillmentMode


class CollaboratorError(Exception):
    """A call to a collaborator service failed."""


class OrderServiceError(CollaboratorError):
    """The order service refused or failed to create an order."""


@dataclass(frozen=True)
class Address:
    """A saved address, as returned by the address book."""

    id: int
    label: str
    recipient: str
    phone: str
    zip_code: str
    address_line1: str
    address_line2: str = ""
    is_default: bool = False


@dataclass(frozen=True)
class AddressFields:
    """Field values for a new address book entry."""

    label: str
    recipient: str
    phone: str
    zip_code: str
    address_line1: str
    address_line2: str = ""
    is_default: bool = False


@dataclass(frozen=True)
class AccountProfile:
    """Account holder details used to pre-fill the recipient."""

    name: str | None = None
    phone: str | None = None


@dataclass(frozen=True)
class OrderLine:
    product_id: int
    quantity: int
    option_id: int | None = None
    unit_price: int = 0
    option_surcharge: int = 0
    store_id: int | None = None


@dataclass(frozen=True)
class OrderPayload:
    """What the order service needs to create an order."""

    items: tuple[OrderLine, ...]
    fulfillment_type: FulfillmentMode
    shipping_address: str | None = None
    pickup_store_id: int | None = None
    memo: str = ""


@dataclass(frozen=True)
class PlacedOrder:
    """An order as persisted by the order service."""

    id: int
    user_id: str
    fulfillment_type: FulfillmentMode
    status: str
    total_amount: int
    created_at: datetime
    shipping_address: str | None = None
    pickup_store_id: int | None = None


class CartService(ABC):
    @abstractmethod
    def get_cart(self) -> list[CheckoutEntry]:
        """Return the current cart lines."""
        ...

    @abstractmethod
    def update_quantity(self, line_id: int, quantity: int) -> CheckoutEntry:
        """Change the quantity of a cart line."""
        ...

    @abstractmethod
    def remove_item(self, line_id: int) -> None:
        """Remove a cart line."""
        ...

    @abstractmethod
    def clear(self) -> None:
        """Empty the cart."""
        ...


class AddressBook(ABC):
    @abstractmethod
    def list_addresses(self) -> list[Address]:
        """Return the account's saved addresses."""
        ...

    @abstractmethod
    def create(self, fields: AddressFields) -> Address:
        """Persist a new address."""
        ...


class OrderService(ABC):
    @abstractmethod
    def create(self, payload: OrderPayload) -> PlacedOrder:
        """Create an order from a checkout payload."""
        ...

    @abstractmethod
    def get(self, order_id: int) -> PlacedOrder:
        """Fetch an existing order."""
        ...
