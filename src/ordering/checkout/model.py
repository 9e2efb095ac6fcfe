"""Checkout working-set types.

A checkout works on a list of CheckoutEntry lines (a cart selection, or a
single synthetic line for a direct purchase) and exactly one ShippingTarget
variant: Delivery or Pickup.
"""

from dataclasses import dataclass, replace
from enum import Enum

# Line id of the synthetic entry used for a direct purchase. It never maps
# to a persisted cart row.
DIRECT_PURCHASE_LINE_ID = 0

MAX_MEMO_LENGTH = 200


class FulfillmentMode(Enum):
    DELIVERY = "delivery"
    PICKUP = "pickup"


@dataclass(frozen=True)
class CheckoutEntry:
    """One line of the checkout selection, with the catalog snapshot it was priced from."""

    line_id: int
    product_id: int
    quantity: int
    unit_price: int
    available_stock: int
    option_id: int | None = None
    option_surcharge: int = 0
    store_id: int | None = None
    store_name: str | None = None
    product_name: str = ""

    def __post_init__(self):
        if self.quantity < 1:
            raise ValueError(f"quantity must be >= 1, got {self.quantity}")

    @property
    def is_direct_purchase(self) -> bool:
        return self.line_id == DIRECT_PURCHASE_LINE_ID

    def with_quantity(self, quantity: int) -> "CheckoutEntry":
        return replace(self, quantity=quantity)


@dataclass(frozen=True)
class DirectPurchase:
    """A single product bought immediately, bypassing the cart."""

    product_id: int
    quantity: int
    unit_price: int
    available_stock: int
    option_id: int | None = None
    option_surcharge: int = 0
    store_id: int | None = None
    store_name: str | None = None
    product_name: str = ""

    def to_entry(self) -> CheckoutEntry:
        return CheckoutEntry(
            line_id=DIRECT_PURCHASE_LINE_ID,
            product_id=self.product_id,
            quantity=self.quantity,
            unit_price=self.unit_price,
            available_stock=self.available_stock,
            option_id=self.option_id,
            option_surcharge=self.option_surcharge,
            store_id=self.store_id,
            store_name=self.store_name,
            product_name=self.product_name,
        )


@dataclass(frozen=True)
class Delivery:
    """Ship the order to an address."""

    recipient: str = ""
    phone: str = ""
    zip_code: str = ""
    address_line1: str = ""
    address_line2: str = ""
    save_as_default: bool = False

    @property
    def mode(self) -> FulfillmentMode:
        return FulfillmentMode.DELIVERY

    def composed_address(self) -> str:
        """Single-line form stored on the order: ``recipient | phone | (zip) line1 line2``."""
        location = f"({self.zip_code.strip()}) {self.address_line1.strip()} {self.address_line2.strip()}".strip()
        return f"{self.recipient.strip()} | {self.phone.strip()} | {location}"


@dataclass(frozen=True)
class Pickup:
    """Collect the order in person at a store."""

    store_id: int
    store_name: str | None = None

    @property
    def mode(self) -> FulfillmentMode:
        return FulfillmentMode.PICKUP


ShippingTarget = Delivery | Pickup
