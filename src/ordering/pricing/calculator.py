"""Order pricing: per-line and order totals in integer currency units (KRW).

Prices are taken from the snapshot carried by each entry; nothing here does
I/O. Fractional amounts are a caller error and are not rounded.
"""

from collections.abc import Iterable
from dataclasses import dataclass

from ordering.checkout.model import CheckoutEntry, FulfillmentMode

DELIVERY_FEE = 3000


@dataclass(frozen=True)
class PricingSummary:
    items_subtotal: int
    delivery_fee: int
    total: int


def line_total(entry: CheckoutEntry) -> int:
    return (entry.unit_price + entry.option_surcharge) * entry.quantity


def delivery_fee_for(mode: FulfillmentMode) -> int:
    return DELIVERY_FEE if mode == FulfillmentMode.DELIVERY else 0


def calculate_totals(entries: Iterable[CheckoutEntry], mode: FulfillmentMode) -> PricingSummary:
    """Subtotal of all lines plus the fulfillment-dependent delivery fee."""
    items_subtotal = sum(line_total(entry) for entry in entries)
    fee = delivery_fee_for(mode)
    return PricingSummary(
        items_subtotal=items_subtotal,
        delivery_fee=fee,
        total=items_subtotal + fee,
    )


def order_total(lines: Iterable, mode: FulfillmentMode) -> int:
    """Total for order lines carrying a locked price snapshot.

    Accepts anything with ``unit_price``, ``option_surcharge`` and
    ``quantity`` attributes, so the order service prices submitted lines
    with the same rule the checkout page displayed.
    """
    subtotal = sum((line.unit_price + line.option_surcharge) * line.quantity for line in lines)
    return subtotal + delivery_fee_for(mode)
