"""Stock validation: flags lines that cannot be fulfilled and lines running low.

Insufficient stock blocks submission; the low-stock flag is advisory only.
"""

from collections.abc import Iterable
from dataclasses import dataclass

from ordering.checkout.model import CheckoutEntry

LOW_STOCK_THRESHOLD = 3


@dataclass(frozen=True)
class StockLine:
    line_id: int
    requested_quantity: int
    available_stock: int
    insufficient: bool
    low_stock: bool


@dataclass(frozen=True)
class StockReport:
    lines: tuple[StockLine, ...]
    has_insufficient_stock: bool

    @property
    def insufficient_lines(self) -> tuple[StockLine, ...]:
        return tuple(line for line in self.lines if line.insufficient)

    @property
    def low_stock_lines(self) -> tuple[StockLine, ...]:
        return tuple(line for line in self.lines if line.low_stock)


def classify(line_id: int, requested_quantity: int, available_stock: int) -> StockLine:
    insufficient = available_stock < requested_quantity
    low_stock = not insufficient and 0 < available_stock <= LOW_STOCK_THRESHOLD
    return StockLine(
        line_id=line_id,
        requested_quantity=requested_quantity,
        available_stock=available_stock,
        insufficient=insufficient,
        low_stock=low_stock,
    )


def validate_stock(entries: Iterable[CheckoutEntry]) -> StockReport:
    lines = tuple(classify(e.line_id, e.quantity, e.available_stock) for e in entries)
    return StockReport(
        lines=lines,
        has_insufficient_stock=any(line.insufficient for line in lines),
    )
