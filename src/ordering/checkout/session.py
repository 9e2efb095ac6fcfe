"""Checkout session: the client-side state machine of one checkout.

A session owns the working selection, the fulfillment choice, the delivery
form and the memo. Every edit refreshes the derived pricing and stock
reports. ``submit()`` freezes a CheckoutSnapshot and hands it to order
submission; a session submits at most one order.

    Editing --submit()--> Submitting --ok--> Submitted
                              |
                              +--error--> Failed --submit()/retry()--> Submitting

Quantity edits and removals are optimistic: the local entry list changes
immediately and the cart service confirms afterwards. Their failures become
dismissible notices and never leave the Editing state.
"""

import itertools
from dataclasses import dataclass
from enum import Enum

import structlog

from ordering.address.resolver import AddressResolver
from ordering.checkout.model import (
    MAX_MEMO_LENGTH,
    CheckoutEntry,
    DirectPurchase,
    FulfillmentMode,
    Pickup,
    ShippingTarget,
)
from ordering.checkout.optimistic import MutationResult, OptimisticMutation
from ordering.checkout.submission import (
    CheckoutSnapshot,
    SubmissionError,
    SubmissionErrorCode,
    pickup_stores,
    submit_order,
)
from ordering.collaborators import get_address_book, get_cart_service, get_order_service
from ordering.collaborators.port import (
    AccountProfile,
    Address,
    AddressBook,
    CartService,
    CollaboratorError,
    OrderService,
    PlacedOrder,
)
from ordering.pricing.calculator import PricingSummary, calculate_totals
from ordering.stock.validator import StockReport, validate_stock

logger = structlog.get_logger(__name__)

STOCK_ERROR_MESSAGE = "Some items exceed the available stock. Adjust their quantities to continue."


class SessionState(Enum):
    EDITING = "Editing"
    SUBMITTING = "Submitting"
    SUBMITTED = "Submitted"
    FAILED = "Failed"


class SessionStateError(Exception):
    """The session cannot be edited in its current state."""


@dataclass(frozen=True)
class Notice:
    """A dismissible message about a failed cart mutation."""

    id: int
    message: str
    line_id: int | None = None


class CheckoutSession:
    def __init__(
        self,
        entries: list[CheckoutEntry],
        *,
        cart: CartService,
        address_book: AddressBook,
        order_service: OrderService,
        profile: AccountProfile | None = None,
        saved_addresses: list[Address] | None = None,
        selection: set[int] | None = None,
    ) -> None:
        self.entries: list[CheckoutEntry] = list(entries)
        self.cart = cart
        self.address_book = address_book
        self.order_service = order_service
        # Cart line ids this checkout was started with; None means the whole cart
        self.selection = selection

        self.state = SessionState.EDITING
        self.mode = FulfillmentMode.DELIVERY
        self.address = AddressResolver(profile, saved_addresses)
        self.memo = ""
        self.notices: list[Notice] = []
        self.submission_error: SubmissionError | None = None
        self.order: PlacedOrder | None = None

        self._snapshot: CheckoutSnapshot | None = None
        self._notice_ids = itertools.count(1)
        self._mutations: OptimisticMutation[list[CheckoutEntry]] = OptimisticMutation(lambda: list(self.entries))

        self.totals: PricingSummary
        self.stock: StockReport
        self._refresh()

    # -------------------------------------------------------------------
    # Derived state
    # -------------------------------------------------------------------
    def _refresh(self) -> None:
        self.totals = calculate_totals(self.entries, self.mode)
        self.stock = validate_stock(self.entries)

    @property
    def stock_error(self) -> str | None:
        """Page-level banner shown while any line exceeds its stock."""
        return STOCK_ERROR_MESSAGE if self.stock.has_insufficient_stock else None

    @property
    def pickup_stores(self) -> list[Pickup]:
        return pickup_stores(self.entries)

    @property
    def shipping_target(self) -> ShippingTarget | None:
        if self.mode == FulfillmentMode.DELIVERY:
            return self.address.delivery
        stores = self.pickup_stores
        return stores[0] if stores else None

    @property
    def is_direct_purchase(self) -> bool:
        return len(self.entries) == 1 and self.entries[0].is_direct_purchase

    @property
    def can_submit(self) -> bool:
        """Whether the order button is enabled. Field validity is checked on submit."""
        if self.state not in (SessionState.EDITING, SessionState.FAILED):
            return False
        if not self.entries or self.stock.has_insufficient_stock:
            return False
        if self.mode == FulfillmentMode.DELIVERY:
            return self.address.is_complete
        return bool(self.pickup_stores)

    def _ensure_editable(self) -> None:
        if self.state in (SessionState.SUBMITTING, SessionState.SUBMITTED):
            raise SessionStateError(f"Checkout cannot be edited while {self.state.value}")
        if self.state == SessionState.FAILED:
            # Editing after a failed submission starts over with a fresh snapshot
            self.state = SessionState.EDITING
            self._snapshot = None

    def _entry(self, line_id: int) -> CheckoutEntry:
        for entry in self.entries:
            if entry.line_id == line_id:
                return entry
        raise KeyError(f"Line {line_id} is not part of this checkout")

    def _replace_entry(self, updated: CheckoutEntry) -> None:
        self.entries = [updated if e.line_id == updated.line_id else e for e in self.entries]
        self._refresh()

    def _drop_entry(self, line_id: int) -> None:
        self.entries = [e for e in self.entries if e.line_id != line_id]
        self._refresh()

    def _restore(self, snapshot: list[CheckoutEntry]) -> None:
        self.entries = list(snapshot)
        self._refresh()

    def _notify(self, message: str, line_id: int | None = None) -> None:
        self.notices.append(Notice(id=next(self._notice_ids), message=message, line_id=line_id))

    def dismiss_notice(self, notice_id: int) -> None:
        self.notices = [n for n in self.notices if n.id != notice_id]

    # -------------------------------------------------------------------
    # Cart mutations
    # -------------------------------------------------------------------
    def edit_quantity(self, line_id: int, quantity: int) -> MutationResult | None:
        """Change a line's quantity. Quantities below 1 are ignored."""
        self._ensure_editable()
        if quantity < 1:
            return None
        entry = self._entry(line_id)

        if entry.is_direct_purchase:
            self._replace_entry(entry.with_quantity(quantity))
            return MutationResult(key=line_id, succeeded=True)

        def recover(snapshot):
            self._restore(snapshot)
            self._notify("Could not change the quantity. Please try again.", line_id)

        return self._mutations.run(
            line_id,
            apply=lambda: self._replace_entry(entry.with_quantity(quantity)),
            confirm=lambda: self.cart.update_quantity(line_id, quantity),
            recover=recover,
            reconcile=self._replace_entry,
        )

    def remove_entry(self, line_id: int) -> MutationResult:
        self._ensure_editable()
        entry = self._entry(line_id)

        if entry.is_direct_purchase:
            self._drop_entry(line_id)
            return MutationResult(key=line_id, succeeded=True)

        def recover(snapshot):
            self._reload(fallback=snapshot)
            self._notify("Could not remove the item. Please try again.", line_id)

        return self._mutations.run(
            line_id,
            apply=lambda: self._drop_entry(line_id),
            confirm=lambda: self.cart.remove_item(line_id),
            recover=recover,
        )

    def remove_entries(self, line_ids) -> list[MutationResult]:
        return [self.remove_entry(line_id) for line_id in list(line_ids)]

    def clear_entries(self) -> list[MutationResult]:
        return self.remove_entries([e.line_id for e in self.entries])

    def _reload(self, fallback: list[CheckoutEntry]) -> None:
        """Re-read the selection from the cart, or restore ``fallback`` if that fails too."""
        try:
            cart_entries = self.cart.get_cart()
        except CollaboratorError as exc:
            logger.warning("Cart reload failed", error=str(exc))
            self._restore(fallback)
            return
        self._restore(_select(cart_entries, self.selection))

    # -------------------------------------------------------------------
    # Fulfillment, delivery form and memo
    # -------------------------------------------------------------------
    def set_fulfillment(self, mode: FulfillmentMode) -> None:
        """Switch between delivery and pickup. Entered delivery values are kept."""
        self._ensure_editable()
        self.mode = FulfillmentMode(mode)
        if self.mode == FulfillmentMode.PICKUP:
            self.address.clear_errors()
        self._refresh()

    def set_shipping_field(self, name: str, value) -> None:
        self._ensure_editable()
        self.address.set_field(name, value)

    def blur_field(self, name: str) -> None:
        self.address.blur(name)

    def select_address(self, address_id: int) -> Address:
        self._ensure_editable()
        return self.address.select_saved(address_id)

    def select_manual_entry(self) -> None:
        self._ensure_editable()
        self.address.select_manual()

    def addresses_loaded(self, addresses: list[Address]) -> None:
        self.address.addresses_loaded(addresses)

    def save_new_address(self, label: str = "Home") -> Address | SubmissionError | None:
        """Persist the delivery form as a new saved address.

        Returns None when a field is invalid (the field errors say why).
        """
        self._ensure_editable()
        try:
            return self.address.save_new_address(self.address_book, label)
        except CollaboratorError as exc:
            logger.warning("Address save failed", error=str(exc))
            self.submission_error = SubmissionError(
                SubmissionErrorCode.ADDRESS_SAVE_FAILED, str(exc) or "Address could not be saved"
            )
            return self.submission_error

    def set_memo(self, text: str) -> None:
        self._ensure_editable()
        self.memo = (text or "")[:MAX_MEMO_LENGTH]

    # -------------------------------------------------------------------
    # Submission
    # -------------------------------------------------------------------
    def _precondition_error(self) -> SubmissionError | None:
        # Runs first so every invalid field shows its inline message
        address_valid = self.address.validate_all(self.mode)

        if not self.entries:
            return SubmissionError(SubmissionErrorCode.EMPTY_SELECTION, "There is nothing to order.")
        if self.stock.has_insufficient_stock:
            return SubmissionError(SubmissionErrorCode.INSUFFICIENT_STOCK, STOCK_ERROR_MESSAGE)
        if not address_valid:
            return SubmissionError(
                SubmissionErrorCode.INVALID_SHIPPING_ADDRESS, "Check the highlighted delivery fields."
            )
        if self.mode == FulfillmentMode.PICKUP and not self.pickup_stores:
            return SubmissionError(SubmissionErrorCode.NO_PICKUP_STORE, "No store is available for pickup.")
        return None

    def submit(self) -> PlacedOrder | SubmissionError:
        if self.state == SessionState.SUBMITTING:
            return SubmissionError(SubmissionErrorCode.ALREADY_SUBMITTING, "The order is already being placed.")
        if self.state == SessionState.SUBMITTED:
            return SubmissionError(SubmissionErrorCode.ALREADY_SUBMITTED, "The order has already been placed.")

        if self.state == SessionState.FAILED and self._snapshot is not None:
            snapshot = self._snapshot
        else:
            error = self._precondition_error()
            if error is not None:
                self.submission_error = error
                return error
            snapshot = CheckoutSnapshot(
                entries=tuple(self.entries),
                target=self.shipping_target,
                memo=self.memo,
            )

        self._snapshot = snapshot
        self.submission_error = None
        self.state = SessionState.SUBMITTING
        try:
            result = submit_order(snapshot, self.order_service)
        except Exception:
            self.state = SessionState.FAILED
            raise

        if isinstance(result, SubmissionError):
            self.state = SessionState.FAILED
            self.submission_error = result
            return result

        self.state = SessionState.SUBMITTED
        self.order = result
        self._discard_selection(snapshot)
        return result

    def retry(self) -> PlacedOrder | SubmissionError:
        """Re-submit the snapshot of a failed submission."""
        if self.state != SessionState.FAILED:
            raise SessionStateError(f"Nothing to retry while {self.state.value}")
        return self.submit()

    def _discard_selection(self, snapshot: CheckoutSnapshot) -> None:
        self.entries = []
        self._refresh()

        ordered = {e.line_id for e in snapshot.entries if not e.is_direct_purchase}
        if not ordered:
            return
        try:
            remaining = {e.line_id for e in self.cart.get_cart()}
            if remaining <= ordered:
                self.cart.clear()
            else:
                for line_id in ordered & remaining:
                    self.cart.remove_item(line_id)
        except CollaboratorError as exc:
            logger.warning(
                "Cart cleanup after order failed",
                order_id=self.order.id if self.order else None,
                error=str(exc),
            )


def _select(entries: list[CheckoutEntry], selection: set[int] | None) -> list[CheckoutEntry]:
    if selection is None:
        return list(entries)
    return [e for e in entries if e.line_id in selection]


def start_checkout(
    selection=None,
    direct_purchase: DirectPurchase | None = None,
    *,
    cart: CartService | None = None,
    address_book: AddressBook | None = None,
    order_service: OrderService | None = None,
    profile: AccountProfile | None = None,
    load_addresses: bool = True,
) -> CheckoutSession:
    """Start a checkout over selected cart lines, the whole cart, or one direct purchase.

    ``selection`` holds cart line ids; None checks out the whole cart. A
    ``direct_purchase`` ignores the cart entirely. Saved addresses are
    loaded up front unless ``load_addresses`` is False, in which case the
    caller delivers them later through ``addresses_loaded``.
    """
    cart = cart or get_cart_service()
    address_book = address_book or get_address_book()
    order_service = order_service or get_order_service()

    if direct_purchase is not None:
        entries = [direct_purchase.to_entry()]
        selected = None
    else:
        selected = set(selection) if selection is not None else None
        entries = _select(cart.get_cart(), selected)
        if selected is not None and len(entries) < len(selected):
            logger.info("Selected lines missing from cart", missing=len(selected) - len(entries))

    saved_addresses = None
    if load_addresses:
        try:
            saved_addresses = address_book.list_addresses()
        except CollaboratorError as exc:
            logger.warning("Address book unavailable", error=str(exc))
            saved_addresses = []

    session = CheckoutSession(
        entries,
        cart=cart,
        address_book=address_book,
        order_service=order_service,
        profile=profile,
        saved_addresses=saved_addresses,
        selection=selected,
    )
    logger.info(
        "Checkout started",
        line_count=len(entries),
        direct_purchase=direct_purchase is not None,
        total=session.totals.total,
    )
    return session
