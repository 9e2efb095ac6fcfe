"""Shipping address resolution for delivery orders.

The delivery form can be filled from three sources: a saved address book
entry, a blank "manual entry" form (pre-filled with the account holder's
name and phone), or whatever the user has typed so far. The resolver keeps
the current field values, which source is selected, and the inline field
errors. It never mutates a saved Address.
"""

import re
from dataclasses import replace

import structlog

from ordering.checkout.model import Delivery, FulfillmentMode
from ordering.collaborators.port import AccountProfile, Address, AddressBook, AddressFields

logger = structlog.get_logger(__name__)

MANUAL_ENTRY = "manual"

REQUIRED_FIELDS = ("recipient", "phone", "zip_code", "address_line1")
OPTIONAL_FIELDS = ("address_line2", "save_as_default")
FIELD_NAMES = REQUIRED_FIELDS + OPTIONAL_FIELDS

# Korean mobile number: 010-1234-5678 or 01012345678
PHONE_PATTERN = re.compile(r"^01[0-9]-?[0-9]{3,4}-?[0-9]{4}$")
ZIP_CODE_PATTERN = re.compile(r"^[0-9]{5}$")

VALIDATION_MESSAGES = {
    "recipient_required": "Please enter a recipient.",
    "phone_required": "Please enter a contact number.",
    "phone_invalid": "Use the format 010-1234-5678.",
    "zip_code_required": "Please enter a postal code.",
    "zip_code_invalid": "Postal codes are 5 digits.",
    "address_line1_required": "Please enter a street address.",
}


def validate_field(name: str, value: str) -> str | None:
    """Return the error message for a required field, or None when it is valid."""
    value = (value or "").strip()
    if name == "recipient" and not value:
        return VALIDATION_MESSAGES["recipient_required"]
    if name == "phone":
        if not value:
            return VALIDATION_MESSAGES["phone_required"]
        if not PHONE_PATTERN.match(value):
            return VALIDATION_MESSAGES["phone_invalid"]
    if name == "zip_code":
        if not value:
            return VALIDATION_MESSAGES["zip_code_required"]
        if not ZIP_CODE_PATTERN.match(value):
            return VALIDATION_MESSAGES["zip_code_invalid"]
    if name == "address_line1" and not value:
        return VALIDATION_MESSAGES["address_line1_required"]
    return None


class AddressResolver:
    """Holds the delivery form state for one checkout."""

    def __init__(self, profile: AccountProfile | None = None, saved_addresses: list[Address] | None = None) -> None:
        self.profile = profile or AccountProfile()
        # None while the address book is still loading
        self.saved_addresses: list[Address] | None = None
        self.selected: int | str = MANUAL_ENTRY
        self.errors: dict[str, str] = {}
        self.touched: set[str] = set()
        self._fields = self._profile_defaults()
        self._edited = False

        if saved_addresses is not None:
            self.addresses_loaded(saved_addresses)

    @property
    def delivery(self) -> Delivery:
        return self._fields

    @property
    def is_complete(self) -> bool:
        """Every required field has a value (not necessarily a valid one)."""
        return all((getattr(self._fields, name) or "").strip() for name in REQUIRED_FIELDS)

    def _profile_defaults(self) -> Delivery:
        return Delivery(recipient=self.profile.name or "", phone=self.profile.phone or "")

    # -------------------------------------------------------------------
    # Source selection
    # -------------------------------------------------------------------
    def addresses_loaded(self, addresses: list[Address]) -> None:
        """Receive the saved address list.

        The default entry (or the first one) is pre-selected unless the user
        already started typing, in which case their text is kept.
        """
        self.saved_addresses = list(addresses)
        if self._edited or not self.saved_addresses:
            return
        default = next((a for a in self.saved_addresses if a.is_default), self.saved_addresses[0])
        self._apply_saved(default)

    def select_saved(self, address_id: int) -> Address:
        address = next((a for a in self.saved_addresses or [] if a.id == address_id), None)
        if address is None:
            raise KeyError(f"Address {address_id} is not in the address book")
        self._apply_saved(address)
        self._revalidate_touched()
        return address

    def select_manual(self) -> None:
        self.selected = MANUAL_ENTRY
        self._fields = self._profile_defaults()
        self._revalidate_touched()

    def _apply_saved(self, address: Address) -> None:
        self.selected = address.id
        self._fields = Delivery(
            recipient=address.recipient,
            phone=address.phone,
            zip_code=address.zip_code,
            address_line1=address.address_line1,
            address_line2=address.address_line2 or "",
            save_as_default=False,
        )

    # -------------------------------------------------------------------
    # Field editing and validation
    # -------------------------------------------------------------------
    def set_field(self, name: str, value) -> None:
        if name not in FIELD_NAMES:
            raise KeyError(f"Unknown shipping field: {name}")
        if name == "save_as_default":
            value = bool(value)
        else:
            value = "" if value is None else str(value)
        self._fields = replace(self._fields, **{name: value})
        self._edited = True
        if name in self.touched and name in REQUIRED_FIELDS:
            self._validate(name)

    def blur(self, name: str) -> None:
        if name not in FIELD_NAMES:
            raise KeyError(f"Unknown shipping field: {name}")
        self.touched.add(name)
        if name in REQUIRED_FIELDS:
            self._validate(name)

    def validate_all(self, mode: FulfillmentMode) -> bool:
        """Validate every required field. In pickup mode the form is inert and its errors are cleared."""
        if mode == FulfillmentMode.PICKUP:
            self.clear_errors()
            return True
        results = [self._validate(name) for name in REQUIRED_FIELDS]
        return all(results)

    def clear_errors(self) -> None:
        for name in REQUIRED_FIELDS:
            self.errors.pop(name, None)

    def _validate(self, name: str) -> bool:
        message = validate_field(name, getattr(self._fields, name))
        if message:
            self.errors[name] = message
            return False
        self.errors.pop(name, None)
        return True

    def _revalidate_touched(self) -> None:
        for name in REQUIRED_FIELDS:
            if name in self.touched:
                self._validate(name)

    # -------------------------------------------------------------------
    # Persisting a new address
    # -------------------------------------------------------------------
    def save_new_address(self, address_book: AddressBook, label: str) -> Address | None:
        """Persist the current fields as a new address book entry.

        Returns None without calling the address book when any field is
        invalid. Collaborator failures propagate as CollaboratorError.
        """
        if not self.validate_all(FulfillmentMode.DELIVERY):
            return None

        fields = self._fields
        address = address_book.create(
            AddressFields(
                label=label,
                recipient=fields.recipient.strip(),
                phone=fields.phone.strip(),
                zip_code=fields.zip_code.strip(),
                address_line1=fields.address_line1.strip(),
                address_line2=fields.address_line2.strip(),
                is_default=fields.save_as_default,
            )
        )
        logger.info("Address saved", address_id=address.id, is_default=address.is_default)

        self.saved_addresses = [*(self.saved_addresses or []), address]
        self._apply_saved(address)
        return address
