"""Purchase intent validation, independent of any form widget."""

import re
from dataclasses import dataclass
from typing import Optional

from config import MAX_TICKETS_PER_ORDER
from use_cases.domain_models import PAYMENT_METHODS, EventSnapshot
from use_cases.errors import (
    InvalidPaymentMethod,
    InvalidPhoneNumber,
    NotAuthenticated,
    PurchaseValidationError,
    QuantityOutOfRange,
)
from use_cases.session_models import SessionSnapshot

# Optional "+", then a non-zero digit and 1-14 more digits.
MSISDN_PATTERN = re.compile(r"^\+?[1-9]\d{1,14}$")


@dataclass(frozen=True)
class PurchaseIntent:
    event_id: str
    quantity: int
    phone_number: str
    payment_type: str


def quantity_options(available: int):
    """Selectable quantities for the order form, empty when sold out."""
    return list(range(1, min(MAX_TICKETS_PER_ORDER, max(0, available)) + 1))


def is_valid_phone_number(phone_number: str) -> bool:
    return bool(MSISDN_PATTERN.match((phone_number or "").strip()))


def validate_purchase_intent(
    intent: PurchaseIntent,
    event: EventSnapshot,
    session: SessionSnapshot,
) -> Optional[PurchaseValidationError]:
    """Returns the first violated rule, or None when the intent may be submitted."""
    if session.identity is None:
        return NotAuthenticated()

    available = event.available
    quantity = intent.quantity
    if isinstance(quantity, bool) or not isinstance(quantity, int) or not 1 <= quantity <= available:
        return QuantityOutOfRange(available)
    if quantity > MAX_TICKETS_PER_ORDER:
        return QuantityOutOfRange(available, f"Maximum {MAX_TICKETS_PER_ORDER} tickets per order.")

    if not is_valid_phone_number(intent.phone_number):
        return InvalidPhoneNumber()

    if intent.payment_type not in PAYMENT_METHODS:
        return InvalidPaymentMethod()

    return None
