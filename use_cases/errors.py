"""Error taxonomy for session and purchase flows."""

from typing import Optional


class TicketingError(Exception):
    code = "TICKETING_ERROR"
    default_message = "Something went wrong. Please try again."

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class AuthenticationFailed(TicketingError):
    code = "AUTHENTICATION_FAILED"
    default_message = "Invalid email or password."


class ProfileUpdateFailed(TicketingError):
    code = "PROFILE_UPDATE_FAILED"
    default_message = "Failed to update profile."


class EventLoadFailed(TicketingError):
    code = "EVENT_LOAD_FAILED"
    default_message = "Failed to load event details."


# Client-side validation errors: raised/returned without any network call.

class PurchaseValidationError(TicketingError):
    code = "PURCHASE_INVALID"
    field: Optional[str] = None


class NotAuthenticated(PurchaseValidationError):
    code = "NOT_AUTHENTICATED"
    default_message = "Please login to purchase tickets."


class QuantityOutOfRange(PurchaseValidationError):
    code = "QUANTITY_OUT_OF_RANGE"
    field = "quantity"

    def __init__(self, available: int, message: Optional[str] = None):
        self.available = available
        if message is None:
            if available <= 0:
                message = "No tickets available."
            else:
                message = f"Only {available} tickets available."
        super().__init__(message)


class InvalidPhoneNumber(PurchaseValidationError):
    code = "INVALID_PHONE_NUMBER"
    field = "phone_number"
    default_message = "Invalid phone number."


class InvalidPaymentMethod(PurchaseValidationError):
    code = "INVALID_PAYMENT_METHOD"
    field = "payment_type"
    default_message = "Please select payment method."


# Server-rejected operations.

class ReservationFailed(TicketingError):
    code = "RESERVATION_FAILED"
    default_message = "Failed to purchase ticket."


class PaymentInitiationFailed(TicketingError):
    code = "PAYMENT_INITIATION_FAILED"
    default_message = "Failed to initiate payment."


class ReservationOrphaned(PaymentInitiationFailed):
    """Payment failed after the reservation was created; it stays pending server-side."""

    code = "RESERVATION_ORPHANED"

    def __init__(self, reservation_id: str, message: Optional[str] = None):
        self.reservation_id = reservation_id
        super().__init__(message)
