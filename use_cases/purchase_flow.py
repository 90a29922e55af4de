"""Ticket reservation and payment orchestration (application layer)."""

import logging
import threading
from dataclasses import dataclass
from typing import List, Literal, Optional

from infrastructure.api.http_client import ApiError
from infrastructure.api.ticketing_api import EventsApi, PaymentsApi, TicketsApi
from infrastructure.repositories.sqlite_audit_repository import AuditAction
from use_cases.domain_models import EventSnapshot, PaymentAttempt, Reservation
from use_cases.errors import (
    EventLoadFailed,
    NotAuthenticated,
    ReservationFailed,
    ReservationOrphaned,
    TicketingError,
)
from use_cases.purchase_validation import PurchaseIntent, quantity_options, validate_purchase_intent

log = logging.getLogger(__name__)

PurchaseState = Literal["loading-event", "ready", "submitting", "succeeded", "failed"]
OutcomeStatus = Literal["SUCCEEDED", "FAILED", "REJECTED", "IGNORED", "DISCARDED"]
NextView = Literal["ticket", "catalog", "login"]

MOMO_NOTICE = "Payment initiated! Check your phone for the MoMo prompt."
USSD_NOTICE = "Ticket created! You will receive an SMS with details."

_MALFORMED_RESPONSE = (KeyError, TypeError, ValueError)


@dataclass(frozen=True)
class PurchaseOutcome:
    """Result contract for one load/submit step of the purchase workflow."""

    status: OutcomeStatus
    notification: str = ""
    next_view: Optional[NextView] = None
    reservation_id: Optional[str] = None
    payment: Optional[PaymentAttempt] = None
    error: Optional[TicketingError] = None


def _server_reason(error: Exception) -> Optional[str]:
    if isinstance(error, ApiError) and error.status_code is not None:
        return error.reason
    return None


class PurchaseWorkflow:
    """
    One checkout attempt for one event:
    loading-event -> ready -> submitting -> succeeded | failed.

    Reservation and payment are two dependent calls made strictly in order.
    A payment failure leaves the pending reservation in place (no compensation).
    """

    def __init__(self, event_id: str, session, client, audit_repo=None):
        self.event_id = str(event_id)
        self._session = session
        self._events_api = EventsApi(client)
        self._tickets_api = TicketsApi(client)
        self._payments_api = PaymentsApi(client)
        self._audit_repo = audit_repo
        self._submit_lock = threading.Lock()
        self._disposed = False

        self.state: PurchaseState = "loading-event"
        self.event: Optional[EventSnapshot] = None
        self.reservation: Optional[Reservation] = None

    # --- load ---

    def load(self) -> PurchaseOutcome:
        try:
            event = self._events_api.get_event(self.event_id)
        except (ApiError, *_MALFORMED_RESPONSE) as e:
            log.warning(f"Failed to load event {self.event_id}: {e}")
            error = EventLoadFailed(_server_reason(e))
            return self._apply("failed", PurchaseOutcome(
                status="FAILED", notification=error.message, next_view="catalog", error=error,
            ))

        if self._disposed:
            return PurchaseOutcome(status="DISCARDED")
        self.event = event
        self.state = "ready"
        log.info(f"Event {event.id} loaded: {event.available} of {event.max_tickets} tickets available")
        return PurchaseOutcome(status="SUCCEEDED")

    def refresh_event(self) -> bool:
        """Reloads the snapshot without leaving the current state; False if it failed."""
        if self.event is None:
            return False
        try:
            event = self._events_api.get_event(self.event_id)
        except (ApiError, *_MALFORMED_RESPONSE) as e:
            log.warning(f"Failed to refresh event {self.event_id}: {e}")
            return False
        if not self._disposed:
            self.event = event
        return True

    # --- derived state ---

    @property
    def available(self) -> int:
        return self.event.available if self.event is not None else 0

    @property
    def quantity_options(self) -> List[int]:
        return quantity_options(self.available)

    @property
    def is_terminal(self) -> bool:
        return self.event is None and self.state == "failed"

    @property
    def can_submit(self) -> bool:
        return (
            self.event is not None
            and self.available > 0
            and self.state in ("ready", "failed")
            and not self._disposed
        )

    def total(self, quantity: int) -> float:
        if self.event is None:
            return 0.0
        return round(self.event.price * max(0, quantity), 2)

    def default_phone(self) -> str:
        identity = self._session.snapshot().identity
        return identity.phone if identity is not None else ""

    # --- submit ---

    def submit(self, intent: PurchaseIntent) -> PurchaseOutcome:
        if not self._submit_lock.acquire(blocking=False):
            log.info("Ignoring repeated submit while a purchase is in flight")
            return PurchaseOutcome(status="IGNORED")
        try:
            if not self.can_submit:
                return PurchaseOutcome(status="IGNORED")

            # Availability is read from the latest snapshot at submit time.
            error = validate_purchase_intent(intent, self.event, self._session.snapshot())
            if error is not None:
                return PurchaseOutcome(
                    status="REJECTED",
                    notification=error.message,
                    next_view="login" if isinstance(error, NotAuthenticated) else None,
                    error=error,
                )

            self.state = "submitting"
            return self._run_submission(intent)
        finally:
            self._submit_lock.release()

    def _run_submission(self, intent: PurchaseIntent) -> PurchaseOutcome:
        try:
            reservation = self._tickets_api.create_ticket(self.event_id, intent.quantity)
        except (ApiError, *_MALFORMED_RESPONSE) as e:
            log.warning(f"Reservation for event {self.event_id} failed: {e}")
            error = ReservationFailed(_server_reason(e))
            self._audit(AuditAction.RESERVATION_FAILED, metadata={
                "event_id": self.event_id, "quantity": intent.quantity, "error_message": error.message,
            }, result="fail")
            return self._apply("failed", PurchaseOutcome(status="FAILED", notification=error.message, error=error))

        self._audit(AuditAction.RESERVATION_CREATED, target_id=reservation.id, metadata={
            "event_id": self.event_id, "quantity": intent.quantity, "status": reservation.status,
        })

        try:
            payment, provider_ack = self._payments_api.initiate_payment(
                self.event_id, intent.quantity, intent.phone_number.strip(), intent.payment_type,
            )
        except (ApiError, *_MALFORMED_RESPONSE) as e:
            log.warning(f"Payment initiation failed, reservation {reservation.id} stays pending: {e}")
            error = ReservationOrphaned(reservation.id, _server_reason(e))
            self._audit(AuditAction.PAYMENT_FAILED, target_id=reservation.id, metadata={
                "reservation_id": reservation.id, "payment_type": intent.payment_type, "error_message": error.message,
            }, result="fail")
            return self._apply("failed", PurchaseOutcome(
                status="FAILED", notification=error.message, reservation_id=reservation.id, error=error,
            ), reservation=reservation)

        self._audit(AuditAction.PAYMENT_INITIATED, target_id=payment.id, metadata={
            "reservation_id": reservation.id, "payment_id": payment.id, "payment_type": intent.payment_type,
        })
        if intent.payment_type == "momo" and not provider_ack:
            log.info(f"Payment {payment.id} initiated without a MoMo acknowledgement")

        notice = MOMO_NOTICE if intent.payment_type == "momo" else USSD_NOTICE
        return self._apply("succeeded", PurchaseOutcome(
            status="SUCCEEDED",
            notification=notice,
            next_view="ticket",
            reservation_id=reservation.id,
            payment=payment,
        ), reservation=reservation)

    def _apply(self, state: PurchaseState, outcome: PurchaseOutcome, reservation: Optional[Reservation] = None) -> PurchaseOutcome:
        if self._disposed:
            log.info(f"Purchase view for event {self.event_id} is gone; dropping {outcome.status} result")
            return PurchaseOutcome(status="DISCARDED", reservation_id=outcome.reservation_id)
        self.state = state
        if reservation is not None:
            self.reservation = reservation
        return outcome

    # --- lifecycle ---

    def dispose(self) -> None:
        """Detaches the workflow from its view; late results are dropped."""
        self._disposed = True

    @property
    def disposed(self) -> bool:
        return self._disposed

    def _audit(self, action, target_id=None, metadata=None, result="success"):
        if self._audit_repo is None:
            return
        identity = self._session.snapshot().identity
        self._audit_repo.log_action(
            action,
            target_type="purchase",
            actor_user_id=identity.id if identity else None,
            actor_role=identity.role if identity else None,
            target_id=target_id,
            metadata=metadata,
            result=result,
        )
