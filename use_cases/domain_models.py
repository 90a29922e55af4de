from dataclasses import dataclass
from typing import Any, Dict, Literal, Optional

PaymentMethod = Literal["momo", "ussd"]
PAYMENT_METHODS = ("momo", "ussd")
PAYMENT_METHOD_LABELS = {
    "momo": "Mobile Money (MoMo)",
    "ussd": "USSD Payment",
}

TicketStatus = Literal["pending", "paid", "used", "cancelled", "refunded"]
PaymentStatus = Literal["pending", "success", "failed", "cancelled"]


def _to_int(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


@dataclass(frozen=True)
class EventSnapshot:
    """Read-only event data needed to buy tickets."""
    id: str
    title: str
    description: str
    date: str
    location: str
    price: float
    max_tickets: int
    sold_tickets: int
    status: str

    @classmethod
    def from_api(cls, payload: Dict[str, Any]) -> "EventSnapshot":
        try:
            price = float(payload.get("price") or 0)
        except (TypeError, ValueError):
            price = 0.0
        return cls(
            id=str(payload["id"]),
            title=payload.get("title") or "",
            description=payload.get("description") or "",
            date=payload.get("date") or "",
            location=payload.get("location") or "",
            price=max(0.0, price),
            max_tickets=_to_int(payload.get("max_tickets")),
            sold_tickets=_to_int(payload.get("sold_tickets")),
            status=payload.get("status") or "",
        )

    @property
    def available(self) -> int:
        # Never trust the backend to keep sold_tickets <= max_tickets.
        return max(0, self.max_tickets - self.sold_tickets)


@dataclass(frozen=True)
class Reservation:
    id: str
    event_id: str
    owner_id: str
    quantity: int
    status: TicketStatus
    ticket_code: str = ""

    @classmethod
    def from_api(cls, payload: Dict[str, Any]) -> "Reservation":
        return cls(
            id=str(payload["id"]),
            event_id=str(payload.get("event_id") or ""),
            owner_id=str(payload.get("user_id") or ""),
            quantity=_to_int(payload.get("quantity")) or 1,
            status=payload.get("status") or "pending",
            ticket_code=payload.get("ticket_code") or "",
        )


@dataclass(frozen=True)
class PaymentAttempt:
    id: str
    reservation_id: str
    amount: float
    method: str
    status: PaymentStatus
    provider_reference: Optional[str] = None

    @classmethod
    def from_api(cls, payload: Dict[str, Any]) -> "PaymentAttempt":
        try:
            amount = float(payload.get("amount") or 0)
        except (TypeError, ValueError):
            amount = 0.0
        return cls(
            id=str(payload.get("id") or ""),
            reservation_id=str(payload.get("ticket_id") or ""),
            amount=amount,
            method=payload.get("payment_type") or "",
            status=payload.get("status") or "pending",
            provider_reference=payload.get("momo_ref") or None,
        )
