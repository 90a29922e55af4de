"""Endpoint wrappers for the ticketing backend (auth, events, tickets, payments)."""

from typing import Any, Dict, List, Optional, Tuple

from infrastructure.api.http_client import ApiClient
from use_cases.domain_models import EventSnapshot, PaymentAttempt, Reservation
from use_cases.session_models import UserIdentity


class AuthApi:
    def __init__(self, client: ApiClient):
        self.client = client

    def login(self, email: str, password: str) -> Tuple[str, UserIdentity]:
        body = self.client.post("/login", json={"email": email, "password": password})
        return body["token"], UserIdentity.from_api(body["user"])

    def register(self, name: str, email: str, phone: str, password: str, role: str) -> Tuple[str, UserIdentity]:
        body = self.client.post(
            "/register",
            json={"name": name, "email": email, "phone": phone, "password": password, "role": role},
        )
        return body["token"], UserIdentity.from_api(body["user"])

    def get_current_user(self) -> UserIdentity:
        return UserIdentity.from_api(self.client.get("/me")["user"])

    def update_profile(self, fields: Dict[str, str]) -> UserIdentity:
        return UserIdentity.from_api(self.client.put("/me", json=fields)["user"])


class EventsApi:
    def __init__(self, client: ApiClient):
        self.client = client

    def get_event(self, event_id: str) -> EventSnapshot:
        return EventSnapshot.from_api(self.client.get(f"/events/{event_id}")["event"])

    def list_events(self, page: int = 1, limit: int = 12, search: Optional[str] = None) -> Tuple[List[EventSnapshot], Dict[str, Any]]:
        params: Dict[str, Any] = {"page": page, "limit": limit}
        if search:
            params["search"] = search
        body = self.client.get("/events", params=params)
        events = [EventSnapshot.from_api(e) for e in body.get("events") or []]
        return events, body.get("pagination") or {}


class TicketsApi:
    def __init__(self, client: ApiClient):
        self.client = client

    def create_ticket(self, event_id: str, quantity: int) -> Reservation:
        body = self.client.post("/tickets", json={"event_id": event_id, "quantity": quantity})
        return Reservation.from_api(body["ticket"])

    def get_ticket(self, ticket_id: str) -> Reservation:
        return Reservation.from_api(self.client.get(f"/tickets/{ticket_id}")["ticket"])

    def list_user_tickets(self, page: int = 1, limit: int = 20) -> List[Reservation]:
        body = self.client.get("/user/tickets", params={"page": page, "limit": limit})
        return [Reservation.from_api(t) for t in body.get("tickets") or []]


class PaymentsApi:
    def __init__(self, client: ApiClient):
        self.client = client

    def initiate_payment(
        self, event_id: str, quantity: int, phone_number: str, payment_type: str
    ) -> Tuple[PaymentAttempt, Optional[Dict[str, Any]]]:
        body = self.client.post(
            "/payment/initiate",
            json={
                "event_id": event_id,
                "quantity": quantity,
                "phone_number": phone_number,
                "payment_type": payment_type,
            },
        )
        return PaymentAttempt.from_api(body.get("payment") or {}), body.get("momo")
