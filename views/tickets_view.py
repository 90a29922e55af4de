import logging

import streamlit as st

from infrastructure.api.http_client import ApiError
from infrastructure.api.ticketing_api import TicketsApi
from use_cases.navigation import Route
from utils import session_manager

log = logging.getLogger(__name__)

STATUS_BADGES = {
    "pending": "🕒 Pending payment",
    "paid": "✅ Paid",
    "used": "🎉 Used",
    "cancelled": "❌ Cancelled",
    "refunded": "↩️ Refunded",
}


def render_ticket_result(ticket_id):
    """Result view a purchase lands on, keyed by reservation id."""
    st.title("🎟️ Your Ticket")
    if not ticket_id:
        st.error("Ticket not found")
        return
    try:
        ticket = TicketsApi(session_manager.get_client()).get_ticket(ticket_id)
    except ApiError as e:
        log.warning(f"Failed to load ticket {ticket_id}: {e}")
        st.error("Failed to load ticket details.")
        return

    st.metric("Status", STATUS_BADGES.get(ticket.status, ticket.status))
    st.write(f"Reservation: **#{ticket.id}**")
    st.write(f"Quantity: **{ticket.quantity}**")
    if ticket.ticket_code:
        st.code(ticket.ticket_code)
    if ticket.status == "pending":
        st.info("Payment confirmation may take a few minutes. Refresh this page to see the latest status.")
    if st.button("← Back to events"):
        session_manager.navigate(Route.CATALOG)


def render_my_tickets():
    st.title("🎫 My Tickets")
    try:
        tickets = TicketsApi(session_manager.get_client()).list_user_tickets()
    except ApiError as e:
        log.warning(f"Failed to load tickets: {e}")
        st.error("Failed to load your tickets.")
        return

    if not tickets:
        st.info("You have no tickets yet.")
        return

    for ticket in tickets:
        c1, c2, c3 = st.columns([3, 2, 1])
        c1.write(f"#{ticket.id} · {ticket.quantity} ticket(s)")
        c2.write(STATUS_BADGES.get(ticket.status, ticket.status))
        if c3.button("Open", key=f"open_ticket_{ticket.id}"):
            session_manager.navigate(Route.TICKET, id=ticket.id)
