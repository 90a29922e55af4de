import logging

import streamlit as st

import ui
from infrastructure.api.http_client import ApiError
from infrastructure.api.ticketing_api import EventsApi
from use_cases.navigation import Route
from utils import session_manager

log = logging.getLogger(__name__)

PAGE_SIZE = 12


def render_catalog():
    st.title("🎫 Upcoming Events")
    search = st.text_input("Search events", key="catalog_search", placeholder="Concert, festival, city...")
    page = st.session_state.get("catalog_page", 1)

    try:
        events, pagination = EventsApi(session_manager.get_client()).list_events(
            page=page, limit=PAGE_SIZE, search=search.strip() or None
        )
    except ApiError as e:
        log.warning(f"Failed to load events: {e}")
        st.error("Failed to load events. Please try again.")
        return

    if not events:
        st.info("No events found.")
        return

    for event in events:
        with st.container():
            st.markdown(ui.event_card_html(event), unsafe_allow_html=True)
            if st.button("Buy tickets", key=f"buy_{event.id}", disabled=event.available == 0):
                session_manager.navigate(Route.PURCHASE, event=event.id)

    pages = int(pagination.get("pages") or 1)
    if pages > 1:
        c_prev, c_page, c_next = st.columns([1, 2, 1])
        if c_prev.button("← Prev", disabled=page <= 1):
            st.session_state.catalog_page = page - 1
            st.rerun()
        c_page.caption(f"Page {page} of {pages}")
        if c_next.button("Next →", disabled=page >= pages):
            st.session_state.catalog_page = page + 1
            st.rerun()
