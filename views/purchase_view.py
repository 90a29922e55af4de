import streamlit as st

import ui
from use_cases.domain_models import PAYMENT_METHOD_LABELS, PAYMENT_METHODS
from use_cases.errors import ReservationFailed, ReservationOrphaned
from use_cases.navigation import Route
from use_cases.purchase_flow import PurchaseOutcome
from use_cases.purchase_validation import PurchaseIntent
from utils import session_manager


def _render_event_info(event, available):
    st.subheader(event.title)
    if event.description:
        st.write(event.description)
    st.markdown(ui.event_meta_html(event, available), unsafe_allow_html=True)


def _dispatch_outcome(workflow, outcome: PurchaseOutcome, was_authenticated: bool):
    session = session_manager.get_session()

    if outcome.status == "SUCCEEDED":
        session_manager.push_notice("success", outcome.notification)
        session_manager.dispose_purchase_workflow()
        session_manager.navigate(Route.TICKET, id=outcome.reservation_id)

    elif outcome.status == "REJECTED":
        st.error(outcome.notification)

    elif outcome.status == "FAILED":
        if was_authenticated and not session.is_authenticated:
            # The backend rejected the token; the gate will send the user to login.
            session_manager.push_notice("error", outcome.notification)
            st.rerun()
        st.error(outcome.notification)
        if isinstance(outcome.error, ReservationFailed):
            # Someone else may have bought the remaining seats.
            workflow.refresh_event()
        if isinstance(outcome.error, ReservationOrphaned):
            st.info(
                f"Reservation #{outcome.error.reservation_id} was created and is pending payment. "
                "You can find it under My tickets."
            )


def render_purchase(event_id):
    if not event_id:
        session_manager.push_notice("error", "Event not found")
        session_manager.navigate(Route.CATALOG)

    workflow = session_manager.get_purchase_workflow(event_id)
    if workflow.state == "loading-event":
        with st.spinner("Loading event details..."):
            outcome = workflow.load()
        if workflow.is_terminal:
            session_manager.push_notice("error", outcome.notification)
            session_manager.dispose_purchase_workflow()
            session_manager.navigate(Route.CATALOG)

    event = workflow.event
    session = session_manager.get_session()
    is_authenticated = session.is_authenticated

    st.title("🎟️ Purchase Tickets")
    col_info, col_form = st.columns(2)

    with col_info:
        _render_event_info(event, workflow.available)

    with col_form:
        st.subheader("Ticket Details")
        options = workflow.quantity_options
        if not options:
            st.warning("This event is sold out.")

        quantity = st.selectbox(
            "Number of tickets",
            options=options or [0],
            format_func=lambda n: f"{n} ticket{'s' if n != 1 else ''}",
            disabled=not options,
            key=f"purchase_qty_{event.id}",
        )
        phone_number = st.text_input(
            "Phone number",
            value=workflow.default_phone(),
            placeholder="+1234567890",
            key=f"purchase_phone_{event.id}",
        )
        payment_type = st.radio(
            "Payment method",
            options=list(PAYMENT_METHODS),
            format_func=lambda m: PAYMENT_METHOD_LABELS.get(m, m),
            key=f"purchase_method_{event.id}",
        )

        st.divider()
        c1, c2 = st.columns(2)
        c1.caption("Price per ticket")
        c2.write(ui.format_money(event.price))
        c1.caption("Quantity")
        c2.write(str(quantity))
        c1.markdown("**Total**")
        c2.markdown(f"**{ui.format_money(workflow.total(quantity))}**")

        label = "Purchase Tickets" if is_authenticated else "Login to Purchase"
        submitted = st.button(
            label,
            type="primary",
            use_container_width=True,
            disabled=not workflow.can_submit,
            key=f"purchase_submit_{event.id}",
        )

        if not is_authenticated:
            st.caption("You need to be logged in to purchase tickets.")
            if st.button("Login here", key="purchase_login_cta"):
                session_manager.navigate(Route.LOGIN)

        if submitted:
            intent = PurchaseIntent(
                event_id=event.id,
                quantity=int(quantity),
                phone_number=phone_number,
                payment_type=payment_type,
            )
            with st.spinner("Processing..."):
                outcome = workflow.submit(intent)
            _dispatch_outcome(workflow, outcome, is_authenticated)
