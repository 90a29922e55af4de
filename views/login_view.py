import streamlit as st

from use_cases.errors import AuthenticationFailed
from use_cases.navigation import Route
from use_cases.session_models import SELF_REGISTER_ROLES
from utils import session_manager

ROLE_LABELS = {"user": "Attendee", "organizer": "Event organizer"}


def render_auth_screen():
    st.title("🔐 Sign in to EventHub")
    session = session_manager.get_session()
    tab_login, tab_register = st.tabs(["Login", "Register"])

    with tab_login:
        with st.form("login_form", clear_on_submit=False):
            email = st.text_input("Email")
            password = st.text_input("Password", type="password")
            submitted = st.form_submit_button("Login")
            if submitted:
                try:
                    identity = session.login(email, password)
                except AuthenticationFailed as e:
                    st.error(e.message)
                else:
                    session_manager.push_notice("success", f"Welcome back, {identity.name}!")
                    session_manager.navigate(Route.CATALOG)

    with tab_register:
        with st.form("register_form", clear_on_submit=False):
            name = st.text_input("Full name *")
            email = st.text_input("Email *")
            phone = st.text_input("Phone number *", placeholder="+250700000000")
            role = st.selectbox(
                "Account type",
                options=list(SELF_REGISTER_ROLES),
                format_func=lambda r: ROLE_LABELS.get(r, r),
            )
            password = st.text_input("Password *", type="password")
            password_confirm = st.text_input("Confirm password *", type="password")
            submitted = st.form_submit_button("Create account")
            if submitted:
                if not all([name.strip(), email.strip(), phone.strip(), password, password_confirm]):
                    st.error("Please fill in all required fields.")
                elif password != password_confirm:
                    st.error("Passwords do not match.")
                elif len(password) < 8:
                    st.error("Password must be at least 8 characters.")
                else:
                    try:
                        session.register(name, email, phone, password, role)
                    except AuthenticationFailed as e:
                        st.error(e.message)
                    else:
                        session_manager.push_notice("success", "Registration successful")
                        session_manager.navigate(Route.CATALOG)
