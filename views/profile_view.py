import streamlit as st

from use_cases.errors import ProfileUpdateFailed
from use_cases.purchase_validation import is_valid_phone_number
from utils import session_manager


def render_profile():
    session = session_manager.get_session()
    identity = session.identity
    st.title(f"👤 {identity.name}")
    st.caption(f"{identity.email} · {identity.role}")

    with st.form("profile_form"):
        name = st.text_input("Full name", value=identity.name)
        phone = st.text_input("Phone number", value=identity.phone)
        submitted = st.form_submit_button("Save changes")

    if submitted:
        if not name.strip():
            st.error("Name cannot be empty.")
        elif phone.strip() and not is_valid_phone_number(phone):
            st.error("Invalid phone number.")
        else:
            try:
                session.update_profile(name=name, phone=phone)
            except ProfileUpdateFailed as e:
                st.error(e.message)
            else:
                session_manager.push_notice("success", "Profile updated")
                st.rerun()
