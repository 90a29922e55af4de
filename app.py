import os

import streamlit as st
from datetime import datetime, timezone

from infrastructure.observability import setup_observability
setup_observability()

import ui
from use_cases import auth_flow, bootstrap, navigation
from use_cases.navigation import Route, ROUTE_LABELS
from use_cases.rbac_policy import GateDecision
from use_cases.session_models import is_admin
from utils import session_manager
from views import admin_view, catalog_view, login_view, profile_view, purchase_view, tickets_view

# --- PAGE SETUP ---
st.set_page_config(page_title="EventHub Tickets", layout="wide", initial_sidebar_state="expanded")

FORCE_HTTPS = os.getenv("FORCE_HTTPS", "False").lower() == "true"

# Health Check (Basic load-balancer heartbeat)
if st.query_params.get("health") == "1":
    st.write({"status": "ok", "version": "1.0", "time": datetime.now(timezone.utc).isoformat()})
    st.stop()

if FORCE_HTTPS:
    proto = st.context.headers.get("x-forwarded-proto", "http").lower()
    if proto != "https":
        st.error("🚨 Insecure connection. Please use HTTPS.")
        st.stop()

ui.setup_style()

# --- STARTUP ORCHESTRATION ---
startup_result = bootstrap.run_startup()
if startup_result.status == "STOP":
    st.stop()

route = navigation.select_route(st.query_params.get("view"))
if route != Route.PURCHASE:
    # Leaving the purchase view: late submit results must not land anywhere.
    session_manager.dispose_purchase_workflow()

# --- SIDEBAR ---
session = session_manager.get_session()
if not session.is_authenticated:
    session_manager.recover_browser_token()

with st.sidebar:
    st.markdown("### 🎫 EventHub")
    if session.is_authenticated:
        st.caption(f"Signed in as {session.identity.name} ({session.identity.role})")
    for target, label in ROUTE_LABELS.items():
        if target != Route.CATALOG and not session.is_authenticated:
            continue
        if target == Route.ACTIVITY and not is_admin(session.identity):
            continue
        if st.button(label, key=f"nav_{target.value}", use_container_width=True):
            session_manager.navigate(target)
    st.divider()
    if session.is_authenticated:
        if st.button("Logout", key="logout_btn", type="secondary"):
            session_manager.logout()
    elif route != Route.LOGIN:
        if st.button("Login / Register", key="login_btn", type="primary"):
            session_manager.navigate(Route.LOGIN)

session_manager.render_notices()

# --- AUTHORIZATION GATE ---
auth_result = auth_flow.ensure_view_access(route)
if auth_result.status == "STOP":
    if auth_result.decision == GateDecision.DEFER:
        ui.render_loading_placeholder("Restoring your session...")
        st.stop()
    if auth_result.decision == GateDecision.REDIRECT_LOGIN:
        if route == Route.LOGIN:
            login_view.render_auth_screen()
            st.stop()
        session_manager.navigate(Route.LOGIN)
    if auth_result.decision == GateDecision.REDIRECT_UNAUTHORIZED:
        session_manager.navigate(Route.UNAUTHORIZED)
    st.stop()

# --- ROUTES ---
if route == Route.LOGIN:
    if session.is_authenticated:
        session_manager.navigate(Route.CATALOG)
    login_view.render_auth_screen()
elif route == Route.PURCHASE:
    purchase_view.render_purchase(st.query_params.get("event"))
elif route == Route.TICKET:
    tickets_view.render_ticket_result(st.query_params.get("id"))
elif route == Route.MY_TICKETS:
    tickets_view.render_my_tickets()
elif route == Route.PROFILE:
    profile_view.render_profile()
elif route == Route.ACTIVITY:
    admin_view.render_activity_log()
elif route == Route.UNAUTHORIZED:
    st.title("⛔ Access denied")
    st.write("You don't have permission to view this page.")
    if st.button("← Back to events"):
        session_manager.navigate(Route.CATALOG)
else:
    catalog_view.render_catalog()
