import logging

import sentry_sdk
import streamlit as st

import auth
from infrastructure.storage.token_store import CookieTokenStore
from use_cases.navigation import Route
from use_cases.purchase_flow import PurchaseWorkflow
from use_cases.session_models import SessionSnapshot

log = logging.getLogger(__name__)

"""
SESSION STATE CONTRACT

Keys in st.session_state:

api_client: ApiClient
    backend client carrying this browser session's bearer token
    owner: session_manager

ticketing_session: SessionManager
    token/identity pair and readiness phase; only mutated through its own API
    owner: session_manager

purchase_workflow: PurchaseWorkflow | None
    checkout attempt bound to the purchase view currently on screen
    default: None
    owner: purchase_view

notices: list[tuple[str, str]]
    (level, message) notifications shown once after the next rerun
    default: []
    owner: ui
"""


def _sync_sentry_user(snapshot: SessionSnapshot):
    if snapshot.identity is None:
        sentry_sdk.set_user(None)
    else:
        sentry_sdk.set_user({"id": snapshot.identity.id, "role": snapshot.identity.role})


def init_session_state():
    if "api_client" not in st.session_state:
        st.session_state.api_client = auth.build_api_client()
    if "ticketing_session" not in st.session_state:
        session = auth.build_session_manager(CookieTokenStore(), client=st.session_state.api_client)
        session.subscribe(_sync_sentry_user)
        st.session_state.ticketing_session = session
    if "purchase_workflow" not in st.session_state:
        st.session_state.purchase_workflow = None
    if "notices" not in st.session_state:
        st.session_state.notices = []


def get_session():
    return st.session_state.ticketing_session


def get_client():
    return st.session_state.api_client


def restore_session() -> SessionSnapshot:
    """Runs the one-time session initialization for this browser session."""
    return get_session().initialize()


def recover_browser_token():
    """Anonymous visitors may still hold a token in localStorage after the cookie expired."""
    CookieTokenStore().render_recovery_script()


def push_notice(level: str, message: str):
    st.session_state.notices.append((level, message))


def render_notices():
    notices = st.session_state.get("notices") or []
    st.session_state.notices = []
    for level, message in notices:
        if level == "error":
            st.error(message)
        elif level == "warning":
            st.warning(message)
        elif level == "success":
            st.success(message)
        else:
            st.info(message)


def navigate(route: Route, **params):
    st.query_params.clear()
    st.query_params["view"] = route.value
    for key, value in params.items():
        st.query_params[key] = str(value)
    st.rerun()


def get_purchase_workflow(event_id: str) -> PurchaseWorkflow:
    workflow = st.session_state.get("purchase_workflow")
    if workflow is None or workflow.event_id != str(event_id) or workflow.disposed:
        dispose_purchase_workflow()
        workflow = PurchaseWorkflow(event_id, get_session(), get_client(), audit_repo=auth.get_audit_repo())
        st.session_state.purchase_workflow = workflow
    return workflow


def dispose_purchase_workflow():
    workflow = st.session_state.get("purchase_workflow")
    if workflow is not None:
        workflow.dispose()
    st.session_state.purchase_workflow = None


def logout():
    dispose_purchase_workflow()
    get_session().logout()
    push_notice("success", "Logged out successfully")
    navigate(Route.CATALOG)
