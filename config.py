import os

import streamlit as st

TOKEN_COOKIE_NAME = "eventhub_auth_token"
TOKEN_COOKIE_MAX_AGE = 2592000  # 30 days
MAX_TICKETS_PER_ORDER = 10
DEFAULT_API_BASE_URL = "http://localhost:8080/api"
DEFAULT_API_TIMEOUT = 10
DEFAULT_AUDIT_DB = "audit.db"


def get_secret(key):
    try:
        return st.secrets.get(key)
    except FileNotFoundError:
        return None


def get_setting(key, default=None):
    """Secrets first, then environment, then the given default."""
    value = get_secret(key) or os.getenv(key)
    return value if value else default


def get_api_base_url() -> str:
    return str(get_setting("API_BASE_URL", DEFAULT_API_BASE_URL)).rstrip("/")


def get_api_timeout() -> float:
    raw = get_setting("API_TIMEOUT_SECONDS", DEFAULT_API_TIMEOUT)
    try:
        return float(raw)
    except (TypeError, ValueError):
        return float(DEFAULT_API_TIMEOUT)


def get_audit_db_path() -> str:
    return str(get_setting("AUDIT_DB", DEFAULT_AUDIT_DB))
