"""Wiring for the ticketing backend client, session manager and audit trail."""

import logging

import config
from infrastructure.api.http_client import ApiClient
from infrastructure.repositories.sqlite_audit_repository import SQLiteAuditRepository
from use_cases.session_service import SessionManager

log = logging.getLogger(__name__)

_audit_repo = None


def get_audit_repo() -> SQLiteAuditRepository:
    global _audit_repo
    db_path = config.get_audit_db_path()
    if _audit_repo is None or _audit_repo.db_path != db_path:
        _audit_repo = SQLiteAuditRepository(db_path)
        _audit_repo.init_db()
    return _audit_repo


def build_api_client() -> ApiClient:
    # One client per browser session: the token provider is session specific.
    return ApiClient(config.get_api_base_url(), timeout=config.get_api_timeout())


def build_session_manager(token_store, client: ApiClient = None) -> SessionManager:
    client = client or build_api_client()
    return SessionManager(client, token_store, audit_repo=get_audit_repo())
