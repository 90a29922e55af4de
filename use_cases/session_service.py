"""Session manager: owns the token/identity pair and its lifecycle."""

import logging
from typing import Callable, List, Optional

from infrastructure.api.http_client import ApiClient, ApiError
from infrastructure.api.ticketing_api import AuthApi
from infrastructure.repositories.sqlite_audit_repository import AuditAction
from use_cases.errors import AuthenticationFailed, ProfileUpdateFailed
from use_cases.session_models import (
    SELF_REGISTER_ROLES,
    ReadinessPhase,
    SessionSnapshot,
    UserIdentity,
)

log = logging.getLogger(__name__)

SessionListener = Callable[[SessionSnapshot], None]

# Raised by the API layer when a response body is missing the fields we expect.
_MALFORMED_RESPONSE = (KeyError, TypeError, ValueError)


def _failure_reason(error: Exception) -> Optional[str]:
    if isinstance(error, ApiError) and error.status_code is not None:
        return error.reason
    return None


class SessionManager:
    """
    Holds the authenticated principal for one browser session.

    The phase moves from "initializing" to "ready" exactly once. Token and identity
    are always written together; the only exception is the initialize() window,
    where a persisted token is held while it is being resolved via GET /me.
    """

    def __init__(self, client: ApiClient, token_store, audit_repo=None):
        self._client = client
        self._auth_api = AuthApi(client)
        self._token_store = token_store
        self._audit_repo = audit_repo
        self._phase: ReadinessPhase = "initializing"
        self._identity: Optional[UserIdentity] = None
        self._token: Optional[str] = None
        self._listeners: List[SessionListener] = []
        self._login_redirect_pending = False

        client.set_token_provider(self.get_token)
        client.on_session_invalidated(self._handle_session_invalidated)

    # --- read API ---

    @property
    def phase(self) -> ReadinessPhase:
        return self._phase

    @property
    def identity(self) -> Optional[UserIdentity]:
        return self._identity

    @property
    def is_authenticated(self) -> bool:
        return self._identity is not None

    def get_token(self) -> Optional[str]:
        return self._token

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(phase=self._phase, identity=self._identity)

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def consume_login_redirect(self) -> bool:
        """Returns True once after the session was invalidated by the backend."""
        pending = self._login_redirect_pending
        self._login_redirect_pending = False
        return pending

    # --- mutations ---

    def initialize(self) -> SessionSnapshot:
        if self._phase == "ready":
            return self.snapshot()

        token = self._token_store.load()
        if token:
            self._token = token
            try:
                identity = self._auth_api.get_current_user()
            except (ApiError, *_MALFORMED_RESPONSE) as e:
                log.warning(f"⚠️ Could not restore session from stored token: {e}")
                self._token = None
                self._identity = None
                self._token_store.clear()
            else:
                self._identity = identity
                log.info(f"Session restored for user {identity.id} ({identity.role})")
                self._audit(AuditAction.SESSION_RESTORED, target_type="session")

        self._phase = "ready"
        self._notify()
        return self.snapshot()

    def login(self, email: str, password: str) -> UserIdentity:
        email = (email or "").strip()
        try:
            token, identity = self._auth_api.login(email, password)
        except (ApiError, *_MALFORMED_RESPONSE) as e:
            log.warning(f"Login failed: {e}")
            self._audit(AuditAction.LOGIN_FAIL, target_type="session", metadata={"reason": str(e)}, result="deny")
            raise AuthenticationFailed(_failure_reason(e)) from e

        self._establish(token, identity)
        self._audit(AuditAction.LOGIN_SUCCESS, target_type="session")
        return identity

    def register(self, name: str, email: str, phone: str, password: str, role: str = "user") -> UserIdentity:
        if role not in SELF_REGISTER_ROLES:
            raise AuthenticationFailed(f"Cannot self-register with role '{role}'.")
        try:
            token, identity = self._auth_api.register(name.strip(), email.strip(), phone.strip(), password, role)
        except (ApiError, *_MALFORMED_RESPONSE) as e:
            log.warning(f"Registration failed: {e}")
            self._audit(AuditAction.LOGIN_FAIL, target_type="registration", metadata={"reason": str(e)}, result="deny")
            raise AuthenticationFailed(_failure_reason(e) or "Registration failed. Please try again.") from e

        self._establish(token, identity)
        self._audit(AuditAction.REGISTER, target_type="registration", metadata={"role": role})
        return identity

    def logout(self) -> None:
        previous = self._identity
        self._token = None
        self._identity = None
        self._token_store.clear()
        if previous is not None:
            self._audit(AuditAction.LOGOUT, target_type="session", actor=previous)
        self._notify()

    def update_profile(self, name: Optional[str] = None, phone: Optional[str] = None) -> UserIdentity:
        if self._identity is None:
            raise ProfileUpdateFailed("Please login to update your profile.")

        fields = {}
        if name is not None:
            fields["name"] = name.strip()
        if phone is not None:
            fields["phone"] = phone.strip()
        if not fields:
            return self._identity

        try:
            identity = self._auth_api.update_profile(fields)
        except (ApiError, *_MALFORMED_RESPONSE) as e:
            log.warning(f"Profile update failed: {e}")
            raise ProfileUpdateFailed(_failure_reason(e)) from e

        # The session may have been torn down while the call was in flight.
        if self._identity is None:
            raise ProfileUpdateFailed("Session ended before the profile was saved.")

        self._identity = identity
        self._audit(AuditAction.PROFILE_UPDATE, target_type="user", target_id=identity.id)
        self._notify()
        return identity

    # --- internals ---

    def _establish(self, token: str, identity: UserIdentity) -> None:
        self._token_store.save(token)
        self._token = token
        self._identity = identity
        self._phase = "ready"
        log.info(f"Session established for user {identity.id} ({identity.role})")
        self._notify()

    def _handle_session_invalidated(self, reason: str) -> None:
        actor = self._identity
        log.warning(f"Session invalidated by backend: {reason}")
        if actor is not None:
            self._audit(
                AuditAction.SESSION_INVALIDATED,
                target_type="session",
                actor=actor,
                metadata={"reason": reason},
                result="deny",
            )
        # During initialize() the stale token is dropped without a redirect.
        if self._phase == "ready":
            self._login_redirect_pending = True
        self.logout()

    def _notify(self) -> None:
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            listener(snapshot)

    def _audit(self, action, target_type, actor=None, target_id=None, metadata=None, result="success"):
        if self._audit_repo is None:
            return
        actor = actor or self._identity
        self._audit_repo.log_action(
            action,
            target_type=target_type,
            actor_user_id=actor.id if actor else None,
            actor_role=actor.role if actor else None,
            target_id=target_id,
            metadata=metadata,
            result=result,
        )
