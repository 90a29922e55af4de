"""Authorization gate orchestration (application layer)."""

from dataclasses import dataclass
from typing import Literal, Optional

import auth
from infrastructure.repositories.sqlite_audit_repository import AuditAction
from use_cases import navigation, rbac_policy
from use_cases.rbac_policy import GateDecision
from utils import session_manager

AuthFlowStatus = Literal["CONTINUE", "STOP"]


@dataclass(frozen=True)
class AuthFlowResult:
    """Result contract for auth flow orchestration."""

    status: AuthFlowStatus
    decision: GateDecision
    reason: str
    user_id: Optional[str] = None


def ensure_view_access(route: navigation.Route) -> AuthFlowResult:
    """Run the gate for a route and return a control-flow status."""
    session = session_manager.get_session()

    if session.consume_login_redirect():
        session_manager.push_notice("warning", "Your session has expired. Please login again.")
        return AuthFlowResult(status="STOP", decision=GateDecision.REDIRECT_LOGIN, reason="session_invalidated")

    snapshot = session.snapshot()
    user_id = snapshot.identity.id if snapshot.identity is not None else None

    if navigation.is_public(route):
        if not snapshot.is_ready:
            return AuthFlowResult(status="STOP", decision=GateDecision.DEFER, reason="initializing")
        return AuthFlowResult(status="CONTINUE", decision=GateDecision.RENDER, reason="public", user_id=user_id)

    required = navigation.required_roles(route)
    decision = rbac_policy.evaluate_access(snapshot, required)

    if decision == GateDecision.REDIRECT_UNAUTHORIZED:
        auth.get_audit_repo().log_action(
            AuditAction.RBAC_DENIED,
            target_type="rbac",
            actor_user_id=user_id,
            actor_role=snapshot.identity.role,
            metadata={"view": route.value, "required_roles": sorted(required), "reason": "insufficient_rights"},
            result="deny",
        )

    if decision == GateDecision.RENDER:
        return AuthFlowResult(status="CONTINUE", decision=decision, reason="authorized", user_id=user_id)
    return AuthFlowResult(status="STOP", decision=decision, reason=decision.value.lower(), user_id=user_id)
