"""Application layer contracts for orchestrating high-level flows."""

from .auth_flow import AuthFlowResult, AuthFlowStatus, ensure_view_access
from .bootstrap import StartupResult, StartupStatus, run_startup
from .navigation import ROUTE_ROLES, Route, select_route
from .purchase_flow import PurchaseOutcome, PurchaseWorkflow
from .purchase_validation import PurchaseIntent, validate_purchase_intent
from .rbac_policy import GateDecision, evaluate_access
from .session_models import Role, SessionSnapshot, UserIdentity, is_admin
from .session_service import SessionManager

__all__ = [
    "AuthFlowResult",
    "AuthFlowStatus",
    "GateDecision",
    "PurchaseIntent",
    "PurchaseOutcome",
    "PurchaseWorkflow",
    "ROUTE_ROLES",
    "Role",
    "Route",
    "SessionManager",
    "SessionSnapshot",
    "StartupResult",
    "StartupStatus",
    "UserIdentity",
    "ensure_view_access",
    "evaluate_access",
    "is_admin",
    "run_startup",
    "select_route",
    "validate_purchase_intent",
]
