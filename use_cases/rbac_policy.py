"""Centralized Role-Based Access Control logic for restricted views."""

from enum import Enum
from typing import Iterable, Optional

from use_cases.session_models import SessionSnapshot


class GateDecision(str, Enum):
    DEFER = "DEFER"
    REDIRECT_LOGIN = "REDIRECT_LOGIN"
    REDIRECT_UNAUTHORIZED = "REDIRECT_UNAUTHORIZED"
    RENDER = "RENDER"


def evaluate_access(session: SessionSnapshot, required_roles: Optional[Iterable[str]] = None) -> GateDecision:
    """
    Decides whether a restricted view may render for the current session.
    An empty or missing role set means "any authenticated identity".
    """
    if not session.is_ready:
        return GateDecision.DEFER

    if session.identity is None:
        return GateDecision.REDIRECT_LOGIN

    roles = frozenset(required_roles or ())
    if roles and session.identity.role not in roles:
        return GateDecision.REDIRECT_UNAUTHORIZED

    return GateDecision.RENDER
