"""Startup orchestration for application bootstrap."""

from dataclasses import dataclass
from typing import Literal, Tuple

import auth
from utils import session_manager

StartupStatus = Literal["CONTINUE", "STOP"]


@dataclass(frozen=True)
class StartupResult:
    """Result contract for startup/bootstrap orchestration."""

    status: StartupStatus
    planned_steps: Tuple[str, ...]


def run_startup() -> StartupResult:
    """Run startup bootstrap: audit trail, session state, one-time session restore."""
    executed_steps = []

    auth.get_audit_repo()
    executed_steps.append("init_audit_db")

    session_manager.init_session_state()
    executed_steps.append("init_session_state")

    # initialize() is a no-op once the session is ready, so reruns skip GET /me.
    if session_manager.get_session().phase == "initializing":
        session_manager.restore_session()
        executed_steps.append("restore_session")

    return StartupResult(status="CONTINUE", planned_steps=tuple(executed_steps))
