"""Session DTOs shared across application layers."""

from dataclasses import dataclass
from typing import Any, Dict, Literal, Optional

Role = Literal["user", "organizer", "admin"]
ReadinessPhase = Literal["initializing", "ready"]

SELF_REGISTER_ROLES = ("user", "organizer")


@dataclass(frozen=True)
class UserIdentity:
    id: str
    name: str
    email: str
    phone: str
    role: Role

    @classmethod
    def from_api(cls, payload: Dict[str, Any]) -> "UserIdentity":
        return cls(
            id=str(payload["id"]),
            name=payload.get("name") or "",
            email=payload.get("email") or "",
            phone=payload.get("phone") or "",
            role=payload.get("role") or "user",
        )


@dataclass(frozen=True)
class SessionSnapshot:
    """Read-only view of the session handed to gates and workflows."""

    phase: ReadinessPhase
    identity: Optional[UserIdentity] = None

    @property
    def is_ready(self) -> bool:
        return self.phase == "ready"

    @property
    def is_authenticated(self) -> bool:
        return self.identity is not None


def is_admin(user: UserIdentity) -> bool:
    return user.role == "admin"
