"""Route table for the ticketing client."""

from enum import Enum
from typing import FrozenSet, Optional


class Route(str, Enum):
    CATALOG = "events"
    LOGIN = "login"
    PURCHASE = "purchase"
    TICKET = "ticket"
    MY_TICKETS = "tickets"
    PROFILE = "profile"
    ACTIVITY = "activity"
    UNAUTHORIZED = "unauthorized"


ROUTE_LABELS = {
    Route.CATALOG: "Events",
    Route.MY_TICKETS: "My tickets",
    Route.PROFILE: "Profile",
    Route.ACTIVITY: "Activity log",
}

# None: public. Empty set: any authenticated identity.
ROUTE_ROLES = {
    Route.CATALOG: None,
    Route.LOGIN: None,
    Route.UNAUTHORIZED: None,
    Route.PURCHASE: None,
    Route.TICKET: frozenset(),
    Route.MY_TICKETS: frozenset(),
    Route.PROFILE: frozenset(),
    Route.ACTIVITY: frozenset({"admin"}),
}


def select_route(raw: Optional[str]) -> Route:
    try:
        return Route(raw)
    except ValueError:
        return Route.CATALOG


def required_roles(route: Route) -> Optional[FrozenSet[str]]:
    return ROUTE_ROLES.get(route)


def is_public(route: Route) -> bool:
    return required_roles(route) is None
