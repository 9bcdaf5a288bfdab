"""Route-level access decisions.

The guard is a pure function of (path, identity); it holds no state and runs
once per request before any booking operation.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from app.core.enums import RoleEnum
from app.modules.identity.schemas import IdentityContext


class RouteClass(StrEnum):
    """Protection level of a route."""

    ADMIN = "admin"
    WORKER = "worker"
    CUSTOMER = "customer"
    PUBLIC = "public"


class AccessOutcome(StrEnum):
    """Result of evaluating a request against the rule table."""

    ALLOW = "allow"
    LOGIN_REQUIRED = "login_required"
    DENIED = "denied"


ROUTE_RULES: tuple[tuple[RouteClass, tuple[str, ...]], ...] = (
    (RouteClass.ADMIN, ("/admin",)),
    (RouteClass.WORKER, ("/worker",)),
    (
        RouteClass.CUSTOMER,
        ("/bookings", "/booking", "/identity", "/user", "/dashboard", "/favorite", "/profile"),
    ),
)

REQUIRED_ROLE: dict[RouteClass, RoleEnum] = {
    RouteClass.ADMIN: RoleEnum.ADMIN,
    RouteClass.WORKER: RoleEnum.WORKER,
}


@dataclass(frozen=True, slots=True)
class AccessDecision:
    route_class: RouteClass
    outcome: AccessOutcome

    @property
    def allowed(self) -> bool:
        return self.outcome == AccessOutcome.ALLOW


def _matches_prefix(path: str, prefix: str) -> bool:
    return path == prefix or path.startswith(f"{prefix}/")


def strip_api_prefix(path: str, api_prefix: str) -> str:
    """Drop the API prefix so pages and API routes share one rule table."""
    if api_prefix and _matches_prefix(path, api_prefix):
        return path[len(api_prefix) :] or "/"
    return path


def classify_route(path: str, api_prefix: str = "") -> RouteClass:
    """Return the route class for a request path."""
    normalized = strip_api_prefix(path.rstrip("/") or "/", api_prefix)
    for route_class, prefixes in ROUTE_RULES:
        if any(_matches_prefix(normalized, prefix) for prefix in prefixes):
            return route_class
    return RouteClass.PUBLIC


def evaluate_access(
    path: str,
    identity: IdentityContext | None,
    *,
    api_prefix: str = "",
) -> AccessDecision:
    """Decide allow / login required / denied for a path and caller."""
    route_class = classify_route(path, api_prefix)
    if route_class == RouteClass.PUBLIC:
        return AccessDecision(route_class, AccessOutcome.ALLOW)
    if identity is None:
        return AccessDecision(route_class, AccessOutcome.LOGIN_REQUIRED)

    required_role = REQUIRED_ROLE.get(route_class)
    if required_role is not None and identity.role != required_role:
        return AccessDecision(route_class, AccessOutcome.DENIED)
    return AccessDecision(route_class, AccessOutcome.ALLOW)
