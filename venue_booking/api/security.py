# venue_booking/api/security.py

from dataclasses import dataclass
import logging

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from venue_booking.api.dependencies import get_container
from venue_booking.application.container import ServiceContainer
from venue_booking.domain.exceptions import AuthenticationError, PermissionDeniedError
from venue_booking.domain.roles import STAFF_ROLES, Role

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Principal:
    subject: str
    email: str
    role: Role

    @property
    def is_staff(self) -> bool:
        return self.role in STAFF_ROLES


PUBLIC = frozenset()
AUTHENTICATED = frozenset(Role)
CUSTOMER = frozenset({Role.CUSTOMER})
STAFF = frozenset(STAFF_ROLES)
ADMIN = frozenset({Role.ADMIN})

# Who may call what. Keyed by (HTTP method, route path template).
# An empty set means no token is needed.
ACCESS_POLICY: dict[tuple[str, str], frozenset] = {
    ("GET", "/health"): PUBLIC,

    ("POST", "/users/register"): PUBLIC,
    ("POST", "/users/login"): PUBLIC,
    ("GET", "/users/me"): CUSTOMER,

    ("POST", "/organizer/register"): PUBLIC,
    ("POST", "/organizer/login"): PUBLIC,
    ("GET", "/organizer/me"): STAFF,
    ("PUT", "/organizer/profile"): STAFF,
    ("PUT", "/organizer/password"): STAFF,

    ("GET", "/venues"): PUBLIC,
    ("GET", "/venues/{venue_id}"): PUBLIC,
    ("POST", "/venues"): STAFF,
    ("PUT", "/venues/{venue_id}"): STAFF,
    ("DELETE", "/venues/{venue_id}"): STAFF,

    ("GET", "/meals"): PUBLIC,
    ("GET", "/meals/{meal_id}"): PUBLIC,
    ("POST", "/meals"): STAFF,
    ("PUT", "/meals/{meal_id}"): STAFF,
    ("DELETE", "/meals/{meal_id}"): STAFF,

    ("POST", "/events/check-availability"): PUBLIC,
    ("GET", "/events"): CUSTOMER,
    ("POST", "/events"): CUSTOMER,
    ("GET", "/events/{event_id}"): CUSTOMER,
    ("PUT", "/events/{event_id}"): CUSTOMER,

    ("GET", "/payments/methods"): PUBLIC,
    ("POST", "/payments/calculate-cost"): PUBLIC,
    ("POST", "/payments/process"): CUSTOMER,
    ("POST", "/payments/status"): AUTHENTICATED,
    ("POST", "/payments/refund"): CUSTOMER,
    ("GET", "/payments/history"): CUSTOMER,
    # Provider callbacks authenticate with their HMAC signature instead.
    ("POST", "/payments/webhook"): PUBLIC,
    ("POST", "/payments/webhook/refund"): PUBLIC,

    ("GET", "/admin/venues"): STAFF,
    ("GET", "/admin/meals"): STAFF,
    ("GET", "/admin/events"): STAFF,
    ("GET", "/admin/events/{event_id}"): STAFF,
    ("PATCH", "/admin/events/{event_id}/status"): STAFF,
    ("GET", "/admin/analytics/dashboard"): STAFF,
    ("GET", "/admin/analytics/revenue"): STAFF,
    ("GET", "/admin/analytics/venues/top"): STAFF,
    ("GET", "/admin/analytics/meals/top"): STAFF,
    ("GET", "/admin/analytics/event-types"): STAFF,
    ("GET", "/admin/analytics/payments"): ADMIN,
}


def allowed_roles(method: str, path: str) -> frozenset:
    # Routes missing from the table require a token but no particular role.
    return ACCESS_POLICY.get((method.upper(), path), AUTHENTICATED)


def _decode(
    credentials: HTTPAuthorizationCredentials | None,
    container: ServiceContainer,
) -> Principal:
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise AuthenticationError("Access token is required")

    claims = container.tokens.decode(credentials.credentials)
    try:
        role = Role(claims.role)
    except ValueError:
        raise AuthenticationError("Invalid token")
    return Principal(subject=claims.subject, email=claims.email, role=role)


def enforce_policy(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    container: ServiceContainer = Depends(get_container),
) -> Principal | None:
    """Router-level dependency: checks the caller against ACCESS_POLICY."""
    route = request.scope.get("route")
    path = getattr(route, "path", request.url.path)
    roles = allowed_roles(request.method, path)

    if not roles:
        return None

    principal = _decode(credentials, container)
    if principal.role not in roles:
        logger.warning(
            "Role %s denied for %s %s (subject=%s)",
            principal.role.value,
            request.method,
            path,
            principal.subject,
        )
        raise PermissionDeniedError("Insufficient permissions")

    return principal


def get_principal(principal: Principal | None = Depends(enforce_policy)) -> Principal:
    if principal is None:
        raise AuthenticationError("Access token is required")
    return principal
