# tests/unit/test_access_policy.py

from fastapi.routing import APIRoute

from venue_booking.api.security import (
    ACCESS_POLICY,
    ADMIN,
    AUTHENTICATED,
    CUSTOMER,
    PUBLIC,
    STAFF,
    allowed_roles,
)
from venue_booking.domain.roles import Role


def _app_routes(app):
    for route in app.routes:
        if not isinstance(route, APIRoute):
            continue
        for method in route.methods:
            yield method, route.path


def test_every_route_has_a_policy_entry(app):
    missing = [key for key in _app_routes(app) if key not in ACCESS_POLICY]

    assert missing == []


def test_policy_has_no_stale_entries(app):
    routes = set(_app_routes(app))

    assert [key for key in ACCESS_POLICY if key not in routes] == []


def test_unlisted_route_requires_a_token():
    assert allowed_roles("GET", "/not/in/the/table") == AUTHENTICATED


def test_method_is_case_insensitive():
    assert allowed_roles("get", "/venues") == PUBLIC


def test_role_sets():
    assert allowed_roles("POST", "/payments/process") == CUSTOMER
    assert allowed_roles("POST", "/venues") == STAFF
    assert allowed_roles("GET", "/admin/analytics/payments") == ADMIN
    assert Role.ADMIN in STAFF
    assert Role.CUSTOMER not in STAFF


def test_public_route_needs_no_token(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["success"] is True


def test_missing_token_is_401(client):
    response = client.get("/users/me")

    assert response.status_code == 401
    assert response.json() == {
        "success": False,
        "message": "Access token is required",
        "error": "unauthorized",
    }


def test_malformed_token_is_401(client):
    response = client.get("/users/me", headers={"Authorization": "Bearer not-a-token"})

    assert response.status_code == 401


def test_customer_cannot_reach_admin_routes(client, customer):
    response = client.get("/admin/events", headers=customer["headers"])

    assert response.status_code == 403
    assert response.json()["error"] == "forbidden"


def test_organizer_cannot_read_payment_analytics(client, organizer):
    response = client.get("/admin/analytics/payments", headers=organizer["headers"])

    assert response.status_code == 403


def test_admin_reads_payment_analytics(client, admin):
    response = client.get("/admin/analytics/payments", headers=admin["headers"])

    assert response.status_code == 200
