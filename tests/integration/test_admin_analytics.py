# tests/integration/test_admin_analytics.py

from datetime import datetime, timedelta, timezone

import pytest

from conftest import slot
from venue_booking.infrastructure.db.models import Event


@pytest.fixture
def bookings(client, customer, booking_payload, make_venue, make_meal):
    ballroom = make_venue()
    rooftop = make_venue(name="Rooftop Terrace", price_per_hour=200)
    meal = make_meal()

    wedding = client.post(
        "/payments/process",
        json=booking_payload(ballroom, key="admin-key-0001", mealId=meal.id),
        headers=customer["headers"],
    )
    start, end = slot(days_ahead=45, hours=4)
    party = client.post(
        "/payments/process",
        json=booking_payload(
            rooftop,
            key="admin-key-0002",
            eventType="Birthday",
            startTime=start,
            endTime=end,
        ),
        headers=customer["headers"],
    )
    assert wedding.status_code == party.status_code == 201
    return {
        "wedding": wedding.json()["data"],
        "party": party.json()["data"],
        "ballroom": ballroom,
        "meal": meal,
    }


def test_admin_lists_and_filters_events(client, organizer, bookings):
    response = client.get("/admin/events", headers=organizer["headers"])
    assert response.json()["data"]["pagination"]["total"] == 2

    filtered = client.get(
        "/admin/events",
        params={"venueId": bookings["ballroom"].id},
        headers=organizer["headers"],
    )
    items = filtered.json()["data"]["items"]
    assert [item["id"] for item in items] == [bookings["wedding"]["event"]["id"]]

    by_type = client.get("/admin/events", params={"eventType": "birth"}, headers=organizer["headers"])
    assert by_type.json()["data"]["pagination"]["total"] == 1


def test_admin_event_status_follows_state_machine(client, organizer, bookings):
    event_id = bookings["wedding"]["event"]["id"]

    cancelled = client.patch(
        f"/admin/events/{event_id}/status",
        json={"status": "cancelled"},
        headers=organizer["headers"],
    )
    assert cancelled.status_code == 200
    assert cancelled.json()["data"]["event"]["status"] == "cancelled"

    reopened = client.patch(
        f"/admin/events/{event_id}/status",
        json={"status": "confirmed"},
        headers=organizer["headers"],
    )
    assert reopened.status_code == 422
    assert reopened.json()["error"] == "invalid_state_transition"


def test_cancelled_event_frees_the_slot(client, organizer, bookings):
    event = bookings["wedding"]["event"]
    client.patch(
        f"/admin/events/{event['id']}/status",
        json={"status": "cancelled"},
        headers=organizer["headers"],
    )

    response = client.post(
        "/events/check-availability",
        json={"venueId": event["venueId"], "startTime": event["startTime"], "endTime": event["endTime"]},
    )

    assert response.json()["data"]["available"] is True


def test_dashboard(client, organizer, bookings):
    response = client.get("/admin/analytics/dashboard", headers=organizer["headers"])

    assert response.status_code == 200
    stats = response.json()["data"]["stats"]
    wedding_total = bookings["wedding"]["payment"]["amount"]
    party_total = bookings["party"]["payment"]["amount"]
    assert stats["totalEvents"] == 2
    assert stats["confirmedEvents"] == 2
    assert stats["recentEvents"] == 2
    assert stats["totalRevenue"] == pytest.approx(wedding_total + party_total)
    assert stats["totalUsers"] == 1
    assert stats["totalVenues"] == 2
    assert stats["paymentsRequiringReconciliation"] == 0


def test_dashboard_recent_events_excludes_old_bookings(client, organizer, bookings, db):
    wedding = db.get(Event, bookings["wedding"]["event"]["id"])
    wedding.created_at = datetime.now(timezone.utc) - timedelta(days=45)
    db.commit()

    response = client.get("/admin/analytics/dashboard", headers=organizer["headers"])

    stats = response.json()["data"]["stats"]
    assert stats["totalEvents"] == 2
    assert stats["recentEvents"] == 1


def test_revenue_grouped_by_month(client, organizer, bookings):
    response = client.get(
        "/admin/analytics/revenue",
        params={"groupBy": "month"},
        headers=organizer["headers"],
    )

    data = response.json()["data"]
    current_month = datetime.now(timezone.utc).strftime("%Y-%m")
    assert data["groupBy"] == "month"
    assert [point["period"] for point in data["revenue"]] == [current_month]
    assert data["revenue"][0]["eventCount"] == 2


def test_invalid_group_by_is_400(client, organizer):
    response = client.get("/admin/analytics/revenue", params={"groupBy": "decade"}, headers=organizer["headers"])

    assert response.status_code == 400


def test_start_after_end_is_400(client, organizer):
    response = client.get(
        "/admin/analytics/dashboard",
        params={"startDate": "2030-02-01T00:00:00Z", "endDate": "2030-01-01T00:00:00Z"},
        headers=organizer["headers"],
    )

    assert response.status_code == 400
    assert response.json()["details"][0]["field"] == "startDate"


def test_top_venues_and_meals(client, organizer, bookings):
    venues = client.get("/admin/analytics/venues/top", params={"limit": 1}, headers=organizer["headers"])
    top_venues = venues.json()["data"]["venues"]
    assert len(top_venues) == 1
    assert top_venues[0]["id"] == bookings["ballroom"].id

    meals = client.get("/admin/analytics/meals/top", headers=organizer["headers"])
    top_meals = meals.json()["data"]["meals"]
    assert top_meals[0]["id"] == bookings["meal"].id
    assert top_meals[0]["orderCount"] == 1
    assert top_meals[0]["totalRevenue"] == 32500.0


def test_event_types(client, organizer, bookings):
    response = client.get("/admin/analytics/event-types", headers=organizer["headers"])

    stats = {item["eventType"]: item for item in response.json()["data"]["eventTypes"]}
    assert set(stats) == {"Wedding", "Birthday"}
    assert stats["Wedding"]["percentage"] == 50.0


def test_payment_analytics(client, admin, customer, container, booking_payload, make_venue, bookings):
    container.gateway.payment_success_rate = 0.0
    client.post(
        "/payments/process",
        json=booking_payload(make_venue(name="Heritage Hall"), key="admin-key-0003"),
        headers=customer["headers"],
    )

    response = client.get("/admin/analytics/payments", headers=admin["headers"])

    stats = response.json()["data"]["stats"]
    assert stats["totalTransactions"] == 3
    assert stats["successfulTransactions"] == 2
    assert stats["successRate"] == pytest.approx(66.67)
    assert stats["refundRate"] == 0.0
    methods = {item["method"]: item for item in stats["paymentMethodBreakdown"]}
    assert methods["bkash"]["count"] == 2
    assert methods["bkash"]["percentage"] == 100.0
