# tests/integration/test_reservations.py

import pytest
from sqlalchemy import select

from conftest import slot
from venue_booking.infrastructure.db.models import Event, Payment


def _reservation_body(venue, **overrides) -> dict:
    start, end = slot()
    body = {
        "venueId": venue.id,
        "peopleCount": 100,
        "startTime": start,
        "endTime": end,
        "eventType": "Wedding",
    }
    body.update(overrides)
    return body


@pytest.fixture
def reserved(client, customer, make_venue):
    venue = make_venue()
    body = _reservation_body(venue)
    response = client.post("/events", json=body, headers=customer["headers"])
    assert response.status_code == 201, response.text
    return {"venue": venue, "body": body, "event": response.json()["data"]["event"]}


def test_reservation_is_pending_and_priced(reserved):
    event = reserved["event"]

    assert event["status"] == "pending"
    assert event["totalCost"] == 1130.0
    assert event["eventType"] == "Wedding"


def test_reservation_holds_the_slot(client, customer, reserved, booking_payload):
    again = client.post("/events", json=reserved["body"], headers=customer["headers"])
    booked = client.post("/payments/process", json=booking_payload(reserved["venue"]), headers=customer["headers"])

    assert again.status_code == 409
    assert again.json()["error"] == "venue_unavailable"
    assert booked.status_code == 409


def test_reservation_over_capacity_is_400(client, customer, make_venue):
    venue = make_venue(capacity=80)

    response = client.post("/events", json=_reservation_body(venue), headers=customer["headers"])

    assert response.status_code == 400
    assert response.json()["details"][0]["field"] == "peopleCount"


def test_staff_cannot_reserve(client, organizer, make_venue):
    response = client.post("/events", json=_reservation_body(make_venue()), headers=organizer["headers"])

    assert response.status_code == 403


def test_update_reprices_people_and_meal(client, customer, reserved, make_meal):
    meal = make_meal()

    response = client.put(
        f"/events/{reserved['event']['id']}",
        json={"peopleCount": 120, "mealId": meal.id},
        headers=customer["headers"],
    )

    assert response.status_code == 200
    event = response.json()["data"]["event"]
    assert event["peopleCount"] == 120
    assert event["mealId"] == meal.id
    # (1000 venue + 120 x 325 meal) x 1.13
    assert event["totalCost"] == 45200.0

    dropped = client.put(
        f"/events/{reserved['event']['id']}",
        json={"mealId": None},
        headers=customer["headers"],
    )
    assert dropped.json()["data"]["event"]["mealId"] is None
    assert dropped.json()["data"]["event"]["totalCost"] == 1130.0


def test_update_with_no_changes_is_400(client, customer, reserved):
    response = client.put(f"/events/{reserved['event']['id']}", json={}, headers=customer["headers"])

    assert response.status_code == 400


def test_update_of_another_users_event_is_403(client, register_user, reserved):
    other = register_user(email="other@example.com")

    response = client.put(
        f"/events/{reserved['event']['id']}",
        json={"peopleCount": 60},
        headers=other["headers"],
    )

    assert response.status_code == 403


def test_paying_for_reservation_confirms_it(client, customer, reserved, booking_payload, db):
    payload = booking_payload(reserved["venue"], eventId=reserved["event"]["id"])

    response = client.post("/payments/process", json=payload, headers=customer["headers"])

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["event"]["id"] == reserved["event"]["id"]
    assert data["event"]["status"] == "confirmed"
    assert data["payment"]["eventId"] == reserved["event"]["id"]
    assert len(db.execute(select(Event)).scalars().all()) == 1

    locked = client.put(
        f"/events/{reserved['event']['id']}",
        json={"peopleCount": 60},
        headers=customer["headers"],
    )
    assert locked.status_code == 400


def test_declined_reservation_payment_keeps_it_pending(client, container, customer, reserved, booking_payload, db):
    container.gateway.payment_success_rate = 0.0
    payload = booking_payload(reserved["venue"], eventId=reserved["event"]["id"])

    response = client.post("/payments/process", json=payload, headers=customer["headers"])

    assert response.status_code == 402
    payment = db.execute(select(Payment)).scalar_one()
    assert payment.event_id == reserved["event"]["id"]
    assert db.get(Event, reserved["event"]["id"]).status.value == "pending"


def test_paying_for_reservation_at_another_venue_is_400(client, customer, reserved, booking_payload, make_venue):
    other = make_venue(name="Rooftop Terrace")
    payload = booking_payload(other, eventId=reserved["event"]["id"])

    response = client.post("/payments/process", json=payload, headers=customer["headers"])

    assert response.status_code == 400
    assert response.json()["details"][0]["field"] == "venueId"
