# tests/integration/test_booking_flow.py

from fastapi import Depends
from sqlalchemy import select
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from conftest import slot
from venue_booking.api.dependencies import get_container, get_payment_service
from venue_booking.application.payment_service import PaymentService
from venue_booking.infrastructure.db.models import Event, Payment
from venue_booking.infrastructure.db.session import get_db
from venue_booking.infrastructure.repositories.event_repository import EventRepository
from venue_booking.infrastructure.repositories.payment_repository import PaymentRepository


def test_cost_calculation_for_grand_ballroom(client, make_venue):
    venue = make_venue()
    start, end = slot(hours=2)

    response = client.post(
        "/payments/calculate-cost",
        json={"venueId": venue.id, "peopleCount": 100, "startTime": start, "endTime": end},
    )

    assert response.status_code == 200
    breakdown = response.json()["data"]["costBreakdown"]
    assert breakdown["venueCost"] == 1000.0
    assert breakdown["mealCost"] == 0.0
    assert breakdown["subtotal"] == 1000.0
    assert breakdown["tax"] == 80.0
    assert breakdown["serviceFee"] == 50.0
    assert breakdown["total"] == 1130.0
    assert breakdown["venue"]["billedUnits"] == 4


def test_cost_calculation_with_processing_fee(client, make_venue, make_meal):
    venue = make_venue()
    meal = make_meal()
    start, end = slot(hours=4)

    response = client.post(
        "/payments/calculate-cost",
        json={
            "venueId": venue.id,
            "mealId": meal.id,
            "peopleCount": 100,
            "startTime": start,
            "endTime": end,
            "paymentMethod": "card",
        },
    )

    data = response.json()["data"]
    assert data["costBreakdown"]["mealCost"] == 32500.0
    assert data["processingFee"]["paymentMethod"] == "card"
    assert data["processingFee"]["processingFee"] > 0


def test_end_time_must_follow_start_time(client, make_venue):
    venue = make_venue()
    start, _ = slot()

    response = client.post(
        "/payments/calculate-cost",
        json={"venueId": venue.id, "peopleCount": 100, "startTime": start, "endTime": start},
    )

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["details"][0]["field"] == "endTime"


def test_booking_flow(client, customer, booking_payload):
    payload = booking_payload()

    response = client.post("/payments/process", json=payload, headers=customer["headers"])

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["replayed"] is False
    assert data["payment"]["status"] == "success"
    assert data["payment"]["transactionId"].startswith("BKS")
    assert data["payment"]["amount"] == 1130.0
    assert data["event"]["status"] == "confirmed"
    assert data["event"]["totalCost"] == 1130.0
    assert data["payment"]["eventId"] == data["event"]["id"]

    events = client.get("/events", headers=customer["headers"])
    assert events.json()["data"]["pagination"]["total"] == 1

    status = client.post(
        "/payments/status",
        json={"transactionId": data["payment"]["transactionId"]},
        headers=customer["headers"],
    )
    assert status.json()["data"]["payment"]["id"] == data["payment"]["id"]


def test_idempotent_replay(client, customer, booking_payload, db):
    payload = booking_payload()

    first = client.post("/payments/process", json=payload, headers=customer["headers"])
    second = client.post("/payments/process", json=payload, headers=customer["headers"])

    assert second.status_code == 201
    assert second.json()["data"]["replayed"] is True
    assert second.json()["data"]["payment"]["id"] == first.json()["data"]["payment"]["id"]
    assert len(db.execute(select(Payment)).scalars().all()) == 1
    assert len(db.execute(select(Event)).scalars().all()) == 1


def test_idempotency_key_reused_by_another_user(client, customer, register_user, booking_payload):
    payload = booking_payload()
    client.post("/payments/process", json=payload, headers=customer["headers"])
    other = register_user(email="other@example.com")

    response = client.post("/payments/process", json=payload, headers=other["headers"])

    assert response.status_code == 409
    assert response.json()["error"] == "idempotency_conflict"


def test_idempotency_key_reused_with_different_amount(client, customer, booking_payload):
    payload = booking_payload()
    client.post("/payments/process", json=payload, headers=customer["headers"])
    start, end = slot(days_ahead=40, hours=10)

    response = client.post(
        "/payments/process",
        json={**payload, "startTime": start, "endTime": end},
        headers=customer["headers"],
    )

    assert response.status_code == 409
    assert response.json()["error"] == "idempotency_conflict"


def test_overlapping_booking_is_rejected(client, customer, booking_payload, make_venue):
    venue = make_venue()
    client.post("/payments/process", json=booking_payload(venue), headers=customer["headers"])

    response = client.post(
        "/payments/process",
        json=booking_payload(venue, key="booking-key-0002"),
        headers=customer["headers"],
    )

    assert response.status_code == 409
    assert response.json()["error"] == "venue_unavailable"


def test_availability_reports_conflicts(client, customer, booking_payload, make_venue):
    venue = make_venue()
    payload = booking_payload(venue)
    booked = client.post("/payments/process", json=payload, headers=customer["headers"])

    response = client.post(
        "/events/check-availability",
        json={"venueId": venue.id, "startTime": payload["startTime"], "endTime": payload["endTime"]},
    )

    assert response.status_code == 409
    data = response.json()["data"]
    assert data["available"] is False
    assert [event["id"] for event in data["conflictingEvents"]] == [booked.json()["data"]["event"]["id"]]

    later_start, later_end = slot(days_ahead=31)
    free = client.post(
        "/events/check-availability",
        json={"venueId": venue.id, "startTime": later_start, "endTime": later_end},
    )
    assert free.status_code == 200
    assert free.json()["data"]["available"] is True


def test_declined_charge_is_402_and_books_nothing(client, container, customer, booking_payload, db):
    container.gateway.payment_success_rate = 0.0

    response = client.post("/payments/process", json=booking_payload(), headers=customer["headers"])

    assert response.status_code == 402
    body = response.json()
    assert body["success"] is False
    assert body["error"] == "payment_declined"
    assert body["data"]["payment"]["status"] == "failed"
    assert body["data"]["event"] is None
    assert db.execute(select(Event)).scalars().all() == []


def test_amount_below_minimum_is_422(client, customer, booking_payload, make_venue):
    venue = make_venue(price_per_hour=10, minimum_hours=1)

    response = client.post(
        "/payments/process",
        json=booking_payload(venue),
        headers=customer["headers"],
    )

    assert response.status_code == 422
    assert response.json()["error"] == "invalid_payment_amount"


def test_organizer_token_cannot_book(client, organizer, booking_payload):
    response = client.post("/payments/process", json=booking_payload(), headers=organizer["headers"])

    assert response.status_code == 403


def test_event_write_failure_flags_payment_for_reconciliation(app, client, customer, booking_payload, db):
    class FailingEventRepository(EventRepository):
        def create(self, **fields):
            raise OperationalError("INSERT INTO events", {}, Exception("disk I/O error"))

    def failing_payment_service(
        session: Session = Depends(get_db),
        container=Depends(get_container),
    ) -> PaymentService:
        return PaymentService(session, container.gateway, event_repository=FailingEventRepository(session))

    app.dependency_overrides[get_payment_service] = failing_payment_service

    response = client.post("/payments/process", json=booking_payload(), headers=customer["headers"])

    assert response.status_code == 500
    body = response.json()
    assert body["error"] == "payment_reconciliation_required"
    transaction_id = body["data"]["transactionId"]
    assert transaction_id in body["message"]

    payment = db.execute(select(Payment).where(Payment.transaction_id == transaction_id)).scalar_one()
    assert payment.requires_reconciliation is True
    assert payment.event_id is None
    assert db.execute(select(Event)).scalars().all() == []


def test_payment_history_with_summary(client, customer, booking_payload, make_venue, container):
    client.post("/payments/process", json=booking_payload(), headers=customer["headers"])
    container.gateway.payment_success_rate = 0.0
    other_venue = make_venue(name="Rooftop Terrace")
    client.post(
        "/payments/process",
        json=booking_payload(other_venue, key="booking-key-0002"),
        headers=customer["headers"],
    )

    response = client.get("/payments/history", headers=customer["headers"])

    data = response.json()["data"]
    assert data["pagination"]["total"] == 2
    assert data["summary"]["successfulPayments"] == 1
    assert data["summary"]["failedPayments"] == 1
    assert data["summary"]["totalAmount"] == 1130.0

    failed_only = client.get("/payments/history", params={"status": "failed"}, headers=customer["headers"])
    assert failed_only.json()["data"]["pagination"]["total"] == 1


def test_payment_status_of_another_user_is_403(client, customer, register_user, booking_payload):
    booked = client.post("/payments/process", json=booking_payload(), headers=customer["headers"])
    other = register_user(email="other@example.com")

    response = client.post(
        "/payments/status",
        json={"transactionId": booked.json()["data"]["payment"]["transactionId"]},
        headers=other["headers"],
    )

    assert response.status_code == 403


def test_user_cannot_view_another_users_event(client, customer, register_user, booking_payload):
    booked = client.post("/payments/process", json=booking_payload(), headers=customer["headers"])
    other = register_user(email="other@example.com")

    response = client.get(f"/events/{booked.json()['data']['event']['id']}", headers=other["headers"])

    assert response.status_code == 403


def test_idempotency_key_reused_for_another_venue_at_same_price(client, customer, booking_payload, make_venue, db):
    payload = booking_payload()
    client.post("/payments/process", json=payload, headers=customer["headers"])
    twin = make_venue(name="Hall B")

    response = client.post(
        "/payments/process",
        json={**payload, "venueId": twin.id},
        headers=customer["headers"],
    )

    assert response.status_code == 409
    assert response.json()["error"] == "idempotency_conflict"
    assert db.execute(select(Event).where(Event.venue_id == twin.id)).scalars().all() == []


def test_replay_survives_catalog_changes(client, customer, booking_payload, make_venue, db):
    venue = make_venue()
    payload = booking_payload(venue)
    first = client.post("/payments/process", json=payload, headers=customer["headers"])
    venue.is_active = False
    venue.price_per_hour = 999
    db.commit()

    second = client.post("/payments/process", json=payload, headers=customer["headers"])

    assert second.status_code == 201
    data = second.json()["data"]
    assert data["replayed"] is True
    assert data["event"]["id"] == first.json()["data"]["event"]["id"]
    assert data["costBreakdown"] == first.json()["data"]["costBreakdown"]
    assert data["costBreakdown"]["total"] == 1130.0


def test_key_claimed_concurrently_is_409_without_charging(app, client, container, customer, booking_payload, db):
    charges = []
    original_charge = container.gateway.charge

    def recording_charge(*args, **kwargs):
        charges.append(args)
        return original_charge(*args, **kwargs)

    container.gateway.charge = recording_charge
    payload = booking_payload()
    client.post("/payments/process", json=payload, headers=customer["headers"])
    assert len(charges) == 1

    class StalePaymentRepository(PaymentRepository):
        # Sees the database as it was before the other request committed.
        def get_by_idempotency_key(self, idempotency_key):
            return None

    def stale_payment_service(
        session: Session = Depends(get_db),
        container=Depends(get_container),
    ) -> PaymentService:
        return PaymentService(session, container.gateway, payment_repository=StalePaymentRepository(session))

    app.dependency_overrides[get_payment_service] = stale_payment_service
    start, end = slot(days_ahead=60)

    response = client.post(
        "/payments/process",
        json={**payload, "startTime": start, "endTime": end},
        headers=customer["headers"],
    )

    assert response.status_code == 409
    assert response.json()["error"] == "idempotency_conflict"
    assert len(charges) == 1
    assert len(db.execute(select(Payment)).scalars().all()) == 1


def test_payment_write_failure_flags_payment_for_reconciliation(app, client, customer, booking_payload, db):
    class FailingPaymentRepository(PaymentRepository):
        def settle(self, payment, new_status, event_id):
            raise OperationalError("UPDATE payments", {}, Exception("connection reset"))

    def failing_payment_service(
        session: Session = Depends(get_db),
        container=Depends(get_container),
    ) -> PaymentService:
        return PaymentService(session, container.gateway, payment_repository=FailingPaymentRepository(session))

    app.dependency_overrides[get_payment_service] = failing_payment_service

    response = client.post("/payments/process", json=booking_payload(), headers=customer["headers"])

    assert response.status_code == 500
    transaction_id = response.json()["data"]["transactionId"]
    payment = db.execute(select(Payment).where(Payment.transaction_id == transaction_id)).scalar_one()
    assert payment.status.value == "success"
    assert payment.requires_reconciliation is True
    assert db.execute(select(Event)).scalars().all() == []
