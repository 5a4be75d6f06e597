# venue_booking/application/payment_service.py

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
import hashlib
import json
import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from venue_booking.application.cost_calculator import CostCalculator
from venue_booking.domain.exceptions import (
    IdempotencyConflictError,
    InvalidPaymentStateError,
    InvalidRequestError,
    NotFoundError,
    PaymentAmountError,
    PaymentReconciliationError,
    PermissionDeniedError,
    VenueUnavailableError,
)
from venue_booking.domain.pricing import CostBreakdown, PaymentMethod, to_money
from venue_booking.domain.roles import STAFF_ROLES
from venue_booking.domain.state_machine import EventStatus, PaymentStateMachine, PaymentStatus
from venue_booking.infrastructure.db.models import Event, Meal, Payment, Venue
from venue_booking.infrastructure.payment_gateway import SimulatedPaymentGateway
from venue_booking.infrastructure.repositories.base import Page
from venue_booking.infrastructure.repositories.event_repository import EventRepository
from venue_booking.infrastructure.repositories.meal_repository import MealRepository
from venue_booking.infrastructure.repositories.payment_repository import PaymentRepository
from venue_booking.infrastructure.repositories.venue_repository import VenueRepository

logger = logging.getLogger(__name__)

MIN_PAYMENT_AMOUNT = Decimal("100")
MAX_PAYMENT_AMOUNT = Decimal("1000000")

PAYMENT_METHODS = [
    {
        "id": PaymentMethod.CARD,
        "name": "Credit/Debit Card",
        "description": "Pay securely with your credit or debit card",
        "processing_fee_rate": Decimal("0.029"),
    },
    {
        "id": PaymentMethod.BKASH,
        "name": "bKash",
        "description": "Pay using bKash mobile financial service",
        "processing_fee_rate": Decimal("0.018"),
    },
    {
        "id": PaymentMethod.NAGAD,
        "name": "Nagad",
        "description": "Pay using Nagad mobile financial service",
        "processing_fee_rate": Decimal("0.015"),
    },
    {
        "id": PaymentMethod.ROCKET,
        "name": "Rocket",
        "description": "Pay using Rocket mobile financial service",
        "processing_fee_rate": Decimal("0.018"),
    },
]


@dataclass(frozen=True)
class BookingRequest:
    venue_id: str
    meal_id: str | None
    people_count: int
    start_time: datetime
    end_time: datetime
    event_type: str = "Event"
    event_id: str | None = None


@dataclass(frozen=True)
class PaymentOutcome:
    payment: Payment
    event: Event | None
    breakdown: CostBreakdown | None
    replayed: bool = False

    @property
    def success(self) -> bool:
        return self.payment.status in (PaymentStatus.SUCCESS, PaymentStatus.REFUNDED)


def request_fingerprint(request: BookingRequest, method: PaymentMethod) -> str:
    """Stable hash of everything that decides what an idempotency key books."""
    payload = {
        "venue_id": request.venue_id,
        "meal_id": request.meal_id,
        "event_id": request.event_id,
        "event_type": request.event_type,
        "people_count": request.people_count,
        "start_time": request.start_time.isoformat(),
        "end_time": request.end_time.isoformat(),
        "method": method.value,
    }
    encoded = json.dumps(payload, sort_keys=True).encode("utf-8")
    return hashlib.sha256(encoded).hexdigest()


class PaymentService:
    """
    Books an event and takes payment for it in one step.

    The venue row is locked for the whole attempt and the Payment is
    inserted as pending before the provider is called, so a second
    request with the same key fails before it can charge. The Event
    and the settled Payment are committed together. A provider
    decline stores only a failed Payment. If the booking cannot be
    written after the provider approved the charge, the Payment is
    still stored, flagged for reconciliation.
    """

    def __init__(
        self,
        db: Session,
        gateway: SimulatedPaymentGateway,
        calculator: CostCalculator | None = None,
        event_repository: EventRepository | None = None,
        payment_repository: PaymentRepository | None = None,
    ):
        self.db = db
        self.gateway = gateway
        self.calculator = calculator or CostCalculator()
        self.event_repository = event_repository or EventRepository(db)
        self.payment_repository = payment_repository or PaymentRepository(db)
        self.venue_repository = VenueRepository(db)
        self.meal_repository = MealRepository(db)

    # -----------------------------
    # Quotes
    # -----------------------------
    def get_payment_methods(self) -> list[dict]:
        return [dict(method) for method in PAYMENT_METHODS]

    def processing_fee(self, method: PaymentMethod, amount: Decimal) -> dict:
        rate = next(m["processing_fee_rate"] for m in PAYMENT_METHODS if m["id"] == method)
        fee = to_money(amount * rate)
        return {"processing_fee": fee, "net_amount": to_money(amount - fee)}

    def calculate_cost(self, request: BookingRequest) -> CostBreakdown:
        venue, meal = self._load_catalog(request)
        return self._price(venue, meal, request)

    # -----------------------------
    # Processing
    # -----------------------------
    def process_payment(
        self,
        user_id: str,
        request: BookingRequest,
        method: PaymentMethod,
        idempotency_key: str,
    ) -> PaymentOutcome:
        fingerprint = request_fingerprint(request, method)

        existing = self.payment_repository.get_by_idempotency_key(idempotency_key)
        if existing:
            return self._replay(existing, user_id, fingerprint, idempotency_key)

        venue, meal = self._load_catalog(request, lock=True)

        # A request holding the same key may have committed while we waited for the lock.
        existing = self.payment_repository.get_by_idempotency_key(idempotency_key)
        if existing:
            return self._replay(existing, user_id, fingerprint, idempotency_key)

        reservation = self._load_reservation(user_id, request) if request.event_id else None
        breakdown = self._price(venue, meal, request)
        self._check_amount(breakdown.total)

        conflicts = self.event_repository.find_conflicts(
            request.venue_id,
            request.start_time,
            request.end_time,
            exclude_event_id=reservation.id if reservation else None,
        )
        if conflicts:
            raise VenueUnavailableError("Venue is already booked for the selected time")

        record = {
            "user_id": user_id,
            "amount": breakdown.total,
            "method": method.value,
            "transaction_id": self.gateway.charge_id(method),
            "idempotency_key": idempotency_key,
            "request_fingerprint": fingerprint,
            "cost_breakdown": breakdown.to_snapshot(),
        }
        try:
            payment = self.payment_repository.create(
                event_id=reservation.id if reservation else None,
                status=PaymentStatus.PENDING,
                **record,
            )
        except IntegrityError as exc:
            self.db.rollback()
            logger.warning("Idempotency key %s claimed by a concurrent request", idempotency_key)
            raise IdempotencyConflictError("Idempotency key already used by another request") from exc

        charge = self.gateway.charge(method, breakdown.total, record["transaction_id"])

        if not charge.success:
            self.payment_repository.update_status(payment, PaymentStatus.FAILED)
            self.db.commit()
            logger.info("Payment %s failed for user %s", charge.transaction_id, user_id)
            return PaymentOutcome(payment, reservation, breakdown)

        try:
            event = self._book(user_id, request, breakdown, reservation, meal)
            self.payment_repository.settle(payment, PaymentStatus.SUCCESS, event.id)
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception(
                "Booking write failed after charge %s (user=%s venue=%s amount=%s)",
                charge.transaction_id,
                user_id,
                request.venue_id,
                breakdown.total,
            )
            payment = self.payment_repository.create(
                event_id=None,
                status=PaymentStatus.SUCCESS,
                requires_reconciliation=True,
                **record,
            )
            self.db.commit()
            logger.error(
                "Payment %s (%s) stored for reconciliation",
                payment.id,
                charge.transaction_id,
            )
            raise PaymentReconciliationError(
                f"Payment {charge.transaction_id} was captured but the booking could not be saved. "
                "Support has been notified.",
                transaction_id=charge.transaction_id,
                payment_id=payment.id,
            ) from exc

        logger.info(
            "Booked event %s with payment %s (%s)",
            event.id,
            payment.transaction_id,
            payment.amount,
        )
        return PaymentOutcome(payment, event, breakdown)

    def _book(
        self,
        user_id: str,
        request: BookingRequest,
        breakdown: CostBreakdown,
        reservation: Event | None,
        meal: Meal | None,
    ) -> Event:
        if reservation is None:
            return self.event_repository.create(
                user_id=user_id,
                venue_id=request.venue_id,
                meal_id=request.meal_id,
                event_type=request.event_type,
                people_count=request.people_count,
                start_time=request.start_time,
                end_time=request.end_time,
                total_cost=breakdown.total,
                status=EventStatus.CONFIRMED,
            )

        return self.event_repository.update(
            reservation,
            meal_id=request.meal_id,
            meal=meal,
            event_type=request.event_type,
            people_count=request.people_count,
            start_time=request.start_time,
            end_time=request.end_time,
            total_cost=breakdown.total,
            status=EventStatus.CONFIRMED,
        )

    def _replay(
        self,
        existing: Payment,
        user_id: str,
        fingerprint: str,
        idempotency_key: str,
    ) -> PaymentOutcome:
        if existing.user_id != user_id:
            logger.warning("Idempotency key %s reused by another user", idempotency_key)
            raise IdempotencyConflictError("Idempotency key already used by another request")
        if existing.request_fingerprint != fingerprint:
            logger.warning("Idempotency key %s reused for a different booking", idempotency_key)
            raise IdempotencyConflictError("Idempotency key reused with a different booking request")

        logger.info("Replaying payment %s for key %s", existing.transaction_id, idempotency_key)
        breakdown = CostBreakdown.from_snapshot(existing.cost_breakdown) if existing.cost_breakdown else None
        return PaymentOutcome(existing, existing.event, breakdown, replayed=True)

    def _load_reservation(self, user_id: str, request: BookingRequest) -> Event:
        reservation = self.event_repository.get_by_id(request.event_id)
        if not reservation:
            raise NotFoundError("Event not found")
        if reservation.user_id != user_id:
            raise PermissionDeniedError("You can only pay for your own events")
        if reservation.status != EventStatus.PENDING:
            raise InvalidRequestError(
                f"Only pending events can be paid for (current status: {reservation.status.value})",
                field="eventId",
            )
        if reservation.venue_id != request.venue_id:
            raise InvalidRequestError("Venue does not match the reserved event", field="venueId")
        return reservation

    # -----------------------------
    # Lookups
    # -----------------------------
    def get_payment_status(self, transaction_id: str, user_id: str, role: str) -> Payment:
        payment = self.payment_repository.get_by_transaction_id(transaction_id)
        if not payment:
            raise NotFoundError("Payment not found")
        if role not in STAFF_ROLES and payment.user_id != user_id:
            raise PermissionDeniedError("You can only view your own payments")
        return payment

    def get_user_payment_history(
        self,
        user_id: str,
        page: int,
        limit: int,
        status: PaymentStatus | None = None,
    ) -> tuple[Page[Payment], dict]:
        history = self.payment_repository.find_by_user(user_id, page, limit, status)
        return history, self.payment_repository.summarize_user(user_id)

    # -----------------------------
    # Refunds
    # -----------------------------
    def refund_payment(self, payment_id: str, user_id: str, reason: str) -> Payment:
        payment = self.payment_repository.get_by_id(payment_id)
        if not payment:
            raise NotFoundError("Payment not found")
        if payment.user_id != user_id:
            raise PermissionDeniedError("You can only refund your own payments")
        if not PaymentStateMachine.can_transition(PaymentStatus(payment.status), PaymentStatus.REFUNDED):
            logger.warning("Refund rejected for payment %s in status %s", payment.id, payment.status.value)
            raise InvalidPaymentStateError(
                f"Only successful payments can be refunded (current status: {payment.status.value})"
            )

        refund_id = self.gateway.refund(payment.transaction_id, payment.amount)
        self.payment_repository.mark_refunded(payment, refund_id, reason)

        logger.info("Payment %s refunded as %s", payment.id, refund_id)
        return payment

    def _load_catalog(self, request: BookingRequest, lock: bool = False) -> tuple[Venue, Meal | None]:
        if lock:
            venue = self.venue_repository.lock(request.venue_id)
        else:
            venue = self.venue_repository.get_by_id(request.venue_id)
        if not venue:
            raise NotFoundError("Venue not found")
        if not venue.is_active:
            raise VenueUnavailableError("Venue is not currently accepting bookings")

        meal = None
        if request.meal_id:
            meal = self.meal_repository.get_by_id(request.meal_id)
            if not meal:
                raise NotFoundError("Meal not found")
        return venue, meal

    def _price(self, venue: Venue, meal: Meal | None, request: BookingRequest) -> CostBreakdown:
        return self.calculator.calculate(
            venue,
            meal,
            request.people_count,
            request.start_time,
            request.end_time,
        )

    @staticmethod
    def _check_amount(amount: Decimal) -> None:
        if amount < MIN_PAYMENT_AMOUNT:
            raise PaymentAmountError(f"Minimum payment amount is {MIN_PAYMENT_AMOUNT} BDT")
        if amount > MAX_PAYMENT_AMOUNT:
            raise PaymentAmountError(f"Maximum payment amount is {MAX_PAYMENT_AMOUNT} BDT")
