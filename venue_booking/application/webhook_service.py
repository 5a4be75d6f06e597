# venue_booking/application/webhook_service.py

from dataclasses import dataclass
import logging

from sqlalchemy.orm import Session

from venue_booking.domain.state_machine import (
    EventStateMachine,
    EventStatus,
    PaymentStateMachine,
    PaymentStatus,
)
from venue_booking.infrastructure.payment_gateway import WebhookSignatureVerifier
from venue_booking.infrastructure.repositories.event_repository import EventRepository
from venue_booking.infrastructure.repositories.payment_repository import PaymentRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PaymentNotice:
    transaction_id: str
    status: PaymentStatus


@dataclass(frozen=True)
class RefundNotice:
    transaction_id: str
    original_transaction_id: str
    status: str


@dataclass(frozen=True)
class WebhookAck:
    """Body of the 200 response. Providers retry anything that is not 2xx."""

    success: bool
    message: str
    transaction_id: str
    status: str | None = None


class WebhookService:
    """Applies provider notifications to stored payments."""

    def __init__(self, db: Session, verifier: WebhookSignatureVerifier):
        self.db = db
        self.verifier = verifier
        self.payment_repository = PaymentRepository(db)
        self.event_repository = EventRepository(db)

    def handle_payment_webhook(self, body: dict, notice: PaymentNotice) -> WebhookAck:
        """`body` is the payload exactly as delivered; the signature covers it."""
        self.verifier.verify(body, body.get("signature"))

        transaction_id = notice.transaction_id
        new_status = notice.status

        payment = self.payment_repository.get_by_transaction_id(transaction_id)
        if not payment:
            logger.warning("Webhook for unknown transaction %s", transaction_id)
            return WebhookAck(False, "Payment not found", transaction_id)

        current = PaymentStatus(payment.status)
        if current == new_status:
            logger.info("Duplicate webhook for %s (%s), nothing to do", transaction_id, current.value)
            return WebhookAck(True, "Payment already up to date", transaction_id, current.value)

        if not PaymentStateMachine.can_transition(current, new_status):
            logger.warning(
                "Ignoring webhook transition %s -> %s for %s",
                current.value,
                new_status.value,
                transaction_id,
            )
            return WebhookAck(
                False,
                f"Transition {current.value} -> {new_status.value} is not allowed",
                transaction_id,
                current.value,
            )

        self.payment_repository.update_status(payment, new_status)
        logger.info("Payment %s moved %s -> %s via webhook", payment.id, current.value, new_status.value)

        if new_status == PaymentStatus.SUCCESS and payment.event_id:
            self._confirm_event(payment.event_id)

        return WebhookAck(True, "Webhook processed successfully", transaction_id, new_status.value)

    def handle_refund_webhook(self, body: dict, notice: RefundNotice) -> WebhookAck:
        self.verifier.verify(body, body.get("signature"))

        refund_transaction_id = notice.transaction_id
        original_transaction_id = notice.original_transaction_id

        payment = self.payment_repository.get_by_transaction_id(original_transaction_id)
        if not payment:
            logger.warning("Refund webhook for unknown transaction %s", original_transaction_id)
            return WebhookAck(False, "Payment not found", refund_transaction_id)

        if notice.status != PaymentStatus.SUCCESS.value:
            logger.info(
                "Refund %s for %s reported as %s",
                refund_transaction_id,
                original_transaction_id,
                notice.status,
            )
            return WebhookAck(True, "Refund status noted", refund_transaction_id, payment.status.value)

        current = PaymentStatus(payment.status)
        if current == PaymentStatus.REFUNDED:
            return WebhookAck(True, "Payment already refunded", refund_transaction_id, current.value)

        if not PaymentStateMachine.can_transition(current, PaymentStatus.REFUNDED):
            logger.warning("Refund webhook for %s ignored, payment is %s", original_transaction_id, current.value)
            return WebhookAck(
                False,
                f"Payment in status {current.value} cannot be refunded",
                refund_transaction_id,
                current.value,
            )

        self.payment_repository.mark_refunded(
            payment,
            refund_transaction_id,
            payment.refund_reason or "Refund confirmed by provider",
        )
        logger.info("Payment %s refunded via webhook (%s)", payment.id, refund_transaction_id)
        return WebhookAck(True, "Refund webhook processed successfully", refund_transaction_id, PaymentStatus.REFUNDED.value)

    def _confirm_event(self, event_id: str) -> None:
        event = self.event_repository.get_by_id(event_id)
        if not event:
            return
        if EventStateMachine.can_transition(EventStatus(event.status), EventStatus.CONFIRMED):
            self.event_repository.update_status(event, EventStatus.CONFIRMED)
            logger.info("Event %s confirmed via payment webhook", event.id)
