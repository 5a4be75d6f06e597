# venue_booking/infrastructure/repositories/payment_repository.py

from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy.orm import Session
from sqlalchemy import func, select

from venue_booking.domain.state_machine import PaymentStatus
from venue_booking.infrastructure.db.models import Payment
from venue_booking.infrastructure.repositories.base import Page, order_clauses, paginate


class PaymentRepository:

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, payment_id: str) -> Payment | None:
        stmt = select(Payment).where(Payment.id == payment_id)
        return self.db.execute(stmt).scalar_one_or_none()

    def get_by_transaction_id(self, transaction_id: str) -> Payment | None:
        stmt = select(Payment).where(Payment.transaction_id == transaction_id)
        return self.db.execute(stmt).scalar_one_or_none()

    def get_by_idempotency_key(self, idempotency_key: str) -> Payment | None:
        stmt = select(Payment).where(Payment.idempotency_key == idempotency_key)
        return self.db.execute(stmt).scalar_one_or_none()

    def create(
        self,
        user_id: str,
        event_id: str | None,
        amount: Decimal,
        method: str,
        status: PaymentStatus,
        transaction_id: str,
        idempotency_key: str,
        requires_reconciliation: bool = False,
        request_fingerprint: str | None = None,
        cost_breakdown: dict | None = None,
    ) -> Payment:
        payment = Payment(
            user_id=user_id,
            event_id=event_id,
            amount=amount,
            method=method,
            status=status,
            transaction_id=transaction_id,
            idempotency_key=idempotency_key,
            requires_reconciliation=requires_reconciliation,
            request_fingerprint=request_fingerprint,
            cost_breakdown=cost_breakdown,
        )
        self.db.add(payment)
        self.db.flush()
        return payment

    def update_status(self, payment: Payment, new_status: PaymentStatus) -> None:
        payment.status = new_status
        self.db.flush()

    def settle(self, payment: Payment, new_status: PaymentStatus, event_id: str | None) -> None:
        payment.status = new_status
        payment.event_id = event_id
        self.db.flush()

    def mark_refunded(
        self,
        payment: Payment,
        refund_transaction_id: str,
        reason: str | None,
    ) -> None:
        payment.status = PaymentStatus.REFUNDED
        payment.refund_transaction_id = refund_transaction_id
        payment.refund_reason = reason
        payment.refunded_at = datetime.now(timezone.utc)
        self.db.flush()

    def find_by_user(
        self,
        user_id: str,
        page: int,
        limit: int,
        status: PaymentStatus | None = None,
    ) -> Page[Payment]:
        stmt = select(Payment).where(Payment.user_id == user_id)
        if status:
            stmt = stmt.where(Payment.status == status)
        return paginate(
            self.db,
            stmt,
            page,
            limit,
            order_clauses(Payment.created_at, "desc", Payment),
        )

    def summarize_user(self, user_id: str) -> dict:
        stmt = (
            select(Payment.status, func.count(Payment.id), func.coalesce(func.sum(Payment.amount), 0))
            .where(Payment.user_id == user_id)
            .group_by(Payment.status)
        )
        rows = {PaymentStatus(status): (count, amount) for status, count, amount in self.db.execute(stmt).all()}

        def _count(status: PaymentStatus) -> int:
            return rows.get(status, (0, 0))[0]

        total_paid = Decimal(str(rows.get(PaymentStatus.SUCCESS, (0, 0))[1]))
        return {
            "total_amount": total_paid.quantize(Decimal("0.01")),
            "successful_payments": _count(PaymentStatus.SUCCESS),
            "failed_payments": _count(PaymentStatus.FAILED),
            "refunded_payments": _count(PaymentStatus.REFUNDED),
            "pending_payments": _count(PaymentStatus.PENDING),
        }
