# venue_booking/api/schemas/payments.py

from decimal import Decimal
from typing import Literal

from pydantic import Field

from venue_booking.api.schemas.common import CamelModel, Money, OrmModel, UtcDatetime
from venue_booking.api.schemas.events import (
    MAX_PEOPLE_COUNT,
    MIN_PEOPLE_COUNT,
    BookingDetails,
    EventResponse,
    TimeRange,
)
from venue_booking.domain.pricing import PaymentMethod, PricingUnit
from venue_booking.domain.state_machine import PaymentStatus


class CostCalculationRequest(BookingDetails):
    payment_method: PaymentMethod | None = None


class PaymentProcessRequest(TimeRange):
    venue_id: str = Field(min_length=1)
    meal_id: str | None = None
    people_count: int = Field(ge=MIN_PEOPLE_COUNT, le=MAX_PEOPLE_COUNT)
    event_type: str = Field(default="Event", min_length=1, max_length=100)
    payment_method: PaymentMethod
    idempotency_key: str = Field(min_length=8, max_length=128)
    event_id: str | None = None


class PaymentStatusRequest(CamelModel):
    transaction_id: str = Field(min_length=1, max_length=64)


class RefundRequest(CamelModel):
    payment_id: str = Field(min_length=1)
    reason: str = Field(min_length=10, max_length=500)


class PaymentMethodResponse(CamelModel):
    id: PaymentMethod
    name: str
    description: str
    processing_fee_rate: Money


# -----------------------------
# Cost breakdown
# -----------------------------
class VenueCostLine(CamelModel):
    venue_id: str
    name: str
    pricing_unit: PricingUnit
    rate: Money
    requested_units: int
    minimum_units: int
    billed_units: int
    cost: Money


class MealCostLine(CamelModel):
    meal_id: str
    name: str
    price_per_person: Money
    people: int
    cost: Money


class CostBreakdownResponse(CamelModel):
    venue: VenueCostLine
    meal: MealCostLine | None
    venue_cost: Money
    meal_cost: Money
    subtotal: Money
    tax: Money
    service_fee: Money
    total: Money
    tax_rate: Money
    service_fee_rate: Money
    currency: str = "BDT"

    @classmethod
    def from_breakdown(cls, breakdown) -> "CostBreakdownResponse":
        return cls(
            venue=VenueCostLine.model_validate(breakdown.venue, from_attributes=True),
            meal=MealCostLine.model_validate(breakdown.meal, from_attributes=True) if breakdown.meal else None,
            venue_cost=breakdown.venue_cost,
            meal_cost=breakdown.meal_cost,
            subtotal=breakdown.subtotal,
            tax=breakdown.tax,
            service_fee=breakdown.service_fee,
            total=breakdown.total,
            tax_rate=breakdown.tax_rate,
            service_fee_rate=breakdown.service_fee_rate,
        )


class ProcessingFee(CamelModel):
    payment_method: PaymentMethod
    processing_fee: Money
    net_amount: Money


# -----------------------------
# Payments
# -----------------------------
class PaymentResponse(OrmModel):
    id: str
    user_id: str
    event_id: str | None
    amount: Money
    method: str
    status: PaymentStatus
    transaction_id: str
    refund_transaction_id: str | None = None
    refund_reason: str | None = None
    refunded_at: UtcDatetime | None = None
    requires_reconciliation: bool
    created_at: UtcDatetime


class PaymentResult(CamelModel):
    payment: PaymentResponse
    event: EventResponse | None
    cost_breakdown: CostBreakdownResponse | None
    replayed: bool


class PaymentSummary(CamelModel):
    total_amount: Money
    successful_payments: int
    failed_payments: int
    refunded_payments: int
    pending_payments: int


# -----------------------------
# Provider webhooks
# -----------------------------
class PaymentWebhookPayload(CamelModel):
    transaction_id: str = Field(min_length=1)
    status: Literal["pending", "success", "failed", "refunded"]
    amount: Decimal = Field(ge=0)
    method: str
    timestamp: str
    signature: str | None = None


class RefundWebhookPayload(CamelModel):
    transaction_id: str = Field(min_length=1)
    original_transaction_id: str = Field(min_length=1)
    status: Literal["pending", "success", "failed"]
    amount: Decimal = Field(ge=0)
    timestamp: str
    signature: str | None = None


class WebhookAckResponse(CamelModel):
    transaction_id: str
    status: str | None = None
