# venue_booking/api/routes/payments.py

from fastapi import APIRouter, Body, Depends, Query, status

from venue_booking.api.dependencies import get_payment_service, get_webhook_service
from venue_booking.api.responses import failure, ok
from venue_booking.api.schemas.common import dump, page_response
from venue_booking.api.schemas.events import EventResponse
from venue_booking.api.schemas.payments import (
    CostBreakdownResponse,
    CostCalculationRequest,
    PaymentMethodResponse,
    PaymentProcessRequest,
    PaymentResponse,
    PaymentResult,
    PaymentStatusRequest,
    PaymentSummary,
    PaymentWebhookPayload,
    ProcessingFee,
    RefundRequest,
    RefundWebhookPayload,
    WebhookAckResponse,
)
from venue_booking.api.security import Principal, enforce_policy, get_principal
from venue_booking.application.payment_service import BookingRequest, PaymentOutcome, PaymentService
from venue_booking.application.webhook_service import PaymentNotice, RefundNotice, WebhookAck, WebhookService
from venue_booking.domain.exceptions import PaymentDeclinedError
from venue_booking.domain.state_machine import PaymentStatus

router = APIRouter(prefix="/payments", tags=["payments"], dependencies=[Depends(enforce_policy)])


def _booking_request(request) -> BookingRequest:
    return BookingRequest(
        venue_id=request.venue_id,
        meal_id=request.meal_id,
        people_count=request.people_count,
        start_time=request.start_time,
        end_time=request.end_time,
        event_type=request.event_type,
        event_id=getattr(request, "event_id", None),
    )


def _outcome_payload(outcome: PaymentOutcome) -> dict:
    result = PaymentResult(
        payment=PaymentResponse.model_validate(outcome.payment),
        event=EventResponse.model_validate(outcome.event) if outcome.event else None,
        cost_breakdown=CostBreakdownResponse.from_breakdown(outcome.breakdown) if outcome.breakdown else None,
        replayed=outcome.replayed,
    )
    return dump(result)


def _ack_payload(ack: WebhookAck) -> dict:
    return dump(WebhookAckResponse(transaction_id=ack.transaction_id, status=ack.status))


@router.get("/methods")
def get_payment_methods(
    payment_service: PaymentService = Depends(get_payment_service),
):
    methods = [dump(PaymentMethodResponse(**method)) for method in payment_service.get_payment_methods()]
    return ok({"methods": methods}, "Payment methods retrieved successfully")


@router.post("/calculate-cost")
def calculate_cost(
    request: CostCalculationRequest,
    payment_service: PaymentService = Depends(get_payment_service),
):
    breakdown = payment_service.calculate_cost(_booking_request(request))
    data = {"costBreakdown": dump(CostBreakdownResponse.from_breakdown(breakdown))}

    if request.payment_method:
        fee = payment_service.processing_fee(request.payment_method, breakdown.total)
        data["processingFee"] = dump(ProcessingFee(payment_method=request.payment_method, **fee))

    return ok(data, "Cost calculated successfully")


@router.post("/process", status_code=status.HTTP_201_CREATED)
def process_payment(
    request: PaymentProcessRequest,
    principal: Principal = Depends(get_principal),
    payment_service: PaymentService = Depends(get_payment_service),
):
    outcome = payment_service.process_payment(
        principal.subject,
        _booking_request(request),
        request.payment_method,
        request.idempotency_key,
    )

    if not outcome.success:
        return failure(
            PaymentDeclinedError.status_code,
            "Payment failed. Please try again.",
            PaymentDeclinedError.error_code,
            data=_outcome_payload(outcome),
        )

    message = "Payment already processed" if outcome.replayed else "Payment processed and event booked successfully"
    return ok(_outcome_payload(outcome), message)


@router.post("/status")
def get_payment_status(
    request: PaymentStatusRequest,
    principal: Principal = Depends(get_principal),
    payment_service: PaymentService = Depends(get_payment_service),
):
    payment = payment_service.get_payment_status(
        request.transaction_id,
        principal.subject,
        principal.role,
    )
    return ok({"payment": dump(PaymentResponse.model_validate(payment))}, "Payment status retrieved successfully")


@router.post("/refund")
def refund_payment(
    request: RefundRequest,
    principal: Principal = Depends(get_principal),
    payment_service: PaymentService = Depends(get_payment_service),
):
    payment = payment_service.refund_payment(request.payment_id, principal.subject, request.reason)
    return ok({"payment": dump(PaymentResponse.model_validate(payment))}, "Refund processed successfully")


@router.get("/history")
def get_payment_history(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    payment_status: PaymentStatus | None = Query(None, alias="status"),
    principal: Principal = Depends(get_principal),
    payment_service: PaymentService = Depends(get_payment_service),
):
    history, summary = payment_service.get_user_payment_history(
        principal.subject,
        page,
        limit,
        payment_status,
    )
    data = page_response(history, PaymentResponse)
    data["summary"] = dump(PaymentSummary(**summary))
    return ok(data, "Payment history retrieved successfully")


@router.post("/webhook")
def handle_payment_webhook(
    payload: dict = Body(...),
    webhook_service: WebhookService = Depends(get_webhook_service),
):
    body = PaymentWebhookPayload.model_validate(payload)
    notice = PaymentNotice(transaction_id=body.transaction_id, status=PaymentStatus(body.status))
    ack = webhook_service.handle_payment_webhook(payload, notice)
    return {"success": ack.success, "message": ack.message, "data": _ack_payload(ack)}


@router.post("/webhook/refund")
def handle_refund_webhook(
    payload: dict = Body(...),
    webhook_service: WebhookService = Depends(get_webhook_service),
):
    body = RefundWebhookPayload.model_validate(payload)
    notice = RefundNotice(
        transaction_id=body.transaction_id,
        original_transaction_id=body.original_transaction_id,
        status=body.status,
    )
    ack = webhook_service.handle_refund_webhook(payload, notice)
    return {"success": ack.success, "message": ack.message, "data": _ack_payload(ack)}
