# venue_booking/api/errors.py

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from venue_booking.api.responses import failure
from venue_booking.domain.exceptions import (
    InvalidRequestError,
    PaymentReconciliationError,
    VenueBookingError,
)

logger = logging.getLogger(__name__)

_LOCATION_PREFIXES = {"body", "query", "path", "header"}


def validation_details(errors) -> list[dict]:
    details = []
    for error in errors:
        loc = [str(part) for part in error.get("loc", ()) if str(part) not in _LOCATION_PREFIXES]
        message = error.get("msg", "Invalid value")
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        details.append({"field": ".".join(loc) or None, "message": message})
    return details


def register_exception_handlers(app: FastAPI, redact_internal_errors: bool) -> None:

    def _internal_message(exc: Exception, fallback: str) -> str:
        if redact_internal_errors:
            return "Internal server error"
        return str(exc) or fallback

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return failure(
            400,
            "Validation failed",
            "validation_error",
            details=validation_details(exc.errors()),
        )

    @app.exception_handler(ValidationError)
    async def payload_validation_handler(request: Request, exc: ValidationError):
        return failure(
            400,
            "Validation failed",
            "validation_error",
            details=validation_details(exc.errors()),
        )

    @app.exception_handler(InvalidRequestError)
    async def invalid_request_handler(request: Request, exc: InvalidRequestError):
        details = [{"field": exc.field, "message": exc.message}] if exc.field else None
        return failure(exc.status_code, exc.message, exc.error_code, details=details)

    @app.exception_handler(PaymentReconciliationError)
    async def reconciliation_handler(request: Request, exc: PaymentReconciliationError):
        logger.error(
            "Reconciliation required for payment %s (%s) on %s %s",
            exc.payment_id,
            exc.transaction_id,
            request.method,
            request.url.path,
        )
        message = exc.message
        if redact_internal_errors:
            message = f"Payment {exc.transaction_id} needs manual reconciliation. Please contact support."
        return failure(
            exc.status_code,
            message,
            exc.error_code,
            data={"transactionId": exc.transaction_id},
        )

    @app.exception_handler(VenueBookingError)
    async def domain_error_handler(request: Request, exc: VenueBookingError):
        if exc.status_code >= 500:
            logger.error("%s on %s %s: %s", exc.error_code, request.method, request.url.path, exc.message)
        return failure(exc.status_code, exc.message, exc.error_code)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return failure(exc.status_code, str(exc.detail), "http_error")

    @app.exception_handler(SQLAlchemyError)
    async def database_error_handler(request: Request, exc: SQLAlchemyError):
        logger.exception("Database error on %s %s", request.method, request.url.path)
        return failure(500, _internal_message(exc, "Database error"), "database_error")

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return failure(500, _internal_message(exc, "Internal server error"), "internal_error")
