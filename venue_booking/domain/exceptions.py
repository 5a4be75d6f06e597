class VenueBookingError(Exception):
    """
    Base exception for all domain-level errors.
    Carries the HTTP status the central handler answers with.
    """

    status_code: int = 500
    error_code: str = "internal_error"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class InvalidRequestError(VenueBookingError):
    """Raised when input passes schema validation but breaks a business rule."""

    status_code = 400
    error_code = "invalid_request"

    def __init__(self, message: str, field: str | None = None):
        self.field = field
        super().__init__(message)


class AuthenticationError(VenueBookingError):
    status_code = 401
    error_code = "unauthorized"


class PermissionDeniedError(VenueBookingError):
    status_code = 403
    error_code = "forbidden"


class NotFoundError(VenueBookingError):
    status_code = 404
    error_code = "not_found"


class ConflictError(VenueBookingError):
    status_code = 409
    error_code = "conflict"


class VenueUnavailableError(ConflictError):
    """Raised when the requested slot overlaps a live booking."""

    error_code = "venue_unavailable"


class IdempotencyConflictError(ConflictError):
    """Raised when an idempotent request conflicts with previous data."""

    error_code = "idempotency_conflict"


class InvalidStateTransitionError(VenueBookingError):
    """
    Raised when an illegal event or payment state transition is attempted.
    """

    status_code = 422
    error_code = "invalid_state_transition"

    def __init__(self, from_state: str, to_state: str):
        self.from_state = from_state
        self.to_state = to_state

        message = (
            f"Illegal state transition attempted: "
            f"{from_state} -> {to_state}"
        )
        super().__init__(message)


class InvalidPaymentStateError(VenueBookingError):
    """Raised when a payment operation needs a different payment status."""

    status_code = 422
    error_code = "invalid_payment_state"


class PaymentAmountError(VenueBookingError):
    status_code = 422
    error_code = "invalid_payment_amount"


class PaymentDeclinedError(VenueBookingError):
    status_code = 402
    error_code = "payment_declined"


class PaymentGatewayError(VenueBookingError):
    """Raised when the simulated provider rejects an operation."""

    status_code = 502
    error_code = "payment_gateway_error"


class PaymentReconciliationError(VenueBookingError):
    """
    Raised when money was taken but the booking could not be stored.
    The payment row is persisted and flagged before this is raised.
    """

    status_code = 500
    error_code = "payment_reconciliation_required"

    def __init__(self, message: str, transaction_id: str, payment_id: str):
        self.transaction_id = transaction_id
        self.payment_id = payment_id
        super().__init__(message)
