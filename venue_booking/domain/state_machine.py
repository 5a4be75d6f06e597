# venue_booking/domain/state_machine.py

from enum import Enum
from typing import Dict, Set, Type

from venue_booking.domain.exceptions import InvalidStateTransitionError


class EventStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    SUCCESS = "success"
    FAILED = "failed"
    REFUNDED = "refunded"


class _StateMachine:
    """
    Shared lifecycle rules. Subclasses declare the status enum
    and the legal transitions; everything else is inherited.
    """

    _STATUS_TYPE: Type[Enum]
    _ALLOWED_TRANSITIONS: Dict[Enum, Set[Enum]]

    @classmethod
    def can_transition(cls, from_status: Enum, to_status: Enum) -> bool:
        """
        Returns True if transition is allowed.
        """
        cls._ensure_valid_status(from_status)
        cls._ensure_valid_status(to_status)

        return to_status in cls._ALLOWED_TRANSITIONS.get(from_status, set())

    @classmethod
    def validate_transition(cls, from_status: Enum, to_status: Enum) -> None:
        """
        Raises InvalidStateTransitionError if transition is illegal.
        """
        if not cls.can_transition(from_status, to_status):
            raise InvalidStateTransitionError(
                from_state=from_status.value,
                to_state=to_status.value,
            )

    @classmethod
    def is_terminal(cls, status: Enum) -> bool:
        cls._ensure_valid_status(status)
        return len(cls._ALLOWED_TRANSITIONS.get(status, set())) == 0

    @classmethod
    def get_allowed_transitions(cls, status: Enum) -> Set[Enum]:
        cls._ensure_valid_status(status)
        return cls._ALLOWED_TRANSITIONS.get(status, set())

    @classmethod
    def _ensure_valid_status(cls, status: Enum) -> None:
        if not isinstance(status, cls._STATUS_TYPE):
            raise TypeError(
                f"Expected {cls._STATUS_TYPE.__name__}, got {type(status)}"
            )


class EventStateMachine(_StateMachine):
    """Event status only moves forward: pending -> confirmed -> cancelled."""

    _STATUS_TYPE = EventStatus
    _ALLOWED_TRANSITIONS = {
        EventStatus.PENDING: {
            EventStatus.CONFIRMED,
            EventStatus.CANCELLED,
        },
        EventStatus.CONFIRMED: {
            EventStatus.CANCELLED,
        },
        EventStatus.CANCELLED: set(),
    }


class PaymentStateMachine(_StateMachine):
    """A payment is refunded only after it succeeded."""

    _STATUS_TYPE = PaymentStatus
    _ALLOWED_TRANSITIONS = {
        PaymentStatus.PENDING: {
            PaymentStatus.SUCCESS,
            PaymentStatus.FAILED,
        },
        PaymentStatus.SUCCESS: {
            PaymentStatus.REFUNDED,
        },
        PaymentStatus.FAILED: set(),
        PaymentStatus.REFUNDED: set(),
    }
