# venue_booking/infrastructure/db/models.py

from sqlalchemy import (
    JSON,
    Boolean,
    String,
    Integer,
    DateTime,
    Enum,
    Numeric,
    Text,
    CheckConstraint,
    ForeignKey,
    Index,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from datetime import datetime
from decimal import Decimal
from uuid import uuid4

from venue_booking.infrastructure.db.session import Base
from venue_booking.domain.state_machine import EventStatus, PaymentStatus
from venue_booking.domain.pricing import (
    MealType,
    PricingUnit,
    ServingStyle,
    VenueType,
)


def _uuid() -> str:
    return str(uuid4())


def _enum(enum_cls, name: str) -> Enum:
    # Store the lower-case values, not the member names.
    return Enum(
        enum_cls,
        name=name,
        values_callable=lambda members: [member.value for member in members],
        native_enum=False,
        length=32,
    )


class TimestampMixin:
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )


class User(TimestampMixin, Base):
    """Customer account. Owns the events it books."""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(150), nullable=False, unique=True, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[str | None] = mapped_column(String(20), nullable=True)


class Organizer(TimestampMixin, Base):
    """Staff account with catalog and event privileges."""

    __tablename__ = "organizers"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(150), nullable=False, unique=True, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[str | None] = mapped_column(String(20), nullable=True)
    role: Mapped[str] = mapped_column(String(32), nullable=False, default="organizer")

    __table_args__ = (
        CheckConstraint("role IN ('organizer', 'admin')", name="ck_organizer_role"),
    )


class Venue(TimestampMixin, Base):
    __tablename__ = "venues"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    name: Mapped[str] = mapped_column(String(150), nullable=False, unique=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    address: Mapped[str] = mapped_column(String(500), nullable=False)
    city: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    state: Mapped[str] = mapped_column(String(100), nullable=False)
    country: Mapped[str] = mapped_column(String(100), nullable=False, default="Bangladesh")
    zip_code: Mapped[str | None] = mapped_column(String(20), nullable=True)
    capacity: Mapped[int] = mapped_column(Integer, nullable=False)
    venue_type: Mapped[VenueType] = mapped_column(_enum(VenueType, "venue_type"), nullable=False)
    pricing_unit: Mapped[PricingUnit] = mapped_column(
        _enum(PricingUnit, "pricing_unit"),
        nullable=False,
        default=PricingUnit.HOUR,
    )
    price_per_hour: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    price_per_day: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    minimum_hours: Mapped[int] = mapped_column(Integer, nullable=False, default=4)
    minimum_days: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    security_deposit: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    facilities: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    amenities: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    images: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    catering_allowed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    decoration_allowed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    alcohol_allowed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    operating_hours: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    contact_person: Mapped[str | None] = mapped_column(String(100), nullable=True)
    contact_phone: Mapped[str | None] = mapped_column(String(20), nullable=True)
    contact_email: Mapped[str | None] = mapped_column(String(150), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    __table_args__ = (
        CheckConstraint("capacity > 0", name="ck_venue_capacity_positive"),
        CheckConstraint("minimum_hours >= 1", name="ck_venue_minimum_hours_positive"),
        CheckConstraint("minimum_days >= 1", name="ck_venue_minimum_days_positive"),
        CheckConstraint("price_per_hour IS NULL OR price_per_hour >= 0", name="ck_venue_hour_price_nonnegative"),
        CheckConstraint("price_per_day IS NULL OR price_per_day >= 0", name="ck_venue_day_price_nonnegative"),
        Index("ix_venues_city_venue_type", "city", "venue_type"),
    )

    @property
    def rate(self) -> Decimal:
        if self.pricing_unit == PricingUnit.DAY:
            return self.price_per_day
        return self.price_per_hour


class Meal(TimestampMixin, Base):
    __tablename__ = "meals"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    type: Mapped[MealType] = mapped_column(_enum(MealType, "meal_type"), nullable=False, index=True)
    cuisine: Mapped[str | None] = mapped_column(String(50), nullable=True)
    serving_style: Mapped[ServingStyle] = mapped_column(
        _enum(ServingStyle, "serving_style"),
        nullable=False,
    )
    price_per_person: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    minimum_guests: Mapped[int] = mapped_column(Integer, nullable=False, default=50)
    special_dietary: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    menu_items: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    images: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    is_popular: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    __table_args__ = (
        CheckConstraint("price_per_person >= 0", name="ck_meal_price_nonnegative"),
        CheckConstraint("minimum_guests >= 1", name="ck_meal_minimum_guests_positive"),
    )


class Event(TimestampMixin, Base):
    """
    A booking of one venue (and optionally one meal) for a time range.
    Status moves only forward, see EventStateMachine.
    """

    __tablename__ = "events"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    user_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    venue_id: Mapped[str] = mapped_column(String(36), ForeignKey("venues.id"), nullable=False, index=True)
    meal_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("meals.id", ondelete="SET NULL"),
        nullable=True,
    )
    event_type: Mapped[str] = mapped_column(String(100), nullable=False, default="Event")
    people_count: Mapped[int] = mapped_column(Integer, nullable=False)
    start_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    end_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    total_cost: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    status: Mapped[EventStatus] = mapped_column(
        _enum(EventStatus, "event_status"),
        nullable=False,
        default=EventStatus.PENDING,
    )

    venue: Mapped[Venue] = relationship(lazy="joined")
    meal: Mapped[Meal | None] = relationship(lazy="joined")

    __table_args__ = (
        CheckConstraint("people_count > 0", name="ck_event_people_count_positive"),
        CheckConstraint("end_time > start_time", name="ck_event_time_range"),
        Index("ix_events_venue_time_range", "venue_id", "start_time", "end_time"),
    )


class Payment(TimestampMixin, Base):
    """
    One payment attempt. Reconciliation records and failed attempts
    at a fresh booking carry no event_id; attempts at a pending
    reservation point at it.
    """

    __tablename__ = "payments"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    user_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    event_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("events.id"),
        nullable=True,
        index=True,
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    method: Mapped[str] = mapped_column(String(32), nullable=False)
    status: Mapped[PaymentStatus] = mapped_column(
        _enum(PaymentStatus, "payment_status"),
        nullable=False,
        default=PaymentStatus.PENDING,
    )
    transaction_id: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    idempotency_key: Mapped[str] = mapped_column(String(128), nullable=False, unique=True)
    request_fingerprint: Mapped[str | None] = mapped_column(String(64), nullable=True)
    cost_breakdown: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    refund_transaction_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    refund_reason: Mapped[str | None] = mapped_column(String(500), nullable=True)
    refunded_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    requires_reconciliation: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    event: Mapped[Event | None] = relationship(lazy="joined")

    __table_args__ = (
        CheckConstraint("amount >= 0", name="ck_payment_amount_nonnegative"),
    )
