# venue_booking/api/dependencies.py

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from venue_booking.application.analytics_service import AnalyticsService
from venue_booking.application.auth_service import AuthService
from venue_booking.application.container import ServiceContainer
from venue_booking.application.event_service import EventService
from venue_booking.application.meal_service import MealService
from venue_booking.application.payment_service import PaymentService
from venue_booking.application.venue_service import VenueService
from venue_booking.application.webhook_service import WebhookService
from venue_booking.infrastructure.db.session import get_db


def get_container(request: Request) -> ServiceContainer:
    return request.app.state.container


def get_auth_service(
    db: Session = Depends(get_db),
    container: ServiceContainer = Depends(get_container),
) -> AuthService:
    return AuthService(db, container.hasher, container.tokens)


def get_venue_service(db: Session = Depends(get_db)) -> VenueService:
    return VenueService(db)


def get_meal_service(db: Session = Depends(get_db)) -> MealService:
    return MealService(db)


def get_event_service(db: Session = Depends(get_db)) -> EventService:
    return EventService(db)


def get_payment_service(
    db: Session = Depends(get_db),
    container: ServiceContainer = Depends(get_container),
) -> PaymentService:
    return PaymentService(db, container.gateway)


def get_webhook_service(
    db: Session = Depends(get_db),
    container: ServiceContainer = Depends(get_container),
) -> WebhookService:
    return WebhookService(db, container.webhook_verifier)


def get_analytics_service(db: Session = Depends(get_db)) -> AnalyticsService:
    return AnalyticsService(db)
