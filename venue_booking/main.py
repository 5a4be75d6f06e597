# venue_booking/main.py

import logging

from fastapi import FastAPI

from venue_booking.api.errors import register_exception_handlers
from venue_booking.api.routes import admin, events, health, meals, organizer, payments, users, venues
from venue_booking.application.container import ServiceContainer
from venue_booking.application.startup_service import StartupService
from venue_booking.config import Settings, configure_logging
from venue_booking.infrastructure.db.session import SessionLocal, engine, settings as default_settings

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    container: ServiceContainer | None = None,
    run_startup: bool = True,
) -> FastAPI:
    settings = settings or default_settings
    container = container or ServiceContainer.build(settings)

    app = FastAPI(title="Venue Booking Engine")
    app.state.container = container

    register_exception_handlers(app, redact_internal_errors=settings.is_production)

    for module in (health, users, organizer, venues, meals, events, payments, admin):
        app.include_router(module.router)

    if run_startup:

        @app.on_event("startup")
        def on_startup() -> None:
            db = SessionLocal()
            try:
                StartupService(engine, settings, container.hasher).run(db)
            finally:
                db.close()
            logger.info("Venue booking API ready (environment=%s)", settings.environment)

    return app


configure_logging(default_settings.log_level)
app = create_app()
