# venue_booking/application/startup_service.py

import logging
import time

from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from venue_booking.config import Settings
from venue_booking.domain.roles import Role
from venue_booking.infrastructure.db.models import Organizer
from venue_booking.infrastructure.db.session import Base
from venue_booking.infrastructure.repositories.organizer_repository import OrganizerRepository
from venue_booking.infrastructure.security import PasswordHasher

logger = logging.getLogger(__name__)


class StartupService:
    """One-time bootstrap run before the app accepts traffic. Safe to repeat."""

    def __init__(self, engine: Engine, settings: Settings, hasher: PasswordHasher):
        self.engine = engine
        self.settings = settings
        self.hasher = hasher

    def run(self, db: Session) -> None:
        self.wait_for_db()
        Base.metadata.create_all(bind=self.engine)
        self.ensure_admin(db)

    def wait_for_db(self) -> None:
        # Handles the common case where the API starts before Postgres is ready.
        max_retries = self.settings.db_connect_max_retries
        retry_delay_seconds = self.settings.db_connect_retry_delay

        for attempt in range(1, max_retries + 1):
            try:
                with self.engine.connect() as conn:
                    conn.execute(text("SELECT 1"))
                logger.info("Database is reachable.")
                return
            except OperationalError:
                if attempt == max_retries:
                    logger.exception(
                        "Database not reachable after %s attempts. Check DATABASE_URL and Postgres status.",
                        max_retries,
                    )
                    raise
                logger.warning(
                    "Database not ready (attempt %s/%s). Retrying in %.1f seconds...",
                    attempt,
                    max_retries,
                    retry_delay_seconds,
                )
                time.sleep(retry_delay_seconds)

    def ensure_admin(self, db: Session) -> Organizer | None:
        email = self.settings.admin_email
        password = self.settings.admin_password
        if not email or not password:
            logger.info("ADMIN_EMAIL/ADMIN_PASSWORD not set, skipping admin bootstrap")
            return None

        repository = OrganizerRepository(db)
        organizer = repository.get_by_email(email)

        if organizer is None:
            organizer = repository.create(
                name=self.settings.admin_name,
                email=email,
                password_hash=self.hasher.hash(password),
                role=Role.ADMIN.value,
            )
            logger.info("Created bootstrap admin %s", organizer.email)
        elif organizer.role != Role.ADMIN.value:
            repository.update(organizer, role=Role.ADMIN.value)
            logger.info("Promoted organizer %s to admin", organizer.email)
        else:
            logger.info("Bootstrap admin %s already present", organizer.email)

        db.commit()
        return organizer
