# venue_booking/infrastructure/repositories/organizer_repository.py

from sqlalchemy.orm import Session
from sqlalchemy import select

from venue_booking.infrastructure.db.models import Organizer


class OrganizerRepository:

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, organizer_id: str) -> Organizer | None:
        stmt = select(Organizer).where(Organizer.id == organizer_id)
        return self.db.execute(stmt).scalar_one_or_none()

    def get_by_email(self, email: str) -> Organizer | None:
        stmt = select(Organizer).where(Organizer.email == email.lower())
        return self.db.execute(stmt).scalar_one_or_none()

    def create(
        self,
        name: str,
        email: str,
        password_hash: str,
        phone: str | None = None,
        role: str = "organizer",
    ) -> Organizer:
        organizer = Organizer(
            name=name,
            email=email.lower(),
            password_hash=password_hash,
            phone=phone or None,
            role=role,
        )
        self.db.add(organizer)
        self.db.flush()
        return organizer

    def update(self, organizer: Organizer, **fields) -> Organizer:
        for field, value in fields.items():
            setattr(organizer, field, value)
        self.db.flush()
        return organizer
