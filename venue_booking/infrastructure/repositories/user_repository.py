# venue_booking/infrastructure/repositories/user_repository.py

from sqlalchemy.orm import Session
from sqlalchemy import func, select

from venue_booking.infrastructure.db.models import User


class UserRepository:

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, user_id: str) -> User | None:
        stmt = select(User).where(User.id == user_id)
        return self.db.execute(stmt).scalar_one_or_none()

    def get_by_email(self, email: str) -> User | None:
        stmt = select(User).where(User.email == email.lower())
        return self.db.execute(stmt).scalar_one_or_none()

    def email_exists(self, email: str) -> bool:
        return self.get_by_email(email) is not None

    def create(
        self,
        name: str,
        email: str,
        password_hash: str,
        phone: str | None = None,
    ) -> User:
        user = User(
            name=name,
            email=email.lower(),
            password_hash=password_hash,
            phone=phone or None,
        )
        self.db.add(user)
        self.db.flush()
        return user

    def count(self) -> int:
        return self.db.execute(select(func.count(User.id))).scalar_one()
