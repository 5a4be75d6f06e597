# venue_booking/application/auth_service.py

from dataclasses import dataclass
import logging

from sqlalchemy.orm import Session

from venue_booking.domain.exceptions import AuthenticationError, ConflictError, NotFoundError
from venue_booking.domain.roles import Role
from venue_booking.infrastructure.db.models import Organizer, User
from venue_booking.infrastructure.repositories.organizer_repository import OrganizerRepository
from venue_booking.infrastructure.repositories.user_repository import UserRepository
from venue_booking.infrastructure.security import PasswordHasher, TokenCodec

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"


@dataclass(frozen=True)
class AuthResult:
    account: User | Organizer
    role: str
    token: str


class AuthService:
    """Registration, login and profile upkeep for customers and organizers."""

    def __init__(self, db: Session, hasher: PasswordHasher, tokens: TokenCodec):
        self.db = db
        self.hasher = hasher
        self.tokens = tokens
        self.user_repository = UserRepository(db)
        self.organizer_repository = OrganizerRepository(db)

    # -----------------------------
    # Customers
    # -----------------------------
    def register_user(
        self,
        name: str,
        email: str,
        password: str,
        phone: str | None = None,
    ) -> AuthResult:
        if self.user_repository.email_exists(email):
            logger.warning("Registration rejected, email already in use: %s", email)
            raise ConflictError("User with this email already exists")

        user = self.user_repository.create(
            name=name.strip(),
            email=email,
            password_hash=self.hasher.hash(password),
            phone=phone,
        )
        logger.info("User registered: %s", user.id)
        return self._issue(user, Role.CUSTOMER.value)

    def login_user(self, email: str, password: str) -> AuthResult:
        user = self.user_repository.get_by_email(email)
        if not self._password_matches(password, user):
            logger.warning("Failed user login for %s", email)
            raise AuthenticationError(INVALID_CREDENTIALS)

        logger.info("User logged in: %s", user.id)
        return self._issue(user, Role.CUSTOMER.value)

    def get_user(self, user_id: str) -> User:
        user = self.user_repository.get_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    # -----------------------------
    # Organizers
    # -----------------------------
    def register_organizer(
        self,
        name: str,
        email: str,
        password: str,
        phone: str | None = None,
    ) -> AuthResult:
        if self.organizer_repository.get_by_email(email):
            logger.warning("Organizer registration rejected, email already in use: %s", email)
            raise ConflictError("Organizer with this email already exists")

        organizer = self.organizer_repository.create(
            name=name.strip(),
            email=email,
            password_hash=self.hasher.hash(password),
            phone=phone,
        )
        logger.info("Organizer registered: %s", organizer.id)
        return self._issue(organizer, organizer.role)

    def login_organizer(self, email: str, password: str) -> AuthResult:
        organizer = self.organizer_repository.get_by_email(email)
        if not self._password_matches(password, organizer):
            logger.warning("Failed organizer login for %s", email)
            raise AuthenticationError(INVALID_CREDENTIALS)

        logger.info("Organizer logged in: %s (%s)", organizer.id, organizer.role)
        return self._issue(organizer, organizer.role)

    def get_organizer(self, organizer_id: str) -> Organizer:
        organizer = self.organizer_repository.get_by_id(organizer_id)
        if not organizer:
            raise NotFoundError("Organizer not found")
        return organizer

    def update_organizer_profile(
        self,
        organizer_id: str,
        name: str | None = None,
        phone: str | None = None,
    ) -> Organizer:
        organizer = self.get_organizer(organizer_id)
        changes = {}
        if name is not None:
            changes["name"] = name.strip()
        if phone is not None:
            changes["phone"] = phone or None
        return self.organizer_repository.update(organizer, **changes)

    def change_organizer_password(
        self,
        organizer_id: str,
        current_password: str,
        new_password: str,
    ) -> None:
        organizer = self.get_organizer(organizer_id)
        if not self.hasher.verify(current_password, organizer.password_hash):
            logger.warning("Password change rejected for organizer %s", organizer_id)
            raise AuthenticationError("Current password is incorrect")

        self.organizer_repository.update(
            organizer,
            password_hash=self.hasher.hash(new_password),
        )
        logger.info("Organizer %s changed password", organizer_id)

    def _password_matches(self, password: str, account: User | Organizer | None) -> bool:
        # Unknown accounts still pay for one bcrypt check.
        if account is None:
            return self.hasher.dummy_verify()
        return self.hasher.verify(password, account.password_hash)

    def _issue(self, account: User | Organizer, role: str) -> AuthResult:
        token = self.tokens.issue(subject=account.id, email=account.email, role=role)
        return AuthResult(account=account, role=role, token=token)
