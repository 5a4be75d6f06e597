# venue_booking/infrastructure/security.py

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import jwt
from passlib.context import CryptContext

from venue_booking.domain.exceptions import AuthenticationError


class PasswordHasher:
    """bcrypt hashing through passlib."""

    def __init__(self, rounds: int = 12):
        self.pwd_context = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__rounds=rounds,
        )

    def hash(self, password: str) -> str:
        return self.pwd_context.hash(password)

    def verify(self, password: str, password_hash: str) -> bool:
        return self.pwd_context.verify(password, password_hash)

    def dummy_verify(self) -> bool:
        """Spends the same bcrypt time as a real check; always False."""
        return self.pwd_context.dummy_verify()


@dataclass(frozen=True)
class TokenClaims:
    subject: str
    email: str
    role: str
    issued_at: datetime
    expires_at: datetime


class TokenCodec:
    """Signs and verifies stateless bearer tokens."""

    def __init__(self, secret: str, algorithm: str = "HS256", expire_minutes: int = 10080):
        self.secret = secret
        self.algorithm = algorithm
        self.expire_minutes = expire_minutes

    def issue(self, subject: str, email: str, role: str) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            "sub": subject,
            "userId": subject,
            "email": email,
            "role": role,
            "iat": now,
            "exp": now + timedelta(minutes=self.expire_minutes),
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def decode(self, token: str) -> TokenClaims:
        try:
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                options={"require": ["sub", "exp", "role"]},
            )
        except jwt.ExpiredSignatureError:
            raise AuthenticationError("Token has expired")
        except jwt.PyJWTError:
            raise AuthenticationError("Invalid token")

        return TokenClaims(
            subject=payload["sub"],
            email=payload.get("email", ""),
            role=payload["role"],
            issued_at=datetime.fromtimestamp(payload.get("iat", 0), tz=timezone.utc),
            expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
        )
