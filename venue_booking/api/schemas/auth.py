# venue_booking/api/schemas/auth.py

import re

from pydantic import EmailStr, Field, field_validator

from venue_booking.api.schemas.common import CamelModel, OrmModel, UtcDatetime

PASSWORD_PATTERN = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)(?=.*[@$!%*?&])[A-Za-z\d@$!%*?&]+$")
PHONE_PATTERN = r"^\+?[0-9\s\-()]{7,20}$"


def check_password_strength(value: str) -> str:
    if not PASSWORD_PATTERN.match(value):
        raise ValueError(
            "Password must contain at least one uppercase letter, one lowercase letter, "
            "one number, and one special character (@$!%*?&)"
        )
    return value


class RegisterRequest(CamelModel):
    name: str = Field(min_length=2, max_length=100)
    email: EmailStr
    password: str = Field(min_length=8, max_length=255)
    phone: str | None = Field(default=None, pattern=PHONE_PATTERN)

    @field_validator("email")
    @classmethod
    def lower_email(cls, value: str) -> str:
        return value.lower()

    @field_validator("password")
    @classmethod
    def strong_password(cls, value: str) -> str:
        return check_password_strength(value)


class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(min_length=1)


class OrganizerProfileUpdate(CamelModel):
    name: str | None = Field(default=None, min_length=2, max_length=100)
    phone: str | None = Field(default=None, pattern=PHONE_PATTERN)


class PasswordChangeRequest(CamelModel):
    current_password: str = Field(min_length=1)
    new_password: str = Field(min_length=8, max_length=255)

    @field_validator("new_password")
    @classmethod
    def strong_password(cls, value: str) -> str:
        return check_password_strength(value)


class UserResponse(OrmModel):
    id: str
    name: str
    email: str
    phone: str | None = None
    created_at: UtcDatetime


class OrganizerResponse(UserResponse):
    role: str


class UserAuthResponse(CamelModel):
    token: str
    user: UserResponse


class OrganizerAuthResponse(CamelModel):
    token: str
    organizer: OrganizerResponse
