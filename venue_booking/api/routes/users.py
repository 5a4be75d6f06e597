# venue_booking/api/routes/users.py

from fastapi import APIRouter, Depends, status

from venue_booking.api.dependencies import get_auth_service
from venue_booking.api.responses import ok
from venue_booking.api.schemas.auth import (
    LoginRequest,
    RegisterRequest,
    UserAuthResponse,
    UserResponse,
)
from venue_booking.api.schemas.common import dump
from venue_booking.api.security import Principal, enforce_policy, get_principal
from venue_booking.application.auth_service import AuthResult, AuthService

router = APIRouter(prefix="/users", tags=["users"], dependencies=[Depends(enforce_policy)])


def _auth_payload(result: AuthResult) -> dict:
    return dump(
        UserAuthResponse(
            token=result.token,
            user=UserResponse.model_validate(result.account),
        )
    )


@router.post("/register", status_code=status.HTTP_201_CREATED)
def register_user(
    request: RegisterRequest,
    auth_service: AuthService = Depends(get_auth_service),
):
    result = auth_service.register_user(
        name=request.name,
        email=request.email,
        password=request.password,
        phone=request.phone,
    )
    return ok(_auth_payload(result), "User registered successfully")


@router.post("/login")
def login_user(
    request: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service),
):
    result = auth_service.login_user(request.email, request.password)
    return ok(_auth_payload(result), "Login successful")


@router.get("/me")
def get_me(
    principal: Principal = Depends(get_principal),
    auth_service: AuthService = Depends(get_auth_service),
):
    user = auth_service.get_user(principal.subject)
    return ok({"user": dump(UserResponse.model_validate(user))})
