# venue_booking/api/routes/organizer.py

from fastapi import APIRouter, Depends, status

from venue_booking.api.dependencies import get_auth_service
from venue_booking.api.responses import ok
from venue_booking.api.schemas.auth import (
    LoginRequest,
    OrganizerAuthResponse,
    OrganizerProfileUpdate,
    OrganizerResponse,
    PasswordChangeRequest,
    RegisterRequest,
)
from venue_booking.api.schemas.common import dump
from venue_booking.api.security import Principal, enforce_policy, get_principal
from venue_booking.application.auth_service import AuthResult, AuthService

router = APIRouter(prefix="/organizer", tags=["organizer"], dependencies=[Depends(enforce_policy)])


def _auth_payload(result: AuthResult) -> dict:
    return dump(
        OrganizerAuthResponse(
            token=result.token,
            organizer=OrganizerResponse.model_validate(result.account),
        )
    )


@router.post("/register", status_code=status.HTTP_201_CREATED)
def register_organizer(
    request: RegisterRequest,
    auth_service: AuthService = Depends(get_auth_service),
):
    result = auth_service.register_organizer(
        name=request.name,
        email=request.email,
        password=request.password,
        phone=request.phone,
    )
    return ok(_auth_payload(result), "Organizer registered successfully")


@router.post("/login")
def login_organizer(
    request: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service),
):
    result = auth_service.login_organizer(request.email, request.password)
    return ok(_auth_payload(result), "Login successful")


@router.get("/me")
def get_organizer_profile(
    principal: Principal = Depends(get_principal),
    auth_service: AuthService = Depends(get_auth_service),
):
    organizer = auth_service.get_organizer(principal.subject)
    return ok({"organizer": dump(OrganizerResponse.model_validate(organizer))})


@router.put("/profile")
def update_organizer_profile(
    request: OrganizerProfileUpdate,
    principal: Principal = Depends(get_principal),
    auth_service: AuthService = Depends(get_auth_service),
):
    organizer = auth_service.update_organizer_profile(
        principal.subject,
        name=request.name,
        phone=request.phone,
    )
    return ok({"organizer": dump(OrganizerResponse.model_validate(organizer))}, "Profile updated successfully")


@router.put("/password")
def change_organizer_password(
    request: PasswordChangeRequest,
    principal: Principal = Depends(get_principal),
    auth_service: AuthService = Depends(get_auth_service),
):
    auth_service.change_organizer_password(
        principal.subject,
        current_password=request.current_password,
        new_password=request.new_password,
    )
    return ok(message="Password changed successfully")
