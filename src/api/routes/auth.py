"""/api/auth routes"""

from fastapi import APIRouter, Depends, Query, status
from pydantic import EmailStr

from src.api.dependencies import current_user, get_auth_service, limit_api, limit_login
from src.api.models import (
    USERNAME_MAX_LENGTH,
    USERNAME_MIN_LENGTH,
    AuthResponse,
    EmailAvailabilityResponse,
    Envelope,
    LoginRequest,
    RefreshRequest,
    RegisterRequest,
    TokenResponse,
    UpdateProfileRequest,
    UsernameAvailabilityResponse,
    UserResponse,
)
from src.core.models import UserModel
from src.services.auth_service import AuthService

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post(
    "/register",
    status_code=status.HTTP_201_CREATED,
    response_model=Envelope[AuthResponse],
    dependencies=[Depends(limit_api)],
)
def register(
    request: RegisterRequest, auth: AuthService = Depends(get_auth_service)
) -> Envelope[AuthResponse]:
    return Envelope(message="User registered successfully", data=auth.register(request))


@router.post(
    "/login",
    response_model=Envelope[AuthResponse],
    dependencies=[Depends(limit_login)],
)
def login(
    request: LoginRequest, auth: AuthService = Depends(get_auth_service)
) -> Envelope[AuthResponse]:
    return Envelope(message="Login successful", data=auth.login(request))


@router.post("/refresh", response_model=Envelope[TokenResponse], dependencies=[Depends(limit_api)])
def refresh(
    request: RefreshRequest, auth: AuthService = Depends(get_auth_service)
) -> Envelope[TokenResponse]:
    return Envelope(message="Token refreshed", data=auth.refresh(request))


@router.get("/me", response_model=Envelope[UserResponse])
def get_me(
    user: UserModel = Depends(current_user), auth: AuthService = Depends(get_auth_service)
) -> Envelope[UserResponse]:
    return Envelope(data=auth.get_profile(user))


@router.put("/me", response_model=Envelope[UserResponse], dependencies=[Depends(limit_api)])
def update_me(
    request: UpdateProfileRequest,
    user: UserModel = Depends(current_user),
    auth: AuthService = Depends(get_auth_service),
) -> Envelope[UserResponse]:
    return Envelope(message="Profile updated", data=auth.update_profile(user, request))


@router.post("/logout", response_model=Envelope[None])
def logout(
    user: UserModel = Depends(current_user), auth: AuthService = Depends(get_auth_service)
) -> Envelope[None]:
    auth.logout(user)
    return Envelope(message="Logged out", data=None)


@router.delete("/account", response_model=Envelope[None], dependencies=[Depends(limit_api)])
def deactivate_account(
    user: UserModel = Depends(current_user), auth: AuthService = Depends(get_auth_service)
) -> Envelope[None]:
    auth.deactivate_account(user)
    return Envelope(message="Account deactivated", data=None)


@router.get(
    "/check-email",
    response_model=Envelope[EmailAvailabilityResponse],
    dependencies=[Depends(limit_api)],
)
def check_email(
    email: EmailStr = Query(), auth: AuthService = Depends(get_auth_service)
) -> Envelope[EmailAvailabilityResponse]:
    return Envelope(data=auth.check_email(email))


@router.get(
    "/check-username",
    response_model=Envelope[UsernameAvailabilityResponse],
    dependencies=[Depends(limit_api)],
)
def check_username(
    username: str = Query(min_length=USERNAME_MIN_LENGTH, max_length=USERNAME_MAX_LENGTH),
    auth: AuthService = Depends(get_auth_service),
) -> Envelope[UsernameAvailabilityResponse]:
    return Envelope(data=auth.check_username(username))
