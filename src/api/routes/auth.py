"""Authentication endpoints."""

from typing import Any

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from src.api.dependencies import get_auth_service, require_auth
from src.domain.result import Err
from src.domain.schemas.auth import (
    ApiResponse,
    ForgotPasswordRequest,
    LoginData,
    LoginRequest,
    RegisterData,
    RegisterRequest,
    ResetPasswordRequest,
)
from src.domain.schemas.user import UserRead, UserRecord
from src.domain.services.auth import AuthService

router = APIRouter(prefix="/api/auth", tags=["auth"])

FORGOT_PASSWORD_MESSAGE = "If an account exists with this email, a password reset link has been sent."


def envelope(status_code: int, success: bool, data: Any, message: str) -> JSONResponse:
    """Wrap a payload in the ``{success, data, message}`` envelope."""
    body = ApiResponse(success=success, data=data, message=message)
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


def failure(error: Err) -> JSONResponse:
    """Every expected failure of the public auth routes is a 400."""
    return envelope(status.HTTP_400_BAD_REQUEST, False, None, error.message)


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(
    payload: RegisterRequest,
    auth: AuthService = Depends(get_auth_service),
) -> JSONResponse:
    """Create an account and return it with a session token.

    - Returns 400 if the email or username is already taken
    """
    result = await auth.register(
        username=payload.username,
        email=payload.email,
        password=payload.password,
        first_name=payload.first_name,
        last_name=payload.last_name,
    )
    if isinstance(result, Err):
        return failure(result)

    data = RegisterData.from_session(result.value).model_dump(mode="json", by_alias=True)
    return envelope(status.HTTP_201_CREATED, True, data, "User registered successfully")


@router.post("/login")
async def login(
    payload: LoginRequest,
    auth: AuthService = Depends(get_auth_service),
) -> JSONResponse:
    """Authenticate user and return profile plus session token.

    - Returns 400 "Invalid credentials" for unknown email and wrong password alike
    """
    result = await auth.login(payload.email, payload.password)
    if isinstance(result, Err):
        return failure(result)

    data = LoginData.from_session(result.value).model_dump(mode="json", by_alias=True)
    return envelope(status.HTTP_200_OK, True, data, "Login successful")


@router.post("/forgot-password")
async def forgot_password(
    payload: ForgotPasswordRequest,
    auth: AuthService = Depends(get_auth_service),
) -> JSONResponse:
    """Request a password reset link.

    Always returns the same 200 response to prevent email enumeration.
    """
    result = await auth.forgot_password(payload.email)
    if isinstance(result, Err):
        return failure(result)
    return envelope(status.HTTP_200_OK, True, None, FORGOT_PASSWORD_MESSAGE)


@router.post("/reset-password")
async def reset_password(
    payload: ResetPasswordRequest,
    auth: AuthService = Depends(get_auth_service),
) -> JSONResponse:
    """Reset password using the token from the reset link."""
    result = await auth.reset_password(payload.token, payload.new_password)
    if isinstance(result, Err):
        return failure(result)
    return envelope(status.HTTP_200_OK, True, None, "Password has been reset successfully")


@router.get("/me")
async def me(user: UserRecord = Depends(require_auth)) -> JSONResponse:
    """Return the profile of the user the session token belongs to."""
    data = UserRead.from_record(user).model_dump(mode="json", by_alias=True)
    return envelope(status.HTTP_200_OK, True, data, "Current user")
