"""Shared FastAPI dependencies.

Central location for dependency injection functions.
"""

from fastapi import Depends, HTTPException, Request, status

from src.domain.result import Err
from src.domain.schemas.user import UserRecord
from src.domain.services.auth import AuthService
from src.storage import database
from src.storage.users import UserStore, select_user_store

__all__ = ["get_user_store", "get_auth_service", "get_bearer_token", "require_auth"]


def get_user_store(request: Request) -> UserStore:
    """Select the user store backend for this request.

    The choice follows the connectivity flag set at startup; every call
    inside the request then goes to the same backend.
    """
    state = request.app.state
    return select_user_store(
        use_database=state.use_database,
        session_factory=database.async_session,
        memory_store=state.memory_store,
    )


def get_auth_service(
    request: Request,
    store: UserStore = Depends(get_user_store),
) -> AuthService:
    state = request.app.state
    return AuthService(
        store=store,
        session_tokens=state.session_tokens,
        reset_tokens=state.reset_tokens,
        notifier=state.reset_notifier,
    )


def get_bearer_token(request: Request) -> str | None:
    """Extract the token from an ``Authorization: Bearer`` header."""
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        return None
    return auth_header.split(" ", 1)[1].strip() or None


async def require_auth(
    token: str | None = Depends(get_bearer_token),
    auth: AuthService = Depends(get_auth_service),
) -> UserRecord:
    """Require a valid session token.

    Returns the authenticated user.
    Raises 401 if the token is missing, invalid, expired, or names no user.
    """
    if token is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )

    result = await auth.current_user(token)
    if isinstance(result, Err):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=result.message,
            headers={"WWW-Authenticate": "Bearer"},
        )
    return result.value
