"""Authentication flows: register, login, forgot password, reset password.

Each flow is a short linear sequence over the user store, the password
hasher and the token services. Expected failures come back as ``Err``
values; store outages and other faults propagate as exceptions.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from src.domain.result import AuthErrorKind, Err, Ok, Result
from src.domain.schemas.user import NewUser, UserRecord
from src.domain.services.passwords import hash_password, verify_password
from src.domain.services.tokens import ResetTokenService, SessionTokenService
from src.storage.users import (
    DuplicateUserError,
    PasswordVersionConflictError,
    UserNotFoundError,
    UserStore,
)

logger = logging.getLogger(__name__)

DUPLICATE_USER_MESSAGE = "User with this email or username already exists"
INVALID_CREDENTIALS_MESSAGE = "Invalid credentials"
INVALID_RESET_TOKEN_MESSAGE = "Invalid or expired reset token"
INVALID_SESSION_MESSAGE = "Invalid or expired session"
REGISTER_FIELDS_REQUIRED_MESSAGE = "Username, email and password are required"
LOGIN_FIELDS_REQUIRED_MESSAGE = "Email and password are required"
EMAIL_REQUIRED_MESSAGE = "Email is required"
RESET_FIELDS_REQUIRED_MESSAGE = "Token and new password are required"

ResetNotifier = Callable[[str, str], Awaitable[Any]]


@dataclass(frozen=True)
class AuthSession:
    """A user together with a freshly issued session token."""

    user: UserRecord
    token: str


class AuthService:
    """Orchestrates the auth flows over one user store."""

    # Verified against when the email is unknown, so a login attempt costs
    # the same bcrypt work whether or not the account exists.
    _DUMMY_PASSWORD_HASH = hash_password("dummy_password_for_timing_attack_prevention")

    def __init__(
        self,
        store: UserStore,
        session_tokens: SessionTokenService,
        reset_tokens: ResetTokenService,
        notifier: ResetNotifier | None = None,
    ) -> None:
        self.store = store
        self.session_tokens = session_tokens
        self.reset_tokens = reset_tokens
        self.notifier = notifier

    async def register(
        self,
        username: str | None,
        email: str | None,
        password: str | None,
        first_name: str | None = None,
        last_name: str | None = None,
    ) -> Result[AuthSession]:
        """Create an account and sign the new user in."""
        if not username or not email or not password:
            return Err(AuthErrorKind.VALIDATION, REGISTER_FIELDS_REQUIRED_MESSAGE)

        if await self.store.find_by_email_or_username(email, username):
            return Err(AuthErrorKind.DUPLICATE_USER, DUPLICATE_USER_MESSAGE)

        hashed = await asyncio.to_thread(hash_password, password)
        try:
            user = await self.store.create(
                NewUser(
                    username=username,
                    email=email,
                    hashed_password=hashed,
                    first_name=first_name,
                    last_name=last_name,
                )
            )
        except DuplicateUserError:
            return Err(AuthErrorKind.DUPLICATE_USER, DUPLICATE_USER_MESSAGE)

        logger.info("Registered user %s (%s backend)", user.id, self.store.backend)
        return Ok(AuthSession(user=user, token=self.session_tokens.issue(user.id)))

    async def login(self, email: str | None, password: str | None) -> Result[AuthSession]:
        """Verify credentials and issue a session token.

        Unknown email and wrong password produce the same error.
        """
        if not email or not password:
            return Err(AuthErrorKind.VALIDATION, LOGIN_FIELDS_REQUIRED_MESSAGE)

        user = await self.store.find_by_email(email)

        if user:
            password_valid = await asyncio.to_thread(verify_password, password, user.hashed_password)
        else:
            await asyncio.to_thread(verify_password, password, self._DUMMY_PASSWORD_HASH)
            password_valid = False

        if not user or not password_valid:
            return Err(AuthErrorKind.INVALID_CREDENTIALS, INVALID_CREDENTIALS_MESSAGE)

        return Ok(AuthSession(user=user, token=self.session_tokens.issue(user.id)))

    async def forgot_password(self, email: str | None) -> Result[None]:
        """Issue a reset token if the account exists.

        The outcome is identical for known and unknown emails.
        """
        if not email:
            return Err(AuthErrorKind.VALIDATION, EMAIL_REQUIRED_MESSAGE)

        user = await self.store.find_by_email(email)
        if user:
            reset_token = self.reset_tokens.issue(user.id, user.email, user.password_version)
            if self.notifier is not None:
                delivered = await self.notifier(user.email, reset_token)
                if delivered is False:
                    logger.warning("Password reset link for user %s was not delivered", user.id)

        return Ok(None)

    async def reset_password(self, token: str | None, new_password: str | None) -> Result[None]:
        """Replace the password of the user a valid reset token names.

        A token stops working once the password has changed, because the
        password version it carries no longer matches the stored one. The
        store applies the new hash only while that version is still current,
        so two resets racing with one token cannot both succeed.
        """
        if not token or not new_password:
            return Err(AuthErrorKind.VALIDATION, RESET_FIELDS_REQUIRED_MESSAGE)

        claims = self.reset_tokens.verify(token)
        if claims is None:
            return Err(AuthErrorKind.INVALID_OR_EXPIRED_TOKEN, INVALID_RESET_TOKEN_MESSAGE)

        user = await self.store.find_by_id(claims.subject_id)
        if (
            user is None
            or user.email != claims.email
            or user.password_version != claims.password_version
        ):
            return Err(AuthErrorKind.INVALID_OR_EXPIRED_TOKEN, INVALID_RESET_TOKEN_MESSAGE)

        hashed = await asyncio.to_thread(hash_password, new_password)
        try:
            await self.store.update_password_hash(
                user.id, hashed, expected_version=claims.password_version
            )
        except (UserNotFoundError, PasswordVersionConflictError):
            return Err(AuthErrorKind.INVALID_OR_EXPIRED_TOKEN, INVALID_RESET_TOKEN_MESSAGE)

        logger.info("Password reset for user %s", user.id)
        return Ok(None)

    async def current_user(self, token: str | None) -> Result[UserRecord]:
        """Resolve a session token to its user."""
        subject_id = self.session_tokens.verify(token) if token else None
        if subject_id is None:
            return Err(AuthErrorKind.INVALID_OR_EXPIRED_TOKEN, INVALID_SESSION_MESSAGE)

        user = await self.store.find_by_id(subject_id)
        if user is None:
            return Err(AuthErrorKind.NOT_FOUND, INVALID_SESSION_MESSAGE)
        return Ok(user)
