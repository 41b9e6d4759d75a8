"""Signed, time-limited bearer tokens (JWT).

Two services share one signing mechanism but issue tokens of different
``type``: session tokens authenticate requests, reset tokens authorize a
single password change. Each service rejects the other's tokens.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

from jose import JWTError, jwt

ALGORITHM = "HS256"
SESSION_TOKEN_TTL = timedelta(days=7)
RESET_TOKEN_TTL = timedelta(hours=1)

SESSION_TOKEN_TYPE = "access"
RESET_TOKEN_TYPE = "password_reset"


@dataclass(frozen=True)
class ResetClaims:
    """Verified contents of a password reset token."""

    subject_id: str
    email: str
    password_version: int


class _SignedTokenService:
    """Shared encode/decode for one token type."""

    token_type: str

    def __init__(self, secret_key: str, algorithm: str = ALGORITHM, ttl: timedelta | None = None):
        if not secret_key:
            raise ValueError("secret_key must not be empty")
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.ttl = ttl

    def _encode(self, claims: dict[str, Any]) -> str:
        issued_at = datetime.now(timezone.utc)
        to_encode = {
            **claims,
            "type": self.token_type,
            "iat": issued_at,
            "exp": issued_at + self.ttl,
        }
        return jwt.encode(to_encode, self.secret_key, algorithm=self.algorithm)

    def _decode(self, token: str) -> dict[str, Any] | None:
        """Return the payload, or None if tampered, malformed, expired or of another type."""
        if not token or not isinstance(token, str):
            return None
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except JWTError:
            return None
        if payload.get("type") != self.token_type or not payload.get("sub"):
            return None
        return payload


class SessionTokenService(_SignedTokenService):
    """Issues and verifies session (access) tokens."""

    token_type = SESSION_TOKEN_TYPE

    def __init__(self, secret_key: str, algorithm: str = ALGORITHM, ttl: timedelta = SESSION_TOKEN_TTL):
        super().__init__(secret_key, algorithm, ttl)

    def issue(self, subject_id: Any) -> str:
        """Create a session token for a user id."""
        return self._encode({"sub": str(subject_id)})

    def verify(self, token: str) -> str | None:
        """Verify a session token.

        Returns:
            The subject (user id) as a string, or None if the token is invalid
        """
        payload = self._decode(token)
        if payload is None:
            return None
        return str(payload["sub"])


class ResetTokenService(_SignedTokenService):
    """Issues and verifies password reset tokens.

    The user's ``password_version`` is embedded so that a token stops
    verifying against the user record once the password has changed.
    """

    token_type = RESET_TOKEN_TYPE

    def __init__(self, secret_key: str, algorithm: str = ALGORITHM, ttl: timedelta = RESET_TOKEN_TTL):
        super().__init__(secret_key, algorithm, ttl)

    def issue(self, subject_id: Any, email: str, password_version: int = 0) -> str:
        """Create a reset token bound to a user id, email and password version."""
        return self._encode(
            {
                "sub": str(subject_id),
                "email": email,
                "pwv": password_version,
            }
        )

    def verify(self, token: str) -> ResetClaims | None:
        """Verify a reset token.

        Returns:
            ResetClaims, or None if the token is invalid or expired
        """
        payload = self._decode(token)
        if payload is None:
            return None
        email = payload.get("email")
        version = payload.get("pwv")
        if not isinstance(email, str) or not isinstance(version, int):
            return None
        return ResetClaims(
            subject_id=str(payload["sub"]),
            email=email,
            password_version=version,
        )
