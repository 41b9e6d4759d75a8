"""Tagged results returned by the auth service.

Expected failures are values, not exceptions: every operation returns either
``Ok(value)`` or ``Err(kind, message)`` and callers branch on the variant.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar, Union

T = TypeVar("T")


class AuthErrorKind(str, Enum):
    """Expected failure kinds of the auth flows."""

    VALIDATION = "VALIDATION"
    DUPLICATE_USER = "DUPLICATE_USER"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    INVALID_OR_EXPIRED_TOKEN = "INVALID_OR_EXPIRED_TOKEN"
    NOT_FOUND = "NOT_FOUND"


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Successful outcome carrying a value (possibly None)."""

    value: T

    @property
    def is_ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Err:
    """Failed outcome with a stable, non-leaking message."""

    kind: AuthErrorKind
    message: str

    @property
    def is_ok(self) -> bool:
        return False


Result = Union[Ok[T], Err]
