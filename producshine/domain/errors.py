"""Error taxonomy shared by repositories, use cases and the API layer."""
from __future__ import annotations


class ProducshineError(Exception):
    """Base class for all application errors."""


class ValidationError(ProducshineError, ValueError):
    """User supplied data failed validation."""


class NotFoundError(ProducshineError, LookupError):
    """A row the caller asked for explicitly does not exist."""


class AuthRequiredError(ProducshineError):
    """The operation needs a signed-in user."""

    def __init__(self, message: str = "Sign in required") -> None:
        super().__init__(message)


class PermissionDeniedError(ProducshineError):
    """The signed-in user does not own the row being changed."""


class BackendError(ProducshineError, RuntimeError):
    """A request to the hosted backend was rejected or failed."""


class UniqueViolationError(BackendError):
    """An insert collided with an existing unique key."""


class BackendTimeoutError(BackendError):
    """A backend query did not answer within its time budget."""


class MalformedRowError(BackendError):
    """A row returned by the backend is missing required columns."""

    def __init__(self, table: str, missing: str) -> None:
        super().__init__(f"Malformed row from '{table}': missing '{missing}'")
        self.table = table
        self.missing = missing
