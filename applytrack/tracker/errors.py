"""Error taxonomy shared by the server, the stores and the client."""

from __future__ import annotations

from typing import Any


class TrackerError(Exception):
    """Base class for every ApplyTrack domain error."""

    status_code = 500
    default_message = "Unexpected error"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.message}


class ValidationError(TrackerError):
    """Malformed or out-of-range input, rejected before any mutation."""

    status_code = 400
    default_message = "Validation failed"

    def __init__(
        self,
        message: str | None = None,
        details: list[dict[str, str]] | None = None,
    ):
        super().__init__(message)
        self.details = details or []

    @classmethod
    def from_pydantic(cls, exc: Any) -> ValidationError:
        """Build from a pydantic/FastAPI validation error's ``errors()`` list."""
        details = []
        for error in exc.errors():
            loc = [str(part) for part in error.get("loc", ()) if part != "body"]
            details.append(
                {"field": ".".join(loc) or "body", "message": error.get("msg", "invalid")}
            )
        return cls(details=details)

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.message, "details": self.details}


class NotFoundError(TrackerError):
    """Record is absent or owned by someone else (never distinguished)."""

    status_code = 404
    default_message = "Application not found"


class UnauthenticatedError(TrackerError):
    """Missing, invalid, expired or revoked credentials."""

    status_code = 401
    default_message = "Authentication required"


class ConflictError(TrackerError):
    """Duplicate account email on registration."""

    status_code = 409
    default_message = "User already exists"


class RateLimitedError(TrackerError):
    status_code = 429
    default_message = "Too many requests, please try again later."


class UnexpectedError(TrackerError):
    """Storage or network failure not otherwise classified."""


ERRORS_BY_STATUS: dict[int, type[TrackerError]] = {
    400: ValidationError,
    401: UnauthenticatedError,
    404: NotFoundError,
    409: ConflictError,
    429: RateLimitedError,
}
