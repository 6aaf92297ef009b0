"""Boundary validation for application payloads.

Both stores and the HTTP API accept input only through these models, so
malformed data is rejected before anything is written.
"""

from __future__ import annotations

import re
from datetime import datetime, timedelta
from typing import Annotated, Any

from pydantic import (
    AnyHttpUrl,
    BaseModel,
    ConfigDict,
    Field,
    StringConstraints,
    TypeAdapter,
    field_validator,
)
from pydantic import ValidationError as PydanticValidationError
from pydantic.functional_validators import AfterValidator

from applytrack.tracker.errors import ValidationError
from applytrack.tracker.models import ApplicationStatus, Priority, parse_datetime, utc_now

DisplayText = Annotated[
    str, StringConstraints(strip_whitespace=True, min_length=1, max_length=200)
]
ReminderDays = Annotated[int, Field(strict=True, ge=1, le=365)]

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

# Clients stamp acknowledgments with their own clock.
MAX_CLOCK_SKEW = timedelta(minutes=5)

# Fields carried over when guest records are copied into an account.
MIGRATED_FIELDS = (
    "company_name",
    "position_title",
    "job_description",
    "job_url",
    "location_city",
    "notes",
    "status",
    "priority",
)

_http_url = TypeAdapter(AnyHttpUrl)


def _check_url(value: str | None) -> str | None:
    if value is None or value == "":
        return None
    try:
        _http_url.validate_python(value)
    except PydanticValidationError as exc:
        raise ValueError("value is not a valid http(s) URL") from exc
    return value


def _check_email(value: str | None) -> str | None:
    if value is None or value == "":
        return None
    if not EMAIL_PATTERN.match(value):
        raise ValueError("value is not a valid email address")
    return value


def _as_utc(value: datetime) -> datetime:
    return parse_datetime(value)


JobUrl = Annotated[str, StringConstraints(max_length=2000), AfterValidator(_check_url)]
ContactEmail = Annotated[
    str, StringConstraints(max_length=254), AfterValidator(_check_email)
]
Timestamp = Annotated[datetime, AfterValidator(_as_utc)]


class ApplicationCreate(BaseModel):
    """Payload for creating an application. Unknown fields are rejected."""

    model_config = ConfigDict(extra="forbid")

    company_name: DisplayText
    position_title: DisplayText
    job_description: str | None = Field(default=None, max_length=10_000)
    job_url: JobUrl | None = None
    location_city: str | None = Field(default=None, max_length=100)
    notes: str | None = Field(default=None, max_length=5000)
    status: ApplicationStatus | None = None
    priority: Priority | None = None
    application_date: Timestamp | None = None
    salary: str | None = Field(default=None, max_length=100)
    contact_name: str | None = Field(default=None, max_length=100)
    contact_email: ContactEmail | None = None
    contact_phone: str | None = Field(default=None, max_length=20)
    reminder_enabled: bool | None = Field(default=None, strict=True)
    reminder_days: ReminderDays | None = None


class ApplicationUpdate(BaseModel):
    """Partial update. Every field is optional; unknown fields are rejected."""

    model_config = ConfigDict(extra="forbid")

    company_name: DisplayText | None = None
    position_title: DisplayText | None = None
    job_description: str | None = Field(default=None, max_length=10_000)
    job_url: JobUrl | None = None
    location_city: str | None = Field(default=None, max_length=100)
    notes: str | None = Field(default=None, max_length=5000)
    status: ApplicationStatus | None = None
    priority: Priority | None = None
    application_date: Timestamp | None = None
    salary: str | None = Field(default=None, max_length=100)
    contact_name: str | None = Field(default=None, max_length=100)
    contact_email: ContactEmail | None = None
    contact_phone: str | None = Field(default=None, max_length=20)
    reminder_enabled: bool | None = Field(default=None, strict=True)
    reminder_days: ReminderDays | None = None
    last_reminder_ack: Timestamp | None = None

    @field_validator(
        "company_name",
        "position_title",
        "status",
        "priority",
        "application_date",
        "reminder_enabled",
        "reminder_days",
        "last_reminder_ack",
    )
    @classmethod
    def reject_null(cls, value: Any) -> Any:
        # Only runs for explicitly supplied values; defaults are not validated.
        if value is None:
            raise ValueError("may be omitted but not null")
        return value

    @field_validator("last_reminder_ack")
    @classmethod
    def reject_future_ack(cls, value: datetime) -> datetime:
        if value > utc_now() + MAX_CLOCK_SKEW:
            raise ValueError("acknowledgment cannot be in the future")
        return value

    def changes(self) -> dict[str, Any]:
        """Return only the fields the caller supplied."""
        return self.model_dump(exclude_unset=True)


def validate_create(payload: dict[str, Any] | ApplicationCreate) -> ApplicationCreate:
    """Validate a creation payload, raising the domain ValidationError."""
    if isinstance(payload, ApplicationCreate):
        return payload
    try:
        return ApplicationCreate.model_validate(payload)
    except PydanticValidationError as exc:
        raise ValidationError.from_pydantic(exc) from exc


def validate_update(payload: dict[str, Any] | ApplicationUpdate) -> ApplicationUpdate:
    """Validate a partial update payload, raising the domain ValidationError."""
    if isinstance(payload, ApplicationUpdate):
        return payload
    try:
        return ApplicationUpdate.model_validate(payload)
    except PydanticValidationError as exc:
        raise ValidationError.from_pydantic(exc) from exc
