"""Data models for tracked job applications."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any


class ApplicationStatus(str, Enum):
    """Status of a job application, in typical pipeline order."""

    APPLIED = "APPLIED"
    SCREENING = "SCREENING"
    PHONE_INTERVIEW = "PHONE_INTERVIEW"
    TECHNICAL_INTERVIEW = "TECHNICAL_INTERVIEW"
    ONSITE_INTERVIEW = "ONSITE_INTERVIEW"
    OFFER_RECEIVED = "OFFER_RECEIVED"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"
    WITHDRAWN = "WITHDRAWN"


class Priority(str, Enum):
    """How much the applicant cares about an application."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


# Statuses that never produce follow-up reminders. Transitions out of them
# are still allowed.
TERMINAL_REMINDER_STATUSES = frozenset(
    {ApplicationStatus.REJECTED, ApplicationStatus.WITHDRAWN}
)

# Owner id stamped on records held in the local (guest) store.
GUEST_OWNER_ID = "guest"

DEFAULT_STATUS = ApplicationStatus.APPLIED
DEFAULT_PRIORITY = Priority.MEDIUM
DEFAULT_REMINDER_ENABLED = True
DEFAULT_REMINDER_DAYS = 7


def utc_now() -> datetime:
    return datetime.now(UTC)


def parse_datetime(value: str | datetime | None) -> datetime | None:
    """Parse an ISO-8601 timestamp; naive values are taken as UTC."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def format_datetime(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


@dataclass
class Application:
    """A single tracked job application.

    Attributes:
        id: Opaque identifier assigned by the owning store.
        owner_id: Owning account id, or GUEST_OWNER_ID for local records.
        company_name: Company applied to.
        position_title: Role applied for.
        status: Current pipeline status.
        priority: Applicant-assigned priority.
        application_date: When the application was sent.
        reminder_enabled: Whether follow-up reminders are produced.
        reminder_days: Reminder cadence in days.
        last_reminder_ack: When the last reminder was acknowledged.
        created_at: Set by the store on creation.
        updated_at: Refreshed by the store on every update.
    """

    id: str
    owner_id: str
    company_name: str
    position_title: str
    status: ApplicationStatus
    priority: Priority
    application_date: datetime
    reminder_enabled: bool
    reminder_days: int
    last_reminder_ack: datetime
    created_at: datetime
    updated_at: datetime
    job_description: str | None = None
    job_url: str | None = None
    location_city: str | None = None
    notes: str | None = None
    salary: str | None = None
    contact_name: str | None = None
    contact_email: str | None = None
    contact_phone: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize the record to a JSON-compatible dictionary."""
        return {
            "id": self.id,
            "owner_id": self.owner_id,
            "company_name": self.company_name,
            "position_title": self.position_title,
            "job_description": self.job_description,
            "job_url": self.job_url,
            "location_city": self.location_city,
            "notes": self.notes,
            "salary": self.salary,
            "contact_name": self.contact_name,
            "contact_email": self.contact_email,
            "contact_phone": self.contact_phone,
            "status": self.status.value,
            "priority": self.priority.value,
            "application_date": format_datetime(self.application_date),
            "reminder_enabled": self.reminder_enabled,
            "reminder_days": self.reminder_days,
            "last_reminder_ack": format_datetime(self.last_reminder_ack),
            "created_at": format_datetime(self.created_at),
            "updated_at": format_datetime(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Application:
        """Deserialize a record produced by ``to_dict``.

        Raises:
            KeyError: If a required key is missing.
            ValueError: If an enum or timestamp value is malformed.
        """
        return cls(
            id=data["id"],
            owner_id=data["owner_id"],
            company_name=data["company_name"],
            position_title=data["position_title"],
            status=ApplicationStatus(data["status"]),
            priority=Priority(data["priority"]),
            application_date=parse_datetime(data["application_date"]),
            reminder_enabled=bool(data["reminder_enabled"]),
            reminder_days=int(data["reminder_days"]),
            last_reminder_ack=parse_datetime(data["last_reminder_ack"]),
            created_at=parse_datetime(data["created_at"]),
            updated_at=parse_datetime(data["updated_at"]),
            job_description=data.get("job_description"),
            job_url=data.get("job_url"),
            location_city=data.get("location_city"),
            notes=data.get("notes"),
            salary=data.get("salary"),
            contact_name=data.get("contact_name"),
            contact_email=data.get("contact_email"),
            contact_phone=data.get("contact_phone"),
        )


@dataclass(frozen=True)
class DueReminder:
    """The reduced view of an application shown on a reminder surface."""

    id: str
    company_name: str
    position_title: str
    status: ApplicationStatus
    reminder_days: int
    last_reminder_ack: datetime
    updated_at: datetime

    @classmethod
    def from_application(cls, record: Application) -> DueReminder:
        return cls(
            id=record.id,
            company_name=record.company_name,
            position_title=record.position_title,
            status=record.status,
            reminder_days=record.reminder_days,
            last_reminder_ack=record.last_reminder_ack,
            updated_at=record.updated_at,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "company_name": self.company_name,
            "position_title": self.position_title,
            "status": self.status.value,
            "reminder_days": self.reminder_days,
            "last_reminder_ack": format_datetime(self.last_reminder_ack),
            "updated_at": format_datetime(self.updated_at),
        }


@dataclass(frozen=True)
class StatusCount:
    status: ApplicationStatus
    count: int


@dataclass(frozen=True)
class RecentActivity:
    id: str
    company_name: str
    position_title: str
    status: ApplicationStatus
    updated_at: datetime


@dataclass
class ApplicationStats:
    """Aggregate view of one owner's applications."""

    total_applications: int
    by_status: list[StatusCount] = field(default_factory=list)
    recent_activity: list[RecentActivity] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_applications": self.total_applications,
            "by_status": [
                {"status": item.status.value, "count": item.count}
                for item in self.by_status
            ],
            "recent_activity": [
                {
                    "id": item.id,
                    "company_name": item.company_name,
                    "position_title": item.position_title,
                    "status": item.status.value,
                    "updated_at": format_datetime(item.updated_at),
                }
                for item in self.recent_activity
            ],
        }
