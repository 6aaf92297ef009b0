"""Tests for tracker data models."""

from datetime import UTC, datetime, timedelta, timezone


def _record(**overrides):
    from applytrack.tracker.models import Application, ApplicationStatus, Priority

    now = datetime(2026, 1, 1, tzinfo=UTC)
    fields = {
        "id": "app-1",
        "owner_id": "user-1",
        "company_name": "Acme Corp",
        "position_title": "Engineer",
        "status": ApplicationStatus.APPLIED,
        "priority": Priority.MEDIUM,
        "application_date": now,
        "reminder_enabled": True,
        "reminder_days": 7,
        "last_reminder_ack": now,
        "created_at": now,
        "updated_at": now,
    }
    fields.update(overrides)
    return Application(**fields)


class TestApplicationStatus:
    """Test ApplicationStatus enum."""

    def test_statuses_are_in_pipeline_order(self):
        """Iteration order should follow the application pipeline."""
        from applytrack.tracker.models import ApplicationStatus

        assert [status.value for status in ApplicationStatus] == [
            "APPLIED",
            "SCREENING",
            "PHONE_INTERVIEW",
            "TECHNICAL_INTERVIEW",
            "ONSITE_INTERVIEW",
            "OFFER_RECEIVED",
            "ACCEPTED",
            "REJECTED",
            "WITHDRAWN",
        ]

    def test_terminal_reminder_statuses(self):
        """Only REJECTED and WITHDRAWN suppress reminders."""
        from applytrack.tracker.models import TERMINAL_REMINDER_STATUSES, ApplicationStatus

        assert TERMINAL_REMINDER_STATUSES == {
            ApplicationStatus.REJECTED,
            ApplicationStatus.WITHDRAWN,
        }


class TestParseDatetime:
    """Test timestamp parsing."""

    def test_naive_values_are_taken_as_utc(self):
        from applytrack.tracker.models import parse_datetime

        parsed = parse_datetime("2026-03-01T10:00:00")
        assert parsed == datetime(2026, 3, 1, 10, 0, tzinfo=UTC)

    def test_accepts_z_suffix(self):
        from applytrack.tracker.models import parse_datetime

        parsed = parse_datetime("2026-03-01T10:00:00Z")
        assert parsed.utcoffset() == timedelta(0)

    def test_keeps_explicit_offsets(self):
        from applytrack.tracker.models import parse_datetime

        parsed = parse_datetime("2026-03-01T10:00:00+02:00")
        assert parsed.tzinfo == timezone(timedelta(hours=2))

    def test_empty_values_are_none(self):
        from applytrack.tracker.models import parse_datetime

        assert parse_datetime(None) is None
        assert parse_datetime("") is None


class TestApplication:
    """Test Application serialization."""

    def test_to_dict_uses_enum_values_and_iso_timestamps(self):
        record = _record(job_url="https://acme.example.com/jobs/1")

        data = record.to_dict()

        assert data["status"] == "APPLIED"
        assert data["priority"] == "MEDIUM"
        assert data["created_at"] == "2026-01-01T00:00:00+00:00"
        assert data["job_url"] == "https://acme.example.com/jobs/1"
        assert data["salary"] is None

    def test_from_dict_restores_record(self):
        from applytrack.tracker.models import Application

        record = _record(notes="Follow up with recruiter", contact_email="hr@acme.example.com")

        assert Application.from_dict(record.to_dict()) == record

    def test_from_dict_rejects_unknown_status(self):
        import pytest

        from applytrack.tracker.models import Application

        data = _record().to_dict()
        data["status"] = "GHOSTED"

        with pytest.raises(ValueError):
            Application.from_dict(data)


class TestApplicationStats:
    """Test the reminder and stats views."""

    def test_due_reminder_projection(self):
        from applytrack.tracker.models import DueReminder

        reminder = DueReminder.from_application(_record())

        assert reminder.to_dict() == {
            "id": "app-1",
            "company_name": "Acme Corp",
            "position_title": "Engineer",
            "status": "APPLIED",
            "reminder_days": 7,
            "last_reminder_ack": "2026-01-01T00:00:00+00:00",
            "updated_at": "2026-01-01T00:00:00+00:00",
        }
