"""Tests for boundary validation of application payloads."""

from datetime import UTC, datetime, timedelta

import pytest

from applytrack.tracker.errors import ValidationError
from applytrack.tracker.models import ApplicationStatus, Priority


def _fields(error: ValidationError) -> set[str]:
    return {detail["field"] for detail in error.details}


class TestApplicationCreate:
    """Test creation payload validation."""

    def test_minimal_payload_is_valid(self):
        from applytrack.tracker.schemas import validate_create

        data = validate_create({"company_name": "Acme", "position_title": "Engineer"})

        assert data.company_name == "Acme"
        assert data.status is None
        assert data.reminder_days is None

    def test_display_fields_are_trimmed(self):
        from applytrack.tracker.schemas import validate_create

        data = validate_create({"company_name": "  Acme  ", "position_title": "Dev "})

        assert data.company_name == "Acme"
        assert data.position_title == "Dev"

    def test_blank_company_is_rejected(self):
        from applytrack.tracker.schemas import validate_create

        with pytest.raises(ValidationError) as exc_info:
            validate_create({"company_name": "   ", "position_title": "Engineer"})

        assert "company_name" in _fields(exc_info.value)

    def test_missing_required_fields_are_reported(self):
        from applytrack.tracker.schemas import validate_create

        with pytest.raises(ValidationError) as exc_info:
            validate_create({})

        assert _fields(exc_info.value) == {"company_name", "position_title"}

    def test_overlong_company_is_rejected(self):
        from applytrack.tracker.schemas import validate_create

        with pytest.raises(ValidationError):
            validate_create({"company_name": "x" * 201, "position_title": "Engineer"})

    def test_unknown_fields_are_rejected(self):
        from applytrack.tracker.schemas import validate_create

        with pytest.raises(ValidationError) as exc_info:
            validate_create(
                {"company_name": "Acme", "position_title": "Engineer", "owner_id": "x"}
            )

        assert "owner_id" in _fields(exc_info.value)

    @pytest.mark.parametrize("url", ["not a url", "ftp://files.example.com/job"])
    def test_malformed_url_is_rejected(self, url):
        from applytrack.tracker.schemas import validate_create

        with pytest.raises(ValidationError) as exc_info:
            validate_create({"company_name": "Acme", "position_title": "Dev", "job_url": url})

        assert "job_url" in _fields(exc_info.value)

    def test_empty_url_means_no_url(self):
        from applytrack.tracker.schemas import validate_create

        data = validate_create({"company_name": "Acme", "position_title": "Dev", "job_url": ""})

        assert data.job_url is None

    @pytest.mark.parametrize("days", [0, 366, "7", 7.5])
    def test_reminder_days_must_be_an_int_in_range(self, days):
        from applytrack.tracker.schemas import validate_create

        with pytest.raises(ValidationError):
            validate_create(
                {"company_name": "Acme", "position_title": "Dev", "reminder_days": days}
            )

    def test_reminder_enabled_must_be_a_real_bool(self):
        from applytrack.tracker.schemas import validate_create

        with pytest.raises(ValidationError):
            validate_create(
                {"company_name": "Acme", "position_title": "Dev", "reminder_enabled": "yes"}
            )

    def test_unknown_status_is_rejected(self):
        from applytrack.tracker.schemas import validate_create

        with pytest.raises(ValidationError) as exc_info:
            validate_create({"company_name": "Acme", "position_title": "Dev", "status": "GHOSTED"})

        assert "status" in _fields(exc_info.value)

    def test_enum_values_are_parsed(self):
        from applytrack.tracker.schemas import validate_create

        data = validate_create(
            {
                "company_name": "Acme",
                "position_title": "Dev",
                "status": "SCREENING",
                "priority": "HIGH",
            }
        )

        assert data.status is ApplicationStatus.SCREENING
        assert data.priority is Priority.HIGH

    def test_contact_email_shape_is_checked(self):
        from applytrack.tracker.schemas import validate_create

        with pytest.raises(ValidationError):
            validate_create(
                {"company_name": "Acme", "position_title": "Dev", "contact_email": "nope"}
            )

    def test_naive_application_date_becomes_utc(self):
        from applytrack.tracker.schemas import validate_create

        data = validate_create(
            {
                "company_name": "Acme",
                "position_title": "Dev",
                "application_date": "2026-02-01T09:30:00",
            }
        )

        assert data.application_date == datetime(2026, 2, 1, 9, 30, tzinfo=UTC)


class TestApplicationUpdate:
    """Test partial update validation."""

    def test_changes_returns_only_supplied_fields(self):
        from applytrack.tracker.schemas import validate_update

        update = validate_update({"status": "REJECTED"})

        assert update.changes() == {"status": ApplicationStatus.REJECTED}

    def test_empty_update_is_valid(self):
        from applytrack.tracker.schemas import validate_update

        assert validate_update({}).changes() == {}

    @pytest.mark.parametrize("field", ["company_name", "status", "reminder_days", "reminder_enabled"])
    def test_explicit_null_is_rejected_for_required_fields(self, field):
        from applytrack.tracker.schemas import validate_update

        with pytest.raises(ValidationError) as exc_info:
            validate_update({field: None})

        assert field in _fields(exc_info.value)

    def test_optional_text_may_be_cleared(self):
        from applytrack.tracker.schemas import validate_update

        assert validate_update({"notes": None}).changes() == {"notes": None}

    def test_future_acknowledgment_is_rejected(self):
        from applytrack.tracker.schemas import validate_update

        future = datetime.now(UTC) + timedelta(hours=1)

        with pytest.raises(ValidationError) as exc_info:
            validate_update({"last_reminder_ack": future.isoformat()})

        assert "last_reminder_ack" in _fields(exc_info.value)

    def test_small_clock_skew_is_tolerated(self):
        from applytrack.tracker.schemas import validate_update

        skewed = datetime.now(UTC) + timedelta(minutes=1)

        update = validate_update({"last_reminder_ack": skewed.isoformat()})

        assert update.changes()["last_reminder_ack"] == skewed

    def test_model_instances_pass_through(self):
        from applytrack.tracker.schemas import ApplicationUpdate, validate_update

        update = ApplicationUpdate(notes="x")

        assert validate_update(update) is update
