"""Pytest configuration and shared fixtures."""

from datetime import UTC, datetime, timedelta

import pytest


@pytest.fixture(autouse=True)
def _reset_singletons():
    """Give every test fresh settings and an unconfigured logger."""
    from applytrack.config.settings import reset_settings
    from applytrack.utils.logging import reset_logging

    reset_settings()
    reset_logging()
    yield
    reset_settings()
    reset_logging()


class FakeClock:
    """A settable clock for deterministic timestamps."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2026, 1, 1, 12, 0, tzinfo=UTC))


@pytest.fixture
def sample_payload() -> dict:
    """A valid application creation payload."""
    return {
        "company_name": "Acme Corp",
        "position_title": "Backend Engineer",
        "job_url": "https://acme.example.com/jobs/42",
        "location_city": "Berlin",
        "notes": "Referred by Dana",
    }


@pytest.fixture
def app_settings(tmp_path):
    """Server settings with cheap hashing and generous rate limits."""
    from applytrack.config.settings import Settings

    return Settings(
        _env_file=None,
        database_path=tmp_path / "server.db",
        local_storage_path=tmp_path / "local_storage.json",
        api_base_url="http://testserver/api/v1",
        password_hash_rounds=4,
        rate_limit_max_requests=10_000,
        auth_rate_limit_max_requests=10_000,
    )
