"""Tests for Settings configuration class."""

from pathlib import Path

import pytest

ENV_VARS = [
    "DATABASE_PATH",
    "LOCAL_STORAGE_PATH",
    "API_BASE_URL",
    "REQUEST_TIMEOUT_SECONDS",
    "TOKEN_TTL_HOURS",
    "PASSWORD_HASH_ROUNDS",
    "HOST",
    "PORT",
    "RATE_LIMIT_WINDOW_SECONDS",
    "RATE_LIMIT_MAX_REQUESTS",
    "AUTH_RATE_LIMIT_MAX_REQUESTS",
    "MAX_BODY_BYTES",
    "CORS_ORIGINS",
    "LOG_LEVEL",
    "LOG_FORMAT",
]


@pytest.fixture
def clean_env(monkeypatch):
    """Clear every variable Settings reads."""
    for var in ENV_VARS:
        monkeypatch.delenv(var, raising=False)


class TestSettingsDefaults:
    """Test that Settings loads sensible defaults."""

    def test_settings_loads_with_defaults(self, clean_env):
        """Settings should load with default values when no env vars are set."""
        from applytrack.config.settings import Settings

        settings = Settings(_env_file=None)

        assert settings.database_path == Path("./data/applytrack.db")
        assert settings.local_storage_path == Path("./data/local_storage.json")
        assert settings.api_base_url == "http://127.0.0.1:3000/api/v1"
        assert settings.request_timeout_seconds == 10.0
        assert settings.token_ttl_hours == 168
        assert settings.port == 3000
        assert settings.rate_limit_window_seconds == 900
        assert settings.rate_limit_max_requests == 100
        assert settings.auth_rate_limit_max_requests == 5
        assert settings.max_body_bytes == 10 * 1024
        assert settings.cors_origins == []
        assert settings.log_level == "INFO"
        assert settings.log_format == "text"
        assert settings.password_hash_rounds == 12

    def test_get_settings_is_a_singleton(self, clean_env):
        from applytrack.config.settings import get_settings, reset_settings

        first = get_settings()
        assert get_settings() is first

        reset_settings()
        assert get_settings() is not first


class TestSettingsFromEnvironment:
    """Test that Settings reads from environment variables."""

    def test_settings_reads_paths_from_env(self, clean_env, monkeypatch):
        """Settings should read path configurations from environment."""
        monkeypatch.setenv("DATABASE_PATH", "/custom/server.db")
        monkeypatch.setenv("LOCAL_STORAGE_PATH", "/custom/storage.json")

        from applytrack.config.settings import Settings

        settings = Settings(_env_file=None)
        assert settings.database_path == Path("/custom/server.db")
        assert settings.local_storage_path == Path("/custom/storage.json")

    def test_api_base_url_loses_trailing_slash(self, clean_env, monkeypatch):
        monkeypatch.setenv("API_BASE_URL", "https://api.example.com/api/v1/")

        from applytrack.config.settings import Settings

        assert Settings(_env_file=None).api_base_url == "https://api.example.com/api/v1"

    def test_settings_parses_cors_origins_from_env(self, clean_env, monkeypatch):
        """Settings should parse comma-separated CORS_ORIGINS."""
        monkeypatch.setenv("CORS_ORIGINS", "http://localhost:5173, https://app.example.com")

        from applytrack.config.settings import Settings

        settings = Settings(_env_file=None)
        assert settings.cors_origins == ["http://localhost:5173", "https://app.example.com"]

    def test_settings_parses_cors_origins_from_json_env(self, clean_env, monkeypatch):
        """Settings should parse JSON-list CORS_ORIGINS."""
        monkeypatch.setenv("CORS_ORIGINS", '["http://localhost:5173"]')

        from applytrack.config.settings import Settings

        assert Settings(_env_file=None).cors_origins == ["http://localhost:5173"]

    def test_log_level_is_normalized(self, clean_env, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "debug")

        from applytrack.config.settings import Settings

        assert Settings(_env_file=None).log_level == "DEBUG"


class TestSettingsValidation:
    """Test that Settings validates values correctly."""

    def test_settings_validates_log_level(self, clean_env, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "LOUD")

        from applytrack.config.settings import Settings

        with pytest.raises(ValueError):
            Settings(_env_file=None)

    @pytest.mark.parametrize(
        "var", ["REQUEST_TIMEOUT_SECONDS", "RATE_LIMIT_MAX_REQUESTS", "MAX_BODY_BYTES"]
    )
    def test_settings_requires_positive_limits(self, clean_env, monkeypatch, var):
        monkeypatch.setenv(var, "0")

        from applytrack.config.settings import Settings

        with pytest.raises(ValueError):
            Settings(_env_file=None)

    def test_settings_validates_log_format(self, clean_env, monkeypatch):
        monkeypatch.setenv("LOG_FORMAT", "xml")

        from applytrack.config.settings import Settings

        with pytest.raises(ValueError):
            Settings(_env_file=None)

    def test_settings_bounds_bcrypt_cost(self, clean_env, monkeypatch):
        monkeypatch.setenv("PASSWORD_HASH_ROUNDS", "3")

        from applytrack.config.settings import Settings

        with pytest.raises(ValueError):
            Settings(_env_file=None)
