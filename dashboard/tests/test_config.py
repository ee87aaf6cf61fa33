"""
Unit tests for dashboard configuration (DashboardSettings).

Tests verify:
- Config loads from environment variables with correct defaults.
- Config validation rejects missing required variables.
- SOLAR_BASE_URL is validated as HTTPS.
- Numeric constraints are enforced (timeout, port).
- LOG_LEVEL is normalised to upper case and must be a known level.

CHANGELOG:
- 2026-10-15: Cover LOG_LEVEL validation (STORY-009)
- 2026-10-12: Initial creation (STORY-001)

TODO:
- None
"""

import pytest
from pydantic import ValidationError

from dashboard.src.config import DashboardSettings


class TestDashboardSettingsLoadsFromEnv:
    """Config loads all values from environment variables."""

    def test_loads_all_env_vars(self, env_vars_full: dict[str, str]) -> None:
        """All env vars are read and assigned correctly."""
        settings = DashboardSettings()

        assert settings.solar_app_key == env_vars_full["SOLAR_APP_KEY"]
        assert settings.solar_secret_key == env_vars_full["SOLAR_SECRET_KEY"]
        assert settings.solar_user_account == env_vars_full["SOLAR_USER_ACCOUNT"]
        assert settings.solar_user_password == env_vars_full["SOLAR_USER_PASSWORD"]
        # Trailing slash is stripped so paths can be appended.
        assert settings.solar_base_url == "https://gateway.example.com"
        assert settings.solar_sys_code == "208"
        assert settings.solar_token_sys_code == "902"
        assert settings.solar_lang == "_zh_CN"
        assert settings.request_timeout_s == 12.5
        assert settings.host == "127.0.0.1"
        assert settings.port == 8080
        assert settings.log_level == "DEBUG"

    def test_defaults_applied_when_optional_vars_missing(
        self, env_vars_required_only: dict[str, str]
    ) -> None:
        """Optional variables use default values when not set."""
        settings = DashboardSettings()

        assert settings.solar_base_url == "https://gateway.isolarcloud.com.hk"
        assert settings.solar_sys_code == "207"
        assert settings.solar_token_sys_code == "901"
        assert settings.solar_lang == "_en_US"
        assert settings.request_timeout_s == 30.0
        assert settings.host == "0.0.0.0"
        assert settings.port == 3000
        assert settings.log_level == "INFO"


class TestDashboardSettingsRequiredVars:
    """Config validation rejects missing required variables."""

    @pytest.mark.parametrize(
        "missing",
        ["SOLAR_APP_KEY", "SOLAR_SECRET_KEY", "SOLAR_USER_ACCOUNT", "SOLAR_USER_PASSWORD"],
    )
    def test_missing_required_var_raises(
        self,
        monkeypatch: pytest.MonkeyPatch,
        env_vars_required_only: dict[str, str],
        missing: str,
    ) -> None:
        monkeypatch.delenv(missing)

        with pytest.raises(ValidationError) as exc_info:
            DashboardSettings()
        assert missing.lower() in str(exc_info.value).lower()


class TestDashboardSettingsValidation:
    """Field validators reject unsafe or out-of-range values."""

    def test_http_base_url_rejected(
        self, monkeypatch: pytest.MonkeyPatch, env_vars_required_only: dict[str, str]
    ) -> None:
        monkeypatch.setenv("SOLAR_BASE_URL", "http://gateway.isolarcloud.com.hk")

        with pytest.raises(ValidationError, match="HTTPS"):
            DashboardSettings()

    @pytest.mark.parametrize("value", ["0", "-1"])
    def test_non_positive_timeout_rejected(
        self,
        monkeypatch: pytest.MonkeyPatch,
        env_vars_required_only: dict[str, str],
        value: str,
    ) -> None:
        monkeypatch.setenv("REQUEST_TIMEOUT_S", value)

        with pytest.raises(ValidationError, match="REQUEST_TIMEOUT_S"):
            DashboardSettings()

    @pytest.mark.parametrize("value", ["0", "70000"])
    def test_invalid_port_rejected(
        self,
        monkeypatch: pytest.MonkeyPatch,
        env_vars_required_only: dict[str, str],
        value: str,
    ) -> None:
        monkeypatch.setenv("PORT", value)

        with pytest.raises(ValidationError, match="PORT"):
            DashboardSettings()

    def test_unknown_log_level_rejected(
        self, monkeypatch: pytest.MonkeyPatch, env_vars_required_only: dict[str, str]
    ) -> None:
        monkeypatch.setenv("LOG_LEVEL", "chatty")

        with pytest.raises(ValidationError, match="LOG_LEVEL"):
            DashboardSettings()
