"""
Dashboard backend configuration loaded from environment variables.

Uses Pydantic BaseSettings for automatic env var loading and validation.
Upstream credentials live only on the server and are injected into every
iSolarCloud request; clients of the dashboard API never send them.

CHANGELOG:
- 2026-10-15: Add LOG_LEVEL (STORY-009)
- 2026-10-12: Initial creation (STORY-001)

TODO:
- None
"""

import logging

from pydantic import field_validator
from pydantic_settings import BaseSettings


class DashboardSettings(BaseSettings):
    """Configuration for the iSolarCloud dashboard backend.

    All values are loaded from environment variables. Required variables
    must be set; optional variables have sensible defaults.

    Attributes:
        solar_app_key: OpenAPI application key sent as ``appkey``.
        solar_secret_key: OpenAPI secret sent as the ``x-access-key`` header.
        solar_user_account: iSolarCloud account used for login.
        solar_user_password: iSolarCloud password used for login.
        solar_base_url: Upstream gateway base URL (must be HTTPS).
        solar_sys_code: ``sys_code`` for login and request bodies.
        solar_token_sys_code: ``sys_code`` header for token-authenticated calls.
        solar_lang: Upstream response language.
        request_timeout_s: Upstream HTTP timeout in seconds.
        host: Bind address for the HTTP server.
        port: Bind port for the HTTP server.
        log_level: Root log level name.
    """

    solar_app_key: str
    solar_secret_key: str
    solar_user_account: str
    solar_user_password: str
    solar_base_url: str = "https://gateway.isolarcloud.com.hk"
    solar_sys_code: str = "207"
    solar_token_sys_code: str = "901"
    solar_lang: str = "_en_US"
    request_timeout_s: float = 30.0
    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "INFO"

    @field_validator("solar_base_url")
    @classmethod
    def solar_base_url_must_be_https(cls, v: str) -> str:
        """Validate that the upstream gateway is reached over HTTPS.

        Credentials travel in every request, so plain HTTP is rejected at
        startup. A trailing slash is stripped so paths can be appended.
        """
        if not v.lower().startswith("https://"):
            raise ValueError(f"SOLAR_BASE_URL must use HTTPS (got: '{v[:30]}...').")
        return v.rstrip("/")

    @field_validator("request_timeout_s")
    @classmethod
    def request_timeout_must_be_positive(cls, v: float) -> float:
        """Validate that the upstream timeout is positive."""
        if v <= 0:
            raise ValueError("REQUEST_TIMEOUT_S must be > 0")
        return v

    @field_validator("port")
    @classmethod
    def port_must_be_valid(cls, v: int) -> int:
        """Validate the bind port is in valid range."""
        if v < 1 or v > 65535:
            raise ValueError("PORT must be between 1 and 65535")
        return v

    @field_validator("log_level")
    @classmethod
    def log_level_must_be_known(cls, v: str) -> str:
        """Validate the log level is a standard logging level name."""
        level = v.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"LOG_LEVEL must be a logging level name (got: '{v}')")
        return level

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}
