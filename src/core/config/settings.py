"""Application settings with Pydantic validation."""

from typing import Any, List, Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.constants import Intervals, Timeouts


class Settings(BaseSettings):
    """Application settings with validation and environment variable support."""

    # Environment
    env: str = Field(
        default="production", description="Environment (production, staging, development, testing)"
    )

    @model_validator(mode="before")
    @classmethod
    def default_env_for_pytest(cls, data: Any) -> Any:
        """Auto-detect testing environment when running under pytest."""
        import sys

        if not isinstance(data, dict):
            return data

        if ("env" not in data or not data.get("env")) and "pytest" in sys.modules:
            data["env"] = "testing"

        return data

    # Server
    host: str = Field(default="127.0.0.1", description="Bind address for uvicorn")
    port: int = Field(default=3000, ge=1, le=65535, description="HTTP/WebSocket port")

    # Logging
    log_level: str = Field(
        default="INFO", description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    log_json: bool = Field(default=False, description="Write JSON-lines log file")
    log_dir: str = Field(default="logs", description="Log directory; empty disables file logs")

    # Upstream mailbox provider
    provider_base_url: str = Field(
        default="https://www.1secmail.com/api/v1/",
        description="Base URL of the upstream mailbox provider",
    )
    provider_timeout: float = Field(
        default=Timeouts.PROVIDER_REQUEST,
        gt=0,
        le=Timeouts.PROVIDER_MAX,
        description="Timeout in seconds for one provider request",
    )
    verify_timeout: float = Field(
        default=Timeouts.PROVIDER_VERIFY,
        gt=0,
        le=Timeouts.PROVIDER_MAX,
        description="Timeout in seconds for the verify-email probe",
    )

    # Polling and housekeeping
    check_interval: float = Field(
        default=Intervals.CHECK_INBOX, gt=0, description="Seconds between ticks per address"
    )
    connection_idle_timeout: int = Field(
        default=Intervals.CONNECTION_IDLE,
        ge=1,
        description="Seconds of inactivity before a live connection is swept",
    )
    sweep_interval: int = Field(
        default=Intervals.IDLE_SWEEP, ge=1, description="Seconds between idle sweeps"
    )
    tracked_address_idle_timeout: Optional[int] = Field(
        default=None,
        ge=1,
        description="Stop tracking an address after this many seconds without new messages",
    )

    # Limits
    max_websocket_connections: int = Field(
        default=1000, ge=1, description="Maximum concurrent live connections"
    )
    max_create_count: int = Field(
        default=50, ge=1, description="Maximum addresses per create-email call"
    )
    max_batch_size: int = Field(
        default=50, ge=1, description="Maximum addresses per check-emails call"
    )

    # Rate Limiting
    rate_limit_enabled: bool = Field(default=True, description="Enable rate limiting")
    rate_limit: str = Field(default="60/minute", description="slowapi limit string")

    # CORS Configuration
    cors_allowed_origins: str = Field(
        default="*", description="Comma-separated list of allowed CORS origins"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore extra fields in .env
    )

    @field_validator("env")
    @classmethod
    def validate_env(cls, v: str) -> str:
        """Validate environment value."""
        allowed = ["production", "development", "testing", "staging"]
        if v.lower() not in allowed:
            raise ValueError(f'ENV must be one of: {", ".join(allowed)}')
        return v.lower()

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        allowed = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in allowed:
            raise ValueError(f'LOG_LEVEL must be one of: {", ".join(allowed)}')
        return v_upper

    @field_validator("provider_base_url")
    @classmethod
    def validate_provider_url(cls, v: str) -> str:
        """Require an absolute http(s) URL."""
        if not v.startswith(("http://", "https://")):
            raise ValueError("PROVIDER_BASE_URL must start with http:// or https://")
        return v

    @property
    def cors_origins(self) -> List[str]:
        """Parsed CORS origins."""
        return [o.strip() for o in self.cors_allowed_origins.split(",") if o.strip()]

    @property
    def is_development(self) -> bool:
        return self.env in ("development", "testing")


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get application settings singleton.

    Returns:
        Settings instance

    Raises:
        ValidationError: If settings are invalid
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Drop the cached settings (used by tests)."""
    global _settings
    _settings = None
