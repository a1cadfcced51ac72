"""
Client configuration with environment-driven settings.

Values load from OS environment and `.env` with the `PREMIUM_` prefix.
"""

from functools import lru_cache
import os

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class PremiumSettings(BaseSettings):
    """Premium API client settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="PREMIUM_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Credentials (only read by process wiring such as the smoke script)
    api_key: str = Field(default="")
    campaign_code: str = Field(default="")

    # Endpoint
    base_url: str = Field(
        default="https://premium.sales.lv",
        description="Scheme and host of the Premium service",
    )
    api_version: str = Field(default="1.0")
    json_format: bool = Field(
        default=False,
        description="Append ':json' to the API version path segment",
    )

    # Transport
    verify_tls: bool = Field(
        default=True,
        description="Verify server TLS certificates",
    )
    connect_timeout_seconds: float = Field(default=60.0, gt=0, le=600)
    timeout_seconds: float = Field(default=120.0, gt=0, le=3600)
    max_redirects: int = Field(default=5, ge=0, le=20)
    allow_url_open: bool = Field(
        default=True,
        description="Permit the urllib stream-open backend tier",
    )

    # Identification
    user_agent: str = Field(default="SalesLV/Premium-API")
    remote_addr: str = Field(
        default="",
        description="Fallback for the IP field of created messages",
    )

    log_level: str = "INFO"

    @field_validator("base_url", mode="before")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/") if isinstance(v, str) else v

    @property
    def version_segment(self) -> str:
        segment = f"API:{self.api_version}"
        if self.json_format:
            segment += ":json"
        return segment

    def endpoint_prefix(self, api_key: str, campaign_code: str) -> str:
        """Base URL every remote call path is appended to."""
        return f"{self.base_url}/{self.version_segment}/Key:{api_key}/Code:{campaign_code}/"


@lru_cache(maxsize=1)
def _get_settings_cached() -> PremiumSettings:
    return PremiumSettings()


def get_settings() -> PremiumSettings:
    # Under pytest env vars change between tests (monkeypatch); never freeze them.
    if os.environ.get("PYTEST_CURRENT_TEST"):
        return PremiumSettings()
    return _get_settings_cached()
