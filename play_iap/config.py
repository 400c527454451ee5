"""
Application Configuration - Pydantic Settings for type-safe config.

FAIL FAST - Invalid config is rejected at startup.
"""

import base64
import binascii
import sys

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ConfigurationError(Exception):
    """Raised when critical configuration is missing or invalid."""

    pass


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # API Configuration
    api_title: str = "Play IAP Receipt API"
    api_version: str = "0.1.0"
    api_description: str = "Google Play receipt validation and subscription management"
    service_name: str = "play-iap"

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"  # json or console

    # Observability - Metrics
    metrics_enabled: bool = True

    # Google Play Developer API
    google_api_base_url: str = (
        "https://androidpublisher.googleapis.com/androidpublisher/v3/applications"
    )
    google_token_uri: str = "https://oauth2.googleapis.com/token"
    http_timeout_seconds: float = 30.0

    # Default credentials for the HTTP API (raw JSON or base64 encoded JSON)
    GOOGLE_SERVICE_ACCOUNT_JSON: str = ""
    ANDROID_PACKAGE_NAME: str = ""  # e.g., "com.example.app"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    @model_validator(mode="after")
    def validate_critical_config(self) -> "Settings":
        """FAIL FAST: reject settings the service cannot run with."""
        errors: list[str] = []

        if self.http_timeout_seconds <= 0:
            errors.append(
                f"HTTP_TIMEOUT_SECONDS must be positive, got: {self.http_timeout_seconds}"
            )
        if self.log_format not in ("json", "console"):
            errors.append(f"LOG_FORMAT must be 'json' or 'console', got: {self.log_format}")
        if self.log_level.upper() not in _LOG_LEVELS:
            errors.append(f"LOG_LEVEL must be one of {', '.join(_LOG_LEVELS)}")
        if not self.google_api_base_url.startswith("https://"):
            errors.append("GOOGLE_API_BASE_URL must be an https:// URL")

        if errors:
            error_msg = "\n".join(
                [
                    "",
                    "=" * 60,
                    "CRITICAL CONFIGURATION ERROR - APPLICATION CANNOT START",
                    "=" * 60,
                    *[f"  ✗ {e}" for e in errors],
                    "=" * 60,
                    "",
                ]
            )
            print(error_msg, file=sys.stderr)
            raise ConfigurationError(error_msg)

        return self

    @property
    def service_account_json(self) -> str | None:
        """Configured service account JSON, decoding base64 if needed."""
        raw = self.GOOGLE_SERVICE_ACCOUNT_JSON.strip()
        if not raw:
            return None
        if raw.startswith("{"):
            return raw
        try:
            return base64.b64decode(raw, validate=True).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError):
            # Not base64; let the validator report the bad JSON
            return raw


# Global settings instance - validates at import time
settings = Settings()


def get_settings() -> Settings:
    """Get application settings instance."""
    return settings
