"""
Application Configuration - Pydantic Settings for type-safe config.

NO DICTIONARIES - All configuration is strongly typed.
FAIL FAST - Critical config is validated at startup.
"""

import json
import logging
import sys

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(Exception):
    """Raised when critical configuration is missing or invalid."""

    pass


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Service identity
    service_name: str = "play-billing-resolver"
    service_version: str = "0.1.0"

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"  # json or console

    # Observability - Metrics
    metrics_enabled: bool = True

    # Observability - Tracing
    tracing_enabled: bool = False
    otlp_endpoint: str = "http://otel-collector:4317"
    otlp_insecure: bool = True
    trace_sample_rate: float = 1.0  # 1.0 = 100% sampling

    # Google Play Developer API
    # Service account: path to the JSON key file, or the raw JSON itself
    google_play_service_account: str = ""
    android_package_name: str = ""  # e.g., "com.example.app"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    @model_validator(mode="after")
    def validate_critical_config(self) -> "Settings":
        """
        FAIL FAST: Validate critical configuration at startup.

        Collects every problem before raising so operators see them all at once.
        """
        errors: list[str] = []

        if not isinstance(logging.getLevelName(self.log_level.upper()), int):
            errors.append(f"LOG_LEVEL must be a logging level name, got: {self.log_level}")

        if self.log_format not in ("json", "console"):
            errors.append(f"LOG_FORMAT must be 'json' or 'console', got: {self.log_format}")

        if not 0.0 <= self.trace_sample_rate <= 1.0:
            errors.append(
                f"TRACE_SAMPLE_RATE must be between 0.0 and 1.0, got: {self.trace_sample_rate}"
            )

        if self.google_play_service_account:
            if not self.android_package_name:
                errors.append(
                    "ANDROID_PACKAGE_NAME is required when GOOGLE_PLAY_SERVICE_ACCOUNT is set"
                )
            if self.google_play_service_account.lstrip().startswith("{"):
                try:
                    json.loads(self.google_play_service_account)
                except json.JSONDecodeError as exc:
                    errors.append(f"GOOGLE_PLAY_SERVICE_ACCOUNT is not valid JSON: {exc.msg}")

        if errors:
            error_msg = "\n".join(
                [
                    "",
                    "=" * 60,
                    "CRITICAL CONFIGURATION ERROR - RESOLVER CANNOT START",
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
    def service_account_credentials(self) -> str | dict[str, str] | None:
        """
        Service account in the form the Google client loader expects.

        Raw JSON is parsed into an info dict; anything else is treated as a file path.
        """
        value = self.google_play_service_account.strip()
        if not value:
            return None
        if value.startswith("{"):
            info: dict[str, str] = json.loads(value)
            return info
        return value


# Global settings instance - validates at import time
settings = Settings()


def get_settings() -> Settings:
    """Get application settings instance."""
    return settings
