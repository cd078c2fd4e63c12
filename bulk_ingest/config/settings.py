"""Typed runtime settings with dotenv support and startup validation."""

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from bulk_ingest.domain import MAX_SOURCE_SIZE, IntervalOptions


class SettingsLoadError(RuntimeError):
    """Raised when runtime settings cannot be loaded or validated."""


class BulkIngestSettings(BaseSettings):
    """Settings for the ingestion API connection and job monitoring.

    Environment variable names map directly to field names in uppercase.
    Example: `instance_url` reads from `INSTANCE_URL`.

    Attributes:
        instance_url: Base URL of the org instance.
        access_token: OAuth bearer token for the session.
        api_version: Default REST API version.
        request_timeout_seconds: Per-request HTTP timeout.
        poll_initial_seconds: Delay before the first job status poll.
        poll_increment_seconds: Amount the poll delay grows by after each poll.
        poll_maximum_seconds: Poll delay cap. A first delay above the cap is still used once.
        poll_timeout_seconds: Wall-clock monitoring budget.
        max_data_source_bytes: Largest payload file accepted for upload.
        log_level: Root level for the `bulk_ingest` logger.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    instance_url: str = Field(min_length=1)
    access_token: str = Field(min_length=1)
    api_version: str = Field(default="47.0", min_length=1)
    request_timeout_seconds: float = Field(default=30.0, gt=0)
    poll_initial_seconds: float = Field(default=5.0, ge=0)
    poll_increment_seconds: float = Field(default=5.0, ge=0)
    poll_maximum_seconds: float = Field(default=30.0, ge=0)
    poll_timeout_seconds: float = Field(default=600.0, ge=0)
    max_data_source_bytes: int = Field(default=MAX_SOURCE_SIZE, gt=0)
    log_level: str = Field(default="INFO")

    @field_validator("instance_url", "access_token", "api_version")
    @classmethod
    def _validate_non_empty_string(cls, value: str) -> str:
        stripped_value = value.strip()
        if not stripped_value:
            raise ValueError("value must not be blank")
        return stripped_value

    @field_validator("instance_url")
    @classmethod
    def _validate_instance_url_scheme(cls, value: str) -> str:
        if not value.startswith(("http://", "https://")):
            raise ValueError("instance_url must start with http:// or https://")
        return value.rstrip("/")

    @field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, value: str) -> str:
        normalized_value = value.strip().upper()
        if normalized_value not in {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}:
            raise ValueError("log_level must be one of CRITICAL, ERROR, WARNING, INFO, DEBUG")
        return normalized_value

    def settings_interval_options(self) -> IntervalOptions:
        """Build monitoring interval options from the poll settings.

        Returns:
            IntervalOptions: Polling options in seconds.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        return IntervalOptions(
            initial=self.poll_initial_seconds,
            increment_by=self.poll_increment_seconds,
            maximum=self.poll_maximum_seconds,
            timeout=self.poll_timeout_seconds,
        )


def config_load_settings() -> BulkIngestSettings:
    """Load and validate runtime settings from environment and dotenv.

    Returns:
        BulkIngestSettings: Validated runtime settings object.

    Raises:
        SettingsLoadError: Raised when required settings are missing or invalid.
    """

    try:
        return BulkIngestSettings()
    except ValidationError as error:
        raise SettingsLoadError(
            f"Startup configuration validation failed. Update .env or environment variables. Details: {error}"
        ) from error
