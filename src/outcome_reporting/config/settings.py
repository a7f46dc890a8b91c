"""Runtime settings loaded from environment variables."""

from functools import lru_cache
from typing import Annotated
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

NonEmptyStr = Annotated[str, Field(min_length=1)]
PositiveInt = Annotated[int, Field(gt=0)]
PortInt = Annotated[int, Field(gt=0, le=65_535)]


class Settings(BaseSettings):
    """Environment-driven application settings."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    database_url: NonEmptyStr = Field(validation_alias="DATABASE_URL")
    report_timezone: NonEmptyStr = Field(default="UTC", validation_alias="REPORT_TIMEZONE")
    patient_fetch_concurrency: PositiveInt = Field(
        default=8,
        validation_alias="PATIENT_FETCH_CONCURRENCY",
    )
    activity_bulk_fetch: bool = Field(default=False, validation_alias="ACTIVITY_BULK_FETCH")
    reports_api_host: NonEmptyStr = Field(default="0.0.0.0", validation_alias="REPORTS_API_HOST")
    reports_api_port: PortInt = Field(default=8000, validation_alias="REPORTS_API_PORT")
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

    @field_validator("report_timezone")
    @classmethod
    def _validate_report_timezone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"unknown timezone: {value}") from exc
        return value

    @property
    def report_tzinfo(self) -> ZoneInfo:
        """Timezone used to decide which calendar month a timestamp belongs to."""

        return ZoneInfo(self.report_timezone)


@lru_cache(maxsize=1)
def load_settings() -> Settings:
    """Load and cache application settings."""

    return Settings()  # type: ignore[call-arg]
