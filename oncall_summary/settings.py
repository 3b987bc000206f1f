"""Runtime settings loaded from environment variables."""

from datetime import timedelta
from functools import lru_cache
from typing import Annotated, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

NonEmptyStr = Annotated[str, Field(min_length=1)]
NonNegativeFloat = Annotated[float, Field(ge=0.0)]
PositiveInt = Annotated[int, Field(gt=0)]


class Settings(BaseSettings):
    """Environment-driven settings for talking to PagerDuty."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    api_token: Optional[NonEmptyStr] = Field(default=None, validation_alias="PAGERDUTY_API_TOKEN")
    api_base_url: NonEmptyStr = Field(
        default="https://api.pagerduty.com",
        validation_alias="PAGERDUTY_API_BASE_URL",
    )
    page_size: PositiveInt = Field(default=100, validation_alias="PAGERDUTY_PAGE_SIZE")
    # PagerDuty rejects /oncalls queries spanning more than 90 days
    max_window_days: PositiveInt = Field(default=90, validation_alias="PAGERDUTY_MAX_WINDOW_DAYS")
    timeout_seconds: NonNegativeFloat = Field(
        default=30.0,
        validation_alias="PAGERDUTY_TIMEOUT_SECONDS",
    )
    log_level: str = Field(default="WARNING", validation_alias="LOG_LEVEL")

    @property
    def max_window(self) -> timedelta:
        return timedelta(days=self.max_window_days)


@lru_cache(maxsize=1)
def load_settings() -> Settings:
    """Load and cache settings."""

    return Settings()
