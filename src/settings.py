from typing import Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class PricingSettings(BaseSettings):
    """Fare computation and payout configuration."""

    base_fare_min: int = Field(default=10, ge=0)
    base_fare_max: int = Field(default=50, ge=0)
    premium_discount_percentage: float = Field(
        default=20.0,
        ge=0.0,
        lt=100.0,
        description="Discount applied to the base fare for premium users",
    )
    vip_fare_multiplier: float = Field(
        default=1.5,
        ge=1.0,
        le=5.0,
        description="Multiplier applied to the fare when a VIP driver is assigned",
    )
    driver_cut: float = Field(
        default=0.8,
        gt=0.0,
        le=1.0,
        description="Fraction of the fare credited to the driver on completion",
    )
    fare_decimal_places: int = Field(default=2, ge=0, le=4)

    model_config = SettingsConfigDict(env_prefix="PRICING_")

    @model_validator(mode="after")
    def validate_fare_range(self) -> "PricingSettings":
        if self.base_fare_min > self.base_fare_max:
            raise ValueError(
                f"base_fare_min ({self.base_fare_min}) must not exceed "
                f"base_fare_max ({self.base_fare_max})"
            )
        return self


class AccountSettings(BaseSettings):
    premium_threshold: float = Field(
        default=100.0,
        gt=0.0,
        description="Lifetime spend at which a user is promoted to premium",
    )

    model_config = SettingsConfigDict(env_prefix="ACCOUNTS_")


class MatchingSettings(BaseSettings):
    """Dispatch latency configuration.

    The delay only changes when a match resolves, never which driver is picked.
    Set both bounds to 0 to match immediately.
    """

    delay_min_seconds: float = Field(default=1.0, ge=0.0, le=60.0)
    delay_max_seconds: float = Field(default=4.0, ge=0.0, le=60.0)

    model_config = SettingsConfigDict(env_prefix="MATCHING_")

    @model_validator(mode="after")
    def validate_delay_range(self) -> "MatchingSettings":
        if self.delay_min_seconds > self.delay_max_seconds:
            raise ValueError(
                f"delay_min_seconds ({self.delay_min_seconds}) must not exceed "
                f"delay_max_seconds ({self.delay_max_seconds})"
            )
        return self


class DirectorySettings(BaseSettings):
    drivers_url: str = "https://jsonplaceholder.typicode.com/users"
    users_url: str = "https://dummyjson.com/users"
    timeout: float = Field(default=5.0, gt=0.0, le=60.0)

    model_config = SettingsConfigDict(env_prefix="DIRECTORY_")

    @field_validator("drivers_url", "users_url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError("Directory URLs must start with http:// or https://")
        return v.rstrip("/")


class LoggingSettings(BaseSettings):
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    format: Literal["text", "json"] = "text"
    environment: str = "development"

    model_config = SettingsConfigDict(env_prefix="LOG_")


class Settings(BaseSettings):
    pricing: PricingSettings = Field(default_factory=PricingSettings)
    accounts: AccountSettings = Field(default_factory=AccountSettings)
    matching: MatchingSettings = Field(default_factory=MatchingSettings)
    directory: DirectorySettings = Field(default_factory=DirectorySettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    model_config = SettingsConfigDict(
        env_nested_delimiter="__",
        case_sensitive=False,
    )


def get_settings() -> Settings:
    """Load and validate settings from environment variables."""
    return Settings()
