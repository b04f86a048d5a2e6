"""Configuration loading for the parkmeter allocation engine.

This module provides centralized configuration management:
- Load settings from environment variables and .env files
- Validate configuration using pydantic
- Provide typed access to all settings
"""

from decimal import Decimal
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from parkmeter.core.models import get_slot_class


class Settings(BaseSettings):
    """Application configuration loaded from environment.

    Uses pydantic-settings for environment variable handling with
    .env file support via python-dotenv.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Lot layout
    slot_layout: str = Field(
        default="small,medium,large",
        description="Comma-separated slot class names in search order",
    )

    # Settlement configuration
    settlement_backend: Literal["credit_card", "paypal", "crypto"] = Field(
        default="credit_card",
        description="Settlement backend type",
    )
    settlement_limit: Decimal | None = Field(
        default=None,
        description="Credit limit or starting balance for the settlement backend",
    )

    # Billing configuration
    billing_unit_minutes: int = Field(
        default=60,
        description="Length of one billing unit in minutes",
    )
    bike_rate: Decimal = Field(
        default=Decimal("1.00"),
        description="Fee per billing unit for bikes",
    )
    car_rate: Decimal = Field(
        default=Decimal("2.00"),
        description="Fee per billing unit for cars",
    )
    truck_rate: Decimal = Field(
        default=Decimal("3.00"),
        description="Fee per billing unit for trucks",
    )
    default_rate: Decimal = Field(
        default=Decimal("2.00"),
        description="Fee per billing unit for categories without a rate",
    )

    # Logging configuration
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Log level",
    )
    log_format: Literal["json", "text"] = Field(
        default="text",
        description="Log format",
    )

    # Development
    debug: bool = Field(
        default=False,
        description="Enable debug mode with verbose command output",
    )

    @field_validator("slot_layout")
    @classmethod
    def validate_slot_layout(cls, v: str) -> str:
        """Ensure every slot class name in the layout is registered."""
        names = [name.strip() for name in v.split(",") if name.strip()]
        if not names:
            raise ValueError("slot_layout must name at least one slot class")
        for name in names:
            get_slot_class(name)
        return ",".join(names)

    @field_validator("billing_unit_minutes")
    @classmethod
    def validate_billing_unit(cls, v: int) -> int:
        """Ensure billing unit is positive."""
        if v <= 0:
            raise ValueError("billing_unit_minutes must be positive")
        return v

    @field_validator("bike_rate", "car_rate", "truck_rate", "default_rate")
    @classmethod
    def validate_rate(cls, v: Decimal) -> Decimal:
        """Ensure rates are non-negative."""
        if v < 0:
            raise ValueError("rates must be non-negative")
        return v

    @field_validator("settlement_limit")
    @classmethod
    def validate_settlement_limit(cls, v: Decimal | None) -> Decimal | None:
        """Ensure settlement limit is non-negative when set."""
        if v is not None and v < 0:
            raise ValueError("settlement_limit must be non-negative")
        return v

    def slot_class_names(self) -> list[str]:
        """Slot class names from the layout, in search order."""
        return self.slot_layout.split(",")


def load_settings(env_file: str | None = None) -> Settings:
    """Load application settings from environment.

    Args:
        env_file: Optional path to .env file. If not provided,
                 uses the default .env in the current directory.

    Returns:
        Validated Settings instance.

    Raises:
        ValidationError: If settings validation fails.
    """
    if env_file:
        return Settings(_env_file=env_file)  # type: ignore[call-arg]
    return Settings()


__all__ = ["Settings", "load_settings"]
