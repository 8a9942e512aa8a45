"""Configuration settings for the ticket hold service."""

from datetime import timedelta
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings with Pydantic validation."""

    # Environment settings
    environment: str = Field(
        default="development",
        description="Application environment"
    )

    # Logging settings
    log_level: str = Field(
        default="INFO",
        description="Application log level"
    )

    # Hold settings
    hold_duration_seconds: float = Field(
        default=20.0,
        gt=0,
        description="How long a seat hold lives before it expires, in seconds"
    )

    hold_id_ceiling: int = Field(
        default=10000,
        ge=1,
        description="Hold ids wrap back to 0 once they reach this value"
    )

    confirmation_code_length: int = Field(
        default=8,
        ge=4,
        le=32,
        description="Length of generated reservation confirmation codes"
    )

    # Default event settings
    default_event_name: str = Field(
        default="Ultimate-Code-Warrior-LIVE-@-Showbox",
        min_length=1,
        description="Event name used when none is supplied"
    )

    default_event_rows: int = Field(
        default=20,
        ge=1,
        description="Seat rows used when none are supplied"
    )

    default_event_columns: int = Field(
        default=15,
        ge=1,
        description="Seat columns used when none are supplied"
    )

    # Tracing settings
    otlp_endpoint: Optional[str] = Field(
        default=None,
        description="OTLP collector endpoint for span export"
    )

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment value."""
        valid_environments = ["development", "staging", "production"]
        if v.lower() not in valid_environments:
            raise ValueError(f"Environment must be one of: {valid_environments}")
        return v.lower()

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level value."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of: {valid_levels}")
        return v.upper()

    @property
    def hold_duration(self) -> timedelta:
        """Hold lifetime as a timedelta."""
        return timedelta(seconds=self.hold_duration_seconds)

    @property
    def debug(self) -> bool:
        """Return True if in development mode."""
        return self.environment == "development"

    model_config = {
        "env_prefix": "TICKET_SERVICE_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
    }


# Global settings instance
settings = Settings()
