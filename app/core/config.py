"""
Configuration management for the Leave Ledger Backend
"""
from pydantic_settings import BaseSettings
from pydantic import Field, field_validator
from typing import Optional, List, Set
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    DATABASE_URL: str = Field(
        default="sqlite:///./leave_ledger.db",
        description="SQLAlchemy database URL (PostgreSQL in staging/prod)"
    )

    APP_ENV: str = Field(default="local", description="Application environment: local, staging, prod")
    LOG_LEVEL: str = Field(default="INFO", description="Logging level: DEBUG, INFO, WARNING, ERROR")

    # CORS settings
    ALLOWED_ORIGINS: str = Field(
        default="*",
        description="Comma-separated list of allowed CORS origins. Use '*' for local only."
    )

    # Working-time calendar
    CALENDAR_TZ: str = Field(default="UTC", description="Timezone the working-time calendar runs in (IANA name)")
    WORKDAY_START_HOUR: int = Field(default=9, description="Start of the billable working window (hour of day)")
    WORKDAY_END_HOUR: int = Field(default=17, description="End of the billable working window (hour of day)")
    WORKING_WEEKDAYS: str = Field(
        default="0,1,2,3,4",
        description="Comma-separated working weekdays, Monday=0 ... Sunday=6"
    )

    # Version (can be git SHA or semver)
    VERSION: Optional[str] = Field(default=None, description="Application version (git SHA or semver)")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True

    @field_validator("APP_ENV")
    @classmethod
    def validate_app_env(cls, v: str) -> str:
        """Validate APP_ENV"""
        allowed = ["local", "staging", "prod"]
        if v not in allowed:
            raise ValueError(f"APP_ENV must be one of {allowed}")
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate LOG_LEVEL"""
        allowed = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in allowed:
            raise ValueError(f"LOG_LEVEL must be one of {allowed}")
        return v.upper()

    @field_validator("CALENDAR_TZ")
    @classmethod
    def validate_calendar_tz(cls, v: str) -> str:
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"CALENDAR_TZ {v!r} is not a known IANA timezone")
        return v

    @field_validator("WORKDAY_START_HOUR", "WORKDAY_END_HOUR")
    @classmethod
    def validate_workday_hour(cls, v: int) -> int:
        if not 0 <= v <= 24:
            raise ValueError("Workday hours must be between 0 and 24")
        return v

    @field_validator("WORKING_WEEKDAYS")
    @classmethod
    def validate_working_weekdays(cls, v: str) -> str:
        for part in v.split(","):
            part = part.strip()
            if part and (not part.isdigit() or int(part) > 6):
                raise ValueError("WORKING_WEEKDAYS must list weekday numbers 0-6")
        return v

    def validate_production(self) -> None:
        """
        Validate settings for production environment

        Raises:
            ValueError: If production settings are invalid
        """
        if self.APP_ENV == "prod":
            # ALLOWED_ORIGINS must not be wildcard in production
            if self.ALLOWED_ORIGINS == "*" or not self.ALLOWED_ORIGINS:
                raise ValueError(
                    "ALLOWED_ORIGINS must be explicitly set (not '*') in production environment"
                )

            # Row locks on leave_balances need a real database
            if self.DATABASE_URL.startswith("sqlite"):
                raise ValueError(
                    "DATABASE_URL must not point at SQLite in production environment"
                )

        if self.WORKDAY_END_HOUR <= self.WORKDAY_START_HOUR:
            raise ValueError("WORKDAY_END_HOUR must be later than WORKDAY_START_HOUR")

    def get_allowed_origins_list(self) -> List[str]:
        """
        Get list of allowed CORS origins

        Returns:
            List of allowed origins (or ['*'] for local)
        """
        if self.ALLOWED_ORIGINS == "*":
            return ["*"]
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",") if origin.strip()]

    def get_working_weekdays(self) -> Set[int]:
        """Working weekdays as a set of ints (Monday=0)."""
        return {int(part) for part in self.WORKING_WEEKDAYS.split(",") if part.strip()}


# Create settings instance
settings = Settings()

# Validate production settings if in prod
if settings.APP_ENV == "prod":
    settings.validate_production()
