"""
Configuration Management for Expense Bot

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
This makes it easy to see what external dependencies exist and
ensures all required configuration is validated at startup.
"""

from datetime import timezone, tzinfo
from functools import lru_cache
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class TelegramSettings(BaseSettings):
    """Telegram bot configuration."""

    model_config = SettingsConfigDict(
        env_prefix="TELEGRAM_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    bot_token: str = Field(
        ...,
        min_length=1,
        description="Bot token issued by BotFather"
    )


class NotionSettings(BaseSettings):
    """Notion database storage configuration."""

    model_config = SettingsConfigDict(
        env_prefix="NOTION_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    token: str = Field(
        ...,
        min_length=1,
        description="Notion integration token"
    )
    database_id: str = Field(
        ...,
        min_length=1,
        description="ID of the Notion database holding expenses"
    )
    api_version: str = Field(
        default="2022-06-28",
        description="Value sent in the Notion-Version header"
    )
    base_url: str = Field(
        default="https://api.notion.com/v1",
        description="Notion API base URL"
    )
    timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        le=300,
        description="Timeout for a single Notion API call"
    )
    page_size: int = Field(
        default=100,
        ge=1,
        le=100,
        description="Results requested per database query page"
    )

    # Property names within the database
    title_property: str = Field(default="Title")
    date_property: str = Field(default="Date")
    category_property: str = Field(default="Category")
    amount_property: str = Field(default="Amount")

    @field_validator('base_url')
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Root log level"
    )

    # Dates are parsed and displayed in this timezone, stored as UTC
    timezone: str = Field(
        default="UTC",
        description="IANA timezone name used for parsing and display"
    )

    # Amount display
    currency_symbol: str = Field(
        default="Rp",
        description="Prefix shown before amounts"
    )
    thousands_separator: str = Field(
        default=".",
        max_length=1,
        description="Digit group separator for amounts"
    )

    # Defaults for incomplete records read back from the store
    default_category: str = Field(
        default="Other",
        min_length=1,
        description="Category used when a stored record has none"
    )
    untitled_placeholder: str = Field(
        default="(untitled)",
        min_length=1,
        description="Title used when a stored record has none"
    )

    @field_validator('timezone')
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        """Fail at startup rather than on the first dated message."""
        if v.upper() != "UTC":
            try:
                ZoneInfo(v)
            except (ZoneInfoNotFoundError, ValueError) as e:
                raise ValueError(f"Unknown timezone: {v}") from e
        return v

    @property
    def tzinfo(self) -> tzinfo:
        """Get the configured timezone as a tzinfo."""
        if self.timezone.upper() == "UTC":
            return timezone.utc
        return ZoneInfo(self.timezone)


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Note: These are loaded lazily to allow partial configuration

    @property
    def telegram(self) -> TelegramSettings:
        return TelegramSettings()

    @property
    def notion(self) -> NotionSettings:
        return NotionSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}.
    Used by the startup check in the bot entry point.
    """
    results = {}

    settings = get_settings()

    try:
        _ = settings.telegram
        results["telegram"] = True
    except Exception as e:
        results["telegram"] = False
        results["telegram_error"] = str(e)

    try:
        _ = settings.notion
        results["notion"] = True
    except Exception as e:
        results["notion"] = False
        results["notion_error"] = str(e)

    try:
        _ = settings.app
        results["app"] = True
    except Exception as e:
        results["app"] = False
        results["app_error"] = str(e)

    return results
