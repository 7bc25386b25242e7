"""Configuration package."""

from expense_bot.config.settings import (
    AppSettings,
    NotionSettings,
    Settings,
    TelegramSettings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "NotionSettings",
    "Settings",
    "TelegramSettings",
    "get_settings",
    "validate_all_settings",
]
