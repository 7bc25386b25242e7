"""Display helpers shared by the wizard and summaries."""

from datetime import datetime, tzinfo
from typing import Optional

from expense_bot.config import AppSettings


def group_digits(value: int, separator: str = ".") -> str:
    """
    Group digits in threes: 1234567 -> "1.234.567".

    The default separator matches the Indonesian locale the bot
    was written for.
    """
    sign = "-" if value < 0 else ""
    grouped = f"{abs(value):,}"
    if separator != ",":
        grouped = grouped.replace(",", separator)
    return sign + grouped


def format_amount(value: int, settings: AppSettings) -> str:
    """Format an amount with the configured currency symbol."""
    digits = group_digits(value, settings.thousands_separator)
    if settings.currency_symbol:
        return f"{settings.currency_symbol} {digits}"
    return digits


def format_short_datetime(value: Optional[datetime], tz: tzinfo) -> str:
    """Render as "DD/MM HH:mm" in the given timezone."""
    if value is None:
        return "--/-- --:--"
    return value.astimezone(tz).strftime("%d/%m %H:%M")


def format_short_date(value: datetime, tz: tzinfo) -> str:
    """Render as "DD/MM" in the given timezone."""
    return value.astimezone(tz).strftime("%d/%m")
