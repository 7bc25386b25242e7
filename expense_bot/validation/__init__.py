"""Input parsing package."""

from expense_bot.validation.parsers import (
    AMOUNT_FORMAT_HINT,
    DATE_FORMAT_HINT,
    DETAIL_FLAG,
    NOW_TOKEN,
    RANGE_FORMAT_HINT,
    InputFormatError,
    current_month_range,
    end_of_day,
    parse_amount,
    parse_entry_date,
    parse_range_token,
    parse_summary_args,
    start_of_day,
)

__all__ = [
    "AMOUNT_FORMAT_HINT",
    "DATE_FORMAT_HINT",
    "DETAIL_FLAG",
    "NOW_TOKEN",
    "RANGE_FORMAT_HINT",
    "InputFormatError",
    "current_month_range",
    "end_of_day",
    "parse_amount",
    "parse_entry_date",
    "parse_range_token",
    "parse_summary_args",
    "start_of_day",
]
