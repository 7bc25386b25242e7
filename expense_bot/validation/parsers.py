"""
User Input Parsing

DESIGN DECISION: Every free-text value the bot accepts goes through a
strict parser here. Parsers never guess: anything outside the expected
shape raises InputFormatError, and the caller re-prompts with the
error's message.

All parsers take "now" explicitly. The year of a short date and the
default summary month both come from it, so callers decide the clock
and the timezone.
"""

import calendar
import re
from datetime import datetime

from expense_bot.models.expense import DateRange, SummaryRequest


NOW_TOKEN = "now"
DETAIL_FLAG = "--detail"

DATE_FORMAT_HINT = "Wrong format. Use DD/MM HH:mm (e.g. 25/12 19:30) or type now."
AMOUNT_FORMAT_HINT = "Invalid amount, enter it again (numbers only, e.g. 20000):"
RANGE_FORMAT_HINT = (
    "Wrong format. Use /summary DD/MM-DD/MM [--detail], "
    "e.g. /summary 01/05-10/05"
)

_ENTRY_DATE_PATTERN = re.compile(r"^(\d{2})/(\d{2}) (\d{2}):(\d{2})$", re.ASCII)
_RANGE_PATTERN = re.compile(r"^(\d{2})/(\d{2})-(\d{2})/(\d{2})$", re.ASCII)
_NON_DIGITS = re.compile(r"\D", re.ASCII)


class InputFormatError(ValueError):
    """User input did not match the expected format."""

    def __init__(self, message: str, hint: str):
        self.hint = hint
        super().__init__(message)


def parse_entry_date(text: str, now: datetime) -> datetime:
    """
    Parse the date answer of the entry wizard.

    Accepts "now" (any case) or a strict "DD/MM HH:mm" in now's
    timezone, with the year taken from now.

    Raises:
        InputFormatError: If the text is neither
    """
    cleaned = text.strip()
    if cleaned.lower() == NOW_TOKEN:
        return now

    match = _ENTRY_DATE_PATTERN.match(cleaned)
    if not match:
        raise InputFormatError(f"Not a DD/MM HH:mm date: {text!r}", DATE_FORMAT_HINT)

    day, month, hour, minute = (int(part) for part in match.groups())
    try:
        return datetime(now.year, month, day, hour, minute, tzinfo=now.tzinfo)
    except ValueError as e:
        raise InputFormatError(f"Impossible date {text!r}: {e}", DATE_FORMAT_HINT)


def parse_amount(text: str) -> int:
    """
    Parse an amount by dropping every non-digit character.

    "Rp 20.000" -> 20000. Signs and decimal points are dropped too,
    so amounts are always whole positive numbers.

    Raises:
        InputFormatError: If no digits remain or the value is zero
    """
    digits = _NON_DIGITS.sub("", text)
    if not digits:
        raise InputFormatError(f"No digits in amount: {text!r}", AMOUNT_FORMAT_HINT)
    value = int(digits)
    if value <= 0:
        raise InputFormatError(f"Amount must be positive: {text!r}", AMOUNT_FORMAT_HINT)
    return value


def start_of_day(moment: datetime) -> datetime:
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def end_of_day(moment: datetime) -> datetime:
    """Last millisecond of the day, 23:59:59.999."""
    return moment.replace(hour=23, minute=59, second=59, microsecond=999000)


def current_month_range(now: datetime) -> DateRange:
    """First through last instant of now's calendar month."""
    last_day = calendar.monthrange(now.year, now.month)[1]
    return DateRange(
        start=start_of_day(now.replace(day=1)),
        end=end_of_day(now.replace(day=last_day)),
    )


def parse_range_token(token: str, now: datetime) -> DateRange:
    """
    Parse a "DD/MM-DD/MM" summary range.

    Both days use now's year and timezone. The end day is inclusive
    through 23:59:59.999.

    Raises:
        InputFormatError: On a malformed token, an impossible date, or
            a start after the end
    """
    match = _RANGE_PATTERN.match(token.strip())
    if not match:
        raise InputFormatError(f"Not a DD/MM-DD/MM range: {token!r}", RANGE_FORMAT_HINT)

    start_day, start_month, end_day, end_month = (int(part) for part in match.groups())
    try:
        start = datetime(now.year, start_month, start_day, tzinfo=now.tzinfo)
        end = datetime(now.year, end_month, end_day, tzinfo=now.tzinfo)
    except ValueError as e:
        raise InputFormatError(f"Impossible date in range {token!r}: {e}", RANGE_FORMAT_HINT)

    if end < start:
        raise InputFormatError(
            f"Range starts after it ends: {token!r}",
            "The start date must not be after the end date. " + RANGE_FORMAT_HINT,
        )

    return DateRange(start=start_of_day(start), end=end_of_day(end))


def parse_summary_args(args: list[str], now: datetime) -> SummaryRequest:
    """
    Parse the arguments of /summary.

    At most one range token and the --detail flag, in any order.

    Raises:
        InputFormatError: On an unknown argument or a bad range
    """
    detail = False
    date_range = None

    for arg in args:
        if arg.lower() == DETAIL_FLAG:
            detail = True
        elif date_range is None:
            date_range = parse_range_token(arg, now)
        else:
            raise InputFormatError(f"More than one range given: {args!r}", RANGE_FORMAT_HINT)

    return SummaryRequest(
        date_range=date_range or current_month_range(now),
        detail=detail,
        explicit_range=date_range is not None,
    )
