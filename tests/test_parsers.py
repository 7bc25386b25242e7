"""Tests for user input parsing."""

import pytest
from datetime import datetime, timedelta, timezone

from expense_bot.validation import (
    AMOUNT_FORMAT_HINT,
    DATE_FORMAT_HINT,
    RANGE_FORMAT_HINT,
    InputFormatError,
    current_month_range,
    parse_amount,
    parse_entry_date,
    parse_range_token,
    parse_summary_args,
)

from conftest import FIXED_NOW


class TestParseEntryDate:

    @pytest.mark.parametrize("text", ["now", "NOW", "  Now  "])
    def test_now_token(self, text):
        assert parse_entry_date(text, FIXED_NOW) == FIXED_NOW

    def test_explicit_date_uses_current_year(self):
        parsed = parse_entry_date("25/12 19:30", FIXED_NOW)
        assert parsed == datetime(2024, 12, 25, 19, 30, tzinfo=timezone.utc)

    def test_explicit_date_keeps_clock_timezone(self):
        """Test that DD/MM HH:mm is read in the timezone of now."""
        jakarta = timezone(timedelta(hours=7))
        now = datetime(2024, 5, 15, 12, 0, tzinfo=jakarta)
        parsed = parse_entry_date("01/05 08:00", now)
        assert parsed.tzinfo is jakarta
        assert parsed.astimezone(timezone.utc) == datetime(2024, 5, 1, 1, 0, tzinfo=timezone.utc)

    @pytest.mark.parametrize("text", [
        "yesterday",
        "2024-05-01",
        "1/5 8:00",
        "25/12",
        "25/12 19:30 extra",
        "",
    ])
    def test_malformed_dates_rejected(self, text):
        with pytest.raises(InputFormatError) as exc_info:
            parse_entry_date(text, FIXED_NOW)
        assert exc_info.value.hint == DATE_FORMAT_HINT

    @pytest.mark.parametrize("text", ["31/02 10:00", "10/13 10:00", "10/05 24:00", "10/05 10:60"])
    def test_impossible_dates_rejected(self, text):
        with pytest.raises(InputFormatError):
            parse_entry_date(text, FIXED_NOW)

    def test_leap_day_follows_current_year(self):
        assert parse_entry_date("29/02 10:00", FIXED_NOW).day == 29
        with pytest.raises(InputFormatError):
            parse_entry_date("29/02 10:00", FIXED_NOW.replace(year=2023))


class TestParseAmount:

    @pytest.mark.parametrize("text,expected", [
        ("20000", 20000),
        ("Rp 20.000", 20000),
        ("20,000", 20000),
        (" 15 000 ", 15000),
        ("-500", 500),
    ])
    def test_non_digits_are_dropped(self, text, expected):
        assert parse_amount(text) == expected

    @pytest.mark.parametrize("text", ["abc", "", "0", "000", "Rp"])
    def test_invalid_amounts_rejected(self, text):
        with pytest.raises(InputFormatError) as exc_info:
            parse_amount(text)
        assert exc_info.value.hint == AMOUNT_FORMAT_HINT

    def test_non_ascii_digits_are_not_numbers(self):
        with pytest.raises(InputFormatError):
            parse_amount("٢٠")


class TestRanges:

    def test_current_month_range(self):
        date_range = current_month_range(FIXED_NOW)
        assert date_range.start == datetime(2024, 5, 1, tzinfo=timezone.utc)
        assert date_range.end == datetime(2024, 5, 31, 23, 59, 59, 999000, tzinfo=timezone.utc)

    def test_current_month_range_february_leap_year(self):
        date_range = current_month_range(datetime(2024, 2, 10, tzinfo=timezone.utc))
        assert date_range.end.day == 29

    def test_range_token(self):
        date_range = parse_range_token("01/05-10/05", FIXED_NOW)
        assert date_range.start == datetime(2024, 5, 1, tzinfo=timezone.utc)
        assert date_range.end == datetime(2024, 5, 10, 23, 59, 59, 999000, tzinfo=timezone.utc)

    def test_single_day_range(self):
        date_range = parse_range_token("03/05-03/05", FIXED_NOW)
        assert date_range.start.day == date_range.end.day == 3

    @pytest.mark.parametrize("token", ["1/5-10/5", "01/05", "01/05 - 10/05", "abc", "01-05/10-05"])
    def test_malformed_range_rejected(self, token):
        with pytest.raises(InputFormatError) as exc_info:
            parse_range_token(token, FIXED_NOW)
        assert exc_info.value.hint == RANGE_FORMAT_HINT

    def test_impossible_range_date_rejected(self):
        with pytest.raises(InputFormatError):
            parse_range_token("30/02-10/03", FIXED_NOW)

    def test_reversed_range_rejected(self):
        with pytest.raises(InputFormatError) as exc_info:
            parse_range_token("10/05-01/05", FIXED_NOW)
        assert RANGE_FORMAT_HINT in exc_info.value.hint


class TestParseSummaryArgs:

    def test_no_args_defaults_to_current_month(self):
        request = parse_summary_args([], FIXED_NOW)
        assert request.date_range == current_month_range(FIXED_NOW)
        assert request.detail is False
        assert request.explicit_range is False

    def test_detail_only(self):
        request = parse_summary_args(["--detail"], FIXED_NOW)
        assert request.detail is True
        assert request.explicit_range is False

    @pytest.mark.parametrize("args", [
        ["01/05-10/05", "--detail"],
        ["--detail", "01/05-10/05"],
        ["01/05-10/05", "--DETAIL"],
    ])
    def test_range_and_detail_in_any_order(self, args):
        request = parse_summary_args(args, FIXED_NOW)
        assert request.detail is True
        assert request.explicit_range is True
        assert request.date_range.start.day == 1
        assert request.date_range.end.day == 10

    def test_second_range_rejected(self):
        with pytest.raises(InputFormatError):
            parse_summary_args(["01/05-10/05", "11/05-20/05"], FIXED_NOW)

    def test_unknown_argument_rejected(self):
        with pytest.raises(InputFormatError) as exc_info:
            parse_summary_args(["may"], FIXED_NOW)
        assert exc_info.value.hint == RANGE_FORMAT_HINT


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
