from datetime import date, datetime, timedelta, timezone

import pytest

from domain.errors import InvalidAmount
from domain.validation import (
    ensure_not_future,
    normalize_note,
    parse_amount,
    parse_entry_date,
    parse_report_period_end,
    parse_report_period_start,
    parse_ymd,
)


def test_parse_ymd_valid():
    assert parse_ymd("2025-02-01") == date(2025, 2, 1)


def test_parse_ymd_accepts_date_objects():
    assert parse_ymd(date(2025, 2, 1)) == date(2025, 2, 1)
    assert parse_ymd(datetime(2025, 2, 1, 10, 30)) == date(2025, 2, 1)


@pytest.mark.parametrize(
    "value",
    [
        "2025-13-01",
        "2025-00-10",
        "2025-02-30",
        "2025/02/01",
        "2025-2-1",
        "2025-02",
        "20265-01-02",
        "",
    ],
)
def test_parse_ymd_invalid(value):
    with pytest.raises(ValueError):
        parse_ymd(value)


def test_ensure_not_future_raises():
    future_date = date.today() + timedelta(days=1)
    with pytest.raises(ValueError):
        ensure_not_future(future_date)


class TestParseEntryDate:
    def test_plain_date_becomes_midnight(self):
        assert parse_entry_date("2025-06-01") == datetime(2025, 6, 1)

    def test_full_timestamp(self):
        expected = datetime(2025, 6, 1, 8, 15, 30, 250000)
        assert parse_entry_date("2025-06-01T08:15:30.250") == expected

    def test_datetime_passthrough(self):
        value = datetime(2025, 6, 1, 8, 15)
        assert parse_entry_date(value) == value

    def test_date_object(self):
        assert parse_entry_date(date(2025, 6, 1)) == datetime(2025, 6, 1)

    def test_aware_timestamp_becomes_naive(self):
        value = datetime(2025, 6, 1, 8, 15, tzinfo=timezone.utc)
        parsed = parse_entry_date(value)
        assert parsed.tzinfo is None
        assert parsed == value.astimezone().replace(tzinfo=None)

    @pytest.mark.parametrize("value", ["", "   ", "yesterday", "2025-02-30", "01/06/2025"])
    def test_invalid(self, value):
        with pytest.raises(ValueError):
            parse_entry_date(value)


class TestParseAmount:
    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("100", 100.0),
            (" 12.5 ", 12.5),
            ("1,000,000", 1000000.0),
            (".5", 0.5),
            ("2e3", 2000.0),
            (42, 42.0),
        ],
    )
    def test_positive_kinds(self, text, expected):
        assert parse_amount(text, "expense") == expected

    @pytest.mark.parametrize("text", ["", "abc", "0", "-5", "12..5", "nan", "inf", "1e999", True])
    def test_rejected_for_positive_kinds(self, text):
        with pytest.raises(InvalidAmount):
            parse_amount(text, "income")

    def test_saving_accepts_negative(self):
        assert parse_amount("-150", "saving") == -150.0
        assert parse_amount("+20", "saving") == 20.0

    def test_saving_rejects_zero(self):
        with pytest.raises(InvalidAmount):
            parse_amount("0.0", "saving")

    def test_invalid_amount_is_value_error(self):
        with pytest.raises(ValueError):
            parse_amount("x", "investment")


@pytest.mark.parametrize(
    ("value", "expected"),
    [(None, None), ("", None), ("   ", None), ("  rent ", "rent")],
)
def test_normalize_note(value, expected):
    assert normalize_note(value) == expected


@pytest.mark.parametrize(
    ("value", "expected_start"),
    [
        ("2025", "2025-01-01"),
        ("2025-03", "2025-03-01"),
        ("2025-03-17", "2025-03-17"),
    ],
)
def test_parse_report_period_start_valid(value, expected_start):
    assert parse_report_period_start(value) == expected_start


@pytest.mark.parametrize(
    "value",
    [
        "",
        "2025-13",
        "2025-00",
        "2025-02-30",
        "2025/03",
        "abcd",
        "2025-3",
        "2999",
        "2999-01",
        "2999-01-01",
    ],
)
def test_parse_report_period_start_invalid(value):
    with pytest.raises(ValueError):
        parse_report_period_start(value)


@pytest.mark.parametrize(
    ("value", "expected_end"),
    [
        ("2025", "2025-12-31"),
        ("2025-02", "2025-02-28"),
        ("2024-02", "2024-02-29"),
        ("2025-03-17", "2025-03-17"),
    ],
)
def test_parse_report_period_end_valid(value, expected_end):
    assert parse_report_period_end(value) == expected_end


@pytest.mark.parametrize(
    "value",
    ["", "2025-13", "2025-00", "2025-02-30", "2025/03", "abcd", "2025-3"],
)
def test_parse_report_period_end_invalid(value):
    with pytest.raises(ValueError):
        parse_report_period_end(value)
