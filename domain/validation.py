import calendar
import math
import re
from datetime import date, datetime, time

from .errors import InvalidAmount

_AMOUNT_RE = re.compile(r"[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?")


def parse_ymd(value: str | date) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not re.fullmatch(r"\d{4}-\d{2}-\d{2}", value):
        raise ValueError("Invalid date format")
    year, month, day = map(int, value.split("-"))
    if not (1 <= month <= 12):
        raise ValueError("Invalid month")
    last_day = calendar.monthrange(year, month)[1]
    if not (1 <= day <= last_day):
        raise ValueError("Invalid day")
    return date(year, month, day)


def parse_entry_date(value: datetime | date | str) -> datetime:
    """Normalize a user or wire date to a ``datetime``.

    Plain dates are promoted to midnight. Strings must be ISO-8601, either a
    bare ``YYYY-MM-DD`` or a full timestamp. Aware timestamps are converted
    to naive local time so every stored date compares with every other.
    """
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            return value.astimezone().replace(tzinfo=None)
        return value
    if isinstance(value, date):
        return datetime.combine(value, time())
    text = (value or "").strip()
    if not text:
        raise ValueError("Date value is empty")
    if re.fullmatch(r"\d{4}-\d{2}-\d{2}", text):
        return datetime.combine(parse_ymd(text), time())
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError as exc:
        raise ValueError(f"Invalid date format: {text}") from exc
    return parse_entry_date(parsed)


def parse_amount(text: str | float | int, kind: str) -> float:
    """Parse raw amount input for an entry of ``kind``.

    Savings take a signed, non-zero value; every other kind needs a strictly
    positive one.
    """
    if isinstance(text, (int, float)) and not isinstance(text, bool):
        value = float(text)
    else:
        raw = str(text or "").strip().replace(",", "")
        if not _AMOUNT_RE.fullmatch(raw):
            raise InvalidAmount(f"Invalid amount: {text!r}")
        value = float(raw)
    if not math.isfinite(value):
        raise InvalidAmount(f"Amount must be finite: {text!r}")
    if kind == "saving":
        if value == 0:
            raise InvalidAmount("Saving amount must not be zero")
    elif value <= 0:
        raise InvalidAmount("Amount must be positive")
    return value


def normalize_note(value: str | None) -> str | None:
    text = (value or "").strip()
    return text or None


def ensure_not_future(value: date) -> None:
    if value > date.today():
        raise ValueError("Date cannot be in the future")


def parse_report_period_start(value: str) -> str:
    period = (value or "").strip()
    if not period:
        raise ValueError("Period filter is empty")

    if re.fullmatch(r"\d{4}", period):
        start_date = date(int(period), 1, 1)
        ensure_not_future(start_date)
        return start_date.isoformat()

    if re.fullmatch(r"\d{4}-\d{2}", period):
        year, month = map(int, period.split("-"))
        if not (1 <= month <= 12):
            raise ValueError("Invalid month in period filter")
        start_date = date(year, month, 1)
        ensure_not_future(start_date)
        return start_date.isoformat()

    if re.fullmatch(r"\d{4}-\d{2}-\d{2}", period):
        start_date = parse_ymd(period)
        ensure_not_future(start_date)
        return start_date.isoformat()

    raise ValueError("Invalid period filter format. Use YYYY, YYYY-MM or YYYY-MM-DD")


def parse_report_period_end(value: str) -> str:
    period = (value or "").strip()
    if not period:
        raise ValueError("Period end filter is empty")

    if re.fullmatch(r"\d{4}", period):
        return date(int(period), 12, 31).isoformat()

    if re.fullmatch(r"\d{4}-\d{2}", period):
        year, month = map(int, period.split("-"))
        if not (1 <= month <= 12):
            raise ValueError("Invalid month in period end filter")
        last_day = calendar.monthrange(year, month)[1]
        return date(year, month, last_day).isoformat()

    if re.fullmatch(r"\d{4}-\d{2}-\d{2}", period):
        return parse_ymd(period).isoformat()

    raise ValueError("Invalid period end filter format. Use YYYY, YYYY-MM or YYYY-MM-DD")
