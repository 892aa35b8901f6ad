from __future__ import annotations

import re
from datetime import date, datetime, tzinfo

import pytz

from ..core.constants import EDIT_DATETIME_FORMAT, YEAR_MONTH_LENGTH
from ..core.exceptions import ValidationError

# e.g. "2025-05-01 09:00:00.123456789 +0900 JST m=+0.003"
_LEGACY_TIMESTAMP_RE = re.compile(
    r"^(?P<base>\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2})"
    r"(?:\.(?P<frac>\d+))?"
    r" (?P<offset>[+-]\d{4})"
    r"(?: [A-Za-z_+\-0-9]+)?"
    r"(?: m=[+-]\S+)?$"
)


def get_timezone(name: str) -> tzinfo:
    try:
        return pytz.timezone(name)
    except pytz.UnknownTimeZoneError as exc:
        raise ValidationError(f"Unknown timezone: {name}") from exc


def now_local(tz: tzinfo) -> datetime:
    """Current time in the reporting timezone.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now(tz)


def localize(value: datetime, tz: tzinfo) -> datetime:
    """Attach ``tz`` to a naive datetime, or convert an aware one into ``tz``."""
    if value.tzinfo is None:
        if hasattr(tz, "localize"):
            return tz.localize(value)
        return value.replace(tzinfo=tz)
    return value.astimezone(tz)


def format_timestamp(value: datetime) -> str:
    """Stored representation of a log timestamp (starts with YYYY-MM-DD)."""
    return value.isoformat(timespec="microseconds")


def parse_timestamp(value: str, tz: tzinfo) -> datetime:
    """Parse a stored timestamp into an aware datetime expressed in ``tz``.

    Accepts the ISO-8601 form written by this service and the older
    ``YYYY-MM-DD HH:MM:SS.fffffffff +ZZZZ ZONE`` layout found in imported data.
    Naive values are read as wall time in ``tz``. Raises ValueError otherwise.
    """

    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"empty timestamp: {value!r}")
    text = value.strip()

    m = _LEGACY_TIMESTAMP_RE.match(text)
    if m:
        frac = (m.group("frac") or "0")[:6].ljust(6, "0")
        parsed = datetime.strptime(f"{m.group('base')}.{frac} {m.group('offset')}", "%Y-%m-%d %H:%M:%S.%f %z")
        return parsed.astimezone(tz)

    try:
        parsed = datetime.fromisoformat(text)
    except ValueError as exc:
        raise ValueError(f"unrecognized timestamp: {value!r}") from exc
    return localize(parsed, tz)


def parse_edit_datetime(value: str, tz: tzinfo) -> datetime:
    """Parse ``YYYY-MM-DD HH:MM`` typed by a user into an aware datetime."""
    try:
        naive = datetime.strptime((value or "").strip(), EDIT_DATETIME_FORMAT)
    except ValueError as exc:
        raise ValidationError("時刻の形式が不正です。形式: YYYY-MM-DD HH:MM") from exc
    return localize(naive, tz)


def parse_year_month(value: str) -> date:
    """Validate ``YYYYMM`` and return the first day of that month."""
    value = (value or "").strip()
    if len(value) != YEAR_MONTH_LENGTH or not value.isdigit():
        raise ValidationError("年月の形式が不正です。")
    year, month = int(value[:4]), int(value[4:])
    if not 1 <= month <= 12 or year < 1:
        raise ValidationError("年月の形式が不正です。")
    return date(year, month, 1)


def year_month_prefix(month_start: date) -> str:
    """Prefix shared by every stored timestamp of that month (``YYYY-MM``)."""
    return month_start.strftime("%Y-%m")
