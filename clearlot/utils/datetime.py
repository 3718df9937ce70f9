"""Helpers for working with timezone-aware datetimes."""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone, tzinfo
from functools import lru_cache
from typing import Final

from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from clearlot.config import get_settings

_DEFAULT_TIMEZONE: Final[str] = "Asia/Hong_Kong"
_OFFSET_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"^(?:UTC|GMT)(?P<sign>[+-])(?P<hours>\d{1,2})(?::?(?P<minutes>\d{2}))?$",
    re.IGNORECASE,
)


@lru_cache(maxsize=1)
def get_app_timezone() -> tzinfo:
    """Return the configured application timezone.

    The timezone is resolved using the ``APP_TIMEZONE`` environment variable. If
    the provided value cannot be resolved, Hong Kong time is used.
    """

    settings = get_settings()
    tz_name = (settings.app_timezone or "").strip() or _DEFAULT_TIMEZONE
    return _resolve_timezone(tz_name)


def now_in_app_timezone() -> datetime:
    """Return the current time localized to the configured timezone."""

    return datetime.now(tz=get_app_timezone())


def now_in_app_naive_datetime() -> datetime:
    """Return the current localized time without attaching ``tzinfo``."""

    localized = ensure_app_naive_datetime(now_in_app_timezone())
    if localized is None:  # pragma: no cover
        msg = "Failed to compute the application naive datetime"
        raise RuntimeError(msg)
    return localized


def ensure_app_timezone(value: datetime | None) -> datetime | None:
    """Normalize ``value`` so it is expressed in the configured timezone."""

    if value is None:
        return None

    tz = get_app_timezone()
    if value.tzinfo is None:
        return value.replace(tzinfo=tz)
    return value.astimezone(tz)


def ensure_app_naive_datetime(value: datetime | None) -> datetime | None:
    """Return ``value`` localized to the app timezone but without ``tzinfo``.

    SQLite and SQL Server ``DATETIME`` columns drop timezone information, so the
    localized wall-clock time is what gets stored.
    """

    localized = ensure_app_timezone(value)
    if localized is None:
        return None
    return localized.replace(tzinfo=None)


def parse_iso_datetime(value: str | datetime | None) -> datetime | None:
    """Parse an ISO-8601 string (``Z`` suffix allowed) into an aware datetime."""

    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return ensure_app_timezone(value)
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    return ensure_app_timezone(parsed)


def format_display_datetime(value: str | datetime | None) -> str:
    """Return ``value`` as ``19 October 2026, 14:05`` or ``Invalid Date``."""

    parsed = parse_iso_datetime(value)
    if parsed is None:
        return "Invalid Date"
    return f"{parsed.day} {parsed:%B %Y, %H:%M}"


def _resolve_timezone(tz_name: str) -> tzinfo:
    """Resolve ``tz_name`` into a ``timezone`` instance."""

    try:
        return ZoneInfo(tz_name)
    except ZoneInfoNotFoundError:
        match = _OFFSET_PATTERN.match(tz_name)
        if match:
            sign = -1 if match.group("sign") == "-" else 1
            hours = int(match.group("hours"))
            minutes = int(match.group("minutes") or 0)
            offset = timedelta(hours=hours, minutes=minutes)
            return timezone(sign * offset)
    return ZoneInfo(_DEFAULT_TIMEZONE)
