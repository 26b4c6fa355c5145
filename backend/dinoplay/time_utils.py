"""
Venue-local date and time helpers.

Settlements and daily configs are keyed by the calendar day at the venue
(America/Bogota by default), not by the calendar day of whichever server or
device handles the request. Every date-keyed lookup goes through
``venue_today`` / ``to_venue_date_string`` so a request made at 23:30 in
Bogota is never filed under the next UTC day.

Storage timestamps stay canonical UTC (``utcnow``, ``to_utc_z``).
"""

from __future__ import annotations

import re
from datetime import date, datetime, timezone
from functools import lru_cache
from typing import Any, Mapping, Optional
from zoneinfo import ZoneInfo

from babel.dates import format_date, format_datetime, format_skeleton, format_time
from flask import current_app, has_app_context


DEFAULT_VENUE_TIMEZONE = "America/Bogota"
DEFAULT_VENUE_LOCALE = "es_CO"

_DATE_ONLY_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

_STYLES = {"short", "medium", "long", "full"}

# Locale-formatter style component options -> CLDR skeleton fields
_SKELETON_FIELDS = {
    "weekday": {"narrow": "EEEEE", "short": "EEE", "long": "EEEE"},
    "year": {"numeric": "y", "2-digit": "yy"},
    "month": {"numeric": "M", "2-digit": "MM", "short": "MMM", "long": "MMMM"},
    "day": {"numeric": "d", "2-digit": "dd"},
    "minute": {"numeric": "mm", "2-digit": "mm"},
    "second": {"numeric": "ss", "2-digit": "ss"},
}


def current_instant() -> datetime:
    """The process clock as an aware UTC datetime; every 'now' reads it."""
    return datetime.now(timezone.utc)


def utcnow() -> datetime:
    """Server-side 'now' in UTC (naive, canonical)."""
    return current_instant().replace(tzinfo=None)


def to_utc_z(dt: Optional[datetime]) -> Optional[str]:
    """
    Serializes datetime to ISO-8601 with trailing 'Z'.
    If dt is naive, it is treated as UTC.
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    dt_utc = dt.astimezone(timezone.utc).replace(microsecond=0)
    return dt_utc.isoformat().replace("+00:00", "Z")


def to_storage(dt: datetime) -> datetime:
    """Aware instant -> UTC-naive value for DateTime columns."""
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(timezone.utc).replace(tzinfo=None)


# =============================================================================
# VENUE ZONE
# =============================================================================

@lru_cache(maxsize=8)
def _zone(name: str) -> ZoneInfo:
    return ZoneInfo(name)


def venue_timezone() -> ZoneInfo:
    """The venue's civil timezone (app config ``VENUE_TIMEZONE`` when available)."""
    name = DEFAULT_VENUE_TIMEZONE
    if has_app_context():
        name = current_app.config.get("VENUE_TIMEZONE") or DEFAULT_VENUE_TIMEZONE
    return _zone(name)


def venue_locale() -> str:
    if has_app_context():
        return current_app.config.get("VENUE_LOCALE") or DEFAULT_VENUE_LOCALE
    return DEFAULT_VENUE_LOCALE


def _as_aware(value: datetime) -> datetime:
    # Naive datetimes follow the storage convention: UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def venue_now(now: datetime | None = None) -> datetime:
    """
    Current instant expressed in the venue's wall-clock time.

    The result is timezone-aware, so it is an absolute instant that can be
    stored as-is while ``.date()``/``.hour`` read as the venue would.
    Resolution is one second.
    """
    instant = _as_aware(now) if now is not None else current_instant()
    return instant.astimezone(venue_timezone()).replace(microsecond=0)


def venue_today_date(now: datetime | None = None) -> date:
    return venue_now(now).date()


def venue_today(now: datetime | None = None) -> str:
    """Venue calendar date as ``YYYY-MM-DD``."""
    return venue_today_date(now).isoformat()


def to_venue_date_string(value: datetime | date) -> str:
    """
    Calendar date (``YYYY-MM-DD``) of an arbitrary instant as the venue sees it.

    Plain ``date`` objects are already calendar days and pass through.
    """
    if isinstance(value, datetime):
        return _as_aware(value).astimezone(venue_timezone()).date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    raise TypeError(f"Expected datetime or date, got {type(value).__name__}")


def parse_venue_date(value: str | None) -> date:
    """Strict ``YYYY-MM-DD`` parsing for calendar-day inputs."""
    if not isinstance(value, str) or not _DATE_ONLY_RE.match(value.strip()):
        raise ValueError("date must be formatted as YYYY-MM-DD")
    return date.fromisoformat(value.strip())


# =============================================================================
# DISPLAY
# =============================================================================

def _to_venue_datetime(value: datetime | date | str) -> datetime:
    tz = venue_timezone()
    if isinstance(value, str):
        s = value.strip()
        if _DATE_ONLY_RE.match(s):
            value = date.fromisoformat(s)
        else:
            if s.endswith("Z"):
                s = s[:-1] + "+00:00"
            value = datetime.fromisoformat(s)

    if isinstance(value, datetime):
        return _as_aware(value).astimezone(tz)

    # Bare calendar days are anchored at venue noon so no offset moves them
    return datetime(value.year, value.month, value.day, 12, 0, tzinfo=tz)


def _field(key: str, style: str) -> str:
    fields = _SKELETON_FIELDS[key]
    if style not in fields:
        raise ValueError(f"Unsupported {key} style '{style}'")
    return fields[style]


def _skeleton_for(options: Mapping[str, Any]) -> str:
    skeleton = ""
    for key in ("weekday", "year", "month", "day"):
        style = options.get(key)
        if style:
            skeleton += _field(key, style)

    hour = options.get("hour")
    if hour:
        hour12 = bool(options.get("hour12"))
        field = "h" if hour12 else "H"
        skeleton += field * 2 if hour == "2-digit" else field
        if hour12:
            skeleton += "a"
    for key in ("minute", "second"):
        style = options.get(key)
        if style:
            skeleton += _field(key, style)
    return skeleton


def format_for_display(value: datetime | date | str, options: Mapping[str, Any] | None = None) -> str:
    """
    Human-readable rendering in the venue locale and timezone.

    ``options`` follows the usual locale date formatter vocabulary:
    ``date_style``/``time_style`` ("short", "medium", "long", "full") or
    component keys (``weekday``, ``year``, ``month``, ``day``, ``hour``,
    ``minute``, ``second``) with "numeric", "2-digit", "short", "long".
    """
    options = dict(options or {})
    local = _to_venue_datetime(value)
    tz = venue_timezone()
    locale = venue_locale()

    date_style = options.pop("date_style", None)
    time_style = options.pop("time_style", None)
    for style in (date_style, time_style):
        if style is not None and style not in _STYLES:
            raise ValueError(f"Unknown style '{style}'")

    if date_style or time_style:
        parts = []
        if date_style:
            parts.append(format_date(local.date(), format=date_style, locale=locale))
        if time_style:
            parts.append(format_time(local, format=time_style, tzinfo=tz, locale=locale))
        return ", ".join(parts)

    unknown = set(options) - set(_SKELETON_FIELDS) - {"hour", "hour12"}
    if unknown:
        raise ValueError(f"Unknown format options: {', '.join(sorted(unknown))}")

    skeleton = _skeleton_for(options)
    if not skeleton:
        return format_datetime(local, format="medium", tzinfo=tz, locale=locale)
    return format_skeleton(skeleton, local, tzinfo=tz, locale=locale)
