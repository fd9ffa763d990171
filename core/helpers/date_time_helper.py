"""
date_time_helper.py

Provides helper functions for conversion and formatting of date and time values,
with UTC storage and plant-local display.

Checklist dates are plain ``YYYY-MM-DD`` strings entered by the monitor; they
are formatted by splitting the string, never by round-tripping through a
timezone, so a form dated DEC-15 never turns into DEC-14.

All features and modules should use ONLY these helpers for date/time logic.
"""

from __future__ import annotations

from datetime import date, datetime, time, timezone
from functools import lru_cache
from zoneinfo import ZoneInfo

MONTH_NAMES_SHORT = ("JAN", "FEB", "MAR", "APR", "MAY", "JUN",
                     "JUL", "AUG", "SEP", "OCT", "NOV", "DEC")
MONTH_NAMES_FULL = ("JANUARY", "FEBRUARY", "MARCH", "APRIL", "MAY", "JUNE", "JULY",
                    "AUGUST", "SEPTEMBER", "OCTOBER", "NOVEMBER", "DECEMBER")

HISTORY_FORMAT = "%d-%m-%Y %H:%M:%S"


@lru_cache(maxsize=1)
def plant_tz() -> ZoneInfo:
    """Local timezone of the plant (``General.timezone``)."""
    from core.config.config_service import config_service  # lazy import
    return ZoneInfo(config_service.general.timezone or "America/New_York")


def utc_now_iso() -> str:
    """
    Returns the current UTC time as an ISO8601 string (YYYY-MM-DDTHH:MM:SS+00:00).
    Used for logging and DB storage.
    """
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat()


def local_now(tz: ZoneInfo | None = None) -> datetime:
    return datetime.now(tz or plant_tz())


def local_today_iso(tz: ZoneInfo | None = None) -> str:
    return local_now(tz).date().isoformat()


def local_date_to_utc_range(start: date, end: date, tz: ZoneInfo | None = None) -> tuple[str, str]:
    """
    Converts local start and end dates to a UTC ISO range covering both full days.
    """
    zone = tz or plant_tz()
    local_start = datetime.combine(start, time.min).replace(tzinfo=zone)
    local_end = datetime.combine(end, time.max).replace(tzinfo=zone)
    return (local_start.astimezone(timezone.utc).isoformat(),
            local_end.astimezone(timezone.utc).isoformat())


def utc_to_local_str(utc_iso: str, tz: ZoneInfo | None = None) -> str:
    """
    Formats a UTC ISO8601 timestamp as "MM/DD/YYYY HH:MM:SS" in plant time.
    """
    dt_utc = datetime.fromisoformat(utc_iso)
    if dt_utc.tzinfo is None:
        dt_utc = dt_utc.replace(tzinfo=timezone.utc)
    return dt_utc.astimezone(tz or plant_tz()).strftime("%m/%d/%Y %H:%M:%S")


def local_to_utc_iso(dt_local: datetime, tz: ZoneInfo | None = None) -> str:
    """
    Converts a local datetime to a UTC ISO string.
    """
    if dt_local.tzinfo is None:
        dt_local = dt_local.replace(tzinfo=tz or plant_tz())
    return dt_local.astimezone(timezone.utc).replace(microsecond=0).isoformat()


# ------------------------------------------------------------------ #
#  Checklist date strings                                            #
# ------------------------------------------------------------------ #
def _split_iso_date(date_str: str) -> tuple[str, int, str] | None:
    parts = (date_str or "").split("-")
    if len(parts) != 3:
        return None
    year, month, day = parts
    try:
        month_index = int(month) - 1
    except ValueError:
        return None
    if not 0 <= month_index < 12:
        return None
    return year, month_index, day.zfill(2)


def format_date_display(date_str: str) -> str:
    """``2025-12-15`` -> ``DEC-15-2025``; unparseable input is returned unchanged."""
    if not date_str:
        return ""
    parsed = _split_iso_date(date_str)
    if parsed is None:
        return date_str
    year, month_index, day = parsed
    return f"{MONTH_NAMES_SHORT[month_index]}-{day}-{year}"


def format_date_for_filename(date_str: str, full_month: bool = False) -> str:
    """``2025-12-15`` -> ``2025-DEC-15`` (or ``2025-DECEMBER-15``)."""
    if not date_str:
        return ""
    parsed = _split_iso_date(date_str)
    if parsed is None:
        return date_str
    year, month_index, day = parsed
    names = MONTH_NAMES_FULL if full_month else MONTH_NAMES_SHORT
    return f"{year}-{names[month_index]}-{day}"


def time_for_filename(moment: datetime | None = None) -> str:
    """``HHMMSS`` of *moment* (plant time now by default)."""
    return (moment or local_now()).strftime("%H%M%S")


def history_timestamp(moment: datetime | None = None) -> str:
    """Timestamp used in ticket history lines: ``dd-MM-yyyy HH:mm:ss``."""
    return (moment or local_now()).strftime(HISTORY_FORMAT)


def parse_date_time(date_str: str, time_str: str = "") -> datetime | None:
    """Combine ``YYYY-MM-DD`` and ``HH:MM[:SS]`` into a naive datetime."""
    if not date_str:
        return None
    try:
        day = date.fromisoformat(date_str[:10])
    except ValueError:
        return None
    clock = time.min
    if time_str:
        try:
            clock = time.fromisoformat(time_str.strip())
        except ValueError:
            clock = time.min
    return datetime.combine(day, clock)
