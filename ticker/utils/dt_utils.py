# File: utils/dt_utils.py
"""Date and time utilities for Ticker.

Pure calendar arithmetic used by the schedule engine. Nothing here imports
from the rest of the package, so every function can be unit tested on its
own.

⚠️ UTILS PURITY: no imports from ticker.engines / ticker.managers / models.
   Uses standard library datetime/calendar plus dateutil.

Failure policy: arithmetic that cannot produce a real instant (a wall-clock
time inside a DST gap, Feb 30, a date past datetime.max) returns None and
logs at DEBUG. Callers treat None as "skip this candidate".

Functions:
    - set_default_timezone / get_default_timezone: default calendar zone
    - dt_now_utc: current aware UTC datetime
    - as_utc / as_local / local_day / start_of_local_day: conversions
    - date_at: combine a calendar day and a wall-clock time
    - safe_date: build a date, None when it does not exist
    - normalize_weekday: Sunday=0 .. Saturday=6 ordinal of a date
    - days_in_month / first_weekday_in_month / last_weekday_in_month
    - iso_week_start / weeks_between: ISO week arithmetic
    - add_interval: step an instant by minutes/hours/days/weeks
    - dt_format_duration / dt_format_ago: human-readable durations
"""

from __future__ import annotations

import calendar
from dataclasses import dataclass, field
from datetime import UTC, date, datetime, time, timedelta, tzinfo
import logging

from dateutil import tz as dateutil_tz

# Module-level logger (no package import)
_LOGGER = logging.getLogger(__name__)

# ==============================================================================
# Constants (local copies to avoid circular imports)
# These mirror const.py values but are defined locally for purity.
# ==============================================================================

TIME_UNIT_MINUTES = "minutes"
TIME_UNIT_HOURS = "hours"
TIME_UNIT_DAYS = "days"
TIME_UNIT_WEEKS = "weeks"

DAYS_PER_WEEK = 7

# Default timezone - host local zone, can be overridden by caller
DEFAULT_TIME_ZONE: tzinfo = dateutil_tz.tzlocal()


# ==============================================================================
# Timezone Configuration
# ==============================================================================


def set_default_timezone(tz: tzinfo) -> None:
    """Set the default timezone used by CalendarContext.current().

    Args:
        tz: tzinfo object (ZoneInfo, dateutil tz, datetime.UTC)
    """
    global DEFAULT_TIME_ZONE  # noqa: PLW0603
    DEFAULT_TIME_ZONE = tz


def get_default_timezone() -> tzinfo:
    """Get the current default timezone."""
    return DEFAULT_TIME_ZONE


@dataclass(frozen=True, slots=True)
class CalendarContext:
    """Immutable calendar in which wall-clock times are interpreted.

    The schedule engine receives one of these explicitly and never reads the
    module default while expanding.
    """

    tz: tzinfo = field(default=UTC)

    @classmethod
    def current(cls) -> CalendarContext:
        """Capture the configured default timezone."""
        return cls(DEFAULT_TIME_ZONE)


# ==============================================================================
# Current Date/Time Functions
# ==============================================================================


def dt_now_utc() -> datetime:
    """Return the current datetime in UTC (timezone-aware)."""
    return datetime.now(UTC)


# ==============================================================================
# Timezone Conversion
# ==============================================================================


def as_utc(dt_obj: datetime) -> datetime:
    """Convert a datetime to UTC.

    Naive input is assumed to be in DEFAULT_TIME_ZONE.
    """
    if dt_obj.tzinfo is None:
        dt_obj = dt_obj.replace(tzinfo=DEFAULT_TIME_ZONE)
    return dt_obj.astimezone(UTC)


def as_local(dt_obj: datetime, tz: tzinfo | None = None) -> datetime:
    """Convert a datetime to the given or default timezone.

    Naive input is assumed to be UTC.
    """
    tz_info = tz or DEFAULT_TIME_ZONE
    if dt_obj.tzinfo is None:
        dt_obj = dt_obj.replace(tzinfo=UTC)
    return dt_obj.astimezone(tz_info)


def local_day(dt_obj: datetime, tz: tzinfo | None = None) -> date:
    """Return the calendar day of an instant in the given timezone."""
    return as_local(dt_obj, tz).date()


def start_of_local_day(day: date, tz: tzinfo | None = None) -> datetime:
    """Return the first existing instant of a calendar day.

    Midnight is normally that instant; zones that skip midnight for DST
    (e.g. America/Santiago) start the day at the end of the gap instead.
    """
    tz_info = tz or DEFAULT_TIME_ZONE
    midnight = datetime(day.year, day.month, day.day, tzinfo=tz_info)
    if dateutil_tz.datetime_exists(midnight):
        return midnight
    # Round-tripping through UTC lands on the first wall time after the gap
    return midnight.astimezone(UTC).astimezone(tz_info)


def utc_sort_key(dt_obj: datetime) -> datetime:
    """Sort key that orders aware datetimes by absolute time.

    Datetimes sharing a tzinfo compare by wall clock and ignore `fold`, which
    misorders the repeated hour after a DST fall-back.
    """
    return dt_obj.astimezone(UTC)


# ==============================================================================
# Calendar Construction
# ==============================================================================


def date_at(day: date, wall_time: time, tz: tzinfo) -> datetime | None:
    """Combine a calendar day with a wall-clock time in a timezone.

    Args:
        day: Calendar day
        wall_time: Wall-clock time (hour/minute are used)
        tz: Timezone in which the wall time is read

    Returns:
        Aware datetime, or None when the wall time does not exist on that
        day (DST gap). Ambiguous times (DST fall-back) resolve to the first
        occurrence (fold=0).

    Examples:
        date_at(date(2025, 3, 30), time(2, 30), ZoneInfo("Europe/Berlin")) -> None
        date_at(date(2025, 1, 1), time(9, 30), UTC) -> 2025-01-01 09:30+00:00
    """
    candidate = datetime(
        day.year, day.month, day.day, wall_time.hour, wall_time.minute, tzinfo=tz
    )
    try:
        exists = dateutil_tz.datetime_exists(candidate)
    except OverflowError:
        _LOGGER.debug("date_at: %s is out of range in %s", day.isoformat(), tz)
        return None
    if not exists:
        _LOGGER.debug(
            "date_at: %s %02d:%02d does not exist in %s, dropped",
            day.isoformat(),
            wall_time.hour,
            wall_time.minute,
            tz,
        )
        return None
    return candidate


def safe_date(year: int, month: int, day: int) -> date | None:
    """Build a date, returning None when it does not exist.

    Examples:
        safe_date(2025, 2, 29) -> None
        safe_date(2024, 2, 29) -> date(2024, 2, 29)
    """
    try:
        return date(year, month, day)
    except ValueError:
        _LOGGER.debug("safe_date: %04d-%02d-%02d is not a valid date", year, month, day)
        return None


# ==============================================================================
# Weekday / Month Math
# ==============================================================================


def normalize_weekday(day: date) -> int:
    """Return the weekday of a date with Sunday=0 .. Saturday=6.

    Python's date.weekday() is Monday=0, so everything is shifted by one.
    """
    return (day.weekday() + 1) % DAYS_PER_WEEK


def days_in_month(year: int, month: int) -> int:
    """Return the number of days in a month (leap years included)."""
    return calendar.monthrange(year, month)[1]


def first_weekday_in_month(year: int, month: int, weekday: int) -> date:
    """Return the first day of the month falling on weekday (Sunday=0)."""
    first = date(year, month, 1)
    offset = (weekday - normalize_weekday(first)) % DAYS_PER_WEEK
    return first + timedelta(days=offset)


def last_weekday_in_month(year: int, month: int, weekday: int) -> date:
    """Return the last day of the month falling on weekday (Sunday=0)."""
    last = date(year, month, days_in_month(year, month))
    offset = (normalize_weekday(last) - weekday) % DAYS_PER_WEEK
    return last - timedelta(days=offset)


# ==============================================================================
# ISO Week Math
# ==============================================================================


def iso_week_start(day: date) -> date:
    """Return the Monday of the ISO week containing day.

    Clamped to date.min for the first days of year 1.
    """
    try:
        return day - timedelta(days=day.weekday())
    except OverflowError:
        return date.min


def weeks_between(anchor: date, day: date) -> int:
    """Return the signed number of ISO weeks from anchor's week to day's week.

    Works across ISO year boundaries (week 52/53 -> week 1).

    Examples:
        weeks_between(date(2025, 1, 1), date(2025, 1, 6)) -> 1
        weeks_between(date(2025, 1, 6), date(2025, 1, 1)) -> -1
    """
    return (iso_week_start(day) - iso_week_start(anchor)).days // DAYS_PER_WEEK


# ==============================================================================
# Interval Stepping
# ==============================================================================


def add_interval(
    base_dt: datetime,
    interval_unit: str,
    delta: int,
    tz: tzinfo,
) -> datetime | None:
    """Step an aware instant forward by delta units.

    Minutes and hours are elapsed time: the result is exactly
    delta * unit later in absolute time, shown in `tz`. Days and weeks are
    calendar steps: the result keeps base_dt's wall-clock time in `tz` on
    the day delta days/weeks later.

    Args:
        base_dt: Base datetime (timezone-aware)
        interval_unit: TIME_UNIT_* constant
        delta: Number of units to add
        tz: Calendar timezone

    Returns:
        New datetime, or None when the result is out of range or (for calendar
        steps) falls inside a DST gap.
    """
    try:
        if interval_unit == TIME_UNIT_MINUTES:
            return (base_dt.astimezone(UTC) + timedelta(minutes=delta)).astimezone(tz)
        if interval_unit == TIME_UNIT_HOURS:
            return (base_dt.astimezone(UTC) + timedelta(hours=delta)).astimezone(tz)
        if interval_unit in (TIME_UNIT_DAYS, TIME_UNIT_WEEKS):
            days = delta * DAYS_PER_WEEK if interval_unit == TIME_UNIT_WEEKS else delta
            local = base_dt.astimezone(tz)
            return date_at(local.date() + timedelta(days=days), local.time(), tz)
    except (ValueError, OverflowError) as exc:
        _LOGGER.debug("add_interval: cannot add %s %s: %s", delta, interval_unit, exc)
        return None

    _LOGGER.warning("Unknown interval_unit: %s", interval_unit)
    return None


# ==============================================================================
# Formatting
# ==============================================================================


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}{'' if count == 1 else 's'}"


def dt_format_duration(td: timedelta) -> str:
    """Format a timedelta with its largest whole unit.

    Examples:
        dt_format_duration(timedelta(minutes=5)) -> "5 minutes"
        dt_format_duration(timedelta(hours=25)) -> "1 day"
    """
    total_seconds = max(int(td.total_seconds()), 0)
    if total_seconds < 3600:
        return _plural(total_seconds // 60, "minute")
    if total_seconds < 86400:
        return _plural(total_seconds // 3600, "hour")
    return _plural(total_seconds // 86400, "day")


def dt_format_ago(td: timedelta) -> str:
    """Format elapsed time as "Just now" / "N units ago"."""
    if td.total_seconds() < 60:
        return "Just now"
    return f"{dt_format_duration(td)} ago"
