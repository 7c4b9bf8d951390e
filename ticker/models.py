# File: models.py
"""Recurrence rule data model for Ticker.

Closed set of immutable value types consumed by the schedule engine:

- TimeOfDay: wall-clock hour/minute without timezone
- Weekday: Sunday=0 .. Saturday=6 ordinal
- TimeUnit: step unit for custom intervals
- MonthlyDay variants: FixedDay, FirstOfMonth, LastOfMonth, FirstWeekday, LastWeekday
- RecurrenceRule variants: OneTime, Daily, Hourly, Every, Weekdays, Biweekly,
  Monthly, Yearly
- Window: closed [start, end] interval of aware datetimes

Every type validates its ranges at construction and raises InvalidRuleError
(a ValueError) on caller misuse, so the engines can assume valid input.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from enum import IntEnum, StrEnum

from . import const
from .utils import dt_utils


class InvalidRuleError(ValueError):
    """Raised when a recurrence rule or one of its parts is out of range."""


def _require_aware(value: datetime, name: str) -> None:
    if not isinstance(value, datetime):
        raise InvalidRuleError(f"{name} must be a datetime, got {type(value).__name__}")
    if value.tzinfo is None or value.utcoffset() is None:
        raise InvalidRuleError(f"{name} must be timezone-aware: {value.isoformat()}")


def _require_int_range(value: int, low: int, high: int, name: str) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidRuleError(f"{name} must be an integer, got {value!r}")
    if not low <= value <= high:
        raise InvalidRuleError(f"{name} must be in {low}..{high}, got {value}")


# =============================================================================
# Scalar value types
# =============================================================================


class Weekday(IntEnum):
    """Day of week with Sunday=0 through Saturday=6.

    Python's date.weekday() is Monday=0; use from_date() to normalize.
    """

    SUNDAY = const.WEEKDAY_SUNDAY
    MONDAY = const.WEEKDAY_MONDAY
    TUESDAY = const.WEEKDAY_TUESDAY
    WEDNESDAY = const.WEEKDAY_WEDNESDAY
    THURSDAY = const.WEEKDAY_THURSDAY
    FRIDAY = const.WEEKDAY_FRIDAY
    SATURDAY = const.WEEKDAY_SATURDAY

    @classmethod
    def from_date(cls, day: date) -> Weekday:
        """Return the normalized weekday of a calendar day."""
        return cls((day.weekday() + 1) % const.DAYS_PER_WEEK)

    @property
    def display_name(self) -> str:
        return const.WEEKDAY_NAMES[self.value]

    @property
    def short_name(self) -> str:
        return const.WEEKDAY_SHORT_NAMES[self.value]


class TimeUnit(StrEnum):
    """Unit used by Every rules."""

    MINUTES = const.TIME_UNIT_MINUTES
    HOURS = const.TIME_UNIT_HOURS
    DAYS = const.TIME_UNIT_DAYS
    WEEKS = const.TIME_UNIT_WEEKS

    @property
    def singular_name(self) -> str:
        return self.value[:-1]


@dataclass(frozen=True, slots=True, order=True)
class TimeOfDay:
    """Wall-clock time of day (no timezone)."""

    hour: int
    minute: int = 0

    def __post_init__(self) -> None:
        _require_int_range(self.hour, 0, 23, "hour")
        _require_int_range(self.minute, 0, 59, "minute")

    @classmethod
    def from_datetime(cls, value: datetime | time) -> TimeOfDay:
        """Take the wall-clock hour and minute of a datetime or time."""
        return cls(value.hour, value.minute)

    @classmethod
    def parse(cls, value: str) -> TimeOfDay:
        """Parse a "HH:MM" 24-hour string."""
        try:
            hour_str, minute_str = value.strip().split(":")
            return cls(int(hour_str), int(minute_str))
        except (ValueError, AttributeError) as err:
            raise InvalidRuleError(
                f"Invalid time of day {value!r} (expected HH:MM)"
            ) from err

    def adding(self, minutes: int) -> TimeOfDay:
        """Return this time shifted by minutes, wrapped into one day.

        Examples:
            TimeOfDay(23, 30).adding(45) -> TimeOfDay(0, 15)
            TimeOfDay(0, 10).adding(-20) -> TimeOfDay(23, 50)
        """
        total = (self.hour * const.MINUTES_PER_HOUR + self.minute + minutes) % (
            const.MINUTES_PER_DAY
        )
        return TimeOfDay(*divmod(total, const.MINUTES_PER_HOUR))

    def as_time(self) -> time:
        return time(self.hour, self.minute)

    def to_string(self) -> str:
        """Return the 24-hour "HH:MM" form."""
        return f"{self.hour:02d}:{self.minute:02d}"

    def format_12h(self) -> str:
        """Return the display form, e.g. "9:05 AM"."""
        hour = self.hour % 12 or 12
        period = "AM" if self.hour < 12 else "PM"
        return f"{hour}:{self.minute:02d} {period}"


def _normalize_days(days: Iterable[int]) -> frozenset[Weekday]:
    try:
        normalized = frozenset(Weekday(d) for d in days)
    except (TypeError, ValueError) as err:
        raise InvalidRuleError(f"Invalid weekday set {days!r} (expected 0-6)") from err
    if not normalized:
        raise InvalidRuleError("Weekday set must not be empty")
    return normalized


def _describe_days(days: frozenset[Weekday]) -> str:
    return ", ".join(day.short_name for day in sorted(days))


# =============================================================================
# MonthlyDay variants
# =============================================================================


@dataclass(frozen=True, slots=True)
class FixedDay:
    """A fixed day of month; months shorter than `day` have no occurrence."""

    day: int

    def __post_init__(self) -> None:
        _require_int_range(self.day, 1, 31, "day")

    def describe(self) -> str:
        return f"Day {self.day}"


@dataclass(frozen=True, slots=True)
class FirstOfMonth:
    """Day 1 of every month."""

    def describe(self) -> str:
        return "1st"


@dataclass(frozen=True, slots=True)
class LastOfMonth:
    """The actual last day of every month."""

    def describe(self) -> str:
        return "Last day"


@dataclass(frozen=True, slots=True)
class FirstWeekday:
    """The first given weekday of every month."""

    weekday: Weekday

    def __post_init__(self) -> None:
        object.__setattr__(self, "weekday", _coerce_weekday(self.weekday))

    def describe(self) -> str:
        return f"First {self.weekday.display_name}"


@dataclass(frozen=True, slots=True)
class LastWeekday:
    """The last given weekday of every month."""

    weekday: Weekday

    def __post_init__(self) -> None:
        object.__setattr__(self, "weekday", _coerce_weekday(self.weekday))

    def describe(self) -> str:
        return f"Last {self.weekday.display_name}"


def _coerce_weekday(value: int) -> Weekday:
    try:
        return Weekday(value)
    except ValueError as err:
        raise InvalidRuleError(f"weekday must be in 0..6, got {value!r}") from err


MonthlyDay = FixedDay | FirstOfMonth | LastOfMonth | FirstWeekday | LastWeekday


# =============================================================================
# RecurrenceRule variants
# =============================================================================


@dataclass(frozen=True, slots=True)
class OneTime:
    """A single aware instant."""

    at: datetime

    def __post_init__(self) -> None:
        _require_aware(self.at, "at")

    def describe(self) -> str:
        wall = TimeOfDay.from_datetime(self.at)
        month = const.MONTH_SHORT_NAMES[self.at.month - 1]
        return f"{month} {self.at.day}, {self.at.year} at {wall.format_12h()}"


@dataclass(frozen=True, slots=True)
class Daily:
    """Every calendar day at a wall-clock time."""

    time: TimeOfDay

    def describe(self) -> str:
        return f"Daily at {self.time.format_12h()}"


@dataclass(frozen=True, slots=True)
class Hourly:
    """Every `interval_hours` hours, chained from each day's `time`."""

    interval_hours: int
    time: TimeOfDay

    def __post_init__(self) -> None:
        _require_int_range(self.interval_hours, 1, const.HOURS_PER_DAY, "interval_hours")

    def describe(self) -> str:
        plural = "" if self.interval_hours == 1 else "s"
        return f"Every {self.interval_hours} hour{plural}"


@dataclass(frozen=True, slots=True)
class Every:
    """Every `interval` units, chained from the first `time` in the window."""

    interval: int
    unit: TimeUnit
    time: TimeOfDay

    def __post_init__(self) -> None:
        if isinstance(self.interval, bool) or not isinstance(self.interval, int):
            raise InvalidRuleError(f"interval must be an integer, got {self.interval!r}")
        if self.interval < 1:
            raise InvalidRuleError(f"interval must be >= 1, got {self.interval}")
        try:
            object.__setattr__(self, "unit", TimeUnit(self.unit))
        except ValueError as err:
            raise InvalidRuleError(f"Unknown time unit {self.unit!r}") from err

    def describe(self) -> str:
        name = self.unit.singular_name if self.interval == 1 else self.unit.value
        return f"Every {self.interval} {name}"


@dataclass(frozen=True, slots=True)
class Weekdays:
    """Selected weekdays at a wall-clock time."""

    time: TimeOfDay
    days: frozenset[Weekday]

    def __post_init__(self) -> None:
        object.__setattr__(self, "days", _normalize_days(self.days))

    def describe(self) -> str:
        return f"{_describe_days(self.days)} at {self.time.format_12h()}"


@dataclass(frozen=True, slots=True)
class Biweekly:
    """Selected weekdays of every other ISO week.

    Without `anchor_date` the ISO week of the query window's start is week 0,
    so the on/off weeks depend on the window. With `anchor_date` the ISO week
    containing that date is week 0 for every query.
    """

    time: TimeOfDay
    days: frozenset[Weekday]
    anchor_date: date | None = field(default=None)

    def __post_init__(self) -> None:
        object.__setattr__(self, "days", _normalize_days(self.days))
        if isinstance(self.anchor_date, datetime):
            object.__setattr__(self, "anchor_date", self.anchor_date.date())
        elif self.anchor_date is not None and not isinstance(self.anchor_date, date):
            raise InvalidRuleError(f"anchor_date must be a date, got {self.anchor_date!r}")

    def describe(self) -> str:
        return f"Biweekly {_describe_days(self.days)} at {self.time.format_12h()}"


@dataclass(frozen=True, slots=True)
class Monthly:
    """One day per month resolved by a MonthlyDay variant."""

    day: MonthlyDay
    time: TimeOfDay

    def __post_init__(self) -> None:
        if not isinstance(
            self.day, (FixedDay, FirstOfMonth, LastOfMonth, FirstWeekday, LastWeekday)
        ):
            raise InvalidRuleError(f"Unknown monthly day {self.day!r}")

    def describe(self) -> str:
        return f"Monthly {self.day.describe()} at {self.time.format_12h()}"


@dataclass(frozen=True, slots=True)
class Yearly:
    """A month/day every year; years where the date is invalid are skipped."""

    month: int
    day: int
    time: TimeOfDay

    def __post_init__(self) -> None:
        _require_int_range(self.month, 1, const.MONTHS_PER_YEAR, "month")
        _require_int_range(self.day, 1, 31, "day")

    def describe(self) -> str:
        month = const.MONTH_SHORT_NAMES[self.month - 1]
        return f"Yearly {month} {self.day} at {self.time.format_12h()}"


RecurrenceRule = (
    OneTime | Daily | Hourly | Every | Weekdays | Biweekly | Monthly | Yearly
)


# =============================================================================
# Window
# =============================================================================


@dataclass(frozen=True, slots=True)
class Window:
    """Closed interval [start, end] of aware datetimes.

    An instant exactly at `end` is inside the window. Bounds and instants are
    compared as absolute times, so the repeated hour after a DST fall-back is
    ordered correctly.
    """

    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        _require_aware(self.start, "start")
        _require_aware(self.end, "end")
        if dt_utils.utc_sort_key(self.start) > dt_utils.utc_sort_key(self.end):
            raise InvalidRuleError(
                f"Window start {self.start.isoformat()} is after end {self.end.isoformat()}"
            )

    @classmethod
    def from_duration(cls, start: datetime, duration: timedelta) -> Window | None:
        """Build [start, start + duration] with duration as elapsed time.

        Returns None when the end overflows.
        """
        _require_aware(start, "start")
        try:
            end = (dt_utils.as_utc(start) + duration).astimezone(start.tzinfo)
        except OverflowError:
            const.LOGGER.debug(
                "Window: start %s + %s overflows, no window", start.isoformat(), duration
            )
            return None
        return cls(start, end)

    def contains(self, instant: datetime) -> bool:
        key = dt_utils.utc_sort_key(instant)
        return (
            dt_utils.utc_sort_key(self.start) <= key <= dt_utils.utc_sort_key(self.end)
        )

    @property
    def duration(self) -> timedelta:
        """Elapsed time between start and end."""
        return dt_utils.as_utc(self.end) - dt_utils.as_utc(self.start)
