"""Schedule Engine for Ticker.

Expands a RecurrenceRule into the ordered occurrence instants that fall inside
a closed window [start, end]:

- Day-by-day scans (Daily, Weekdays, Biweekly, Hourly anchors, Every anchor)
  walk calendar days with `dateutil.rrule` DAILY.
- Month scans (Monthly) walk month starts with `dateutil.rrule` MONTHLY.
- Wall-clock times are placed on a day by dt_utils.date_at, which returns
  None inside DST gaps; such candidates are dropped, never raised.

Every generator yields ascending instants, so `iter_occurrences` can be cut
short for capped expansion without computing the rest of the window.

IMPORTANT: This module must NOT import from managers/ to avoid circular
imports. Only import from const.py, models.py, utils/ and engines/.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from datetime import date, datetime, time, timedelta
import heapq
from itertools import count, islice

from dateutil.rrule import DAILY, MONTHLY, rrule

from .. import const
from ..models import (
    Biweekly,
    Daily,
    Every,
    FirstOfMonth,
    FirstWeekday,
    FixedDay,
    Hourly,
    InvalidRuleError,
    LastOfMonth,
    LastWeekday,
    Monthly,
    MonthlyDay,
    OneTime,
    RecurrenceRule,
    TimeOfDay,
    Weekday,
    Weekdays,
    Window,
    Yearly,
)
from ..utils import dt_utils
from ..utils.dt_utils import CalendarContext
from .generation_strategy import GenerationStrategy

CancelCheck = Callable[[], bool]


class ExpansionCancelledError(Exception):
    """Raised when a cancel_check callback asks an expansion to stop."""


def _check_cancelled(cancel_check: CancelCheck | None) -> None:
    if cancel_check is not None and cancel_check():
        raise ExpansionCancelledError("Schedule expansion cancelled")


class ScheduleExpander:
    """Pure recurrence expansion bound to one calendar context.

    The expander holds no state besides its CalendarContext, so a single
    instance can be shared across threads. Every call is independent.

    Usage:
        expander = ScheduleExpander(CalendarContext(ZoneInfo("Europe/Berlin")))
        window = Window(start, end)
        instants = expander.expand(Daily(TimeOfDay(9, 30)), window)
    """

    def __init__(self, calendar: CalendarContext | None = None) -> None:
        """Initialize the expander.

        Args:
            calendar: Calendar context; None captures CalendarContext.current()
                once, at construction.
        """
        self._calendar = calendar if calendar is not None else CalendarContext.current()

    @property
    def calendar(self) -> CalendarContext:
        """Calendar context used for every expansion."""
        return self._calendar

    # =========================================================================
    # Public API
    # =========================================================================

    def expand(
        self,
        rule: RecurrenceRule,
        window: Window,
        *,
        cancel_check: CancelCheck | None = None,
    ) -> list[datetime]:
        """Return every occurrence of rule inside window, sorted ascending.

        Args:
            rule: Recurrence rule to expand
            window: Closed window; an occurrence exactly at window.end is kept
            cancel_check: Optional callback polled once per loop step

        Returns:
            Ascending list of aware datetimes (empty when nothing matches).

        Raises:
            ExpansionCancelledError: cancel_check returned True.
        """
        results = sorted(
            self.iter_occurrences(rule, window, cancel_check=cancel_check),
            key=dt_utils.utc_sort_key,
        )
        const.LOGGER.debug(
            "ScheduleExpander: %s over [%s, %s] -> %d occurrence(s)",
            rule.describe(),
            window.start.isoformat(),
            window.end.isoformat(),
            len(results),
        )
        return results

    def iter_occurrences(
        self,
        rule: RecurrenceRule,
        window: Window,
        *,
        cancel_check: CancelCheck | None = None,
    ) -> Iterator[datetime]:
        """Lazily yield the occurrences of rule inside window in ascending order.

        Consuming the whole iterator gives the same instants as expand().
        """
        match rule:
            case OneTime():
                return self._iter_one_time(rule, window)
            case Daily():
                return self._iter_daily(rule.time, window, cancel_check)
            case Weekdays():
                return self._iter_weekdays(rule, window, cancel_check)
            case Biweekly():
                return self._iter_biweekly(rule, window, cancel_check)
            case Hourly():
                return self._iter_hourly(rule, window, cancel_check)
            case Every():
                return self._iter_every(rule, window, cancel_check)
            case Monthly():
                return self._iter_monthly(rule, window, cancel_check)
            case Yearly():
                return self._iter_yearly(rule, window, cancel_check)
            case _:
                raise InvalidRuleError(f"Unsupported recurrence rule: {rule!r}")

    def expand_within_duration(
        self,
        rule: RecurrenceRule,
        start: datetime,
        duration: timedelta,
        *,
        cancel_check: CancelCheck | None = None,
    ) -> list[datetime]:
        """Expand over [start, start + duration]; [] when the end overflows."""
        window = Window.from_duration(start, duration)
        if window is None:
            return []
        return self.expand(rule, window, cancel_check=cancel_check)

    def expand_with_cap(
        self,
        rule: RecurrenceRule,
        start: datetime,
        duration: timedelta,
        max_alarms: int | None = None,
        *,
        cancel_check: CancelCheck | None = None,
    ) -> list[datetime]:
        """Expand over [start, start + duration], keeping the earliest max_alarms.

        Occurrences are pulled lazily, so only the first max_alarms are
        computed. max_alarms=None keeps everything.
        """
        if max_alarms is None:
            return self.expand_within_duration(
                rule, start, duration, cancel_check=cancel_check
            )
        if max_alarms < 0:
            raise ValueError(f"max_alarms must be >= 0, got {max_alarms}")

        window = Window.from_duration(start, duration)
        if window is None:
            return []
        capped = list(
            islice(
                self.iter_occurrences(rule, window, cancel_check=cancel_check),
                max_alarms,
            )
        )
        const.LOGGER.debug(
            "ScheduleExpander: %s capped at %d -> %d occurrence(s)",
            rule.describe(),
            max_alarms,
            len(capped),
        )
        return capped

    def expand_with_strategy(
        self,
        rule: RecurrenceRule,
        start: datetime,
        strategy: GenerationStrategy | None = None,
        *,
        cancel_check: CancelCheck | None = None,
    ) -> list[datetime]:
        """Expand using a strategy's window duration and alarm cap.

        strategy=None classifies the rule first.
        """
        if strategy is None:
            strategy = GenerationStrategy.classify(rule)
        return self.expand_with_cap(
            rule,
            start,
            strategy.window_duration,
            strategy.max_alarms,
            cancel_check=cancel_check,
        )

    # =========================================================================
    # Scanning helpers
    # =========================================================================

    def _date_at(self, day: date, wall_time: TimeOfDay) -> datetime | None:
        return dt_utils.date_at(day, wall_time.as_time(), self._calendar.tz)

    def _iter_days(
        self, first: date, last: date, cancel_check: CancelCheck | None
    ) -> Iterator[date]:
        """Yield calendar days first..last inclusive."""
        if first > last:
            return
        for day_start in rrule(
            DAILY,
            dtstart=datetime.combine(first, time()),
            until=datetime.combine(last, time()),
        ):
            _check_cancelled(cancel_check)
            yield day_start.date()

    def _window_days(
        self, window: Window, cancel_check: CancelCheck | None
    ) -> Iterator[date]:
        tz = self._calendar.tz
        return self._iter_days(
            dt_utils.local_day(window.start, tz),
            dt_utils.local_day(window.end, tz),
            cancel_check,
        )

    def _iter_at_time(
        self,
        days: Iterable[date],
        wall_time: TimeOfDay,
        window: Window,
    ) -> Iterator[datetime]:
        """Place wall_time on each day and keep the instants inside window."""
        for day in days:
            candidate = self._date_at(day, wall_time)
            if candidate is not None and window.contains(candidate):
                yield candidate

    # =========================================================================
    # Per-variant generators
    # =========================================================================

    def _iter_one_time(self, rule: OneTime, window: Window) -> Iterator[datetime]:
        if window.contains(rule.at):
            yield rule.at

    def _iter_daily(
        self,
        wall_time: TimeOfDay,
        window: Window,
        cancel_check: CancelCheck | None,
    ) -> Iterator[datetime]:
        return self._iter_at_time(
            self._window_days(window, cancel_check), wall_time, window
        )

    def _iter_weekdays(
        self,
        rule: Weekdays,
        window: Window,
        cancel_check: CancelCheck | None,
    ) -> Iterator[datetime]:
        days = (
            day
            for day in self._window_days(window, cancel_check)
            if Weekday.from_date(day) in rule.days
        )
        return self._iter_at_time(days, rule.time, window)

    def _iter_biweekly(
        self,
        rule: Biweekly,
        window: Window,
        cancel_check: CancelCheck | None,
    ) -> Iterator[datetime]:
        anchor = rule.anchor_date
        if anchor is None:
            anchor = dt_utils.local_day(window.start, self._calendar.tz)
        days = (
            day
            for day in self._window_days(window, cancel_check)
            if Weekday.from_date(day) in rule.days
            and dt_utils.weeks_between(anchor, day) % 2 == 0
        )
        return self._iter_at_time(days, rule.time, window)

    def _iter_hourly(
        self,
        rule: Hourly,
        window: Window,
        cancel_check: CancelCheck | None,
    ) -> Iterator[datetime]:
        """Merge one chain per daily anchor, dropping instants seen twice.

        Chains overlap once they cross midnight: with interval_hours=6 the
        chain started at Jan 1 00:00 reaches Jan 2 00:00, which is also the
        anchor of the Jan 2 chain. That instant is yielded once.
        """
        anchors = list(self._iter_daily(rule.time, window, cancel_check))
        chains = [
            self._iter_chain(
                anchor, dt_utils.TIME_UNIT_HOURS, rule.interval_hours, window, cancel_check
            )
            for anchor in anchors
        ]
        previous: datetime | None = None
        for instant in heapq.merge(*chains, key=dt_utils.utc_sort_key):
            key = dt_utils.utc_sort_key(instant)
            if key == previous:
                continue
            previous = key
            yield instant

    def _iter_every(
        self,
        rule: Every,
        window: Window,
        cancel_check: CancelCheck | None,
    ) -> Iterator[datetime]:
        anchor = next(self._iter_daily(rule.time, window, cancel_check), None)
        if anchor is None:
            return iter(())
        return self._iter_chain(
            anchor, rule.unit.value, rule.interval, window, cancel_check
        )

    def _iter_chain(
        self,
        anchor: datetime,
        unit: str,
        interval: int,
        window: Window,
        cancel_check: CancelCheck | None,
    ) -> Iterator[datetime]:
        """Yield anchor, anchor + interval, anchor + 2*interval, ... <= window.end.

        Each step is computed from the anchor, so a calendar step that lands
        in a DST gap skips that one candidate and the chain keeps going.
        Elapsed steps never fail inside the representable range, so the loop
        ends on overflow or once past window.end.
        """
        tz = self._calendar.tz
        yield anchor
        for step in count(1):
            _check_cancelled(cancel_check)
            candidate = dt_utils.add_interval(anchor, unit, step * interval, tz)
            if candidate is None:
                if unit in (dt_utils.TIME_UNIT_DAYS, dt_utils.TIME_UNIT_WEEKS):
                    if self._calendar_step_overflows(anchor, unit, step * interval):
                        return
                    const.LOGGER.debug(
                        "ScheduleExpander: step %d from %s skipped (DST gap)",
                        step,
                        anchor.isoformat(),
                    )
                    continue
                return
            if dt_utils.utc_sort_key(candidate) > window.end:
                return
            yield candidate

    @staticmethod
    def _calendar_step_overflows(anchor: datetime, unit: str, delta: int) -> bool:
        days = delta * dt_utils.DAYS_PER_WEEK if unit == dt_utils.TIME_UNIT_WEEKS else delta
        try:
            anchor.date() + timedelta(days=days)
        except OverflowError:
            return True
        return False

    def _iter_monthly(
        self,
        rule: Monthly,
        window: Window,
        cancel_check: CancelCheck | None,
    ) -> Iterator[datetime]:
        tz = self._calendar.tz
        first = dt_utils.local_day(window.start, tz).replace(day=1)
        last = dt_utils.local_day(window.end, tz).replace(day=1)
        for month_start in rrule(
            MONTHLY,
            dtstart=datetime.combine(first, time()),
            until=datetime.combine(last, time()),
        ):
            _check_cancelled(cancel_check)
            day = resolve_monthly_day(rule.day, month_start.year, month_start.month)
            if day is None:
                continue
            candidate = self._date_at(day, rule.time)
            if candidate is not None and window.contains(candidate):
                yield candidate

    def _iter_yearly(
        self,
        rule: Yearly,
        window: Window,
        cancel_check: CancelCheck | None,
    ) -> Iterator[datetime]:
        tz = self._calendar.tz
        first_year = dt_utils.local_day(window.start, tz).year
        last_year = dt_utils.local_day(window.end, tz).year
        for year in range(first_year, last_year + 1):
            _check_cancelled(cancel_check)
            day = dt_utils.safe_date(year, rule.month, rule.day)
            if day is None:
                continue
            candidate = self._date_at(day, rule.time)
            if candidate is not None and window.contains(candidate):
                yield candidate


# =============================================================================
# Module-level helpers
# =============================================================================


def resolve_monthly_day(monthly_day: MonthlyDay, year: int, month: int) -> date | None:
    """Resolve a MonthlyDay variant to a concrete day of (year, month).

    Returns None when the month has no such day (FixedDay(30) in February).
    """
    match monthly_day:
        case FixedDay(day=day_number):
            return dt_utils.safe_date(year, month, day_number)
        case FirstOfMonth():
            return date(year, month, 1)
        case LastOfMonth():
            return date(year, month, dt_utils.days_in_month(year, month))
        case FirstWeekday(weekday=weekday):
            return dt_utils.first_weekday_in_month(year, month, weekday)
        case LastWeekday(weekday=weekday):
            return dt_utils.last_weekday_in_month(year, month, weekday)
        case _:
            raise InvalidRuleError(f"Unsupported monthly day: {monthly_day!r}")


def expand(
    rule: RecurrenceRule,
    window: Window,
    calendar: CalendarContext | None = None,
) -> list[datetime]:
    """Expand rule over window with a one-off ScheduleExpander."""
    return ScheduleExpander(calendar).expand(rule, window)
