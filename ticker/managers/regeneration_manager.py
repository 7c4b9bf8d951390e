"""Regeneration Manager - Plans alarm re-registration for a ticker.

Coordinates the schedule and health engines when a ticker's alarms have to be
rebuilt:

1. Classify the rule (GenerationStrategy)
2. Expand the strategy window from now (ScheduleExpander)
3. Diff the target instants against the alarms already registered
4. Schedule the next regeneration for local midnight tomorrow

Registering or cancelling the alarms themselves belongs to the caller; this
module only produces the plan. RegenerationRateLimiter guards against
regeneration storms (e.g. several app-lifecycle triggers within a minute).
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime, timedelta
import threading

from .. import const
from ..engines.generation_strategy import GenerationStrategy
from ..engines.schedule_engine import ScheduleExpander
from ..models import RecurrenceRule
from ..type_defs import AlarmId, RuleId
from ..utils import dt_utils
from ..utils.dt_utils import CalendarContext


# =============================================================================
# Rate limiting
# =============================================================================


class RegenerationRateLimiter:
    """Enforces a minimum interval between regenerations of the same ticker.

    Thread-safe: all access to the history map goes through one lock.
    """

    def __init__(
        self,
        minimum_interval: timedelta = timedelta(
            seconds=const.REGENERATION_MIN_INTERVAL_SECONDS
        ),
        clock: Callable[[], datetime] = dt_utils.dt_now_utc,
    ) -> None:
        """Initialize the limiter.

        Args:
            minimum_interval: Time that must pass between two regenerations
            clock: Source of the current time (injectable for tests)
        """
        self._minimum_interval = minimum_interval
        self._clock = clock
        self._last_regeneration: dict[RuleId, datetime] = {}
        self._lock = threading.Lock()

    @property
    def minimum_interval(self) -> timedelta:
        return self._minimum_interval

    def can_regenerate(self, key: RuleId, force: bool = False) -> bool:
        """Return True when key may regenerate now (always when forced)."""
        if force:
            return True
        return self.time_until_next_allowed(key) <= timedelta(0)

    def record_regeneration(self, key: RuleId) -> None:
        """Record a regeneration attempt for key at the current time."""
        with self._lock:
            self._last_regeneration[key] = self._clock()

    def time_until_next_allowed(self, key: RuleId) -> timedelta:
        """Time left until key may regenerate again (zero when allowed now)."""
        with self._lock:
            last = self._last_regeneration.get(key)
        if last is None:
            return timedelta(0)
        elapsed = dt_utils.as_utc(self._clock()) - dt_utils.as_utc(last)
        remaining = self._minimum_interval - elapsed
        return max(remaining, timedelta(0))

    def clear_history(self, key: RuleId) -> None:
        """Forget key, e.g. after the ticker was deleted or reset."""
        with self._lock:
            self._last_regeneration.pop(key, None)

    def clear_all_history(self) -> None:
        with self._lock:
            self._last_regeneration.clear()

    def debug_status(self, key: RuleId) -> str:
        remaining = self.time_until_next_allowed(key)
        seconds = int(remaining.total_seconds())
        if seconds <= 0:
            return "Ready for regeneration"
        if seconds < 60:
            return f"Rate limited for {seconds} seconds"
        return f"Rate limited for {dt_utils.dt_format_duration(remaining)}"


# =============================================================================
# Alarm set diff
# =============================================================================


@dataclass(frozen=True, slots=True)
class AlarmDiff:
    """Changes that turn the registered alarm set into the target set."""

    to_delete: list[AlarmId] = field(default_factory=list)
    to_add: list[datetime] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.to_delete and not self.to_add


def compute_alarm_diff(
    current: Mapping[AlarmId, datetime],
    target: Sequence[datetime],
) -> AlarmDiff:
    """Diff registered alarms against target instants.

    Alarms whose instant is no longer targeted are deleted; target instants
    with no registered alarm are added. Instants are compared as absolute
    times, so the same moment in two timezones matches. Order follows the
    inputs.

    Args:
        current: Registered alarm id -> its instant
        target: Instants the ticker should have alarms for

    Returns:
        AlarmDiff with ids to delete and instants to add.
    """
    current_instants = {dt_utils.as_utc(at) for at in current.values()}
    target_instants = {dt_utils.as_utc(at) for at in target}

    to_delete = [
        alarm_id
        for alarm_id, at in current.items()
        if dt_utils.as_utc(at) not in target_instants
    ]
    to_add = [at for at in target if dt_utils.as_utc(at) not in current_instants]
    return AlarmDiff(to_delete=to_delete, to_add=to_add)


# =============================================================================
# Planning
# =============================================================================


def next_regeneration_date(now: datetime, calendar: CalendarContext) -> datetime:
    """Return the first instant of tomorrow in the calendar's timezone."""
    today = dt_utils.local_day(now, calendar.tz)
    return dt_utils.start_of_local_day(today + timedelta(days=1), calendar.tz)


@dataclass(frozen=True, slots=True)
class RegenerationPlan:
    """Everything a caller needs to re-register one ticker's alarms."""

    strategy: GenerationStrategy
    target_dates: list[datetime]
    diff: AlarmDiff
    next_regeneration: datetime


def plan_regeneration(
    rule: RecurrenceRule,
    current: Mapping[AlarmId, datetime],
    now: datetime,
    *,
    strategy: GenerationStrategy | None = None,
    expander: ScheduleExpander | None = None,
) -> RegenerationPlan:
    """Build the regeneration plan for a rule.

    Args:
        rule: The ticker's recurrence rule
        current: Alarms currently registered (id -> instant)
        now: Current instant; the expansion window starts here
        strategy: Override; None classifies the rule
        expander: Expander to use; None builds one on the current calendar

    Returns:
        RegenerationPlan with target instants, diff and next regeneration.
    """
    if strategy is None:
        strategy = GenerationStrategy.classify(rule)
    if expander is None:
        expander = ScheduleExpander()

    target_dates = expander.expand_with_strategy(rule, now, strategy)
    diff = compute_alarm_diff(current, target_dates)
    plan = RegenerationPlan(
        strategy=strategy,
        target_dates=target_dates,
        diff=diff,
        next_regeneration=next_regeneration_date(now, expander.calendar),
    )
    const.LOGGER.debug(
        "Regeneration plan for %s (%s): %d target(s), delete %d, add %d",
        rule.describe(),
        strategy.display_name,
        len(target_dates),
        len(diff.to_delete),
        len(diff.to_add),
    )
    if not target_dates:
        const.LOGGER.info(
            "Regeneration plan for %s has no upcoming occurrences", rule.describe()
        )
    return plan
