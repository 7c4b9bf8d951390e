"""Ticker: recurrence-rule expansion for alarms.

Turns declarative recurrence rules (daily, every N minutes, last Friday of the
month, ...) into the concrete instants at which alarms must fire, bounded by a
frequency-adaptive generation policy.

Usage:
    from ticker import CalendarContext, Daily, ScheduleExpander, TimeOfDay, Window

    expander = ScheduleExpander(CalendarContext(ZoneInfo("Europe/Berlin")))
    instants = expander.expand(Daily(TimeOfDay(9, 30)), Window(start, end))
"""

from .engines import (
    AlarmHealth,
    ExpansionCancelledError,
    GenerationStrategy,
    HealthStatus,
    ScheduleExpander,
    needs_regeneration,
)
from .helpers import SCHEDULE_CONFIG_SCHEMA, rule_from_config, rule_to_config
from .managers import (
    AlarmDiff,
    RegenerationPlan,
    RegenerationRateLimiter,
    UpcomingOccurrence,
    compute_alarm_diff,
    compute_upcoming_occurrences,
    next_regeneration_date,
    plan_regeneration,
)
from .models import (
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
    TimeUnit,
    Weekday,
    Weekdays,
    Window,
    Yearly,
)
from .utils.dt_utils import CalendarContext

__all__ = [
    "SCHEDULE_CONFIG_SCHEMA",
    "AlarmDiff",
    "AlarmHealth",
    "Biweekly",
    "CalendarContext",
    "Daily",
    "Every",
    "ExpansionCancelledError",
    "FirstOfMonth",
    "FirstWeekday",
    "FixedDay",
    "GenerationStrategy",
    "HealthStatus",
    "Hourly",
    "InvalidRuleError",
    "LastOfMonth",
    "LastWeekday",
    "Monthly",
    "MonthlyDay",
    "OneTime",
    "RecurrenceRule",
    "RegenerationPlan",
    "RegenerationRateLimiter",
    "ScheduleExpander",
    "TimeOfDay",
    "TimeUnit",
    "UpcomingOccurrence",
    "Weekday",
    "Weekdays",
    "Window",
    "Yearly",
    "compute_alarm_diff",
    "compute_upcoming_occurrences",
    "needs_regeneration",
    "next_regeneration_date",
    "plan_regeneration",
    "rule_from_config",
    "rule_to_config",
]
