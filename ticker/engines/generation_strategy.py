"""Frequency-adaptive generation policy.

Each recurrence rule falls into one frequency class. The class decides how far
ahead occurrences are generated, how many are kept, and when the alarm set is
considered stale:

| Class  | window | max alarms | regeneration threshold | minimum alarms |
|--------|--------|------------|------------------------|----------------|
| HIGH   | 24h    | 100        | 12h                    | 20             |
| MEDIUM | 48h    | unlimited  | 24h                    | 12             |
| LOW    | 7d     | unlimited  | 3d                     | 3              |

The expander only reads window_duration and max_alarms; the thresholds are
consumed by health_engine and the regeneration manager.
"""

from __future__ import annotations

from datetime import timedelta
from enum import StrEnum

from .. import const
from ..models import (
    Biweekly,
    Daily,
    Every,
    Hourly,
    Monthly,
    OneTime,
    RecurrenceRule,
    TimeUnit,
    Weekdays,
    Yearly,
)


class GenerationStrategy(StrEnum):
    """Frequency class of a recurrence rule with its policy constants."""

    HIGH_FREQUENCY = const.STRATEGY_HIGH_FREQUENCY
    MEDIUM_FREQUENCY = const.STRATEGY_MEDIUM_FREQUENCY
    LOW_FREQUENCY = const.STRATEGY_LOW_FREQUENCY

    @property
    def window_duration(self) -> timedelta:
        """How far ahead of now occurrences are generated."""
        match self:
            case GenerationStrategy.HIGH_FREQUENCY:
                hours = const.HIGH_FREQUENCY_WINDOW_HOURS
            case GenerationStrategy.MEDIUM_FREQUENCY:
                hours = const.MEDIUM_FREQUENCY_WINDOW_HOURS
            case _:
                hours = const.LOW_FREQUENCY_WINDOW_HOURS
        return timedelta(hours=hours)

    @property
    def max_alarms(self) -> int | None:
        """Output cap, or None for unlimited."""
        match self:
            case GenerationStrategy.HIGH_FREQUENCY:
                return const.HIGH_FREQUENCY_MAX_ALARMS
            case GenerationStrategy.MEDIUM_FREQUENCY:
                return const.MEDIUM_FREQUENCY_MAX_ALARMS
            case _:
                return const.LOW_FREQUENCY_MAX_ALARMS

    @property
    def regeneration_threshold(self) -> timedelta:
        """Staleness after which alarms should be regenerated."""
        match self:
            case GenerationStrategy.HIGH_FREQUENCY:
                hours = const.HIGH_FREQUENCY_REGENERATION_THRESHOLD_HOURS
            case GenerationStrategy.MEDIUM_FREQUENCY:
                hours = const.MEDIUM_FREQUENCY_REGENERATION_THRESHOLD_HOURS
            case _:
                hours = const.LOW_FREQUENCY_REGENERATION_THRESHOLD_HOURS
        return timedelta(hours=hours)

    @property
    def minimum_alarm_count(self) -> int:
        """Pending alarm count below which alarms should be regenerated."""
        match self:
            case GenerationStrategy.HIGH_FREQUENCY:
                return const.HIGH_FREQUENCY_MINIMUM_ALARM_COUNT
            case GenerationStrategy.MEDIUM_FREQUENCY:
                return const.MEDIUM_FREQUENCY_MINIMUM_ALARM_COUNT
            case _:
                return const.LOW_FREQUENCY_MINIMUM_ALARM_COUNT

    @property
    def display_name(self) -> str:
        match self:
            case GenerationStrategy.HIGH_FREQUENCY:
                return "High Frequency"
            case GenerationStrategy.MEDIUM_FREQUENCY:
                return "Medium Frequency"
            case _:
                return "Low Frequency"

    @property
    def description(self) -> str:
        match self:
            case GenerationStrategy.HIGH_FREQUENCY:
                return "Every few minutes (24h window, max 100 alarms)"
            case GenerationStrategy.MEDIUM_FREQUENCY:
                return "Hourly (48h window, unlimited)"
            case _:
                return "Daily or less (7-day window, unlimited)"

    @classmethod
    def classify(cls, rule: RecurrenceRule) -> GenerationStrategy:
        """Map a recurrence rule to its frequency class.

        Examples:
            Every(30, MINUTES) -> HIGH_FREQUENCY
            Hourly(2) -> MEDIUM_FREQUENCY
            Hourly(4) -> LOW_FREQUENCY
        """
        match rule:
            case Hourly(interval_hours=hours):
                return cls._classify_hours(hours)
            case Every(interval=interval, unit=TimeUnit.MINUTES):
                if interval <= const.HIGH_FREQUENCY_MAX_MINUTE_INTERVAL:
                    return cls.HIGH_FREQUENCY
                return cls.MEDIUM_FREQUENCY
            case Every(interval=interval, unit=TimeUnit.HOURS):
                return cls._classify_hours(interval)
            case Every():
                return cls.LOW_FREQUENCY
            case OneTime() | Daily() | Weekdays() | Biweekly() | Monthly() | Yearly():
                return cls.LOW_FREQUENCY
            case _:
                raise ValueError(f"Cannot classify recurrence rule: {rule!r}")

    @classmethod
    def _classify_hours(cls, hours: int) -> GenerationStrategy:
        if hours <= const.MEDIUM_FREQUENCY_MAX_HOUR_INTERVAL:
            return cls.MEDIUM_FREQUENCY
        return cls.LOW_FREQUENCY
