"""Manager modules for Ticker.

Managers coordinate engines into workflows callers run as one step.
"""

from .occurrence_manager import UpcomingOccurrence, compute_upcoming_occurrences
from .regeneration_manager import (
    AlarmDiff,
    RegenerationPlan,
    RegenerationRateLimiter,
    compute_alarm_diff,
    next_regeneration_date,
    plan_regeneration,
)

__all__ = [
    "AlarmDiff",
    "RegenerationPlan",
    "RegenerationRateLimiter",
    "UpcomingOccurrence",
    "compute_alarm_diff",
    "compute_upcoming_occurrences",
    "next_regeneration_date",
    "plan_regeneration",
]
