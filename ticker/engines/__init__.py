"""Engine modules for Ticker.

Contains pure computation engines:
- generation_strategy: Frequency classes and their policy constants
- schedule_engine: Recurrence expansion over a window
- health_engine: Alarm health status and regeneration decisions
"""

# Use relative imports within package to avoid mypy module resolution issues
from .generation_strategy import GenerationStrategy
from .health_engine import AlarmHealth, HealthStatus, needs_regeneration
from .schedule_engine import ExpansionCancelledError, ScheduleExpander

__all__ = [
    "AlarmHealth",
    "ExpansionCancelledError",
    "GenerationStrategy",
    "HealthStatus",
    "ScheduleExpander",
    "needs_regeneration",
]
