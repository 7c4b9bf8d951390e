"""Health Engine - Pure logic for alarm freshness and regeneration decisions.

Answers two questions about the alarms registered for a ticker:
- How healthy is the current alarm set? (AlarmHealth.status)
- Should the alarms be regenerated now? (needs_regeneration)

ARCHITECTURE: Pure logic, no clocks read implicitly. Every time-dependent
method takes `now` explicitly, except the `healthy`/`failed` factories which
default to dt_now_utc() when no `now` is passed. State (the last
regeneration record) is owned by the caller and passed in.

Status precedence (first match wins):
1. Never regenerated -> CRITICAL
2. Last regeneration failed -> CRITICAL
3. No active alarms -> CRITICAL
4. Stale for more than 48 hours -> CRITICAL
5. Stale for more than 24 hours -> WARNING
6. Otherwise -> HEALTHY
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import StrEnum

from .. import const
from ..utils import dt_utils
from .generation_strategy import GenerationStrategy


class HealthStatus(StrEnum):
    """Overall health of a ticker's alarm set."""

    HEALTHY = const.HEALTH_STATUS_HEALTHY
    WARNING = const.HEALTH_STATUS_WARNING
    CRITICAL = const.HEALTH_STATUS_CRITICAL

    @property
    def icon(self) -> str:
        match self:
            case HealthStatus.HEALTHY:
                return "checkmark.circle.fill"
            case HealthStatus.WARNING:
                return "exclamationmark.triangle.fill"
            case _:
                return "xmark.circle.fill"

    @property
    def color(self) -> str:
        match self:
            case HealthStatus.HEALTHY:
                return "green"
            case HealthStatus.WARNING:
                return "orange"
            case _:
                return "red"


_WARNING_STALENESS = timedelta(hours=const.HEALTH_WARNING_STALENESS_HOURS)
_CRITICAL_STALENESS = timedelta(hours=const.HEALTH_CRITICAL_STALENESS_HOURS)


@dataclass(frozen=True, slots=True)
class AlarmHealth:
    """Snapshot of the last alarm regeneration for one ticker."""

    last_regeneration_date: datetime | None = None
    last_regeneration_success: bool = False
    active_alarm_count: int = 0

    # =========================================================================
    # Factories
    # =========================================================================

    @classmethod
    def initial(cls) -> AlarmHealth:
        """Health of a ticker whose alarms were never generated."""
        return cls()

    @classmethod
    def healthy(cls, alarm_count: int, now: datetime | None = None) -> AlarmHealth:
        """Health after a successful regeneration."""
        return cls(
            last_regeneration_date=now or dt_utils.dt_now_utc(),
            last_regeneration_success=True,
            active_alarm_count=alarm_count,
        )

    @classmethod
    def failed(cls, previous: AlarmHealth, now: datetime | None = None) -> AlarmHealth:
        """Health after a failed regeneration; keeps the previous alarm count."""
        return cls(
            last_regeneration_date=now or dt_utils.dt_now_utc(),
            last_regeneration_success=False,
            active_alarm_count=previous.active_alarm_count,
        )

    # =========================================================================
    # Status
    # =========================================================================

    def staleness(self, now: datetime) -> timedelta | None:
        """Time since the last regeneration, None when never regenerated."""
        if self.last_regeneration_date is None:
            return None
        return dt_utils.as_utc(now) - dt_utils.as_utc(self.last_regeneration_date)

    def status(self, now: datetime) -> HealthStatus:
        if self.last_regeneration_date is None:
            return HealthStatus.CRITICAL
        if not self.last_regeneration_success:
            return HealthStatus.CRITICAL
        if self.active_alarm_count <= 0:
            return HealthStatus.CRITICAL

        staleness = self.staleness(now)
        if staleness is not None and staleness > _CRITICAL_STALENESS:
            return HealthStatus.CRITICAL
        if staleness is not None and staleness > _WARNING_STALENESS:
            return HealthStatus.WARNING
        return HealthStatus.HEALTHY

    def status_message(self, now: datetime) -> str:
        """User-facing one-line summary of the status."""
        staleness = self.staleness(now)
        match self.status(now):
            case HealthStatus.HEALTHY:
                return "All alarms are up to date"
            case HealthStatus.WARNING:
                if staleness is not None:
                    return (
                        "Alarms haven't been updated in "
                        f"{dt_utils.dt_format_duration(staleness)}"
                    )
                return "Some alarms may need attention"
            case _:
                if self.last_regeneration_date is None:
                    return "Alarms need to be configured"
                if not self.last_regeneration_success:
                    return "Last alarm update failed"
                if self.active_alarm_count <= 0:
                    return "No alarms are scheduled"
                return "Alarms are critically out of date"

    def detailed_status(self, now: datetime) -> str:
        """Settings-screen detail line, e.g. "Last updated: 2 hours ago • 5 alarms scheduled"."""
        details: list[str] = []
        if self.last_regeneration_date is not None:
            details.append(f"Last updated: {self.last_updated_description(now)}")
        else:
            details.append("Never updated")

        plural = "" if self.active_alarm_count == 1 else "s"
        details.append(f"{self.active_alarm_count} alarm{plural} scheduled")

        if not self.last_regeneration_success:
            details.append("Last update failed")
        return " • ".join(details)

    def last_updated_description(self, now: datetime) -> str:
        staleness = self.staleness(now)
        if staleness is None:
            return "Never"
        return dt_utils.dt_format_ago(staleness)


# =============================================================================
# Regeneration decision
# =============================================================================


def needs_regeneration(
    *,
    is_enabled: bool,
    last_regeneration_date: datetime | None,
    last_regeneration_success: bool,
    strategy: GenerationStrategy,
    now: datetime,
    next_scheduled_regeneration: datetime | None = None,
    active_alarm_count: int | None = None,
) -> bool:
    """Decide whether a ticker's alarms should be regenerated now.

    Args:
        is_enabled: Disabled tickers never regenerate
        last_regeneration_date: When alarms were last (re)generated, or None
        last_regeneration_success: Whether that attempt succeeded
        strategy: Frequency class of the ticker's rule
        now: Current instant
        next_scheduled_regeneration: Planned next regeneration, if any
        active_alarm_count: Pending alarms still registered, if known

    Returns:
        True when any trigger fires: never regenerated, last attempt failed,
        staleness above strategy.regeneration_threshold, scheduled time
        reached, or fewer pending alarms than strategy.minimum_alarm_count.
    """
    if not is_enabled:
        return False

    if last_regeneration_date is None:
        const.LOGGER.debug("Regeneration needed: never regenerated")
        return True

    if not last_regeneration_success:
        const.LOGGER.debug("Regeneration needed: last attempt failed")
        return True

    now_utc = dt_utils.as_utc(now)
    staleness = now_utc - dt_utils.as_utc(last_regeneration_date)
    if staleness > strategy.regeneration_threshold:
        const.LOGGER.debug(
            "Regeneration needed: stale for %s (threshold %s)",
            staleness,
            strategy.regeneration_threshold,
        )
        return True

    if (
        next_scheduled_regeneration is not None
        and now_utc >= dt_utils.as_utc(next_scheduled_regeneration)
    ):
        const.LOGGER.debug(
            "Regeneration needed: scheduled time %s reached",
            next_scheduled_regeneration.isoformat(),
        )
        return True

    if active_alarm_count is not None and active_alarm_count < strategy.minimum_alarm_count:
        const.LOGGER.debug(
            "Regeneration needed: %d pending alarm(s), minimum %d",
            active_alarm_count,
            strategy.minimum_alarm_count,
        )
        return True

    return False
