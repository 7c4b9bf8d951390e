"""Unit tests for engines/health_engine.py.

Tests AlarmHealth status precedence, user-facing messages and the
needs_regeneration triggers. Factories that read the clock are tested with
freezegun.
"""

from datetime import UTC, datetime, timedelta
from zoneinfo import ZoneInfo

from freezegun import freeze_time
import pytest

from ticker.engines.generation_strategy import GenerationStrategy
from ticker.engines.health_engine import AlarmHealth, HealthStatus, needs_regeneration

# =============================================================================
# Test Helpers
# =============================================================================


def make_utc_dt(
    year: int, month: int, day: int, hour: int = 0, minute: int = 0
) -> datetime:
    """Create a UTC datetime for testing."""
    return datetime(year, month, day, hour, minute, tzinfo=UTC)


NOW = make_utc_dt(2025, 1, 15, 12)


def healthy_since(hours: float, alarm_count: int = 5) -> AlarmHealth:
    return AlarmHealth.healthy(alarm_count, now=NOW - timedelta(hours=hours))


# =============================================================================
# HealthStatus
# =============================================================================


class TestHealthStatus:
    """Display attributes."""

    @pytest.mark.parametrize(
        ("status", "icon", "color"),
        [
            (HealthStatus.HEALTHY, "checkmark.circle.fill", "green"),
            (HealthStatus.WARNING, "exclamationmark.triangle.fill", "orange"),
            (HealthStatus.CRITICAL, "xmark.circle.fill", "red"),
        ],
    )
    def test_icon_and_color(self, status: HealthStatus, icon: str, color: str) -> None:
        assert status.icon == icon
        assert status.color == color


# =============================================================================
# Factories
# =============================================================================


class TestFactories:
    """initial / healthy / failed."""

    def test_initial(self) -> None:
        health = AlarmHealth.initial()
        assert health.last_regeneration_date is None
        assert health.last_regeneration_success is False
        assert health.active_alarm_count == 0

    @freeze_time("2025-01-15 12:00:00", tz_offset=0)
    def test_healthy_defaults_to_now(self) -> None:
        health = AlarmHealth.healthy(7)
        assert health.last_regeneration_date == NOW
        assert health.last_regeneration_success is True
        assert health.active_alarm_count == 7

    @freeze_time("2025-01-15 12:00:00", tz_offset=0)
    def test_failed_keeps_previous_count(self) -> None:
        previous = healthy_since(30, alarm_count=4)
        health = AlarmHealth.failed(previous)
        assert health.last_regeneration_date == NOW
        assert health.last_regeneration_success is False
        assert health.active_alarm_count == 4

    def test_explicit_now(self) -> None:
        at = make_utc_dt(2025, 1, 1, 6)
        assert AlarmHealth.healthy(1, now=at).last_regeneration_date == at


# =============================================================================
# Status precedence
# =============================================================================


class TestStatus:
    """First matching rule wins."""

    def test_never_regenerated_is_critical(self) -> None:
        health = AlarmHealth.initial()
        assert health.status(NOW) is HealthStatus.CRITICAL
        assert health.status_message(NOW) == "Alarms need to be configured"

    def test_failed_is_critical_even_when_fresh(self) -> None:
        health = AlarmHealth.failed(healthy_since(1), now=NOW)
        assert health.status(NOW) is HealthStatus.CRITICAL
        assert health.status_message(NOW) == "Last alarm update failed"

    def test_no_alarms_is_critical(self) -> None:
        health = healthy_since(1, alarm_count=0)
        assert health.status(NOW) is HealthStatus.CRITICAL
        assert health.status_message(NOW) == "No alarms are scheduled"

    def test_fresh_is_healthy(self) -> None:
        health = healthy_since(2)
        assert health.status(NOW) is HealthStatus.HEALTHY
        assert health.status_message(NOW) == "All alarms are up to date"

    def test_exactly_24_hours_is_still_healthy(self) -> None:
        assert healthy_since(24).status(NOW) is HealthStatus.HEALTHY

    def test_over_24_hours_is_warning(self) -> None:
        health = healthy_since(30)
        assert health.status(NOW) is HealthStatus.WARNING
        assert health.status_message(NOW) == "Alarms haven't been updated in 1 day"

    def test_exactly_48_hours_is_warning(self) -> None:
        assert healthy_since(48).status(NOW) is HealthStatus.WARNING

    def test_over_48_hours_is_critical(self) -> None:
        health = healthy_since(49)
        assert health.status(NOW) is HealthStatus.CRITICAL
        assert health.status_message(NOW) == "Alarms are critically out of date"

    def test_staleness(self) -> None:
        assert AlarmHealth.initial().staleness(NOW) is None
        assert healthy_since(3).staleness(NOW) == timedelta(hours=3)

    def test_staleness_is_elapsed_across_fall_back(self, new_york_tz: ZoneInfo) -> None:
        # 01:30 EDT (05:30Z) and 01:30 EST (06:30Z) share a wall clock
        last = datetime(2025, 11, 2, 1, 30, tzinfo=new_york_tz)
        now = datetime(2025, 11, 2, 1, 30, fold=1, tzinfo=new_york_tz)
        assert AlarmHealth.healthy(5, now=last).staleness(now) == timedelta(hours=1)


# =============================================================================
# Detail strings
# =============================================================================


class TestDetailStrings:
    """Settings-screen detail lines."""

    def test_detailed_status_healthy(self) -> None:
        assert healthy_since(2).detailed_status(NOW) == (
            "Last updated: 2 hours ago • 5 alarms scheduled"
        )

    def test_detailed_status_single_alarm(self) -> None:
        assert healthy_since(0, alarm_count=1).detailed_status(NOW) == (
            "Last updated: Just now • 1 alarm scheduled"
        )

    def test_detailed_status_failed(self) -> None:
        health = AlarmHealth.failed(healthy_since(5, alarm_count=3), now=NOW)
        assert health.detailed_status(NOW) == (
            "Last updated: Just now • 3 alarms scheduled • Last update failed"
        )

    def test_detailed_status_never(self) -> None:
        assert AlarmHealth.initial().detailed_status(NOW) == (
            "Never updated • 0 alarms scheduled • Last update failed"
        )

    def test_last_updated_description(self) -> None:
        assert AlarmHealth.initial().last_updated_description(NOW) == "Never"
        assert healthy_since(72).last_updated_description(NOW) == "3 days ago"


# =============================================================================
# needs_regeneration
# =============================================================================


class TestNeedsRegeneration:
    """Regeneration triggers."""

    @staticmethod
    def _check(**overrides) -> bool:
        kwargs = {
            "is_enabled": True,
            "last_regeneration_date": NOW - timedelta(hours=1),
            "last_regeneration_success": True,
            "strategy": GenerationStrategy.LOW_FREQUENCY,
            "now": NOW,
        }
        kwargs.update(overrides)
        return needs_regeneration(**kwargs)

    def test_fresh_success_needs_nothing(self) -> None:
        assert self._check() is False

    def test_disabled_never_regenerates(self) -> None:
        assert self._check(is_enabled=False, last_regeneration_date=None) is False

    def test_never_regenerated(self) -> None:
        assert self._check(last_regeneration_date=None) is True

    def test_last_attempt_failed(self) -> None:
        assert self._check(last_regeneration_success=False) is True

    def test_staleness_over_threshold(self) -> None:
        # HIGH threshold is 12h, LOW threshold is 3 days
        stale = NOW - timedelta(hours=13)
        assert self._check(
            last_regeneration_date=stale,
            strategy=GenerationStrategy.HIGH_FREQUENCY,
        ) is True
        assert self._check(last_regeneration_date=stale) is False

    def test_scheduled_time_reached(self) -> None:
        assert self._check(next_scheduled_regeneration=NOW) is True
        assert self._check(
            next_scheduled_regeneration=NOW + timedelta(minutes=1)
        ) is False

    def test_low_alarm_count(self) -> None:
        assert self._check(
            strategy=GenerationStrategy.HIGH_FREQUENCY, active_alarm_count=19
        ) is True
        assert self._check(
            strategy=GenerationStrategy.HIGH_FREQUENCY, active_alarm_count=20
        ) is False
        assert self._check(active_alarm_count=2) is True
