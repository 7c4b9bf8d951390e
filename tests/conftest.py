"""Shared fixtures for Ticker tests."""

from collections.abc import Iterator
from zoneinfo import ZoneInfo

import pytest

from ticker.engines.schedule_engine import ScheduleExpander
from ticker.utils import dt_utils
from ticker.utils.dt_utils import CalendarContext

UTC_TZ = ZoneInfo("UTC")
BERLIN_TZ = ZoneInfo("Europe/Berlin")
NEW_YORK_TZ = ZoneInfo("America/New_York")


@pytest.fixture
def utc_tz() -> ZoneInfo:
    """Return UTC timezone."""
    return UTC_TZ


@pytest.fixture
def berlin_tz() -> ZoneInfo:
    """Return Europe/Berlin (DST: last Sunday of March / October)."""
    return BERLIN_TZ


@pytest.fixture
def new_york_tz() -> ZoneInfo:
    """Return America/New_York (DST: second Sunday of March / first of November)."""
    return NEW_YORK_TZ


@pytest.fixture
def utc_expander() -> ScheduleExpander:
    """Expander reading wall-clock times in UTC."""
    return ScheduleExpander(CalendarContext(UTC_TZ))


@pytest.fixture
def berlin_expander() -> ScheduleExpander:
    """Expander reading wall-clock times in Europe/Berlin."""
    return ScheduleExpander(CalendarContext(BERLIN_TZ))


@pytest.fixture
def restore_default_timezone() -> Iterator[None]:
    """Put dt_utils.DEFAULT_TIME_ZONE back after a test changes it."""
    original = dt_utils.get_default_timezone()
    yield
    dt_utils.set_default_timezone(original)


@pytest.fixture
def new_york_expander() -> ScheduleExpander:
    """Expander reading wall-clock times in America/New_York."""
    return ScheduleExpander(CalendarContext(NEW_YORK_TZ))
