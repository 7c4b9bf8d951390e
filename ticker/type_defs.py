"""Type definitions for Ticker configuration mappings.

TypedDict is used for the plain-data shapes that cross the package boundary
(rules described in configuration files, JSON payloads, fixtures). The
runtime model lives in models.py as frozen dataclasses; these types only
describe the mapping form accepted by helpers.config_helpers.

IMPORTANT: This file must NOT import from engines/ or managers/ to avoid
circular dependencies. Only typing machinery is imported here.

NOTE: TypedDict is STATIC ANALYSIS ONLY. Runtime validation is done by the
voluptuous schema in helpers/config_helpers.py.
"""

from typing import NotRequired, TypedDict

# =============================================================================
# Type Aliases (for readability)
# =============================================================================

RuleId = str  # Caller-owned identifier, usually a UUID string
AlarmId = str  # Identifier of a registered alarm instance
ISODatetime = str  # ISO 8601 datetime string "2026-01-18T12:30:00+00:00"
ISODate = str  # ISO 8601 date string (no time) "2026-01-18"
TimeString = str  # "HH:MM" 24-hour wall-clock time


# =============================================================================
# Configuration Mappings
# =============================================================================


class MonthlyDayConfig(TypedDict):
    """Mapping form of a MonthlyDay variant.

    kind is one of const.MONTHLY_DAY_*. `day` is required for "fixed",
    `weekday` (0=Sun..6=Sat) for "first_weekday" / "last_weekday".
    """

    kind: str
    day: NotRequired[int]
    weekday: NotRequired[int]


class ScheduleConfig(TypedDict, total=False):
    """Mapping form of a RecurrenceRule.

    All fields except `type` are optional at the type level; which ones are
    required depends on the rule type and is enforced by the schema.
    """

    type: str  # RULE_TYPE_* constant from const.py
    at: ISODatetime  # one_time: aware instant
    time: TimeString  # every other type: wall-clock time
    interval: int  # hourly / every
    unit: str  # every: TIME_UNIT_* constant
    days: list[int]  # weekdays / biweekly: 0=Sun..6=Sat
    anchor_date: ISODate  # biweekly: fixed anchor week (optional)
    monthly_day: MonthlyDayConfig  # monthly
    month: int  # yearly: 1-12
    day: int  # yearly: 1-31
