# File: helpers/config_helpers.py
"""Configuration mapping helpers for Ticker.

Converts between the plain-data form of a rule (ScheduleConfig, as found in
JSON payloads and fixture files) and the RecurrenceRule model.

Examples:
    {"type": "daily", "time": "09:30"}
    {"type": "every", "interval": 5, "unit": "minutes", "time": "00:00"}
    {"type": "monthly", "monthly_day": {"kind": "last_weekday", "weekday": 5},
     "time": "18:00"}

Validation is done by voluptuous; every failure surfaces to callers as
InvalidRuleError so they only handle one exception type.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import date, datetime
from typing import Any

import voluptuous as vol

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
    TimeUnit,
    Weekday,
    Weekdays,
    Yearly,
)
from ..type_defs import MonthlyDayConfig, ScheduleConfig

# =============================================================================
# INPUT VALIDATORS
# =============================================================================


def validate_time_of_day(value: Any) -> TimeOfDay:
    """Coerce "HH:MM" (or a TimeOfDay) into a TimeOfDay.

    Raises:
        vol.Invalid: If format is invalid or value out of range
    """
    if isinstance(value, TimeOfDay):
        return value
    if not isinstance(value, str):
        raise vol.Invalid(f"Expected time as 'HH:MM', got {value!r}")
    try:
        return TimeOfDay.parse(value)
    except InvalidRuleError as err:
        raise vol.Invalid(str(err)) from err


def validate_aware_datetime(value: Any) -> datetime:
    """Coerce an ISO 8601 string (or datetime) into an aware datetime."""
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value)
        except ValueError as err:
            raise vol.Invalid(f"Invalid ISO datetime: {value!r}") from err
    if not isinstance(value, datetime):
        raise vol.Invalid(f"Expected an ISO datetime, got {value!r}")
    if value.tzinfo is None or value.utcoffset() is None:
        raise vol.Invalid(f"Datetime must include a UTC offset: {value.isoformat()}")
    return value


def validate_date(value: Any) -> date:
    """Coerce "YYYY-MM-DD" (or a date) into a date."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(value)
    except (TypeError, ValueError) as err:
        raise vol.Invalid(f"Invalid ISO date: {value!r}") from err


_WEEKDAY = vol.All(vol.Coerce(int), vol.Range(min=0, max=6))
_DAYS = vol.All([_WEEKDAY], vol.Length(min=1, msg="At least one weekday is required"))
_DAY_OF_MONTH = vol.All(vol.Coerce(int), vol.Range(min=1, max=31))


# ----------------------------------------------------------------------------------
# MONTHLY DAY SCHEMA
# ----------------------------------------------------------------------------------

MONTHLY_DAY_SCHEMAS: dict[str, vol.Schema] = {
    const.MONTHLY_DAY_FIXED: vol.Schema(
        {
            vol.Required(const.CONF_KIND): const.MONTHLY_DAY_FIXED,
            vol.Required(const.CONF_DAY): _DAY_OF_MONTH,
        }
    ),
    const.MONTHLY_DAY_FIRST_OF_MONTH: vol.Schema(
        {vol.Required(const.CONF_KIND): const.MONTHLY_DAY_FIRST_OF_MONTH}
    ),
    const.MONTHLY_DAY_LAST_OF_MONTH: vol.Schema(
        {vol.Required(const.CONF_KIND): const.MONTHLY_DAY_LAST_OF_MONTH}
    ),
    const.MONTHLY_DAY_FIRST_WEEKDAY: vol.Schema(
        {
            vol.Required(const.CONF_KIND): const.MONTHLY_DAY_FIRST_WEEKDAY,
            vol.Required(const.CONF_WEEKDAY): _WEEKDAY,
        }
    ),
    const.MONTHLY_DAY_LAST_WEEKDAY: vol.Schema(
        {
            vol.Required(const.CONF_KIND): const.MONTHLY_DAY_LAST_WEEKDAY,
            vol.Required(const.CONF_WEEKDAY): _WEEKDAY,
        }
    ),
}


def _dispatch(schemas: Mapping[str, vol.Schema], key: str) -> Any:
    """Build a validator that picks a schema by the value under `key`."""

    def validate(value: Any) -> Any:
        if not isinstance(value, Mapping):
            raise vol.Invalid(f"Expected a mapping, got {type(value).__name__}")
        kind = value.get(key)
        if not isinstance(kind, str) or kind not in schemas:
            raise vol.Invalid(
                f"Unknown {key} {kind!r}; expected one of {sorted(schemas)}",
                path=[key],
            )
        return schemas[kind](dict(value))

    return validate


MONTHLY_DAY_SCHEMA = vol.Schema(_dispatch(MONTHLY_DAY_SCHEMAS, const.CONF_KIND))


# ----------------------------------------------------------------------------------
# RULE SCHEMAS
# ----------------------------------------------------------------------------------

RULE_SCHEMAS: dict[str, vol.Schema] = {
    const.RULE_TYPE_ONE_TIME: vol.Schema(
        {
            vol.Required(const.CONF_TYPE): const.RULE_TYPE_ONE_TIME,
            vol.Required(const.CONF_AT): validate_aware_datetime,
        }
    ),
    const.RULE_TYPE_DAILY: vol.Schema(
        {
            vol.Required(const.CONF_TYPE): const.RULE_TYPE_DAILY,
            vol.Required(const.CONF_TIME): validate_time_of_day,
        }
    ),
    const.RULE_TYPE_HOURLY: vol.Schema(
        {
            vol.Required(const.CONF_TYPE): const.RULE_TYPE_HOURLY,
            vol.Required(const.CONF_INTERVAL): vol.All(
                vol.Coerce(int), vol.Range(min=1, max=const.HOURS_PER_DAY)
            ),
            vol.Required(const.CONF_TIME): validate_time_of_day,
        }
    ),
    const.RULE_TYPE_EVERY: vol.Schema(
        {
            vol.Required(const.CONF_TYPE): const.RULE_TYPE_EVERY,
            vol.Required(const.CONF_INTERVAL): vol.All(vol.Coerce(int), vol.Range(min=1)),
            vol.Required(const.CONF_UNIT): vol.In(const.TIME_UNIT_OPTIONS),
            vol.Required(const.CONF_TIME): validate_time_of_day,
        }
    ),
    const.RULE_TYPE_WEEKDAYS: vol.Schema(
        {
            vol.Required(const.CONF_TYPE): const.RULE_TYPE_WEEKDAYS,
            vol.Required(const.CONF_TIME): validate_time_of_day,
            vol.Required(const.CONF_DAYS): _DAYS,
        }
    ),
    const.RULE_TYPE_BIWEEKLY: vol.Schema(
        {
            vol.Required(const.CONF_TYPE): const.RULE_TYPE_BIWEEKLY,
            vol.Required(const.CONF_TIME): validate_time_of_day,
            vol.Required(const.CONF_DAYS): _DAYS,
            vol.Optional(const.CONF_ANCHOR_DATE): vol.Any(None, validate_date),
        }
    ),
    const.RULE_TYPE_MONTHLY: vol.Schema(
        {
            vol.Required(const.CONF_TYPE): const.RULE_TYPE_MONTHLY,
            vol.Required(const.CONF_MONTHLY_DAY): MONTHLY_DAY_SCHEMA,
            vol.Required(const.CONF_TIME): validate_time_of_day,
        }
    ),
    const.RULE_TYPE_YEARLY: vol.Schema(
        {
            vol.Required(const.CONF_TYPE): const.RULE_TYPE_YEARLY,
            vol.Required(const.CONF_MONTH): vol.All(
                vol.Coerce(int), vol.Range(min=1, max=const.MONTHS_PER_YEAR)
            ),
            vol.Required(const.CONF_DAY): _DAY_OF_MONTH,
            vol.Required(const.CONF_TIME): validate_time_of_day,
        }
    ),
}

SCHEDULE_CONFIG_SCHEMA = vol.Schema(_dispatch(RULE_SCHEMAS, const.CONF_TYPE))


# =============================================================================
# CONVERSION
# =============================================================================


def _monthly_day_from_config(config: Mapping[str, Any]) -> MonthlyDay:
    match config[const.CONF_KIND]:
        case const.MONTHLY_DAY_FIXED:
            return FixedDay(config[const.CONF_DAY])
        case const.MONTHLY_DAY_FIRST_OF_MONTH:
            return FirstOfMonth()
        case const.MONTHLY_DAY_LAST_OF_MONTH:
            return LastOfMonth()
        case const.MONTHLY_DAY_FIRST_WEEKDAY:
            return FirstWeekday(Weekday(config[const.CONF_WEEKDAY]))
        case _:
            return LastWeekday(Weekday(config[const.CONF_WEEKDAY]))


def rule_from_config(config: Mapping[str, Any]) -> RecurrenceRule:
    """Validate a configuration mapping and build its RecurrenceRule.

    Raises:
        InvalidRuleError: If the mapping fails validation.
    """
    try:
        data = SCHEDULE_CONFIG_SCHEMA(config)
    except vol.Invalid as err:
        const.LOGGER.debug("Rejected schedule config %s: %s", config, err)
        raise InvalidRuleError(f"Invalid schedule config: {err}") from err

    match data[const.CONF_TYPE]:
        case const.RULE_TYPE_ONE_TIME:
            return OneTime(data[const.CONF_AT])
        case const.RULE_TYPE_DAILY:
            return Daily(data[const.CONF_TIME])
        case const.RULE_TYPE_HOURLY:
            return Hourly(data[const.CONF_INTERVAL], data[const.CONF_TIME])
        case const.RULE_TYPE_EVERY:
            return Every(
                data[const.CONF_INTERVAL],
                TimeUnit(data[const.CONF_UNIT]),
                data[const.CONF_TIME],
            )
        case const.RULE_TYPE_WEEKDAYS:
            return Weekdays(data[const.CONF_TIME], frozenset(data[const.CONF_DAYS]))
        case const.RULE_TYPE_BIWEEKLY:
            return Biweekly(
                data[const.CONF_TIME],
                frozenset(data[const.CONF_DAYS]),
                data.get(const.CONF_ANCHOR_DATE),
            )
        case const.RULE_TYPE_MONTHLY:
            return Monthly(
                _monthly_day_from_config(data[const.CONF_MONTHLY_DAY]),
                data[const.CONF_TIME],
            )
        case _:
            return Yearly(
                data[const.CONF_MONTH], data[const.CONF_DAY], data[const.CONF_TIME]
            )


def _monthly_day_to_config(monthly_day: MonthlyDay) -> MonthlyDayConfig:
    match monthly_day:
        case FixedDay(day=day):
            return {const.CONF_KIND: const.MONTHLY_DAY_FIXED, const.CONF_DAY: day}
        case FirstOfMonth():
            return {const.CONF_KIND: const.MONTHLY_DAY_FIRST_OF_MONTH}
        case LastOfMonth():
            return {const.CONF_KIND: const.MONTHLY_DAY_LAST_OF_MONTH}
        case FirstWeekday(weekday=weekday):
            return {
                const.CONF_KIND: const.MONTHLY_DAY_FIRST_WEEKDAY,
                const.CONF_WEEKDAY: int(weekday),
            }
        case LastWeekday(weekday=weekday):
            return {
                const.CONF_KIND: const.MONTHLY_DAY_LAST_WEEKDAY,
                const.CONF_WEEKDAY: int(weekday),
            }
    raise InvalidRuleError(f"Unsupported monthly day: {monthly_day!r}")


def rule_to_config(rule: RecurrenceRule) -> ScheduleConfig:
    """Serialize a RecurrenceRule into a mapping accepted by rule_from_config."""
    match rule:
        case OneTime(at=at):
            return {const.CONF_TYPE: const.RULE_TYPE_ONE_TIME, const.CONF_AT: at.isoformat()}
        case Daily(time=time):
            return {const.CONF_TYPE: const.RULE_TYPE_DAILY, const.CONF_TIME: time.to_string()}
        case Hourly(interval_hours=interval, time=time):
            return {
                const.CONF_TYPE: const.RULE_TYPE_HOURLY,
                const.CONF_INTERVAL: interval,
                const.CONF_TIME: time.to_string(),
            }
        case Every(interval=interval, unit=unit, time=time):
            return {
                const.CONF_TYPE: const.RULE_TYPE_EVERY,
                const.CONF_INTERVAL: interval,
                const.CONF_UNIT: unit.value,
                const.CONF_TIME: time.to_string(),
            }
        case Weekdays(time=time, days=days):
            return {
                const.CONF_TYPE: const.RULE_TYPE_WEEKDAYS,
                const.CONF_TIME: time.to_string(),
                const.CONF_DAYS: sorted(int(day) for day in days),
            }
        case Biweekly(time=time, days=days, anchor_date=anchor_date):
            config: ScheduleConfig = {
                const.CONF_TYPE: const.RULE_TYPE_BIWEEKLY,
                const.CONF_TIME: time.to_string(),
                const.CONF_DAYS: sorted(int(day) for day in days),
            }
            if anchor_date is not None:
                config[const.CONF_ANCHOR_DATE] = anchor_date.isoformat()
            return config
        case Monthly(day=monthly_day, time=time):
            return {
                const.CONF_TYPE: const.RULE_TYPE_MONTHLY,
                const.CONF_MONTHLY_DAY: _monthly_day_to_config(monthly_day),
                const.CONF_TIME: time.to_string(),
            }
        case Yearly(month=month, day=day, time=time):
            return {
                const.CONF_TYPE: const.RULE_TYPE_YEARLY,
                const.CONF_MONTH: month,
                const.CONF_DAY: day,
                const.CONF_TIME: time.to_string(),
            }
    raise InvalidRuleError(f"Unsupported recurrence rule: {rule!r}")
