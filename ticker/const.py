# File: const.py
"""Constants for the Ticker schedule engine.

This file centralizes configuration keys, time units, weekday ordinals,
and generation policy values so the engines, managers and
helpers share one vocabulary.
"""

import logging

# ------------------------------------------------------------------------------------------------
# General
# ------------------------------------------------------------------------------------------------
LOGGER = logging.getLogger(__package__)

# ------------------------------------------------------------------------------------------------
# Time Units
# ------------------------------------------------------------------------------------------------
TIME_UNIT_MINUTES = "minutes"
TIME_UNIT_HOURS = "hours"
TIME_UNIT_DAYS = "days"
TIME_UNIT_WEEKS = "weeks"

TIME_UNIT_OPTIONS = [
    TIME_UNIT_MINUTES,
    TIME_UNIT_HOURS,
    TIME_UNIT_DAYS,
    TIME_UNIT_WEEKS,
]

MINUTES_PER_HOUR = 60
HOURS_PER_DAY = 24
MINUTES_PER_DAY = MINUTES_PER_HOUR * HOURS_PER_DAY
DAYS_PER_WEEK = 7
MONTHS_PER_YEAR = 12

# ------------------------------------------------------------------------------------------------
# Weekdays (Sunday=0 .. Saturday=6)
# ------------------------------------------------------------------------------------------------
WEEKDAY_SUNDAY = 0
WEEKDAY_MONDAY = 1
WEEKDAY_TUESDAY = 2
WEEKDAY_WEDNESDAY = 3
WEEKDAY_THURSDAY = 4
WEEKDAY_FRIDAY = 5
WEEKDAY_SATURDAY = 6

WEEKDAY_NAMES = [
    "Sunday",
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
]
WEEKDAY_SHORT_NAMES = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]

MONTH_SHORT_NAMES = [
    "Jan",
    "Feb",
    "Mar",
    "Apr",
    "May",
    "Jun",
    "Jul",
    "Aug",
    "Sep",
    "Oct",
    "Nov",
    "Dec",
]

# ------------------------------------------------------------------------------------------------
# Rule Types (configuration mapping values)
# ------------------------------------------------------------------------------------------------
RULE_TYPE_ONE_TIME = "one_time"
RULE_TYPE_DAILY = "daily"
RULE_TYPE_HOURLY = "hourly"
RULE_TYPE_EVERY = "every"
RULE_TYPE_WEEKDAYS = "weekdays"
RULE_TYPE_BIWEEKLY = "biweekly"
RULE_TYPE_MONTHLY = "monthly"
RULE_TYPE_YEARLY = "yearly"

RULE_TYPE_OPTIONS = [
    RULE_TYPE_ONE_TIME,
    RULE_TYPE_DAILY,
    RULE_TYPE_HOURLY,
    RULE_TYPE_EVERY,
    RULE_TYPE_WEEKDAYS,
    RULE_TYPE_BIWEEKLY,
    RULE_TYPE_MONTHLY,
    RULE_TYPE_YEARLY,
]

MONTHLY_DAY_FIXED = "fixed"
MONTHLY_DAY_FIRST_OF_MONTH = "first_of_month"
MONTHLY_DAY_LAST_OF_MONTH = "last_of_month"
MONTHLY_DAY_FIRST_WEEKDAY = "first_weekday"
MONTHLY_DAY_LAST_WEEKDAY = "last_weekday"

MONTHLY_DAY_OPTIONS = [
    MONTHLY_DAY_FIXED,
    MONTHLY_DAY_FIRST_OF_MONTH,
    MONTHLY_DAY_LAST_OF_MONTH,
    MONTHLY_DAY_FIRST_WEEKDAY,
    MONTHLY_DAY_LAST_WEEKDAY,
]

# ------------------------------------------------------------------------------------------------
# Configuration Mapping Keys
# ------------------------------------------------------------------------------------------------
CONF_TYPE = "type"
CONF_TIME = "time"
CONF_AT = "at"
CONF_INTERVAL = "interval"
CONF_UNIT = "unit"
CONF_DAYS = "days"
CONF_ANCHOR_DATE = "anchor_date"
CONF_MONTHLY_DAY = "monthly_day"
CONF_KIND = "kind"
CONF_DAY = "day"
CONF_WEEKDAY = "weekday"
CONF_MONTH = "month"

# ------------------------------------------------------------------------------------------------
# Generation Strategies
# ------------------------------------------------------------------------------------------------
STRATEGY_HIGH_FREQUENCY = "high_frequency"
STRATEGY_MEDIUM_FREQUENCY = "medium_frequency"
STRATEGY_LOW_FREQUENCY = "low_frequency"

# Window durations (hours)
HIGH_FREQUENCY_WINDOW_HOURS = 24
MEDIUM_FREQUENCY_WINDOW_HOURS = 48
LOW_FREQUENCY_WINDOW_HOURS = 7 * 24

# Output caps (None = unlimited)
HIGH_FREQUENCY_MAX_ALARMS = 100
MEDIUM_FREQUENCY_MAX_ALARMS = None
LOW_FREQUENCY_MAX_ALARMS = None

# Regeneration thresholds (hours before window end)
HIGH_FREQUENCY_REGENERATION_THRESHOLD_HOURS = 12
MEDIUM_FREQUENCY_REGENERATION_THRESHOLD_HOURS = 24
LOW_FREQUENCY_REGENERATION_THRESHOLD_HOURS = 3 * 24

# Minimum pending alarm counts
HIGH_FREQUENCY_MINIMUM_ALARM_COUNT = 20
MEDIUM_FREQUENCY_MINIMUM_ALARM_COUNT = 12
LOW_FREQUENCY_MINIMUM_ALARM_COUNT = 3

# Classification boundaries
HIGH_FREQUENCY_MAX_MINUTE_INTERVAL = 30
MEDIUM_FREQUENCY_MAX_HOUR_INTERVAL = 3

# ------------------------------------------------------------------------------------------------
# Health / Regeneration
# ------------------------------------------------------------------------------------------------
HEALTH_STATUS_HEALTHY = "healthy"
HEALTH_STATUS_WARNING = "warning"
HEALTH_STATUS_CRITICAL = "critical"

HEALTH_WARNING_STALENESS_HOURS = 24
HEALTH_CRITICAL_STALENESS_HOURS = 48

REGENERATION_MIN_INTERVAL_SECONDS = 3600

# ------------------------------------------------------------------------------------------------
# Upcoming Occurrences
# ------------------------------------------------------------------------------------------------
DEFAULT_UPCOMING_WINDOW_HOURS = 24
