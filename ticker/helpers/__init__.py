"""Helper modules for Ticker.

- config_helpers: voluptuous schemas and RecurrenceRule <-> mapping conversion
"""

from .config_helpers import SCHEDULE_CONFIG_SCHEMA, rule_from_config, rule_to_config

__all__ = ["SCHEDULE_CONFIG_SCHEMA", "rule_from_config", "rule_to_config"]
