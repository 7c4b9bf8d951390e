# File: utils/__init__.py
"""Pure Python utilities for Ticker.

Nothing in this package imports from the rest of ticker, so all functions
can be unit tested in isolation.

Submodules:
    - dt_utils: Calendar context, date construction, week/month math,
      interval stepping and duration formatting

Usage:
    from .utils import dt_utils
    from .utils.dt_utils import CalendarContext
"""

from . import dt_utils

__all__ = ["dt_utils"]
