"""Occurrence Manager - Upcoming occurrences across many tickers.

Feeds "what rings next" views (today list, widgets): every rule is expanded
over the same window starting at `now`, the results are merged and sorted.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timedelta

from .. import const
from ..engines.schedule_engine import ScheduleExpander
from ..models import RecurrenceRule, Window
from ..type_defs import RuleId
from ..utils import dt_utils


@dataclass(frozen=True, slots=True)
class UpcomingOccurrence:
    """One upcoming occurrence of one rule."""

    rule_id: RuleId
    at: datetime
    rule: RecurrenceRule


def compute_upcoming_occurrences(
    rules: Mapping[RuleId, RecurrenceRule],
    now: datetime,
    *,
    within_hours: int = const.DEFAULT_UPCOMING_WINDOW_HOURS,
    limit: int | None = None,
    expander: ScheduleExpander | None = None,
) -> list[UpcomingOccurrence]:
    """Return upcoming occurrences of all rules within the next hours.

    Args:
        rules: Rule id -> rule (enabled tickers only; filtering is the caller's)
        now: Window start
        within_hours: Window length in hours
        limit: Keep only the earliest `limit` occurrences; None keeps all
        expander: Expander to use; None builds one on the current calendar

    Returns:
        Occurrences over [now, now + within_hours], sorted by instant then
        rule id. Empty when the window overflows.
    """
    if within_hours < 0:
        raise ValueError(f"within_hours must be >= 0, got {within_hours}")
    if limit is not None and limit < 0:
        raise ValueError(f"limit must be >= 0, got {limit}")

    window = Window.from_duration(now, timedelta(hours=within_hours))
    if window is None:
        return []
    if expander is None:
        expander = ScheduleExpander()

    upcoming = [
        UpcomingOccurrence(rule_id=rule_id, at=at, rule=rule)
        for rule_id, rule in rules.items()
        for at in expander.expand(rule, window)
    ]
    upcoming.sort(key=lambda item: (dt_utils.utc_sort_key(item.at), item.rule_id))

    const.LOGGER.debug(
        "Upcoming occurrences: %d rule(s), %d occurrence(s) in next %dh",
        len(rules),
        len(upcoming),
        within_hours,
    )
    if limit is not None:
        return upcoming[:limit]
    return upcoming
