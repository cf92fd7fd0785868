"""Pure helpers for picking upcoming contests out of the feed."""

import datetime
from collections.abc import Iterable

from atcoder_notifier.classes.contest import Contest


def _sort_key(contest: Contest) -> tuple[datetime.datetime, str]:
    return contest.start_time, contest.id


def select_upcoming(contests: Iterable[Contest], now: datetime.datetime) -> list[Contest]:
    """Contests starting strictly after now, earliest first (ties by id)."""
    return sorted((c for c in contests if c.start_time > now), key=_sort_key)


def limit_contests(contests: list[Contest], max_items: int) -> list[Contest]:
    if max_items <= 0:
        return list(contests)
    return contests[:max_items]
