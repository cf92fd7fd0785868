"""One fetch -> diff -> notify -> persist pass over the contests feed."""

from __future__ import annotations

import datetime
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Protocol

from atcoder_notifier.bot.botinterface import BotInterface
from atcoder_notifier.classes.contest import Contest
from atcoder_notifier.classes.seen_store import SeenSet, SeenStore
from atcoder_notifier.config import Settings
from atcoder_notifier.errors import FetchError, LoadError, NotifyError, SaveError
from atcoder_notifier.feed.fetch import FeedClient
from atcoder_notifier.feed.upcoming import limit_contests, select_upcoming
from atcoder_notifier.notifier import Notifier

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime.datetime]


def utc_now() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


class ContestFeed(Protocol):
    def fetch(self) -> list[Contest]: ...


class SeenSetStore(Protocol):
    def load(self) -> SeenSet: ...

    def save(self, seen: SeenSet) -> None: ...


class ContestNotifier(Protocol):
    def notify(self, contest: Contest) -> None: ...


def fetch_upcoming(feed: ContestFeed, now: datetime.datetime, limit: int | None = None) -> list[Contest]:
    """Fetch and filter upcoming contests without touching the seen-set.

    FetchError propagates to the caller.
    """
    upcoming = select_upcoming(feed.fetch(), now)
    if limit is not None:
        upcoming = limit_contests(upcoming, limit)
    return upcoming


@dataclass
class CycleResult:
    started_at: datetime.datetime
    fetched: int = 0
    notified: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    saved: bool = False
    aborted: bool = False
    error: str | None = None

    def summary(self) -> str:
        if self.aborted:
            return f"aborted ({self.error})"
        text = f"{len(self.notified)} announced"
        if self.failed:
            text += f", {len(self.failed)} failed"
        return text


class NotificationCycle:
    """Announce contests that appeared in the feed since the last cycle.

    Callers must not run two cycles at once; the seen-set is read and
    rewritten without locking.
    """

    def __init__(
        self,
        feed: ContestFeed,
        store: SeenSetStore,
        notifier: ContestNotifier,
        clock: Clock = utc_now,
    ) -> None:
        self.feed = feed
        self.store = store
        self.notifier = notifier
        self.clock = clock

    def read_upcoming(self, limit: int | None = None) -> list[Contest]:
        return fetch_upcoming(self.feed, self.clock(), limit)

    def run(self) -> CycleResult:
        now = self.clock()
        result = CycleResult(started_at=now)

        try:
            contests = self.feed.fetch()
        except FetchError as err:
            logger.error("Error fetching contests: %s", err)
            result.aborted = True
            result.error = str(err)
            return result
        result.fetched = len(contests)

        try:
            seen = self.store.load()
        except LoadError as err:
            logger.error("Error loading seen contests: %s", err)
            result.aborted = True
            result.error = str(err)
            return result

        upcoming = select_upcoming(contests, now)
        to_notify = [c for c in upcoming if c.id not in seen]
        if not to_notify:
            logger.debug("No new contests (%d fetched, %d seen)", len(contests), len(seen))
            return result

        logger.info("Found %d new contests to announce", len(to_notify))
        for contest in to_notify:
            try:
                self.notifier.notify(contest)
            except NotifyError as err:
                logger.error("Failed to announce contest %s: %s", contest.id, err)
                result.failed.append(contest.id)
                continue
            seen[contest.id] = contest
            result.notified.append(contest.id)

        # keep the latest snapshot of contests announced earlier
        seen.update((c.id, c) for c in upcoming if c.id in seen)
        # contests that already started can never be announced again
        pruned = {contest_id: c for contest_id, c in seen.items() if c.start_time > now}
        try:
            self.store.save(pruned)
        except SaveError as err:
            logger.error("Error saving seen contests, they may be announced again: %s", err)
        else:
            result.saved = True

        return result


def build_cycle(settings: Settings, sender: BotInterface) -> NotificationCycle:
    """Wire the feed, store and notifier described by settings."""
    return NotificationCycle(
        feed=FeedClient(settings.feed_url, timeout=settings.feed_timeout),
        store=SeenStore(settings.state_file),
        notifier=Notifier(sender, settings.tz),
    )
