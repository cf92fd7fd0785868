import datetime
import logging

import pytest

from atcoder_notifier.classes.contest import Contest
from atcoder_notifier.classes.seen_store import SeenStore
from atcoder_notifier.config import Settings
from atcoder_notifier.cycle import NotificationCycle, build_cycle, fetch_upcoming
from atcoder_notifier.errors import FetchError, FetchErrorKind, LoadError, NotifyError, SaveError
from atcoder_notifier.feed.fetch import FeedClient

UTC = datetime.timezone.utc
NOW = datetime.datetime(2025, 6, 1, 12, 0, tzinfo=UTC)
HOUR = datetime.timedelta(hours=1)


def _contest(contest_id: str, offset: datetime.timedelta) -> Contest:
    return Contest(contest_id, f"Contest {contest_id}", NOW + offset, 6000)


class FakeFeed:
    def __init__(self, contests=None, error=None):
        self.contests = contests or []
        self.error = error
        self.calls = 0

    def fetch(self):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return list(self.contests)


class FakeStore:
    def __init__(self, seen=None, load_error=None, save_error=None):
        self.seen = dict(seen or {})
        self.load_error = load_error
        self.save_error = save_error
        self.loads = 0
        self.saves = []

    def load(self):
        self.loads += 1
        if self.load_error is not None:
            raise self.load_error
        return dict(self.seen)

    def save(self, seen):
        if self.save_error is not None:
            raise self.save_error
        self.saves.append(dict(seen))
        self.seen = dict(seen)


class FakeNotifier:
    def __init__(self, failing=()):
        self.failing = set(failing)
        self.notified = []

    def notify(self, contest):
        if contest.id in self.failing:
            raise NotifyError(f"rejected {contest.id}")
        self.notified.append(contest.id)


def _cycle(feed, store, notifier):
    return NotificationCycle(feed, store, notifier, clock=lambda: NOW)


def test_new_upcoming_contests_are_announced_in_start_order():
    feed = FakeFeed([_contest("late", 3 * HOUR), _contest("past", -HOUR), _contest("soon", HOUR)])
    store = FakeStore()
    notifier = FakeNotifier()

    result = _cycle(feed, store, notifier).run()

    assert notifier.notified == ["soon", "late"]
    assert result.notified == ["soon", "late"]
    assert result.fetched == 3
    assert result.saved
    assert set(store.seen) == {"soon", "late"}


def test_only_unseen_contests_are_announced():
    a = _contest("A", HOUR)
    b = _contest("B", 2 * HOUR)
    store = FakeStore(seen={"A": a})
    notifier = FakeNotifier()

    _cycle(FakeFeed([a, b]), store, notifier).run()

    assert notifier.notified == ["B"]
    assert set(store.seen) == {"A", "B"}


def test_second_run_with_unchanged_feed_announces_nothing():
    feed = FakeFeed([_contest("A", HOUR), _contest("B", 2 * HOUR)])
    store = FakeStore()
    notifier = FakeNotifier()
    cycle = _cycle(feed, store, notifier)

    cycle.run()
    second = cycle.run()

    assert notifier.notified == ["A", "B"]
    assert second.notified == []
    assert not second.saved
    assert len(store.saves) == 1


def test_nothing_new_skips_save():
    store = FakeStore(seen={"A": _contest("A", HOUR)})

    result = _cycle(FakeFeed([_contest("A", HOUR), _contest("old", -HOUR)]), store, FakeNotifier()).run()

    assert store.saves == []
    assert not result.saved
    assert not result.aborted


def test_fetch_error_aborts_without_touching_store(caplog):
    error = FetchError(FetchErrorKind.BAD_STATUS, "API returned status code: 500", status_code=500)
    store = FakeStore()
    notifier = FakeNotifier()

    with caplog.at_level(logging.ERROR):
        result = _cycle(FakeFeed(error=error), store, notifier).run()

    assert result.aborted
    assert "500" in result.error
    assert store.loads == 0
    assert store.saves == []
    assert notifier.notified == []
    assert len([r for r in caplog.records if r.levelno == logging.ERROR]) == 1


def test_load_error_aborts_cycle():
    store = FakeStore(load_error=LoadError("corrupt"))
    notifier = FakeNotifier()

    result = _cycle(FakeFeed([_contest("A", HOUR)]), store, notifier).run()

    assert result.aborted
    assert notifier.notified == []
    assert store.saves == []


def test_notify_failure_does_not_block_other_contests():
    feed = FakeFeed([_contest("A", HOUR), _contest("B", 2 * HOUR), _contest("C", 3 * HOUR)])
    store = FakeStore()
    notifier = FakeNotifier(failing={"B"})

    result = _cycle(feed, store, notifier).run()

    assert notifier.notified == ["A", "C"]
    assert result.failed == ["B"]
    assert set(store.seen) == {"A", "C"}


def test_failed_contest_is_retried_next_cycle():
    feed = FakeFeed([_contest("A", HOUR)])
    store = FakeStore()
    notifier = FakeNotifier(failing={"A"})
    cycle = _cycle(feed, store, notifier)

    cycle.run()
    notifier.failing.clear()
    result = cycle.run()

    assert result.notified == ["A"]


def test_save_error_is_not_fatal(caplog):
    store = FakeStore(save_error=SaveError("read-only"))
    notifier = FakeNotifier()

    with caplog.at_level(logging.ERROR):
        result = _cycle(FakeFeed([_contest("A", HOUR)]), store, notifier).run()

    assert notifier.notified == ["A"]
    assert not result.saved
    assert not result.aborted
    assert "may be announced again" in caplog.text


def test_saved_seen_set_drops_started_contests():
    started = _contest("started", -HOUR)
    store = FakeStore(seen={"started": started, "A": _contest("A", HOUR)})

    _cycle(FakeFeed([_contest("A", HOUR), _contest("B", 2 * HOUR)]), store, FakeNotifier()).run()

    assert set(store.seen) == {"A", "B"}


def test_read_upcoming_does_not_touch_store():
    store = FakeStore()
    feed = FakeFeed([_contest("C", 3 * HOUR), _contest("A", HOUR), _contest("B", 2 * HOUR)])
    cycle = _cycle(feed, store, FakeNotifier())

    assert [c.id for c in cycle.read_upcoming(limit=2)] == ["A", "B"]
    assert [c.id for c in cycle.read_upcoming()] == ["A", "B", "C"]
    assert store.loads == 0


def test_fetch_upcoming_propagates_fetch_error():
    with pytest.raises(FetchError):
        fetch_upcoming(FakeFeed(error=FetchError(FetchErrorKind.NETWORK, "down")), NOW)


def test_cycle_with_file_store_persists_seen_contests(tmp_path):
    path = tmp_path / "seen.json"
    a = _contest("A", HOUR)
    SeenStore(path).save({"A": a})
    notifier = FakeNotifier()

    _cycle(FakeFeed([a, _contest("B", 2 * HOUR)]), SeenStore(path), notifier).run()

    assert notifier.notified == ["B"]
    assert set(SeenStore(path).load()) == {"A", "B"}


def test_cycle_with_file_store_leaves_file_on_fetch_error(tmp_path):
    path = tmp_path / "seen.json"
    SeenStore(path).save({"A": _contest("A", HOUR)})
    before = path.read_bytes()
    error = FetchError(FetchErrorKind.BAD_STATUS, "API returned status code: 404", status_code=404)

    result = _cycle(FakeFeed(error=error), SeenStore(path), FakeNotifier()).run()

    assert result.aborted
    assert path.read_bytes() == before


def test_result_summary():
    feed = FakeFeed([_contest("A", HOUR), _contest("B", 2 * HOUR)])
    result = _cycle(feed, FakeStore(), FakeNotifier(failing={"B"})).run()

    assert result.summary() == "1 announced, 1 failed"


def test_build_cycle_wires_settings(tmp_path):
    settings = Settings(feed_url="https://example.test/feed.json", feed_timeout=4.0, state_file=tmp_path / "s.json")

    cycle = build_cycle(settings, sender=object())

    assert isinstance(cycle.feed, FeedClient)
    assert cycle.feed.url == "https://example.test/feed.json"
    assert cycle.feed.timeout == 4.0
    assert cycle.store.path == tmp_path / "s.json"


def test_out_of_range_feed_aborts_cycle():
    session_payload = [{"id": "x", "title": "X", "start_epoch_second": 10**20, "duration_second": 60}]

    class FakeResponse:
        status_code = 200

        def json(self):
            return session_payload

    class FakeSession:
        def get(self, url, headers, timeout):
            return FakeResponse()

    store = FakeStore()
    notifier = FakeNotifier()
    feed = FeedClient(session=FakeSession())

    result = _cycle(feed, store, notifier).run()

    assert result.aborted
    assert store.loads == 0
    assert notifier.notified == []
