"""Object representing an AtCoder contest from the contests feed."""

from __future__ import annotations

import datetime
from dataclasses import dataclass
from typing import Any

CONTEST_URL_TEMPLATE = "https://atcoder.jp/contests/{id}"


@dataclass(frozen=True)
class Contest:
    id: str
    title: str
    start_time: datetime.datetime
    duration_seconds: int
    rate_change: str | None = None
    url: str | None = None

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("contest id must not be empty")
        if self.start_time.tzinfo is None:
            raise ValueError(f"contest {self.id} start_time must be timezone-aware")
        if self.duration_seconds < 0:
            raise ValueError(f"contest {self.id} has a negative duration")

    @property
    def start_epoch_second(self) -> int:
        return int(self.start_time.timestamp())

    @property
    def end_time(self) -> datetime.datetime:
        return self.start_time + datetime.timedelta(seconds=self.duration_seconds)

    @property
    def contest_url(self) -> str:
        return self.url or CONTEST_URL_TEMPLATE.format(id=self.id)

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> Contest:
        """Build a Contest from a feed record.

        Raises KeyError, TypeError or ValueError when the record does not
        have the expected fields and types.
        """
        if not isinstance(record, dict):
            raise TypeError(f"contest record must be an object, got {type(record).__name__}")

        contest_id = record["id"]
        title = record["title"]
        start = record["start_epoch_second"]
        duration = record["duration_second"]
        if not isinstance(contest_id, str) or not isinstance(title, str):
            raise TypeError("contest id and title must be strings")
        # bool is an int subclass; reject it explicitly
        for name, value in (("start_epoch_second", start), ("duration_second", duration)):
            if isinstance(value, bool) or not isinstance(value, int):
                raise TypeError(f"{name} must be an integer, got {value!r}")

        rate_change = record.get("rate_change")
        url = record.get("url")
        if rate_change is not None and not isinstance(rate_change, str):
            raise TypeError("rate_change must be a string")
        if url is not None and not isinstance(url, str):
            raise TypeError("url must be a string")

        try:
            start_time = datetime.datetime.fromtimestamp(start, tz=datetime.timezone.utc)
        except (OverflowError, OSError) as err:
            raise ValueError(f"start_epoch_second out of range: {start}") from err

        return cls(
            id=contest_id,
            title=title.strip(),
            start_time=start_time,
            duration_seconds=duration,
            rate_change=rate_change,
            url=url or None,
        )

    def to_record(self) -> dict[str, Any]:
        record: dict[str, Any] = {
            "id": self.id,
            "start_epoch_second": self.start_epoch_second,
            "duration_second": self.duration_seconds,
            "title": self.title,
        }
        if self.rate_change is not None:
            record["rate_change"] = self.rate_change
        if self.url is not None:
            record["url"] = self.url
        return record
