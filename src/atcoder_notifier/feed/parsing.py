"""Decode the contests feed payload into Contest objects."""

from __future__ import annotations

import logging
from typing import Any

from atcoder_notifier.classes.contest import Contest
from atcoder_notifier.errors import FetchError, FetchErrorKind

# Version 1: a flat JSON array of records keyed by start_epoch_second.
FEED_FORMAT_VERSION = 1

logger = logging.getLogger(__name__)


def get_contests_from_response(response: Any) -> list[Contest]:
    """Convert a decoded feed response into contests.

    The whole payload is rejected if it is not an array or if any record is
    malformed, so a partially-understood feed never reaches the seen-set.
    """
    if not isinstance(response, list):
        raise FetchError(
            FetchErrorKind.DECODE,
            f"expected a JSON array of contests, got {type(response).__name__}",
        )

    contests: list[Contest] = []
    for index, record in enumerate(response):
        try:
            contests.append(Contest.from_record(record))
        except (KeyError, TypeError, ValueError) as err:
            raise FetchError(
                FetchErrorKind.DECODE,
                f"malformed contest record at index {index}: {err!r}",
            ) from err

    logger.debug("decoded %d contests from feed", len(contests))
    return contests
