import logging

import requests

from atcoder_notifier.classes.contest import Contest
from atcoder_notifier.errors import FetchError, FetchErrorKind
from atcoder_notifier.feed.parsing import get_contests_from_response

DEFAULT_FEED_URL = "https://kenkoooo.com/atcoder/resources/contests.json"
DEFAULT_TIMEOUT = 10.0

DEFAULT_HEADERS = {
    "Accept": "application/json",
    "User-Agent": "atcoder-contest-notifier",
}

logger = logging.getLogger(__name__)


class FeedClient:
    """Fetch the contests feed with a single bounded GET request."""

    def __init__(
        self,
        url: str = DEFAULT_FEED_URL,
        timeout: float = DEFAULT_TIMEOUT,
        session: requests.Session | None = None,
    ) -> None:
        self.url = url
        self.timeout = timeout
        self.session = session or requests.Session()

    def close(self) -> None:
        self.session.close()

    def fetch(self) -> list[Contest]:
        """Return every contest in the feed, raising FetchError on failure."""
        try:
            response = self.session.get(self.url, headers=DEFAULT_HEADERS, timeout=self.timeout)
        except requests.RequestException as err:
            raise FetchError(FetchErrorKind.NETWORK, f"failed to fetch contests: {err}") from err

        if response.status_code != 200:
            raise FetchError(
                FetchErrorKind.BAD_STATUS,
                f"API returned status code: {response.status_code}",
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as err:
            raise FetchError(FetchErrorKind.DECODE, f"failed to parse JSON: {err}") from err

        contests = get_contests_from_response(payload)
        logger.info("fetched %d contests from %s", len(contests), self.url)
        return contests
