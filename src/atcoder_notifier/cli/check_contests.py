"""Run one contest check and announce contests that appeared since the last run."""

import argparse
import dataclasses
import logging
import sys

from dotenv import load_dotenv

from atcoder_notifier.config import Settings, apply_environment_defaults, load_settings
from atcoder_notifier.cycle import build_cycle, fetch_upcoming, utc_now
from atcoder_notifier.errors import FetchError
from atcoder_notifier.feed.fetch import FeedClient
from atcoder_notifier.formatting import format_duration, format_start
from atcoder_notifier.logging import configure_logging
from atcoder_notifier.notifier import build_sender
from atcoder_notifier.paths import resolve_path

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "-l",
        "--list",
        action="store_true",
        help="Print upcoming contests without announcing or saving anything",
    )
    parser.add_argument("--state", help="Path of the seen-contests file")
    parser.add_argument("-q", "--quiet", action="store_true", help="Only log warnings and errors")
    return parser.parse_args(argv)


def set_quiet_verbosity() -> None:
    """Only log warnings and errors."""
    logging.getLogger().setLevel(logging.WARNING)


def print_upcoming(settings: Settings) -> int:
    feed = FeedClient(settings.feed_url, timeout=settings.feed_timeout)
    try:
        contests = fetch_upcoming(feed, utc_now(), limit=settings.max_contests)
    except FetchError as err:
        logger.error("Error fetching contests: %s", err)
        print("Error fetching contest information. Please try again later.")
        return 1
    finally:
        feed.close()

    if not contests:
        print("No upcoming contests found.")
        return 0
    for contest in contests:
        print(
            f"{format_start(contest, settings.tz)}  {contest.title} "
            f"({format_duration(contest.duration_seconds)}) {contest.contest_url}"
        )
    return 0


def main(argv: list[str] | None = None) -> int:
    load_dotenv()
    settings = load_settings()
    apply_environment_defaults(settings)
    configure_logging()

    args = parse_args(argv)
    if args.quiet:
        set_quiet_verbosity()
    if args.state:
        settings = dataclasses.replace(settings, state_file=resolve_path(args.state))

    if args.list:
        return print_upcoming(settings)

    sender = build_sender(
        webhook=settings.discord_webhook,
        token=settings.discord_token,
        channel_id=settings.discord_channel_id,
    )
    if sender is None:
        raise RuntimeError(
            "DISCORD_WEBHOOK, or DISCORD_TOKEN with DISCORD_CHANNEL_ID, must be set to announce contests."
        )

    result = build_cycle(settings, sender).run()
    logger.info("Contest check finished: %s", result.summary())
    return 1 if result.aborted else 0


if __name__ == "__main__":
    sys.exit(main())
