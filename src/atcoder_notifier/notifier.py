"""Deliver contest announcements through a single chat sender."""

from __future__ import annotations

import datetime
import logging

from atcoder_notifier.bot.botinterface import BotInterface
from atcoder_notifier.bot.discord_rest import DiscordRest
from atcoder_notifier.bot.webhook import DiscordWebhook
from atcoder_notifier.classes.contest import Contest
from atcoder_notifier.formatting import format_contest_message

logger = logging.getLogger(__name__)


class Notifier:
    def __init__(self, sender: BotInterface, tz: datetime.tzinfo = datetime.timezone.utc) -> None:
        self.sender = sender
        self.tz = tz

    def notify(self, contest: Contest) -> None:
        """Render and deliver one announcement; raises NotifyError on failure."""
        message = format_contest_message(contest, self.tz)
        self.sender.send_message(message)
        logger.info("Announced contest %s (%s)", contest.id, contest.title)


def build_sender(
    *,
    webhook: str | None = None,
    token: str | None = None,
    channel_id: int | None = None,
) -> BotInterface | None:
    """Pick the outbound channel: a webhook if configured, else the bot's REST API."""
    if webhook:
        return DiscordWebhook(webhook)
    if token and channel_id is not None:
        return DiscordRest(token, channel_id)
    return None
