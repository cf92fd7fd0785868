import asyncio
import logging
import time
from typing import Optional

import discord
from discord.ext import commands, tasks
from dotenv import load_dotenv

from atcoder_notifier.bot.discord_rest import DiscordRest
from atcoder_notifier.classes.contest import Contest
from atcoder_notifier.config import apply_environment_defaults, load_settings
from atcoder_notifier.cycle import CycleResult, NotificationCycle, build_cycle, fetch_upcoming, utc_now
from atcoder_notifier.errors import FetchError
from atcoder_notifier.feed.fetch import FeedClient
from atcoder_notifier.formatting import (
    build_contest_list_embed,
    build_help_embed,
    build_next_contest_embed,
    format_duration,
)
from atcoder_notifier.logging import configure_logging

logger = logging.getLogger(__name__)

SETTINGS = load_settings()
START_TIME = time.time()

FETCH_ERROR_MESSAGE = "❌ Error fetching contest information. Please try again later."
NO_CONTESTS_MESSAGE = "📅 No upcoming contests found."

LAST_CYCLE: Optional[CycleResult] = None
FEED: Optional[FeedClient] = None
SCHEDULED_CYCLE: Optional[NotificationCycle] = None
_cycle_lock = asyncio.Lock()

intents = discord.Intents.default()
intents.message_content = True
bot = commands.Bot(command_prefix=SETTINGS.command_prefix, intents=intents, help_command=None)


def _format_uptime(seconds: float) -> str:
    minutes, sec = divmod(int(seconds), 60)
    hours, minutes = divmod(minutes, 60)
    days, hours = divmod(hours, 24)
    parts = []
    if days:
        parts.append(f"{days}d")
    if hours:
        parts.append(f"{hours}h")
    if minutes:
        parts.append(f"{minutes}m")
    parts.append(f"{sec}s")
    return " ".join(parts)


def _feed_client() -> FeedClient:
    """Shared feed client so commands reuse one HTTP session."""
    global FEED
    if FEED is None:
        FEED = FeedClient(SETTINGS.feed_url, timeout=SETTINGS.feed_timeout)
    return FEED


def _fetch_upcoming(limit: int) -> list[Contest]:
    return fetch_upcoming(_feed_client(), utc_now(), limit)


async def _upcoming_or_report(ctx: commands.Context, limit: int) -> Optional[list[Contest]]:
    try:
        contests = await asyncio.to_thread(_fetch_upcoming, limit)
    except FetchError as err:
        logger.error("Error fetching contests: %s", err)
        await ctx.send(FETCH_ERROR_MESSAGE)
        return None
    if not contests:
        await ctx.send(NO_CONTESTS_MESSAGE)
        return None
    return contests


async def run_cycle_once(cycle: NotificationCycle) -> CycleResult:
    """Run one announcement cycle in a worker thread, one cycle at a time."""
    global LAST_CYCLE
    async with _cycle_lock:
        result = await asyncio.to_thread(cycle.run)
    LAST_CYCLE = result
    logger.info("Scheduled contest check: %s", result.summary())
    return result


@tasks.loop(seconds=SETTINGS.update_interval.total_seconds())
async def announce_loop():
    if SCHEDULED_CYCLE is None:
        return
    await run_cycle_once(SCHEDULED_CYCLE)


@bot.event
async def on_ready():
    logger.info("Discord bot logged in as %s", bot.user)
    activity = discord.Game(name=f"AtCoder contests | {SETTINGS.command_prefix}contest")
    await bot.change_presence(activity=activity)
    if SCHEDULED_CYCLE is not None and not announce_loop.is_running():
        announce_loop.start()


@bot.event
async def on_command_error(ctx: commands.Context, error: Exception):
    if isinstance(error, commands.CommandNotFound):
        # Ignore unknown commands so the bot only responds to expected prefixes.
        return
    logger.error("Command error: %s", error)
    await ctx.send("Something went wrong running that command.")


@bot.command(name="contest")
async def contest(ctx: commands.Context):
    logger.info("Contest command requested by %s in channel %s", ctx.author, getattr(ctx.channel, "id", None))
    contests = await _upcoming_or_report(ctx, SETTINGS.max_contests)
    if contests is None:
        return

    embed = build_contest_list_embed(contests, utc_now(), SETTINGS.update_interval, SETTINGS.tz)
    await ctx.send(embed=embed)
    logger.info("Sent contest information for %d contests", len(contests))


@bot.command(name="next")
async def next_contest(ctx: commands.Context):
    contests = await _upcoming_or_report(ctx, 1)
    if contests is None:
        return
    await ctx.send(embed=build_next_contest_embed(contests[0], utc_now(), SETTINGS.tz))


@bot.command(name="status")
async def status(ctx: commands.Context):
    uptime = _format_uptime(time.time() - START_TIME)
    interval = format_duration(SETTINGS.update_interval)
    if SCHEDULED_CYCLE is None:
        schedule = "announcements disabled"
    else:
        schedule = f"checking every {interval}"
    if LAST_CYCLE is None:
        last = "never"
    else:
        last = f"{LAST_CYCLE.started_at:%Y-%m-%d %H:%M UTC} ({LAST_CYCLE.summary()})"
    await ctx.send(f"alive. bot uptime: {uptime}. {schedule}. last check: {last}")


@bot.command(name="help")
async def help_command(ctx: commands.Context):
    await ctx.send(embed=build_help_embed(SETTINGS.command_prefix))


def main():
    global SETTINGS, SCHEDULED_CYCLE, FEED
    load_dotenv()
    SETTINGS = load_settings()
    apply_environment_defaults(SETTINGS)
    configure_logging()

    if not SETTINGS.discord_token:
        raise RuntimeError("DISCORD_TOKEN is not set. Set it before starting the Discord bot.")

    logger.info("Starting AtCoder Contest Bot...")
    logger.info("Command prefix: %s", SETTINGS.command_prefix)
    logger.info("Max contests to display: %d", SETTINGS.max_contests)

    FEED = FeedClient(SETTINGS.feed_url, timeout=SETTINGS.feed_timeout)
    bot.command_prefix = SETTINGS.command_prefix
    if SETTINGS.discord_channel_id is None:
        logger.warning("DISCORD_CHANNEL_ID is not set. Scheduled announcements disabled.")
    else:
        sender = DiscordRest(SETTINGS.discord_token, SETTINGS.discord_channel_id)
        SCHEDULED_CYCLE = build_cycle(SETTINGS, sender)
        announce_loop.change_interval(seconds=SETTINGS.update_interval.total_seconds())

    bot.run(SETTINGS.discord_token, log_handler=None)


if __name__ == "__main__":
    main()
