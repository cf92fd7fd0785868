"""Render contests as chat messages and Discord embeds."""

from __future__ import annotations

import datetime

import discord

from atcoder_notifier.classes.contest import Contest

START_FORMAT = "%Y-%m-%d %H:%M %Z"
CONTEST_LIST_COLOR = 0x00FF00
HELP_COLOR = 0x0099FF


def format_duration(duration: int | float | datetime.timedelta) -> str:
    """Format a duration as '1d 2h 3m', '2h 3m' or '3m'.

    Negative durations are formatted by their absolute value. Seconds are
    truncated, never rounded.
    """
    if isinstance(duration, datetime.timedelta):
        duration = duration.total_seconds()
    total_minutes = int(abs(duration)) // 60
    hours_total, minutes = divmod(total_minutes, 60)
    days, hours = divmod(hours_total, 24)

    if days > 0:
        return f"{days}d {hours}h {minutes}m"
    if hours > 0:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"


def format_start(contest: Contest, tz: datetime.tzinfo = datetime.timezone.utc) -> str:
    return contest.start_time.astimezone(tz).strftime(START_FORMAT)


def format_contest_message(contest: Contest, tz: datetime.tzinfo = datetime.timezone.utc) -> str:
    """Plain-text announcement for a newly listed contest."""
    lines = [
        f"📢 New AtCoder contest: **{contest.title}**",
        f"🗓️ Start: {format_start(contest, tz)}",
        f"⏱️ Duration: {format_duration(contest.duration_seconds)}",
    ]
    if contest.rate_change:
        lines.append(f"📈 Rate Change: {contest.rate_change}")
    lines.append(f"🔗 <{contest.contest_url}>")
    return "\n".join(lines)


def _contest_field_value(
    contest: Contest,
    now: datetime.datetime,
    tz: datetime.tzinfo,
) -> str:
    value = (
        f"**Start:** {format_start(contest, tz)}\n"
        f"**Duration:** {format_duration(contest.duration_seconds)}\n"
        f"**Rate Change:** {contest.rate_change or '-'}"
    )
    time_until = contest.start_time - now
    if time_until > datetime.timedelta(0):
        value += f"\n**Starts in:** {format_duration(time_until)}"
    return value


def build_contest_list_embed(
    contests: list[Contest],
    now: datetime.datetime,
    update_interval: datetime.timedelta,
    tz: datetime.tzinfo = datetime.timezone.utc,
) -> discord.Embed:
    embed = discord.Embed(
        title="🏆 Upcoming AtCoder Contests",
        description=f"Here are the next {len(contests)} upcoming AtCoder contests:",
        color=CONTEST_LIST_COLOR,
        timestamp=now,
    )
    for contest in contests:
        embed.add_field(
            name=contest.title,
            value=_contest_field_value(contest, now, tz),
            inline=False,
        )
    embed.set_footer(text=f"Data from AtCoder API • Updated every {format_duration(update_interval)}")
    return embed


def build_next_contest_embed(
    contest: Contest,
    now: datetime.datetime,
    tz: datetime.tzinfo = datetime.timezone.utc,
) -> discord.Embed:
    embed = discord.Embed(
        title=f"⏭️ {contest.title}",
        url=contest.contest_url,
        description=_contest_field_value(contest, now, tz),
        color=CONTEST_LIST_COLOR,
        timestamp=now,
    )
    return embed


def build_help_embed(prefix: str) -> discord.Embed:
    embed = discord.Embed(
        title="🤖 AtCoder Contest Bot Help",
        description="I help you stay updated with AtCoder contests!",
        color=HELP_COLOR,
    )
    commands_help = [
        ("contest", "Show upcoming AtCoder contests"),
        ("next", "Show the next AtCoder contest and when it starts"),
        ("status", "Show bot uptime and the last contest check"),
        ("help", "Show this help message"),
    ]
    for name, description in commands_help:
        embed.add_field(name=f"{prefix}{name}", value=description, inline=False)
    embed.set_footer(text="AtCoder Contest Bot • Data from kenkoooo.com/atcoder")
    return embed
