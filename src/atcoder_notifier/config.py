"""atcoder_notifier configuration helpers.

Settings come from built-in defaults, then an optional YAML file
(``CONFIG_FILE``, default ``config.yaml`` at the repo root), then the
environment. Entry points call ``load_dotenv()`` first so a ``.env`` file
feeds the environment layer.
"""

from __future__ import annotations

import datetime
import logging
import os
import re
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml

from atcoder_notifier.feed.fetch import DEFAULT_FEED_URL, DEFAULT_TIMEOUT
from atcoder_notifier.paths import repo_file, resolve_path

logger = logging.getLogger(__name__)

DEFAULT_UPDATE_INTERVAL = datetime.timedelta(minutes=10)
DEFAULT_MAX_CONTESTS = 5
DEFAULT_COMMAND_PREFIX = "!"
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_STATE_FILE = "seen_contests.json"
DEFAULT_TIMEZONE = "UTC"

_DURATION_PART = re.compile(r"(\d+(?:\.\d+)?)(h|m|s)")
_DURATION_UNITS = {"h": 3600, "m": 60, "s": 1}


@dataclass(frozen=True)
class Settings:
    discord_token: str | None = None
    discord_channel_id: int | None = None
    discord_webhook: str | None = None
    feed_url: str = DEFAULT_FEED_URL
    update_interval: datetime.timedelta = DEFAULT_UPDATE_INTERVAL
    max_contests: int = DEFAULT_MAX_CONTESTS
    command_prefix: str = DEFAULT_COMMAND_PREFIX
    log_level: str = DEFAULT_LOG_LEVEL
    feed_timeout: float = DEFAULT_TIMEOUT
    state_file: Path = Path(DEFAULT_STATE_FILE)
    display_timezone: str = DEFAULT_TIMEZONE

    @property
    def tz(self) -> datetime.tzinfo:
        if self.display_timezone.upper() == "UTC":
            return datetime.timezone.utc
        try:
            return ZoneInfo(self.display_timezone)
        except (ZoneInfoNotFoundError, ValueError):
            logger.warning("Unknown DISPLAY_TIMEZONE %r, using UTC", self.display_timezone)
            return datetime.timezone.utc


def parse_duration(value: str) -> datetime.timedelta:
    """Parse durations such as '10m', '90s' or '1h30m'."""
    text = value.strip().lower()
    if text.isdigit():
        return datetime.timedelta(seconds=int(text))
    position = 0
    seconds = 0.0
    for match in _DURATION_PART.finditer(text):
        if match.start() != position:
            break
        seconds += float(match.group(1)) * _DURATION_UNITS[match.group(2)]
        position = match.end()
    if not text or position != len(text):
        raise ValueError(f"invalid duration: {value!r}")
    return datetime.timedelta(seconds=seconds)


def load_config_file(path: Path) -> dict[str, Any]:
    if not path.is_file():
        return {}
    with path.open(encoding="utf-8") as fp:
        data = yaml.safe_load(fp) or {}
    if not isinstance(data, dict):
        logger.warning("Config file %s is not a mapping; ignoring it", path)
        return {}
    return {str(key).upper(): value for key, value in data.items()}


def _lookup(env: Mapping[str, str], file_values: Mapping[str, Any], key: str) -> Any:
    value = env.get(key)
    if value not in (None, ""):
        return value
    value = file_values.get(key)
    if value in (None, ""):
        return None
    return value


def _as_str(raw: Any) -> str | None:
    return None if raw is None else str(raw)


def _as_int(key: str, raw: Any, default: int | None) -> int | None:
    if raw is None:
        return default
    try:
        return int(raw)
    except (TypeError, ValueError):
        logger.warning("%s is not a valid integer: %s", key, raw)
        return default


def _as_float(key: str, raw: Any, default: float) -> float:
    if raw is None:
        return default
    try:
        return float(raw)
    except (TypeError, ValueError):
        logger.warning("%s is not a valid number: %s", key, raw)
        return default


def _as_duration(key: str, raw: Any, default: datetime.timedelta) -> datetime.timedelta:
    if raw is None:
        return default
    try:
        interval = parse_duration(str(raw))
    except ValueError:
        logger.warning("%s is not a valid duration: %s", key, raw)
        return default
    if interval <= datetime.timedelta(0):
        logger.warning("%s must be positive: %s", key, raw)
        return default
    return interval


def load_settings(env: Mapping[str, str] | None = None, config_file: Path | None = None) -> Settings:
    env = os.environ if env is None else env
    if config_file is None:
        config_file = resolve_path(env["CONFIG_FILE"]) if env.get("CONFIG_FILE") else repo_file("config.yaml")
    file_values = load_config_file(config_file)

    def get(key: str) -> Any:
        return _lookup(env, file_values, key)

    state_file = get("SEEN_STATE_FILE") or DEFAULT_STATE_FILE
    return Settings(
        discord_token=_as_str(get("DISCORD_TOKEN")),
        discord_channel_id=_as_int("DISCORD_CHANNEL_ID", get("DISCORD_CHANNEL_ID"), None),
        discord_webhook=_as_str(get("DISCORD_WEBHOOK")),
        feed_url=_as_str(get("ATCODER_API_URL")) or DEFAULT_FEED_URL,
        update_interval=_as_duration("UPDATE_INTERVAL", get("UPDATE_INTERVAL"), DEFAULT_UPDATE_INTERVAL),
        max_contests=_as_int("MAX_CONTESTS", get("MAX_CONTESTS"), DEFAULT_MAX_CONTESTS),
        command_prefix=_as_str(get("COMMAND_PREFIX")) or DEFAULT_COMMAND_PREFIX,
        log_level=(_as_str(get("LOG_LEVEL")) or DEFAULT_LOG_LEVEL).upper(),
        feed_timeout=_as_float("FEED_TIMEOUT", get("FEED_TIMEOUT"), DEFAULT_TIMEOUT),
        state_file=resolve_path(str(state_file)),
        display_timezone=_as_str(get("DISPLAY_TIMEZONE")) or DEFAULT_TIMEZONE,
    )


def apply_environment_defaults(settings: Settings) -> None:
    """Expose the resolved log level to configure_logging()."""
    if not os.getenv("LOG_LEVEL"):
        os.environ["LOG_LEVEL"] = settings.log_level
