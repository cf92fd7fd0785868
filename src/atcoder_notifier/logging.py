"""Logging setup for the contest bot and the cron check.

Both entry points log through the root logger. ``logging.ini`` at the repo
root wins when present; ``LOG_LEVEL`` always sets the final root level.
"""

from __future__ import annotations

import logging
import logging.config
import os

from atcoder_notifier.paths import repo_file

# discord.py logs every gateway event at DEBUG
NOISY_LIBRARY_LOGGERS = ("discord", "urllib3")
DEFAULT_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def _resolve_level(default: str = "INFO") -> int:
    level = logging.getLevelName(os.getenv("LOG_LEVEL", default).upper())
    return level if isinstance(level, int) else logging.INFO


def configure_logging() -> logging.Logger:
    root = logging.getLogger()
    config_path = repo_file("logging.ini")
    if config_path.is_file():
        logging.config.fileConfig(str(config_path), disable_existing_loggers=False)
    elif not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(DEFAULT_FORMAT))
        root.addHandler(handler)

    root.setLevel(_resolve_level())
    for logger_name in NOISY_LIBRARY_LOGGERS:
        logging.getLogger(logger_name).setLevel(logging.INFO)
    return root
