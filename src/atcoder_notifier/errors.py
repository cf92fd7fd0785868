"""Exceptions raised by the feed, the seen-set store and the notifier."""

from __future__ import annotations

import enum


class NotifierError(Exception):
    """Base class for every error raised by atcoder_notifier."""


class FetchErrorKind(enum.Enum):
    NETWORK = "network"
    BAD_STATUS = "bad_status"
    DECODE = "decode"


class FetchError(NotifierError):
    def __init__(self, kind: FetchErrorKind, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.kind = kind
        self.status_code = status_code


class LoadError(NotifierError):
    """Stored seen-set exists but could not be parsed."""


class SaveError(NotifierError):
    """Seen-set could not be written."""


class NotifyError(NotifierError):
    """An outbound channel rejected a message or could not be reached."""
