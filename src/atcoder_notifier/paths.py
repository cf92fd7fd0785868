"""Locate files that live next to the project, e.g. config.yaml and the seen-set."""

from __future__ import annotations

from pathlib import Path

ROOT_MARKERS = ("pyproject.toml", ".git")


def find_repo_root(start: Path | None = None) -> Path:
    current = (start or Path(__file__)).resolve()
    if current.is_file():
        current = current.parent

    for candidate in (current, *current.parents):
        if any((candidate / marker).exists() for marker in ROOT_MARKERS):
            return candidate
    raise RuntimeError(f"No pyproject.toml or .git found above {current}")


def repo_root() -> Path:
    return find_repo_root()


def repo_file(*parts: str) -> Path:
    return repo_root().joinpath(*parts)


def resolve_path(value: str | Path) -> Path:
    """Absolute paths pass through; relative ones hang off the repo root.

    Lets SEEN_STATE_FILE and CONFIG_FILE be given relative to the checkout
    whatever the working directory of cron or the bot service is.
    """
    path = Path(value).expanduser()
    if path.is_absolute():
        return path
    return repo_root() / path
