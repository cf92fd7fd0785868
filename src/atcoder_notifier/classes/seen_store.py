"""JSON-file storage for contests that were already announced."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path

from atcoder_notifier.classes.contest import Contest
from atcoder_notifier.errors import LoadError, SaveError

STATE_FORMAT_VERSION = 1

logger = logging.getLogger(__name__)

SeenSet = dict[str, Contest]


class SeenStore:
    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def load(self) -> SeenSet:
        """Read the seen-set; a missing file is an empty seen-set."""
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.info("No seen-set at %s, starting empty", self.path)
            return {}
        except OSError as err:
            raise LoadError(f"could not read seen-set {self.path}: {err}") from err

        try:
            data = json.loads(raw)
        except ValueError as err:
            raise LoadError(f"seen-set {self.path} is not valid JSON: {err}") from err

        if not isinstance(data, dict) or data.get("version") != STATE_FORMAT_VERSION:
            raise LoadError(f"seen-set {self.path} has an unsupported format")
        records = data.get("contests")
        if not isinstance(records, list):
            raise LoadError(f"seen-set {self.path} has no contests list")

        seen: SeenSet = {}
        for record in records:
            try:
                contest = Contest.from_record(record)
            except (KeyError, TypeError, ValueError) as err:
                raise LoadError(f"seen-set {self.path} has a malformed record: {err!r}") from err
            seen[contest.id] = contest

        logger.debug("Loaded %d seen contests from %s", len(seen), self.path)
        return seen

    def save(self, seen: SeenSet) -> None:
        """Replace the stored seen-set atomically (temp file + rename)."""
        contests = sorted(seen.values(), key=lambda c: (c.start_epoch_second, c.id))
        payload = {
            "version": STATE_FORMAT_VERSION,
            "contests": [contest.to_record() for contest in contests],
        }
        text = json.dumps(payload, indent=2, ensure_ascii=False) + "\n"

        tmp_name = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
            )
            with os.fdopen(fd, "w", encoding="utf-8") as fp:
                fp.write(text)
                fp.flush()
                os.fsync(fp.fileno())
            os.replace(tmp_name, self.path)
        except OSError as err:
            if tmp_name is not None:
                try:
                    os.unlink(tmp_name)
                except OSError:
                    logger.debug("Could not remove temp file %s", tmp_name)
            raise SaveError(f"could not write seen-set {self.path}: {err}") from err

        logger.debug("Saved %d seen contests to %s", len(seen), self.path)
