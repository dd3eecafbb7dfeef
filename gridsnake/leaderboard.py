"""
leaderboard.py — Leaderboard store and its persistence collaborators.

The leaderboard is a short list of name/score/date records, best first,
kept in a key-value store under a single key as a JSON array.
It is loaded once at startup and rewritten in full on every accepted record.

Classes:
    HighScoreRecord — one leaderboard line
    MemoryStore     — dict-backed key-value store
    JsonFileStore   — key-value store persisted as one JSON object on disk
    Leaderboard     — bounded, sorted record list with load/qualifies/accept
"""

import datetime
import json
import logging
from pathlib import Path
from typing import NamedTuple, Optional, Union

from .config import HIGHSCORE_KEY, MAX_HIGH_SCORES, MAX_NAME_LEN

logger = logging.getLogger(__name__)


# ─────────────────────────── Records ─────────────────────────────
class HighScoreRecord(NamedTuple):
    """One leaderboard line; `date` is an ISO calendar date."""

    name: str
    score: int
    date: str

    @classmethod
    def from_dict(cls, data: dict) -> "HighScoreRecord":
        """Build a record from its stored form; ValueError if it is malformed."""
        if not isinstance(data, dict):
            raise ValueError(f"record must be an object, got {type(data).__name__}")
        name, score, date = data.get("name"), data.get("score"), data.get("date")
        if not isinstance(name, str) or not name.strip():
            raise ValueError(f"bad name: {name!r}")
        if isinstance(score, bool) or not isinstance(score, int) or score < 0:
            raise ValueError(f"bad score: {score!r}")
        if not isinstance(date, str):
            raise ValueError(f"bad date: {date!r}")
        return cls(name.strip()[:MAX_NAME_LEN], score, date)

    def to_dict(self) -> dict:
        return self._asdict()


# ─────────────────────────── Stores ──────────────────────────────
class MemoryStore:
    """Key-value store living only as long as the process."""

    def __init__(self, initial: Optional[dict] = None):
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value


class JsonFileStore:
    """
    Key-value store backed by a single JSON object file.

    Values are strings. A missing or unreadable file behaves as an empty
    store; write failures are logged and otherwise ignored so a read-only
    home directory never stops the game.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def get(self, key: str) -> Optional[str]:
        value = self._read_all().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        data = self._read_all()
        data[key] = value
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp = self.path.with_suffix(self.path.suffix + ".tmp")
            tmp.write_text(json.dumps(data, indent=2), encoding="utf-8")
            tmp.replace(self.path)
        except OSError as exc:
            logger.error("could not write %s: %s", self.path, exc)

    def _read_all(self) -> dict:
        try:
            text = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("could not read %s: %s", self.path, exc)
            return {}
        try:
            data = json.loads(text)
        except (ValueError, RecursionError) as exc:
            logger.warning("ignoring corrupt store %s: %s", self.path, exc)
            return {}
        return data if isinstance(data, dict) else {}


# ────────────────────────── Leaderboard ──────────────────────────
class Leaderboard:
    """
    Bounded list of HighScoreRecord sorted by score, best first.

    Ties keep insertion order: a newcomer equal to an existing score
    ranks below it.
    """

    def __init__(self, store, key: str = HIGHSCORE_KEY, capacity: int = MAX_HIGH_SCORES):
        self.store = store
        self.key = key
        self.capacity = capacity
        self._records: list[HighScoreRecord] = []

    # ── Accessors ────────────────────────────────────────────────
    @property
    def records(self) -> tuple[HighScoreRecord, ...]:
        return tuple(self._records)

    @property
    def best(self) -> int:
        return self._records[0].score if self._records else 0

    def __len__(self) -> int:
        return len(self._records)

    # ── Operations ───────────────────────────────────────────────
    def load(self) -> list[HighScoreRecord]:
        """Read the persisted records; anything absent or malformed loads as empty."""
        self._records = self._parse(self.store.get(self.key))
        logger.debug("loaded %d high scores", len(self._records))
        return list(self._records)

    def qualifies(self, score: int) -> bool:
        if score <= 0:
            return False
        if len(self._records) < self.capacity:
            return True
        return score > self._records[-1].score

    def accept(
        self,
        name: str,
        score: int,
        date: Union[datetime.date, str, None] = None,
    ) -> Optional[HighScoreRecord]:
        """
        Insert a record, keep the best `capacity` entries and persist them.

        Blank names and negative scores are ignored (returns None).
        """
        name = (name or "").strip()[:MAX_NAME_LEN].strip()
        if not name or score < 0:
            return None
        if date is None:
            date = datetime.date.today()
        if isinstance(date, datetime.datetime):
            date = date.date()
        if isinstance(date, datetime.date):
            date = date.isoformat()

        record = HighScoreRecord(name, score, date)
        self._records = self._ranked(self._records + [record])
        self._save()
        logger.info("high score %d recorded for %s", score, name)
        return record if record in self._records else None

    # ── Private helpers ──────────────────────────────────────────
    def _ranked(self, records: list[HighScoreRecord]) -> list[HighScoreRecord]:
        return sorted(records, key=lambda r: -r.score)[: self.capacity]

    def _parse(self, raw: Optional[str]) -> list[HighScoreRecord]:
        if raw is None:
            return []
        try:
            items = json.loads(raw)
            if not isinstance(items, list):
                raise ValueError(f"expected a list, got {type(items).__name__}")
            return self._ranked([HighScoreRecord.from_dict(item) for item in items])
        except (ValueError, RecursionError) as exc:  # JSONDecodeError is a ValueError
            logger.warning("discarding malformed high scores: %s", exc)
            return []

    def _save(self) -> None:
        self.store.set(self.key, json.dumps([r.to_dict() for r in self._records]))
