"""Fact memory: a small durable key → fact log backed by one JSON file.

Layout of the backing file (rewritten in full on every save):

    {
      "fact_2026-10-19T08:30:00.123Z": "user likes blue",
      "fact_2026-10-19T08:31:12.004Z": "project uses uv"
    }

The store is the only reader and writer of that file. It is read once when
opened; saves run read-modify-write under a lock so interleaved callers never
lose an update.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

logger = logging.getLogger(__name__)

KEY_PREFIX = "fact_"


@dataclass(frozen=True)
class SaveResult:
    """Outcome of a save. ``error`` is set when the fact could not be persisted."""

    key: str
    total: int
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _timestamp() -> str:
    """ISO-8601 UTC with millisecond precision, e.g. 2026-10-19T08:30:00.123Z."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class FactStore:
    """Read/write access to the persisted fact memory."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self._facts: dict[str, str] = {}
        self._lock = threading.Lock()
        self._opened = False

    # ── Lifecycle ─────────────────────────────────────────────

    def open(self) -> FactStore:
        """Load the backing file once. Idempotent."""
        if not self._opened:
            self._facts = self.load()
            self._opened = True
            logger.info("Memory loaded from %s. Initial facts: %d", self.path, len(self._facts))
        return self

    def load(self) -> dict[str, str]:
        """Read the backing file. Absent or malformed input yields an empty mapping."""
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.warning("Error loading memory from %s: %s", self.path, e)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring malformed memory file %s: expected a JSON object", self.path)
            return {}
        facts = {k: v for k, v in data.items() if isinstance(v, str)}
        if len(facts) != len(data):
            logger.warning(
                "Skipping %d non-text entries in %s", len(data) - len(facts), self.path
            )
        return facts

    def flush(self) -> None:
        """Write the full mapping to disk. Raises OSError on failure."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = json.dumps(self._facts, ensure_ascii=False, indent=2)
        fd, tmp_name = tempfile.mkstemp(dir=str(self.path.parent), prefix=".memory-", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
            os.replace(tmp_name, self.path)
        except OSError:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def close(self) -> None:
        self._opened = False

    def __enter__(self) -> FactStore:
        return self.open()

    def __exit__(self, *exc_info) -> None:
        self.close()

    # ── Mutation ──────────────────────────────────────────────

    def save(self, fact: str) -> SaveResult:
        """Insert a fact under a fresh timestamp key and persist synchronously.

        Non-string input is stored as its JSON text so the file stays an
        object of strings.
        """
        if not isinstance(fact, str):
            fact = json.dumps(fact, ensure_ascii=False)
        self.open()
        with self._lock:
            key = self._new_key()
            self._facts[key] = fact
            try:
                self.flush()
            except OSError as e:
                del self._facts[key]
                logger.error("Error saving memory to %s: %s", self.path, e)
                return SaveResult(key=key, total=len(self._facts), error=str(e))
            return SaveResult(key=key, total=len(self._facts))

    def _new_key(self) -> str:
        key = f"{KEY_PREFIX}{_timestamp()}"
        if key not in self._facts:
            return key
        # Same clock tick as an earlier save: disambiguate instead of overwriting.
        counter = 2
        while f"{key}-{counter}" in self._facts:
            counter += 1
        return f"{key}-{counter}"

    # ── Queries ───────────────────────────────────────────────

    def get(self, key: str) -> str | None:
        self.open()
        return self._facts.get(key)

    def search(self, query: str) -> list[tuple[str, str]]:
        """All facts containing ``query`` (case-sensitive), in insertion order."""
        self.open()
        return [(k, v) for k, v in self._facts.items() if query in v]

    def list_all(self) -> list[tuple[str, str]]:
        self.open()
        return list(self._facts.items())

    def __len__(self) -> int:
        self.open()
        return len(self._facts)

    def __contains__(self, key: object) -> bool:
        self.open()
        return key in self._facts
