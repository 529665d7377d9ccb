"""SQLite-backed abbreviation table with an in-memory lookup map."""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path
from threading import RLock

from notecomposer.config import settings
from notecomposer.models import AbbreviationEntry, StoreResult, StoreStatus

logger = logging.getLogger(__name__)

SEED_ABBREVIATIONS: dict[str, str] = {
    "c": "hypercholesterolemia",
    "to": "hypothyroidism",
}


class AbbreviationStore:
    """Token -> expansion table persisted to SQLite.

    Lookups always hit the in-memory map. When persistence fails the map keeps
    serving expansions and the failing operation reports ``store_error``.
    """

    def __init__(self, db_path: str | Path | None = None, seed: bool | None = None) -> None:
        self.db_path = str(db_path if db_path is not None else settings.abbreviation_db_path)
        self.seed = settings.seed_abbreviations if seed is None else seed
        self._lock = RLock()
        self._map: dict[str, str] = {}
        self._conn: sqlite3.Connection | None = None
        self.degraded = False
        self.last_error: str | None = None

    # --- Lifecycle ---

    def open(self) -> AbbreviationStore:
        with self._lock:
            try:
                if self.db_path != ":memory:":
                    Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
                conn = sqlite3.connect(self.db_path, check_same_thread=False)
                conn.row_factory = sqlite3.Row
                with conn:
                    conn.execute(
                        "CREATE TABLE IF NOT EXISTS abbreviations "
                        "(short TEXT PRIMARY KEY, full TEXT)"
                    )
                    if self.seed:
                        conn.executemany(
                            "INSERT OR IGNORE INTO abbreviations (short, full) VALUES (?, ?)",
                            SEED_ABBREVIATIONS.items(),
                        )
                rows = conn.execute("SELECT short, full FROM abbreviations").fetchall()
            except (sqlite3.Error, OSError) as e:
                self._mark_degraded(e)
                if self.seed:
                    self._map = dict(SEED_ABBREVIATIONS)
                logger.warning(
                    "Abbreviation database unavailable at %s; running in memory only.",
                    self.db_path,
                )
                return self

            self._conn = conn
            self._map = {row["short"]: row["full"] for row in rows}
            self.degraded = False
            self.last_error = None
            logger.info("Loaded %d abbreviations from %s", len(self._map), self.db_path)
        return self

    def close(self) -> None:
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None

    def _mark_degraded(self, error: Exception) -> None:
        self.degraded = True
        self.last_error = str(error)
        logger.error("Abbreviation store error: %s", error)

    def _execute(self, sql: str, params: tuple) -> int:
        """Run a write statement; return affected row count."""
        if self._conn is None:
            raise sqlite3.OperationalError(self.last_error or "abbreviation database not open")
        with self._conn:
            cur = self._conn.execute(sql, params)
        return cur.rowcount

    # --- AbbreviationTable capability ---

    def get(self, key: str) -> str | None:
        with self._lock:
            return self._map.get(key)

    def put(self, key: str, value: str) -> None:
        with self._lock:
            self._map[key] = value

    def remove(self, key: str) -> None:
        with self._lock:
            self._map.pop(key, None)

    def entries(self) -> list[tuple[str, str]]:
        with self._lock:
            return sorted(self._map.items())

    def __len__(self) -> int:
        with self._lock:
            return len(self._map)

    # --- Managed operations ---

    def add(self, short: str, full: str) -> StoreResult:
        short, full = short.strip(), full.strip()
        if not short or not full:
            return StoreResult(status=StoreStatus.INVALID, message="Both fields must be filled.")

        with self._lock:
            if short in self._map:
                return StoreResult(
                    status=StoreStatus.EXISTS,
                    message=f"Abbreviation '{short}' already exists.",
                    entry=AbbreviationEntry(short=short, full=self._map[short]),
                )
            self.put(short, full)
            entry = AbbreviationEntry(short=short, full=full)
            try:
                self._execute(
                    "INSERT OR IGNORE INTO abbreviations (short, full) VALUES (?, ?)",
                    (short, full),
                )
            except sqlite3.Error as e:
                self._mark_degraded(e)
                return StoreResult(
                    status=StoreStatus.STORE_ERROR,
                    message=f"Failed to add abbreviation: {e}",
                    entry=entry,
                )
        logger.info("Abbreviation added: %s", short)
        return StoreResult(status=StoreStatus.OK, message="Abbreviation added.", entry=entry)

    def edit(self, short: str, full: str) -> StoreResult:
        short, full = short.strip(), full.strip()
        if not short or not full:
            return StoreResult(status=StoreStatus.INVALID, message="Both fields must be filled.")

        with self._lock:
            if short not in self._map:
                return StoreResult(status=StoreStatus.NOT_FOUND, message="Abbreviation not found.")
            self.put(short, full)
            entry = AbbreviationEntry(short=short, full=full)
            try:
                rows = self._execute(
                    "UPDATE abbreviations SET full = ? WHERE short = ?",
                    (full, short),
                )
                if rows == 0:
                    # Known in memory only (added while degraded); persist it now.
                    self._execute(
                        "INSERT OR IGNORE INTO abbreviations (short, full) VALUES (?, ?)",
                        (short, full),
                    )
            except sqlite3.Error as e:
                self._mark_degraded(e)
                return StoreResult(
                    status=StoreStatus.STORE_ERROR,
                    message=f"Failed to edit abbreviation: {e}",
                    entry=entry,
                )
        logger.info("Abbreviation updated: %s", short)
        return StoreResult(status=StoreStatus.OK, message="Abbreviation updated.", entry=entry)

    def delete(self, short: str) -> StoreResult:
        short = short.strip()
        if not short:
            return StoreResult(status=StoreStatus.INVALID, message="Short form is required.")

        with self._lock:
            if short not in self._map:
                return StoreResult(status=StoreStatus.NOT_FOUND, message="Abbreviation not found.")
            entry = AbbreviationEntry(short=short, full=self._map[short])
            self.remove(short)
            try:
                self._execute("DELETE FROM abbreviations WHERE short = ?", (short,))
            except sqlite3.Error as e:
                self._mark_degraded(e)
                return StoreResult(
                    status=StoreStatus.STORE_ERROR,
                    message=f"Failed to delete abbreviation: {e}",
                    entry=entry,
                )
        logger.info("Abbreviation deleted: %s", short)
        return StoreResult(status=StoreStatus.OK, message="Abbreviation deleted.", entry=entry)

    def find(self, short: str) -> StoreResult:
        short = short.strip()
        full = self.get(short)
        if full is None:
            return StoreResult(
                status=StoreStatus.NOT_FOUND,
                message=f"Abbreviation '{short}' was not found.",
            )
        return StoreResult(
            status=StoreStatus.OK,
            message=f"Found: {short} -> {full}",
            entry=AbbreviationEntry(short=short, full=full),
        )
