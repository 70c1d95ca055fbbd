"""
Mood and Context Store Adapters.

The analytics engine reads per-segment mood records and per-day context
records through these interfaces. Two implementations are provided: an
in-memory store used by tests and embedding callers, and a SQLite store
used by the dashboard API.

Adapter failures never propagate into analytics: the SQLite stores log
the error and return None/False so callers treat the value as absent.
"""

import json
import logging
import sqlite3
from abc import ABC, abstractmethod
from contextlib import contextmanager
from datetime import date, datetime, timedelta
from typing import Any, Dict, Generator, Optional, Tuple

from .models import ContextRecord

logger = logging.getLogger(__name__)


# ============================================================================
# Interfaces
# ============================================================================


class MoodStore(ABC):
    """Persistent key/value store of mood records keyed by (date, segment)."""

    @abstractmethod
    async def load_mood(self, day: date, segment: int) -> Optional[Dict[str, Any]]:
        """
        Load one mood record.

        Returns:
            Dict with rating, note, logged_at and last_modified, or None
        """

    @abstractmethod
    async def save_mood(
        self,
        day: date,
        segment: int,
        rating: float,
        note: str = "",
        logged_at: Optional[datetime] = None,
    ) -> bool:
        """
        Insert or overwrite a mood record.

        An overwrite keeps the record's original logged_at and only moves
        last_modified forward.
        """

    @abstractmethod
    async def delete_mood(self, day: date, segment: int) -> bool:
        """Remove a mood record. Returns True when a record was removed."""

    @abstractmethod
    async def earliest_date(self) -> Optional[date]:
        """Date of the oldest stored record, or None when empty."""


class ContextStore(ABC):
    """Persistent store of one context record per date."""

    @abstractmethod
    async def load_context(self, day: date) -> Optional[ContextRecord]:
        pass

    @abstractmethod
    async def save_context(self, record: ContextRecord) -> bool:
        pass

    @abstractmethod
    async def delete_context(self, day: date) -> bool:
        pass

    async def load_context_range(
        self, start: date, end: date
    ) -> Dict[date, ContextRecord]:
        """Load every context record in the inclusive range."""
        records = {}
        day = start
        while day <= end:
            record = await self.load_context(day)
            if record is not None:
                records[day] = record
            day += timedelta(days=1)
        return records


# ============================================================================
# In-memory implementations
# ============================================================================


class InMemoryMoodStore(MoodStore):
    """Dictionary-backed mood store."""

    def __init__(self):
        self._records: Dict[Tuple[date, int], Dict[str, Any]] = {}

    async def load_mood(self, day: date, segment: int) -> Optional[Dict[str, Any]]:
        record = self._records.get((day, segment))
        return dict(record) if record is not None else None

    async def save_mood(
        self,
        day: date,
        segment: int,
        rating: float,
        note: str = "",
        logged_at: Optional[datetime] = None,
    ) -> bool:
        now = logged_at or datetime.now()
        existing = self._records.get((day, segment))
        self._records[(day, segment)] = {
            "rating": rating,
            "note": note,
            "logged_at": existing["logged_at"] if existing else now,
            "last_modified": now,
        }
        logger.debug(f"[MOOD STORE] Saved {day} segment {segment}: {rating}")
        return True

    async def delete_mood(self, day: date, segment: int) -> bool:
        return self._records.pop((day, segment), None) is not None

    async def earliest_date(self) -> Optional[date]:
        if not self._records:
            return None
        return min(day for day, _ in self._records)

    def put_raw(self, day: date, segment: int, record: Dict[str, Any]) -> None:
        """Store a record exactly as given, bypassing write semantics."""
        self._records[(day, segment)] = dict(record)


class InMemoryContextStore(ContextStore):
    """Dictionary-backed context store."""

    def __init__(self):
        self._records: Dict[date, ContextRecord] = {}

    async def load_context(self, day: date) -> Optional[ContextRecord]:
        return self._records.get(day)

    async def save_context(self, record: ContextRecord) -> bool:
        self._records[record.date] = record
        logger.debug(f"[CONTEXT STORE] Saved context for {record.date}")
        return True

    async def delete_context(self, day: date) -> bool:
        return self._records.pop(day, None) is not None

    async def load_context_range(
        self, start: date, end: date
    ) -> Dict[date, ContextRecord]:
        return {
            day: record
            for day, record in self._records.items()
            if start <= day <= end
        }


# ============================================================================
# SQLite implementations
# ============================================================================


class _SQLiteStore:
    """Shared connection handling for the SQLite stores."""

    SCHEMA = ""

    def __init__(self, db_path: str):
        self.db_path = db_path
        with self._connect() as conn:
            conn.executescript(self.SCHEMA)

    @contextmanager
    def _connect(self) -> Generator[sqlite3.Connection, None, None]:
        conn = sqlite3.connect(self.db_path, check_same_thread=False)
        conn.row_factory = sqlite3.Row  # Enable dict-like row access
        try:
            yield conn
            conn.commit()
        finally:
            conn.close()


class SQLiteMoodStore(_SQLiteStore, MoodStore):
    """Mood records in a `mood_entries` table, one row per (date, segment)."""

    SCHEMA = """
        CREATE TABLE IF NOT EXISTS mood_entries (
            date TEXT NOT NULL,
            segment INTEGER NOT NULL,
            rating REAL NOT NULL,
            note TEXT NOT NULL DEFAULT '',
            logged_at TEXT,
            last_modified TEXT,
            PRIMARY KEY (date, segment)
        );
    """

    async def load_mood(self, day: date, segment: int) -> Optional[Dict[str, Any]]:
        try:
            with self._connect() as conn:
                row = conn.execute(
                    "SELECT rating, note, logged_at, last_modified "
                    "FROM mood_entries WHERE date = ? AND segment = ?",
                    (day.isoformat(), segment),
                ).fetchone()
        except sqlite3.Error as e:
            logger.error(f"[MOOD STORE] Failed to load {day} segment {segment}: {e}")
            return None
        return dict(row) if row is not None else None

    async def save_mood(
        self,
        day: date,
        segment: int,
        rating: float,
        note: str = "",
        logged_at: Optional[datetime] = None,
    ) -> bool:
        now = (logged_at or datetime.now()).isoformat()
        try:
            with self._connect() as conn:
                conn.execute(
                    """
                    INSERT INTO mood_entries
                        (date, segment, rating, note, logged_at, last_modified)
                    VALUES (?, ?, ?, ?, ?, ?)
                    ON CONFLICT (date, segment) DO UPDATE SET
                        rating = excluded.rating,
                        note = excluded.note,
                        last_modified = excluded.last_modified
                    """,
                    (day.isoformat(), segment, rating, note, now, now),
                )
        except sqlite3.Error as e:
            logger.error(f"[MOOD STORE] Failed to save {day} segment {segment}: {e}")
            return False
        logger.debug(f"[MOOD STORE] Saved {day} segment {segment}: {rating}")
        return True

    async def delete_mood(self, day: date, segment: int) -> bool:
        try:
            with self._connect() as conn:
                cursor = conn.execute(
                    "DELETE FROM mood_entries WHERE date = ? AND segment = ?",
                    (day.isoformat(), segment),
                )
                return cursor.rowcount > 0
        except sqlite3.Error as e:
            logger.error(f"[MOOD STORE] Failed to delete {day} segment {segment}: {e}")
            return False

    async def earliest_date(self) -> Optional[date]:
        try:
            with self._connect() as conn:
                row = conn.execute("SELECT MIN(date) AS earliest FROM mood_entries").fetchone()
        except sqlite3.Error as e:
            logger.error(f"[MOOD STORE] Failed to read earliest date: {e}")
            return None
        if row is None or row["earliest"] is None:
            return None
        try:
            return date.fromisoformat(row["earliest"])
        except ValueError:
            logger.warning(f"[MOOD STORE] Unparsable stored date: {row['earliest']!r}")
            return None


class SQLiteContextStore(_SQLiteStore, ContextStore):
    """Context records serialized as JSON in a `day_context` table."""

    SCHEMA = """
        CREATE TABLE IF NOT EXISTS day_context (
            date TEXT PRIMARY KEY,
            payload TEXT NOT NULL
        );
    """

    async def load_context(self, day: date) -> Optional[ContextRecord]:
        try:
            with self._connect() as conn:
                row = conn.execute(
                    "SELECT payload FROM day_context WHERE date = ?",
                    (day.isoformat(),),
                ).fetchone()
        except sqlite3.Error as e:
            logger.error(f"[CONTEXT STORE] Failed to load {day}: {e}")
            return None
        if row is None:
            return None
        return self._decode(day, row["payload"])

    async def load_context_range(
        self, start: date, end: date
    ) -> Dict[date, ContextRecord]:
        try:
            with self._connect() as conn:
                rows = conn.execute(
                    "SELECT date, payload FROM day_context "
                    "WHERE date BETWEEN ? AND ? ORDER BY date",
                    (start.isoformat(), end.isoformat()),
                ).fetchall()
        except sqlite3.Error as e:
            logger.error(f"[CONTEXT STORE] Failed to load {start}..{end}: {e}")
            return {}

        records = {}
        for row in rows:
            record = self._decode(row["date"], row["payload"])
            if record is not None:
                records[record.date] = record
        return records

    async def save_context(self, record: ContextRecord) -> bool:
        try:
            with self._connect() as conn:
                conn.execute(
                    "INSERT OR REPLACE INTO day_context (date, payload) VALUES (?, ?)",
                    (record.date.isoformat(), json.dumps(record.to_dict())),
                )
        except sqlite3.Error as e:
            logger.error(f"[CONTEXT STORE] Failed to save {record.date}: {e}")
            return False
        logger.debug(f"[CONTEXT STORE] Saved context for {record.date}")
        return True

    async def delete_context(self, day: date) -> bool:
        try:
            with self._connect() as conn:
                cursor = conn.execute(
                    "DELETE FROM day_context WHERE date = ?", (day.isoformat(),)
                )
                return cursor.rowcount > 0
        except sqlite3.Error as e:
            logger.error(f"[CONTEXT STORE] Failed to delete {day}: {e}")
            return False

    @staticmethod
    def _decode(day, payload: str) -> Optional[ContextRecord]:
        try:
            return ContextRecord.from_dict(json.loads(payload))
        except (ValueError, KeyError, TypeError) as e:
            logger.warning(f"[CONTEXT STORE] Malformed context for {day}: {e}")
            return None
