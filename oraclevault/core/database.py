"""oraclevault.core.database

The journal: append-only events with a hash chain.

Vault state lives in memory; the journal is the durable account of how it got there.
"""

from __future__ import annotations

import json
import sqlite3
import threading
import uuid
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from oraclevault.core.events import Event, EventType, canonical_json, compute_event_hash
from oraclevault.core.exceptions import JournalError

SCHEMA = """
CREATE TABLE IF NOT EXISTS events (
    seq INTEGER PRIMARY KEY AUTOINCREMENT,
    id TEXT NOT NULL UNIQUE,
    type TEXT NOT NULL,
    ts TEXT NOT NULL,
    source TEXT,
    payload TEXT NOT NULL,
    prev_hash TEXT,
    hash TEXT NOT NULL UNIQUE
);

CREATE INDEX IF NOT EXISTS idx_events_type ON events(type);
CREATE INDEX IF NOT EXISTS idx_events_source ON events(source);
"""


def _iso_to_dt(value: str) -> datetime:
    dt = datetime.fromisoformat(value)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


@dataclass
class Database:
    """SQLite event journal with hash chain. Use ``":memory:"`` for throwaway journals."""

    db_path: Path | str

    def __post_init__(self) -> None:
        if str(self.db_path) != ":memory:":
            self.db_path = Path(self.db_path)
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self.conn = sqlite3.connect(str(self.db_path), check_same_thread=False)
        self.conn.row_factory = sqlite3.Row
        self._lock = threading.RLock()
        with self.conn:
            self.conn.executescript(SCHEMA)
        self._last_hash = self._get_last_hash()

    def close(self) -> None:
        self.conn.close()

    def _get_last_hash(self) -> str | None:
        row = self.conn.execute("SELECT hash FROM events ORDER BY seq DESC LIMIT 1").fetchone()
        return None if row is None else str(row[0])

    def append_event(
        self,
        *,
        event_type: EventType,
        payload: dict[str, Any],
        source: str | None = None,
        ts: datetime | None = None,
    ) -> Event:
        return self.append_events([(event_type, payload)], source=source, ts=ts)[0]

    def _insert(self, event_type: EventType, payload: dict[str, Any], source: str | None, at: datetime) -> Event:
        body = json.loads(canonical_json(payload))
        eid = str(uuid.uuid4())
        prev = self._last_hash
        h = compute_event_hash(prev_hash=prev, event_id=eid, event_type=event_type, ts=at, source=source, payload=body)
        cur = self.conn.execute(
            "INSERT INTO events (id, type, ts, source, payload, prev_hash, hash) VALUES (?, ?, ?, ?, ?, ?, ?)",
            (eid, str(event_type), at.isoformat(), source, canonical_json(body), prev, h),
        )
        self._last_hash = h
        return Event(
            id=eid,
            seq=int(cur.lastrowid or 0),
            type=event_type,
            ts=at,
            source=source,
            payload=body,
            prev_hash=prev,
            hash=h,
        )

    def append_events(
        self,
        events: list[tuple[EventType, dict[str, Any]]],
        *,
        source: str | None = None,
        ts: datetime | None = None,
    ) -> list[Event]:
        """Append a batch in one SQLite transaction. All land or none do."""

        at = ts or datetime.now(tz=UTC)
        at = (at if at.tzinfo else at.replace(tzinfo=UTC)).astimezone(UTC)
        with self._lock:
            tip = self._last_hash
            try:
                with self.conn:
                    return [self._insert(t, p, source, at) for t, p in events]
            except sqlite3.Error as e:
                self._last_hash = tip
                raise JournalError(str(e)) from e

    def get_events(
        self,
        *,
        event_type: EventType | None = None,
        source: str | None = None,
        limit: int = 100,
    ) -> list[Event]:
        """Most recent first."""

        q = "SELECT * FROM events WHERE 1=1"
        params: list[Any] = []
        if event_type is not None:
            q += " AND type = ?"
            params.append(str(event_type))
        if source is not None:
            q += " AND source = ?"
            params.append(source)
        q += " ORDER BY seq DESC LIMIT ?"
        params.append(int(limit))

        rows = self.conn.execute(q, tuple(params)).fetchall()
        return [self._row_to_event(r) for r in rows]

    def count(self) -> int:
        row = self.conn.execute("SELECT COUNT(1) FROM events").fetchone()
        return int(row[0]) if row else 0

    def verify_hash_chain(self) -> bool:
        rows = self.conn.execute("SELECT * FROM events ORDER BY seq ASC").fetchall()
        prev: str | None = None
        for row in rows:
            if (row["prev_hash"] or None) != prev:
                return False
            expected = compute_event_hash(
                prev_hash=prev,
                event_id=str(row["id"]),
                event_type=EventType(str(row["type"])),
                ts=_iso_to_dt(str(row["ts"])),
                source=row["source"],
                payload=json.loads(str(row["payload"])),
            )
            if expected != str(row["hash"]):
                return False
            prev = expected
        return True

    def _row_to_event(self, row: sqlite3.Row) -> Event:
        return Event(
            id=str(row["id"]),
            seq=int(row["seq"]),
            type=EventType(str(row["type"])),
            ts=_iso_to_dt(str(row["ts"])),
            source=row["source"],
            payload=json.loads(row["payload"]),
            prev_hash=row["prev_hash"],
            hash=str(row["hash"]),
        )
