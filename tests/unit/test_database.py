from __future__ import annotations

from pathlib import Path

from oraclevault.core.database import Database
from oraclevault.core.events import EventType


def test_append_and_query_round_trip(temp_dir: Path) -> None:
    db = Database(temp_dir / "journal.db")
    try:
        e = db.append_event(event_type=EventType.MINT_V1, payload={"holder": "0xa", "shares": 10**30})
        got = db.get_events(event_type=EventType.MINT_V1, limit=10)
        assert got[0].id == e.id
        assert got[0].payload["shares"] == 10**30
        assert db.count() == 1
    finally:
        db.close()


def test_batch_shares_one_chain(temp_dir: Path) -> None:
    db = Database(temp_dir / "journal.db")
    try:
        db.append_event(event_type=EventType.CAPS_V1, payload={"base_cap": None, "quote_cap": 5})
        out = db.append_events(
            [
                (EventType.FEES_ACCRUED_V1, {"shares": 1}),
                (EventType.MINT_V1, {"shares": 2}),
            ],
            source="vault:0xvault",
        )
        assert out[1].prev_hash == out[0].hash
        assert db.verify_hash_chain() is True
        assert [e.type for e in db.get_events(source="vault:0xvault")] == [EventType.MINT_V1, EventType.FEES_ACCRUED_V1]
    finally:
        db.close()


def test_tampering_breaks_the_chain(temp_dir: Path) -> None:
    db = Database(temp_dir / "journal.db")
    try:
        db.append_event(event_type=EventType.MINT_V1, payload={"shares": 1})
        db.append_event(event_type=EventType.BURN_V1, payload={"shares": 1})
        with db.conn:
            db.conn.execute("UPDATE events SET payload = ? WHERE seq = 1", ('{"shares":999}',))
        assert db.verify_hash_chain() is False
    finally:
        db.close()


def test_chain_resumes_after_reopen(temp_dir: Path) -> None:
    path = temp_dir / "journal.db"
    db = Database(path)
    db.append_event(event_type=EventType.MINT_V1, payload={"shares": 1})
    db.close()

    db = Database(path)
    try:
        db.append_event(event_type=EventType.BURN_V1, payload={"shares": 1})
        assert db.verify_hash_chain() is True
    finally:
        db.close()


def test_memory_journal() -> None:
    db = Database(":memory:")
    try:
        db.append_event(event_type=EventType.REBALANCE_V1, payload={})
        assert db.count() == 1
    finally:
        db.close()
