"""oraclevault.core.time

The only time helper surface in the codebase.

Ledger time is integer unix seconds. Wall-clock datetimes are for the journal.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from datetime import UTC, datetime

Clock = Callable[[], int]


def unix_now() -> int:
    """Return current unix time in whole seconds."""

    return int(time.time())


def utc_now() -> datetime:
    return datetime.now(tz=UTC)


def to_datetime(ts: int) -> datetime:
    return datetime.fromtimestamp(int(ts), tz=UTC)


class ManualClock:
    """A clock you advance by hand. Deterministic tests, replay tooling."""

    def __init__(self, start: int = 1_700_000_000) -> None:
        self.now = int(start)

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: int) -> int:
        self.now += int(seconds)
        return self.now

    def set(self, ts: int) -> None:
        self.now = int(ts)
