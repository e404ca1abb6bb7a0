"""oraclevault.core

Core primitives: config, errors, ticks, atomicity, the journal.

If a module needs to exist, it should probably depend only on this package.
"""

from .config import Config
from .database import Database
from .events import Event, EventType
from .exceptions import OracleVaultError
from .time import ManualClock, unix_now

__all__ = [
    "Config",
    "Database",
    "Event",
    "EventType",
    "ManualClock",
    "OracleVaultError",
    "unix_now",
]
