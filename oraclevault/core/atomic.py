"""oraclevault.core.atomic

All-or-nothing execution for mutating entry points.

Two primitives:
- ``ReentrancyGuard``: a call-scoped flag held for the whole operation.
- ``atomic``: checkpoints every participant and rolls all of them back if the
  block raises. The exception always propagates.

Participants that cannot checkpoint are outside the rollback and must revert
their own effects when they raise.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from typing import Any

from oraclevault.core.exceptions import ReentrancyError
from oraclevault.core.interfaces import Checkpointable

logger = logging.getLogger(__name__)


class ReentrancyGuard:
    def __init__(self) -> None:
        self._entered = False
        self._holder: str | None = None

    @property
    def entered(self) -> bool:
        return self._entered

    @contextmanager
    def hold(self, name: str) -> Iterator[None]:
        if self._entered:
            raise ReentrancyError(f"{name} re-entered while {self._holder} is running")
        self._entered = True
        self._holder = name
        try:
            yield
        finally:
            self._entered = False
            self._holder = None


def participants_of(objs: Iterable[Any]) -> list[Checkpointable]:
    """Keep only objects that can checkpoint, without duplicates."""

    seen: set[int] = set()
    out: list[Checkpointable] = []
    for o in objs:
        if o is None or id(o) in seen:
            continue
        if isinstance(o, Checkpointable):
            seen.add(id(o))
            out.append(o)
    return out


@contextmanager
def atomic(participants: Iterable[Any], *, name: str = "operation") -> Iterator[None]:
    parts = participants_of(participants)
    checkpoints = [(p, p.checkpoint()) for p in parts]
    try:
        yield
    except BaseException as exc:
        for p, cp in reversed(checkpoints):
            p.rollback(cp)
        logger.info("atomic_rollback", extra={"operation": name, "error": type(exc).__name__})
        raise
