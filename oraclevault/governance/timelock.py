"""oraclevault.governance.timelock

Propose / accept / reject, keyed.

A proposal is locked while ``now - proposed_at < timelock``. A proposal dated in
the future is always locked. Acceptance pops the proposal; rejection clears it at
any time, before or after the window.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

from oraclevault.core.exceptions import AlreadyProposed, NoProposal, Timelocked

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class TimelockedProposal(Generic[T]):
    value: T
    proposed_at: int


def is_locked(proposed_at: int, *, now: int, timelock_seconds: int) -> bool:
    if proposed_at > now:
        return True
    return now - proposed_at < timelock_seconds


class GovernanceTimelock(Generic[T]):
    """Pending proposals keyed by ``str``.

    ``overwrite=False`` means a second proposal for the same key fails
    ``AlreadyProposed`` until the first one is rejected or accepted.
    ``guard`` runs before anything is recorded and raises to refuse a value.
    """

    def __init__(
        self,
        *,
        timelock_seconds: Callable[[], int],
        overwrite: bool = False,
        guard: Callable[[str, T], None] | None = None,
    ) -> None:
        self._timelock_seconds = timelock_seconds
        self._overwrite = overwrite
        self._guard = guard
        self._pending: dict[str, TimelockedProposal[T]] = {}

    @property
    def timelock_seconds(self) -> int:
        return int(self._timelock_seconds())

    def pending(self, key: str) -> TimelockedProposal[T] | None:
        return self._pending.get(key)

    def keys(self) -> list[str]:
        return sorted(self._pending)

    def is_locked(self, key: str, *, now: int) -> bool:
        p = self._pending.get(key)
        if p is None:
            raise NoProposal(f"no proposal pending for {key}")
        return is_locked(p.proposed_at, now=now, timelock_seconds=self.timelock_seconds)

    def unlocks_at(self, key: str) -> int | None:
        p = self._pending.get(key)
        return None if p is None else p.proposed_at + self.timelock_seconds

    def propose(self, key: str, value: T, *, now: int) -> TimelockedProposal[T]:
        if self._guard is not None:
            self._guard(key, value)
        if not self._overwrite and key in self._pending:
            raise AlreadyProposed(f"proposal already pending for {key}")
        proposal = TimelockedProposal(value=value, proposed_at=int(now))
        self._pending[key] = proposal
        return proposal

    def accept(self, key: str, *, now: int) -> TimelockedProposal[T]:
        p = self._pending.get(key)
        if p is None:
            raise NoProposal(f"no proposal pending for {key}")
        if is_locked(p.proposed_at, now=now, timelock_seconds=self.timelock_seconds):
            raise Timelocked(f"{key} unlocks at {p.proposed_at + self.timelock_seconds}, now {now}")
        del self._pending[key]
        return p

    def reject(self, key: str) -> TimelockedProposal[T]:
        p = self._pending.pop(key, None)
        if p is None:
            raise NoProposal(f"no proposal pending for {key}")
        return p

    def checkpoint(self) -> dict[str, TimelockedProposal[T]]:
        return dict(self._pending)

    def rollback(self, checkpoint: dict[str, TimelockedProposal[T]]) -> None:
        self._pending = dict(checkpoint)
