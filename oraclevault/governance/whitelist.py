"""oraclevault.governance.whitelist

Rebalance targets go through the same timelock as oracle changes.

Some addresses can never be targets: the strategy itself and the two traded
tokens. Calling those with vault allowance would let a manager move funds
without any price check.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from oraclevault.core.exceptions import AlreadyWhitelisted, InvalidWhitelistTarget, NotWhitelisted
from oraclevault.core.types import normalize_address
from oraclevault.governance.roles import Permission, RoleRegistry
from oraclevault.governance.timelock import GovernanceTimelock, TimelockedProposal

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class WhitelistEntry:
    address: str
    is_whitelisted: bool
    proposed_at: int | None = None


class Whitelist:
    def __init__(
        self,
        *,
        roles: RoleRegistry,
        clock: Callable[[], int],
        timelock_seconds: Callable[[], int],
        forbidden: Iterable[str] = (),
    ) -> None:
        self.roles = roles
        self._clock = clock
        self._forbidden = frozenset(normalize_address(a) for a in forbidden)
        self._approved: set[str] = set()
        self._proposals: GovernanceTimelock[bool] = GovernanceTimelock(
            timelock_seconds=timelock_seconds,
            overwrite=False,
            guard=self._guard,
        )

    def _guard(self, key: str, _value: bool) -> None:
        if key in self._forbidden:
            raise InvalidWhitelistTarget(f"{key} cannot be a rebalance target")
        if key in self._approved:
            raise AlreadyWhitelisted(f"{key} is already whitelisted")

    def entry(self, address: str) -> WhitelistEntry:
        key = normalize_address(address)
        p = self._proposals.pending(key)
        return WhitelistEntry(
            address=key,
            is_whitelisted=key in self._approved,
            proposed_at=None if p is None else p.proposed_at,
        )

    def is_whitelisted(self, address: str) -> bool:
        return normalize_address(address) in self._approved

    def require(self, address: str) -> None:
        if not self.is_whitelisted(address):
            raise NotWhitelisted(f"{address} is not a whitelisted rebalance target")

    def propose(self, address: str, *, caller: str) -> WhitelistEntry:
        self.roles.require(caller, Permission.WHITELIST_PROPOSE)
        key = normalize_address(address)
        self._proposals.propose(key, True, now=int(self._clock()))
        logger.info("whitelist_proposed", extra={"target": key})
        return self.entry(key)

    def accept(self, address: str, *, caller: str) -> WhitelistEntry:
        self.roles.require(caller, Permission.WHITELIST_ACCEPT)
        key = normalize_address(address)
        self._proposals.accept(key, now=int(self._clock()))
        self._approved.add(key)
        logger.info("whitelist_accepted", extra={"target": key})
        return self.entry(key)

    def reject(self, address: str, *, caller: str) -> WhitelistEntry:
        self.roles.require(caller, Permission.WHITELIST_REJECT)
        key = normalize_address(address)
        self._proposals.reject(key)
        logger.info("whitelist_rejected", extra={"target": key})
        return self.entry(key)

    def remove(self, address: str, *, caller: str) -> WhitelistEntry:
        """Immediate. Removing a target can only reduce what a manager can do."""

        self.roles.require(caller, Permission.WHITELIST_REMOVE)
        key = normalize_address(address)
        if key not in self._approved:
            raise NotWhitelisted(f"{key} is not whitelisted")
        self._approved.discard(key)
        logger.info("whitelist_removed", extra={"target": key})
        return self.entry(key)

    def unlocks_at(self, address: str) -> int | None:
        return self._proposals.unlocks_at(normalize_address(address))

    def approved(self) -> list[str]:
        return sorted(self._approved)

    def pending(self) -> list[str]:
        return self._proposals.keys()

    def checkpoint(self) -> tuple[set[str], dict[str, TimelockedProposal[bool]]]:
        return set(self._approved), self._proposals.checkpoint()

    def rollback(self, checkpoint: tuple[set[str], dict[str, TimelockedProposal[bool]]]) -> None:
        approved, proposals = checkpoint
        self._approved = set(approved)
        self._proposals.rollback(proposals)
