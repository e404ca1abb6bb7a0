"""oraclevault.governance.oracle

Where price truth comes from, and how it is allowed to change.

The active config resolves a tick either from a static value or from an external
feed. Changing it is a two-key process: the owner proposes and, after the
timelock, accepts; the guardian can veto at any point before acceptance.

Resolution never falls back to stale data. A feed that raises, is missing, or
returns an unrepresentable tick makes the whole calling operation fail.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, replace
from typing import Any

from oraclevault.core.exceptions import InvalidOracle, NoProposal, OracleUnavailable
from oraclevault.core.interfaces import PriceSource
from oraclevault.core.tick import MAX_TICK, MIN_TICK, in_range
from oraclevault.governance.roles import Permission, Role, RoleRegistry
from oraclevault.governance.timelock import GovernanceTimelock, TimelockedProposal, is_locked

logger = logging.getLogger(__name__)

_ORACLE_KEY = "oracle"
MAX_DEVIATION_TICKS = MAX_TICK - MIN_TICK


@dataclass(frozen=True, slots=True)
class OracleConfig:
    is_static: bool
    static_tick: int = 0
    source: PriceSource | None = None
    max_deviation_ticks: int = 100
    timelock_minutes: int = 1440
    proposed_at: int = 0

    @classmethod
    def static(cls, tick: int, *, max_deviation_ticks: int, timelock_minutes: int) -> OracleConfig:
        return cls(
            is_static=True,
            static_tick=int(tick),
            max_deviation_ticks=int(max_deviation_ticks),
            timelock_minutes=int(timelock_minutes),
        )

    @classmethod
    def dynamic(cls, source: PriceSource, *, max_deviation_ticks: int, timelock_minutes: int) -> OracleConfig:
        return cls(
            is_static=False,
            source=source,
            max_deviation_ticks=int(max_deviation_ticks),
            timelock_minutes=int(timelock_minutes),
        )

    @property
    def timelock_seconds(self) -> int:
        return int(self.timelock_minutes) * 60

    def describe(self) -> dict[str, Any]:
        src = None
        if self.source is not None:
            src = str(getattr(self.source, "address", type(self.source).__name__))
        return {
            "is_static": bool(self.is_static),
            "static_tick": int(self.static_tick),
            "source": src,
            "max_deviation_ticks": int(self.max_deviation_ticks),
            "timelock_minutes": int(self.timelock_minutes),
            "proposed_at": int(self.proposed_at),
        }


def _query(source: PriceSource | None) -> int:
    fn = getattr(source, "current_tick", None)
    if source is None or not callable(fn):
        raise OracleUnavailable("oracle source unset or has no current_tick")
    try:
        tick = int(fn())
    except Exception as e:
        raise OracleUnavailable(f"oracle source failed: {e}") from e
    if not in_range(tick):
        raise OracleUnavailable(f"oracle source returned out-of-range tick {tick}")
    return tick


def resolve_tick(cfg: OracleConfig) -> int:
    if cfg.is_static:
        return int(cfg.static_tick)
    return _query(cfg.source)


def validate_config(cfg: OracleConfig) -> None:
    """Raise ``InvalidOracle`` unless ``cfg`` resolves a representable tick right now."""

    if cfg.is_static and cfg.source is not None:
        raise InvalidOracle("static config must not carry a dynamic source")
    if cfg.max_deviation_ticks < 0 or cfg.max_deviation_ticks > MAX_DEVIATION_TICKS:
        raise InvalidOracle(f"max_deviation_ticks out of range: {cfg.max_deviation_ticks}")
    if cfg.timelock_minutes < 0:
        raise InvalidOracle("timelock_minutes must be >= 0")
    if cfg.is_static:
        if not in_range(cfg.static_tick):
            raise InvalidOracle(f"static tick out of range: {cfg.static_tick}")
        return
    try:
        _query(cfg.source)
    except OracleUnavailable as e:
        raise InvalidOracle(str(e)) from e


class OracleEngine:
    """Active oracle config plus a single pending proposal slot."""

    def __init__(self, config: OracleConfig, *, roles: RoleRegistry, clock: Callable[[], int]) -> None:
        validate_config(config)
        self._clock = clock
        self.roles = roles
        # Construction bypasses the timelock.
        self._active = replace(config, proposed_at=int(clock()))
        self._proposals: GovernanceTimelock[OracleConfig] = GovernanceTimelock(
            timelock_seconds=lambda: self._active.timelock_seconds,
            overwrite=True,
        )

    @property
    def config(self) -> OracleConfig:
        return self._active

    @property
    def pending(self) -> OracleConfig | None:
        p = self._proposals.pending(_ORACLE_KEY)
        return None if p is None else p.value

    def current_tick(self) -> int:
        return resolve_tick(self._active)

    def accepts(self, tick: int, *, oracle_tick: int | None = None) -> bool:
        """Ask-side check: ``tick >= oracle - max_deviation``. Better than fair always passes."""

        ref = self.current_tick() if oracle_tick is None else int(oracle_tick)
        return int(tick) >= ref - int(self._active.max_deviation_ticks)

    def accepts_bid(self, tick: int, *, oracle_tick: int | None = None) -> bool:
        """Bid-side check against the negated oracle tick."""

        ref = self.current_tick() if oracle_tick is None else int(oracle_tick)
        return self.accepts(tick, oracle_tick=-ref)

    def within_band(self, tick: int, *, oracle_tick: int | None = None) -> bool:
        ref = self.current_tick() if oracle_tick is None else int(oracle_tick)
        return abs(int(tick) - ref) <= int(self._active.max_deviation_ticks)

    def propose_config(self, cfg: OracleConfig, *, caller: str) -> OracleConfig:
        self.roles.require(caller, Permission.ORACLE_PROPOSE)
        validate_config(cfg)
        now = int(self._clock())
        proposal = replace(cfg, proposed_at=now)
        self._proposals.propose(_ORACLE_KEY, proposal, now=now)
        logger.info("oracle_config_proposed", extra={"config": proposal.describe()})
        return proposal

    def accept_config(self, *, caller: str) -> OracleConfig:
        self.roles.require(caller, Permission.ORACLE_ACCEPT)
        accepted: TimelockedProposal[OracleConfig] = self._proposals.accept(_ORACLE_KEY, now=int(self._clock()))
        self._active = accepted.value
        logger.info("oracle_config_accepted", extra={"config": self._active.describe()})
        return self._active

    def reject_config(self, *, caller: str) -> OracleConfig:
        self.roles.require(caller, Permission.ORACLE_REJECT)
        rejected = self._proposals.reject(_ORACLE_KEY)
        logger.info("oracle_config_rejected", extra={"config": rejected.value.describe()})
        return rejected.value

    def is_pending_locked(self) -> bool:
        p = self._proposals.pending(_ORACLE_KEY)
        if p is None:
            raise NoProposal("no oracle proposal pending")
        return is_locked(p.proposed_at, now=int(self._clock()), timelock_seconds=self._active.timelock_seconds)

    def pending_unlocks_at(self) -> int | None:
        return self._proposals.unlocks_at(_ORACLE_KEY)

    def set_guardian(self, new_guardian: str, *, caller: str) -> str:
        return self.roles.assign(Role.GUARDIAN, new_guardian, caller=caller)

    def checkpoint(self) -> tuple[OracleConfig, dict[str, TimelockedProposal[OracleConfig]]]:
        return self._active, self._proposals.checkpoint()

    def rollback(self, checkpoint: tuple[OracleConfig, dict[str, TimelockedProposal[OracleConfig]]]) -> None:
        active, proposals = checkpoint
        self._active = active
        self._proposals.rollback(proposals)
