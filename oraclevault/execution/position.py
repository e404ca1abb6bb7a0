"""oraclevault.execution.position

Resting-liquidity gate.

Every change to resting offers goes through here first. The worst (lowest) active
tick on each side must sit inside the oracle band:

- asks:  worst_ask >= oracle - max_deviation
- bids:  worst_bid >= -oracle - max_deviation

The band is symmetric around fair value. Zero-size levels are inert and ignored.
Acceptance is all-or-nothing.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from oraclevault.core.exceptions import InvalidDistribution
from oraclevault.core.types import Distribution, Side
from oraclevault.governance.oracle import OracleEngine


@dataclass(frozen=True, slots=True)
class PositionCheckResult:
    approved: bool
    reasons: list[str] = field(default_factory=list)
    details: dict[str, Any] = field(default_factory=dict)


class PositionValidator:
    def __init__(self, oracle: OracleEngine) -> None:
        self.oracle = oracle

    def check(self, distribution: Distribution) -> PositionCheckResult:
        oracle_tick = self.oracle.current_tick()
        reasons: list[str] = []
        details: dict[str, Any] = {
            "oracle_tick": oracle_tick,
            "max_deviation_ticks": int(self.oracle.config.max_deviation_ticks),
        }

        worst_ask = distribution.worst_tick(Side.ASK)
        worst_bid = distribution.worst_tick(Side.BID)
        details["worst_ask"] = worst_ask
        details["worst_bid"] = worst_bid

        if worst_ask is not None and not self.oracle.accepts(worst_ask, oracle_tick=oracle_tick):
            reasons.append("ask_below_band")
        if worst_bid is not None and not self.oracle.accepts_bid(worst_bid, oracle_tick=oracle_tick):
            reasons.append("bid_below_band")

        return PositionCheckResult(approved=not reasons, reasons=reasons, details=details)

    def validate(self, distribution: Distribution) -> bool:
        return self.check(distribution).approved

    def require(self, distribution: Distribution) -> PositionCheckResult:
        res = self.check(distribution)
        if not res.approved:
            raise InvalidDistribution(f"{','.join(res.reasons)}: {res.details}")
        return res
