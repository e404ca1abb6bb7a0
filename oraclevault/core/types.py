"""oraclevault.core.types

Plain value types shared across layers. No behavior beyond small derivations.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from oraclevault.core.exceptions import ValidationError


def normalize_address(address: str) -> str:
    """Addresses compare case-insensitively."""

    a = str(address).strip().lower()
    if not a:
        raise ValidationError("address must be non-empty")
    return a


class Side(StrEnum):
    ASK = "ask"  # sells base for quote
    BID = "bid"  # sells quote for base


class TradeDirection(StrEnum):
    SELL_BASE = "sell_base"
    BUY_BASE = "buy_base"


@dataclass(frozen=True, slots=True)
class OfferLevel:
    """One resting price level. ``gives`` is the outbound volume; zero is inert."""

    index: int
    tick: int
    gives: int


@dataclass(frozen=True, slots=True)
class Distribution:
    asks: tuple[OfferLevel, ...] = ()
    bids: tuple[OfferLevel, ...] = ()

    def active(self, side: Side) -> tuple[OfferLevel, ...]:
        levels = self.asks if side is Side.ASK else self.bids
        return tuple(lv for lv in levels if lv.gives > 0)

    def worst_tick(self, side: Side) -> int | None:
        """Minimum (most aggressive) active tick on one side, or None if the side is empty."""

        ticks = [lv.tick for lv in self.active(side)]
        return min(ticks) if ticks else None


@dataclass(frozen=True, slots=True)
class StrategyParams:
    """Opaque-to-the-core parameters handed to the liquidity strategy."""

    price_points: int = 0
    step_size: int = 1
    gasreq: int = 0
    gasprice: int = 0
    extra: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class VaultPosition:
    local_base: int
    local_quote: int
    strategy_base: int
    strategy_quote: int
    total_shares: int

    @property
    def total_base(self) -> int:
        return self.local_base + self.strategy_base

    @property
    def total_quote(self) -> int:
        return self.local_quote + self.strategy_quote


@dataclass(frozen=True, slots=True)
class MintQuote:
    shares: int
    base_in: int
    quote_in: int
    initial: bool = False
    locked_shares: int = 0
