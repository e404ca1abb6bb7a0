"""oraclevault.execution.rebalance

Manager trades through whitelisted external targets.

The target gets an allowance for exactly ``amount_in`` of the source token and
an opaque payload. What it actually did is measured from balance deltas only.
If it sent anything, the realized price must be within the oracle band (better
than fair always passes). The allowance is revoked afterwards, and leftovers go
back to the strategy if it is active.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from oraclevault.core.exceptions import (
    ExternalCallError,
    InsufficientBalance,
    InvalidTradeTick,
    OracleVaultError,
    SlippageExceeded,
    ZeroAmount,
)
from oraclevault.core.interfaces import RebalanceTarget, Token
from oraclevault.core.tick import tick_from_volumes
from oraclevault.core.types import TradeDirection
from oraclevault.execution.address_book import AddressBook
from oraclevault.execution.strategy import StrategyLink
from oraclevault.governance.oracle import OracleEngine
from oraclevault.governance.whitelist import Whitelist

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RebalanceOrder:
    target: str
    direction: TradeDirection
    amount_in: int
    min_amount_out: int = 0
    payload: Mapping[str, Any] = field(default_factory=dict)
    withdraw_all: bool = False


@dataclass(frozen=True, slots=True)
class RebalanceResult:
    sent: int
    received: int
    tick: int | None
    swept_base: int = 0
    swept_quote: int = 0


class RebalanceGuard:
    def __init__(
        self,
        *,
        link: StrategyLink,
        oracle: OracleEngine,
        whitelist: Whitelist,
        address_book: AddressBook,
    ) -> None:
        self.link = link
        self.oracle = oracle
        self.whitelist = whitelist
        self.address_book = address_book

    def _tokens(self, direction: TradeDirection) -> tuple[Token, Token]:
        if direction is TradeDirection.SELL_BASE:
            return self.link.base, self.link.quote
        return self.link.quote, self.link.base

    def _price_ok(self, direction: TradeDirection, tick: int) -> bool:
        if direction is TradeDirection.SELL_BASE:
            return self.oracle.accepts(tick)
        return self.oracle.accepts_bid(tick)

    def execute(self, order: RebalanceOrder) -> RebalanceResult:
        self.whitelist.require(order.target)
        amount_in = int(order.amount_in)
        if amount_in <= 0:
            raise ZeroAmount("rebalance amount_in must be > 0")

        direction = TradeDirection(order.direction)
        token_in, token_out = self._tokens(direction)
        vault = self.link.vault_address
        callee: RebalanceTarget = self.address_book.resolve(order.target)

        if order.withdraw_all:
            self.link.withdraw_all()
        else:
            need_base, need_quote = (amount_in, 0) if direction is TradeDirection.SELL_BASE else (0, amount_in)
            self.link.withdraw_shortfall(need_base, need_quote)

        have = token_in.balance_of(vault)
        if have < amount_in:
            raise InsufficientBalance(f"need {amount_in} of {token_in.address}, have {have}")

        before_in = token_in.balance_of(vault)
        before_out = token_out.balance_of(vault)

        token_in.approve(vault, callee.address, amount_in)
        try:
            callee.call(vault, order.payload)
        except OracleVaultError:
            raise
        except Exception as e:
            raise ExternalCallError(f"rebalance target {callee.address} failed: {e}") from e
        finally:
            token_in.approve(vault, callee.address, 0)

        sent = max(0, before_in - token_in.balance_of(vault))
        received = max(0, token_out.balance_of(vault) - before_out)

        if received < int(order.min_amount_out):
            raise SlippageExceeded(f"received {received} < min_amount_out {order.min_amount_out}")

        tick: int | None = None
        if sent > 0:
            if received == 0:
                raise InvalidTradeTick(f"sent {sent} and received nothing")
            tick = tick_from_volumes(received, sent)
            if not self._price_ok(direction, tick):
                raise InvalidTradeTick(
                    f"{direction} tick {tick} outside band (oracle {self.oracle.current_tick()}, "
                    f"max deviation {self.oracle.config.max_deviation_ticks})"
                )

        swept_b, swept_q = self.link.sweep_if_active()
        logger.info(
            "rebalance_executed",
            extra={"target": callee.address, "direction": str(direction), "sent": sent, "received": received},
        )
        return RebalanceResult(sent=sent, received=received, tick=tick, swept_base=swept_b, swept_quote=swept_q)
