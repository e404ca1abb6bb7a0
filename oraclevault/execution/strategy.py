"""oraclevault.execution.strategy

The vault's side of the liquidity strategy.

Tracks whether the strategy is active and moves funds between local custody and
the strategy. Balances are always re-read from the tokens and the strategy;
nothing a callee reports about amounts moved is trusted.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from oraclevault.core.interfaces import Strategy, Token
from oraclevault.core.types import Distribution, Side, StrategyParams

logger = logging.getLogger(__name__)


@dataclass
class StrategyLink:
    vault_address: str
    base: Token
    quote: Token
    strategy: Strategy
    active: bool = False

    def local_balances(self) -> tuple[int, int]:
        return self.base.balance_of(self.vault_address), self.quote.balance_of(self.vault_address)

    def strategy_balances(self) -> tuple[int, int]:
        return self.strategy.reserve_balance(Side.ASK), self.strategy.reserve_balance(Side.BID)

    def deposit_local(self) -> tuple[int, int]:
        """Move all local funds into the strategy. Returns what actually left local custody."""

        lb, lq = self.local_balances()
        if lb == 0 and lq == 0:
            return 0, 0
        self.base.approve(self.vault_address, self.strategy.address, lb)
        self.quote.approve(self.vault_address, self.strategy.address, lq)
        try:
            self.strategy.deposit_funds(self.vault_address, lb, lq)
        finally:
            self.base.approve(self.vault_address, self.strategy.address, 0)
            self.quote.approve(self.vault_address, self.strategy.address, 0)
        after_b, after_q = self.local_balances()
        return lb - after_b, lq - after_q

    def withdraw_shortfall(self, need_base: int, need_quote: int) -> tuple[int, int]:
        """Pull just enough from the strategy to hold ``need_*`` locally (as far as it can)."""

        lb, lq = self.local_balances()
        sb, sq = self.strategy_balances()
        take_b = min(max(0, int(need_base) - lb), sb)
        take_q = min(max(0, int(need_quote) - lq), sq)
        if take_b == 0 and take_q == 0:
            return 0, 0
        self.strategy.withdraw_funds(self.vault_address, take_b, take_q, self.vault_address)
        after_b, after_q = self.local_balances()
        logger.info("strategy_withdraw_shortfall", extra={"base": after_b - lb, "quote": after_q - lq})
        return after_b - lb, after_q - lq

    def withdraw_all(self) -> tuple[int, int]:
        """Retract every offer and pull every unit back. The strategy is inactive afterwards."""

        lb, lq = self.local_balances()
        self.strategy.withdraw_all(self.vault_address, self.vault_address)
        self.active = False
        after_b, after_q = self.local_balances()
        logger.info("strategy_withdraw_all", extra={"base": after_b - lb, "quote": after_q - lq})
        return after_b - lb, after_q - lq

    def populate(self, distribution: Distribution, params: StrategyParams) -> tuple[int, int]:
        lb, lq = self.local_balances()
        self.base.approve(self.vault_address, self.strategy.address, lb)
        self.quote.approve(self.vault_address, self.strategy.address, lq)
        try:
            self.strategy.populate(self.vault_address, distribution, params, lb, lq)
        finally:
            self.base.approve(self.vault_address, self.strategy.address, 0)
            self.quote.approve(self.vault_address, self.strategy.address, 0)
        self.active = True
        after_b, after_q = self.local_balances()
        return lb - after_b, lq - after_q

    def retract(self, from_index: int, to_index: int) -> None:
        self.strategy.retract(self.vault_address, int(from_index), int(to_index))

    def sweep_if_active(self) -> tuple[int, int]:
        if not self.active:
            return 0, 0
        return self.deposit_local()

    def checkpoint(self) -> bool:
        return self.active

    def rollback(self, checkpoint: bool) -> None:
        self.active = checkpoint
