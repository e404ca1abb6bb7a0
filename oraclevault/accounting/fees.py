"""oraclevault.accounting.fees

Management fees by dilution.

Fees are never transferred out of the pool. New shares are minted to the fee
recipient so that, right after minting, the recipient owns exactly the accrued
fraction of the post-dilution supply:

    fee_fraction = annual_rate * elapsed / (RATE_PRECISION * SECONDS_PER_YEAR)
    new_shares   = supply * fee_fraction / (1 - fee_fraction)

Computed in one exact integer division. An integer ``fee_fraction`` truncated
first would round short accruals down to zero shares; this form does not, so it
charges slightly more than the truncated one for sub-unit fractions.

A single accrual charges at most one year. A longer idle gap is charged as one
year, which keeps the fraction below ``max_annual_rate / RATE_PRECISION``.
``accrue`` is idempotent at a fixed timestamp and runs at the start of every
state-changing entry point.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace

from oraclevault.accounting.shares import ShareLedger
from oraclevault.core.config import RATE_PRECISION, SECONDS_PER_YEAR
from oraclevault.core.exceptions import FeeTooHigh
from oraclevault.core.types import normalize_address
from oraclevault.governance.roles import Permission, RoleRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class FeeState:
    annual_rate: int
    fee_recipient: str
    last_accrual: int


@dataclass(frozen=True, slots=True)
class FeeAccrual:
    shares: int
    elapsed: int
    recipient: str


def fee_shares(*, supply: int, annual_rate: int, elapsed: int) -> int:
    """Shares to mint so the recipient holds the accrued fraction of the new supply."""

    if supply <= 0 or annual_rate <= 0 or elapsed <= 0:
        return 0
    if annual_rate >= RATE_PRECISION:
        raise FeeTooHigh(f"annual_rate {annual_rate} must be below {RATE_PRECISION}")
    num = int(annual_rate) * min(int(elapsed), SECONDS_PER_YEAR)
    den = RATE_PRECISION * SECONDS_PER_YEAR
    return int(supply) * num // (den - num)


class FeeAccrualEngine:
    def __init__(
        self,
        state: FeeState,
        *,
        ledger: ShareLedger,
        roles: RoleRegistry,
        max_annual_rate: int,
    ) -> None:
        if state.annual_rate < 0 or state.annual_rate > max_annual_rate:
            raise FeeTooHigh(f"annual_rate {state.annual_rate} exceeds max {max_annual_rate}")
        self.state = replace(state, fee_recipient=normalize_address(state.fee_recipient))
        self.ledger = ledger
        self.roles = roles
        self.max_annual_rate = int(max_annual_rate)

    def pending_shares(self, now: int) -> int:
        """What ``accrue(now)`` would mint, without minting it."""

        elapsed = int(now) - self.state.last_accrual
        return fee_shares(supply=self.ledger.total_supply, annual_rate=self.state.annual_rate, elapsed=elapsed)

    def accrue(self, now: int) -> FeeAccrual:
        n = int(now)
        elapsed = n - self.state.last_accrual
        if elapsed <= 0:
            return FeeAccrual(shares=0, elapsed=0, recipient=self.state.fee_recipient)

        minted = fee_shares(supply=self.ledger.total_supply, annual_rate=self.state.annual_rate, elapsed=elapsed)
        if minted > 0:
            self.ledger.mint(self.state.fee_recipient, minted)
            logger.debug(
                "fees_accrued",
                extra={"fee_shares": minted, "elapsed": elapsed, "recipient": self.state.fee_recipient},
            )
        # Zero supply or zero rate still advances the clock; nothing is owed for idle time.
        self.state = replace(self.state, last_accrual=n)
        return FeeAccrual(shares=minted, elapsed=elapsed, recipient=self.state.fee_recipient)

    def set_fee_data(self, annual_rate: int, recipient: str, *, now: int, caller: str) -> FeeAccrual:
        """Settle at the old rate, then switch. Returns the settlement."""

        self.roles.require(caller, Permission.FEES_SET)
        rate = int(annual_rate)
        if rate < 0 or rate > self.max_annual_rate:
            raise FeeTooHigh(f"annual_rate {rate} exceeds max {self.max_annual_rate}")
        settled = self.accrue(now)
        self.state = replace(self.state, annual_rate=rate, fee_recipient=normalize_address(recipient))
        return settled

    def checkpoint(self) -> FeeState:
        return self.state

    def rollback(self, checkpoint: FeeState) -> None:
        self.state = checkpoint
