"""oraclevault.accounting.shares

Proportional share math.

Rounding always favors the pool: shares out are floored, tokens in are ceiled,
tokens out are floored.

The first mint is priced by the oracle instead of by reserves, and a fixed
minimum-liquidity floor is locked forever. Without the floor, a depositor could
mint dust shares and inflate the per-share price for everyone after them.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from oraclevault.core.config import VaultSettings
from oraclevault.core.exceptions import (
    CapExceeded,
    InsufficientBalance,
    InvalidInitialMintAmounts,
    ZeroAmount,
)
from oraclevault.core.tick import (
    inbound_from_outbound,
    inbound_from_outbound_up,
    outbound_from_inbound,
    tick_from_volumes,
)
from oraclevault.core.types import MintQuote, VaultPosition, normalize_address


def _ceil_div(a: int, b: int) -> int:
    return -(-a // b)


class ShareLedger:
    """Holder balances plus one unowned, permanently locked bucket."""

    def __init__(self) -> None:
        self._balances: dict[str, int] = {}
        self._locked = 0

    @property
    def total_supply(self) -> int:
        return sum(self._balances.values()) + self._locked

    @property
    def locked(self) -> int:
        return self._locked

    def balance_of(self, holder: str) -> int:
        return self._balances.get(normalize_address(holder), 0)

    def holders(self) -> dict[str, int]:
        return dict(self._balances)

    def mint(self, to: str, amount: int) -> None:
        if amount < 0:
            raise ValueError("mint amount must be >= 0")
        key = normalize_address(to)
        self._balances[key] = self._balances.get(key, 0) + int(amount)

    def lock(self, amount: int) -> None:
        if amount < 0:
            raise ValueError("lock amount must be >= 0")
        self._locked += int(amount)

    def burn(self, holder: str, amount: int) -> None:
        key = normalize_address(holder)
        have = self._balances.get(key, 0)
        if amount > have:
            raise InsufficientBalance(f"{key} holds {have} shares, tried to burn {amount}")
        remaining = have - int(amount)
        if remaining:
            self._balances[key] = remaining
        else:
            self._balances.pop(key, None)

    def checkpoint(self) -> tuple[dict[str, int], int]:
        return dict(self._balances), self._locked

    def rollback(self, checkpoint: tuple[dict[str, int], int]) -> None:
        balances, locked = checkpoint
        self._balances = dict(balances)
        self._locked = locked


@dataclass
class ShareAccounting:
    """Sizing for mints and burns. Pure arithmetic over a ``VaultPosition``."""

    settings: VaultSettings
    oracle_tick: Callable[[], int]
    within_band: Callable[[int, int], bool]
    base_cap: int | None = None
    quote_cap: int | None = None

    def __post_init__(self) -> None:
        if self.base_cap is None:
            self.base_cap = self.settings.base_cap
        if self.quote_cap is None:
            self.quote_cap = self.settings.quote_cap

    def shares_for_deposit(self, max_base: int, max_quote: int, position: VaultPosition) -> MintQuote:
        mb, mq = int(max_base), int(max_quote)
        if mb < 0 or mq < 0:
            raise ValueError("deposit maxima must be >= 0")
        if position.total_shares == 0:
            return self._initial_mint(mb, mq)

        supply = position.total_shares
        tb, tq = position.total_base, position.total_quote
        if tb == 0 and tq == 0:
            raise ZeroAmount("pool has shares but no backing")
        if tb == 0:
            shares = mq * supply // tq
        elif tq == 0:
            shares = mb * supply // tb
        else:
            shares = min(mb * supply // tb, mq * supply // tq)

        return MintQuote(
            shares=shares,
            base_in=_ceil_div(tb * shares, supply),
            quote_in=_ceil_div(tq * shares, supply),
        )

    def _initial_mint(self, max_base: int, max_quote: int) -> MintQuote:
        if max_base == 0 and max_quote == 0:
            raise InvalidInitialMintAmounts("both deposit maxima are zero")

        tick = int(self.oracle_tick())
        base_in = outbound_from_inbound(tick, max_quote)
        if base_in > max_base:
            base_in = max_base
            quote_in = inbound_from_outbound_up(tick, base_in)
        else:
            quote_in = max_quote

        if base_in == 0 or quote_in == 0:
            raise InvalidInitialMintAmounts(f"one-sided initial mint: base={base_in} quote={quote_in}")

        # Re-check the realized ratio, not the inputs; rounding can drift it.
        realized = tick_from_volumes(quote_in, base_in)
        if not self.within_band(realized, tick):
            raise InvalidInitialMintAmounts(f"initial ratio tick {realized} outside band around {tick}")

        gross = (quote_in + inbound_from_outbound(tick, base_in)) * self.settings.share_scale
        floor = int(self.settings.minimum_liquidity)
        if gross <= floor:
            raise InvalidInitialMintAmounts(f"initial deposit worth {gross} shares, floor is {floor}")

        return MintQuote(
            shares=gross - floor,
            base_in=base_in,
            quote_in=quote_in,
            initial=True,
            locked_shares=floor,
        )

    def amounts_for_burn(self, shares: int, position: VaultPosition) -> tuple[int, int]:
        s = int(shares)
        supply = position.total_shares
        if s <= 0:
            raise ZeroAmount("burn amount must be > 0")
        if s > supply:
            raise InsufficientBalance(f"burn of {s} exceeds supply {supply}")
        return position.total_base * s // supply, position.total_quote * s // supply

    def check_caps(self, position: VaultPosition, base_in: int, quote_in: int) -> None:
        if self.base_cap is not None and position.total_base + base_in > self.base_cap:
            raise CapExceeded(f"base total {position.total_base + base_in} > cap {self.base_cap}")
        if self.quote_cap is not None and position.total_quote + quote_in > self.quote_cap:
            raise CapExceeded(f"quote total {position.total_quote + quote_in} > cap {self.quote_cap}")

    def checkpoint(self) -> tuple[int | None, int | None]:
        return self.base_cap, self.quote_cap

    def rollback(self, checkpoint: tuple[int | None, int | None]) -> None:
        self.base_cap, self.quote_cap = checkpoint
