"""oraclevault.execution.paper

Paper collaborators.

In-memory stand-ins for the token, strategy, price feed and trade venue so the
vault can run end to end without a chain. Each one behaves like its real
counterpart at the interface: calls revert (raise ``ExternalCallError``) instead
of partially applying, and every one of them can checkpoint and roll back.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from oraclevault.core.exceptions import ExternalCallError
from oraclevault.core.tick import inbound_from_outbound, outbound_from_inbound
from oraclevault.core.types import Distribution, OfferLevel, Side, StrategyParams, TradeDirection, normalize_address


def _amount(value: int) -> int:
    v = int(value)
    if v < 0:
        raise ExternalCallError(f"negative amount: {v}")
    return v


@dataclass
class PaperToken:
    address: str
    symbol: str = ""
    decimals: int = 18
    balances: dict[str, int] = field(default_factory=dict)
    allowances: dict[tuple[str, str], int] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.address = normalize_address(self.address)

    def mint(self, to: str, amount: int) -> None:
        key = normalize_address(to)
        self.balances[key] = self.balances.get(key, 0) + _amount(amount)

    def balance_of(self, account: str) -> int:
        return self.balances.get(normalize_address(account), 0)

    def allowance(self, owner: str, spender: str) -> int:
        return self.allowances.get((normalize_address(owner), normalize_address(spender)), 0)

    def approve(self, owner: str, spender: str, amount: int) -> None:
        self.allowances[(normalize_address(owner), normalize_address(spender))] = _amount(amount)

    def _move(self, frm: str, to: str, amount: int) -> None:
        a = _amount(amount)
        f, t = normalize_address(frm), normalize_address(to)
        have = self.balances.get(f, 0)
        if have < a:
            raise ExternalCallError(f"{self.symbol or self.address}: {f} balance {have} < {a}")
        self.balances[f] = have - a
        self.balances[t] = self.balances.get(t, 0) + a

    def transfer(self, sender: str, to: str, amount: int) -> None:
        self._move(sender, to, amount)

    def transfer_from(self, spender: str, owner: str, to: str, amount: int) -> None:
        key = (normalize_address(owner), normalize_address(spender))
        allowed = self.allowances.get(key, 0)
        a = _amount(amount)
        if allowed < a:
            raise ExternalCallError(f"{self.symbol or self.address}: allowance {allowed} < {a}")
        self._move(owner, to, a)
        self.allowances[key] = allowed - a

    def checkpoint(self) -> tuple[dict[str, int], dict[tuple[str, str], int]]:
        return dict(self.balances), dict(self.allowances)

    def rollback(self, checkpoint: tuple[dict[str, int], dict[tuple[str, str], int]]) -> None:
        balances, allowances = checkpoint
        self.balances = dict(balances)
        self.allowances = dict(allowances)


@dataclass
class StaticPriceFeed:
    """A feed you can set, or break."""

    address: str = "0xfeed"
    tick: int = 0
    failing: bool = False

    def current_tick(self) -> int:
        if self.failing:
            raise ExternalCallError(f"price feed {self.address} reverted")
        return int(self.tick)


@dataclass
class PaperStrategy:
    """Market-making strategy holding funds as reserves and resting offer levels.

    Reserves are the strategy's own token balances. Only ``owner`` may call mutators.
    """

    address: str
    base: PaperToken
    quote: PaperToken
    owner: str
    offers: dict[tuple[Side, int], OfferLevel] = field(default_factory=dict)
    current_params: StrategyParams = field(default_factory=StrategyParams)
    fail_on: set[str] = field(default_factory=set)

    def __post_init__(self) -> None:
        self.address = normalize_address(self.address)
        self.owner = normalize_address(self.owner)

    def _enter(self, name: str, caller: str) -> None:
        if name in self.fail_on:
            raise ExternalCallError(f"strategy {name} reverted")
        if normalize_address(caller) != self.owner:
            raise ExternalCallError(f"strategy {name}: caller {caller} is not owner")

    def reserve_balance(self, side: Side) -> int:
        token = self.base if Side(side) is Side.ASK else self.quote
        return token.balance_of(self.address)

    def params(self) -> StrategyParams:
        return self.current_params

    def deposit_funds(self, caller: str, base_amount: int, quote_amount: int) -> None:
        self._enter("deposit_funds", caller)
        if base_amount:
            self.base.transfer_from(self.address, caller, self.address, base_amount)
        if quote_amount:
            self.quote.transfer_from(self.address, caller, self.address, quote_amount)

    def withdraw_funds(self, caller: str, base_amount: int, quote_amount: int, to: str) -> None:
        self._enter("withdraw_funds", caller)
        if base_amount:
            self.base.transfer(self.address, to, base_amount)
        if quote_amount:
            self.quote.transfer(self.address, to, quote_amount)

    def withdraw_all(self, caller: str, to: str) -> None:
        self._enter("withdraw_all", caller)
        self.offers.clear()
        self.base.transfer(self.address, to, self.base.balance_of(self.address))
        self.quote.transfer(self.address, to, self.quote.balance_of(self.address))

    def populate(
        self,
        caller: str,
        distribution: Distribution,
        params: StrategyParams,
        base_amount: int,
        quote_amount: int,
    ) -> None:
        self._enter("populate", caller)
        self.deposit_funds(caller, base_amount, quote_amount)
        for side in (Side.ASK, Side.BID):
            levels = distribution.asks if side is Side.ASK else distribution.bids
            for lv in levels:
                if lv.gives > 0:
                    self.offers[(side, lv.index)] = lv
                else:
                    self.offers.pop((side, lv.index), None)
        self.current_params = params

    def retract(self, caller: str, from_index: int, to_index: int) -> None:
        self._enter("retract", caller)
        for key in [k for k in self.offers if from_index <= k[1] < to_index]:
            del self.offers[key]

    def offered_volume(self, side: Side) -> int:
        return sum(lv.gives for (s, _), lv in self.offers.items() if s is Side(side))

    def checkpoint(self) -> tuple[dict[tuple[Side, int], OfferLevel], StrategyParams]:
        return dict(self.offers), self.current_params

    def rollback(self, checkpoint: tuple[dict[tuple[Side, int], OfferLevel], StrategyParams]) -> None:
        offers, params = checkpoint
        self.offers = dict(offers)
        self.current_params = params


@dataclass
class PaperSwapTarget:
    """A venue that fills at a fixed ask tick out of its own inventory.

    Payload: ``{"direction": "sell_base" | "buy_base", "amount_in": int}``.
    ``hook`` runs before the fill (useful to simulate hostile callees).
    """

    address: str
    base: PaperToken
    quote: PaperToken
    tick: int = 0
    hook: Callable[[str, Mapping[str, Any]], None] | None = None

    def __post_init__(self) -> None:
        self.address = normalize_address(self.address)

    def call(self, caller: str, payload: Mapping[str, Any]) -> dict[str, int]:
        if self.hook is not None:
            self.hook(caller, payload)
        direction = TradeDirection(str(payload.get("direction", "")))
        amount_in = _amount(payload.get("amount_in", 0))
        if direction is TradeDirection.SELL_BASE:
            self.base.transfer_from(self.address, caller, self.address, amount_in)
            out = inbound_from_outbound(self.tick, amount_in)
            self.quote.transfer(self.address, caller, out)
        else:
            self.quote.transfer_from(self.address, caller, self.address, amount_in)
            out = outbound_from_inbound(self.tick, amount_in)
            self.base.transfer(self.address, caller, out)
        # Reported, never trusted.
        return {"amount_in": amount_in, "amount_out": out}
