"""oraclevault.core.interfaces

Collaborator boundaries. The core only ever talks to these shapes.

All calls are synchronous and may raise; any raise aborts the caller's operation.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable

from oraclevault.core.types import Distribution, Side, StrategyParams


@runtime_checkable
class PriceSource(Protocol):
    """Read-only external price feed."""

    def current_tick(self) -> int: ...


@runtime_checkable
class Token(Protocol):
    address: str

    def balance_of(self, account: str) -> int: ...

    def transfer(self, sender: str, to: str, amount: int) -> None: ...

    def transfer_from(self, spender: str, owner: str, to: str, amount: int) -> None: ...

    def approve(self, owner: str, spender: str, amount: int) -> None: ...

    def allowance(self, owner: str, spender: str) -> int: ...


@runtime_checkable
class Strategy(Protocol):
    """Liquidity-management collaborator holding part of the vault's funds as offers."""

    address: str

    def deposit_funds(self, caller: str, base_amount: int, quote_amount: int) -> None: ...

    def withdraw_funds(self, caller: str, base_amount: int, quote_amount: int, to: str) -> None: ...

    def withdraw_all(self, caller: str, to: str) -> None: ...

    def populate(
        self,
        caller: str,
        distribution: Distribution,
        params: StrategyParams,
        base_amount: int,
        quote_amount: int,
    ) -> None: ...

    def retract(self, caller: str, from_index: int, to_index: int) -> None: ...

    def reserve_balance(self, side: Side) -> int: ...

    def params(self) -> StrategyParams: ...


@runtime_checkable
class RebalanceTarget(Protocol):
    """External venue invoked with an opaque payload during a rebalance."""

    address: str

    def call(self, caller: str, payload: Mapping[str, Any]) -> Any: ...


@runtime_checkable
class Checkpointable(Protocol):
    """Anything that can take part in an atomic scope."""

    def checkpoint(self) -> Any: ...

    def rollback(self, checkpoint: Any) -> None: ...
