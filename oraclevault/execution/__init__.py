"""oraclevault.execution

Execution layer: resting liquidity, trades, and the collaborators behind them.

Two kinds of adapters exist:
- ``paper``: in-memory collaborators with checkpoint/rollback
- anything else satisfying ``oraclevault.core.interfaces``
"""

from __future__ import annotations

from oraclevault.execution.address_book import AddressBook
from oraclevault.execution.paper import PaperStrategy, PaperSwapTarget, PaperToken, StaticPriceFeed
from oraclevault.execution.position import PositionCheckResult, PositionValidator
from oraclevault.execution.rebalance import RebalanceGuard, RebalanceOrder, RebalanceResult
from oraclevault.execution.strategy import StrategyLink

__all__ = [
    "AddressBook",
    "PaperStrategy",
    "PaperSwapTarget",
    "PaperToken",
    "PositionCheckResult",
    "PositionValidator",
    "RebalanceGuard",
    "RebalanceOrder",
    "RebalanceResult",
    "StaticPriceFeed",
    "StrategyLink",
]
