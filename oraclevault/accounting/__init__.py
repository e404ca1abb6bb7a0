"""oraclevault.accounting

Shares in, shares out, fees by dilution. Integers only.
"""

from __future__ import annotations

from oraclevault.accounting.fees import FeeAccrual, FeeAccrualEngine, FeeState, fee_shares
from oraclevault.accounting.shares import ShareAccounting, ShareLedger

__all__ = [
    "FeeAccrual",
    "FeeAccrualEngine",
    "FeeState",
    "ShareAccounting",
    "ShareLedger",
    "fee_shares",
]
