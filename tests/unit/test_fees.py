from __future__ import annotations

import pytest

from oraclevault.accounting.fees import FeeAccrualEngine, FeeState, fee_shares
from oraclevault.accounting.shares import ShareLedger
from oraclevault.core.config import SECONDS_PER_YEAR
from oraclevault.core.exceptions import FeeTooHigh, NotOwner
from oraclevault.governance.roles import RoleRegistry
from tests._paper_world import ALICE, GUARDIAN, MANAGER, OWNER

T0 = 1_700_000_000


def _engine(rate: int = 1000, supply: int = 99_000_000) -> tuple[FeeAccrualEngine, ShareLedger]:
    ledger = ShareLedger()
    ledger.mint(ALICE, supply)
    roles = RoleRegistry(owner=OWNER, guardian=GUARDIAN, manager=MANAGER)
    eng = FeeAccrualEngine(
        FeeState(annual_rate=rate, fee_recipient="0xFees", last_accrual=T0),
        ledger=ledger,
        roles=roles,
        max_annual_rate=5000,
    )
    return eng, ledger


def test_one_year_at_one_percent() -> None:
    eng, ledger = _engine()
    res = eng.accrue(T0 + SECONDS_PER_YEAR)
    assert res.shares == 1_000_000
    assert ledger.balance_of("0xfees") == 1_000_000
    # Recipient ends up with exactly 1% of the new supply.
    assert ledger.balance_of("0xfees") * 100 == ledger.total_supply


def test_accrue_is_idempotent_within_a_timestamp() -> None:
    eng, ledger = _engine()
    eng.accrue(T0 + 1000)
    supply = ledger.total_supply
    res = eng.accrue(T0 + 1000)
    assert res.shares == 0
    assert ledger.total_supply == supply


def test_clock_going_backwards_changes_nothing() -> None:
    eng, ledger = _engine()
    res = eng.accrue(T0 - 50)
    assert res.shares == 0
    assert eng.state.last_accrual == T0


def test_zero_rate_still_advances_timestamp() -> None:
    eng, ledger = _engine(rate=0)
    assert eng.accrue(T0 + 500).shares == 0
    assert eng.state.last_accrual == T0 + 500


def test_pending_matches_accrue() -> None:
    eng, _ = _engine()
    pending = eng.pending_shares(T0 + 86_400)
    assert pending > 0
    assert eng.accrue(T0 + 86_400).shares == pending


def test_set_fee_data_settles_old_rate_first() -> None:
    eng, ledger = _engine()
    settled = eng.set_fee_data(0, "0xother", now=T0 + SECONDS_PER_YEAR, caller=OWNER)
    assert settled.shares == 1_000_000
    assert settled.recipient == "0xfees"
    assert eng.state.annual_rate == 0
    assert eng.state.fee_recipient == "0xother"
    assert eng.state.last_accrual == T0 + SECONDS_PER_YEAR


def test_set_fee_data_guards() -> None:
    eng, _ = _engine()
    with pytest.raises(NotOwner):
        eng.set_fee_data(100, "0xf", now=T0, caller=MANAGER)
    with pytest.raises(FeeTooHigh):
        eng.set_fee_data(5001, "0xf", now=T0, caller=OWNER)
    assert eng.state.annual_rate == 1000


def test_fee_shares_edges() -> None:
    assert fee_shares(supply=0, annual_rate=1000, elapsed=10) == 0
    assert fee_shares(supply=10, annual_rate=0, elapsed=10) == 0
    with pytest.raises(FeeTooHigh):
        fee_shares(supply=10, annual_rate=100_000, elapsed=10)


def test_short_accruals_are_not_rounded_to_zero() -> None:
    # The truncated integer fee fraction would be 0 here.
    assert fee_shares(supply=10**18, annual_rate=1000, elapsed=1) == 317_097_919


def test_long_idle_gap_is_charged_as_one_year() -> None:
    one_year = fee_shares(supply=10**6, annual_rate=5000, elapsed=SECONDS_PER_YEAR)
    assert one_year == 52_631
    assert fee_shares(supply=10**6, annual_rate=5000, elapsed=10 * SECONDS_PER_YEAR) == one_year

    eng, ledger = _engine(rate=5000, supply=10**6)
    res = eng.accrue(T0 + 50 * SECONDS_PER_YEAR)
    assert res.shares == one_year
    # Recipient holds 5% of the new supply, never most of the pool.
    assert ledger.balance_of("0xfees") * 20 <= ledger.total_supply
