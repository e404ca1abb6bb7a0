from __future__ import annotations

from oraclevault.core.config import Config
from oraclevault.core.database import Database
from oraclevault.core.events import EventType
from oraclevault.core.time import ManualClock
from oraclevault.demo import DEPOSITOR, MANAGER, SEED_AMOUNT, build_paper_vault


def test_seeded_demo_vault_holds_initial_mint(test_config: Config) -> None:
    db = Database(":memory:")
    vault = build_paper_vault(test_config, journal=db)

    assert vault.share_balance(DEPOSITOR) == 2 * SEED_AMOUNT - test_config.vault.minimum_liquidity
    assert vault.total_supply() == 2 * SEED_AMOUNT
    assert vault.total_balances() == (SEED_AMOUNT, SEED_AMOUNT)

    (event,) = db.get_events()
    assert event.type == EventType.MINT_V1
    assert event.payload["holder"] == DEPOSITOR
    db.close()


def test_unseeded_demo_vault_is_empty(test_config: Config) -> None:
    vault = build_paper_vault(test_config, seed=False, clock=ManualClock())

    assert vault.total_supply() == 0
    assert vault.current_tick() == 0
    assert vault.oracle_config().timelock_minutes == test_config.oracle.timelock_minutes


def test_demo_depositor_can_exit_down_to_the_floor(test_config: Config) -> None:
    vault = build_paper_vault(test_config, tick=1000, clock=ManualClock())

    held = vault.share_balance(DEPOSITOR)
    base_out, quote_out = vault.burn(held, caller=DEPOSITOR)

    assert base_out > 0 and quote_out > 0
    assert vault.total_supply() == test_config.vault.minimum_liquidity
    assert vault.roles.manager == MANAGER
