"""oraclevault.demo

A paper vault wired from config, for the CLI and the HTTP views.
"""

from __future__ import annotations

from oraclevault.core.config import Config
from oraclevault.core.database import Database
from oraclevault.core.tick import inbound_from_outbound_up
from oraclevault.core.time import Clock, unix_now
from oraclevault.execution.paper import PaperStrategy, PaperToken
from oraclevault.governance.oracle import OracleConfig
from oraclevault.vault import OracleVault

OWNER = "0xowner"
GUARDIAN = "0xguardian"
MANAGER = "0xmanager"
DEPOSITOR = "0xdepositor"

SEED_AMOUNT = 2_000 * 10**6


def build_paper_vault(
    config: Config,
    *,
    tick: int = 0,
    clock: Clock = unix_now,
    journal: Database | None = None,
    seed: bool = True,
) -> OracleVault:
    """Paper tokens, a paper strategy and a static oracle at ``tick``.

    With ``seed`` the depositor makes the initial mint: ``SEED_AMOUNT`` base plus
    its value in quote at ``tick``.
    """

    base = PaperToken("0xbase", symbol="BASE", decimals=6)
    quote = PaperToken("0xquote", symbol="QUOTE", decimals=6)
    vault_address = "0xvault"
    strategy = PaperStrategy(address="0xstrategy", base=base, quote=quote, owner=vault_address)

    vault = OracleVault(
        base=base,
        quote=quote,
        strategy=strategy,
        oracle_config=OracleConfig.static(
            tick,
            max_deviation_ticks=config.oracle.max_deviation_ticks,
            timelock_minutes=config.oracle.timelock_minutes,
        ),
        owner=OWNER,
        guardian=GUARDIAN,
        manager=MANAGER,
        address=vault_address,
        config=config,
        journal=journal,
        clock=clock,
    )

    if seed:
        quote_amount = inbound_from_outbound_up(tick, SEED_AMOUNT)
        base.mint(DEPOSITOR, SEED_AMOUNT)
        quote.mint(DEPOSITOR, quote_amount)
        base.approve(DEPOSITOR, vault_address, SEED_AMOUNT)
        quote.approve(DEPOSITOR, vault_address, quote_amount)
        vault.mint(SEED_AMOUNT, quote_amount, 0, caller=DEPOSITOR)

    return vault
