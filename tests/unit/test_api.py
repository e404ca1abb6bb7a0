from __future__ import annotations

import pytest

from api.errors import status_for
from api.main import create_app
from oraclevault import __version__
from oraclevault.core.config import Config
from oraclevault.core.database import Database
from oraclevault.core.exceptions import (
    CapExceeded,
    JournalError,
    NotOwner,
    OracleUnavailable,
    Timelocked,
    ZeroAmount,
)
from oraclevault.governance.oracle import OracleConfig
from tests._paper_world import ALICE, OWNER, PaperWorld, make_world
from tests.unit._api_test_client import make_client

SEED = 2_000 * 10**6


@pytest.mark.anyio
async def test_health_reports_journal(test_config: Config) -> None:
    db = Database(":memory:")
    app = create_app(test_config, db=db)

    async with make_client(app) as ac:
        r = await ac.get("/health")
        assert r.status_code == 200
        data = r.json()
        assert data["version"] == __version__
        assert data["journal_events"] == 1  # seeded mint
        assert data["journal_ok"] is True

    db.close()


@pytest.mark.anyio
async def test_seeded_vault_views(test_config: Config) -> None:
    db = Database(":memory:")
    app = create_app(test_config, db=db)

    async with make_client(app) as ac:
        r = await ac.get("/vault/balances")
        assert r.status_code == 200
        body = r.json()
        assert (body["base"], body["quote"]) == (SEED, SEED)
        assert body["total_shares"] == 4_000 * 10**6
        assert body["locked_shares"] == 1000
        assert body["strategy_active"] is False

        r = await ac.get("/vault/fees")
        assert r.json()["annual_rate"] == 0
        assert r.json()["pending_shares"] == 0

        r = await ac.get("/vault/preview-mint", params={"max_base": 10**6, "max_quote": 10**6})
        assert r.status_code == 200
        assert r.json()["shares"] == 2 * 10**6

        r = await ac.get("/vault/preview-burn", params={"shares": 2_000 * 10**6})
        assert r.json()["base_out"] == SEED // 2

        r = await ac.get("/vault/preview-burn", params={"shares": 0})
        assert r.status_code == 422

    db.close()


@pytest.mark.anyio
async def test_domain_errors_use_error_envelope(test_config: Config) -> None:
    db = Database(":memory:")
    app = create_app(test_config, db=db)

    async with make_client(app) as ac:
        r = await ac.get("/vault/preview-mint", params={"max_base": 0, "max_quote": 1})
        assert r.status_code == 200
        assert r.json()["shares"] == 0

        r = await ac.get("/vault/preview-burn", params={"shares": 10**20})
        assert r.status_code == 422
        assert r.json()["error"]["code"] == "bound.insufficient_balance"

    db.close()


@pytest.mark.anyio
async def test_oracle_and_whitelist_views(test_config: Config, clock) -> None:
    world: PaperWorld = make_world(test_config, clock, dynamic=True)
    world.deposit(ALICE, SEED, SEED)
    world.vault.propose_oracle(OracleConfig.static(5, max_deviation_ticks=10, timelock_minutes=60), caller=OWNER)
    world.vault.propose_whitelist("0xRouter", caller=OWNER)
    app = create_app(test_config, vault=world.vault)

    async with make_client(app) as ac:
        r = await ac.get("/oracle")
        assert r.status_code == 200
        body = r.json()
        assert body["current_tick"] == 0
        assert body["active"]["is_static"] is False
        assert body["active"]["source"] == "0xfeed"
        assert body["pending"]["static_tick"] == 5
        assert body["pending_unlocks_at"] == clock() + 3600

        r = await ac.get("/whitelist/0xrouter")
        assert r.json() == {
            "address": "0xrouter",
            "is_whitelisted": False,
            "proposed_at": clock(),
            "unlocks_at": clock() + 3600,
        }

        world.feed.failing = True
        r = await ac.get("/oracle")
        assert r.status_code == 502
        assert r.json()["error"]["code"] == "external.oracle_unavailable"

    world.journal.close()


@pytest.mark.parametrize(
    "exc,status",
    [
        (NotOwner("x"), 403),
        (Timelocked("x"), 409),
        (ZeroAmount("x"), 422),
        (CapExceeded("x"), 422),
        (OracleUnavailable("x"), 502),
        (JournalError("x"), 500),
    ],
)
def test_status_mapping(exc: Exception, status: int) -> None:
    assert status_for(exc) == status
