from __future__ import annotations

import time
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI

from api.errors import oraclevault_error_handler
from api.routes import get_api_router
from oraclevault import __version__
from oraclevault.core.config import Config
from oraclevault.core.database import Database
from oraclevault.core.exceptions import OracleVaultError
from oraclevault.vault import OracleVault


def _load_config() -> Config:
    root = Path.cwd()
    if (root / "config" / "default.yaml").exists():
        return Config.from_repo_defaults(root)
    return Config()


def create_app(
    config: Config | None = None,
    *,
    vault: OracleVault | None = None,
    db: Database | None = None,
) -> FastAPI:
    """Read-only views over one vault.

    Without a ``vault`` a seeded paper vault is built, journaling to ``db`` (or to
    ``config.journal_path`` when no ``db`` is given).
    """

    start = time.monotonic()
    config = config or _load_config()

    created_db = False
    if vault is None:
        from oraclevault.demo import build_paper_vault

        if db is None:
            db = Database(config.journal_path)
            created_db = True
        vault = build_paper_vault(config, journal=db)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        if created_db and db is not None:
            db.close()

    openapi_tags = [
        {"name": "health", "description": "Liveness, version and journal integrity."},
        {"name": "vault", "description": "Balances, fees and mint/burn previews."},
        {"name": "oracle", "description": "Oracle configuration and rebalance whitelist."},
    ]

    app = FastAPI(
        title="oraclevault API",
        description="Read-only views of an oracle-guarded liquidity vault",
        version=__version__,
        openapi_tags=openapi_tags,
        lifespan=lifespan,
    )

    # Set eagerly: ASGI test transports do not run the lifespan.
    app.state.started_at = start
    app.state.config = config
    app.state.vault = vault
    app.state.db = db if db is not None else vault.journal

    app.add_exception_handler(OracleVaultError, oraclevault_error_handler)
    app.include_router(get_api_router())
    return app
