from __future__ import annotations

from fastapi import Request

from oraclevault.core.config import Config
from oraclevault.core.database import Database
from oraclevault.vault import OracleVault


def get_config(request: Request) -> Config:
    return request.app.state.config


def get_vault(request: Request) -> OracleVault:
    return request.app.state.vault


def get_db(request: Request) -> Database | None:
    return getattr(request.app.state, "db", None)
