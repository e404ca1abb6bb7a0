from __future__ import annotations

from fastapi import APIRouter

from api.routes import health, oracle, vault


def get_api_router() -> APIRouter:
    router = APIRouter()

    router.include_router(health.router, tags=["health"])
    router.include_router(vault.router, tags=["vault"])
    router.include_router(oracle.router, tags=["oracle"])

    return router
