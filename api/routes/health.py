from __future__ import annotations

import time

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel

from api.deps import get_db
from oraclevault import __version__
from oraclevault.core.database import Database

router = APIRouter()


class HealthResponse(BaseModel):
    version: str
    uptime_seconds: float
    journal_events: int | None = None
    journal_ok: bool | None = None


@router.get("/health", response_model=HealthResponse)
def health(request: Request, db: Database | None = Depends(get_db)) -> HealthResponse:
    started_at = float(getattr(request.app.state, "started_at", time.monotonic()))
    uptime = time.monotonic() - started_at

    if db is None:
        return HealthResponse(version=__version__, uptime_seconds=uptime)

    return HealthResponse(
        version=__version__,
        uptime_seconds=uptime,
        journal_events=db.count(),
        journal_ok=db.verify_hash_chain(),
    )
