from __future__ import annotations

from pydantic import BaseModel


class OracleConfigResponse(BaseModel):
    is_static: bool
    static_tick: int
    source: str | None = None
    max_deviation_ticks: int
    timelock_minutes: int
    proposed_at: int


class OracleResponse(BaseModel):
    current_tick: int
    active: OracleConfigResponse
    pending: OracleConfigResponse | None = None
    pending_unlocks_at: int | None = None


class WhitelistEntryResponse(BaseModel):
    address: str
    is_whitelisted: bool
    proposed_at: int | None = None
    unlocks_at: int | None = None
