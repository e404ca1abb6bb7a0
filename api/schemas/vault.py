from __future__ import annotations

from pydantic import BaseModel


class BalancesResponse(BaseModel):
    base: int
    quote: int
    local_base: int
    local_quote: int
    strategy_base: int
    strategy_quote: int
    strategy_active: bool
    total_shares: int
    locked_shares: int


class FeesResponse(BaseModel):
    annual_rate: int
    fee_recipient: str
    last_accrual: int
    pending_shares: int


class PreviewMintResponse(BaseModel):
    shares: int
    base_in: int
    quote_in: int
    initial: bool
    locked_shares: int


class PreviewBurnResponse(BaseModel):
    shares: int
    base_out: int
    quote_out: int
