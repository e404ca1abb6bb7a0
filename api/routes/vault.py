from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from api.deps import get_vault
from api.schemas.vault import BalancesResponse, FeesResponse, PreviewBurnResponse, PreviewMintResponse
from oraclevault.vault import OracleVault

router = APIRouter(prefix="/vault")


@router.get("/balances", response_model=BalancesResponse)
def balances(vault: OracleVault = Depends(get_vault)) -> BalancesResponse:
    p = vault.position()
    return BalancesResponse(
        base=p.total_base,
        quote=p.total_quote,
        local_base=p.local_base,
        local_quote=p.local_quote,
        strategy_base=p.strategy_base,
        strategy_quote=p.strategy_quote,
        strategy_active=vault.link.active,
        total_shares=p.total_shares,
        locked_shares=vault.ledger.locked,
    )


@router.get("/fees", response_model=FeesResponse)
def fees(vault: OracleVault = Depends(get_vault)) -> FeesResponse:
    state = vault.fee_state()
    return FeesResponse(
        annual_rate=state.annual_rate,
        fee_recipient=state.fee_recipient,
        last_accrual=state.last_accrual,
        pending_shares=vault.fees.pending_shares(int(vault.clock())),
    )


@router.get("/preview-mint", response_model=PreviewMintResponse)
def preview_mint(
    max_base: int = Query(..., ge=0),
    max_quote: int = Query(..., ge=0),
    vault: OracleVault = Depends(get_vault),
) -> PreviewMintResponse:
    q = vault.preview_mint(max_base, max_quote)
    return PreviewMintResponse(
        shares=q.shares,
        base_in=q.base_in,
        quote_in=q.quote_in,
        initial=q.initial,
        locked_shares=q.locked_shares,
    )


@router.get("/preview-burn", response_model=PreviewBurnResponse)
def preview_burn(
    shares: int = Query(..., gt=0),
    vault: OracleVault = Depends(get_vault),
) -> PreviewBurnResponse:
    base_out, quote_out = vault.preview_burn(shares)
    return PreviewBurnResponse(shares=shares, base_out=base_out, quote_out=quote_out)
