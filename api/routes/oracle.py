from __future__ import annotations

from fastapi import APIRouter, Depends

from api.deps import get_vault
from api.schemas.oracle import OracleConfigResponse, OracleResponse, WhitelistEntryResponse
from oraclevault.vault import OracleVault

router = APIRouter()


@router.get("/oracle", response_model=OracleResponse)
def oracle(vault: OracleVault = Depends(get_vault)) -> OracleResponse:
    pending = vault.pending_oracle()
    return OracleResponse(
        current_tick=vault.current_tick(),
        active=OracleConfigResponse(**vault.oracle_config().describe()),
        pending=None if pending is None else OracleConfigResponse(**pending.describe()),
        pending_unlocks_at=vault.oracle.pending_unlocks_at(),
    )


@router.get("/whitelist/{address}", response_model=WhitelistEntryResponse)
def whitelist_entry(address: str, vault: OracleVault = Depends(get_vault)) -> WhitelistEntryResponse:
    entry = vault.whitelist_entry(address)
    return WhitelistEntryResponse(
        address=entry.address,
        is_whitelisted=entry.is_whitelisted,
        proposed_at=entry.proposed_at,
        unlocks_at=vault.whitelist.unlocks_at(entry.address),
    )
