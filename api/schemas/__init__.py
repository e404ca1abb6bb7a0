from api.schemas.common import ErrorBody, ErrorResponse
from api.schemas.oracle import OracleConfigResponse, OracleResponse, WhitelistEntryResponse
from api.schemas.vault import BalancesResponse, FeesResponse, PreviewBurnResponse, PreviewMintResponse

__all__ = [
    "BalancesResponse",
    "ErrorBody",
    "ErrorResponse",
    "FeesResponse",
    "OracleConfigResponse",
    "OracleResponse",
    "PreviewBurnResponse",
    "PreviewMintResponse",
    "WhitelistEntryResponse",
]
