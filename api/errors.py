from __future__ import annotations

from fastapi import Request
from fastapi.responses import JSONResponse

from oraclevault.core.exceptions import (
    AuthorizationError,
    BoundError,
    ExternalDependencyError,
    OracleVaultError,
    TimelockError,
    ValidationError,
)

_STATUS: list[tuple[type[OracleVaultError], int]] = [
    (AuthorizationError, 403),
    (TimelockError, 409),
    (ValidationError, 422),
    (BoundError, 422),
    (ExternalDependencyError, 502),
]


def status_for(exc: OracleVaultError) -> int:
    for cls, status in _STATUS:
        if isinstance(exc, cls):
            return status
    return 500


async def oraclevault_error_handler(request: Request, exc: OracleVaultError) -> JSONResponse:
    body = {"error": {"code": exc.code, "message": str(exc)}}
    return JSONResponse(status_code=status_for(exc), content=body)
