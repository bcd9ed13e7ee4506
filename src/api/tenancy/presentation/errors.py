"""Translation of tenancy errors into HTTP responses.

User-facing errors are rendered as ``{"kind": ..., "message": ...}``.
An IsolationViolation is a defect, not a user error: it is logged at
critical level and the client only ever sees a generic 500.
"""

from __future__ import annotations

import structlog
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from storage.ports.exceptions import IsolationViolation
from tenancy.ports.exceptions import TenancyError

STATUS_BY_KIND: dict[str, int] = {
    "validation": status.HTTP_400_BAD_REQUEST,
    "conflict": status.HTTP_409_CONFLICT,
    "upstream": status.HTTP_502_BAD_GATEWAY,
    "not_found": status.HTTP_404_NOT_FOUND,
    "internal": status.HTTP_500_INTERNAL_SERVER_ERROR,
}

_logger = structlog.get_logger()


def status_for(error: TenancyError) -> int:
    return STATUS_BY_KIND.get(error.kind, status.HTTP_500_INTERNAL_SERVER_ERROR)


async def tenancy_error_handler(request: Request, exc: Exception) -> JSONResponse:
    assert isinstance(exc, TenancyError)
    return JSONResponse(status_code=status_for(exc), content=exc.to_dict())


async def isolation_violation_handler(request: Request, exc: Exception) -> JSONResponse:
    assert isinstance(exc, IsolationViolation)
    _logger.critical(
        "tenant_isolation_violation",
        model=exc.model,
        path=request.url.path,
        error=str(exc),
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"kind": "internal", "message": "Internal server error"},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(TenancyError, tenancy_error_handler)
    app.add_exception_handler(IsolationViolation, isolation_violation_handler)
