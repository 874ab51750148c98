"""Error Handlers — map exceptions onto the snapshot API's error envelope.

Invariants:
    - Every error body has the same shape: {"error": {code, message, category, severity, ...}}
    - RadarError keeps its own http_status (409 duplicates, 404 missing rows, 503 store)
    - Request validation failures are 400 with one detail per offending field
    - Unexpected exceptions are 500 and never echo internal details

Design Decisions:
    - Handlers are plain module functions registered with add_exception_handler,
      so tests can attach them to a bare FastAPI app
    - Recoverable errors (duplicates, consistency warnings) log at WARNING
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from adr_radar.core.errors import ErrorSeverity, RadarError

logger = logging.getLogger(__name__)


def _envelope(
    code: str, message: str, category: str, severity: ErrorSeverity, **extra,
) -> dict:
    return {
        "error": {
            "code": code,
            "message": message,
            "category": category,
            "severity": severity.value,
            **extra,
        },
    }


async def handle_radar_error(request: Request, exc: RadarError) -> JSONResponse:
    log = logger.warning if exc.recoverable else logger.error
    log(
        f"{request.method} {request.url.path}: {exc.message}",
        extra={
            "error_code": exc.code,
            "blip_id": exc.context.blip_id,
            "adr_id": exc.context.adr_id,
            "path": exc.context.path,
        },
    )
    return JSONResponse(status_code=exc.http_status, content=exc.to_response())


async def handle_validation_error(
    request: Request, exc: RequestValidationError,
) -> JSONResponse:
    details = [
        {
            "field": ".".join(str(part) for part in err["loc"] if part != "body"),
            "message": err["msg"],
            "type": err["type"],
        }
        for err in exc.errors()
    ]
    logger.warning(
        f"Rejected {request.method} {request.url.path}: "
        f"{', '.join(d['field'] for d in details)}",
        extra={"error_code": "VALIDATION_ERROR"},
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=_envelope(
            "VALIDATION_ERROR", "Invalid request data", "validation",
            ErrorSeverity.ERROR, details=details,
        ),
    )


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        f"Unhandled {type(exc).__name__} on {request.url.path}", exc_info=exc,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_envelope(
            "INTERNAL_ERROR", "An unexpected error occurred", "internal",
            ErrorSeverity.CRITICAL,
        ),
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RadarError, handle_radar_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)
