"""Global error handlers: consistent JSON error responses."""

from typing import Any

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from taskflow.errors import TaskflowError, ValidationFailed

logger = structlog.get_logger()

_LOCATION_PREFIXES = frozenset({"body", "query", "path", "header"})


def _field_name(loc: tuple[Any, ...]) -> str:
    parts = [str(p) for p in loc if p not in _LOCATION_PREFIXES]
    return ".".join(parts) or "body"


def request_validation_content(exc: RequestValidationError) -> dict[str, Any]:
    """Reshape FastAPI's validation errors into the ``{field, message}`` form."""
    errors = [{"field": _field_name(tuple(e.get("loc", ()))), "message": str(e.get("msg", ""))} for e in exc.errors()]
    return {"detail": "Validation failed", "error": ValidationFailed.kind, "errors": errors}


def setup_error_handlers(app: FastAPI) -> None:
    """Register global exception handlers."""

    @app.exception_handler(TaskflowError)
    async def taskflow_error_handler(request: Request, exc: TaskflowError) -> JSONResponse:
        """Domain errors carry their own status and kind."""
        if exc.status_code >= 500:
            logger.error("domain_error", path=request.url.path, kind=exc.kind, detail=exc.detail)
        else:
            logger.info("request_rejected", path=request.url.path, status=exc.status_code, kind=exc.kind)
        return JSONResponse(status_code=exc.status_code, content=exc.to_content())

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
        """Framework errors (unknown route, wrong method) in the same JSON format."""
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail, "error": "http_error"},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(_request: Request, exc: RequestValidationError) -> JSONResponse:
        """Malformed bodies and wrongly typed parameters are a 400, like explicit validation failures."""
        return JSONResponse(status_code=400, content=request_validation_content(exc))

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Catch-all for unhandled exceptions. Details stay in the log."""
        logger.error(
            "unhandled_exception",
            path=request.url.path,
            method=request.method,
            error=str(exc),
            exc_info=exc,
        )
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error", "error": "internal"},
        )
