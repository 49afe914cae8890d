"""Global error handlers: every failure leaves as ``{message, code, errors?}``."""

from typing import Any

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from opphub.config import Settings
from opphub.errors import ApiError, InternalError, RateLimitError

logger = structlog.get_logger()

_HTTP_STATUS_CODES = {
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
}


def error_response(exc: ApiError, headers: dict[str, str] | None = None) -> JSONResponse:
    """Render an ``ApiError`` as a JSON envelope."""
    if isinstance(exc, RateLimitError):
        headers = {"Retry-After": str(exc.retry_after), **(headers or {})}
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)


def _field_errors(exc: RequestValidationError) -> list[dict[str, Any]]:
    errors = []
    for err in exc.errors():
        # Drop the leading "body"/"query"/"path" segment
        loc = [str(part) for part in err.get("loc", ())[1:]]
        errors.append({"field": ".".join(loc) or "body", "message": err.get("msg", "Invalid value")})
    return errors


def setup_error_handlers(app: FastAPI, settings: Settings) -> None:
    """Register global exception handlers."""

    @app.exception_handler(ApiError)
    async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
        log = logger.error if exc.status_code >= 500 else logger.warning
        log(
            "api_error",
            path=request.url.path,
            method=request.method,
            status_code=exc.status_code,
            code=exc.code,
        )
        return error_response(exc)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = _field_errors(exc)
        logger.info("request_validation_failed", path=request.url.path, fields=[e["field"] for e in errors])
        return JSONResponse(
            status_code=400,
            content={"message": "Validation failed", "code": "VALIDATION_ERROR", "errors": errors},
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "message": str(exc.detail),
                "code": _HTTP_STATUS_CODES.get(exc.status_code, "HTTP_ERROR"),
            },
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Catch-all for unhandled exceptions. The traceback only goes to the log."""
        logger.error(
            "unhandled_exception",
            path=request.url.path,
            method=request.method,
            error=str(exc),
            exc_info=exc,
        )
        error = InternalError("Internal server error")
        content = error.to_dict()
        if settings.environment == "development":
            content["detail"] = str(exc)
        return JSONResponse(status_code=error.status_code, content=content)
