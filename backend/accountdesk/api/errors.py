"""Global error handlers translating failures into JSON responses.

Every body has the shape ``{"error", "message", "request_id"}``. Domain
errors carry their own status; storage constraint violations are mapped by
driver exception type; anything else becomes a 500 whose message is only
revealed in development.
"""

from __future__ import annotations

import logging
import traceback
from typing import Any

import asyncpg
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from accountdesk.domain.errors import AccountDeskError
from accountdesk.obs import logging as obs_logging
from accountdesk.obs import metrics as obs_metrics
from accountdesk.settings import settings

logger = logging.getLogger(__name__)

GENERIC_SERVER_MESSAGE = "An unexpected error occurred"

_HTTP_ERROR_TYPES = {
    400: "ValidationError",
    401: "AuthenticationError",
    403: "Forbidden",
    404: "NotFoundError",
    409: "ConflictError",
}


def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", None) or obs_logging.current_request_id() or "unknown"


def error_response(
    request: Request,
    status_code: int,
    error_type: str,
    message: Any,
    *,
    headers: dict[str, str] | None = None,
    **extra: Any,
) -> JSONResponse:
    obs_metrics.inc_error_rendered(error_type, status_code)
    payload = {"error": error_type, "message": message, "request_id": _request_id(request), **extra}
    return JSONResponse(status_code=status_code, content=payload, headers=headers)


def install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(AccountDeskError)
    async def domain_exc_handler(request: Request, exc: AccountDeskError):  # type: ignore[override]
        return error_response(request, exc.status_code, exc.error_type, exc.message)

    @app.exception_handler(asyncpg.UniqueViolationError)
    async def unique_violation_handler(request: Request, exc: asyncpg.UniqueViolationError):  # type: ignore[override]
        logger.warning("unique_violation", extra={"constraint": getattr(exc, "constraint_name", None)})
        return error_response(request, 409, "ConflictError", "Resource already exists")

    @app.exception_handler(asyncpg.ForeignKeyViolationError)
    async def fk_violation_handler(request: Request, exc: asyncpg.ForeignKeyViolationError):  # type: ignore[override]
        logger.warning("foreign_key_violation", extra={"constraint": getattr(exc, "constraint_name", None)})
        return error_response(request, 400, "ValidationError", "Invalid reference")

    @app.exception_handler(StarletteHTTPException)
    async def http_exc_handler(request: Request, exc: StarletteHTTPException):  # type: ignore[override]
        error_type = _HTTP_ERROR_TYPES.get(exc.status_code, "HTTPError")
        return error_response(
            request,
            exc.status_code,
            error_type,
            exc.detail,
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exc_handler(request: Request, exc: RequestValidationError):  # type: ignore[override]
        return error_response(
            request,
            422,
            "ValidationError",
            "validation_error",
            errors=jsonable_errors(exc),
        )

    @app.exception_handler(Exception)
    async def unhandled_exc_handler(request: Request, exc: Exception):  # type: ignore[override]
        logger.error("unhandled_error", exc_info=exc)
        if settings.is_dev():
            return error_response(
                request,
                500,
                "ServerError",
                str(exc) or GENERIC_SERVER_MESSAGE,
                stack=traceback.format_exception(type(exc), exc, exc.__traceback__),
            )
        return error_response(request, 500, "ServerError", GENERIC_SERVER_MESSAGE)


def jsonable_errors(exc: RequestValidationError) -> list[dict[str, Any]]:
    errors = []
    for error in exc.errors():
        errors.append({"loc": list(error.get("loc", ())), "msg": error.get("msg"), "type": error.get("type")})
    return errors
