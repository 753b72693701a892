"""Exception handlers rendering the uniform error envelope."""

from __future__ import annotations

import logging
import traceback
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from identity_server.core.exceptions import ServiceError

logger = logging.getLogger(__name__)


def error_body(message: str, error: dict[str, Any]) -> dict[str, Any]:
    return {"success": False, "message": message, "error": error}


def _debug(request: Request) -> bool:
    container = getattr(request.app.state, "container", None)
    return bool(container and container.settings.debug)


def _with_stack(request: Request, error: dict[str, Any], exc: BaseException) -> dict[str, Any]:
    if _debug(request):
        error["stack"] = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return error


async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s (%s)", request.method, request.url.path, exc.code, exc.message)
    else:
        logger.info("%s %s rejected: %s", request.method, request.url.path, exc.code)
    error = _with_stack(request, exc.to_dict(), exc)
    return JSONResponse(status_code=exc.status_code, content=jsonable_encoder(error_body(exc.message, error)))


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(message, {"code": "HTTP_ERROR"}),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    error = {"code": "VALIDATION_ERROR", "detail": jsonable_encoder(exc.errors())}
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=error_body("Validation failed", error),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    error = _with_stack(request, {"code": "INTERNAL_ERROR"}, exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body("Internal server error", error),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ServiceError, service_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)


__all__ = ["error_body", "register_exception_handlers"]
