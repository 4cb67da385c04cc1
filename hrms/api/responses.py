from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from hrms.core.exceptions import DomainError, RateLimitExceededError

logger = logging.getLogger(__name__)


def envelope(
    data: Any = None,
    *,
    code: int = 200,
    message: Optional[str] = None,
    pagination: Any = None,
    **extra: Any,
) -> dict[str, Any]:
    body: dict[str, Any] = {"success": True, "code": code}
    if data is not None:
        body["data"] = jsonable_encoder(data, by_alias=True)
    if message:
        body["message"] = message
    if pagination is not None:
        body["pagination"] = jsonable_encoder(pagination, by_alias=True)
    for key, value in extra.items():
        body[key] = jsonable_encoder(value, by_alias=True)
    return body


def error_response(
    status_code: int,
    error: str,
    error_code: Optional[str] = None,
    details: Any = None,
    message: Optional[str] = None,
    headers: Optional[dict[str, str]] = None,
) -> JSONResponse:
    body: dict[str, Any] = {"success": False, "code": status_code, "error": error}
    if error_code:
        body["errorCode"] = error_code
    if message:
        body["message"] = message
    if details is not None:
        body["details"] = details
    return JSONResponse(status_code=status_code, content=jsonable_encoder(body), headers=headers)


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    headers = None
    if isinstance(exc, RateLimitExceededError):
        headers = {"Retry-After": str(exc.retry_after)}

    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    else:
        logger.info("%s %s -> %s %s", request.method, request.url.path, exc.status_code, exc.error_code)
    return error_response(exc.status_code, exc.message, exc.error_code, message=exc.detail, headers=headers)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = [
        {
            "field": ".".join(str(part) for part in issue.get("loc", ()) if part != "body"),
            "message": str(issue.get("msg", "")).removeprefix("Value error, "),
        }
        for issue in exc.errors()
    ]
    error = details[0]["message"] if details else "Validation failed"
    return error_response(400, error, "VALIDATION_ERROR", details=details)


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return error_response(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return error_response(500, "An unexpected error occurred", "INTERNAL_ERROR")


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DomainError, domain_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
