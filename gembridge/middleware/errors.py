"""Conversion of every failure into the wire error envelope."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..core.exceptions import BridgeError, MethodNotAllowed, NotFound, error_envelope

logger = logging.getLogger("gembridge")


def error_response(exc: BaseException) -> JSONResponse:
    status, envelope = error_envelope(exc)
    return JSONResponse(envelope, status_code=status)


async def bridge_error_handler(request: Request, exc: BridgeError) -> JSONResponse:
    logger.error(
        f"{request.method} {request.url.path} failed: {exc.__class__.__name__} "
        f"(status={exc.status}): {exc.message}"
    )
    return error_response(exc)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == 404:
        error: BridgeError = NotFound("404 Not Found")
    elif exc.status_code == 405:
        error = MethodNotAllowed(
            f"Method Not Allowed. {request.method} is not supported for {request.url.path}"
        )
    else:
        error = BridgeError(str(exc.detail), status=exc.status_code)
    return await bridge_error_handler(request, error)


async def catch_unhandled_errors(request: Request, call_next):
    """Turn unexpected exceptions into a 500 envelope.

    Registered as an HTTP middleware so the response still passes through
    CORS instead of being produced by the server error middleware.
    """
    try:
        return await call_next(request)
    except Exception as exc:
        logger.exception(f"Unhandled error for {request.method} {request.url.path}: {exc}")
        return error_response(exc)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(BridgeError, bridge_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.middleware("http")(catch_unhandled_errors)
