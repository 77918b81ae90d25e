"""
Exception handlers mapping Switchboard errors to HTTP responses.

    ValidationError / request body errors -> 400 {error}
    ChainExhaustedError                   -> 502 {error, attempts?}
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from switchboard.app.dependencies import get_settings
from switchboard.errors import ChainExhaustedError, ValidationError

logger = logging.getLogger(__name__)


async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    logger.info(f"{request.method} {request.url.path}: rejected input: {exc}")
    return JSONResponse(status_code=400, content={"error": str(exc)})


async def request_validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = exc.errors()
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{location}: {first.get('msg')}" if location else str(first.get("msg"))
    else:
        message = "Invalid request"
    return JSONResponse(status_code=400, content={"error": message})


async def chain_exhausted_handler(request: Request, exc: ChainExhaustedError) -> JSONResponse:
    content: dict[str, object] = {"error": str(exc)}
    if get_settings().expose_attempt_trace:
        content["attempts"] = exc.attempts_to_dict()
    return JSONResponse(status_code=502, content=content)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ValidationError, validation_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.add_exception_handler(ChainExhaustedError, chain_exhausted_handler)


__all__ = ["register_exception_handlers"]
