"""Translate domain exceptions into HTTP responses."""

import logging

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from genesis.models.exceptions import ModelError


logger = logging.getLogger(__name__)

SERVER_ERROR = "Server error"


def to_http_exception(exc: ModelError) -> HTTPException:
    """Map a domain error onto its HTTP status and client-facing detail."""
    if exc.status_code >= 500:
        logger.error("Unexpected model error: %s", exc)
        return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=SERVER_ERROR)
    return HTTPException(status_code=exc.status_code, detail=exc.to_detail())


def server_error() -> HTTPException:
    """Generic 500; the cause is logged by the caller, never returned."""
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=SERVER_ERROR)


def _first_error_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part not in ("body", "query"))
    message = first.get("msg", "Invalid value")
    return "{0}: {1}".format(location, message) if location else message


def register_exception_handlers(app: FastAPI) -> None:
    """Answer malformed bodies and query strings with 400 instead of 422."""

    @app.exception_handler(RequestValidationError)
    async def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        logger.info("Rejected request path=%s errors=%s", request.url.path, exc.errors())
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": _first_error_message(exc)},
        )
