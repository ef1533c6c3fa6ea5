"""
Application exception handlers.

Not-found and validation errors are raised/handled by FastAPI itself
(HTTPException -> 404, RequestValidationError -> 422). Everything that escapes
a route past that point is reported as 500 with the error text as `detail`.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from .db import DatabaseError

logger = logging.getLogger(__name__)


def _error_response(exc: Exception) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": str(exc) or exc.__class__.__name__},
    )


async def database_error_handler(request: Request, exc: DatabaseError) -> JSONResponse:
    logger.exception("database_error method=%s path=%s", request.method, request.url.path, exc_info=exc)
    return _error_response(exc)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    # Starlette re-raises after sending this response; the server logs the traceback.
    return _error_response(exc)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DatabaseError, database_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
