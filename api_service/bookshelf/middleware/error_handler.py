"""
Exception handlers — turn domain, validation and database errors into
structured JSON responses.

- Domain errors keep their own status and payload
- Request validation errors are flattened to one message per field
- Database errors surface once as a generic notice (the session is rolled back)
"""

from __future__ import annotations

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from bookshelf.errors import BookshelfError

logger = structlog.get_logger()

GENERIC_FAILURE = "Something went wrong. Please try again."


def field_errors(exc: RequestValidationError) -> dict[str, str]:
    """Map each failing field to its first message, e.g. {"title": "..."}."""
    errors: dict[str, str] = {}
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        field = ".".join(loc) or "__root__"
        message = err.get("msg", "Invalid value")
        # pydantic prefixes custom validator messages
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        errors.setdefault(field, message)
    return errors


async def bookshelf_error_handler(request: Request, exc: BookshelfError) -> JSONResponse:
    logger.warning(
        "request_rejected",
        path=request.url.path,
        status=exc.status_code,
        error=type(exc).__name__,
        detail=exc.detail,
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = field_errors(exc)
    logger.info("validation_failed", path=request.url.path, fields=sorted(errors))
    return JSONResponse(
        status_code=422,
        content={"detail": "Validation failed", "errors": errors},
    )


async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error("database_error", path=request.url.path, error=str(exc))
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": GENERIC_FAILURE},
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(BookshelfError, bookshelf_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(SQLAlchemyError, database_error_handler)
