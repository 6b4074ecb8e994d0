"""Error types and the handlers that turn them into the API error envelope.

Validation failures, whether raised by FastAPI while parsing a request or
by a service before a write, are reported as ``{"errors": [...]}`` where
each entry carries at least a ``msg``.  Storage failures are logged and
answered with a generic 500.
"""
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from blog_backend.config import settings

logger = logging.getLogger(__name__)


class ValidationFailed(Exception):
    """A request passed shape validation but cannot be written."""

    def __init__(self, errors: list[dict]) -> None:
        super().__init__(errors)
        self.errors = errors


class DuplicateTitleError(ValidationFailed):
    def __init__(self, title: str) -> None:
        super().__init__([{
            "msg": "Article with the same title already exists",
            "param": "title",
            "location": "body",
            "value": title,
        }])


def _format_validation_errors(exc: RequestValidationError) -> list[dict]:
    errors = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ())]
        errors.append({
            "msg": err.get("msg", "Invalid value"),
            "param": ".".join(loc[1:]),
            "location": loc[0] if loc else "body",
        })
    return errors


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=settings.VALIDATION_ERROR_STATUS,
        content={"errors": _format_validation_errors(exc)},
    )


async def validation_failed_handler(request: Request, exc: ValidationFailed) -> JSONResponse:
    return JSONResponse(
        status_code=settings.VALIDATION_ERROR_STATUS,
        content={"errors": exc.errors},
    )


async def storage_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error(
        "Storage failure on %s %s", request.method, request.url.path, exc_info=exc
    )
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


def install_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(ValidationFailed, validation_failed_handler)
    app.add_exception_handler(SQLAlchemyError, storage_error_handler)
