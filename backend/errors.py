"""
errors.py — Application error taxonomy
Every error raised by the service layer carries its HTTP status and a
human-readable detail; FastAPI renders them through one handler.
"""

import logging
from contextlib import contextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)


class AppError(Exception):
    status_code = 500

    def __init__(self, detail: str, **extra):
        super().__init__(detail)
        self.detail = detail
        self.extra = extra

    def to_dict(self) -> dict:
        return {"error": type(self).__name__, "detail": self.detail, **self.extra}


class ValidationError(AppError):
    """Malformed or out-of-range input."""
    status_code = 400


class WindowClosedError(AppError):
    """A new entry was attempted outside its posting window."""
    status_code = 403

    def __init__(self, kind: str, status: str, opens_at: str, closes_at: str):
        super().__init__(
            f"New {kind} entries can only be posted between {opens_at} and {closes_at}",
            kind=kind,
            status=status,
            opens_at=opens_at,
            closes_at=closes_at,
        )


class PermissionDeniedError(AppError):
    status_code = 403


class NotFoundError(AppError):
    status_code = 404


class ConflictError(AppError):
    """A uniqueness rule was violated. Retrying will not help."""
    status_code = 409


class UpstreamStoreError(AppError):
    """The store failed for an infrastructure reason."""
    status_code = 503


def register_exception_handlers(app: FastAPI):
    @app.exception_handler(AppError)
    async def handle_app_error(request: Request, exc: AppError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.detail}")
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@contextmanager
def store_errors(action: str, db=None):
    """Convert store failures into UpstreamStoreError, rolling back the session if given."""
    try:
        yield
    except SQLAlchemyError as e:
        if db is not None:
            db.rollback()
        logger.error(f"Store failure while {action}: {e}")
        raise UpstreamStoreError(f"Store unavailable while {action}") from e
