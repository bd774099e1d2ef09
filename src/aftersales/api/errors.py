"""HTTP mapping for aftersales errors.

Starlette resolves handlers along the exception's MRO, so these take
precedence over the generic Protean handlers for the same base classes.
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from aftersales.errors import Conflict, InvalidTransition, NotFound, PersistenceFailure

logger = structlog.get_logger(__name__)

_STATUS_CODES = {
    InvalidTransition: 400,
    NotFound: 404,
    Conflict: 409,
    PersistenceFailure: 503,
}


def _handler(status_code: int):
    async def handle(request: Request, exc: Exception) -> JSONResponse:
        if status_code >= 500:
            logger.error("Request failed", path=request.url.path, error=exc.messages)
        return JSONResponse(status_code=status_code, content={"error": exc.messages})

    return handle


def register_error_handlers(app: FastAPI) -> None:
    for exc_class, status_code in _STATUS_CODES.items():
        app.add_exception_handler(exc_class, _handler(status_code))
