"""Map engine errors to JSON HTTP responses."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from agency_metrics.core.exceptions import (
    DataAccessError,
    InvalidInputError,
    MetricsEngineError,
    RecordNotFoundError,
)

logger = logging.getLogger(__name__)

STATUS_BY_ERROR: dict[type[MetricsEngineError], int] = {
    DataAccessError: status.HTTP_503_SERVICE_UNAVAILABLE,
    InvalidInputError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    RecordNotFoundError: status.HTTP_404_NOT_FOUND,
}


def status_for(exc: MetricsEngineError) -> int:
    for error_type, status_code in STATUS_BY_ERROR.items():
        if isinstance(exc, error_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(MetricsEngineError)
    async def handle_engine_error(request: Request, exc: MetricsEngineError) -> JSONResponse:
        status_code = status_for(exc)
        if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
            logger.warning("%s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse(status_code=status_code, content={"detail": exc.message, "code": exc.code})
