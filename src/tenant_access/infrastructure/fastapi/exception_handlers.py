"""Exception handlers mapping access errors to HTTP responses."""

import logging
from typing import Any, Callable, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from ...core.exceptions import (
    RateLimited,
    TenantAccessError,
    create_error_response,
    get_http_status_code,
)

logger = logging.getLogger(__name__)


class ExceptionHandlerRegistry:
    """Registers handlers that render TenantAccessError as JSON."""

    def __init__(
        self,
        response_formatter: Optional[Callable[[TenantAccessError], Dict[str, Any]]] = None,
    ):
        self.response_formatter = response_formatter or create_error_response

    def build_response(self, exc: TenantAccessError) -> JSONResponse:
        status_code = get_http_status_code(exc)
        headers = None
        if isinstance(exc, RateLimited):
            headers = {"Retry-After": str(exc.retry_after_seconds)}
        if status_code >= 500:
            logger.error(f"{exc.__class__.__name__}: {exc.message}")
        return JSONResponse(
            status_code=status_code,
            content=self.response_formatter(exc),
            headers=headers,
        )

    def register_handlers(self, app: FastAPI) -> None:
        @app.exception_handler(TenantAccessError)
        async def tenant_access_error_handler(request: Request, exc: TenantAccessError):
            return self.build_response(exc)


def register_exception_handlers(
    app: FastAPI,
    response_formatter: Optional[Callable[[TenantAccessError], Dict[str, Any]]] = None,
) -> None:
    """Register the access error handlers on ``app``."""
    ExceptionHandlerRegistry(response_formatter).register_handlers(app)
