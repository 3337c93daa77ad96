"""Wire JSON:API middleware and error handlers into a FastAPI app."""

from __future__ import annotations

from fastapi import FastAPI, Request
from starlette.exceptions import HTTPException as StarletteHTTPException

from jsonapi_toolkit.config import get_settings
from jsonapi_toolkit.core.errors import JSONAPIErrorBuilder
from jsonapi_toolkit.core.exceptions import HTTPError
from jsonapi_toolkit.middleware import ContentNegotiationMiddleware, ErrorHandlerMiddleware
from jsonapi_toolkit.middleware.error_handler import LogError
from jsonapi_toolkit.responses import JSONAPIResponse


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONAPIResponse:
    """Render routing errors (404, 405, ...) as JSON:API error documents."""
    headers = exc.headers or {}
    detail = exc.detail if isinstance(exc.detail, str) else None
    if exc.status_code == 405 and "Allow" in headers:
        detail = f"Allowed methods: {headers['Allow']}"

    error = HTTPError(exc.status_code, detail=detail)
    status, body, _ = JSONAPIErrorBuilder().from_exception(error)
    return JSONAPIResponse(body, status_code=status, headers=exc.headers)


def install_jsonapi(app: FastAPI, *, log_error: LogError | None = None) -> FastAPI:
    """Add content negotiation, error mapping and HTTP error rendering to ``app``.

    Configuration comes from ``get_settings()``, the same settings that
    document rendering, error exposure and query parsing read.
    """
    app.add_middleware(
        ContentNegotiationMiddleware, excluded_paths=get_settings().excluded_paths
    )
    # Added last so it wraps the negotiation middleware as well.
    app.add_middleware(ErrorHandlerMiddleware, log_error=log_error)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    return app
