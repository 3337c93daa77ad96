"""JSON:API error handling middleware."""

from __future__ import annotations

import logging
from typing import Any, Callable

from jsonapi_toolkit.core.errors import JSONAPIErrorBuilder
from jsonapi_toolkit.responses import JSONAPIResponse

logger = logging.getLogger(__name__)

LogError = Callable[[BaseException, bool], None]


class ErrorHandlerMiddleware:
    """Convert exceptions into JSON:API error documents."""

    def __init__(self, app: Any, log_error: LogError | None = None) -> None:
        """Store the ASGI app for middleware chaining."""
        self.app = app
        self.log_error = log_error
        self.error_builder = JSONAPIErrorBuilder()

    async def __call__(self, scope: dict[str, Any], receive: Any, send: Any) -> None:
        """Handle exceptions and serialize JSON:API error documents."""
        if scope.get("type") != "http":
            await self.app(scope, receive, send)
            return

        response_started = False

        async def send_wrapper(message: dict[str, Any]) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        except Exception as exc:
            if response_started:
                raise

            status, body, exposed = self.error_builder.from_exception(exc)
            if exposed:
                logger.info("Request failed with status %s: %s", status, exc)
            else:
                logger.exception("Unhandled error while processing request")
            if self.log_error is not None:
                self.log_error(exc, exposed)

            response = JSONAPIResponse(body, status_code=status)
            await response(scope, receive, send)
