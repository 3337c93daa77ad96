"""JSON:API content negotiation middleware."""

from __future__ import annotations

import logging
import re
from typing import Any

from jsonapi_toolkit.core.errors import JSONAPIErrorBuilder
from jsonapi_toolkit.core.exceptions import HTTPError, InputValidationError, ParserError
from jsonapi_toolkit.responses import JSONAPIResponse
from jsonapi_toolkit.schemas.request import validate_content_type
from jsonapi_toolkit.utils.content_negotiation import (
    JSONAPI_MEDIA_TYPE,
    get_acceptable_media_types,
)

logger = logging.getLogger(__name__)


def build_exclude_regexp(excluded_paths: list[str]) -> re.Pattern[str] | None:
    """Compile paths with ``*`` wildcards into one anchored pattern."""
    if not excluded_paths:
        return None
    parts = [re.escape(path).replace(r"\*", ".*?") for path in excluded_paths]
    return re.compile(f"^(?:{'|'.join(parts)})$")


class ContentNegotiationMiddleware:
    """Ensure JSON:API media type for requests and responses."""

    def __init__(self, app: Any, excluded_paths: list[str] | None = None) -> None:
        """Store the ASGI app for middleware chaining."""
        self.app = app
        self.exclude_regexp = build_exclude_regexp(excluded_paths or [])
        self.error_builder = JSONAPIErrorBuilder()

    async def __call__(self, scope: dict[str, Any], receive: Any, send: Any) -> None:
        """Validate JSON:API headers before passing to downstream app."""
        if scope.get("type") != "http":
            await self.app(scope, receive, send)
            return

        if self.exclude_regexp is not None and self.exclude_regexp.match(scope.get("path", "")):
            await self.app(scope, receive, send)
            return

        headers = {k.decode().lower(): v.decode("latin-1") for k, v in scope.get("headers", [])}
        content_type = headers.get("content-type", "")

        if content_type:
            try:
                validate_content_type(content_type)
            except InputValidationError as exc:
                logger.info("Rejected request content type %r", content_type)
                await self._reject(exc, scope, receive, send)
                return

        accept = headers.get("accept")
        if accept is not None:
            try:
                acceptable = get_acceptable_media_types(accept)
            except ParserError as exc:
                logger.info("Rejected malformed Accept header %r: %s", accept, exc.message)
                await self._reject(exc, scope, receive, send)
                return

            if not acceptable:
                error = HTTPError(406, detail=f"Use '{JSONAPI_MEDIA_TYPE}' in the Accept header")
                await self._reject(error, scope, receive, send)
                return

            scope.setdefault("state", {})["jsonapi_accept"] = acceptable

        await self.app(scope, receive, send)

    async def _reject(self, exc: Exception, scope: dict[str, Any], receive: Any, send: Any) -> None:
        status, body, _ = self.error_builder.from_exception(exc)
        response = JSONAPIResponse(body, status_code=status)
        await response(scope, receive, send)
