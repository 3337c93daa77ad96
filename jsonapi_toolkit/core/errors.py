"""JSON:API error objects and exception mapping."""

from __future__ import annotations

from typing import Any

from jsonapi_toolkit.config import get_settings
from jsonapi_toolkit.core.document import JSONAPIBody, JSONAPIErrorBody
from jsonapi_toolkit.core.exceptions import HTTPError, InputValidationError, ParserError


class JSONAPIErrorBuilder:
    """Build JSON:API error objects and error documents."""

    def error_object(
        self,
        *,
        id: str | None = None,
        status: str | None = None,
        code: str | None = None,
        title: str | None = None,
        detail: str | None = None,
        source: dict[str, Any] | None = None,
        links: dict[str, Any] | None = None,
        meta: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Return a JSON:API error object."""
        error: dict[str, Any] = {}
        if id is not None:
            error["id"] = id
        if links is not None:
            error["links"] = links
        if status is not None:
            error["status"] = status
        if code is not None:
            error["code"] = code
        if title is not None:
            error["title"] = title
        if detail is not None:
            error["detail"] = detail
        if source is not None:
            error["source"] = source
        if meta is not None:
            error["meta"] = meta
        if not error:
            raise ValueError("Error object must include at least one field.")
        return error

    def error_document(self, errors: list[dict[str, Any]]) -> JSONAPIBody:
        """Return a JSON:API document with an errors array."""
        return JSONAPIBody({"errors": errors})

    def from_exception(self, exc: BaseException) -> tuple[int, JSONAPIBody, bool]:
        """Map an exception to ``(status, body, exposed)``.

        ``exposed`` is False for faults that are not caused by the client; their
        details stay out of the document unless ``expose_internal_errors`` is set.
        """
        if isinstance(exc, ParserError):
            error = self.error_object(
                status="400",
                code="invalid_header",
                title="Invalid header",
                detail=exc.message,
            )
            return 400, JSONAPIErrorBody(error), True

        if isinstance(exc, HTTPError):
            error = self.error_object(
                status=str(exc.status), code=exc.code, title=exc.title, detail=exc.detail
            )
            return exc.status, JSONAPIErrorBody(error), True

        if isinstance(exc, InputValidationError):
            return exc.status, self.error_document(exc.errors), True

        detail = str(exc) if get_settings().expose_internal_errors else None
        error = self.error_object(
            status="500",
            code="internal_server_error",
            title="Internal Server Error",
            detail=detail,
        )
        return 500, JSONAPIErrorBody(error), False
