"""Starlette response rendering JSON:API bodies."""

from __future__ import annotations

from typing import Mapping

from starlette.background import BackgroundTask
from starlette.responses import JSONResponse

from jsonapi_toolkit.core.document import JSONAPIBody


class JSONAPIResponse(JSONResponse):
    """Render a ``JSONAPIBody`` with the negotiated JSON:API media type."""

    def __init__(
        self,
        body: JSONAPIBody,
        status_code: int = 200,
        headers: Mapping[str, str] | None = None,
        background: BackgroundTask | None = None,
    ) -> None:
        super().__init__(
            body.render(),
            status_code=status_code,
            headers=headers,
            media_type=body.media_type(),
            background=background,
        )
