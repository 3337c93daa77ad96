"""JSON:API document construction."""

from __future__ import annotations

import re
from typing import Any, Iterable, Mapping

from jsonapi_toolkit.config import get_settings

JSONAPI_MEDIA_TYPE = "application/vnd.api+json"

_TOKEN_RE = re.compile(r"[!#$%&'*+\-.^_`|~0-9A-Za-z]+")


def format_media_type(media_type: str, parameters: Mapping[str, str] | None = None) -> str:
    """Render a media type with parameters, quoting values that are not tokens."""
    parts = [media_type]
    for name, value in (parameters or {}).items():
        if not _TOKEN_RE.fullmatch(value):
            escaped = value.replace("\\", "\\\\").replace('"', '\\"')
            value = f'"{escaped}"'
        parts.append(f"{name}={value}")
    return "; ".join(parts)


class JSONAPIBody:
    """Top-level document members plus the negotiated extensions and profiles."""

    def __init__(
        self,
        members: dict[str, Any],
        *,
        extensions: list[str] | None = None,
        profiles: list[str] | None = None,
    ) -> None:
        if ("data" in members) == ("errors" in members):
            raise ValueError("A document must contain exactly one of 'data' or 'errors'.")
        self.members = members
        self.extensions = extensions
        self.profiles = profiles

    @property
    def is_error(self) -> bool:
        return "errors" in self.members

    def render(self) -> dict[str, Any]:
        """Return the JSON-serializable document including the jsonapi member."""
        return {"jsonapi": {"version": get_settings().jsonapi_version}, **self.members}

    def media_type(self) -> str:
        """Return the Content-Type value announcing extensions and profiles."""
        parameters: dict[str, str] = {}
        if self.extensions:
            parameters["ext"] = " ".join(self.extensions)
        if self.profiles:
            parameters["profile"] = " ".join(self.profiles)
        return format_media_type(JSONAPI_MEDIA_TYPE, parameters)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, JSONAPIBody):
            return NotImplemented
        return (self.members, self.extensions, self.profiles) == (
            other.members,
            other.extensions,
            other.profiles,
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.members!r})"


class JSONAPIErrorBody(JSONAPIBody):
    """Convenience body holding a single error object."""

    def __init__(self, error: Mapping[str, Any]) -> None:
        super().__init__({"errors": [dict(error)]})


class JSONAPIDocumentBuilder:
    """Build JSON:API v1.1 documents from serialized data."""

    def build_single(
        self,
        resource: Mapping[str, Any] | None,
        *,
        included: Iterable[Mapping[str, Any]] | None = None,
        links: Mapping[str, Any] | None = None,
        meta: Mapping[str, Any] | None = None,
        extensions: list[str] | None = None,
        profiles: list[str] | None = None,
    ) -> JSONAPIBody:
        """Return a JSON:API document for a single resource object or null."""
        data = None if resource is None else dict(resource)
        return self._build(data, included, links, meta, extensions, profiles)

    def build_collection(
        self,
        resources: Iterable[Mapping[str, Any]],
        *,
        included: Iterable[Mapping[str, Any]] | None = None,
        links: Mapping[str, Any] | None = None,
        meta: Mapping[str, Any] | None = None,
        extensions: list[str] | None = None,
        profiles: list[str] | None = None,
    ) -> JSONAPIBody:
        """Return a JSON:API document for a collection of resources."""
        data = [dict(item) for item in resources]
        return self._build(data, included, links, meta, extensions, profiles)

    def build_error(
        self, errors: Iterable[Mapping[str, Any]], *, meta: Mapping[str, Any] | None = None
    ) -> JSONAPIBody:
        """Return a JSON:API error document from error objects."""
        members: dict[str, Any] = {"errors": [dict(error) for error in errors]}
        if meta is not None:
            members["meta"] = dict(meta)
        return JSONAPIBody(members)

    def _build(
        self,
        data: Any,
        included: Iterable[Mapping[str, Any]] | None,
        links: Mapping[str, Any] | None,
        meta: Mapping[str, Any] | None,
        extensions: list[str] | None,
        profiles: list[str] | None,
    ) -> JSONAPIBody:
        members: dict[str, Any] = {"data": data}
        # An empty list is kept: inclusion was requested and found nothing.
        if included is not None:
            members["included"] = [dict(item) for item in included]
        if links is not None:
            members["links"] = dict(links)
        if meta is not None:
            members["meta"] = dict(meta)
        return JSONAPIBody(members, extensions=extensions, profiles=profiles)
