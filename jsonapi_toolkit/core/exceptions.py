"""Exceptions raised by the JSON:API parser, serializer and request helpers."""

from __future__ import annotations

from http import HTTPStatus
from typing import Any, Iterable, Literal, Mapping

from pydantic import ValidationError


class JSONAPIException(Exception):
    """Base class for all errors raised by this package."""


class ParserError(JSONAPIException, ValueError):
    """A header value violates the media type grammar."""

    def __init__(self, message: str, position: int) -> None:
        super().__init__(message)
        self.message = message
        self.position = position


class UnknownTypeError(JSONAPIException, LookupError):
    """A resource type has no registered serializer or model."""

    def __init__(self, type_: str) -> None:
        super().__init__(f"Unknown entity type: {type_}")
        self.type = type_


class HTTPError(JSONAPIException):
    """A client error that is safe to expose as a single error object."""

    def __init__(self, status: int, title: str | None = None, detail: str | None = None) -> None:
        phrase = HTTPStatus(status).phrase
        super().__init__(title or phrase)
        self.status = status
        self.title = title or phrase
        self.detail = detail
        self.code = phrase.lower().replace(" ", "_").replace("-", "_")


class InputValidationError(JSONAPIException):
    """Request input was rejected; carries the JSON:API error objects."""

    def __init__(self, message: str, errors: list[dict[str, Any]]) -> None:
        super().__init__(message)
        self.message = message
        self.errors = errors

        status_codes = {error["status"] for error in errors if error.get("status") is not None}
        self.status = int(next(iter(status_codes))) if len(status_codes) == 1 else 400


class JSONAPIErrorParams:
    """Overrides for the error object generated from a custom pydantic error.

    Pass an instance as the ``jsonapi`` entry of a ``PydanticCustomError``
    context.
    """

    def __init__(self, code: str, detail: str | None = None, status: int | None = None) -> None:
        self.code = code
        self.detail = detail
        self.status = status


ErrorSource = Literal["query", "body"]


class PydanticValidationError(InputValidationError):
    """Input validation error built from a pydantic ``ValidationError``."""

    def __init__(
        self,
        message: str,
        error: ValidationError,
        source: ErrorSource,
        loc_prefix: tuple[str | int, ...] = (),
        input_data: Any = None,
    ) -> None:
        super().__init__(
            message, self.to_jsonapi_errors(error.errors(), source, loc_prefix, input_data)
        )

    @classmethod
    def to_jsonapi_errors(
        cls,
        errors: Iterable[Mapping[str, Any]],
        source: ErrorSource,
        loc_prefix: tuple[str | int, ...] = (),
        input_data: Any = None,
    ) -> list[dict[str, Any]]:
        """Convert pydantic error dicts into JSON:API error objects.

        ``loc_prefix`` is prepended to every error location, e.g. ``("filter",)``
        when only the filter family of the query was validated. When the
        validated ``input_data`` is given, locations are resolved against it so
        union member labels pydantic adds to ``loc`` do not leak into sources.
        """
        result: list[dict[str, Any]] = []

        for error in errors:
            context = dict(error.get("ctx") or {})
            params = context.pop("jsonapi", None)
            if not isinstance(params, JSONAPIErrorParams):
                params = None

            status = 400 if source == "query" else 422
            if params and params.status:
                status = params.status
            error_object: dict[str, Any] = {
                "status": str(status),
                "code": params.code if params else error["type"],
                "title": error["msg"],
                "source": cls._source(source, [*loc_prefix, *cls._input_path(error, input_data)]),
            }
            if params and params.detail:
                error_object["detail"] = params.detail

            meta = {key: value for key, value in context.items() if _is_json_scalar(value)}
            if "input" in error and _is_json_scalar(error["input"]):
                meta["input"] = error["input"]
            if meta:
                error_object["meta"] = meta

            result.append(error_object)

        return result

    @staticmethod
    def _input_path(error: Mapping[str, Any], input_data: Any) -> list[str | int]:
        loc = list(error.get("loc", ()))
        if input_data is None:
            return loc

        path: list[str | int] = []
        node = input_data
        for index, part in enumerate(loc):
            if isinstance(node, Mapping) and part in node:
                node = node[part]
            elif (
                isinstance(node, (list, tuple))
                and isinstance(part, int)
                and -len(node) <= part < len(node)
            ):
                node = node[part]
            elif index == len(loc) - 1 and error["type"] == "missing":
                pass
            else:
                # discriminator tag or union member label
                continue
            path.append(part)
        return path

    @staticmethod
    def _source(source: ErrorSource, path: list[str | int]) -> dict[str, str]:
        if source == "body":
            return {"pointer": "/" + "/".join(str(part) for part in path)}
        if not path:
            return {"parameter": ""}
        return {"parameter": f"{path[0]}" + "".join(f"[{part}]" for part in path[1:])}


def _is_json_scalar(value: Any) -> bool:
    return value is None or isinstance(value, (str, int, float, bool))
