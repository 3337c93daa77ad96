"""Helpers for JSON:API query parameter parsing."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Literal, Mapping

from pydantic import BaseModel, ValidationError

from jsonapi_toolkit.config import get_settings
from jsonapi_toolkit.core.exceptions import InputValidationError, PydanticValidationError
from jsonapi_toolkit.serializers.base import SerializeManagerOptions

_FAMILY_RE = re.compile(r"^(fields|page|filter)((?:\[[^\]]*\])+)$")


def _split_csv(value: str) -> list[str]:
    return [item for item in (part.strip() for part in value.split(",")) if item]


def _bracket_keys(value: str) -> list[str]:
    return re.findall(r"\[([^\]]*)\]", value)


def parse_query_params(params: Mapping[str, Any]) -> dict[str, Any]:
    """Normalize JSON:API query parameter families.

    ``include`` and ``sort`` stay ``None`` when absent so callers can fall back
    to defaults. ``filter[a][b]=x`` becomes ``{"a": {"b": "x"}}``.
    """
    normalized: dict[str, Any] = {
        "include": None,
        "fields": {},
        "sort": None,
        "page": {},
        "filter": {},
    }

    for key, value in params.items():
        if value is None:
            continue
        raw_value = str(value)

        if key == "include":
            normalized["include"] = _split_csv(raw_value)
            continue
        if key == "sort":
            normalized["sort"] = _split_csv(raw_value)
            continue

        match = _FAMILY_RE.match(key)
        if match is None:
            continue

        family, keys = match.group(1), _bracket_keys(match.group(2))
        if family == "fields":
            normalized["fields"][keys[0]] = _split_csv(raw_value)
            continue

        target = normalized[family]
        for name in keys[:-1]:
            target = target.setdefault(name, {})
            if not isinstance(target, dict):
                break
        else:
            target[keys[-1]] = raw_value

    return normalized


@dataclass
class FieldSort:
    field: str
    order: Literal["asc", "desc"] = "asc"


@dataclass
class ListQuery:
    """Parsed list query: sorting, filter and page plus serializer options."""

    serializer_options: SerializeManagerOptions
    sort: list[FieldSort] | None = None
    filter: Any = None
    page: Any = None


def _invalid_parameter(parameter: str, code: str, title: str, detail: str) -> InputValidationError:
    return InputValidationError(
        title,
        [
            {
                "status": "400",
                "code": code,
                "title": title,
                "detail": detail,
                "source": {"parameter": parameter},
            }
        ],
    )


def _check_include_depth(include: list[str] | None) -> None:
    max_depth = get_settings().max_include_depth
    if include is None or max_depth is None:
        return

    for path in include:
        if len(path.split(".")) > max_depth:
            raise _invalid_parameter(
                "include",
                "invalid_include",
                "Invalid include path",
                f"Include path {path} exceeds the maximum depth of {max_depth}",
            )


def _serializer_options(
    normalized: dict[str, Any],
    default_fields: Mapping[str, list[str]] | None,
    default_include: list[str] | None,
) -> SerializeManagerOptions:
    include = normalized["include"]
    if include is None:
        include = list(default_include) if default_include is not None else None
    _check_include_depth(include)

    return SerializeManagerOptions(
        fields={**(default_fields or {}), **normalized["fields"]},
        include=include,
    )


def parse_base_query(
    params: Mapping[str, Any],
    *,
    default_fields: Mapping[str, list[str]] | None = None,
    default_include: list[str] | None = None,
) -> SerializeManagerOptions:
    """Return serializer options from ``fields`` and ``include`` parameters."""
    normalized = parse_query_params(params)
    return _serializer_options(normalized, default_fields, default_include)


def _process_sort(
    raw_sort: list[str] | None,
    default_sort: list[FieldSort] | None,
    allowed_sort_fields: list[str] | None,
) -> list[FieldSort] | None:
    if raw_sort is None:
        return default_sort

    sort = [
        FieldSort(field=value[1:], order="desc")
        if value.startswith("-")
        else FieldSort(field=value, order="asc")
        for value in raw_sort
    ]
    for field_sort in sort:
        if not allowed_sort_fields or field_sort.field not in allowed_sort_fields:
            raise _invalid_parameter(
                "sort",
                "invalid_sort_field",
                "Invalid sort field",
                f"Sorting by field {field_sort.field} is not supported",
            )
    return sort


def _validate_family(
    family: str, value: dict[str, Any], model: type[BaseModel] | None
) -> Any:
    if model is None:
        if value:
            raise _invalid_parameter(
                family,
                f"unsupported_{family}",
                f"Unsupported {family} parameter",
                f"The {family} parameter is not supported by this endpoint",
            )
        return None

    try:
        return model.model_validate(value)
    except ValidationError as exc:
        raise PydanticValidationError(
            "Validation of query failed", exc, "query", (family,), input_data=value
        ) from exc


def parse_list_query(
    params: Mapping[str, Any],
    *,
    default_fields: Mapping[str, list[str]] | None = None,
    default_include: list[str] | None = None,
    default_sort: list[FieldSort] | None = None,
    allowed_sort_fields: list[str] | None = None,
    filter_model: type[BaseModel] | None = None,
    page_model: type[BaseModel] | None = None,
) -> ListQuery:
    """Parse a collection query; ``filter`` and ``page`` go through the given models."""
    normalized = parse_query_params(params)

    return ListQuery(
        serializer_options=_serializer_options(normalized, default_fields, default_include),
        sort=_process_sort(normalized["sort"], default_sort, allowed_sort_fields),
        filter=_validate_family("filter", normalized["filter"], filter_model),
        page=_validate_family("page", normalized["page"], page_model),
    )
