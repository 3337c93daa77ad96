"""Utilities for JSON:API headers and query parameters."""

from .content_negotiation import (
    AcceptableMediaType,
    AcceptParser,
    MediaTypeRange,
    get_acceptable_media_types,
    parse_accept,
    parse_content_type,
)
from .query_params import FieldSort, ListQuery, parse_base_query, parse_list_query, parse_query_params

__all__ = [
    "AcceptParser",
    "AcceptableMediaType",
    "FieldSort",
    "ListQuery",
    "MediaTypeRange",
    "get_acceptable_media_types",
    "parse_accept",
    "parse_base_query",
    "parse_content_type",
    "parse_list_query",
    "parse_query_params",
]
