"""Core JSON:API document and error helpers."""

from .document import (
    JSONAPI_MEDIA_TYPE,
    JSONAPIBody,
    JSONAPIDocumentBuilder,
    JSONAPIErrorBody,
    format_media_type,
)
from .errors import JSONAPIErrorBuilder
from .exceptions import (
    HTTPError,
    InputValidationError,
    JSONAPIErrorParams,
    JSONAPIException,
    ParserError,
    PydanticValidationError,
    UnknownTypeError,
)

__all__ = [
    "JSONAPI_MEDIA_TYPE",
    "HTTPError",
    "InputValidationError",
    "JSONAPIBody",
    "JSONAPIDocumentBuilder",
    "JSONAPIErrorBody",
    "JSONAPIErrorBuilder",
    "JSONAPIErrorParams",
    "JSONAPIException",
    "ParserError",
    "PydanticValidationError",
    "UnknownTypeError",
    "format_media_type",
]
