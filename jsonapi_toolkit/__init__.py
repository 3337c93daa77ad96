"""JSON:API v1.1 toolkit: Accept header parsing and compound document serialization."""

from .core.document import JSONAPIBody, JSONAPIDocumentBuilder, JSONAPIErrorBody
from .core.errors import JSONAPIErrorBuilder
from .core.exceptions import (
    HTTPError,
    InputValidationError,
    ParserError,
    PydanticValidationError,
    UnknownTypeError,
)
from .integration import install_jsonapi
from .responses import JSONAPIResponse
from .serializers import (
    EntitySerializer,
    InlineRelationship,
    ReferenceRelationship,
    SerializeManager,
    SerializeManagerOptions,
)
from .utils.content_negotiation import get_acceptable_media_types, parse_accept

__all__ = [
    "EntitySerializer",
    "HTTPError",
    "InlineRelationship",
    "InputValidationError",
    "JSONAPIBody",
    "JSONAPIDocumentBuilder",
    "JSONAPIErrorBody",
    "JSONAPIErrorBuilder",
    "JSONAPIResponse",
    "ParserError",
    "PydanticValidationError",
    "ReferenceRelationship",
    "SerializeManager",
    "SerializeManagerOptions",
    "UnknownTypeError",
    "get_acceptable_media_types",
    "install_jsonapi",
    "parse_accept",
]
