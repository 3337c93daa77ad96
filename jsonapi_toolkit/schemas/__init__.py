"""Pydantic schemas for JSON:API documents and request bodies."""

from .request import (
    IncludedResource,
    IncludedResourceMap,
    IncludedTypeSchema,
    ParsedResource,
    client_resource_identifier_model,
    parse_create_request,
    parse_relationship_update_request,
    parse_update_request,
    relationship_model,
    resource_identifier_model,
    validate_content_type,
)
from .resource import (
    JSONAPIClientResourceIdentifier,
    JSONAPIDocument,
    JSONAPIError,
    JSONAPIErrorDocument,
    JSONAPIErrorSource,
    JSONAPIRelationship,
    JSONAPIResource,
    JSONAPIResourceIdentifier,
    parse_document,
)

__all__ = [
    "IncludedResource",
    "IncludedResourceMap",
    "IncludedTypeSchema",
    "JSONAPIClientResourceIdentifier",
    "JSONAPIDocument",
    "JSONAPIError",
    "JSONAPIErrorDocument",
    "JSONAPIErrorSource",
    "JSONAPIRelationship",
    "JSONAPIResource",
    "JSONAPIResourceIdentifier",
    "ParsedResource",
    "client_resource_identifier_model",
    "parse_create_request",
    "parse_document",
    "parse_relationship_update_request",
    "parse_update_request",
    "relationship_model",
    "resource_identifier_model",
    "validate_content_type",
]
