"""Pydantic schemas for JSON:API v1.1 documents."""

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict


class JSONAPIResourceIdentifier(BaseModel):
    """Resource identifier object: type + id."""

    type: str
    id: str
    meta: Optional[Dict[str, Any]] = None


class JSONAPIClientResourceIdentifier(BaseModel):
    """Identifier of a resource created in the same request: type + lid."""

    type: str
    lid: str
    meta: Optional[Dict[str, Any]] = None


Linkage = Union[JSONAPIResourceIdentifier, JSONAPIClientResourceIdentifier]


class JSONAPIRelationship(BaseModel):
    """Relationship object with resource linkage."""

    data: Optional[Union[Linkage, List[Linkage]]] = None
    links: Optional[Dict[str, Any]] = None
    meta: Optional[Dict[str, Any]] = None


class JSONAPIResource(BaseModel):
    """Resource object with attributes and relationships."""

    type: str
    id: str
    attributes: Optional[Dict[str, Any]] = None
    relationships: Optional[Dict[str, JSONAPIRelationship]] = None
    links: Optional[Dict[str, Any]] = None
    meta: Optional[Dict[str, Any]] = None


class JSONAPIErrorSource(BaseModel):
    """Reference to the part of the request an error stems from."""

    pointer: Optional[str] = None
    parameter: Optional[str] = None
    header: Optional[str] = None


class JSONAPIError(BaseModel):
    """A single JSON:API error object."""

    id: Optional[str] = None
    links: Optional[Dict[str, Any]] = None
    status: Optional[str] = None
    code: Optional[str] = None
    title: Optional[str] = None
    detail: Optional[str] = None
    source: Optional[JSONAPIErrorSource] = None
    meta: Optional[Dict[str, Any]] = None


class JSONAPIDocument(BaseModel):
    """Top-level JSON:API document carrying primary data."""

    model_config = ConfigDict(extra="forbid")

    jsonapi: Optional[Dict[str, Any]] = None
    data: Union[JSONAPIResource, List[JSONAPIResource], None]
    included: Optional[List[JSONAPIResource]] = None
    meta: Optional[Dict[str, Any]] = None
    links: Optional[Dict[str, Any]] = None


class JSONAPIErrorDocument(BaseModel):
    """Top-level JSON:API error document."""

    model_config = ConfigDict(extra="forbid")

    jsonapi: Optional[Dict[str, Any]] = None
    errors: List[JSONAPIError]
    meta: Optional[Dict[str, Any]] = None
    links: Optional[Dict[str, Any]] = None


def parse_document(payload: Dict[str, Any]) -> Union[JSONAPIDocument, JSONAPIErrorDocument]:
    """Validate a top-level document holding exactly one of data or errors."""
    if ("data" in payload) == ("errors" in payload):
        raise ValueError("A document must contain exactly one of 'data' or 'errors'.")
    if "errors" in payload:
        return JSONAPIErrorDocument.model_validate(payload)
    return JSONAPIDocument.model_validate(payload)
