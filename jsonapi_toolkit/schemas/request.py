"""Request body parsing for JSON:API create and update requests.

Attribute and relationship rules are supplied by the caller as pydantic models;
this module only wraps them in the JSON:API document structure and turns
failures into JSON:API error objects.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import AfterValidator, BaseModel, Field, ValidationError, create_model
from pydantic_core import PydanticCustomError

from jsonapi_toolkit.core.document import JSONAPI_MEDIA_TYPE
from jsonapi_toolkit.core.exceptions import (
    InputValidationError,
    JSONAPIErrorParams,
    ParserError,
    PydanticValidationError,
)
from jsonapi_toolkit.utils.content_negotiation import parse_content_type


def _unsupported_media_type(detail: str) -> InputValidationError:
    return InputValidationError(
        "Unsupported Media Type",
        [
            {
                "status": "415",
                "code": "unsupported_media_type",
                "title": "Unsupported Media Type",
                "detail": detail,
            }
        ],
    )


def validate_content_type(content_type: str | None) -> None:
    """Reject request bodies not sent as ``application/vnd.api+json``."""
    if not content_type:
        raise _unsupported_media_type(f"Media type is missing, use '{JSONAPI_MEDIA_TYPE}'")

    try:
        media_type, parameters = parse_content_type(content_type)
    except ParserError as exc:
        raise _unsupported_media_type(f"Malformed media type: {exc.message}") from exc

    if media_type != JSONAPI_MEDIA_TYPE:
        raise _unsupported_media_type(
            f"Unsupported media type '{media_type}', use '{JSONAPI_MEDIA_TYPE}'"
        )

    rest = [name for name in parameters if name not in {"ext", "profile"}]
    if rest:
        raise _unsupported_media_type(f"Unknown media type parameters: {', '.join(rest)}")


def _fixed_value(kind: str, expected: str) -> AfterValidator:
    def check(value: str) -> str:
        if value != expected:
            raise PydanticCustomError(
                f"{kind}_mismatch",
                f"{kind.capitalize()} mismatch",
                {
                    "jsonapi": JSONAPIErrorParams(
                        f"{kind}_mismatch",
                        f"{kind.capitalize()} '{value}' does not match '{expected}'",
                        409,
                    )
                },
            )
        return value

    return AfterValidator(check)


def resource_identifier_model(type_: str, id_type: Any = str) -> type[BaseModel]:
    """Return a model for ``{type, id}`` identifiers of ``type_``."""
    return create_model(
        f"{type_}ResourceIdentifier",
        type=(Annotated[str, _fixed_value("type", type_)], ...),
        id=(id_type, ...),
    )


def client_resource_identifier_model(type_: str) -> type[BaseModel]:
    """Return a model for ``{type, lid}`` identifiers of ``type_``."""
    return create_model(
        f"{type_}ClientResourceIdentifier",
        type=(Annotated[str, _fixed_value("type", type_)], ...),
        lid=(str, ...),
    )


def relationship_model(data_type: Any) -> type[BaseModel]:
    """Return a relationship object model whose ``data`` is ``data_type``."""
    return create_model("Relationship", data=(data_type, ...))


@dataclass
class IncludedResource:
    attributes: Any = None
    relationships: Any = None


@dataclass
class IncludedTypeSchema:
    """Models for resources of one type sent in ``included``."""

    attributes_model: type[BaseModel] | None = None
    relationships_model: type[BaseModel] | None = None


class IncludedResourceMap:
    """Included resources of one type, keyed by local id."""

    def __init__(self, type_: str) -> None:
        self.type = type_
        self.resources: dict[str, IncludedResource] = {}

    def try_get(self, lid: str) -> IncludedResource | None:
        return self.resources.get(lid)

    def get(self, lid: str) -> IncludedResource:
        """Return the resource for ``lid`` or raise a 422 validation error."""
        resource = self.resources.get(lid)
        if resource is None:
            raise InputValidationError(
                "Missing resource",
                [
                    {
                        "status": "422",
                        "code": "missing_included_resource",
                        "title": "Missing included resource",
                        "detail": (
                            f"A referenced resource of type '{self.type}' and lid '{lid}' "
                            "is missing in the document"
                        ),
                    }
                ],
            )
        return resource

    def add(self, lid: str, resource: IncludedResource) -> None:
        self.resources[lid] = resource


@dataclass
class ParsedResource:
    """Validated primary data of a create or update request."""

    id: Any
    type: str
    attributes: Any = None
    relationships: Any = None
    included_types: dict[str, IncludedResourceMap] | None = field(default=None)


def _optional_model(model: type[BaseModel] | None) -> tuple[Any, Any]:
    if model is None:
        return (None, None)
    return (model, ...)


def _included_annotation(included_types: dict[str, IncludedTypeSchema] | None) -> Any:
    if not included_types:
        return None

    models = [
        create_model(
            f"{type_}IncludedResource",
            lid=(str, ...),
            type=(Literal[type_], ...),
            attributes=_optional_model(schema.attributes_model),
            relationships=_optional_model(schema.relationships_model),
        )
        for type_, schema in included_types.items()
    ]

    if len(models) == 1:
        return Optional[list[models[0]]]
    return Optional[list[Annotated[Union[tuple(models)], Field(discriminator="type")]]]


def _parse_data_request(
    id_field: tuple[Any, Any],
    body: Any,
    content_type: str | None,
    type_: str,
    attributes_model: type[BaseModel] | None,
    relationships_model: type[BaseModel] | None,
    included_types: dict[str, IncludedTypeSchema] | None,
) -> ParsedResource:
    validate_content_type(content_type)

    data_model = create_model(
        f"{type_}Data",
        id=id_field,
        type=(Annotated[str, _fixed_value("type", type_)], ...),
        attributes=_optional_model(attributes_model),
        relationships=_optional_model(relationships_model),
    )
    document_model = create_model(
        f"{type_}Document",
        data=(data_model, ...),
        included=(_included_annotation(included_types), None),
    )

    try:
        document = document_model.model_validate(body)
    except ValidationError as exc:
        raise PydanticValidationError(
            "Validation of body failed", exc, "body", input_data=body
        ) from exc

    container = None
    if included_types:
        container = {type_name: IncludedResourceMap(type_name) for type_name in included_types}
        for resource in document.included or []:
            container[resource.type].add(
                resource.lid,
                IncludedResource(
                    attributes=resource.attributes, relationships=resource.relationships
                ),
            )

    return ParsedResource(
        id=document.data.id,
        type=document.data.type,
        attributes=document.data.attributes,
        relationships=document.data.relationships,
        included_types=container,
    )


def parse_create_request(
    body: Any,
    content_type: str | None,
    *,
    type_: str,
    attributes_model: type[BaseModel] | None = None,
    relationships_model: type[BaseModel] | None = None,
    included_types: dict[str, IncludedTypeSchema] | None = None,
) -> ParsedResource:
    """Validate a create request; the client generated ``id`` is optional."""
    return _parse_data_request(
        (Optional[str], None),
        body,
        content_type,
        type_,
        attributes_model,
        relationships_model,
        included_types,
    )


def parse_update_request(
    id_: str,
    body: Any,
    content_type: str | None,
    *,
    type_: str,
    attributes_model: type[BaseModel] | None = None,
    relationships_model: type[BaseModel] | None = None,
    included_types: dict[str, IncludedTypeSchema] | None = None,
) -> ParsedResource:
    """Validate an update request whose ``id`` must equal ``id_``."""
    return _parse_data_request(
        (Annotated[str, _fixed_value("id", id_)], ...),
        body,
        content_type,
        type_,
        attributes_model,
        relationships_model,
        included_types,
    )


def parse_relationship_update_request(
    body: Any, content_type: str | None, type_: str, id_type: Any = str
) -> list[Any]:
    """Validate a to-many relationship update and return the referenced ids."""
    validate_content_type(content_type)

    identifier_model = create_model(
        f"{type_}LinkageIdentifier", type=(Literal[type_], ...), id=(id_type, ...)
    )
    linkage_model = create_model(f"{type_}Linkage", data=(list[identifier_model], ...))

    try:
        linkage = linkage_model.model_validate(body)
    except ValidationError as exc:
        raise PydanticValidationError(
            "Validation of body failed", exc, "body", input_data=body
        ) from exc

    return [identifier.id for identifier in linkage.data]
