"""Entity serializer definitions for JSON:API resources."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Generic, Mapping, TypeVar, Union

EntityT = TypeVar("EntityT")
ReferenceT = TypeVar("ReferenceT")


@dataclass(frozen=True)
class SerializerOptions:
    """Per-call values handed to attribute, relationship and link projectors."""

    context: Any = None
    sideloaded: Any = None


@dataclass(frozen=True)
class InlineRelationship:
    """Relationship to a loaded entity; it is side-loaded when its path is included."""

    type: str
    entity: Any
    links: Mapping[str, Any] | None = None
    meta: Mapping[str, Any] | None = None


@dataclass(frozen=True)
class ReferenceRelationship:
    """Relationship to an entity known only by reference; never side-loaded."""

    type: str
    reference: Any
    links: Mapping[str, Any] | None = None
    meta: Mapping[str, Any] | None = None


EntityRelationship = Union[InlineRelationship, ReferenceRelationship]
EntityRelationships = Mapping[str, Union[EntityRelationship, list[EntityRelationship], None]]

AttributesProjector = Callable[[Any, SerializerOptions], Mapping[str, Any] | None]
RelationshipsProjector = Callable[[Any, SerializerOptions], EntityRelationships | None]
LinksProjector = Callable[[Any, SerializerOptions], Mapping[str, Any] | None]


@dataclass(frozen=True)
class EntitySerializer(Generic[EntityT, ReferenceT]):
    """Describe how entities of one resource type become JSON:API resources.

    ``get_id`` and ``get_reference_id`` are required. The projectors are
    optional; a resource omits the matching member when its projector is
    ``None`` or returns ``None``.
    """

    get_id: Callable[[EntityT], str]
    get_reference_id: Callable[[ReferenceT], str]
    get_attributes: AttributesProjector | None = None
    get_relationships: RelationshipsProjector | None = None
    get_resource_links: LinksProjector | None = None


@dataclass
class SerializeManagerOptions:
    """Options for building a document.

    ``fields`` maps a resource type to its sparse field set, ``include`` lists
    dotted relationship paths to side-load. ``sideloaded`` only reaches the
    projectors of the primary entities.
    """

    context: Any = None
    fields: dict[str, list[str]] | None = None
    include: list[str] | None = None
    meta: dict[str, Any] | None = None
    links: dict[str, Any] | None = None
    extensions: list[str] | None = None
    profiles: list[str] | None = None
    sideloaded: Any = None


@dataclass
class SerializedEntity:
    """A serialized resource and the relationships it was built from."""

    resource: dict[str, Any]
    entity_relationships: EntityRelationships | None = field(default=None)
