"""Serialize entities into JSON:API documents through a type registry."""

from __future__ import annotations

from types import MappingProxyType
from typing import Any, Iterable, Mapping

from jsonapi_toolkit.core.document import JSONAPIBody, JSONAPIDocumentBuilder
from jsonapi_toolkit.core.exceptions import UnknownTypeError
from jsonapi_toolkit.serializers.base import (
    EntityRelationship,
    EntitySerializer,
    InlineRelationship,
    SerializedEntity,
    SerializeManagerOptions,
    SerializerOptions,
)
from jsonapi_toolkit.serializers.included import IncludedCollection


class SerializeManager:
    """Registry of entity serializers keyed by resource type.

    Build one at startup and share it; it holds no per-request state.
    """

    document_builder_class: type = JSONAPIDocumentBuilder

    def __init__(self, serializers: Mapping[str, EntitySerializer[Any, Any]]) -> None:
        self.serializers = MappingProxyType(dict(serializers))
        self.document_builder = self.document_builder_class()

    def get_serializer(self, type_: str) -> EntitySerializer[Any, Any]:
        """Return the serializer registered for ``type_``."""
        serializer = self.serializers.get(type_)
        if serializer is None:
            raise UnknownTypeError(type_)
        return serializer

    def serialize_one(
        self,
        type_: str,
        entity: Any,
        options: SerializeManagerOptions | None = None,
    ) -> JSONAPIBody:
        """Return a document whose primary data is a single resource or null."""
        options = options or SerializeManagerOptions()

        if entity is None:
            return self._build_body(None, options, None)

        result = self.serialize_entity(type_, entity, options)
        included = None

        if options.include is not None and result.entity_relationships is not None:
            included = IncludedCollection(self)
            included.add(result.entity_relationships, options)

        return self._build_body(result.resource, options, included)

    def serialize_many(
        self,
        type_: str,
        entities: Iterable[Any],
        options: SerializeManagerOptions | None = None,
    ) -> JSONAPIBody:
        """Return a document whose primary data is a list of resources."""
        options = options or SerializeManagerOptions()
        results = [self.serialize_entity(type_, entity, options) for entity in entities]
        included = None

        if options.include is not None:
            for result in results:
                if result.entity_relationships is None:
                    continue
                if included is None:
                    included = IncludedCollection(self)
                included.add(result.entity_relationships, options)

        return self._build_body([result.resource for result in results], options, included)

    def serialize_entity(
        self,
        type_: str,
        entity: Any,
        options: SerializeManagerOptions,
    ) -> SerializedEntity:
        """Serialize one entity and keep its unfiltered relationships."""
        serializer = self.get_serializer(type_)
        serializer_options = SerializerOptions(
            context=options.context, sideloaded=options.sideloaded
        )
        fields = options.fields.get(type_) if options.fields else None

        entity_relationships = None
        if serializer.get_relationships is not None:
            entity_relationships = serializer.get_relationships(entity, serializer_options)

        resource: dict[str, Any] = {"type": type_, "id": serializer.get_id(entity)}

        relationships = None
        if entity_relationships is not None:
            relationships = {
                name: self._serialize_relationship(value)
                for name, value in entity_relationships.items()
            }

        if serializer.get_attributes is not None:
            attributes = serializer.get_attributes(entity, serializer_options)
            if attributes is not None:
                resource["attributes"] = self._filter_fields(attributes, fields)

        if relationships is not None:
            resource["relationships"] = self._filter_fields(relationships, fields)

        if serializer.get_resource_links is not None:
            links = serializer.get_resource_links(entity, serializer_options)
            if links is not None:
                resource["links"] = dict(links)

        return SerializedEntity(resource=resource, entity_relationships=entity_relationships)

    def get_entity_relationship_id(self, entity_relationship: EntityRelationship) -> str:
        """Return the id of the entity or reference behind a relationship."""
        serializer = self.get_serializer(entity_relationship.type)

        if isinstance(entity_relationship, InlineRelationship):
            return serializer.get_id(entity_relationship.entity)
        return serializer.get_reference_id(entity_relationship.reference)

    def _build_body(
        self,
        data: Any,
        options: SerializeManagerOptions,
        included: IncludedCollection | None,
    ) -> JSONAPIBody:
        resources = included.to_list() if included is not None else None
        build_kwargs = {
            "included": resources,
            "links": options.links,
            "meta": options.meta,
            "extensions": options.extensions,
            "profiles": options.profiles,
        }
        if isinstance(data, list):
            return self.document_builder.build_collection(data, **build_kwargs)
        return self.document_builder.build_single(data, **build_kwargs)

    def _serialize_relationship(
        self, value: EntityRelationship | list[EntityRelationship] | None
    ) -> dict[str, Any]:
        if value is None:
            return {"data": None}

        if isinstance(value, list):
            return {"data": [self._resource_identifier(item) for item in value]}

        relationship: dict[str, Any] = {"data": self._resource_identifier(value)}
        if value.links is not None:
            relationship["links"] = dict(value.links)
        if value.meta is not None:
            relationship["meta"] = dict(value.meta)
        return relationship

    def _resource_identifier(self, entity_relationship: EntityRelationship) -> dict[str, str]:
        return {
            "type": entity_relationship.type,
            "id": self.get_entity_relationship_id(entity_relationship),
        }

    @staticmethod
    def _filter_fields(values: Mapping[str, Any], fields: list[str] | None) -> dict[str, Any]:
        if fields is None:
            return dict(values)
        return {field: values[field] for field in fields if field in values}
