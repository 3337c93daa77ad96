"""Collect side-loaded resources for compound documents."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import TYPE_CHECKING, Any, Sequence

from jsonapi_toolkit.serializers.base import (
    EntityRelationship,
    EntityRelationships,
    InlineRelationship,
    SerializeManagerOptions,
)

if TYPE_CHECKING:
    from jsonapi_toolkit.serializers.manager import SerializeManager

logger = logging.getLogger(__name__)

FieldPath = tuple[str, ...]


class IncludedCollection:
    """Resources to include, deduplicated by type and id in first-visit order."""

    def __init__(self, serialize_manager: SerializeManager) -> None:
        self.serialize_manager = serialize_manager
        self.included: dict[str, dict[str, Any]] = {}

    def add(
        self,
        entity_relationships: EntityRelationships,
        options: SerializeManagerOptions,
        parent_path: FieldPath = (),
    ) -> None:
        """Walk ``entity_relationships`` and side-load every requested path."""
        include_paths = [tuple(path.split(".")) for path in options.include or []]
        self._add(entity_relationships, options, include_paths, parent_path)

    def to_list(self) -> list[dict[str, Any]]:
        return list(self.included.values())

    def _add(
        self,
        entity_relationships: EntityRelationships,
        options: SerializeManagerOptions,
        include_paths: Sequence[FieldPath],
        parent_path: FieldPath,
    ) -> None:
        for field, value in entity_relationships.items():
            field_path = (*parent_path, field)

            if value is None or not self.should_include(field_path, include_paths):
                continue

            values = value if isinstance(value, list) else [value]
            for entity_relationship in values:
                self._add_single(entity_relationship, field_path, options, include_paths)

    @staticmethod
    def should_include(field_path: FieldPath, include_paths: Sequence[FieldPath]) -> bool:
        """Return True if a requested path equals or extends ``field_path``."""
        depth = len(field_path)
        return any(path[:depth] == field_path for path in include_paths)

    def _add_single(
        self,
        entity_relationship: EntityRelationship,
        field_path: FieldPath,
        options: SerializeManagerOptions,
        include_paths: Sequence[FieldPath],
    ) -> None:
        id_ = self.serialize_manager.get_entity_relationship_id(entity_relationship)
        composite_key = f"{entity_relationship.type}:{id_}"

        if not isinstance(entity_relationship, InlineRelationship):
            return
        if composite_key in self.included:
            logger.debug("Skipping already included resource %s", composite_key)
            return

        result = self.serialize_manager.serialize_entity(
            entity_relationship.type,
            entity_relationship.entity,
            replace(options, sideloaded=None),
        )
        self.included[composite_key] = result.resource
        logger.debug("Included %s via %s", composite_key, ".".join(field_path))

        if result.entity_relationships is not None:
            self._add(result.entity_relationships, options, include_paths, field_path)
