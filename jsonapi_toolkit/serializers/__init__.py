"""Entity serializers and the JSON:API serialize manager."""

from .base import (
    EntityRelationship,
    EntityRelationships,
    EntitySerializer,
    InlineRelationship,
    ReferenceRelationship,
    SerializedEntity,
    SerializeManagerOptions,
    SerializerOptions,
)
from .included import IncludedCollection
from .manager import SerializeManager

__all__ = [
    "EntityRelationship",
    "EntityRelationships",
    "EntitySerializer",
    "IncludedCollection",
    "InlineRelationship",
    "ReferenceRelationship",
    "SerializeManager",
    "SerializeManagerOptions",
    "SerializedEntity",
    "SerializerOptions",
]
