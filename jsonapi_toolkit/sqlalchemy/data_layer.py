"""Resolve JSON:API resource identifiers to SQLAlchemy entities."""

from __future__ import annotations

import logging
from typing import Any, Mapping

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from jsonapi_toolkit.core.exceptions import UnknownTypeError

logger = logging.getLogger(__name__)


class SQLAlchemyResolver:
    """Look up entities referenced by ``{type, id}`` identifiers."""

    def __init__(self, *, models: Mapping[str, Any], session: Session | AsyncSession) -> None:
        """Store the resource type to model mapping and the session."""
        self.models = dict(models)
        self.session = session

    def get_model(self, type_: str) -> Any:
        model = self.models.get(type_)
        if model is None:
            raise UnknownTypeError(type_)
        return model

    async def resolve(self, identifier: Mapping[str, Any]) -> Any | None:
        """Return the entity for ``identifier`` or None when it does not exist."""
        model = self.get_model(identifier["type"])
        if isinstance(self.session, AsyncSession):
            entity = await self.session.get(model, identifier["id"])
        else:
            entity = self.session.get(model, identifier["id"])

        if entity is None:
            logger.debug("No %s entity with id %s", identifier["type"], identifier["id"])
        return entity

    async def resolve_many(self, identifiers: list[Mapping[str, Any]]) -> list[Any | None]:
        """Resolve identifiers in order, keeping None for missing entities."""
        return [await self.resolve(identifier) for identifier in identifiers]
