"""SQLAlchemy helpers for JSON:API."""

from .data_layer import SQLAlchemyResolver

__all__ = ["SQLAlchemyResolver"]
