from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """JSON:API settings loaded from environment variables with JSONAPI_ prefix."""

    # Document
    jsonapi_version: str = "1.1"
    # Middleware
    excluded_paths: list[str] = []
    expose_internal_errors: bool = False
    # Query parsing, None leaves include paths unbounded
    max_include_depth: int | None = None

    model_config = SettingsConfigDict(env_prefix="JSONAPI_", env_file=".env")


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
