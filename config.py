"""Environment-driven settings.

Values come from the process environment, optionally seeded from a
``.env`` file in the working directory.
"""

from typing import Annotated, Any, List, Optional

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

DEFAULT_DATABASE_URL = "mongodb://localhost:27017"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore", populate_by_name=True,
    )

    # Database; None means the local default is used
    database_url: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("database_url", "mongodb_uri"),
    )
    database_name: str = "bookswap"
    database_timeout_ms: int = 5000

    # API
    cors_origins: Annotated[List[str], NoDecode] = ["*"]
    port: int = 8000

    # Observability
    log_level: str = "INFO"
    log_format: str = "text"

    @field_validator("cors_origins", mode="before")
    @classmethod
    def split_origins(cls, v: Any) -> Any:
        """CORS_ORIGINS is a comma separated list."""
        if isinstance(v, str):
            origins = [origin.strip() for origin in v.split(",")]
            return [origin for origin in origins if origin] or ["*"]
        return v

    @property
    def mongodb_url(self) -> str:
        return self.database_url or DEFAULT_DATABASE_URL


def get_settings() -> Settings:
    return Settings()
