"""Application settings loaded from environment variables and .env file."""

from functools import lru_cache
from pathlib import Path
from typing import Annotated

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """Settings for a repository download run. Read once, never mutated."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    github_token: str | None = None
    include_patterns: Annotated[list[str], NoDecode] = Field(default_factory=list)
    exclude_patterns: Annotated[list[str], NoDecode] = Field(default_factory=list)
    output_dir: Path = Path("./output")
    api_delay_ms: int = Field(default=100, ge=0)
    log_level: str = "INFO"

    @field_validator("include_patterns", "exclude_patterns", mode="before")
    @classmethod
    def _split_comma_separated(cls, value):
        if value is None:
            return []
        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        return value


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
