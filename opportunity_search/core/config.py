"""Configuration models and YAML loader for the opportunity search engine."""

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator


class ScoringConfig(BaseModel):
    """Point weights for additive relevance scoring."""

    exact_title: float = 1000.0
    exact_organization: float = 800.0
    prefix_title: float = 500.0
    prefix_organization: float = 400.0
    contains_title: float = 300.0
    contains_organization: float = 200.0
    contains_description: float = 100.0
    contains_location: float = 50.0
    contains_category: float = 30.0
    word_title: float = 150.0
    word_organization: float = 100.0
    word_description: float = 50.0
    word_location: float = 25.0
    fuzzy_title_base: float = 50.0
    fuzzy_title_penalty: float = 10.0
    fuzzy_organization_base: float = 30.0
    fuzzy_organization_penalty: float = 5.0
    min_word_length: int = Field(default=2, ge=1)
    min_fuzzy_word_length: int = Field(default=3, ge=1)


class HistoryConfig(BaseModel):
    """Recent-query history limits."""

    max_items: int = Field(default=10, ge=1)


class CacheConfig(BaseModel):
    """Result cache lifetime and size."""

    ttl_seconds: float = Field(default=300.0, gt=0)
    max_entries: int = Field(default=20, ge=1)


class SuggestionConfig(BaseModel):
    """Autocomplete suggestion caps."""

    limit: int = Field(default=5, ge=1)
    min_query_length: int = Field(default=2, ge=1)
    max_titles: int = Field(default=3, ge=0)
    max_organizations: int = Field(default=2, ge=0)
    max_locations: int = Field(default=2, ge=0)


class DatabaseConfig(BaseModel):
    """Database configuration."""

    path: str = "data/search.db"

    @field_validator("path")
    @classmethod
    def path_not_empty(cls, v: str) -> str:
        if not v.strip():
            msg = "database path must not be empty"
            raise ValueError(msg)
        return v.strip()


class Settings(BaseModel):
    """Top-level settings loaded from YAML."""

    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    history: HistoryConfig = Field(default_factory=HistoryConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)
    suggestions: SuggestionConfig = Field(default_factory=SuggestionConfig)

    @classmethod
    def from_yaml(cls, path: str | Path) -> "Settings":
        """Load settings from a YAML file."""
        path = Path(path)
        if not path.exists():
            msg = f"Config file not found: {path}"
            raise FileNotFoundError(msg)
        raw: dict[str, Any] = yaml.safe_load(path.read_text()) or {}
        return cls.model_validate(raw)
