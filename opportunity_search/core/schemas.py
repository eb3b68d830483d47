"""Core data models for the opportunity search engine."""

import json
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

KNOWN_CATEGORIES = (
    "environment",
    "education",
    "healthcare",
    "poorRelief",
    "community",
    "viEngage",
)

# Category values that disable the category filter.
MATCH_ALL_CATEGORIES = frozenset({"all", "nearMe"})

DateRange = Literal["all", "today", "thisWeek", "thisMonth", "upcoming"]
SortKey = Literal["relevance", "distance", "date", "spots"]
MatchedField = Literal["title", "organization", "description", "location", "category"]


def _naive_local(value: datetime | None) -> datetime | None:
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)


class Opportunity(BaseModel):
    """A volunteering opportunity supplied by the data-access layer.

    Frozen: search annotations live on the SearchResult wrapper.
    Unknown keys are kept as pass-through display fields.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="allow",
        alias_generator=to_camel,
        populate_by_name=True,
    )

    id: str
    title: str
    description: str = ""
    organization_name: str
    organization_verified: bool = False
    category: str = ""
    location: str = ""
    distance: float | None = None
    date: datetime | None = None
    date_start: datetime | None = None
    date_end: datetime | None = None
    spots_available: int = 0
    spots_total: int = 0

    def effective_date(self) -> datetime | None:
        """End date, else the legacy single date, else None (naive local time)."""
        return _naive_local(self.date_end or self.date)


class SearchOptions(BaseModel):
    """Search query plus structured filters, sort key and pagination.

    Doubles as the cache key: see cache_key().
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    query: str = ""
    category: str | None = None
    date_range: DateRange = "all"
    max_distance: float | None = None
    min_spots_available: int | None = None
    organization_verified: bool | None = None
    sort_by: SortKey = "relevance"
    offset: int | None = Field(default=None, ge=0)
    limit: int | None = Field(default=None, ge=0)

    def cache_key(self) -> str:
        """Canonical JSON encoding with sorted keys; equal options give equal keys."""
        return json.dumps(self.model_dump(mode="json"), sort_keys=True, separators=(",", ":"))


class SearchResult(BaseModel):
    """Wrapper that pairs a frozen Opportunity with its search annotations."""

    model_config = ConfigDict(frozen=True)

    opportunity: Opportunity
    relevance_score: float = Field(default=0.0, ge=0.0)
    matched_fields: list[MatchedField] = Field(default_factory=list)
    highlighted_title: str | None = None
    highlighted_description: str | None = None


class CacheEntry(BaseModel):
    """One cached result list, keyed by SearchOptions.cache_key()."""

    query: str
    results: list[SearchResult]
    timestamp: float
    options: SearchOptions


class SearchEvent(BaseModel):
    """A recorded search or result-click analytics event."""

    query: str
    result_count: int = Field(ge=0)
    clicked_id: str | None = None
    recorded_at: datetime = Field(default_factory=datetime.now)
