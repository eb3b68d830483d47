"""Tests for core data models."""

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from opportunity_search.core.schemas import (
    CacheEntry,
    Opportunity,
    SearchEvent,
    SearchOptions,
    SearchResult,
)


def _opportunity(**kw: object) -> Opportunity:
    defaults: dict[str, object] = {
        "id": "opp-1",
        "title": "Beach Cleanup",
        "organization_name": "Green Jamaica",
    }
    defaults.update(kw)
    return Opportunity(**defaults)  # type: ignore[arg-type]


class TestOpportunity:
    def test_defaults(self) -> None:
        o = _opportunity()
        assert o.description == ""
        assert o.location == ""
        assert o.category == ""
        assert o.organization_verified is False
        assert o.distance is None
        assert o.spots_available == 0
        assert o.spots_total == 0

    def test_camel_case_keys(self) -> None:
        o = Opportunity.model_validate({
            "id": "opp-1",
            "title": "Beach Cleanup",
            "organizationName": "Green Jamaica",
            "organizationVerified": True,
            "spotsAvailable": 4,
            "spotsTotal": 10,
            "dateEnd": "2026-11-01T09:00:00",
        })
        assert o.organization_name == "Green Jamaica"
        assert o.organization_verified is True
        assert o.spots_available == 4
        assert o.date_end == datetime(2026, 11, 1, 9, 0)

    def test_extra_fields_pass_through(self) -> None:
        o = Opportunity.model_validate({
            "id": "opp-1",
            "title": "Beach Cleanup",
            "organizationName": "Green Jamaica",
            "imageUrl": "https://example.com/beach.png",
            "skillsNeeded": ["lifting"],
        })
        assert o.model_extra == {
            "imageUrl": "https://example.com/beach.png",
            "skillsNeeded": ["lifting"],
        }

    def test_frozen(self) -> None:
        o = _opportunity()
        with pytest.raises(ValidationError):
            o.title = "Other"  # type: ignore[misc]

    def test_title_required(self) -> None:
        with pytest.raises(ValidationError):
            Opportunity(id="1", organization_name="Green Jamaica")  # type: ignore[call-arg]

    def test_effective_date_prefers_end(self) -> None:
        o = _opportunity(date=datetime(2026, 10, 1), date_end=datetime(2026, 10, 5))
        assert o.effective_date() == datetime(2026, 10, 5)

    def test_effective_date_falls_back_to_date(self) -> None:
        o = _opportunity(date=datetime(2026, 10, 1), date_start=datetime(2026, 9, 1))
        assert o.effective_date() == datetime(2026, 10, 1)

    def test_effective_date_none(self) -> None:
        assert _opportunity(date_start=datetime(2026, 9, 1)).effective_date() is None

    def test_effective_date_naive(self) -> None:
        o = _opportunity(date_end=datetime(2026, 10, 5, 12, 0, tzinfo=timezone.utc))
        result = o.effective_date()
        assert result is not None
        assert result.tzinfo is None


class TestSearchOptions:
    def test_defaults(self) -> None:
        opts = SearchOptions()
        assert opts.query == ""
        assert opts.category is None
        assert opts.date_range == "all"
        assert opts.sort_by == "relevance"
        assert opts.offset is None
        assert opts.limit is None

    def test_invalid_sort_key(self) -> None:
        with pytest.raises(ValidationError):
            SearchOptions(sort_by="popularity")  # type: ignore[arg-type]

    def test_invalid_date_range(self) -> None:
        with pytest.raises(ValidationError):
            SearchOptions(date_range="yesterday")  # type: ignore[arg-type]

    def test_negative_offset(self) -> None:
        with pytest.raises(ValidationError):
            SearchOptions(offset=-1)

    def test_camel_case_keys(self) -> None:
        opts = SearchOptions.model_validate({"minSpotsAvailable": 2, "dateRange": "upcoming"})
        assert opts.min_spots_available == 2
        assert opts.date_range == "upcoming"

    def test_cache_key_order_independent(self) -> None:
        a = SearchOptions(query="beach", category="environment", sort_by="spots")
        b = SearchOptions(sort_by="spots", category="environment", query="beach")
        assert a.cache_key() == b.cache_key()
        assert a == b

    def test_cache_key_differs_on_any_field(self) -> None:
        base = SearchOptions(query="beach")
        assert base.cache_key() != SearchOptions(query="beach", limit=5).cache_key()
        assert base.cache_key() != SearchOptions(query="Beach").cache_key()

    def test_explicit_default_same_key(self) -> None:
        assert SearchOptions(query="beach").cache_key() == SearchOptions(
            query="beach", date_range="all", category=None,
        ).cache_key()


class TestSearchResult:
    def test_defaults(self) -> None:
        r = SearchResult(opportunity=_opportunity())
        assert r.relevance_score == 0.0
        assert r.matched_fields == []
        assert r.highlighted_title is None

    def test_negative_score_rejected(self) -> None:
        with pytest.raises(ValidationError):
            SearchResult(opportunity=_opportunity(), relevance_score=-1.0)

    def test_unknown_field_name_rejected(self) -> None:
        with pytest.raises(ValidationError):
            SearchResult(opportunity=_opportunity(), matched_fields=["url"])  # type: ignore[list-item]


class TestCacheEntry:
    def test_json_round_trip(self) -> None:
        entry = CacheEntry(
            query="beach",
            results=[SearchResult(opportunity=_opportunity(), relevance_score=10.0)],
            timestamp=1_000.0,
            options=SearchOptions(query="beach"),
        )
        assert CacheEntry.model_validate_json(entry.model_dump_json()) == entry


class TestSearchEvent:
    def test_recorded_at_default(self) -> None:
        e = SearchEvent(query="beach", result_count=0)
        assert isinstance(e.recorded_at, datetime)

    def test_negative_count_rejected(self) -> None:
        with pytest.raises(ValidationError):
            SearchEvent(query="beach", result_count=-1)
