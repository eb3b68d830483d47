"""Filter chain for opportunity search.

Filter order:
  1. CategoryFilter: exact tag match unless "all"/"nearMe"/unset
  2. DateRangeFilter: effective date within today/thisWeek/thisMonth/upcoming
  3. DistanceFilter: drops records without a distance when a max is set
  4. MinSpotsFilter: spots_available >= threshold
  5. VerifiedFilter: organization_verified == requested flag

Every filter returns a new list; inputs are never mutated.
"""

import logging
from collections.abc import Callable
from datetime import datetime, timedelta

from opportunity_search.core.schemas import (
    MATCH_ALL_CATEGORIES,
    DateRange,
    Opportunity,
    SearchOptions,
)

logger = logging.getLogger(__name__)

# A filter is a callable that takes opportunities and returns a subset.
Filter = Callable[[list[Opportunity]], list[Opportunity]]


def add_month(value: datetime) -> datetime:
    """Same day next month. Days past the end of a shorter month roll into the one after."""
    year = value.year + value.month // 12
    month = value.month % 12 + 1
    return value.replace(year=year, month=month, day=1) + timedelta(days=value.day - 1)


def _log_removed(name: str, before: int, after: int) -> None:
    removed = before - after
    if removed:
        logger.debug("%s: removed %d opportunities", name, removed)


class CategoryFilter:
    """Keep only opportunities in the requested category."""

    def __init__(self, category: str | None) -> None:
        self._category = category

    def __call__(self, opportunities: list[Opportunity]) -> list[Opportunity]:
        if not self._category or self._category in MATCH_ALL_CATEGORIES:
            return list(opportunities)
        result = [o for o in opportunities if o.category == self._category]
        _log_removed("CategoryFilter", len(opportunities), len(result))
        return result


class DateRangeFilter:
    """Keep opportunities whose effective date falls inside the range.

    Records without any date always pass.
    """

    def __init__(self, date_range: DateRange, now: datetime | None = None) -> None:
        self._date_range = date_range
        self._now = now

    def __call__(self, opportunities: list[Opportunity]) -> list[Opportunity]:
        if self._date_range == "all":
            return list(opportunities)
        today = (self._now or datetime.now()).replace(hour=0, minute=0, second=0, microsecond=0)
        result = [o for o in opportunities if self._in_range(o.effective_date(), today)]
        _log_removed("DateRangeFilter", len(opportunities), len(result))
        return result

    def _in_range(self, when: datetime | None, today: datetime) -> bool:
        if when is None:
            return True
        if self._date_range == "today":
            return when.date() == today.date()
        if self._date_range == "thisWeek":
            return today <= when <= today + timedelta(days=7)
        if self._date_range == "thisMonth":
            return today <= when <= add_month(today)
        if self._date_range == "upcoming":
            return when >= today
        return True


class DistanceFilter:
    """Keep opportunities within max_distance; unknown distances are dropped."""

    def __init__(self, max_distance: float | None) -> None:
        self._max_distance = max_distance

    def __call__(self, opportunities: list[Opportunity]) -> list[Opportunity]:
        if self._max_distance is None:
            return list(opportunities)
        result = [
            o for o in opportunities
            if o.distance is not None and o.distance <= self._max_distance
        ]
        _log_removed("DistanceFilter", len(opportunities), len(result))
        return result


class MinSpotsFilter:
    """Keep opportunities with at least min_spots available."""

    def __init__(self, min_spots: int | None) -> None:
        self._min_spots = min_spots

    def __call__(self, opportunities: list[Opportunity]) -> list[Opportunity]:
        if self._min_spots is None:
            return list(opportunities)
        result = [o for o in opportunities if o.spots_available >= self._min_spots]
        _log_removed("MinSpotsFilter", len(opportunities), len(result))
        return result


class VerifiedFilter:
    """Keep opportunities whose organization verification matches the flag."""

    def __init__(self, verified: bool | None) -> None:
        self._verified = verified

    def __call__(self, opportunities: list[Opportunity]) -> list[Opportunity]:
        if self._verified is None:
            return list(opportunities)
        result = [o for o in opportunities if o.organization_verified == self._verified]
        _log_removed("VerifiedFilter", len(opportunities), len(result))
        return result


def build_filters(options: SearchOptions, now: datetime | None = None) -> list[Filter]:
    """Build the filter chain for a set of search options."""
    return [
        CategoryFilter(options.category),
        DateRangeFilter(options.date_range, now),
        DistanceFilter(options.max_distance),
        MinSpotsFilter(options.min_spots_available),
        VerifiedFilter(options.organization_verified),
    ]


def run_filter_chain(
    opportunities: list[Opportunity],
    filters: list[Filter],
) -> list[Opportunity]:
    """Apply filters in order, returning the surviving opportunities."""
    result = list(opportunities)
    for f in filters:
        result = f(result)
    return result
