"""Autocomplete suggestions drawn from titles, organizations and locations."""

from opportunity_search.core.config import SuggestionConfig
from opportunity_search.core.schemas import Opportunity

_DEFAULT_CONFIG = SuggestionConfig()


def generate_suggestions(
    opportunities: list[Opportunity],
    partial_query: str,
    limit: int | None = None,
    config: SuggestionConfig | None = None,
) -> list[str]:
    """Return up to limit distinct suggestions containing partial_query.

    Titles come first (cap max_titles), then organizations, then locations.
    """
    cfg = config or _DEFAULT_CONFIG
    limit = cfg.limit if limit is None else limit
    needle = (partial_query or "").strip().lower()
    if len(needle) < cfg.min_query_length:
        return []

    # dicts keep first-seen order
    titles: dict[str, None] = {}
    organizations: dict[str, None] = {}
    locations: dict[str, None] = {}
    for o in opportunities:
        if needle in o.title.lower():
            titles[o.title] = None
        if needle in o.organization_name.lower():
            organizations[o.organization_name] = None
        if o.location and needle in o.location.lower():
            locations[o.location] = None

    suggestions: dict[str, None] = {}
    for value in list(titles)[: cfg.max_titles]:
        suggestions[value] = None
    for value in list(organizations)[: cfg.max_organizations]:
        suggestions[value] = None
    for value in list(locations)[: cfg.max_locations]:
        suggestions[value] = None

    return list(suggestions)[:limit]
