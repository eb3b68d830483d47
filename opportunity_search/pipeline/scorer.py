"""Additive relevance scoring of opportunities against a free-text query.

Signals, strongest first: exact match, prefix, substring, per-word substring,
then fuzzy (edit-distance) word matches on title and organization tokens.
Weights come from ScoringConfig. Matched fields are deduplicated; the score
keeps accumulating for every rule that fires.
"""

import logging

from opportunity_search.core.config import ScoringConfig
from opportunity_search.core.schemas import MatchedField, Opportunity
from opportunity_search.pipeline.fuzzy import fuzzy_distance

logger = logging.getLogger(__name__)

_DEFAULT_CONFIG = ScoringConfig()


def split_query(query: str) -> list[str]:
    """Lowercase whitespace-separated query words, empty tokens dropped."""
    return query.lower().split()


def score_opportunity(
    opportunity: Opportunity,
    query: str,
    query_words: list[str],
    config: ScoringConfig | None = None,
) -> tuple[float, list[MatchedField]]:
    """Score one opportunity against query.

    Args:
        opportunity: The record to score.
        query: Full query phrase (trimmed and lowercased here).
        query_words: Lowercase query words, see split_query().
        config: Point weights; defaults to ScoringConfig().

    Returns:
        (score, matched_fields) with fields in first-touch order.
    """
    cfg = config or _DEFAULT_CONFIG
    phrase = query.lower().strip()

    title = opportunity.title.lower()
    organization = opportunity.organization_name.lower()
    description = (opportunity.description or "").lower()
    location = (opportunity.location or "").lower()
    category = (opportunity.category or "").lower()

    score = 0.0
    matched: list[MatchedField] = []

    def hit(field: MatchedField, points: float) -> None:
        nonlocal score
        score += points
        if field not in matched:
            matched.append(field)

    # Exact
    if title == phrase:
        hit("title", cfg.exact_title)
    if organization == phrase:
        hit("organization", cfg.exact_organization)

    # Prefix
    if title.startswith(phrase):
        hit("title", cfg.prefix_title)
    if organization.startswith(phrase):
        hit("organization", cfg.prefix_organization)

    # Substring
    if phrase in title:
        hit("title", cfg.contains_title)
    if phrase in organization:
        hit("organization", cfg.contains_organization)
    if phrase in description:
        hit("description", cfg.contains_description)
    if phrase in location:
        hit("location", cfg.contains_location)
    if phrase in category:
        hit("category", cfg.contains_category)

    # Per-word
    for word in query_words:
        if len(word) < cfg.min_word_length:
            continue
        if word in title:
            hit("title", cfg.word_title)
        if word in organization:
            hit("organization", cfg.word_organization)
        if word in description:
            hit("description", cfg.word_description)
        if word in location:
            hit("location", cfg.word_location)

    # Fuzzy, unclamped: very long words may contribute negative points
    title_tokens = title.split()
    organization_tokens = organization.split()
    for word in query_words:
        if len(word) < cfg.min_fuzzy_word_length:
            continue
        for token in title_tokens:
            distance = fuzzy_distance(word, token)
            if distance is not None:
                hit("title", cfg.fuzzy_title_base - distance * cfg.fuzzy_title_penalty)
        for token in organization_tokens:
            distance = fuzzy_distance(word, token)
            if distance is not None:
                hit(
                    "organization",
                    cfg.fuzzy_organization_base - distance * cfg.fuzzy_organization_penalty,
                )

    return score, matched
