"""Orchestrator: wires filter chain, scorer, highlighter, sort and pagination.

Data flow:
  1. Filter chain (category, date range, distance, spots, verified)
  2. Query stage: score + highlight, drop non-matches (skipped for blank query)
  3. Sort by the requested key
  4. Pagination (only when both offset and limit are given)

SearchService adds the stateful edges around that pure pipeline: cache
lookup, history and analytics.
"""

import asyncio
import json
import logging
from datetime import datetime

from opportunity_search.core.config import ScoringConfig, SuggestionConfig
from opportunity_search.core.schemas import Opportunity, SearchOptions, SearchResult, SortKey
from opportunity_search.pipeline.analytics import AnalyticsRecorder
from opportunity_search.pipeline.highlighter import highlight
from opportunity_search.pipeline.matcher import build_filters, run_filter_chain
from opportunity_search.pipeline.scorer import score_opportunity, split_query
from opportunity_search.pipeline.search_store import SearchStore
from opportunity_search.pipeline.suggestions import generate_suggestions

logger = logging.getLogger(__name__)

_EPOCH = datetime(1970, 1, 1)


def search_opportunities(
    opportunities: list[Opportunity],
    options: SearchOptions,
    now: datetime | None = None,
    scoring: ScoringConfig | None = None,
) -> list[SearchResult]:
    """Filter, score, sort and paginate opportunities for one set of options.

    Pure: no I/O, never mutates its inputs.
    """
    filtered = run_filter_chain(opportunities, build_filters(options, now))

    query = options.query.strip()
    if query:
        query_words = split_query(query)
        results = []
        for o in filtered:
            score, matched = score_opportunity(o, query, query_words, scoring)
            if score <= 0:
                continue
            results.append(SearchResult(
                opportunity=o,
                relevance_score=score,
                matched_fields=matched,
                highlighted_title=highlight(o.title, query, query_words),
                highlighted_description=(
                    highlight(o.description, query, query_words) if o.description else None
                ),
            ))
        logger.debug("Query '%s': %d of %d matched", query, len(results), len(filtered))
    else:
        results = [SearchResult(opportunity=o) for o in filtered]

    results = sort_results(results, options.sort_by)

    if options.offset is not None and options.limit is not None:
        results = results[options.offset : options.offset + options.limit]

    return results


def sort_results(results: list[SearchResult], sort_by: SortKey) -> list[SearchResult]:
    """Return results ordered by sort_by (stable for ties)."""
    if sort_by == "relevance":
        return sorted(results, key=lambda r: r.relevance_score, reverse=True)
    if sort_by == "distance":
        return sorted(
            results,
            key=lambda r: r.opportunity.distance if r.opportunity.distance is not None else float("inf"),
        )
    if sort_by == "date":
        return sorted(results, key=lambda r: r.opportunity.effective_date() or _EPOCH)
    if sort_by == "spots":
        return sorted(results, key=lambda r: r.opportunity.spots_available, reverse=True)
    return list(results)


class SearchService:
    """Cache-first search with history and analytics side effects.

    Usage::

        service = SearchService(SearchStore(conn), AnalyticsRecorder(conn))
        results = await service.run(opportunities, SearchOptions(query="beach"))
    """

    def __init__(
        self,
        store: SearchStore,
        analytics: AnalyticsRecorder | None = None,
        scoring: ScoringConfig | None = None,
        suggestions: SuggestionConfig | None = None,
    ) -> None:
        self._store = store
        self._analytics = analytics or AnalyticsRecorder()
        self._scoring = scoring
        self._suggestions = suggestions

    @property
    def store(self) -> SearchStore:
        return self._store

    async def run(
        self,
        opportunities: list[Opportunity],
        options: SearchOptions,
        use_cache: bool = True,
        now: datetime | None = None,
    ) -> list[SearchResult]:
        """Search, serving from and filling the cache when use_cache is set."""
        results = await self._store.get_cached(options) if use_cache else None
        if results is not None:
            logger.info("Cache hit for '%s': %d results", options.query, len(results))
        else:
            results = search_opportunities(opportunities, options, now, self._scoring)
            logger.info(
                "Search '%s': %d candidates, %d results",
                options.query, len(opportunities), len(results),
            )
            if use_cache:
                await self._store.put_cached(options, results)

        query = options.query.strip()
        if query:
            await self._store.record_query(query)
            await asyncio.to_thread(self._analytics.record, query, len(results))
        return results

    async def record_click(self, query: str, result_count: int, opportunity_id: str) -> None:
        """Record that a result was opened from a search."""
        await asyncio.to_thread(
            self._analytics.record, query, result_count, clicked_id=opportunity_id,
        )

    def suggest(
        self,
        opportunities: list[Opportunity],
        partial_query: str,
        limit: int | None = None,
    ) -> list[str]:
        return generate_suggestions(opportunities, partial_query, limit, self._suggestions)


def export_results_json(results: list[SearchResult]) -> str:
    """Export search results as a JSON string."""
    data = []
    for r in results:
        row = r.opportunity.model_dump(mode="json")
        row.update({
            "relevance_score": r.relevance_score,
            "matched_fields": r.matched_fields,
            "highlighted_title": r.highlighted_title,
            "highlighted_description": r.highlighted_description,
        })
        data.append(row)
    return json.dumps(data, indent=2)
