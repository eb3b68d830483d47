"""CLI entry point for the opportunity search engine."""

import argparse
import asyncio
import logging
import sqlite3
import sys

from opportunity_search.core.config import Settings
from opportunity_search.core.db import init_db
from opportunity_search.core.schemas import KNOWN_CATEGORIES, SearchOptions, SearchResult
from opportunity_search.pipeline.analytics import AnalyticsRecorder
from opportunity_search.pipeline.orchestrator import SearchService, export_results_json
from opportunity_search.pipeline.search_store import SearchStore
from opportunity_search.sources.json_file import JsonFileSource


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--config",
        default=None,
        help="Path to settings YAML file (default: built-in defaults)",
    )
    common.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose (DEBUG) logging",
    )

    parser = argparse.ArgumentParser(
        description="Opportunity search - rank, filter and suggest volunteering opportunities",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # --- search ---
    search_parser = subparsers.add_parser(
        "search", parents=[common], help="Search an opportunities JSON file",
    )
    search_parser.add_argument("opportunities", help="Path to opportunities JSON file")
    search_parser.add_argument("query", nargs="?", default="", help="Free-text query")
    search_parser.add_argument(
        "--category",
        help="Category tag (" + ", ".join(KNOWN_CATEGORIES) + "), 'all' or 'nearMe'",
    )
    search_parser.add_argument(
        "--date-range",
        default="all",
        choices=["all", "today", "thisWeek", "thisMonth", "upcoming"],
    )
    search_parser.add_argument("--max-distance", type=float)
    search_parser.add_argument("--min-spots", type=int)
    verified = search_parser.add_mutually_exclusive_group()
    verified.add_argument("--verified", dest="verified", action="store_true", default=None)
    verified.add_argument("--unverified", dest="verified", action="store_false")
    search_parser.set_defaults(verified=None)
    search_parser.add_argument(
        "--sort-by",
        default="relevance",
        choices=["relevance", "distance", "date", "spots"],
    )
    search_parser.add_argument("--offset", type=int)
    search_parser.add_argument("--limit", type=int)
    search_parser.add_argument(
        "--no-cache",
        action="store_true",
        help="Bypass the result cache",
    )
    search_parser.add_argument(
        "--export",
        choices=["json"],
        help="Export results to format (json)",
    )

    # --- suggest ---
    suggest_parser = subparsers.add_parser(
        "suggest", parents=[common], help="Autocomplete suggestions for a partial query",
    )
    suggest_parser.add_argument("opportunities", help="Path to opportunities JSON file")
    suggest_parser.add_argument("partial", help="Partial query text")
    suggest_parser.add_argument("--limit", type=int, default=None)

    # --- click ---
    click_parser = subparsers.add_parser(
        "click", parents=[common], help="Record that a search result was opened",
    )
    click_parser.add_argument("query", help="Query the result was found with")
    click_parser.add_argument("result_count", type=int, help="Number of results the search returned")
    click_parser.add_argument("opportunity_id", help="ID of the opened opportunity")

    # --- history ---
    history_parser = subparsers.add_parser(
        "history", parents=[common], help="Show or clear recent queries",
    )
    history_parser.add_argument("--clear", action="store_true", help="Clear the history")

    # --- events ---
    events_parser = subparsers.add_parser(
        "events", parents=[common], help="Show recorded search analytics events",
    )
    events_parser.add_argument("--limit", type=int, default=20)

    return parser.parse_args(argv)


def setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def load_settings(path: str | None) -> Settings:
    if path is None:
        return Settings()
    return Settings.from_yaml(path)


def build_options(args: argparse.Namespace) -> SearchOptions:
    return SearchOptions(
        query=args.query,
        category=args.category,
        date_range=args.date_range,
        max_distance=args.max_distance,
        min_spots_available=args.min_spots,
        organization_verified=args.verified,
        sort_by=args.sort_by,
        offset=args.offset,
        limit=args.limit,
    )


def print_results(results: list[SearchResult]) -> None:
    print(f"{len(results)} results")
    for r in results:
        o = r.opportunity
        title = r.highlighted_title or o.title
        fields = ", ".join(r.matched_fields) or "-"
        print(f"  [{r.relevance_score:7.1f}] {title} ({o.organization_name})")
        print(f"            id={o.id} spots={o.spots_available}/{o.spots_total} matched: {fields}")


def build_service(conn: sqlite3.Connection, settings: Settings) -> SearchService:
    store = SearchStore(conn, settings.history, settings.cache)
    return SearchService(store, AnalyticsRecorder(conn), settings.scoring, settings.suggestions)

async def cmd_search(args: argparse.Namespace, settings: Settings) -> None:
    """Handle search subcommand."""
    opportunities = await JsonFileSource(args.opportunities).fetch()
    options = build_options(args)

    conn = init_db(settings.database.path)
    try:
        service = build_service(conn, settings)
        results = await service.run(opportunities, options, use_cache=not args.no_cache)
    finally:
        conn.close()

    if args.export == "json":
        print(export_results_json(results))
    else:
        print_results(results)


async def cmd_suggest(args: argparse.Namespace, settings: Settings) -> None:
    """Handle suggest subcommand."""
    opportunities = await JsonFileSource(args.opportunities).fetch()
    conn = init_db(settings.database.path)
    try:
        suggestions = build_service(conn, settings).suggest(opportunities, args.partial, args.limit)
    finally:
        conn.close()

    for suggestion in suggestions:
        print(suggestion)


async def cmd_click(args: argparse.Namespace, settings: Settings) -> None:
    """Handle click subcommand."""
    conn = init_db(settings.database.path)
    try:
        await build_service(conn, settings).record_click(
            args.query, args.result_count, args.opportunity_id,
        )
    finally:
        conn.close()
    print(f"Recorded click on {args.opportunity_id}.")


async def cmd_history(args: argparse.Namespace, settings: Settings) -> None:
    """Handle history subcommand."""
    conn = init_db(settings.database.path)
    try:
        store = SearchStore(conn, settings.history, settings.cache)
        if args.clear:
            await store.clear_history()
            print("Search history cleared.")
            return
        history = await store.get_history()
    finally:
        conn.close()

    if not history:
        print("No recent searches.")
    for i, query in enumerate(history, start=1):
        print(f"{i:2d}. {query}")


def cmd_events(args: argparse.Namespace, settings: Settings) -> None:
    """Handle events subcommand."""
    conn = init_db(settings.database.path)
    try:
        events = AnalyticsRecorder(conn).recent_events(args.limit)
    finally:
        conn.close()

    for e in events:
        clicked = f" clicked={e.clicked_id}" if e.clicked_id else ""
        print(f"{e.recorded_at:%Y-%m-%d %H:%M:%S}  '{e.query}' results={e.result_count}{clicked}")


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    setup_logging(args.verbose)

    try:
        settings = load_settings(args.config)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        sys.exit(1)

    try:
        if args.command == "search":
            asyncio.run(cmd_search(args, settings))
        elif args.command == "suggest":
            asyncio.run(cmd_suggest(args, settings))
        elif args.command == "click":
            asyncio.run(cmd_click(args, settings))
        elif args.command == "history":
            asyncio.run(cmd_history(args, settings))
        elif args.command == "events":
            cmd_events(args, settings)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
