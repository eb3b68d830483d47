"""Fire-and-forget search analytics.

Events go to the log and, when a connection is given, to the search_events
table. A failing sink never affects search behaviour.
"""

import logging
import sqlite3

from pydantic import ValidationError

from opportunity_search.core.db import get_search_events, insert_search_event
from opportunity_search.core.schemas import SearchEvent

logger = logging.getLogger(__name__)


class AnalyticsRecorder:
    """Records query, result-count and click events.

    Constructed explicitly and injected where needed; there is no global recorder.
    """

    def __init__(self, conn: sqlite3.Connection | None = None) -> None:
        self._conn = conn

    def record(self, query: str, result_count: int, clicked_id: str | None = None) -> None:
        """Log and persist one event. Never raises."""
        try:
            event = SearchEvent(query=query, result_count=result_count, clicked_id=clicked_id)
            logger.info(
                "[SEARCH_ANALYTICS] query=%r results=%d clicked=%s",
                event.query, event.result_count, event.clicked_id,
            )
            if self._conn is not None:
                insert_search_event(self._conn, event)
        except (sqlite3.Error, ValidationError) as e:
            logger.warning("Could not record search analytics: %s", e)

    def recent_events(self, limit: int = 50) -> list[SearchEvent]:
        """Return recorded events, newest first ([] without a connection or on error)."""
        if self._conn is None:
            return []
        try:
            return get_search_events(self._conn, limit)
        except (sqlite3.Error, ValueError) as e:
            logger.warning("Could not read search analytics: %s", e)
            return []
