"""Opportunity source backed by a JSON export of the backend table."""

import asyncio
import json
import logging
from pathlib import Path
from typing import Any

from pydantic import TypeAdapter, ValidationError

from opportunity_search.core.schemas import Opportunity
from opportunity_search.sources.base import CandidateSource

logger = logging.getLogger(__name__)

_OPPORTUNITIES = TypeAdapter(list[Opportunity])


class JsonFileSource(CandidateSource):
    """Reads a JSON array of records, or an object with an "opportunities" array.

    Keys may be camelCase (as the backend returns them) or snake_case.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    @property
    def source_id(self) -> str:
        return "json-file"

    async def fetch(self) -> list[Opportunity]:
        return await asyncio.to_thread(self.load)

    def load(self) -> list[Opportunity]:
        """Parse the file synchronously. Raises FileNotFoundError or ValueError."""
        if not self._path.exists():
            msg = f"Opportunities file not found: {self._path}"
            raise FileNotFoundError(msg)
        try:
            raw: Any = json.loads(self._path.read_text())
        except json.JSONDecodeError as e:
            msg = f"Invalid JSON in {self._path}: {e}"
            raise ValueError(msg) from e

        if isinstance(raw, dict):
            raw = raw.get("opportunities")
        if not isinstance(raw, list):
            msg = f"Expected a list of opportunities in {self._path}"
            raise ValueError(msg)

        try:
            opportunities = _OPPORTUNITIES.validate_python(raw)
        except ValidationError as e:
            msg = f"Invalid opportunity record in {self._path}: {e}"
            raise ValueError(msg) from e
        logger.debug("Loaded %d opportunities from %s", len(opportunities), self._path)
        return opportunities
