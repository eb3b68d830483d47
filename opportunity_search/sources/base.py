"""Abstract base class for opportunity sources."""

from abc import ABC, abstractmethod

from opportunity_search.core.schemas import Opportunity


class CandidateSource(ABC):
    """Base class for anything that supplies the already-fetched candidate list."""

    @property
    @abstractmethod
    def source_id(self) -> str:
        """Unique identifier for this source (e.g. 'json-file')."""

    @abstractmethod
    async def fetch(self) -> list[Opportunity]:
        """Return every opportunity eligible for search."""
