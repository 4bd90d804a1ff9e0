"""Dataclass models shared by the ranking pipeline.

These are plain Python objects.  ``Result`` is the only type that travels
through every stage; the others are built on the way to the report.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from urllib.parse import urlsplit


@dataclass(frozen=True)
class Result:
    """One ranked listing.

    Equality and hashing cover all four fields, so a set of Results collapses
    exact duplicates only.  Natural order is by ``rank``.
    """

    page: int
    rank: int
    uri: str
    is_advertisement: bool = False

    def __lt__(self, other: Result) -> bool:
        if not isinstance(other, Result):
            return NotImplemented
        return self._sort_key() < other._sort_key()

    def _sort_key(self) -> tuple[int, int, str, bool]:
        return (self.rank, self.page, self.uri, self.is_advertisement)

    @property
    def host(self) -> str:
        """Lower-cased hostname of ``uri`` (empty string if it has none)."""
        return urlsplit(self.uri).hostname or ""


@dataclass
class PageContext:
    """A cached result page bound to its ordinal and starting rank."""

    path: Path
    ordinal: int
    start_rank: int


@dataclass
class ResultCluster:
    host: str
    results: list[Result] = field(default_factory=list)
    marked: bool = False

    # ------------------------------------------------------------------
    # Statistics
    # ------------------------------------------------------------------
    @property
    def count(self) -> int:
        return len(self.results)

    @property
    def advertisement_count(self) -> int:
        return sum(1 for r in self.results if r.is_advertisement)

    @property
    def best(self) -> Result:
        """The Result with the numerically lowest rank."""
        return min(self.results)

    @property
    def best_rank(self) -> int:
        return self.best.rank

    @property
    def best_page(self) -> int:
        return self.best.page

    def sort_key(self) -> tuple[int, str]:
        """Descending count, then ascending host name."""
        return (-self.count, self.host)


@dataclass
class RunMetadata:
    """Describes the crawl a report is generated for."""

    search_url: str
    query: str
    requested_pages: int
    requested_at: datetime | None = None
    analysed_at: datetime = field(default_factory=datetime.now)


@dataclass
class RankingReport:
    """Everything the report emitter needs, in one record."""

    metadata: RunMetadata
    results: list[Result]
    marked_hosts: frozenset[str]
    clusters: list[ResultCluster]

    @property
    def total_results(self) -> int:
        return len(self.results)

    @property
    def last_page(self) -> int:
        """Highest page number reached (0 when nothing was collected)."""
        return max((r.page for r in self.results), default=0)
