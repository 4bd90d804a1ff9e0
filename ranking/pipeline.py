"""High-level runner for one ranking analysis.

``run`` wires the stages together::

    freshness check → crawl (if stale) → collect → aggregate → report.txt

The CLI (and any future caller) only talks to this module.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from ranking import store
from ranking.aggregator import aggregate
from ranking.collector import collect_results
from ranking.config import settings
from ranking.models import RankingReport, RunMetadata
from ranking.report import save_report
from ranking.scraper.crawler import CrawlOutcome, crawl
from ranking.scraper.markup import SerpMarkup

logger = logging.getLogger(__name__)


@dataclass
class RunOutcome:
    folder: Path
    report: RankingReport
    report_path: Path
    crawl: CrawlOutcome | None = None

    @property
    def used_cache(self) -> bool:
        return self.crawl is None


def crawl_query(
    query: str,
    max_pages: int | None = None,
    base_dir: Path | None = None,
    search_url: str | None = None,
    force: bool = False,
    markup: SerpMarkup | None = None,
) -> CrawlOutcome | None:
    """Refresh the cached pages of *query*.

    The cache is reused (and ``None`` returned) while it is younger than
    ``settings.cache_max_age_hours``, unless *force* is set.  A stale cache
    is deleted before crawling.
    """
    folder = store.query_folder(base_dir or settings.base_dir, query)
    if not force and store.is_current(folder, settings.cache_max_age_seconds):
        logger.info("Reusing cached pages in %s", folder)
        return None

    store.clear(folder)
    return crawl(
        query,
        folder,
        max_pages or settings.max_pages,
        search_url=search_url,
        markup=markup,
    )


def build_report(
    query: str,
    marked_hosts: Iterable[str] = (),
    max_pages: int | None = None,
    base_dir: Path | None = None,
    search_url: str | None = None,
    markup: SerpMarkup | None = None,
) -> RankingReport:
    """Collect the cached pages of *query* and aggregate them (no network)."""
    folder = store.query_folder(base_dir or settings.base_dir, query)
    manifest = store.load_manifest(folder)
    stamp = store.created_at(folder)

    metadata = RunMetadata(
        search_url=search_url or (manifest.search_url if manifest else settings.search_url),
        query=query,
        requested_pages=max_pages or settings.max_pages,
        requested_at=datetime.fromtimestamp(stamp) if stamp is not None else None,
    )
    results = collect_results(folder, markup)
    return aggregate(results, metadata, marked_hosts)


def run(
    query: str,
    marked_hosts: Iterable[str] = (),
    max_pages: int | None = None,
    base_dir: Path | None = None,
    search_url: str | None = None,
    force: bool = False,
    markup: SerpMarkup | None = None,
) -> RunOutcome:
    """Run the full analysis for *query* and write ``report.txt``.

    Args:
        query: Raw search query.
        marked_hosts: Hosts to highlight in the report.
        max_pages: Page limit; defaults to ``settings.max_pages``.
        base_dir: Cache base directory; defaults to ``settings.base_dir``.
        search_url: Search instance; defaults to ``settings.search_url``.
        force: Crawl even if the cache is still current.
        markup: Result-page markup adapter.

    Returns:
        A :class:`RunOutcome` with the aggregated report and its file path.

    Raises:
        StorageError: If the cache cannot be written or read.
        MarkupDriftError: If a cached page no longer matches the markup.
    """
    base = Path(base_dir or settings.base_dir)
    folder = store.query_folder(base, query)

    outcome = crawl_query(query, max_pages, base, search_url, force, markup)
    report = build_report(query, marked_hosts, max_pages, base, search_url, markup)

    store.ensure_folder(folder)
    report_path = save_report(report, folder / store.REPORT_NAME)
    logger.info("Report written to %s", report_path)
    return RunOutcome(folder=folder, report=report, report_path=report_path, crawl=outcome)
