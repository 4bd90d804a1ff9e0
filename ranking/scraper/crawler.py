"""Crawl controller: walks one search result pagination chain.

The next page is only known once the current page has been parsed, so the
crawl is strictly sequential::

    initial URI → fetch → store page-001.html → find next link → fetch → ...

It stops when the page limit is reached, when a page has no next link, or
when a fetch fails.  Only storage problems raise.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path

import httpx

from ranking import store
from ranking.config import settings
from ranking.errors import RankingError
from ranking.scraper.extractor import default_markup, parse_html
from ranking.scraper.fetcher import build_client, fetch_page, initial_uri, origin_of
from ranking.scraper.markup import SerpMarkup

logger = logging.getLogger(__name__)

STOP_LIMIT = "limit"
STOP_NO_NEXT_LINK = "no_next_link"
STOP_FETCH_FAILED = "fetch_failed"


@dataclass
class CrawlOutcome:
    folder: Path
    stop_reason: str
    pages: list[Path] = field(default_factory=list)

    @property
    def page_count(self) -> int:
        return len(self.pages)


def crawl(
    query: str,
    folder: Path,
    max_pages: int,
    search_url: str | None = None,
    markup: SerpMarkup | None = None,
    client: httpx.Client | None = None,
) -> CrawlOutcome:
    """Fetch up to *max_pages* result pages for *query* into *folder*.

    Args:
        query: Raw search query.
        folder: Destination directory, created if missing.
        max_pages: Page limit for this run.
        search_url: Search instance; defaults to ``settings.search_url``.
        markup: Adapter used to locate the next-page link.
        client: Pre-built HTTP client (a browser-like one is built otherwise).

    Returns:
        A :class:`CrawlOutcome` listing the stored pages and why the crawl
        stopped.

    Raises:
        RankingError: If *max_pages* exceeds ``store.MAX_PAGES``.
        StorageError: If the folder cannot be created or a page not written.
    """
    if max_pages > store.MAX_PAGES:
        raise RankingError(
            f"page limit {max_pages} exceeds the maximum of {store.MAX_PAGES}"
        )
    search_url = search_url or settings.search_url
    markup = markup or default_markup()
    origin = origin_of(search_url)

    store.ensure_folder(folder)
    manifest = store.CrawlManifest(
        query=query,
        search_url=search_url,
        requested_at=time.time(),
        requested_pages=max_pages,
    )
    store.save_manifest(folder, manifest)

    outcome = CrawlOutcome(folder=Path(folder), stop_reason=STOP_LIMIT)
    own_client = client is None
    http = build_client() if own_client else client
    try:
        uri: str | None = initial_uri(query, search_url)
        for ordinal in range(1, max_pages + 1):
            if ordinal > 1 and settings.page_delay > 0:
                time.sleep(settings.page_delay)

            content = fetch_page(http, uri)
            if content is None:
                outcome.stop_reason = STOP_FETCH_FAILED
                break

            outcome.pages.append(store.write_page(folder, ordinal, content))

            uri = markup.next_page_uri(parse_html(content), origin)
            if uri is None:
                logger.info("No next link on page %d; end of results", ordinal)
                outcome.stop_reason = STOP_NO_NEXT_LINK
                break
    finally:
        if own_client:
            http.close()

    manifest.fetched_pages = outcome.page_count
    store.save_manifest(folder, manifest)
    logger.info(
        "Crawl for %r stored %d/%d page(s) (%s)",
        query,
        outcome.page_count,
        max_pages,
        outcome.stop_reason,
    )
    return outcome
