"""Page collection: merges every cached page of a query into one ranking."""

from __future__ import annotations

import logging
from pathlib import Path

from ranking import store
from ranking.models import PageContext, Result
from ranking.scraper.extractor import extract_page
from ranking.scraper.markup import SerpMarkup

logger = logging.getLogger(__name__)


def collect_results(folder: Path, markup: SerpMarkup | None = None) -> list[Result]:
    """Extract all cached pages of *folder* into one rank-sorted list.

    Pages are processed in file-name order.  The rank offset is threaded
    through the pages (``next start = start + len(previous results)``) and
    page ordinals count from 1.  Exact duplicate Results collapse.

    A missing or unreadable folder yields an empty list.

    Raises:
        MarkupDriftError: If a page contains a malformed advertisement.
    """
    pages = store.list_pages(folder)
    if not pages:
        logger.info("No cached pages in %s", folder)
        return []

    merged: set[Result] = set()
    rank = 1
    for ordinal, path in enumerate(pages, start=1):
        page_results = extract_page(PageContext(path=path, ordinal=ordinal, start_rank=rank), markup)
        merged.update(page_results)
        rank += len(page_results)

    logger.info("Collected %d result(s) from %d page(s)", len(merged), len(pages))
    return sorted(merged)
