"""Listing extraction: turns one cached result page into ranked Results."""

from __future__ import annotations

import logging

from bs4 import BeautifulSoup

from ranking.config import settings
from ranking.errors import MarkupDriftError
from ranking.models import PageContext, Result
from ranking.scraper.markup import GoogleMarkup, SerpMarkup
from ranking.store import read_page

logger = logging.getLogger(__name__)


def default_markup() -> SerpMarkup:
    """Google markup with the configured advertisement markers."""
    return GoogleMarkup(settings.ad_markers)


def _cite_text(node) -> str:
    return " ".join(node.get_text(" ").split())[:80]


def parse_html(html: bytes | str) -> BeautifulSoup:
    """Parse a result page (bytes are decoded as UTF-8)."""
    if isinstance(html, bytes):
        html = html.decode("utf-8", errors="replace")
    return BeautifulSoup(html, "html.parser")


def extract_results(
    html: bytes | str,
    page: int,
    start_rank: int,
    markup: SerpMarkup | None = None,
) -> list[Result]:
    """Extract the listings of one result page.

    Listings are numbered in document order: the i-th listing (0-indexed)
    receives rank ``start_rank + i``.

    Raises:
        ValueError: If an advertisement's destination cannot be read.
    """
    markup = markup or default_markup()
    soup = parse_html(html)

    results: list[Result] = []
    for node in markup.listings(soup):
        advertisement = markup.is_advertisement(node)
        uri = markup.destination_uri(node, advertisement)
        if uri is None:
            logger.warning(
                "Page %d: citation %r has no link; skipped",
                page,
                _cite_text(node),
            )
            continue
        results.append(
            Result(
                page=page,
                rank=start_rank + len(results),
                uri=uri,
                is_advertisement=advertisement,
            )
        )
    return results


def extract_page(ctx: PageContext, markup: SerpMarkup | None = None) -> list[Result]:
    """Read the cached page behind *ctx* and extract its Results.

    Raises:
        MarkupDriftError: If the page contains a malformed advertisement.
        StorageError: If the page cannot be read.
    """
    html = read_page(ctx.path)
    try:
        results = extract_results(html, ctx.ordinal, ctx.start_rank, markup)
    except ValueError as exc:
        raise MarkupDriftError(ctx.path, str(exc)) from exc

    logger.debug(
        "%s: %d listing(s), ranks %d-%d",
        ctx.path.name,
        len(results),
        ctx.start_rank,
        ctx.start_rank + len(results) - 1,
    )
    return results
