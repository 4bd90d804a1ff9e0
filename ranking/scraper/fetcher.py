"""HTTP fetcher for search result pages.

Search engines routinely rate-limit or challenge automated clients, so a
failed fetch is never an exception here: :func:`fetch_page` returns ``None``
and the crawler stops.  Rate-limit style statuses are retried with
exponential backoff first.
"""

from __future__ import annotations

import logging
import time
from urllib.parse import urlencode, urlsplit

import httpx

from ranking.config import settings

logger = logging.getLogger(__name__)

_RETRYABLE_STATUSES = frozenset({429, 502, 503, 504})


def browser_headers() -> dict[str, str]:
    """Header set of an ordinary desktop Firefox."""
    return {
        "User-Agent": settings.user_agent,
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
        "Accept-Language": settings.accept_language,
        "Accept-Encoding": "gzip, deflate",
        "DNT": "1",
        "Upgrade-Insecure-Requests": "1",
        "Pragma": "no-cache",
        "Cache-Control": "no-cache",
    }


def build_client() -> httpx.Client:
    return httpx.Client(
        headers=browser_headers(),
        timeout=settings.request_timeout,
        follow_redirects=True,
    )


def origin_of(url: str) -> str:
    """Return ``scheme://host[:port]`` of *url*."""
    parts = urlsplit(url)
    return f"{parts.scheme}://{parts.netloc}"


def initial_uri(query: str, search_url: str | None = None) -> str:
    """Return the URI of the first result page for *query*."""
    origin = origin_of(search_url or settings.search_url)
    params: dict[str, str] = {}
    if settings.search_client:
        params["client"] = settings.search_client
    params["q"] = query
    return f"{origin}/search?{urlencode(params)}"


def fetch_page(client: httpx.Client, url: str) -> bytes | None:
    """GET *url* and return the response body.

    Returns ``None`` on any non-2xx status (after retrying rate-limit style
    statuses up to ``settings.fetch_retry_max`` times), on network errors
    and when *url* cannot be turned into a request.
    """
    max_retries = settings.fetch_retry_max
    base_delay = settings.fetch_retry_base_delay

    for attempt in range(max_retries + 1):
        try:
            response = client.get(url)
        except httpx.InvalidURL as exc:
            logger.warning("Unusable URL %r: %s", url, exc)
            return None
        except httpx.HTTPError as exc:
            logger.warning("Request to %s failed: %s", url, exc)
            return None

        status = response.status_code
        if response.is_success:
            logger.info("Fetched %s (%d bytes)", url, len(response.content))
            return response.content

        if status in _RETRYABLE_STATUSES and attempt < max_retries:
            delay = base_delay * (2 ** attempt)
            logger.warning(
                "HTTP %d from %s (attempt %d/%d); retrying in %.0fs",
                status,
                url,
                attempt + 1,
                max_retries,
                delay,
            )
            time.sleep(delay)
            continue

        logger.warning("HTTP %d from %s; stopping", status, url)
        return None

    return None
