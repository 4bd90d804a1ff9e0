"""Result-page markup adapters.

Search engines do not document their result markup, so everything that
depends on it lives behind :class:`SerpMarkup`.  When the markup drifts, a new
adapter is written; the crawler and extractor stay untouched.

All adapters share a common interface:

* ``listings(soup)``            : candidate listing nodes in document order
* ``is_advertisement(node)``    : paid/organic classification
* ``destination_uri(node, ad)`` : where the listing points to
* ``next_page_uri(soup, origin)``: absolute URI of the next result page
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable
from urllib.parse import parse_qs, urljoin, urlsplit

from bs4 import BeautifulSoup, Tag


def _normalise_text(text: str) -> str:
    return " ".join(text.split())


def _is_absolute_http(uri: str) -> bool:
    try:
        parts = urlsplit(uri)
    except ValueError:
        return False
    return parts.scheme in ("http", "https") and bool(parts.netloc)


def _grand_parent(node: Tag) -> Tag | None:
    parent = node.parent
    if parent is None:
        return None
    return parent.parent


# ---------------------------------------------------------------------------
# Abstract base
# ---------------------------------------------------------------------------

class SerpMarkup(ABC):
    """Abstract base class for one search engine's result markup."""

    @abstractmethod
    def listings(self, soup: BeautifulSoup) -> list[Tag]:
        """Return the listing candidates in document order."""

    @abstractmethod
    def is_advertisement(self, node: Tag) -> bool:
        """Return ``True`` if *node* belongs to a paid listing."""

    @abstractmethod
    def destination_uri(self, node: Tag, advertisement: bool) -> str | None:
        """Return the listing's destination URI.

        Returns ``None`` if *node* turns out not to be a listing at all.

        Raises:
            ValueError: If *node* is an advertisement whose destination
                cannot be read.
        """

    @abstractmethod
    def next_page_uri(self, soup: BeautifulSoup, origin: str) -> str | None:
        """Return the absolute URI of the next result page, or ``None``."""


# ---------------------------------------------------------------------------
# Google
# ---------------------------------------------------------------------------

class GoogleMarkup(SerpMarkup):
    """Google's classic HTML result page.

    * every listing carries a ``<cite>`` element
    * a paid listing has a sibling of the ``<cite>`` reading "Ad" (or its
      translation)
    * the grand-parent of the ``<cite>`` is the result link; for ads the
      destination is the first entry of ``data-preconnect-urls``
    * without JavaScript, organic links are relative ``/url?q=<target>``
      redirects; the target is used
    * pagination links carry ``class="pn"``; the forward one has
      ``id="pnnext"``
    """

    AD_DESTINATION_ATTR = "data-preconnect-urls"
    NEXT_ID = "pnnext"
    PREVIOUS_ID = "pnprev"
    PAGINATION_CLASS = "pn"
    REDIRECT_PATH = "/url"
    REDIRECT_PARAMS = ("q", "url")

    def __init__(self, ad_markers: Iterable[str]) -> None:
        self._markers = frozenset(_normalise_text(m) for m in ad_markers if m.strip())

    @property
    def ad_markers(self) -> frozenset[str]:
        return self._markers

    def listings(self, soup: BeautifulSoup) -> list[Tag]:
        return soup.find_all("cite")

    def is_advertisement(self, node: Tag) -> bool:
        parent = node.parent
        if parent is None:
            return False
        for sibling in parent.find_all(True, recursive=False):
            if sibling is node:
                continue
            if _normalise_text(sibling.get_text(" ")) in self._markers:
                return True
        return False

    def destination_uri(self, node: Tag, advertisement: bool) -> str | None:
        link = _grand_parent(node)
        if advertisement:
            raw = link.get(self.AD_DESTINATION_ATTR) if link is not None else None
            if not raw or not isinstance(raw, str):
                raise ValueError(f"advertisement without {self.AD_DESTINATION_ATTR!r}")
            first = raw.split(",")[0].strip()
            if not _is_absolute_http(first):
                raise ValueError(
                    f"unparsable {self.AD_DESTINATION_ATTR!r} value {raw!r}"
                )
            return first

        if link is None:
            return None
        href = link.get("href")
        if not href or not isinstance(href, str) or not href.strip():
            return None
        href = href.strip()
        if _is_absolute_http(href):
            return href
        return self._unwrap_redirect(href)

    def _unwrap_redirect(self, href: str) -> str:
        """Return the target of a relative ``/url?q=...`` link, else *href* as-is."""
        try:
            parts = urlsplit(href)
        except ValueError:
            return href
        if parts.path != self.REDIRECT_PATH:
            return href
        params = parse_qs(parts.query)
        for key in self.REDIRECT_PARAMS:
            for target in params.get(key, ()):
                if _is_absolute_http(target):
                    return target
        return href

    def next_page_uri(self, soup: BeautifulSoup, origin: str) -> str | None:
        candidates: list[Tag] = []
        forward = soup.find(id=self.NEXT_ID)
        if isinstance(forward, Tag):
            candidates.append(forward)
        candidates.extend(
            tag
            for tag in soup.find_all(class_=self.PAGINATION_CLASS)
            if tag.get("id") != self.PREVIOUS_ID
        )

        for tag in candidates:
            href = tag.get("href")
            if not href or not isinstance(href, str) or not href.strip():
                continue
            try:
                return urljoin(origin.rstrip("/") + "/", href.strip())
            except ValueError:
                continue
        return None
