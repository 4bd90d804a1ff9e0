"""Centralised settings for the SERP ranking tool.

All runtime configuration is resolved here in one place.  Values can be
overridden via environment variables or a `.env` file in the project root
(loaded automatically when this module is imported).
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

# Load .env from the project root (two levels up from this file)
_env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_env_path, override=False)

_DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:128.0) "
    "Gecko/20100101 Firefox/128.0"
)


def _split_list(value: str) -> tuple[str, ...]:
    """Split a comma-separated env value, dropping blanks."""
    return tuple(part.strip() for part in value.split(",") if part.strip())


@dataclass
class Settings:
    # ------------------------------------------------------------------
    # Cache / storage
    # ------------------------------------------------------------------
    base_dir: Path = field(
        default_factory=lambda: Path(os.environ.get("RANKING_BASE_DIR", "."))
    )
    cache_max_age_hours: float = field(
        default_factory=lambda: float(os.environ.get("RANKING_CACHE_MAX_AGE_HOURS", "12"))
    )

    # ------------------------------------------------------------------
    # Search engine
    # ------------------------------------------------------------------
    search_url: str = field(
        default_factory=lambda: os.environ.get("RANKING_SEARCH_URL", "https://www.google.com")
    )
    search_client: str = field(
        default_factory=lambda: os.environ.get("RANKING_SEARCH_CLIENT", "")
    )
    max_pages: int = field(
        default_factory=lambda: int(os.environ.get("RANKING_MAX_PAGES", "10"))
    )

    # ------------------------------------------------------------------
    # Fetcher
    # ------------------------------------------------------------------
    request_timeout: float = field(
        default_factory=lambda: float(os.environ.get("RANKING_REQUEST_TIMEOUT", "30.0"))
    )
    page_delay: float = field(
        default_factory=lambda: float(os.environ.get("RANKING_PAGE_DELAY", "1.0"))
    )
    fetch_retry_max: int = field(
        default_factory=lambda: int(os.environ.get("RANKING_FETCH_RETRY_MAX", "2"))
    )
    fetch_retry_base_delay: float = field(
        default_factory=lambda: float(os.environ.get("RANKING_FETCH_RETRY_BASE_DELAY", "2.0"))
    )
    user_agent: str = field(
        default_factory=lambda: os.environ.get("RANKING_USER_AGENT", _DEFAULT_USER_AGENT)
    )
    accept_language: str = field(
        default_factory=lambda: os.environ.get("RANKING_ACCEPT_LANGUAGE", "de;q=0.5")
    )

    # ------------------------------------------------------------------
    # Extraction
    # ------------------------------------------------------------------
    ad_markers: tuple[str, ...] = field(
        default_factory=lambda: _split_list(
            os.environ.get("RANKING_AD_MARKERS", "Ad,Anzeige,Sponsored,Gesponsert")
        )
    )

    @property
    def cache_max_age_seconds(self) -> float:
        return self.cache_max_age_hours * 60 * 60


# Module-level singleton, import this everywhere:
#   from ranking.config import settings
settings = Settings()
