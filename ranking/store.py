"""On-disk cache of fetched result pages.

Each query owns one folder under the base directory::

    <base>/<query_folder>/
        page-001.html
        page-002.html
        ...
        crawl.json      # manifest written by the crawler
        report.txt      # written by the pipeline

Page files are zero-padded so that sorting by file name equals fetch order.
"""

from __future__ import annotations

import json
import logging
import re
import shutil
import time
from dataclasses import asdict, dataclass
from datetime import datetime
from pathlib import Path

from ranking.errors import StorageError

logger = logging.getLogger(__name__)

PAGE_SUFFIX = ".html"
PAGE_DIGITS = 3
# Highest page number whose file name still sorts in fetch order
MAX_PAGES = 10 ** PAGE_DIGITS - 1
MANIFEST_NAME = "crawl.json"
REPORT_NAME = "report.txt"

_WHITESPACE = re.compile(r"\s+")


@dataclass
class CrawlManifest:
    """What was requested, and when, for one crawl run."""

    query: str
    search_url: str
    requested_at: float
    requested_pages: int
    fetched_pages: int = 0

    def to_json(self) -> str:
        return json.dumps(asdict(self), indent=2)

    @classmethod
    def from_json(cls, data: str) -> CrawlManifest | None:
        try:
            return cls(**json.loads(data))
        except (json.JSONDecodeError, TypeError):
            return None

    @property
    def requested_datetime(self) -> datetime:
        return datetime.fromtimestamp(self.requested_at)


# ---------------------------------------------------------------------------
# Naming
# ---------------------------------------------------------------------------

def query_folder(base: Path, query: str) -> Path:
    """Return the cache folder for *query*: lower-cased, whitespace runs as ``_``."""
    name = _WHITESPACE.sub("_", query.strip().lower())
    return Path(base) / name


def page_path(folder: Path, ordinal: int) -> Path:
    """Return the file path of page *ordinal* (1-based)."""
    if not 1 <= ordinal <= MAX_PAGES:
        raise StorageError(f"page number {ordinal} outside 1..{MAX_PAGES}")
    return Path(folder) / f"page-{ordinal:0{PAGE_DIGITS}d}{PAGE_SUFFIX}"


def list_pages(folder: Path) -> list[Path]:
    """Return cached page files sorted by file name.

    A missing or unreadable folder yields an empty list.
    """
    folder = Path(folder)
    try:
        files = [p for p in folder.iterdir() if p.is_file() and p.name.endswith(PAGE_SUFFIX)]
    except OSError:
        return []
    return sorted(files, key=lambda p: p.name)


# ---------------------------------------------------------------------------
# Reading / writing
# ---------------------------------------------------------------------------

def ensure_folder(folder: Path) -> Path:
    """Create *folder* (and parents).

    Raises:
        StorageError: If the directory cannot be created.
    """
    folder = Path(folder)
    try:
        folder.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise StorageError(f"can not create {folder}: {exc}") from exc
    return folder


def write_page(folder: Path, ordinal: int, content: bytes) -> Path:
    """Store *content* verbatim as page *ordinal*."""
    path = page_path(folder, ordinal)
    try:
        path.write_bytes(content)
    except OSError as exc:
        raise StorageError(f"can not write {path}: {exc}") from exc
    logger.debug("Stored %s (%d bytes)", path, len(content))
    return path


def read_page(path: Path) -> bytes:
    """Read a cached page back, byte for byte."""
    try:
        return Path(path).read_bytes()
    except OSError as exc:
        raise StorageError(f"can not read {path}: {exc}") from exc


def save_manifest(folder: Path, manifest: CrawlManifest) -> None:
    path = Path(folder) / MANIFEST_NAME
    try:
        path.write_text(manifest.to_json(), encoding="utf-8")
    except OSError as exc:
        raise StorageError(f"can not write {path}: {exc}") from exc


def load_manifest(folder: Path) -> CrawlManifest | None:
    """Load the crawl manifest of *folder*.  Returns ``None`` if missing/corrupt."""
    path = Path(folder) / MANIFEST_NAME
    if not path.is_file():
        return None
    try:
        return CrawlManifest.from_json(path.read_text(encoding="utf-8"))
    except OSError:
        return None


# ---------------------------------------------------------------------------
# Freshness
# ---------------------------------------------------------------------------

def created_at(folder: Path) -> float | None:
    """Timestamp of the crawl stored in *folder*, or ``None`` if there is none.

    Prefers the manifest's request time and falls back to the folder mtime.
    """
    folder = Path(folder)
    if not folder.is_dir():
        return None
    manifest = load_manifest(folder)
    if manifest is not None:
        return manifest.requested_at
    return folder.stat().st_mtime


def is_current(folder: Path, max_age_seconds: float, now: float | None = None) -> bool:
    """Return ``True`` if *folder* holds a crawl younger than *max_age_seconds*."""
    stamp = created_at(folder)
    if stamp is None:
        return False
    now = time.time() if now is None else now
    return (now - stamp) < max_age_seconds


def clear(folder: Path) -> None:
    """Delete *folder* and everything in it (no-op if absent)."""
    folder = Path(folder)
    if not folder.exists():
        return
    logger.info("Removing stale cache %s", folder)
    try:
        shutil.rmtree(folder)
    except OSError as exc:
        raise StorageError(f"can not remove {folder}: {exc}") from exc
