"""Exceptions raised by the ranking pipeline."""

from __future__ import annotations

from pathlib import Path


class RankingError(Exception):
    """Base exception for all ranking errors."""


class StorageError(RankingError):
    """The page cache could not be created, written or read."""


class MarkupDriftError(RankingError):
    """A result page no longer matches the structure the extractor expects."""

    def __init__(self, path: Path | str, message: str) -> None:
        """Initialize with the offending page."""
        self.path = Path(path)
        super().__init__(f"{self.path.name}: {message}")
