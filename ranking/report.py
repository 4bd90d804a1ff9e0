"""Plain-text report rendering.

A report has three sections, written in order by :func:`write_report`:

    Overview   : what was queried, when, and how much came back
    Pages      : every result, page by page, in rank order
    Statistic : one block per host cluster

Results whose host is marked are prefixed with ``*``.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import TextIO

from ranking.errors import StorageError
from ranking.models import RankingReport

_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _prefix(host: str, marked: frozenset[str]) -> str:
    return "*" if host in marked else " "


def _format_date(value: datetime | None) -> str:
    return value.strftime(_DATE_FORMAT) if value is not None else "unknown"


def render_header(report: RankingReport, out: TextIO) -> None:
    meta = report.metadata
    out.write("Overview\n")
    out.write("========\n")
    out.write(f"          URL: {meta.search_url}\n")
    out.write(f"        Query: {meta.query}\n")
    out.write(f"   Query Date: {_format_date(meta.requested_at)}\n")
    out.write(f"Analysis Date: {_format_date(meta.analysed_at)}\n")
    out.write(f"      Results: {report.total_results}\n")
    out.write(f"        Pages: {report.last_page} / {meta.requested_pages}\n")
    if report.marked_hosts:
        out.write(" Host markers:\n")
        for host in sorted(report.marked_hosts):
            out.write(f"    - {host}\n")
    out.write("\n")


def render_pages(report: RankingReport, out: TextIO) -> None:
    out.write("Pages\n")
    out.write("======\n")
    out.write("\n")

    current_page = 0
    for result in report.results:
        if result.page != current_page:
            banner = f" Page {result.page:02d} "
            out.write(f"  {banner:=^79}\n")
            current_page = result.page

        prefix = _prefix(result.host, report.marked_hosts)
        kind = "ADV" if result.is_advertisement else "   "
        out.write(f"{prefix} {result.rank:03d}: {kind} {result.uri}\n")
    out.write("\n")


def render_statistics(report: RankingReport, out: TextIO) -> None:
    out.write("Statistic\n")
    out.write("=========\n")
    out.write("\n")

    for cluster in report.clusters:
        prefix = "*" if cluster.marked else " "
        out.write(f"{prefix} {cluster.host}\n")
        out.write(f"   -      total: {cluster.count} (ADV: {cluster.advertisement_count})\n")
        out.write(f"   - best rank: {cluster.best_rank}\n")
        out.write(f"   - best page: {cluster.best_page}\n")


def write_report(report: RankingReport, out: TextIO) -> None:
    render_header(report, out)
    render_pages(report, out)
    render_statistics(report, out)


def save_report(report: RankingReport, path: Path) -> Path:
    """Write the full report to *path* (UTF-8)."""
    path = Path(path)
    try:
        with path.open("w", encoding="utf-8") as fp:
            write_report(report, fp)
    except OSError as exc:
        raise StorageError(f"can not write {path}: {exc}") from exc
    return path
