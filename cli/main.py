"""SERP ranking CLI: entry-point for all pipeline operations.

Usage:
    python cli/main.py --help

Commands:
    run     → crawl (if the cache is stale), collect, aggregate, write report
    crawl   → network phase only
    report  → offline phase only (collect + aggregate from cached pages)
"""

from __future__ import annotations

import sys
from pathlib import Path

# Ensure the project root is on sys.path so that `from ranking.xxx import ...`
# works when the CLI is invoked as `python cli/main.py` from any working
# directory.
_ROOT = Path(__file__).resolve().parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

import io
import logging
from typing import List, Optional

import typer

from ranking import pipeline
from ranking.config import settings
from ranking.errors import RankingError
from ranking.log import setup_logging
from ranking.report import write_report
from ranking.store import MAX_PAGES, query_folder

app = typer.Typer(
    name="serp-ranking",
    help="Track where domains rank in search results for a query.",
    no_args_is_help=True,
)


# ---------------------------------------------------------------------------
# Shared option helpers
# ---------------------------------------------------------------------------
def _split_domains(domains: Optional[List[str]]) -> list[str]:
    """Accept both ``-d a.com -d b.com`` and ``-d a.com,b.com``."""
    hosts: list[str] = []
    for value in domains or []:
        hosts.extend(part.strip() for part in value.split(",") if part.strip())
    return hosts


def _configure_logging(verbose: bool, wirelog: Optional[Path]) -> None:
    setup_logging(logging.INFO if verbose else logging.WARNING, wire_log=wirelog)


def _fail(exc: Exception) -> None:
    typer.secho(f"[error] {exc}", fg=typer.colors.RED, err=True)
    raise typer.Exit(1)


QueryOption = typer.Option(..., "--query", "-q", help="Search query.")
BaseOption = typer.Option(None, "--base", "-b", help="Target folder for page dumps.")
PagesOption = typer.Option(
    None, "--pages", "-p", min=1, max=MAX_PAGES, help="Maximum number of pages."
)
GoogleOption = typer.Option(None, "--google", "-g", help="Search instance to query.")
DomainOption = typer.Option(
    None, "--domain", "-d", help="Host(s) to mark in the report (repeatable or comma-separated)."
)
VerboseOption = typer.Option(False, "--verbose", "-v", help="Log progress to stderr.")


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------
@app.command("run")
def run_cmd(
    query: str = QueryOption,
    base: Optional[Path] = BaseOption,
    domains: Optional[List[str]] = DomainOption,
    google: Optional[str] = GoogleOption,
    pages: Optional[int] = PagesOption,
    wirelog: Optional[Path] = typer.Option(
        None, "--wirelog", "-w", help="Dump all HTTP communication to this file."
    ),
    force: bool = typer.Option(False, "--force", help="Crawl even if the cache is current."),
    print_report: bool = typer.Option(False, "--print", help="Echo the report to stdout."),
    verbose: bool = VerboseOption,
) -> None:
    """Crawl the result pages of QUERY (if needed) and write the ranking report."""
    _configure_logging(verbose, wirelog)
    try:
        outcome = pipeline.run(
            query,
            marked_hosts=_split_domains(domains),
            max_pages=pages,
            base_dir=base,
            search_url=google,
            force=force,
        )
    except RankingError as exc:
        _fail(exc)

    if outcome.used_cache:
        typer.echo(f"[run] Reused cached pages in {outcome.folder}")
    else:
        typer.echo(
            f"[run] Fetched {outcome.crawl.page_count} page(s) "
            f"({outcome.crawl.stop_reason}) into {outcome.folder}"
        )
    typer.echo(f"[run] Results: {outcome.report.total_results}")
    typer.echo(f"[run] Report : {outcome.report_path}")

    if print_report:
        typer.echo("")
        typer.echo(outcome.report_path.read_text(encoding="utf-8"), nl=False)


@app.command("crawl")
def crawl_cmd(
    query: str = QueryOption,
    base: Optional[Path] = BaseOption,
    google: Optional[str] = GoogleOption,
    pages: Optional[int] = PagesOption,
    wirelog: Optional[Path] = typer.Option(
        None, "--wirelog", "-w", help="Dump all HTTP communication to this file."
    ),
    force: bool = typer.Option(False, "--force", help="Crawl even if the cache is current."),
    verbose: bool = VerboseOption,
) -> None:
    """Fetch the result pages of QUERY into the cache without reporting."""
    _configure_logging(verbose, wirelog)
    try:
        outcome = pipeline.crawl_query(query, pages, base, google, force)
    except RankingError as exc:
        _fail(exc)

    folder = query_folder(base or settings.base_dir, query)
    if outcome is None:
        typer.echo(f"[crawl] Cache is current: {folder}")
        return
    typer.echo(
        f"[crawl] Stored {outcome.page_count} page(s) in {folder} ({outcome.stop_reason})"
    )


@app.command("report")
def report_cmd(
    query: str = QueryOption,
    base: Optional[Path] = BaseOption,
    domains: Optional[List[str]] = DomainOption,
    google: Optional[str] = GoogleOption,
    pages: Optional[int] = PagesOption,
    verbose: bool = VerboseOption,
) -> None:
    """Print the ranking report for QUERY from cached pages (no network)."""
    _configure_logging(verbose, None)
    try:
        report = pipeline.build_report(
            query,
            marked_hosts=_split_domains(domains),
            max_pages=pages,
            base_dir=base,
            search_url=google,
        )
    except RankingError as exc:
        _fail(exc)

    buffer = io.StringIO()
    write_report(report, buffer)
    typer.echo(buffer.getvalue(), nl=False)


# ---------------------------------------------------------------------------
# Entry-point
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    app()
