"""Tests for host clustering, statistics and report rendering."""

from __future__ import annotations

import io
from datetime import datetime
from pathlib import Path

import pytest

from ranking.aggregator import aggregate, build_clusters, normalise_hosts
from ranking.models import RankingReport, Result, RunMetadata
from ranking.report import render_header, render_pages, render_statistics, save_report


RESULTS = [
    Result(1, 1, "https://shop.example.org/landing", True),
    Result(1, 2, "https://www.alpha.com/", False),
    Result(1, 3, "https://beta.com/a", False),
    Result(2, 4, "https://beta.com/b", False),
    Result(2, 5, "https://www.alpha.com/about", False),
    Result(2, 6, "https://gamma.net/", False),
    Result(3, 7, "https://shop.example.org/other", True),
    Result(3, 8, "https://beta.com/c", False),
]


def _metadata(requested_pages: int = 10) -> RunMetadata:
    return RunMetadata(
        search_url="https://www.google.com",
        query="best coffee",
        requested_pages=requested_pages,
        requested_at=datetime(2024, 5, 1, 9, 30, 0),
        analysed_at=datetime(2024, 5, 1, 10, 0, 0),
    )


# ---------------------------------------------------------------------------
# Model behaviour
# ---------------------------------------------------------------------------

class TestResult:
    def test_orders_by_rank(self) -> None:
        assert sorted(reversed(RESULTS)) == RESULTS

    def test_equality_covers_all_fields(self) -> None:
        a = Result(1, 1, "https://a.com/", False)
        assert a == Result(1, 1, "https://a.com/", False)
        assert a != Result(1, 1, "https://a.com/", True)
        assert a != Result(2, 1, "https://a.com/", False)
        assert len({a, Result(1, 1, "https://a.com/", False)}) == 1

    def test_host_is_lower_cased(self) -> None:
        assert Result(1, 1, "https://WWW.Example.COM/x", False).host == "www.example.com"


# ---------------------------------------------------------------------------
# Clustering
# ---------------------------------------------------------------------------

class TestBuildClusters:
    def test_every_host_gets_a_cluster(self) -> None:
        hosts = {c.host for c in build_clusters(RESULTS)}
        assert hosts == {"shop.example.org", "www.alpha.com", "beta.com", "gamma.net"}

    def test_ordered_by_count_then_host(self) -> None:
        clusters = build_clusters(RESULTS)
        assert [(c.host, c.count) for c in clusters] == [
            ("beta.com", 3),
            ("shop.example.org", 2),
            ("www.alpha.com", 2),
            ("gamma.net", 1),
        ]
        for a, b in zip(clusters, clusters[1:]):
            assert a.count > b.count or (a.count == b.count and a.host < b.host)

    def test_statistics(self) -> None:
        by_host = {c.host: c for c in build_clusters(RESULTS)}

        shop = by_host["shop.example.org"]
        assert shop.advertisement_count == 2
        assert shop.best_rank == 1
        assert shop.best_page == 1

        beta = by_host["beta.com"]
        assert beta.advertisement_count == 0
        assert beta.best_rank == 3
        assert beta.best_page == 1

        gamma = by_host["gamma.net"]
        assert (gamma.best_rank, gamma.best_page) == (6, 2)

    def test_cluster_results_sorted_by_rank(self) -> None:
        by_host = {c.host: c for c in build_clusters(reversed(RESULTS))}
        assert [r.rank for r in by_host["beta.com"].results] == [3, 4, 8]

    def test_marking_is_cosmetic(self) -> None:
        marked = build_clusters(RESULTS, ["beta.com"])
        plain = build_clusters(RESULTS)

        assert [c.host for c in marked] == [c.host for c in plain]
        for m, p in zip(marked, plain):
            assert (m.count, m.advertisement_count, m.best_rank, m.best_page) == (
                p.count, p.advertisement_count, p.best_rank, p.best_page,
            )
            assert m.marked is (m.host == "beta.com")
            assert p.marked is False

    def test_marked_hosts_are_normalised(self) -> None:
        assert normalise_hosts([" Beta.COM ", "", "gamma.net"]) == {"beta.com", "gamma.net"}
        clusters = {c.host: c for c in build_clusters(RESULTS, ["BETA.com"])}
        assert clusters["beta.com"].marked is True


class TestAggregate:
    def test_totals(self) -> None:
        report = aggregate(RESULTS, _metadata(), ["beta.com"])
        assert report.total_results == 8
        assert report.last_page == 3
        assert report.metadata.requested_pages == 10
        assert report.marked_hosts == frozenset({"beta.com"})

    def test_exact_duplicates_collapse(self) -> None:
        report = aggregate(RESULTS + RESULTS[:2], _metadata())
        assert report.results == RESULTS

    def test_empty_input(self) -> None:
        report = aggregate([], _metadata())
        assert report.total_results == 0
        assert report.last_page == 0
        assert report.clusters == []


# ---------------------------------------------------------------------------
# Report rendering
# ---------------------------------------------------------------------------

@pytest.fixture()
def report() -> RankingReport:
    return aggregate(RESULTS, _metadata(5), ["beta.com"])


class TestRenderReport:
    def test_header(self, report: RankingReport) -> None:
        out = io.StringIO()
        render_header(report, out)
        text = out.getvalue()

        assert text.startswith("Overview\n========\n")
        assert "          URL: https://www.google.com" in text
        assert "        Query: best coffee" in text
        assert "   Query Date: 2024-05-01 09:30:00" in text
        assert "      Results: 8" in text
        assert "        Pages: 3 / 5" in text
        assert "    - beta.com" in text

    def test_header_of_empty_report(self) -> None:
        out = io.StringIO()
        render_header(aggregate([], _metadata()), out)
        text = out.getvalue()
        assert "      Results: 0" in text
        assert "        Pages: 0 / 10" in text
        assert "Host markers" not in text

    def test_pages_section(self, report: RankingReport) -> None:
        out = io.StringIO()
        render_pages(report, out)
        lines = out.getvalue().splitlines()

        assert lines[:2] == ["Pages", "======"]

        assert sum(1 for line in lines if "Page 0" in line) == 3
        assert "  001: ADV https://shop.example.org/landing" in lines
        assert "* 003:     https://beta.com/a" in lines
        assert "  002:     https://www.alpha.com/" in lines

    def test_statistics_section(self, report: RankingReport) -> None:
        out = io.StringIO()
        render_statistics(report, out)
        lines = out.getvalue().splitlines()

        first = lines.index("* beta.com")
        assert lines[first + 1] == "   -      total: 3 (ADV: 0)"
        assert lines[first + 2] == "   - best rank: 3"
        assert lines[first + 3] == "   - best page: 1"
        assert "  shop.example.org" in lines
        assert "   -      total: 2 (ADV: 2)" in lines

    def test_save_report(self, report: RankingReport, tmp_path: Path) -> None:
        path = save_report(report, tmp_path / "report.txt")
        text = path.read_text(encoding="utf-8")
        assert text.index("Overview\n") < text.index("\nPages\n") < text.index("\nStatistic\n")
