"""Result aggregation: clusters the global ranking by host."""

from __future__ import annotations

from collections.abc import Iterable

from ranking.models import RankingReport, Result, ResultCluster, RunMetadata


def normalise_hosts(hosts: Iterable[str]) -> frozenset[str]:
    """Lower-case and strip host names, dropping blanks."""
    return frozenset(h.strip().lower() for h in hosts if h and h.strip())


def build_clusters(results: Iterable[Result], marked_hosts: Iterable[str] = ()) -> list[ResultCluster]:
    """Group *results* by host.

    Every distinct host gets a cluster.  Clusters are ordered by descending
    result count, ties broken by ascending host name.  Marking only sets
    :attr:`ResultCluster.marked`.
    """
    marked = normalise_hosts(marked_hosts)
    clusters: dict[str, ResultCluster] = {}
    for result in sorted(results):
        host = result.host
        cluster = clusters.get(host)
        if cluster is None:
            cluster = ResultCluster(host=host, marked=host in marked)
            clusters[host] = cluster
        cluster.results.append(result)
    return sorted(clusters.values(), key=ResultCluster.sort_key)


def aggregate(
    results: Iterable[Result],
    metadata: RunMetadata,
    marked_hosts: Iterable[str] = (),
) -> RankingReport:
    """Build the :class:`RankingReport` consumed by the report emitter."""
    ordered = sorted(set(results))
    marked = normalise_hosts(marked_hosts)
    return RankingReport(
        metadata=metadata,
        results=ordered,
        marked_hosts=marked,
        clusters=build_clusters(ordered, marked),
    )
