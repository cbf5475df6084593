import logging
from collections import Counter
from typing import List, Sequence

from metrics import Outcome, RunSummary

logger = logging.getLogger(__name__)

PERCENTILES = (50, 75, 95, 99)


def percentile_index(n: int, percentile: int) -> int:
    """Index of the percentile value in an ascending list of ``n`` items.

    floor(n * p / 100), stepped back by one whenever there is more than one
    item: with 10 items the 50th percentile is the 5th smallest (index 4),
    and the 99th is index 8.
    """
    if n < 1:
        raise ValueError("percentile_index needs at least one item")
    index = (n * percentile) // 100
    if n > 1:
        index -= 1
    return max(index, 0)  # only reachable below the 50th percentile


def percentile_latency(sorted_outcomes: Sequence[Outcome], percentile: int) -> int:
    return sorted_outcomes[percentile_index(len(sorted_outcomes), percentile)].latency_ms


def summarize(outcomes: List[Outcome]) -> RunSummary:
    total = len(outcomes)
    status_counts = dict(Counter(o.status for o in outcomes))
    if total == 0:
        logger.warning("No outcomes to summarize; every request failed or none was sent.")
        return RunSummary(total_requests=0, status_counts=status_counts)

    ordered = sorted(outcomes, key=lambda o: o.latency_ms)
    p50, p75, p95, p99 = (percentile_latency(ordered, p) for p in PERCENTILES)

    return RunSummary(
        total_requests=total,
        status_counts=status_counts,
        p50=p50, p75=p75, p95=p95, p99=p99,
        min_latency_ms=ordered[0].latency_ms,
        max_latency_ms=ordered[-1].latency_ms,
        average_latency_ms=sum(o.latency_ms for o in ordered) // total,
    )
