import pytest
import random
import sys
import os
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from metrics import Outcome
from summary import percentile_index, percentile_latency, summarize, PERCENTILES


def outcomes_for(latencies, status="200 OK"):
    return [Outcome(status, latency) for latency in latencies]


class TestPercentileIndex:
    def test_ten_items(self):
        assert percentile_index(10, 50) == 4
        assert percentile_index(10, 75) == 6
        assert percentile_index(10, 95) == 8
        assert percentile_index(10, 99) == 8

    def test_single_item_is_not_stepped_back(self):
        for p in PERCENTILES:
            assert percentile_index(1, p) == 0

    def test_index_always_in_bounds(self):
        for n in range(1, 500):
            for p in PERCENTILES:
                assert 0 <= percentile_index(n, p) <= n - 1

    def test_rejects_empty(self):
        with pytest.raises(ValueError):
            percentile_index(0, 50)

    def test_percentile_latency_reads_sorted_list(self):
        ordered = outcomes_for([1, 2, 3, 4])
        assert percentile_latency(ordered, 50) == 2
        assert percentile_latency(ordered, 99) == 3


class TestSummarize:
    def test_ten_outcomes(self):
        latencies = [10, 20, 30, 40, 50, 60, 70, 80, 90, 100]
        random.Random(7).shuffle(latencies)
        summary = summarize(outcomes_for(latencies))

        assert summary.total_requests == 10
        assert summary.p50 == 50
        assert summary.p75 == 70
        assert summary.p95 == 90
        assert summary.p99 == 90
        assert summary.min_latency_ms == 10
        assert summary.max_latency_ms == 100
        assert summary.average_latency_ms == 55
        assert summary.status_counts == {"200 OK": 10}

    def test_single_outcome(self):
        summary = summarize([Outcome("200", 42)])
        assert summary.total_requests == 1
        assert summary.p50 == summary.p75 == summary.p95 == summary.p99 == 42
        assert summary.min_latency_ms == summary.max_latency_ms == summary.average_latency_ms == 42
        assert summary.status_counts == {"200": 1}

    def test_average_truncates(self):
        summary = summarize(outcomes_for([1, 2]))
        assert summary.average_latency_ms == 1

    def test_histogram_counts_each_status(self):
        outcomes = (outcomes_for([5, 6, 7], "200 OK") + outcomes_for([8], "404 Not Found")
                    + outcomes_for([9, 10], "503 Service Unavailable"))
        summary = summarize(outcomes)
        assert summary.status_counts == {"200 OK": 3, "404 Not Found": 1, "503 Service Unavailable": 2}
        assert sum(summary.status_counts.values()) == summary.total_requests

    def test_ordering_invariant_on_random_samples(self):
        rng = random.Random(1234)
        for _ in range(200):
            n = rng.randint(1, 300)
            outcomes = [Outcome(rng.choice(["200 OK", "500 Internal Server Error"]), rng.randint(0, 5000))
                        for _ in range(n)]
            s = summarize(outcomes)
            assert s.min_latency_ms <= s.p50 <= s.p75 <= s.p95 <= s.p99 <= s.max_latency_ms
            assert s.min_latency_ms <= s.average_latency_ms <= s.max_latency_ms
            assert sum(s.status_counts.values()) == s.total_requests == n

    def test_empty_outcome_set_reports_zero(self):
        summary = summarize([])
        assert summary.total_requests == 0
        assert summary.status_counts == {}
        assert not summary.has_latencies
        assert summary.p50 is None and summary.p99 is None
        assert summary.min_latency_ms is None and summary.max_latency_ms is None
        assert summary.average_latency_ms is None

    def test_input_is_not_reordered(self):
        outcomes = outcomes_for([30, 10, 20])
        summarize(outcomes)
        assert [o.latency_ms for o in outcomes] == [30, 10, 20]
