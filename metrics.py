from typing import NamedTuple, Optional, Dict


class Outcome(NamedTuple):
    status: str  # e.g. "200 OK"
    latency_ms: int


class RunSummary(NamedTuple):
    total_requests: int
    status_counts: Dict[str, int]
    # Latency fields are None when no request completed.
    p50: Optional[int] = None
    p75: Optional[int] = None
    p95: Optional[int] = None
    p99: Optional[int] = None
    min_latency_ms: Optional[int] = None
    max_latency_ms: Optional[int] = None
    average_latency_ms: Optional[int] = None
    # Filled in by the load driver once the run is over.
    requests_issued: int = 0
    elapsed_s: float = 0.0
    truncated: bool = False

    @property
    def has_latencies(self) -> bool:
        return self.total_requests > 0
