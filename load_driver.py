import logging
import time
from typing import Optional

import httpx

from collector import ResultCollector
from config import (
    RunConfig, MAX_IDLE_CONNECTIONS, IDLE_CONNECTION_TIMEOUT_SECONDS
)
from executor import RequestExecutor
from metrics import RunSummary
from scheduler import RateScheduler
from summary import summarize

logger = logging.getLogger(__name__)


def build_client(run_config: RunConfig,
                 transport: Optional[httpx.AsyncBaseTransport] = None) -> httpx.AsyncClient:
    limits = httpx.Limits(
        max_connections=None,  # never queue requests behind the pool
        max_keepalive_connections=MAX_IDLE_CONNECTIONS,
        keepalive_expiry=IDLE_CONNECTION_TIMEOUT_SECONDS,
    )
    return httpx.AsyncClient(
        timeout=httpx.Timeout(run_config.timeout_s),
        limits=limits,
        headers={"Accept-Encoding": "identity"},  # compression disabled
        transport=transport,
    )


async def run_load(run_config: RunConfig,
                   transport: Optional[httpx.AsyncBaseTransport] = None) -> RunSummary:
    """Run one load test end to end and return its summary.

    ``transport`` replaces the network layer of the shared client (tests
    pass an ``httpx.MockTransport``).
    """
    if run_config.count_mode:
        logger.info(f"Will send {run_config.request_count} requests to {run_config.url}")
    else:
        logger.info(f"Will send {run_config.requests_per_tick} requests per tick for "
                    f"{run_config.duration} ticks to {run_config.url}")

    collector = ResultCollector()
    start_time = time.perf_counter()

    async with build_client(run_config, transport) as client:
        executor = RequestExecutor(
            client, run_config.url, collector,
            headers=run_config.headers, body=run_config.body, verbose=run_config.verbose,
        )
        scheduler = RateScheduler(
            executor.execute,
            tick_interval_s=run_config.tick_interval_s,
            deadline_s=run_config.deadline_s,
        )
        if run_config.count_mode:
            result = await scheduler.run_count(run_config.request_count)
        else:
            result = await scheduler.run_ticks(run_config.requests_per_tick, run_config.duration)

    elapsed_s = time.perf_counter() - start_time
    summary = summarize(collector.drain())._replace(
        requests_issued=result.issued,
        elapsed_s=elapsed_s,
        truncated=result.truncated,
    )

    failed = result.issued - summary.total_requests
    logger.info(f"Run finished in {elapsed_s:.2f}s: {summary.total_requests}/{result.issued} requests completed"
                + (f", {failed} dropped" if failed else ""))
    return summary
