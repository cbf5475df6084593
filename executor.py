import logging
import time
from typing import Dict, Optional

import httpx

from collector import ResultCollector
from config import JSON_CONTENT_TYPE
from metrics import Outcome

logger = logging.getLogger(__name__)


def format_status(response: httpx.Response) -> str:
    return f"{response.status_code} {response.reason_phrase}".rstrip()


class RequestExecutor:
    """Issues single HTTP calls against one target and records what came back.

    One executor is shared by every task of a run; ``execute`` holds no
    per-call state on the instance, so concurrent calls are independent.
    """

    def __init__(self, client: httpx.AsyncClient, url: str, collector: ResultCollector,
                 headers: Optional[Dict[str, str]] = None, body: Optional[bytes] = None,
                 verbose: bool = False):
        self.client = client
        self.url = url
        self.collector = collector
        self.headers = dict(headers or {})
        self.body = body or None  # b"" means no body, same as None
        self.verbose = verbose

    @property
    def method(self) -> str:
        return "POST" if self.body else "GET"

    def build_request(self) -> httpx.Request:
        headers = httpx.Headers(self.headers)
        if self.body:
            headers["content-type"] = JSON_CONTENT_TYPE
        return self.client.build_request(self.method, self.url, headers=headers, content=self.body)

    async def execute(self) -> Optional[Outcome]:
        """Perform one call. Returns the recorded Outcome, or None on transport failure."""
        try:
            request = self.build_request()
            start = time.perf_counter()
            response = await self.client.send(request)
            elapsed_s = time.perf_counter() - start
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.error(f"{self.method} {self.url} failed: {type(e).__name__}: {e}")
            return None

        outcome = Outcome(format_status(response), int(elapsed_s * 1000))
        if self.verbose:
            logger.info(f"{outcome.status} Elapsed: {outcome.latency_ms}ms")
        await self.collector.record(outcome)
        return outcome
