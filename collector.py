import asyncio
import logging
from typing import List

from metrics import Outcome

logger = logging.getLogger(__name__)


class ResultCollector:
    """Shared, append-only store for the outcomes of one run.

    Executor tasks call ``record`` concurrently; the lock only guards the
    append, never the HTTP call that produced the outcome. Once every task
    has joined, ``drain`` hands the outcomes over exactly once and closes
    the collector.
    """

    def __init__(self):
        self._outcomes: List[Outcome] = []
        self._lock = asyncio.Lock()
        self._drained = False

    async def record(self, outcome: Outcome):
        async with self._lock:
            if self._drained:
                raise RuntimeError("ResultCollector already drained; late outcome rejected")
            self._outcomes.append(outcome)

    def drain(self) -> List[Outcome]:
        if self._drained:
            raise RuntimeError("ResultCollector can only be drained once")
        self._drained = True
        outcomes, self._outcomes = self._outcomes, []
        logger.debug(f"Collector drained with {len(outcomes)} outcomes.")
        return outcomes

    @property
    def drained(self) -> bool:
        return self._drained

    def __len__(self) -> int:
        return len(self._outcomes)
