import logging
from typing import NamedTuple, Dict, Optional

# General
LOG_LEVEL = logging.INFO  # DEBUG for more verbosity
LOG_FORMAT = '%(asctime)s - %(levelname)s - %(name)s - %(filename)s:%(lineno)d - %(message)s'
LOG_FILE = None  # Set to a path (or pass --log-file) to also log to a file

# Run defaults
DEFAULT_DURATION = 1        # Number of ticks (one wave per tick)
DEFAULT_RPS = 1             # Requests issued per tick
DEFAULT_REQUEST_COUNT = 10  # Total requests in count mode (-n without a value)
TICK_INTERVAL_SECONDS = 1.0

# HTTP client
REQUEST_TIMEOUT_SECONDS = 30.0
MAX_IDLE_CONNECTIONS = 10
IDLE_CONNECTION_TIMEOUT_SECONDS = 30.0
JSON_CONTENT_TYPE = "application/json"

# Exit codes
EXIT_OK = 0
EXIT_FATAL = 1
EXIT_MISSING_URL = 3


class RunConfig(NamedTuple):
    url: str
    headers: Dict[str, str] = {}
    body: Optional[bytes] = None
    requests_per_tick: int = DEFAULT_RPS
    duration: int = DEFAULT_DURATION
    # When set, the run is count based: one warm-up call, then the rest unpaced.
    request_count: Optional[int] = None
    verbose: bool = False
    tick_interval_s: float = TICK_INTERVAL_SECONDS
    timeout_s: float = REQUEST_TIMEOUT_SECONDS
    deadline_s: Optional[float] = None  # None waits for every request, however long

    @property
    def count_mode(self) -> bool:
        return self.request_count is not None

    @property
    def planned_requests(self) -> int:
        if self.count_mode:
            return self.request_count
        return self.requests_per_tick * self.duration
