import argparse
import asyncio
import logging
import sys
from typing import Dict, List, Optional

import config
from config import RunConfig
from load_driver import run_load
from metrics import RunSummary

logger = logging.getLogger(__name__)

EXIT_INTERRUPTED = 130


def setup_logging(log_file: Optional[str] = None):
    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(log_file, mode='w'))
    logging.basicConfig(level=config.LOG_LEVEL, format=config.LOG_FORMAT, handlers=handlers)
    if log_file:
        logger.info(f"Logging setup complete. Log file: {log_file}")


def parse_headers(header_string: str) -> Dict[str, str]:
    """Turn "name:value,name2:value2" into a dict.

    Entries that do not split into exactly one name and one value are skipped,
    so a value containing ':' is dropped.
    """
    headers: Dict[str, str] = {}
    if not header_string:
        return headers
    for entry in header_string.split(","):
        parts = entry.split(":")
        if len(parts) != 2:
            if entry.strip():
                logger.warning(f"Ignoring malformed header entry: {entry!r}")
            continue
        name, value = parts[0].strip(), parts[1].strip()
        if name:
            headers[name] = value
    return headers


def read_body(path: str) -> bytes:
    with open(path, 'rb') as f:
        return f.read()


def render_summary(summary: RunSummary) -> str:
    lines = [
        "======================",
        "RUN SUMMARY",
        f"Total requests: {summary.total_requests}",
        f"Total elapsed time: {summary.elapsed_s:.3f}s",
    ]
    if summary.truncated:
        lines.append(f"Run truncated: deadline reached with "
                     f"{summary.requests_issued - summary.total_requests} requests unaccounted for")
    lines.append("Response codes received (count)")
    for status, count in sorted(summary.status_counts.items()):
        lines.append(f"    {status}: {count}")

    if summary.has_latencies:
        lines += [
            "Latencies observed in milliseconds",
            f"    Average: {summary.average_latency_ms}",
            f"    99th percentile: {summary.p99}",
            f"    95th percentile: {summary.p95}",
            f"    75th percentile: {summary.p75}",
            f"    50th percentile: {summary.p50}",
            f"Slowest request: {summary.max_latency_ms}",
            f"Fastest request: {summary.min_latency_ms}",
        ]
    else:
        lines.append("No successful requests; latency statistics unavailable")
    lines.append("======================")
    return "\n".join(lines)


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {value}")
    return number


def _positive_float(value: str) -> float:
    number = float(value)
    if number <= 0:
        raise argparse.ArgumentTypeError(f"expected a positive number, got {value}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rateload",
        description="Send HTTP requests at a fixed rate and report latency percentiles.",
    )
    parser.add_argument("target", nargs="?", help="URL to send traffic to (alternative to -u)")
    parser.add_argument("-u", "--url", help="URL to send traffic to")
    parser.add_argument("-d", "--duration", type=_positive_int, default=config.DEFAULT_DURATION,
                        help="Number of one-second waves (default: %(default)s)")
    parser.add_argument("-c", "--rps", type=_positive_int, default=config.DEFAULT_RPS,
                        help="Concurrent requests per wave (default: %(default)s)")
    parser.add_argument("-H", "--headers", default="",
                        help="Request headers as comma separated name:value pairs")
    parser.add_argument("--body", help="File whose contents are POSTed as the request body")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log every request")
    parser.add_argument("-n", "--request-count", type=_positive_int, nargs="?",
                        const=config.DEFAULT_REQUEST_COUNT, default=None,
                        help="Send a flat number of requests without pacing "
                             f"(default when given without a value: {config.DEFAULT_REQUEST_COUNT})")
    parser.add_argument("--timeout", type=_positive_float, default=config.REQUEST_TIMEOUT_SECONDS,
                        help="Per-request timeout in seconds (default: %(default)s)")
    parser.add_argument("--deadline", type=_positive_float, default=None,
                        help="Seconds to wait for in-flight requests once all are sent")
    parser.add_argument("--log-file", default=config.LOG_FILE, help="Also write logs to this file")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    url = args.url or args.target
    if not url:
        print('Please provide the URL. Ex: rateload "https://www.bing.com"', file=sys.stderr)
        return config.EXIT_MISSING_URL

    setup_logging(args.log_file)

    body = None
    if args.body:
        try:
            body = read_body(args.body)
        except OSError as e:
            logger.critical(f"Cannot read request body file {args.body}: {e}")
            return config.EXIT_FATAL

    run_config = RunConfig(
        url=url,
        headers=parse_headers(args.headers),
        body=body,
        requests_per_tick=args.rps,
        duration=args.duration,
        request_count=args.request_count,
        verbose=args.verbose,
        timeout_s=args.timeout,
        deadline_s=args.deadline,
    )

    try:
        summary = asyncio.run(run_load(run_config))
    except KeyboardInterrupt:
        logger.info("Run interrupted by user (Ctrl+C).")
        return EXIT_INTERRUPTED

    print(render_summary(summary))
    return config.EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
