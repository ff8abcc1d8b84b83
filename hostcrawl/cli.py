import argparse
import logging
import signal
import sys
import threading
from contextlib import contextmanager
from typing import List, Optional

from hostcrawl import __version__
from hostcrawl import config as env
from hostcrawl.domain.crawl_options import VALID_FORMATS, VALID_PRIORITIES
from hostcrawl.exceptions import CrawlerError, ensure_crawler_error
from hostcrawl.orchestrator import crawl_orchestrator

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hostcrawl",
        description="Crawl a single host and report discovered internal links.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="command", required=True)

    crawl = subparsers.add_parser("crawl", help="Start crawling from the provided URL.")
    crawl.add_argument("start_url", metavar="startUrl", help="Starting URL for the crawl.")
    crawl.add_argument("--concurrency", type=float, help="Maximum number of concurrent requests. (default: 8)")
    crawl.add_argument("--max-pages", type=float, help="Optional maximum number of pages to visit.")
    crawl.add_argument("--timeout-ms", type=float, help="Timeout per request in milliseconds. (default: 10000)")
    crawl.add_argument("--format", choices=VALID_FORMATS, help="Output format. (default: text)")
    crawl.add_argument("--strip-tracking", action="store_true", help="Strip known tracking query parameters from URLs.")
    crawl.add_argument("--priority", choices=VALID_PRIORITIES, help="Queue priority strategy. (default: none)")
    crawl.add_argument("--crawl-delay-ms", type=float, help="Fixed delay before each request, in milliseconds. (default: 0)")
    crawl.add_argument("--quiet", action="store_true", help="Suppress per-page output; log progress instead.")
    crawl.add_argument("--output", dest="output_file", help="Write output to this file instead of stdout.")
    crawl.add_argument("--log-level", default=None, help="Logging level (default: HOSTCRAWL_LOG_LEVEL or WARNING).")
    return parser


def configure_logging(level_name: Optional[str], quiet: bool = False) -> None:
    level = logging.getLevelName((level_name or env.log_level()).upper())
    if not isinstance(level, int):
        level = logging.WARNING
    logging.basicConfig(
        level=level,
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if quiet:
        logging.getLogger("hostcrawl.services.progress").setLevel(logging.INFO)


@contextmanager
def sigint_cancels(stop_event: threading.Event):
    """Turn Ctrl-C into cooperative cancellation for the duration of the block."""
    if threading.current_thread() is not threading.main_thread():
        yield
        return

    def _handler(signum, frame):
        logger.warning("Interrupt received; finishing in-flight requests")
        stop_event.set()

    previous = signal.signal(signal.SIGINT, _handler)
    try:
        yield
    finally:
        signal.signal(signal.SIGINT, previous)


def run_crawl(args: argparse.Namespace) -> int:
    stop_event = threading.Event()
    with sigint_cancels(stop_event):
        crawl_orchestrator(
            args.start_url,
            stop_event=stop_event,
            concurrency=args.concurrency,
            max_pages=args.max_pages,
            timeout_ms=args.timeout_ms,
            format=args.format,
            strip_tracking=args.strip_tracking or None,
            priority=args.priority,
            crawl_delay_ms=args.crawl_delay_ms,
            quiet=args.quiet or None,
            output_file=args.output_file,
        )
    return 0


def report_cli_error(error: BaseException) -> None:
    print(f"Error: {error}", file=sys.stderr)


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level, quiet=getattr(args, "quiet", False))

    try:
        if args.command == "crawl":
            return run_crawl(args)
        parser.error(f"unknown command: {args.command}")
    except CrawlerError as e:
        report_cli_error(e)
        return 1
    except Exception as e:
        crawler_error = ensure_crawler_error(e)
        logger.exception("Unexpected error: %s", crawler_error)
        report_cli_error(crawler_error)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
