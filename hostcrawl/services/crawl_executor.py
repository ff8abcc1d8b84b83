import logging
import threading
import time
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, replace
from typing import Callable, Dict, Optional, Tuple

from hostcrawl.domain.crawl_options import CrawlOptions
from hostcrawl.domain.crawl_stats import (
    CrawlSummary,
    build_crawl_summary,
    initialize_stats,
    record_page_metrics,
)
from hostcrawl.domain.failure_tracker import FailureTracker
from hostcrawl.domain.fetch_outcome import FetchOutcome
from hostcrawl.domain.frontier_queue import FrontierQueue
from hostcrawl.domain.page_result import PageResult
from hostcrawl.domain.queue_item import QueueItem
from hostcrawl.exceptions import CrawlerError, FETCH, PARSE, RECOVERABLE, internal_error, parse_error
from hostcrawl.services.crawl_policy import CrawlPolicy
from hostcrawl.services.error_handler import report_crawler_error
from hostcrawl.services.fetcher import Fetcher
from hostcrawl.services.handlers import CrawlHandlers
from hostcrawl.services.host_guard import same_host
from hostcrawl.services.link_extractor import LinkExtractor
from hostcrawl.services.link_processor import LinkProcessor, LinkProcessRequest
from hostcrawl.services.progress import ProgressReporter
from hostcrawl.services.url_normalizer import normalize_or_fallback

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TaskResult:
    """What a worker hands back to the orchestration thread."""
    item: QueueItem
    outcome: FetchOutcome
    raw_links: Tuple[str, ...] = ()
    parse_error: Optional[CrawlerError] = None


class CrawlEngine:
    """Drives one crawl from the seed URL to the final summary.

    The thread calling `run()` is the only one that touches the frontier,
    the failure log and the stats. Worker threads only fetch and extract raw
    links, then return a `TaskResult` that `run()` folds in sequentially.
    """

    def __init__(
        self,
        start_url: str,
        options: CrawlOptions,
        handlers: CrawlHandlers,
        fetcher: Fetcher,
        link_extractor: Optional[LinkExtractor] = None,
        link_processor: Optional[LinkProcessor] = None,
        policy: Optional[CrawlPolicy] = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.start_url = start_url
        self.options = options
        self.handlers = handlers
        self.fetcher = fetcher
        self.link_extractor = link_extractor or LinkExtractor()
        self.link_processor = link_processor or LinkProcessor(strip_tracking=options.strip_tracking)
        self.policy = policy or CrawlPolicy(max_pages=options.max_pages)
        self._clock = clock
        self._sleep = sleep

        self.queue = FrontierQueue(start_url, priority=options.priority)
        self.failures = FailureTracker()
        self.stats = initialize_stats(self.queue.pending)
        self.progress = ProgressReporter(self.stats, self.queue, enabled=options.quiet, clock=clock)

        self.processed = 0
        self.cancelled = False
        self.fatal_error: Optional[CrawlerError] = None
        self._stop_event: Optional[threading.Event] = None
        self._started_at: Optional[float] = None
        self._summary: Optional[CrawlSummary] = None

    def _is_stopped(self) -> bool:
        if self._stop_event is not None and self._stop_event.is_set():
            self.cancelled = True
        return self.cancelled

    def run(self, stop_event: Optional[threading.Event] = None) -> CrawlSummary:
        """Crawl until the frontier is exhausted, the page cap is hit, or `stop_event` is set.

        Fatal errors propagate; `stats` and `snapshot()` stay readable afterwards.
        """
        if self._started_at is not None:
            raise internal_error("CrawlEngine.run() may only be called once", {"startUrl": self.start_url})
        self._stop_event = stop_event
        self._started_at = self._clock()
        logger.info("Starting crawl of %s (concurrency=%s, max_pages=%s)", self.start_url, self.options.concurrency, self.options.max_pages)

        in_flight: Dict[Future, QueueItem] = {}
        pool = ThreadPoolExecutor(max_workers=self.options.concurrency, thread_name_prefix="hostcrawl")
        try:
            self._admit(pool, in_flight)
            while in_flight:
                done, _ = wait(in_flight, return_when=FIRST_COMPLETED)
                for future in done:
                    item = in_flight.pop(future)
                    self.processed += 1
                    self._complete(item, future)
                self._admit(pool, in_flight)
        except BaseException:
            # Already-running fetches are left to hit their own timeout.
            pool.shutdown(wait=False, cancel_futures=True)
            raise
        pool.shutdown(wait=True)

        return self._finalize()

    def _admit(self, pool: ThreadPoolExecutor, in_flight: Dict[Future, QueueItem]) -> None:
        while self.queue.pending > 0 and len(in_flight) < self.options.concurrency:
            if not self.policy.should_admit(self.processed, len(in_flight), self._is_stopped()):
                return
            item = self.queue.dequeue()
            if item is None:
                return
            in_flight[pool.submit(self._run_task, item)] = item
            self.stats.observe_concurrency(len(in_flight))
            logger.debug("Admitted %s (depth=%s, attempt=%s)", item.url, item.depth, item.attempt)

    def _run_task(self, item: QueueItem) -> TaskResult:
        """Worker-thread side: fetch and extract raw hrefs. Must not touch crawl state."""
        if self.options.crawl_delay_ms:
            self._sleep(self.options.crawl_delay_seconds)
        outcome = self.fetcher.fetch(item.url, self.options.timeout_ms)
        if not outcome.ok or outcome.html is None:
            return TaskResult(item, outcome)
        try:
            raw_links = tuple(self.link_extractor.extract_links(outcome.html))
        except Exception as e:
            return TaskResult(
                item,
                outcome,
                parse_error=parse_error(f"Failed to parse links: {e}", {"url": outcome.url}, cause=e),
            )
        return TaskResult(item, outcome, raw_links=raw_links)

    def _complete(self, item: QueueItem, future: Future) -> None:
        try:
            self._fold(future.result())
        except Exception as e:
            crawler_error = report_crawler_error(
                e,
                {"stage": "crawl", "url": item.url, "depth": item.depth},
                throw_on_fatal=False,
            )
            self.handlers.on_error(crawler_error, item.url, item.depth)
            if crawler_error.is_fatal:
                self.fatal_error = crawler_error
                raise crawler_error

    def _fold(self, result: TaskResult) -> None:
        item, outcome = result.item, result.outcome
        visited = normalize_or_fallback(outcome.url, strip_tracking=self.options.strip_tracking)
        on_host = same_host(visited, self.start_url)
        if on_host:
            self.queue.mark_seen(visited)

        page = PageResult(
            url=visited,
            depth=item.depth,
            status=outcome.status,
            content_type=outcome.content_type,
        )

        if not outcome.ok:
            reason = outcome.failure_reason or "Request failed"
            self._handle_failure(item, page, reason, outcome.error, outcome.status, allow_retry=True)
            return

        logger.info("Fetched %s -> status %s", visited, outcome.status)
        self.policy.record_retry_success(item, page.url, self.stats, self.failures)

        if result.parse_error is not None:
            self._handle_failure(item, page, result.parse_error.message, result.parse_error, outcome.status, allow_retry=False)
            return

        if outcome.html is not None:
            if on_host:
                links = self.link_processor.process(
                    LinkProcessRequest(
                        raw_links=result.raw_links,
                        base_url=outcome.url,
                        visited_url=visited,
                        depth=item.depth,
                    ),
                    self.queue,
                    self.stats,
                )
                page = replace(page, links=links)
            else:
                logger.info("Not following links of %s: redirected off %s", visited, self.start_url)

        record_page_metrics(self.stats, page, True, outcome.status, None)
        self._dispatch(page)

    def _handle_failure(
        self,
        item: QueueItem,
        page: PageResult,
        reason: str,
        error: Optional[CrawlerError],
        status: Optional[int],
        allow_retry: bool,
    ) -> None:
        page = replace(page, error=reason)
        if error is not None:
            report_crawler_error(
                error,
                {"stage": PARSE if error.kind == PARSE else FETCH, "url": page.url, "depth": item.depth, "attempt": item.attempt},
                default_severity=RECOVERABLE,
                throw_on_fatal=False,
            )

        self.policy.record_failure(
            item,
            page,
            reason,
            self.stats,
            self.failures,
            self._enqueue_retry,
            allow_retry=allow_retry,
            stopped=self._is_stopped(),
        )
        record_page_metrics(self.stats, page, False, status, reason)
        self._dispatch(page)

    def _enqueue_retry(self, item: QueueItem) -> None:
        self.queue.enqueue_retry(item)
        self.stats.observe_queue_size(self.queue.pending)

    def _dispatch(self, page: PageResult) -> None:
        self.progress.emit()
        self.handlers.on_page(page)

    def snapshot(self) -> CrawlSummary:
        """Summary of the current state; usable mid-run or after a fatal error."""
        return build_crawl_summary(
            self.stats,
            self.queue,
            self.failures,
            self._started_at if self._started_at is not None else self._clock(),
            self._is_stopped(),
            now=self._clock(),
        )

    def _finalize(self) -> CrawlSummary:
        if self._summary is not None:
            return self._summary
        abandoned = self.policy.abandon_pending_retries(self.queue.pending_items(), self.stats)
        if abandoned:
            logger.info("%s queued retries were not attempted", abandoned)
        self.progress.emit(force=True)
        self._summary = self.snapshot()
        logger.info(
            "Crawl finished: %s pages (%s ok, %s failed), cancelled=%s",
            self._summary.pages_visited,
            self._summary.pages_succeeded,
            self._summary.pages_failed,
            self._summary.cancelled,
        )
        return self._summary
