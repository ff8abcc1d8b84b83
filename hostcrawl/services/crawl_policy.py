import logging
from typing import Callable, Optional

from hostcrawl.domain.crawl_stats import CrawlStats
from hostcrawl.domain.failure_tracker import FailureTracker
from hostcrawl.domain.page_result import PageResult
from hostcrawl.domain.queue_item import QueueItem

logger = logging.getLogger(__name__)


class CrawlPolicy:
    """Encapsulates crawl decision rules: admission limits and retry scheduling.

    Separates policy decisions from crawl orchestration logic.
    """

    MAX_ADDITIONAL_ATTEMPTS = 1

    def __init__(self, max_pages: Optional[int] = None, max_additional_attempts: int = MAX_ADDITIONAL_ATTEMPTS):
        self.max_pages = max_pages
        self.max_additional_attempts = int(max_additional_attempts)

    def should_admit(self, processed: int, in_flight: int, stopped: bool) -> bool:
        """Check whether another queued item may start."""
        if stopped:
            return False
        if self.max_pages is not None and processed + in_flight >= self.max_pages:
            logger.debug("Not admitting: max pages %s reached (%s done, %s running)", self.max_pages, processed, in_flight)
            return False
        return True

    def record_failure(
        self,
        item: QueueItem,
        page: PageResult,
        reason: str,
        stats: CrawlStats,
        failures: FailureTracker,
        enqueue_retry: Callable[[QueueItem], None],
        allow_retry: bool = True,
        stopped: bool = False,
    ) -> bool:
        """Log the failed attempt and schedule its retry if the budget allows.

        Returns True when a retry was enqueued.
        """
        failures.record(item, page, reason)

        if not allow_retry:
            logger.warning("[failure] %s: %s", page.url, reason)
            return False

        if stopped:
            # Only a failed retry closes out a scheduled retry attempt.
            if item.attempt > 0:
                stats.retry_failures += 1
            logger.warning("[retry] attempt %s failed for %s: %s. Crawl stopping; not retrying.", item.attempt + 1, page.url, reason)
            return False

        if item.attempt < self.max_additional_attempts:
            stats.retry_attempts += 1
            logger.warning("[retry] attempt %s failed for %s: %s. Scheduling retry.", item.attempt + 1, page.url, reason)
            # The requested URL, not page.url: a redirect may have ended off-host.
            enqueue_retry(item.next_attempt())
            return True

        stats.retry_failures += 1
        logger.warning("[retry] attempt %s failed for %s: %s. No retries left.", item.attempt + 1, page.url, reason)
        return False

    def record_retry_success(self, item: QueueItem, url: str, stats: CrawlStats, failures: FailureTracker) -> None:
        if item.attempt <= 0:
            return
        stats.retry_successes += 1
        failures.resolve(url)
        logger.info("[retry] %s succeeded on attempt %s", url, item.attempt + 1)

    def abandon_pending_retries(self, items, stats: CrawlStats) -> int:
        """Count retries that were queued but never admitted as failed retries."""
        abandoned = sum(1 for item in items if item.attempt > 0)
        stats.retry_failures += abandoned
        return abandoned
