import logging
import time
from typing import Callable

from hostcrawl.domain.crawl_stats import CrawlStats
from hostcrawl.domain.frontier_queue import FrontierQueue

logger = logging.getLogger(__name__)

PROGRESS_INTERVAL_SECONDS = 0.25


class ProgressReporter:
    """Throttled one-line progress updates, for quiet mode where pages are not printed."""

    def __init__(
        self,
        stats: CrawlStats,
        queue: FrontierQueue,
        enabled: bool = True,
        interval_seconds: float = PROGRESS_INTERVAL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.stats = stats
        self.queue = queue
        self.enabled = enabled
        self.interval_seconds = interval_seconds
        self._clock = clock
        self._last_emitted = None

    def render(self) -> str:
        s = self.stats
        parts = [
            f"visited:{s.pages_visited}",
            f"ok:{s.pages_succeeded}",
            f"fail:{s.pages_failed}",
            f"unique:{self.queue.unique_count}",
            f"links:{s.total_links_extracted}",
        ]
        if s.retry_attempts > 0:
            parts.append(f"retry-ok:{s.retry_successes}")
            parts.append(f"retry-fail:{s.retry_failures}")
        return "[progress] " + " ".join(parts)

    def emit(self, force: bool = False) -> bool:
        if not self.enabled:
            return False
        now = self._clock()
        if not force and self._last_emitted is not None and now - self._last_emitted < self.interval_seconds:
            return False
        self._last_emitted = now
        logger.info(self.render())
        return True
