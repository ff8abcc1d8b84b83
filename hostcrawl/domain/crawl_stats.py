"""Crawl statistics and the end-of-run summary snapshot."""
from __future__ import annotations

import copy
import time
from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

from hostcrawl.domain.failure_event import FailureEvent
from hostcrawl.domain.page_result import PageResult


@dataclass
class CrawlStats:
    """Running counters. Mutated only by the engine's orchestration thread."""

    pages_visited: int = 0
    pages_succeeded: int = 0
    pages_failed: int = 0
    max_depth: int = 0
    total_links_extracted: int = 0
    duplicates_filtered: int = 0
    actual_max_concurrency: int = 0
    peak_queue_size: int = 0
    retry_attempts: int = 0
    retry_successes: int = 0
    retry_failures: int = 0
    status_counts: Dict[int, int] = field(default_factory=dict)
    failure_reasons: Dict[str, int] = field(default_factory=dict)

    def observe_queue_size(self, pending: int) -> None:
        self.peak_queue_size = max(self.peak_queue_size, pending)

    def observe_concurrency(self, running: int) -> None:
        self.actual_max_concurrency = max(self.actual_max_concurrency, running)


@dataclass(frozen=True)
class CrawlSummary:
    """Immutable snapshot built exactly once, when the crawl ends."""

    pages_visited: int
    pages_succeeded: int
    pages_failed: int
    unique_urls_discovered: int
    max_depth: int
    total_links_extracted: int
    status_counts: Dict[int, int]
    failure_reasons: Dict[str, int]
    duration_ms: float
    actual_max_concurrency: int
    peak_queue_size: int
    duplicates_filtered: int
    mean_links_per_page: float
    cancelled: bool
    retry_attempts: int
    retry_successes: int
    retry_failures: int
    failure_log: Tuple[FailureEvent, ...] = ()

    def to_dict(self) -> dict:
        return {
            "pagesVisited": self.pages_visited,
            "pagesSucceeded": self.pages_succeeded,
            "pagesFailed": self.pages_failed,
            "uniqueUrlsDiscovered": self.unique_urls_discovered,
            "maxDepth": self.max_depth,
            "totalLinksExtracted": self.total_links_extracted,
            "statusCounts": {str(k): v for k, v in sorted(self.status_counts.items())},
            "failureReasons": dict(self.failure_reasons),
            "durationMs": round(self.duration_ms, 3),
            "actualMaxConcurrency": self.actual_max_concurrency,
            "peakQueueSize": self.peak_queue_size,
            "duplicatesFiltered": self.duplicates_filtered,
            "meanLinksPerPage": self.mean_links_per_page,
            "cancelled": self.cancelled,
            "retryAttempts": self.retry_attempts,
            "retrySuccesses": self.retry_successes,
            "retryFailures": self.retry_failures,
            "failureLog": [e.to_dict() for e in self.failure_log],
        }


def initialize_stats(initial_queue_size: int) -> CrawlStats:
    return CrawlStats(peak_queue_size=initial_queue_size)


def record_page_metrics(
    stats: CrawlStats,
    page: PageResult,
    ok: bool,
    status: Optional[int],
    failure_reason: Optional[str],
) -> None:
    """Fold one completed attempt into `stats`. The only counter mutation point for pages."""
    stats.pages_visited += 1
    stats.max_depth = max(stats.max_depth, page.depth)
    stats.total_links_extracted += len(page.links)

    if ok:
        stats.pages_succeeded += 1
    else:
        stats.pages_failed += 1
        if failure_reason:
            stats.failure_reasons[failure_reason] = stats.failure_reasons.get(failure_reason, 0) + 1

    if isinstance(status, int) and not isinstance(status, bool):
        stats.status_counts[status] = stats.status_counts.get(status, 0) + 1


def build_crawl_summary(
    stats: CrawlStats,
    queue,
    failures,
    started_at: float,
    cancelled: bool,
    now: Optional[float] = None,
) -> CrawlSummary:
    """Snapshot `stats`. `started_at`/`now` are `time.monotonic()` seconds."""
    ended = time.monotonic() if now is None else now
    mean = 0.0
    if stats.pages_visited:
        mean = round(stats.total_links_extracted / stats.pages_visited, 2)

    return CrawlSummary(
        pages_visited=stats.pages_visited,
        pages_succeeded=stats.pages_succeeded,
        pages_failed=stats.pages_failed,
        unique_urls_discovered=queue.unique_count,
        max_depth=stats.max_depth,
        total_links_extracted=stats.total_links_extracted,
        status_counts=dict(stats.status_counts),
        failure_reasons=dict(stats.failure_reasons),
        duration_ms=max(0.0, (ended - started_at) * 1000.0),
        actual_max_concurrency=stats.actual_max_concurrency,
        peak_queue_size=stats.peak_queue_size,
        duplicates_filtered=stats.duplicates_filtered,
        mean_links_per_page=mean,
        cancelled=cancelled,
        retry_attempts=stats.retry_attempts,
        retry_successes=stats.retry_successes,
        retry_failures=stats.retry_failures,
        failure_log=tuple(copy.copy(e) for e in failures.list()),
    )
