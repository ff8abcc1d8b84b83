"""Domain objects for hostcrawl - explicit re-exports to satisfy linters."""
from .queue_item import QueueItem as QueueItem
from .page_result import PageResult as PageResult
from .failure_event import FailureEvent as FailureEvent
from .fetch_outcome import FetchOutcome as FetchOutcome
from .http_response import HttpResponse as HttpResponse
from .crawl_options import CrawlOptions as CrawlOptions
from .crawl_stats import CrawlStats as CrawlStats, CrawlSummary as CrawlSummary
from .frontier_queue import FrontierQueue as FrontierQueue
from .failure_tracker import FailureTracker as FailureTracker

__all__ = [
    "QueueItem",
    "PageResult",
    "FailureEvent",
    "FetchOutcome",
    "HttpResponse",
    "CrawlOptions",
    "CrawlStats",
    "CrawlSummary",
    "FrontierQueue",
    "FailureTracker",
]
