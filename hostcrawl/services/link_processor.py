import logging
from dataclasses import dataclass
from typing import Iterable, Tuple

from hostcrawl.domain.crawl_stats import CrawlStats
from hostcrawl.domain.frontier_queue import FrontierQueue
from hostcrawl.services.host_guard import same_host
from hostcrawl.services.url_normalizer import normalize_url

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LinkProcessRequest:
    raw_links: Tuple[str, ...]
    base_url: str
    visited_url: str
    depth: int


class LinkProcessor:
    """Turns a page's raw hrefs into its in-host link list and feeds the frontier.

    Runs on the engine's orchestration thread only, since it mutates the
    queue and the duplicate counter.
    """

    def __init__(self, strip_tracking: bool = False):
        self.strip_tracking = strip_tracking

    def in_host_links(self, raw_links: Iterable[str], base_url: str, visited_url: str) -> Tuple[str, ...]:
        """Normalize, drop external and unparseable links, de-duplicate keeping first-seen order."""
        links = []
        seen = set()
        for raw in raw_links:
            normalized = normalize_url(raw, base_url, strip_tracking=self.strip_tracking)
            if normalized is None:
                logger.debug("Skipping (unparseable) %r on %s", raw, visited_url)
                continue
            if not same_host(visited_url, normalized):
                logger.debug("Skipping (external) %s -> not same host as %s", normalized, visited_url)
                continue
            if normalized in seen:
                continue
            seen.add(normalized)
            links.append(normalized)
        return tuple(links)

    def process(self, request: LinkProcessRequest, queue: FrontierQueue, stats: CrawlStats) -> Tuple[str, ...]:
        """Enqueue unseen links at depth+1 and return the page's link list."""
        links = self.in_host_links(request.raw_links, request.base_url, request.visited_url)
        for link in links:
            if queue.enqueue_if_new(link, request.depth + 1):
                stats.observe_queue_size(queue.pending)
            else:
                stats.duplicates_filtered += 1
        return links
