"""Receivers for crawl events.

The engine emits one `on_page` per completed attempt, may emit `on_error`
for fatal task errors, and the orchestrator passes the final summary to
`on_complete`. Only `on_page` is required.
"""
from typing import Callable, Optional

from hostcrawl.domain.crawl_stats import CrawlSummary
from hostcrawl.domain.page_result import PageResult
from hostcrawl.exceptions import CrawlerError
from hostcrawl.services.output import OutputWriter


class CrawlHandlers:
    # None means "no summary receiver": the orchestrator renders the summary itself.
    on_complete: Optional[Callable[[CrawlSummary], None]] = None

    def on_page(self, page: PageResult) -> None:
        raise NotImplementedError

    def on_error(self, error: CrawlerError, url: str, depth: int) -> None:
        pass


class CallbackHandlers(CrawlHandlers):
    """Adapts plain callables to the handler interface."""

    def __init__(
        self,
        on_page: Callable[[PageResult], None],
        on_error: Optional[Callable[[CrawlerError, str, int], None]] = None,
        on_complete: Optional[Callable[[CrawlSummary], None]] = None,
    ):
        self._on_page = on_page
        self._on_error = on_error
        self.on_complete = on_complete

    def on_page(self, page: PageResult) -> None:
        self._on_page(page)

    def on_error(self, error: CrawlerError, url: str, depth: int) -> None:
        if self._on_error is not None:
            self._on_error(error, url, depth)


class OutputHandlers(CrawlHandlers):
    """Default handlers: every page goes to the output writer."""

    def __init__(self, writer: OutputWriter):
        self.writer = writer

    def on_page(self, page: PageResult) -> None:
        self.writer.write_page(page)
