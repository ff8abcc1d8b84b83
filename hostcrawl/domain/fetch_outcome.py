"""Result of a fetch-with-retry call."""
from typing import NamedTuple, Optional

from hostcrawl.exceptions import CrawlerError


class FetchOutcome(NamedTuple):
    """Outcome of fetching one URL.

    The fetch layer never raises for network problems; it reports them here
    so the engine can fold the result on its own thread.
    """
    ok: bool
    url: str
    status: Optional[int]
    content_type: Optional[str] = None
    html: Optional[str] = None
    failure_reason: Optional[str] = None
    error: Optional[CrawlerError] = None

    @property
    def error_kind(self) -> Optional[str]:
        return self.error.kind if self.error is not None else None
