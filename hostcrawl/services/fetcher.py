from __future__ import annotations

import logging
import time
from typing import Callable, Optional, Protocol

from hostcrawl.domain.fetch_outcome import FetchOutcome
from hostcrawl.exceptions import CrawlerError, HttpFetchError
from hostcrawl.services.http_service import HttpService

logger = logging.getLogger(__name__)

DEFAULT_MAX_RETRIES = 1
RETRY_BACKOFF_SECONDS = 0.1


class Fetcher(Protocol):
    """Fetch a URL and classify the outcome.

    This is intentionally small so the engine can be driven by fakes in tests.
    """

    def fetch(self, url: str, timeout_ms: int) -> FetchOutcome: ...


def is_retryable(error: BaseException) -> bool:
    """Only transient transport errors are retried at this layer; timeouts are not."""
    return isinstance(error, HttpFetchError) and error.retryable and not error.timed_out


class FetchWithRetry:
    """One GET with a deadline, plus a single retry for transient transport failures.

    Stateless apart from its collaborators, so it is safe to call from many
    worker threads at once.
    """

    def __init__(
        self,
        http_service: HttpService,
        max_retries: int = DEFAULT_MAX_RETRIES,
        backoff_seconds: float = RETRY_BACKOFF_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self._http_service = http_service
        self.max_retries = int(max_retries)
        self.backoff_seconds = float(backoff_seconds)
        self._sleep = sleep

    def fetch(self, url: str, timeout_ms: int) -> FetchOutcome:
        last_error: Optional[CrawlerError] = None

        for attempt in range(self.max_retries + 1):
            try:
                response = self._http_service.fetch(url, timeout_ms)
            except HttpFetchError as e:
                last_error = e
                if attempt == self.max_retries or not is_retryable(e):
                    break
                logger.debug("Transient error for %s (%s); retrying", url, e)
                self._sleep(self.backoff_seconds * (attempt + 1))
                continue

            if not response.ok:
                return FetchOutcome(
                    ok=False,
                    url=response.url,
                    status=response.status_code,
                    content_type=response.content_type,
                    failure_reason=f"HTTP {response.status_code}",
                )

            return FetchOutcome(
                ok=True,
                url=response.url,
                status=response.status_code,
                content_type=response.content_type,
                html=response.text if response.is_html else None,
            )

        return FetchOutcome(
            ok=False,
            url=url,
            status=None,
            failure_reason=last_error.message if last_error is not None else "Request failed",
            error=last_error,
        )
