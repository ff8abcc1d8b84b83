"""Dependency injection container for the application."""
from dependency_injector import containers, providers
import requests

from hostcrawl import config as env
from hostcrawl.services.crawl_executor import CrawlEngine
from hostcrawl.services.fetcher import FetchWithRetry, RETRY_BACKOFF_SECONDS, DEFAULT_MAX_RETRIES
from hostcrawl.services.http_service import HttpService
from hostcrawl.services.link_extractor import LinkExtractor


# Environment variables used by the container (read via `hostcrawl.config` helpers).
# None of them are required.
#
# HOSTCRAWL_USER_AGENT (str, default: "hostcrawl/1.0")
#   User-Agent header for outbound HTTP requests.
#
# HOSTCRAWL_CONCURRENCY (int, default: 8)
# HOSTCRAWL_TIMEOUT_MS (int milliseconds, default: 10000)
# HOSTCRAWL_CRAWL_DELAY_MS (int milliseconds, default: 0)
#   Defaults for the matching crawl options; read by `domain.crawl_options.default_options`.
#
# HOSTCRAWL_LOG_LEVEL (str, default: "WARNING")
#   Root logging level used by the CLI.
ENV = {
    "USER_AGENT": env.user_agent(),
    "FETCH_MAX_RETRIES": DEFAULT_MAX_RETRIES,
    "FETCH_RETRY_BACKOFF_SECONDS": RETRY_BACKOFF_SECONDS,
}


class Container(containers.DeclarativeContainer):
    """Dependency injection container for hostcrawl."""

    config = providers.Configuration(default=ENV)

    http_service = providers.Singleton(
        HttpService,
        user_agent=config.USER_AGENT.as_(str),
        http_client=providers.Object(requests.get),
    )

    fetcher = providers.Singleton(
        FetchWithRetry,
        http_service=http_service,
        max_retries=config.FETCH_MAX_RETRIES.as_(int),
        backoff_seconds=config.FETCH_RETRY_BACKOFF_SECONDS.as_(float),
    )

    link_extractor = providers.Singleton(
        LinkExtractor
    )

    # Called with start_url, options and handlers; one engine per crawl.
    crawl_engine = providers.Factory(
        CrawlEngine,
        fetcher=fetcher,
        link_extractor=link_extractor,
    )
