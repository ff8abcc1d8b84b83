"""Entry point for running one crawl: validate, build, run, report."""
import logging
import threading
from typing import Optional
from urllib.parse import urlsplit

from hostcrawl.container import Container
from hostcrawl.domain.crawl_options import CrawlOptions, resolve_options
from hostcrawl.domain.crawl_stats import CrawlSummary
from hostcrawl.exceptions import config_error
from hostcrawl.services.handlers import CrawlHandlers, OutputHandlers
from hostcrawl.services.output import OutputWriter
from hostcrawl.services.url_normalizer import normalize_url

logger = logging.getLogger(__name__)


def validate_start_url(start_url: str) -> str:
    """Return the stripped start URL, or raise a fatal config error."""
    raw = (start_url or "").strip()
    try:
        parts = urlsplit(raw)
        parts.port  # raises ValueError on a malformed port
    except ValueError as e:
        raise config_error(f"Invalid URL: {start_url}", {"startUrl": start_url}, cause=e) from e
    if not parts.scheme:
        raise config_error(f"Invalid URL: {start_url}", {"startUrl": start_url})
    if parts.scheme.lower() not in ("http", "https"):
        raise config_error(
            "Start URL must use http or https protocol.",
            {"protocol": parts.scheme, "startUrl": start_url},
        )
    if not parts.hostname:
        raise config_error(f"Invalid URL: {start_url}", {"startUrl": start_url})
    return raw


def crawl_orchestrator(
    start_url: str,
    handlers: Optional[CrawlHandlers] = None,
    stop_event: Optional[threading.Event] = None,
    options: Optional[CrawlOptions] = None,
    container: Optional[Container] = None,
    **overrides,
) -> CrawlSummary:
    """Crawl the host of `start_url` and return the summary.

    Keyword `overrides` are CrawlOptions fields (concurrency, max_pages,
    timeout_ms, ...). Without `handlers`, pages are written to stdout in the
    configured format. Without an `on_complete` handler, the summary is
    rendered the same way.
    """
    url = validate_start_url(start_url)
    resolved = resolve_options(options, **overrides)

    normalized_start = normalize_url(url, url, strip_tracking=resolved.strip_tracking)
    if normalized_start is None:
        raise config_error("Unable to normalize the starting URL.", {"startUrl": url})

    writer = None
    if handlers is None or handlers.on_complete is None:
        writer = OutputWriter(format=resolved.format, quiet=resolved.quiet, output_file=resolved.output_file)
    if handlers is None:
        handlers = OutputHandlers(writer)

    container = container or Container()
    engine = container.crawl_engine(start_url=normalized_start, options=resolved, handlers=handlers)

    try:
        summary = engine.run(stop_event=stop_event)
        if handlers.on_complete is not None:
            handlers.on_complete(summary)
        else:
            writer.write_summary(summary)
        return summary
    finally:
        if writer is not None:
            writer.close()
