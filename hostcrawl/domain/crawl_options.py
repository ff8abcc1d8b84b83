from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Optional

from hostcrawl import config as env
from hostcrawl.exceptions import config_error

TEXT = "text"
JSON = "json"
VALID_FORMATS = (TEXT, JSON)

PRIORITY_NONE = "none"
PRIORITY_SHALLOW = "shallow"
VALID_PRIORITIES = (PRIORITY_NONE, PRIORITY_SHALLOW)


@dataclass(frozen=True)
class CrawlOptions:
    """Crawl-behavior settings for one crawl invocation."""

    concurrency: int = 8
    max_pages: Optional[int] = None
    timeout_ms: int = 10_000
    format: str = TEXT
    strip_tracking: bool = False
    priority: str = PRIORITY_NONE
    crawl_delay_ms: int = 0
    quiet: bool = False
    output_file: Optional[str] = None

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000.0

    @property
    def crawl_delay_seconds(self) -> float:
        return self.crawl_delay_ms / 1000.0


def default_options() -> CrawlOptions:
    """Defaults, with environment overrides applied."""
    return CrawlOptions(
        concurrency=env.default_concurrency(),
        timeout_ms=env.default_timeout_ms(),
        crawl_delay_ms=env.default_crawl_delay_ms(),
    )


def _positive_int(value: Any, field: str) -> int:
    if isinstance(value, bool):
        raise config_error(f"{field} must be a positive integer.", {"value": value, "field": field})
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise config_error(f"{field} must be a finite number.", {"value": value, "field": field})
    if number != number or number in (float("inf"), float("-inf")) or number <= 0:
        raise config_error(f"{field} must be a positive integer.", {"value": value, "field": field})
    truncated = int(number)
    if truncated <= 0:
        raise config_error(f"{field} must be a positive integer.", {"value": value, "field": field})
    return truncated


def _non_negative_int(value: Any, field: str) -> int:
    if isinstance(value, bool):
        raise config_error(f"{field} must be zero or a positive integer.", {"value": value, "field": field})
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise config_error(f"{field} must be a finite number.", {"value": value, "field": field})
    if number != number or number in (float("inf"), float("-inf")) or number < 0:
        raise config_error(f"{field} must be zero or a positive integer.", {"value": value, "field": field})
    return int(number)


def resolve_options(base: Optional[CrawlOptions] = None, **overrides) -> CrawlOptions:
    """Merge `overrides` (None values ignored) over `base` and validate.

    Raises a fatal `config` CrawlerError on any invalid value.
    """
    options = base if base is not None else default_options()
    unknown = set(overrides) - set(CrawlOptions.__dataclass_fields__)
    if unknown:
        raise config_error(f"Unknown option(s): {', '.join(sorted(unknown))}", {"options": sorted(unknown)})
    options = replace(options, **{k: v for k, v in overrides.items() if v is not None})

    fmt = str(options.format)
    if fmt not in VALID_FORMATS:
        raise config_error(f"Unsupported format: {fmt}", {"format": fmt})
    priority = str(options.priority)
    if priority not in VALID_PRIORITIES:
        raise config_error(f"Unsupported priority mode: {priority}", {"priority": priority})

    return replace(
        options,
        concurrency=_positive_int(options.concurrency, "concurrency"),
        timeout_ms=_positive_int(options.timeout_ms, "timeout-ms"),
        max_pages=_positive_int(options.max_pages, "max-pages") if options.max_pages is not None else None,
        crawl_delay_ms=_non_negative_int(options.crawl_delay_ms, "crawl-delay"),
        format=fmt,
        priority=priority,
        strip_tracking=bool(options.strip_tracking),
        quiet=bool(options.quiet),
    )
