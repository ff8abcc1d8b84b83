"""Rendering of page results and crawl summaries (text or JSON)."""
import json
import logging
import sys
from typing import IO, Optional

from hostcrawl.domain.crawl_options import JSON, TEXT, VALID_FORMATS
from hostcrawl.domain.crawl_stats import CrawlSummary
from hostcrawl.domain.page_result import PageResult
from hostcrawl.exceptions import CrawlerError, OUTPUT, FATAL
from hostcrawl.utils.duration import format_duration

logger = logging.getLogger(__name__)


def render_page_text(page: PageResult) -> str:
    lines = [f"VISITED: {page.url}"]
    if page.error:
        lines.append(f"  ! ERROR: {page.error}")
    for link in page.links:
        lines.append(f"  - {link}")
    return "\n".join(lines) + "\n"


def render_summary_text(summary: CrawlSummary) -> str:
    lines = [
        "",
        "--- Crawl Summary ---",
        f"Pages visited: {summary.pages_visited}",
        f"Successful pages: {summary.pages_succeeded}",
        f"Failed pages: {summary.pages_failed}",
        f"Unique URLs discovered: {summary.unique_urls_discovered}",
        f"Total links extracted: {summary.total_links_extracted}",
        f"Mean links per page: {summary.mean_links_per_page:.2f}",
        f"Max depth reached: {summary.max_depth}",
        f"Duration: {format_duration(summary.duration_ms)} ({round(summary.duration_ms)} ms)",
        f"Actual max concurrency: {summary.actual_max_concurrency}",
        f"Peak queue size: {summary.peak_queue_size}",
        f"Duplicates filtered: {summary.duplicates_filtered}",
        f"Cancelled: {'yes' if summary.cancelled else 'no'}",
        f"Retry attempts scheduled: {summary.retry_attempts}",
        f"Retry successes: {summary.retry_successes}",
        f"Retry failures: {summary.retry_failures}",
    ]

    if summary.status_counts:
        lines.append("Status codes:")
        for status, count in sorted(summary.status_counts.items()):
            lines.append(f"  {status}: {count}")

    if summary.failure_reasons:
        lines.append("Failure reasons:")
        for reason, count in sorted(summary.failure_reasons.items(), key=lambda kv: -kv[1]):
            lines.append(f"  {reason}: {count}")

    if summary.failure_log:
        lines.append("Failure log:")
        for event in summary.failure_log:
            state = "resolved" if event.resolved_on_retry else "unresolved"
            lines.append(f"  [attempt {event.attempt}] {event.url} - {event.reason} ({state})")

    return "\n".join(lines) + "\n"


def render_page_json(page: PageResult) -> str:
    return json.dumps(page.to_dict()) + "\n"


def render_summary_json(summary: CrawlSummary) -> str:
    return json.dumps({"summary": summary.to_dict()}) + "\n"


class OutputWriter:
    """Writes pages and the summary to a stream (stdout by default) or a file.

    In quiet mode page lines are suppressed; the summary is always written.
    """

    def __init__(self, format: str = TEXT, quiet: bool = False, stream: Optional[IO[str]] = None, output_file: Optional[str] = None):
        if format not in VALID_FORMATS:
            raise CrawlerError(f"Unsupported format: {format}", OUTPUT, severity=FATAL, details={"format": format})
        self.format = format
        self.quiet = quiet
        self._owns_stream = False
        if output_file:
            try:
                self.stream = open(output_file, "w", encoding="utf-8")
            except OSError as e:
                raise CrawlerError(
                    f"Unable to open output file: {output_file}",
                    OUTPUT,
                    severity=FATAL,
                    details={"outputFile": output_file},
                    cause=e,
                ) from e
            self._owns_stream = True
        else:
            self.stream = stream if stream is not None else sys.stdout

    def _write(self, text: str) -> None:
        self.stream.write(text)

    def write_page(self, page: PageResult) -> None:
        if self.quiet:
            return
        self._write(render_page_json(page) if self.format == JSON else render_page_text(page))

    def write_summary(self, summary: CrawlSummary) -> None:
        self._write(render_summary_json(summary) if self.format == JSON else render_summary_text(summary))
        self.flush()

    def flush(self) -> None:
        try:
            self.stream.flush()
        except (AttributeError, ValueError):
            logger.debug("Output stream could not be flushed")

    def close(self) -> None:
        self.flush()
        if self._owns_stream:
            self.stream.close()
            self._owns_stream = False
