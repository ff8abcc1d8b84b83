import logging

from hostcrawl.domain.crawl_stats import initialize_stats
from hostcrawl.domain.frontier_queue import FrontierQueue
from hostcrawl.services.progress import ProgressReporter


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


def test_render_without_retries():
    stats = initialize_stats(1)
    stats.pages_visited = 2
    stats.pages_succeeded = 2
    reporter = ProgressReporter(stats, FrontierQueue("https://example.com/"))
    assert reporter.render() == "[progress] visited:2 ok:2 fail:0 unique:1 links:0"


def test_render_with_retries():
    stats = initialize_stats(1)
    stats.retry_attempts = 2
    stats.retry_successes = 1
    reporter = ProgressReporter(stats, FrontierQueue("https://example.com/"))
    assert reporter.render().endswith("retry-ok:1 retry-fail:0")


def test_emit_is_throttled(caplog):
    caplog.set_level(logging.INFO, logger="hostcrawl.services.progress")
    clock = FakeClock()
    reporter = ProgressReporter(initialize_stats(1), FrontierQueue("https://example.com/"), interval_seconds=1.0, clock=clock)

    assert reporter.emit()
    clock.now = 0.5
    assert not reporter.emit()
    assert reporter.emit(force=True)
    clock.now = 2.0
    assert reporter.emit()
    assert len([r for r in caplog.records if r.name == "hostcrawl.services.progress"]) == 3


def test_disabled_reporter_is_silent():
    reporter = ProgressReporter(initialize_stats(1), FrontierQueue("https://example.com/"), enabled=False)
    assert not reporter.emit(force=True)
