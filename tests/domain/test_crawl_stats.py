from hostcrawl.domain.crawl_stats import build_crawl_summary, initialize_stats, record_page_metrics
from hostcrawl.domain.failure_tracker import FailureTracker
from hostcrawl.domain.frontier_queue import FrontierQueue
from hostcrawl.domain.page_result import PageResult
from hostcrawl.domain.queue_item import QueueItem


def test_success_updates_counters_and_status():
    stats = initialize_stats(1)
    page = PageResult(url="https://example.com/", depth=2, links=("a", "b"), status=200)
    record_page_metrics(stats, page, True, 200, None)
    assert stats.pages_visited == 1
    assert stats.pages_succeeded == 1
    assert stats.pages_failed == 0
    assert stats.max_depth == 2
    assert stats.total_links_extracted == 2
    assert stats.status_counts == {200: 1}
    assert stats.failure_reasons == {}


def test_failure_counts_reason_and_status():
    stats = initialize_stats(1)
    page = PageResult(url="https://example.com/x", depth=1, status=404, error="HTTP 404")
    record_page_metrics(stats, page, False, 404, "HTTP 404")
    record_page_metrics(stats, page, False, 404, "HTTP 404")
    assert stats.pages_failed == 2
    assert stats.failure_reasons == {"HTTP 404": 2}
    assert stats.status_counts == {404: 2}


def test_failure_without_status_or_reason():
    stats = initialize_stats(1)
    record_page_metrics(stats, PageResult(url="u", depth=0), False, None, None)
    assert stats.pages_failed == 1
    assert stats.status_counts == {}
    assert stats.failure_reasons == {}


def test_peak_queue_size_starts_from_initial_size():
    stats = initialize_stats(1)
    assert stats.peak_queue_size == 1
    stats.observe_queue_size(0)
    assert stats.peak_queue_size == 1


def test_summary_snapshot():
    queue = FrontierQueue("https://example.com/")
    queue.enqueue_if_new("https://example.com/a", 1)
    failures = FailureTracker()
    stats = initialize_stats(1)
    record_page_metrics(stats, PageResult(url="https://example.com/", depth=0, links=("x", "y", "z")), True, 200, None)
    page = PageResult(url="https://example.com/a", depth=1, error="HTTP 500")
    record_page_metrics(stats, page, False, 500, "HTTP 500")
    failures.record(QueueItem(page.url, 1, 0), page, "HTTP 500")

    summary = build_crawl_summary(stats, queue, failures, started_at=10.0, cancelled=False, now=10.25)

    assert summary.pages_visited == summary.pages_succeeded + summary.pages_failed == 2
    assert summary.unique_urls_discovered == 2
    assert summary.duration_ms == 250.0
    assert summary.mean_links_per_page == 1.5
    assert summary.cancelled is False
    assert len(summary.failure_log) == 1

    # The snapshot is detached from later tracker mutations.
    failures.resolve("https://example.com/a")
    assert summary.failure_log[0].resolved_on_retry is False


def test_mean_links_is_zero_without_pages():
    summary = build_crawl_summary(initialize_stats(1), FrontierQueue("https://example.com/"), FailureTracker(), 0.0, True, now=0.0)
    assert summary.mean_links_per_page == 0
    assert summary.cancelled is True


def test_summary_to_dict_uses_string_status_keys():
    stats = initialize_stats(1)
    record_page_metrics(stats, PageResult(url="u", depth=0), True, 200, None)
    summary = build_crawl_summary(stats, FrontierQueue("https://example.com/"), FailureTracker(), 0.0, False, now=1.0)
    data = summary.to_dict()
    assert data["statusCounts"] == {"200": 1}
    assert data["pagesVisited"] == 1
    assert data["failureLog"] == []
