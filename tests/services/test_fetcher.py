from unittest.mock import Mock

import requests

from hostcrawl.domain.http_response import HttpResponse
from hostcrawl.exceptions import HttpFetchError
from hostcrawl.services.fetcher import FetchWithRetry, is_retryable


def _fetcher(http_service, sleep=None):
    return FetchWithRetry(http_service, max_retries=1, backoff_seconds=0.1, sleep=sleep or Mock())


def _transient(url="http://example.com/"):
    return HttpFetchError(url, requests.exceptions.ConnectionError("reset"), retryable=True)


def _timeout(url="http://example.com/"):
    return HttpFetchError(url, requests.exceptions.Timeout("slow"), message="Request timed out after 100ms", timed_out=True)


def test_html_success():
    http_service = Mock()
    http_service.fetch.return_value = HttpResponse(200, "http://example.com/", "text/html", "<a href='/x'>")
    outcome = _fetcher(http_service).fetch("http://example.com/", 1000)
    assert outcome.ok
    assert outcome.status == 200
    assert outcome.html == "<a href='/x'>"
    http_service.fetch.assert_called_once_with("http://example.com/", 1000)


def test_non_html_success_has_no_html():
    http_service = Mock()
    http_service.fetch.return_value = HttpResponse(200, "http://example.com/a.json", "application/json", None)
    outcome = _fetcher(http_service).fetch("http://example.com/a.json", 1000)
    assert outcome.ok
    assert outcome.html is None
    assert outcome.content_type == "application/json"


def test_http_error_status_is_failure_without_retry():
    http_service = Mock()
    http_service.fetch.return_value = HttpResponse(503, "http://example.com/", "text/html")
    sleep = Mock()
    outcome = _fetcher(http_service, sleep).fetch("http://example.com/", 1000)
    assert not outcome.ok
    assert outcome.status == 503
    assert outcome.failure_reason == "HTTP 503"
    assert outcome.error is None
    assert http_service.fetch.call_count == 1
    sleep.assert_not_called()


def test_transient_error_retried_once_with_backoff():
    http_service = Mock()
    http_service.fetch.side_effect = [_transient(), HttpResponse(200, "http://example.com/", "text/html", "ok")]
    sleep = Mock()
    outcome = _fetcher(http_service, sleep).fetch("http://example.com/", 1000)
    assert outcome.ok
    assert http_service.fetch.call_count == 2
    sleep.assert_called_once_with(0.1)


def test_transient_error_twice_gives_terminal_failure():
    http_service = Mock()
    http_service.fetch.side_effect = [_transient(), _transient()]
    outcome = _fetcher(http_service).fetch("http://example.com/", 1000)
    assert not outcome.ok
    assert outcome.status is None
    assert outcome.error_kind == "fetch"
    assert outcome.url == "http://example.com/"
    assert http_service.fetch.call_count == 2


def test_timeout_is_not_retried_here():
    http_service = Mock()
    http_service.fetch.side_effect = _timeout()
    sleep = Mock()
    outcome = _fetcher(http_service, sleep).fetch("http://example.com/", 100)
    assert not outcome.ok
    assert outcome.failure_reason == "Request timed out after 100ms"
    assert http_service.fetch.call_count == 1
    sleep.assert_not_called()


def test_is_retryable():
    assert is_retryable(_transient())
    assert not is_retryable(_timeout())
    assert not is_retryable(ValueError("nope"))
