import pytest
import requests

from hostcrawl.exceptions import (
    CrawlerError,
    HttpFetchError,
    config_error,
    ensure_crawler_error,
    fetch_error,
)


def test_kind_and_severity():
    error = fetch_error("timed out", {"url": "https://example.com/"})
    assert error.name == "FetchError"
    assert not error.is_fatal
    assert config_error("bad").is_fatal


def test_unknown_kind_rejected():
    with pytest.raises(ValueError):
        CrawlerError("x", "network")


def test_http_fetch_error_keeps_original():
    original = requests.exceptions.ConnectionError("reset")
    error = HttpFetchError("https://example.com/", original, retryable=True)
    assert error.kind == "fetch"
    assert error.__cause__ is original
    assert error.details == {"url": "https://example.com/"}
    assert error.message == "reset"


def test_ensure_crawler_error():
    classified = fetch_error("x")
    assert ensure_crawler_error(classified) is classified
    wrapped = ensure_crawler_error(KeyError())
    assert wrapped.kind == "internal"
    assert wrapped.is_fatal
    assert wrapped.message == "KeyError"
