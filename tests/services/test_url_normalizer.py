import pytest

from hostcrawl.services.url_normalizer import normalize_or_fallback, normalize_url, strip_tracking_params

BASE = "https://example.com/docs/index.html"


@pytest.mark.parametrize("raw,expected", [
    ("https://Example.COM/a/", "https://example.com/a"),
    ("HTTP://example.com:80/x", "http://example.com/x"),
    ("https://example.com:443/", "https://example.com/"),
    ("https://example.com:8443/x", "https://example.com:8443/x"),
    ("https://example.com/a#section", "https://example.com/a"),
    ("https://example.com", "https://example.com/"),
    ("guide.html", "https://example.com/docs/guide.html"),
    ("../about/", "https://example.com/about"),
    ("/x?b=2&a=1", "https://example.com/x?b=2&a=1"),
    ("  /padded  ", "https://example.com/padded"),
    ("//other.org/y", "https://other.org/y"),
    ("https://example.com/a//", "https://example.com/a"),
    ("https://example.com/with space", "https://example.com/with%20space"),
    ("https://example.com/%7Euser", "https://example.com/%7Euser"),
])
def test_normalizes(raw, expected):
    assert normalize_url(raw, BASE) == expected


@pytest.mark.parametrize("raw", [
    "mailto:someone@example.com",
    "javascript:void(0)",
    "ftp://example.com/file",
    "tel:+123",
    "http://",
    "http://example.com:99999/",
    None,
])
def test_rejects_non_http_and_malformed(raw):
    assert normalize_url(raw, BASE) is None


def test_fragment_only_link_resolves_to_base_page():
    assert normalize_url("#top", BASE) == "https://example.com/docs/index.html"


def test_ipv6_host_is_bracketed():
    assert normalize_url("http://[::1]:8080/x", "http://[::1]:8080/") == "http://[::1]:8080/x"


@pytest.mark.parametrize("raw", [
    "https://Example.com/a/b/?q=1#frag",
    "http://example.com:80",
    "../up/",
    "https://example.com/a b/",
    "https://user:pw@example.com/secure/",
])
def test_idempotent(raw):
    once = normalize_url(raw, BASE)
    assert once is not None
    assert normalize_url(once, once) == once


def test_strip_tracking_keeps_other_params_in_order():
    url = "https://example.com/p?utm_source=x&b=2&gclid=abc&a=1&UTM_medium=y"
    assert normalize_url(url, BASE, strip_tracking=True) == "https://example.com/p?b=2&a=1"
    assert normalize_url(url, BASE) == url


def test_strip_tracking_params_removes_everything():
    assert strip_tracking_params("fbclid=1&utm_campaign=z") == ""
    assert strip_tracking_params("") == ""


def test_normalize_or_fallback():
    assert normalize_or_fallback("https://example.com/a/") == "https://example.com/a"
    assert normalize_or_fallback("not a url") == "not a url"
