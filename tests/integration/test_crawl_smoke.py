"""End-to-end crawl of a tiny site served from a local HTTP server."""
import threading
import time
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

import pytest

from hostcrawl.orchestrator import crawl_orchestrator
from hostcrawl.services.handlers import CallbackHandlers

ROUTES = {
    "/": '<a href="/about">About</a> <a href="/blog/">Blog</a> <a href="https://example.org/">Out</a> <a href="#top">Top</a>',
    "/about": '<a href="/">Home</a> <a href="/missing">Broken</a>',
    "/blog": '<a href="/blog/post-1?utm_source=feed">Post</a> <a href="/slow">Slow</a>',
    "/blog/post-1": '<a href="/blog">Back</a>',
}


class SiteHandler(BaseHTTPRequestHandler):
    def do_GET(self):
        path = self.path.split("?", 1)[0].rstrip("/") or "/"
        if path == "/slow":
            time.sleep(0.5)
        body = ROUTES.get(path)
        if body is None:
            self.send_response(404)
            self.send_header("Content-Type", "text/plain")
            self.end_headers()
            self.wfile.write(b"not found")
            return
        data = f"<html><body>{body}</body></html>".encode("utf-8")
        self.send_response(200)
        self.send_header("Content-Type", "text/html; charset=utf-8")
        self.send_header("Content-Length", str(len(data)))
        self.end_headers()
        self.wfile.write(data)

    def log_message(self, format, *args):
        pass


@pytest.fixture
def site(monkeypatch):
    for name in ("HTTP_PROXY", "HTTPS_PROXY", "ALL_PROXY", "http_proxy", "https_proxy", "all_proxy"):
        monkeypatch.delenv(name, raising=False)
    server = ThreadingHTTPServer(("127.0.0.1", 0), SiteHandler)
    server.daemon_threads = True
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        yield f"http://127.0.0.1:{server.server_address[1]}"
    finally:
        server.shutdown()
        server.server_close()


def test_crawls_site_end_to_end(site):
    pages = []
    summary = crawl_orchestrator(
        site + "/",
        handlers=CallbackHandlers(on_page=pages.append, on_complete=lambda s: None),
        concurrency=3,
        timeout_ms=200,
        strip_tracking=True,
    )

    ok_urls = {p.url for p in pages if p.ok}
    assert ok_urls == {site + "/", site + "/about", site + "/blog", site + "/blog/post-1"}
    assert not any("example.org" in p.url for p in pages)

    assert summary.pages_visited == summary.pages_succeeded + summary.pages_failed
    assert summary.pages_succeeded == 4
    # /missing and /slow each fail twice: the first attempt plus one retry.
    assert summary.pages_failed == 4
    assert summary.status_counts[404] == 2
    assert summary.failure_reasons["Request timed out after 200ms"] == 2
    assert summary.retry_attempts == 2
    assert summary.retry_failures == 2
    assert summary.unique_urls_discovered == 6
    assert summary.max_depth == 2
    assert summary.cancelled is False
