"""Serve a small fixture site on localhost for manual crawls.

    python tools/dev_site.py            # listens on PORT (default 3001)
    python run.py crawl http://127.0.0.1:3001/
"""
import logging
import os
import time
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from urllib.parse import urlparse

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("dev_site")

PORT = int(os.getenv("PORT", "3001"))


def _page(title, *links):
    anchors = "\n".join(f'    <a href="{href}">{text}</a>' for href, text in links)
    return f"<!doctype html>\n<html>\n  <body>\n    <h1>{title}</h1>\n{anchors}\n  </body>\n</html>"


ROUTES = {
    "/": _page(
        "Welcome",
        ("/about", "About"),
        ("/help/faq", "FAQ"),
        ("/blog", "Blog"),
        ("/same-page#section", "Self Link"),
        ("https://example.com/external", "External"),
    ),
    "/about": _page("About", ("/", "Home"), ("/team", "Team")),
    "/help/faq": _page(
        "FAQ",
        ("/help/contact", "Contact"),
        ("/", "Home"),
        ("/help/faq?utm_source=newsletter", "Tracking"),
    ),
    "/help/contact": _page("Contact", ("/help/faq", "Back to FAQ")),
    "/team": _page("Team", ("/team/engineering", "Engineering"), ("/team#leadership", "Leadership")),
    "/team/engineering": _page("Engineering", ("/", "Home")),
    "/blog": _page("Blog", ("/blog/post-1", "Post 1"), ("/blog/post-2/", "Post 2"), ("/slow", "Slow")),
    "/blog/post-1": _page("Post 1", ("/blog", "Back")),
    "/blog/post-2": _page("Post 2", ("/blog", "Back"), ("/missing", "Broken")),
    "/same-page": _page("Same Page", ("#top", "Top")),
}

SLOW_SECONDS = 3


class DevSiteHandler(BaseHTTPRequestHandler):
    def do_GET(self):
        path = urlparse(self.path).path
        if path != "/" and path.endswith("/"):
            path = path.rstrip("/")
        if path == "/slow":
            time.sleep(SLOW_SECONDS)
            path = "/"
        html = ROUTES.get(path)
        if html is None:
            self.send_response(404)
            self.send_header("Content-Type", "text/plain; charset=utf-8")
            self.end_headers()
            self.wfile.write(b"Not found")
            return
        body = html.encode("utf-8")
        self.send_response(200)
        self.send_header("Content-Type", "text/html; charset=utf-8")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def log_message(self, format, *args):
        logger.info("%s - %s", self.address_string(), format % args)


def main():
    server = ThreadingHTTPServer(("127.0.0.1", PORT), DevSiteHandler)
    logger.info("Dev site listening on http://127.0.0.1:%s/", PORT)
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        logger.info("Shutting down")
        server.shutdown()


if __name__ == "__main__":
    main()
