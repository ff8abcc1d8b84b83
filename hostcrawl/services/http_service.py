import logging
import socket
import threading
import time
from typing import Callable, Optional

import requests

from hostcrawl.domain.http_response import HttpResponse
from hostcrawl.exceptions import HttpFetchError

logger = logging.getLogger(__name__)

ACCEPT = "text/html,application/xhtml+xml,*/*;q=0.9"
ACCEPT_ENCODING = "gzip, deflate"
CHUNK_SIZE = 8 * 1024


def _response_socket(resp) -> Optional[socket.socket]:
    """The socket under a streamed requests response, or None if it cannot be reached."""
    fp = getattr(getattr(resp, "raw", None), "_fp", None)  # http.client.HTTPResponse
    sock_io = getattr(getattr(fp, "fp", None), "raw", None)
    sock = getattr(sock_io, "_sock", None)
    return sock if isinstance(sock, socket.socket) else None


class HttpService:
    """
    HTTP client wrapper for fetching web pages.

    Requires http_client callable for dependency injection (DIP compliance).
    This enables easy testing without patching and allows swapping HTTP libraries.

    Every request runs under a hard deadline: connect and each socket read are
    bounded by the timeout, and a timer shuts the response socket down once the
    total elapsed time reaches it, so a trickling body cannot hold a worker.
    """

    def __init__(
        self,
        user_agent: str,
        http_client: Callable,
        clock: Callable[[], float] = time.monotonic,
        timer_factory: Callable[..., threading.Timer] = threading.Timer,
    ):
        self.user_agent = user_agent
        self.http_client = http_client
        self.clock = clock
        self.timer_factory = timer_factory

    @property
    def headers(self) -> dict:
        return {
            "User-Agent": self.user_agent,
            "Accept": ACCEPT,
            "Accept-Encoding": ACCEPT_ENCODING,
        }

    def _timed_out(self, url: str, timeout_ms: int, original: Exception) -> HttpFetchError:
        return HttpFetchError(
            url,
            original,
            message=f"Request timed out after {timeout_ms}ms",
            retryable=False,
            timed_out=True,
            details={"timeoutMs": timeout_ms},
        )

    def fetch(self, url: str, timeout_ms: int) -> HttpResponse:
        """GET `url`; return status, final URL, Content-Type and (HTML only) body text.

        Raises HttpFetchError for transport failures. Non-2xx responses are
        returned, not raised.
        """
        deadline = self.clock() + timeout_ms / 1000.0
        try:
            resp = self.http_client(
                url,
                headers=self.headers,
                timeout=timeout_ms / 1000.0,
                allow_redirects=True,
                stream=True,
            )
        except requests.exceptions.Timeout as e:
            raise self._timed_out(url, timeout_ms, e) from e
        except (requests.exceptions.ConnectionError, requests.exceptions.ChunkedEncodingError) as e:
            raise HttpFetchError(url, e, retryable=True) from e
        except requests.exceptions.RequestException as e:
            raise HttpFetchError(url, e, retryable=False) from e

        try:
            content_type = resp.headers.get("Content-Type")
            final_url = resp.url or url
            response = HttpResponse(resp.status_code, final_url, content_type)
            if not (response.ok and response.is_html):
                return response
            body = self._read_body(resp, url, timeout_ms, deadline)
            return response._replace(text=body)
        finally:
            resp.close()

    def _arm_deadline(self, resp, deadline: float, expired: threading.Event) -> threading.Timer:
        """Start a timer that shuts the response socket down when `deadline` passes.

        Shutting the socket down wakes a read blocked in another thread; closing
        the response there would wait on the reader's lock instead.
        """
        def _expire():
            expired.set()
            sock = _response_socket(resp)
            if sock is None:
                logger.debug("Deadline passed but no socket to shut down")
                return
            try:
                sock.shutdown(socket.SHUT_RDWR)
            except OSError:
                logger.debug("Socket already closed at deadline")

        timer = self.timer_factory(max(0.0, deadline - self.clock()), _expire)
        timer.daemon = True
        timer.start()
        return timer

    def _read_body(self, resp, url: str, timeout_ms: int, deadline: float) -> str:
        expired = threading.Event()
        timer = self._arm_deadline(resp, deadline, expired)
        chunks = []
        try:
            for chunk in resp.iter_content(chunk_size=CHUNK_SIZE):
                if expired.is_set() or self.clock() > deadline:
                    raise self._timed_out(url, timeout_ms, TimeoutError("deadline exceeded while reading body"))
                if chunk:
                    chunks.append(chunk)
        except requests.exceptions.Timeout as e:
            raise self._timed_out(url, timeout_ms, e) from e
        except (requests.exceptions.RequestException, OSError) as e:
            if expired.is_set():
                raise self._timed_out(url, timeout_ms, e) from e
            if isinstance(e, (requests.exceptions.ConnectionError, requests.exceptions.ChunkedEncodingError)):
                raise HttpFetchError(url, e, retryable=True) from e
            if isinstance(e, requests.exceptions.RequestException):
                raise HttpFetchError(url, e, retryable=False) from e
            raise
        finally:
            timer.cancel()

        # A shut-down socket can also end the body early without an error.
        if expired.is_set():
            raise self._timed_out(url, timeout_ms, TimeoutError("deadline exceeded while reading body"))

        encoding: Optional[str] = resp.encoding or "utf-8"
        raw = b"".join(chunks)
        try:
            return raw.decode(encoding, errors="replace")
        except LookupError:
            return raw.decode("utf-8", errors="replace")
