"""Classified errors for hostcrawl.

Every error the crawler reports is a `CrawlerError` tagged with a `kind`
(what failed) and a `severity` (whether the crawl may continue).
"""
from typing import Any, Dict, Optional

FETCH = "fetch"
PARSE = "parse"
NORMALIZE = "normalize"
CONFIG = "config"
OUTPUT = "output"
INTERNAL = "internal"

ERROR_KINDS = (FETCH, PARSE, NORMALIZE, CONFIG, OUTPUT, INTERNAL)

RECOVERABLE = "recoverable"
FATAL = "fatal"


class CrawlerError(Exception):
    """Raised (or carried in a result) for any classified crawler failure."""

    def __init__(
        self,
        message: str,
        kind: str,
        severity: str = RECOVERABLE,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ):
        if kind not in ERROR_KINDS:
            raise ValueError(f"unknown error kind: {kind}")
        if severity not in (RECOVERABLE, FATAL):
            raise ValueError(f"unknown error severity: {severity}")
        self.message = message
        self.kind = kind
        self.severity = severity
        self.details = dict(details or {})
        self.cause = cause
        super().__init__(message)
        if cause is not None:
            self.__cause__ = cause

    @property
    def name(self) -> str:
        return f"{self.kind.capitalize()}Error"

    @property
    def is_fatal(self) -> bool:
        return self.severity == FATAL

    def __repr__(self):
        return f"<{self.name} severity={self.severity} message={self.message!r}>"


class HttpFetchError(CrawlerError):
    """Raised when an HTTP fetch fails due to network/transport errors."""

    def __init__(
        self,
        url: str,
        original: Exception,
        message: Optional[str] = None,
        retryable: bool = False,
        timed_out: bool = False,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.url = url
        self.original = original
        self.retryable = retryable
        self.timed_out = timed_out
        merged = {"url": url}
        merged.update(details or {})
        super().__init__(
            message or str(original) or "Request failed",
            FETCH,
            severity=RECOVERABLE,
            details=merged,
            cause=original,
        )


def fetch_error(message: str, details=None, severity: str = RECOVERABLE, cause=None) -> CrawlerError:
    return CrawlerError(message, FETCH, severity=severity, details=details, cause=cause)


def parse_error(message: str, details=None, severity: str = RECOVERABLE, cause=None) -> CrawlerError:
    return CrawlerError(message, PARSE, severity=severity, details=details, cause=cause)


def config_error(message: str, details=None, cause=None) -> CrawlerError:
    """Configuration errors are always fatal."""
    return CrawlerError(message, CONFIG, severity=FATAL, details=details, cause=cause)


def internal_error(message: str, details=None, severity: str = FATAL, cause=None) -> CrawlerError:
    return CrawlerError(message, INTERNAL, severity=severity, details=details, cause=cause)


def ensure_crawler_error(
    error: BaseException,
    kind: str = INTERNAL,
    severity: str = FATAL,
    details: Optional[Dict[str, Any]] = None,
) -> CrawlerError:
    """Return `error` unchanged if already classified, otherwise wrap it."""
    if isinstance(error, CrawlerError):
        return error
    message = str(error) or error.__class__.__name__
    return CrawlerError(message, kind, severity=severity, details=details, cause=error)
