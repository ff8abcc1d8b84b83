import json
import logging
from typing import Any, Dict, Optional

from hostcrawl.exceptions import CrawlerError, FATAL, INTERNAL, ensure_crawler_error

logger = logging.getLogger(__name__)


def _serialise_details(details: Dict[str, Any]) -> str:
    entries = sorted((k, v) for k, v in details.items() if v is not None)
    return " ".join(f"{k}={json.dumps(v, default=str)}" for k, v in entries)


def build_log_message(error: CrawlerError, context: Optional[Dict[str, Any]] = None) -> str:
    details = dict(error.details)
    details.update(context or {})
    message = f"[{error.kind}/{error.severity}] {error.message}"
    suffix = _serialise_details(details)
    return f"{message} ({suffix})" if suffix else message


def report_crawler_error(
    error: BaseException,
    context: Optional[Dict[str, Any]] = None,
    default_kind: str = INTERNAL,
    default_severity: str = FATAL,
    throw_on_fatal: bool = True,
) -> CrawlerError:
    """Classify `error`, log it once, and re-raise it when fatal (unless told not to)."""
    crawler_error = ensure_crawler_error(error, kind=default_kind, severity=default_severity, details=context)
    message = build_log_message(crawler_error, context)

    if crawler_error.is_fatal:
        logger.error(message)
        if throw_on_fatal:
            raise crawler_error
    else:
        logger.warning(message)

    return crawler_error
