"""Canonical URL keys.

Every URL that enters the frontier, the seen-set or a PageResult goes
through `normalize_url` first, so two spellings of the same page compare
equal as plain strings.
"""
import logging
from typing import Optional
from urllib.parse import quote, urljoin, urlsplit, urlunsplit

logger = logging.getLogger(__name__)

DEFAULT_PORTS = {"http": 80, "https": 443}

TRACKING_PARAMS = frozenset({
    "gclid", "fbclid", "mc_cid", "mc_eid", "msclkid", "_ga", "yclid", "igshid",
})
TRACKING_PREFIXES = ("utm_",)

# Characters left as-is when re-quoting a path; '%' keeps existing escapes intact.
_PATH_SAFE = "/%:@!$&'()*+,;=-._~"


def _is_tracking_param(pair: str) -> bool:
    key = pair.split("=", 1)[0].lower()
    return key in TRACKING_PARAMS or key.startswith(TRACKING_PREFIXES)


def strip_tracking_params(query: str) -> str:
    """Drop known tracking parameters, keeping the others in their original order."""
    if not query:
        return query
    kept = [pair for pair in query.split("&") if pair and not _is_tracking_param(pair)]
    return "&".join(kept)


def normalize_url(raw: str, base: str, strip_tracking: bool = False) -> Optional[str]:
    """Resolve `raw` against `base` and return its canonical form.

    Returns None for malformed input and for anything that is not http(s).
    """
    if raw is None:
        return None
    try:
        joined = urljoin(base, raw.strip())
        parts = urlsplit(joined)
        scheme = parts.scheme.lower()
        if scheme not in DEFAULT_PORTS:
            return None
        host = parts.hostname
        if not host:
            return None
        port = parts.port
    except ValueError:
        logger.debug("Unable to normalize %r against %r", raw, base)
        return None

    host = host.lower()
    if ":" in host:
        host = f"[{host}]"
    netloc = host
    if port is not None and port != DEFAULT_PORTS[scheme]:
        netloc = f"{host}:{port}"
    if parts.username is not None:
        userinfo = parts.username
        if parts.password is not None:
            userinfo = f"{userinfo}:{parts.password}"
        netloc = f"{userinfo}@{netloc}"

    path = quote(parts.path, safe=_PATH_SAFE) or "/"
    if path != "/":
        path = path.rstrip("/") or "/"

    query = strip_tracking_params(parts.query) if strip_tracking else parts.query
    return urlunsplit((scheme, netloc, path, query, ""))


def normalize_or_fallback(url: str, strip_tracking: bool = False) -> str:
    """Normalize an absolute URL against itself, falling back to the input."""
    normalized = normalize_url(url, url, strip_tracking=strip_tracking)
    return normalized if normalized is not None else url
