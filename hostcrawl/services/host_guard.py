import logging
from urllib.parse import urlsplit

logger = logging.getLogger(__name__)


def same_host(a: str, b: str) -> bool:
    """True when both URLs have the same (case-insensitive) hostname.

    Subdomains count as different hosts. Unparseable input is treated as
    external and never raises.
    """
    try:
        host_a = urlsplit(a).hostname
        host_b = urlsplit(b).hostname
    except (ValueError, TypeError, AttributeError):
        logger.debug("Error comparing hosts: a=%r, b=%r", a, b)
        return False
    if not host_a or not host_b:
        return False
    return host_a.lower() == host_b.lower()
