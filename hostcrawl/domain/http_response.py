from typing import NamedTuple, Optional


class HttpResponse(NamedTuple):
    """Response from HTTP fetch operation."""
    status_code: int
    url: str
    content_type: Optional[str] = None
    text: Optional[str] = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def is_html(self) -> bool:
        return bool(self.content_type) and "text/html" in self.content_type.lower()
