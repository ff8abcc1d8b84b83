from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class PageResult:
    """One completed attempt at a page, as emitted to the page handler."""

    url: str
    depth: int
    links: Tuple[str, ...] = ()
    status: Optional[int] = None
    content_type: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict:
        data = {"url": self.url, "depth": self.depth, "links": list(self.links)}
        if self.status is not None:
            data["status"] = self.status
        if self.content_type is not None:
            data["contentType"] = self.content_type
        if self.error is not None:
            data["error"] = self.error
        return data
