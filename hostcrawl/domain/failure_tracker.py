from typing import Dict, List

from hostcrawl.domain.failure_event import FailureEvent
from hostcrawl.domain.page_result import PageResult
from hostcrawl.domain.queue_item import QueueItem


class FailureTracker:
    """Append-only log of failed attempts.

    Outstanding events are indexed per URL as a stack so that `resolve`
    always closes the most recent unresolved one.
    """

    def __init__(self):
        self._log: List[FailureEvent] = []
        self._outstanding: Dict[str, List[int]] = {}

    def record(self, item: QueueItem, page: PageResult, reason: str) -> FailureEvent:
        event = FailureEvent(
            url=page.url,
            depth=item.depth,
            reason=reason,
            attempt=item.attempt + 1,
        )
        self._log.append(event)
        self._outstanding.setdefault(page.url, []).append(len(self._log) - 1)
        return event

    def resolve(self, url: str) -> bool:
        stack = self._outstanding.get(url)
        if not stack:
            return False
        index = stack.pop()
        if not stack:
            del self._outstanding[url]
        self._log[index].resolved_on_retry = True
        return True

    def list(self) -> List[FailureEvent]:
        return list(self._log)

    def unresolved(self) -> List[FailureEvent]:
        return [e for e in self._log if not e.resolved_on_retry]

    def __len__(self) -> int:
        return len(self._log)
