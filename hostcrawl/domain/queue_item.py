from typing import NamedTuple


class QueueItem(NamedTuple):
    """A unit of pending work in the frontier."""
    url: str
    depth: int
    attempt: int = 0

    def next_attempt(self) -> "QueueItem":
        return self._replace(attempt=self.attempt + 1)
