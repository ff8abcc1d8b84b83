import heapq
import itertools
from collections import deque
from typing import List, Optional

from hostcrawl.domain.queue_item import QueueItem


class FrontierQueue:
    """
    Pending crawl work plus the set of URLs ever enqueued.

    A URL enters the seen-set at most once per crawl. Retries go back on
    the queue through `enqueue_retry` and never touch the seen-set.

    Ordering is strict FIFO by default. With `priority="shallow"` the
    shallowest pending item is dequeued first, FIFO among equal depths.
    """

    def __init__(self, seed_url: str, priority: str = "none"):
        if priority not in ("none", "shallow"):
            raise ValueError(f"unsupported priority mode: {priority}")
        self._shallow = priority == "shallow"
        self._fifo: "deque[QueueItem]" = deque()
        self._heap: List[tuple] = []
        self._sequence = itertools.count()
        self._seen: set = set()
        self.enqueued = 0
        self.dequeued = 0

        self.mark_seen(seed_url)
        self._push(QueueItem(seed_url, 0, 0))

    def _push(self, item: QueueItem) -> None:
        if self._shallow:
            heapq.heappush(self._heap, (item.depth, next(self._sequence), item))
        else:
            self._fifo.append(item)
        self.enqueued += 1

    def mark_seen(self, url: str) -> None:
        self._seen.add(url)

    def is_seen(self, url: str) -> bool:
        return url in self._seen

    def enqueue_if_new(self, url: str, depth: int) -> bool:
        """Enqueue `url` unless it was seen before. Returns False on duplicates."""
        if url in self._seen:
            return False
        self.mark_seen(url)
        self._push(QueueItem(url, depth, 0))
        return True

    def enqueue_retry(self, item: QueueItem) -> None:
        self._push(item)

    def dequeue(self) -> Optional[QueueItem]:
        if self._shallow:
            if not self._heap:
                return None
            item = heapq.heappop(self._heap)[2]
        else:
            if not self._fifo:
                return None
            item = self._fifo.popleft()
        self.dequeued += 1
        return item

    def pending_items(self) -> List[QueueItem]:
        """Pending items in dequeue order, without removing them."""
        if self._shallow:
            return [entry[2] for entry in sorted(self._heap)]
        return list(self._fifo)

    @property
    def pending(self) -> int:
        return len(self._heap) if self._shallow else len(self._fifo)

    @property
    def unique_count(self) -> int:
        return len(self._seen)

    def __len__(self) -> int:
        return self.pending
