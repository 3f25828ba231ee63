import heapq
import itertools
from collections.abc import Mapping


class BoundedMinHeap:
    """
    Min-heap that never holds more than `capacity` entries.

    Pushing past capacity evicts the smallest score. Among equal scores the
    most recently pushed entry is the smallest, so earlier entries survive
    and rank first in `ranked()`. Keys are never compared.
    """

    def __init__(self, capacity):
        self.capacity = max(capacity, 0)
        self._heap = []
        self._counter = itertools.count()

    def push(self, key, score):
        if self.capacity == 0:
            return
        entry = (score, -next(self._counter), key)
        if len(self._heap) < self.capacity:
            heapq.heappush(self._heap, entry)
        else:
            heapq.heappushpop(self._heap, entry)

    def __len__(self):
        return len(self._heap)

    def ranked(self):
        """Current members as (key, score), highest score first."""
        ordered = sorted(self._heap, key=lambda e: (e[0], e[1]), reverse=True)
        return [(key, score) for score, _, key in ordered]


def top_k(scores, k):
    """
    The k best (key, score) pairs, highest first.

    `scores` is a mapping of key -> score or an iterable of (key, score)
    pairs. Returns min(k, len(scores)) entries; ties keep input order.
    """
    items = scores.items() if isinstance(scores, Mapping) else scores
    heap = BoundedMinHeap(k)
    for key, score in items:
        heap.push(key, score)
    return heap.ranked()
