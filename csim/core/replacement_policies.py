"""LRU replacement policies for a single cache set.

Both policies keep a recency rank on every line of their set:
rank 1 is the most recently used line, rank E the least recently used one.
Free lines always carry the highest ranks, so the line ranked E is either
free (set not full) or the eviction victim (set full).

API (methods), called by CacheSet with the set's lines:
- touch(lines, way): `way` was hit, make it MRU
- fill(lines) -> way: pick the line that receives a new tag and make it MRU
- peek(lines) -> list of ways from MRU to LRU (for debug / verbose output)
- reset(lines): restore the initial ranks

Two interchangeable implementations are provided:

- LRUReplacement: a flat aging counter per line. Every access is one pass
  over the E lines, no sorting.
- StackLRUReplacement: an explicit MRU -> LRU ordering kept in an
  OrderedDict; the ranks written back to the lines are the positions in
  that ordering. Slower, but obviously correct, which makes it a good
  cross-check for the aging version.
"""

from collections import OrderedDict
from typing import List, Sequence


class LRUReplacement:
    """Least-Recently-Used replacement using aging counters."""

    def __init__(self, capacity: int):
        self.capacity = int(capacity)

    def reset(self, lines: Sequence) -> None:
        for i, line in enumerate(lines):
            line.recency = i + 1

    def touch(self, lines: Sequence, way: int) -> None:
        """Register a hit on `way`"""
        rank = lines[way].recency
        for line in lines:
            # lines older than the hit line keep their rank
            if line.recency < rank:
                line.recency += 1
        lines[way].recency = 1

    def fill(self, lines: Sequence) -> int:
        """Age every line by one; the line that was ranked E becomes MRU."""
        way = None
        for i, line in enumerate(lines):
            if line.recency == self.capacity:
                line.recency = 1
                way = i
            else:
                line.recency += 1
        return way

    def peek(self, lines: Sequence) -> List[int]:
        """Return ways from MRU->LRU as list."""
        return sorted(range(len(lines)), key=lambda i: lines[i].recency)


class StackLRUReplacement:
    """Least-Recently-Used replacement using OrderedDict.

    The OrderedDict holds ways from LRU (front) to MRU (end); accessed ways
    are moved to the end.
    """

    def __init__(self, capacity: int):
        self.capacity = int(capacity)
        self._od = OrderedDict()

    def reset(self, lines: Sequence) -> None:
        self._od.clear()
        # way 0 starts as MRU, way E-1 as LRU, same as the aging counters
        for way in reversed(range(len(lines))):
            self._od[way] = True
        self._sync(lines)

    def touch(self, lines: Sequence, way: int) -> None:
        self._od.move_to_end(way)
        self._sync(lines)

    def fill(self, lines: Sequence) -> int:
        way = next(iter(self._od))
        self._od.move_to_end(way)
        self._sync(lines)
        return way

    def peek(self, lines: Sequence) -> List[int]:
        return list(reversed(self._od.keys()))

    def _sync(self, lines: Sequence) -> None:
        for rank, way in enumerate(reversed(self._od.keys()), start=1):
            lines[way].recency = rank


__all__ = ["LRUReplacement", "StackLRUReplacement"]
