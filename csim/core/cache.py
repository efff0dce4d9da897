"""Core cache implementation

This file provides the set-associative cache model driven by the simulator.
Behavior:
- Cache is composed of 2**s sets; each set has E lines (ways). A set is
  only built the first time an address maps to it, so wide set indexes
  cost nothing until they are used.
- The caller decodes the address (see csim.core.address) and passes
  (set_index, tag) to Cache.access.
- Access returns an AccessResult(outcome, way, evicted_tag) where outcome is
  HIT, MISS (free line filled) or MISS_EVICT (LRU line replaced).
No data is stored, only tags.
"""

import enum
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from csim.config import Geometry
from csim.core.errors import ConfigurationError, InvariantViolation
from csim.core.replacement_policies import LRUReplacement, StackLRUReplacement

logger = logging.getLogger(__name__)

REPLACEMENT_POLICIES = {
    "LRU": LRUReplacement,
    "LRU-stack": StackLRUReplacement,
}


class Outcome(enum.Enum):
    HIT = "hit"
    MISS = "miss"
    MISS_EVICT = "miss eviction"


@dataclass
class AccessResult:
    outcome: Outcome
    way: int
    evicted_tag: Optional[int] = None


@dataclass
class CacheLine:
    """container for a cache line (way).

    Fields:
    - tag: the tag stored in the line
    - valid: whether the line currently holds a tag
    - recency: LRU rank, 1 = most recently used. None until the owning
      set's policy assigns the initial ranks
    """

    tag: Optional[int] = None
    valid: bool = False
    recency: Optional[int] = None


class CacheSet:
    """E lines plus the replacement policy that orders them."""

    def __init__(self, associativity: int, replacement: str = "LRU"):
        if replacement not in REPLACEMENT_POLICIES:
            raise ConfigurationError(
                f"unknown replacement policy {replacement!r}, expected one of {sorted(REPLACEMENT_POLICIES)}"
            )
        self.associativity = associativity
        self.lines: List[CacheLine] = [CacheLine() for _ in range(associativity)]
        self.policy = REPLACEMENT_POLICIES[replacement](associativity)
        self.policy.reset(self.lines)

    def is_full(self) -> bool:
        return all(line.valid for line in self.lines)

    def lookup(self, tag: int) -> Optional[int]:
        """Return the way holding `tag`, or None."""
        found = None
        for wi, line in enumerate(self.lines):
            if line.valid and line.tag == tag:
                if found is not None:
                    raise InvariantViolation(f"tag {tag:#x} present in ways {found} and {wi}")
                found = wi
        return found

    def access(self, tag: int) -> AccessResult:
        wi = self.lookup(tag)
        if wi is not None:
            self.policy.touch(self.lines, wi)
            return AccessResult(Outcome.HIT, wi)

        # miss: the policy hands out the line ranked E, which is free
        # unless the set is full
        full = self.is_full()
        wi = self.policy.fill(self.lines)
        if wi is None:
            raise InvariantViolation("replacement policy returned no line to fill")
        line = self.lines[wi]
        if full:
            evicted = line.tag
            line.tag = tag
            return AccessResult(Outcome.MISS_EVICT, wi, evicted_tag=evicted)
        if line.valid:
            raise InvariantViolation(f"set is not full but way {wi} (tag {line.tag:#x}) was chosen as victim")
        line.tag = tag
        line.valid = True
        return AccessResult(Outcome.MISS, wi)

    def check(self) -> None:
        """Raise InvariantViolation if the ranks or tags are inconsistent."""
        ranks = sorted(line.recency for line in self.lines)
        if ranks != list(range(1, self.associativity + 1)):
            raise InvariantViolation(f"recency ranks {ranks} are not a permutation of 1..{self.associativity}")
        valid = [line for line in self.lines if line.valid]
        tags = [line.tag for line in valid]
        if len(set(tags)) != len(tags):
            raise InvariantViolation(f"duplicate tags in set: {tags}")
        # occupied lines hold the lowest ranks
        if sorted(line.recency for line in valid) != list(range(1, len(valid) + 1)):
            raise InvariantViolation("free line ranked more recent than an occupied line")

    def tags_mru_to_lru(self) -> List[int]:
        return [self.lines[wi].tag for wi in self.policy.peek(self.lines) if self.lines[wi].valid]

    def reset(self) -> None:
        for line in self.lines:
            line.tag = None
            line.valid = False
        self.policy.reset(self.lines)


class Cache:
    """Set-associative cache model for one geometry.
    """

    def __init__(self, geometry: Geometry, replacement: str = "LRU"):
        if replacement not in REPLACEMENT_POLICIES:
            raise ConfigurationError(
                f"unknown replacement policy {replacement!r}, expected one of {sorted(REPLACEMENT_POLICIES)}"
            )
        self.geometry = geometry
        self.associativity = geometry.lines_per_set
        self.num_sets = geometry.num_sets
        self.replacement = replacement
        # set index -> CacheSet, filled on first use
        self.sets: Dict[int, CacheSet] = {}
        logger.debug("built %s cache (%s): %d sets x %d lines, %d-byte blocks",
                     replacement, geometry, self.num_sets, self.associativity, geometry.block_size)

    def access(self, set_index: int, tag: int) -> AccessResult:
        """Look up `tag` in set `set_index`, filling or evicting on a miss."""
        if not 0 <= set_index < self.num_sets:
            raise InvariantViolation(f"set index {set_index} out of range [0, {self.num_sets - 1}]")
        result = self.get_set(set_index).access(tag)
        if result.outcome is Outcome.MISS_EVICT:
            logger.debug("set %d: evicted tag %#x for tag %#x", set_index, result.evicted_tag, tag)
        return result

    def get_set(self, set_index: int) -> CacheSet:
        """Return set `set_index`, building it empty if nothing touched it yet."""
        cache_set = self.sets.get(set_index)
        if cache_set is None:
            cache_set = self.sets[set_index] = CacheSet(self.associativity, self.replacement)
        return cache_set

    def check(self) -> None:
        for cache_set in self.sets.values():
            cache_set.check()

    def reset(self):
        """Clear cache contents and reset replacement policies.
        """
        for cache_set in self.sets.values():
            cache_set.reset()
