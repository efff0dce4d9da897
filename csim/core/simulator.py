"""CacheSimulator coordinates cache accesses and statistics.
Feeds access records into the core Cache and updates the counters.
"""
import logging
from typing import Callable, Iterable, List, Optional

from csim.config import DEFAULT_POLICY, Geometry
from csim.core.address import decode
from csim.core.cache import AccessResult, Cache, Outcome
from csim.core.errors import InvariantViolation
from csim.core.trace import AccessRecord
from csim.data.stats_export import Statistics

logger = logging.getLogger(__name__)


class CacheSimulator:
    def __init__(self, cache: Cache, stats: Optional[Statistics] = None, check_invariants: bool = False):
        self.cache = cache
        self.stats = stats or Statistics()
        self.check_invariants = check_invariants
        self.sequence: List[AccessRecord] = []
        self.index = 0

    @property
    def geometry(self) -> Geometry:
        return self.cache.geometry

    def reset(self):
        # clear stats and rewind the sequence pointer
        self.stats.reset()
        self.index = 0
        # also clear cache contents
        self.cache.reset()

    def load_sequence(self, records: Iterable[AccessRecord]):
        self.sequence = list(records)
        self.index = 0

    def has_next(self) -> bool:
        return self.index < len(self.sequence)

    def _access_record(self, record: AccessRecord, set_index: int, tag: int) -> List[AccessResult]:
        results = []
        # a modify is the same access twice: load, then store
        for n in range(record.op.sub_accesses):
            result = self.cache.access(set_index, tag)
            if n > 0 and result.outcome is not Outcome.HIT:
                raise InvariantViolation(
                    f"store half of modify {record} missed in set {set_index} right after its load"
                )
            self.stats.record(result)
            results.append(result)
        return results

    def step(self) -> Optional[dict]:
        if not self.has_next():
            return None
        record = self.sequence[self.index]
        self.index += 1

        g = self.geometry
        set_index, tag = decode(record.address, g.set_bits, g.block_bits)
        results = self._access_record(record, set_index, tag)
        self.stats.end_record()
        if self.check_invariants:
            self.cache.get_set(set_index).check()

        return {
            'record': record,
            'set_index': set_index,
            'tag': tag,
            'results': results,
            'stats': {
                'hits': self.stats.hits,
                'misses': self.stats.misses,
                'evictions': self.stats.evictions,
            },
        }

    def run_all(self, callback: Optional[Callable[[dict], None]] = None) -> Statistics:
        while self.has_next():
            info = self.step()
            if callback:
                callback(info)
        logger.debug("simulated %d records: %s", self.stats.records, self.stats.summary())
        return self.stats


def simulate(geometry: Geometry, records: Iterable[AccessRecord], replacement: str = DEFAULT_POLICY,
             callback: Optional[Callable[[dict], None]] = None, check_invariants: bool = False) -> Statistics:
    """Run one whole trace against a fresh cache and return the counters."""
    sim = CacheSimulator(Cache(geometry, replacement=replacement), check_invariants=check_invariants)
    sim.load_sequence(records)
    return sim.run_all(callback)


def format_step(info: dict) -> str:
    """Verbose line for one record, e.g. `M 20,1 miss eviction hit`."""
    outcomes = ' '.join(r.outcome.value for r in info['results'])
    return f"{info['record']} {outcomes}"


__all__ = ["CacheSimulator", "simulate", "format_step"]
