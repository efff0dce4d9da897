"""Statistics and exporter.
"""
import csv
import json
import logging
from typing import Dict, List, Optional

from csim.core.cache import AccessResult, Outcome
from csim.core.errors import InvariantViolation

logger = logging.getLogger(__name__)


def format_summary(hits: int, misses: int, evictions: int) -> str:
    """The cachelab summary line."""
    return f"hits:{hits} misses:{misses} evictions:{evictions}"


def write_results_file(path: str, hits: int, misses: int, evictions: int) -> str:
    """Write the counters the way the cachelab driver expects them (`H M V`)."""
    with open(path, 'w', encoding='utf-8') as fh:
        fh.write(f"{hits} {misses} {evictions}\n")
    return path


def export_chart_json(hit_rate_history: List[float], stats: Dict[str, float], fpath: str) -> str:
    """Export hit-rate history and stats to a JSON file. Returns saved path.
    """
    data = {
        'hit_rate_history': list(hit_rate_history),
        'stats': stats
    }
    with open(fpath, 'w', encoding='utf-8') as fh:
        json.dump(data, fh, indent=2)
    return fpath


def export_chart(hit_rate_history: List[float], fpath: str, title: Optional[str] = None) -> str:
    """Render the hit-rate history (one sample per trace record) with matplotlib.
    The format follows the file extension (pdf, png, svg...).
    """
    # Use matplotlib without a display
    import matplotlib
    matplotlib.use('Agg')
    import matplotlib.pyplot as plt

    data = list(hit_rate_history) or [0]
    fig, ax = plt.subplots(figsize=(6, 2))
    ax.plot(range(len(data)), data, color='#FFA500', linewidth=2)
    ax.fill_between(range(len(data)), data, color='#FFA500', alpha=0.1)
    ax.set_ylim(0, 1)
    ax.set_xlabel('Record')
    ax.set_ylabel('Hit rate')
    if title:
        ax.set_title(title)
    ax.grid(False)
    fig.tight_layout()
    fig.savefig(fpath, dpi=150)
    plt.close(fig)
    logger.debug("saved hit-rate chart with %d samples to %s", len(data), fpath)
    return fpath


class Statistics:
    def __init__(self):
        self.reset()

    def reset(self):
        # counters start from zero
        self.hits = 0
        self.misses = 0
        self.evictions = 0
        self.records = 0
        self.history: List[float] = []

    def record(self, result: AccessResult):
        # the only place the counters change: call this for every sub-access
        if result.outcome is Outcome.HIT:
            self.hits += 1
        elif result.outcome is Outcome.MISS:
            self.misses += 1
        elif result.outcome is Outcome.MISS_EVICT:
            self.misses += 1
            self.evictions += 1
        else:
            raise InvariantViolation(f"unknown access outcome {result.outcome!r}")

    def end_record(self):
        self.records += 1
        self.history.append(self.hit_rate)

    @property
    def accesses(self):
        return self.hits + self.misses

    @property
    def hit_rate(self):
        return (self.hits / self.accesses) if self.accesses else 0.0

    @property
    def miss_rate(self):
        return (self.misses / self.accesses) if self.accesses else 0.0

    def as_dict(self) -> Dict[str, float]:
        return {
            'records': self.records,
            'accesses': self.accesses,
            'hits': self.hits,
            'misses': self.misses,
            'evictions': self.evictions,
            'hit_rate': self.hit_rate,
            'miss_rate': self.miss_rate,
        }

    def summary(self) -> str:
        return format_summary(self.hits, self.misses, self.evictions)


class Exporter:
    @staticmethod
    def export_stats_csv(path: str, stats: Statistics, geometry=None):
        header = ['records', 'accesses', 'hits', 'misses', 'evictions', 'hit_rate', 'miss_rate']
        row = [stats.records, stats.accesses, stats.hits, stats.misses, stats.evictions,
               stats.hit_rate, stats.miss_rate]
        if geometry is not None:
            header = ['s', 'E', 'b'] + header
            row = [geometry.set_bits, geometry.lines_per_set, geometry.block_bits] + row
        with open(path, 'w', newline='') as f:
            writer = csv.writer(f)
            writer.writerow(header)
            writer.writerow(row)
        return path

    @staticmethod
    def export_stats_json(path: str, stats: Statistics, geometry=None):
        data = stats.as_dict()
        if geometry is not None:
            data = {'s': geometry.set_bits, 'E': geometry.lines_per_set, 'b': geometry.block_bits, **data}
        return export_chart_json(stats.history, data, path)
