"""Simulation wrapper used by the command line.
Loads a trace file, runs it through a fresh cache for the configured
geometry and hands the counters to the exporters.
"""
import logging
from typing import Callable, Optional

from csim.config import DEFAULT_POLICY, Geometry
from csim.core.cache import Cache
from csim.core.simulator import CacheSimulator, format_step
from csim.core.trace import read_trace, total_sub_accesses
from csim.data.stats_export import Exporter, Statistics, export_chart, write_results_file

logger = logging.getLogger(__name__)


class Simulation:
    def __init__(self, geometry: Geometry, trace_path: str, replacement: str = DEFAULT_POLICY,
                 verbose: bool = False, echo: Callable[[str], None] = print, check_invariants: bool = False):
        self.geometry = geometry
        self.trace_path = trace_path
        self.replacement = replacement
        self.verbose = verbose
        self.echo = echo
        self.check_invariants = check_invariants
        self.simulator: Optional[CacheSimulator] = None

    def run(self) -> Statistics:
        # the whole trace is parsed before the first access is simulated
        records = read_trace(self.trace_path)
        logger.info("simulating %d records (%d accesses) from %s with %s",
                    len(records), total_sub_accesses(records), self.trace_path, self.geometry)
        self.simulator = CacheSimulator(Cache(self.geometry, replacement=self.replacement),
                                        check_invariants=self.check_invariants)
        self.simulator.load_sequence(records)
        callback = self._print_step if self.verbose else None
        return self.simulator.run_all(callback)

    def _print_step(self, info: dict):
        self.echo(format_step(info))

    def export(self, stats: Statistics, results_file: Optional[str] = None, csv_path: Optional[str] = None,
               json_path: Optional[str] = None, chart_path: Optional[str] = None):
        saved = []
        if results_file:
            saved.append(write_results_file(results_file, stats.hits, stats.misses, stats.evictions))
        if csv_path:
            saved.append(Exporter.export_stats_csv(csv_path, stats, self.geometry))
        if json_path:
            saved.append(Exporter.export_stats_json(json_path, stats, self.geometry))
        if chart_path:
            saved.append(export_chart(stats.history, chart_path, title=f"{self.trace_path} ({self.geometry})"))
        for path in saved:
            logger.info("wrote %s", path)
        return saved
