"""Command line entry point.

    csim -s 4 -E 1 -b 4 -t traces/yi.trace
    csim -v -s 1 -E 2 -b 4 -t traces/yi.trace --chart yi.pdf

Prints `hits:H misses:M evictions:V` at the end of the run. Configuration
problems exit with status 2, bad traces and internal errors with status 1.
"""
import logging

import click

from csim.config import DEFAULT_POLICY, RESULTS_FILE, Geometry
from csim.core.cache import REPLACEMENT_POLICIES
from csim.core.errors import ConfigurationError, InvariantViolation, TraceFormatError
from csim.simulation import Simulation

logger = logging.getLogger(__name__)

LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR']


@click.command(context_settings={'help_option_names': ['-h', '--help']})
@click.option('-s', 'set_bits', type=click.IntRange(min=0), required=True,
              help='Number of set index bits (S = 2^s is the number of sets)')
@click.option('-E', 'lines_per_set', type=click.IntRange(min=1), required=True,
              help='Associativity (number of lines per set)')
@click.option('-b', 'block_bits', type=click.IntRange(min=0), required=True,
              help='Number of block bits (B = 2^b is the block size)')
@click.option('-t', 'trace_file', type=click.Path(exists=True, dir_okay=False), required=True,
              help='Name of the valgrind trace to replay')
@click.option('-v', 'verbose', is_flag=True, help='Optional verbose flag that displays trace info')
@click.option('--policy', type=click.Choice(sorted(REPLACEMENT_POLICIES)), default=DEFAULT_POLICY, show_default=True,
              help='LRU bookkeeping: aging counters (LRU) or an ordered stack (LRU-stack)')
@click.option('--results-file', type=click.Path(dir_okay=False), default=None,
              help=f'Also write "hits misses evictions" to this file (cachelab uses {RESULTS_FILE})')
@click.option('--csv', 'csv_path', type=click.Path(dir_okay=False), default=None, help='Export statistics as CSV')
@click.option('--json', 'json_path', type=click.Path(dir_okay=False), default=None,
              help='Export statistics and hit-rate history as JSON')
@click.option('--chart', 'chart_path', type=click.Path(dir_okay=False), default=None,
              help='Plot the hit-rate history (pdf, png, svg)')
@click.option('--check', 'check_invariants', is_flag=True, help='Verify LRU bookkeeping after every record')
@click.option('--log-level', type=click.Choice(LOG_LEVELS, case_sensitive=False), default='WARNING',
              show_default=True)
def main(set_bits, lines_per_set, block_bits, trace_file, verbose, policy, results_file, csv_path, json_path,
         chart_path, check_invariants, log_level):
    """Simulate an LRU set-associative cache against a valgrind memory trace."""
    logging.basicConfig(level=log_level.upper(), format='%(levelname)s %(name)s: %(message)s')
    try:
        geometry = Geometry(set_bits, lines_per_set, block_bits)
    except ConfigurationError as e:
        raise click.UsageError(str(e))

    sim = Simulation(geometry, trace_file, replacement=policy, verbose=verbose, echo=click.echo,
                     check_invariants=check_invariants)
    try:
        stats = sim.run()
    except ConfigurationError as e:
        raise click.UsageError(str(e))
    except TraceFormatError as e:
        raise click.ClickException(str(e))
    except InvariantViolation as e:
        logger.exception("cache bookkeeping is inconsistent, aborting the run")
        raise click.ClickException(f"internal error: {e}")

    click.echo(stats.summary())
    try:
        sim.export(stats, results_file=results_file, csv_path=csv_path, json_path=json_path, chart_path=chart_path)
    except OSError as e:
        raise click.ClickException(f"cannot write output: {e}")


if __name__ == '__main__':
    main()
