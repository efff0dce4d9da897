import json

import pytest
from click.testing import CliRunner

from csim.cli import main
from csim.config import Geometry
from csim.core.errors import InvariantViolation
from csim.simulation import Simulation


@pytest.fixture
def runner():
    return CliRunner()


def test_summary_line(runner, yi_trace):
    result = runner.invoke(main, ['-s', '4', '-E', '1', '-b', '4', '-t', yi_trace])
    assert result.exit_code == 0, result.output
    assert result.output.strip() == 'hits:4 misses:5 evictions:3'


def test_verbose_output(runner, yi_trace):
    result = runner.invoke(main, ['-v', '-s', '4', '-E', '1', '-b', '4', '-t', yi_trace])
    assert result.exit_code == 0, result.output
    lines = result.output.splitlines()
    assert lines[0] == 'L 10,1 miss'
    assert lines[-2] == 'M 12,1 miss eviction hit'
    assert lines[-1] == 'hits:4 misses:5 evictions:3'


def test_stack_policy_and_exports(runner, yi_trace, tmp_path):
    results = tmp_path / '.csim_results'
    out_json = tmp_path / 'stats.json'
    result = runner.invoke(main, ['-s', '4', '-E', '2', '-b', '4', '-t', yi_trace, '--policy', 'LRU-stack',
                                  '--results-file', str(results), '--json', str(out_json), '--check'])
    assert result.exit_code == 0, result.output
    assert 'hits:4 misses:5 evictions:2' in result.output
    assert results.read_text() == '4 5 2\n'
    assert json.loads(out_json.read_text())['stats']['evictions'] == 2


@pytest.mark.parametrize('args', [
    ['-E', '1', '-b', '4'],                 # missing -s
    ['-s', '-1', '-E', '1', '-b', '4'],     # negative s
    ['-s', '1', '-E', '0', '-b', '4'],      # no lines per set
    ['-s', '40', '-E', '1', '-b', '30'],    # s + b wider than an address
    ['-s', '1', '-E', '1', '-b', '1', '--policy', 'FIFO'],
])
def test_configuration_errors_exit_nonzero(runner, yi_trace, args):
    result = runner.invoke(main, args + ['-t', yi_trace])
    assert result.exit_code == 2


def test_missing_trace_file(runner, tmp_path):
    result = runner.invoke(main, ['-s', '1', '-E', '1', '-b', '1', '-t', str(tmp_path / 'missing.trace')])
    assert result.exit_code == 2


def test_malformed_trace(runner, write_trace):
    path = write_trace(' L 10,1\n P 10,1\n')
    result = runner.invoke(main, ['-s', '1', '-E', '1', '-b', '1', '-t', path])
    assert result.exit_code == 1
    assert ':2:' in result.output


def test_invariant_violation_aborts_run(runner, yi_trace, monkeypatch):
    def broken_run(self):
        raise InvariantViolation('set index 9 out of range')

    monkeypatch.setattr(Simulation, 'run', broken_run)
    result = runner.invoke(main, ['-s', '1', '-E', '1', '-b', '1', '-t', yi_trace])
    assert result.exit_code == 1
    assert 'internal error' in result.output
    assert 'hits:' not in result.output


def test_simulation_wrapper_verbose_echo(yi_trace):
    lines = []
    sim = Simulation(Geometry(4, 1, 4), yi_trace, verbose=True, echo=lines.append)
    stats = sim.run()
    assert len(lines) == 7
    assert stats.summary() == 'hits:4 misses:5 evictions:3'
    assert sim.simulator.stats is stats
