"""Test configuration for pytest.

Ensure the repository root is on sys.path so tests can import the `csim` package
without needing PYTHONPATH set externally, and provide a helper to write
small trace files.
"""
import os
import sys

import pytest

# Compute project root: two directories above this file (csim/tests -> csim -> project root)
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..', '..'))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)


# the trace shipped with the cachelab handout as traces/yi.trace
YI_TRACE = """\
 L 10,1
 M 20,1
 L 22,1
 S 18,1
 L 110,1
 L 210,1
 M 12,1
"""


@pytest.fixture
def write_trace(tmp_path):
    """Return a function writing `text` to a trace file and returning its path."""
    def _write(text, name='test.trace'):
        path = tmp_path / name
        path.write_text(text)
        return str(path)
    return _write


@pytest.fixture
def yi_trace(write_trace):
    return write_trace(YI_TRACE, 'yi.trace')
