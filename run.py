"""Entry point for the cache simulator.

Usage:
    python run.py -s 4 -E 1 -b 4 -t traces/yi.trace      # replay a valgrind trace
    python run.py --demo                                 # quick headless check of the core logic
"""
import sys

from csim.config import Geometry
from csim.core.simulator import simulate
from csim.core.trace import parse_lines


DEMO_TRACE = """\
I 0400d7d4,8
 L 10,1
 M 20,1
 L 22,1
 S 18,1
 L 110,1
 L 210,1
 M 12,1
"""


def headless_test():
    # Simple scenario to validate cache logic (the cachelab yi.trace)
    records = parse_lines(DEMO_TRACE.splitlines())
    for geometry in (Geometry(1, 1, 1), Geometry(4, 2, 4), Geometry(2, 1, 4)):
        s = simulate(geometry, records)
        print(f'{geometry}:', s.summary(), f'(hit rate {s.hit_rate:.2f})')


def main():
    if '--demo' in sys.argv:
        headless_test()
    else:
        from csim.cli import main as cli_main
        cli_main()


if __name__ == '__main__':
    main()
