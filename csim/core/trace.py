"""Valgrind trace reader.

Trace lines look like:

    I 0400d7d4,8
     L 7ff0005b8,8
     S 7ff0005c8,8
     M 0421c7f0,4

Only data accesses are relevant; they start with a space. Instruction
fetches (`I`, no leading space) and blank lines are skipped. The address is
hex, the size after the comma is decimal.
"""

import enum
import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional

from csim.core.errors import ConfigurationError, TraceFormatError

logger = logging.getLogger(__name__)


class Operation(enum.Enum):
    LOAD = "L"
    STORE = "S"
    MODIFY = "M"

    @property
    def sub_accesses(self) -> int:
        # a modify is a load followed by a store to the same address
        return 2 if self is Operation.MODIFY else 1


@dataclass(frozen=True)
class AccessRecord:
    op: Operation
    address: int
    size: int = 1
    line_no: Optional[int] = None

    def __str__(self):
        return f"{self.op.value} {self.address:x},{self.size}"


def parse_line(line: str, line_no: Optional[int] = None, path: Optional[str] = None) -> Optional[AccessRecord]:
    """Parse one trace line. Returns None for lines that are not data accesses."""
    if not line.startswith(" ") or not line.strip():
        return None
    parts = line.split()
    if len(parts) != 2:
        raise TraceFormatError(f"expected 'op address,size', got {line.strip()!r}", path, line_no)
    op_str, operand = parts
    try:
        op = Operation(op_str)
    except ValueError:
        raise TraceFormatError(f"unknown operation {op_str!r}", path, line_no) from None
    addr_str, _, size_str = operand.partition(",")
    try:
        address = int(addr_str, 16)
        size = int(size_str) if size_str else 1
    except ValueError:
        raise TraceFormatError(f"bad operand {operand!r}", path, line_no) from None
    if address < 0 or address >= 1 << 64:
        raise TraceFormatError(f"address {addr_str} does not fit in 64 bits", path, line_no)
    return AccessRecord(op, address, size, line_no)


def parse_lines(lines: Iterable[str], path: Optional[str] = None) -> List[AccessRecord]:
    records = []
    for line_no, line in enumerate(lines, start=1):
        record = parse_line(line.rstrip("\r\n"), line_no, path)
        if record is not None:
            records.append(record)
    return records


def read_trace(path: str) -> List[AccessRecord]:
    """Read and parse a whole trace file before the simulation starts."""
    try:
        with open(path, "r", encoding="utf-8") as fh:
            records = parse_lines(fh, path=path)
    except OSError as e:
        raise ConfigurationError(f"cannot read trace file {path}: {e.strerror or e}") from e
    logger.debug("read %d access records from %s", len(records), path)
    return records


def total_sub_accesses(records: Iterable[AccessRecord]) -> int:
    return sum(r.op.sub_accesses for r in records)
