"""Cache geometry and run configuration.

A geometry is the cachelab triple (s, E, b):
  num_sets   = 2 ** s
  lines/set  = E
  block size = 2 ** b bytes
It is validated once when created and never changes afterwards.
"""
from dataclasses import dataclass

from csim.core.errors import ConfigurationError

# addresses in the trace are 64-bit
ADDRESS_WIDTH = 64

DEFAULT_POLICY = "LRU"
RESULTS_FILE = ".csim_results"


@dataclass(frozen=True)
class Geometry:
    set_bits: int
    lines_per_set: int
    block_bits: int

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        for name in ("set_bits", "lines_per_set", "block_bits"):
            value = getattr(self, name)
            # bool is an int subclass, but True/False make no sense here
            if not isinstance(value, int) or isinstance(value, bool):
                raise ConfigurationError(f"{name} must be an integer, got {value!r}")
            if value < 0:
                raise ConfigurationError(f"{name} must be >= 0, got {value}")
        if self.lines_per_set < 1:
            raise ConfigurationError("lines_per_set (E) must be >= 1")
        if self.set_bits + self.block_bits > ADDRESS_WIDTH:
            raise ConfigurationError(
                f"s + b = {self.set_bits + self.block_bits} exceeds the {ADDRESS_WIDTH}-bit address width"
            )

    @property
    def num_sets(self) -> int:
        return 1 << self.set_bits

    @property
    def block_size(self) -> int:
        return 1 << self.block_bits

    @property
    def capacity_bytes(self) -> int:
        return self.num_sets * self.lines_per_set * self.block_size

    def __str__(self):
        return f"s={self.set_bits} E={self.lines_per_set} b={self.block_bits}"
