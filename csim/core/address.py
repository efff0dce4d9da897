"""Address decoding.

  address = | tag | set index (s bits) | block offset (b bits) |

  set_index = (address >> b) & (2**s - 1)
  tag       = address >> (s + b)

With s == 0 every address lands in set 0 (one fully associative set). With
b == 0 nothing is dropped as block offset.
"""
from typing import Tuple

from csim.core.errors import InvariantViolation

MAX_ADDRESS = (1 << 64) - 1


def decode(address: int, set_bits: int, block_bits: int) -> Tuple[int, int]:
    """Split `address` into (set_index, tag)."""
    if address < 0 or address > MAX_ADDRESS:
        raise ValueError(f"address {address:#x} is not an unsigned 64-bit value")
    set_index = (address >> block_bits) & ((1 << set_bits) - 1)
    if set_index >= (1 << set_bits):
        raise InvariantViolation(f"set index {set_index} out of range for s={set_bits}")
    tag = address >> (set_bits + block_bits)
    return set_index, tag
