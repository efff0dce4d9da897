"""Exceptions raised by the simulator.

- ConfigurationError: bad geometry, unknown policy, unreadable trace file.
  Raised before any access is simulated.
- TraceFormatError: a relevant trace line could not be parsed.
- InvariantViolation: the cache bookkeeping is inconsistent. This means a bug
  in the simulator, never a user error, so nothing in the core catches it.
"""
from typing import Optional


class CacheSimError(Exception):
    """Base class for all simulator errors."""


class ConfigurationError(CacheSimError, ValueError):
    pass


class TraceFormatError(CacheSimError, ValueError):
    def __init__(self, message: str, path: Optional[str] = None, line_no: Optional[int] = None):
        self.path = path
        self.line_no = line_no
        where = ''
        if path is not None:
            where = f"{path}:{line_no}: " if line_no is not None else f"{path}: "
        elif line_no is not None:
            where = f"line {line_no}: "
        super().__init__(where + message)


class InvariantViolation(CacheSimError, RuntimeError):
    pass


__all__ = ["CacheSimError", "ConfigurationError", "TraceFormatError", "InvariantViolation"]
