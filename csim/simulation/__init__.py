"""Simulation package shim.

This module exposes the Simulation class at `csim.simulation` so callers can
use `from csim.simulation import Simulation`.
"""

from .simulation import Simulation

__all__ = ["Simulation"]
