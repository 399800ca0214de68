"""
Environments where agents live and signal.

- signal_field: flat 2D field with a tick-driven simulation engine
"""

from .signal_field import SimulationEngine, FieldConfig

__all__ = ["SimulationEngine", "FieldConfig"]
