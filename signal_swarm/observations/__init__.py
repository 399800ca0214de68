"""
Observation tools. Watch before you hypothesize.
"""

from .visualize import SignalVisualizer, animate_study

__all__ = ["SignalVisualizer", "animate_study"]
