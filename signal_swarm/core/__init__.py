"""
Core components of the signal-swarm system.

- agent: SpatialAgent - role cadence and connection state machine
- proximity: who can hear whom
- events: what agents tell the controller
"""

from .agent import SpatialAgent, AgentConfig, Role, KeepAlivePolicy
from .errors import ConfigurationError, InvariantViolation
from .events import Connected, Disconnected, EventKind, EventSink, RecordingSink
from .proximity import is_close, distance

__all__ = [
    "SpatialAgent",
    "AgentConfig",
    "Role",
    "KeepAlivePolicy",
    "ConfigurationError",
    "InvariantViolation",
    "Connected",
    "Disconnected",
    "EventKind",
    "EventSink",
    "RecordingSink",
    "is_close",
    "distance",
]
