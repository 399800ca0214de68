"""
core/agent.py

An agent speaks, then listens, then speaks again.

Each agent keeps its own tempo: a period drawn once at birth
and honored for life. While listening it may hear a nearby
speaker and hold a link open. Silence closes the link.

Inspired by:
- Firefly flashing (individual cadence)
- Keep-alive heartbeats
- Walkie-talkie turn taking
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Hashable, Optional, Tuple

import numpy as np

from .errors import ConfigurationError, InvariantViolation
from .events import Connected, Disconnected
from .proximity import distance


class Role(Enum):
    """What an agent is doing right now."""
    EMITTING = "E"
    RECEIVING = "R"

    def flipped(self) -> Role:
        return Role.RECEIVING if self is Role.EMITTING else Role.EMITTING


class KeepAlivePolicy(Enum):
    """How a connected receiver treats signals from a different emitter."""
    ANY_EMITTER = "any"      # Any emitter keeps the link alive; last one wins
    SAME_EMITTER = "same"    # Only the emitter that opened the episode counts


@dataclass
class AgentConfig:
    """
    The unchanging nature of an agent.
    Set at birth, honored throughout life.

    Times are in seconds.
    """
    role_switch_range: Tuple[float, float] = (0.5, 1.5)   # Cadence drawn from here
    disconnect_timeout: float = 1.0                       # Silence before a link lapses
    keep_alive_policy: KeepAlivePolicy = KeepAlivePolicy.ANY_EMITTER

    def validate(self) -> None:
        low, high = self.role_switch_range
        if low <= 0 or high < low:
            raise ConfigurationError(
                f"role_switch_range must satisfy 0 < low <= high, got {self.role_switch_range}"
            )
        if self.disconnect_timeout <= 0:
            raise ConfigurationError(
                f"disconnect_timeout must be positive, got {self.disconnect_timeout}"
            )


class SpatialAgent:
    """
    A single agent in the swarm.

    Two orthogonal pieces of state:
    - role: EMITTING or RECEIVING, flipped on a private cadence
    - connection: a pending disconnect deadline, present only while linked

    The agent never polls the clock. Whoever drives it passes `now`.
    Transitions return the event they produce (or None); delivering it
    is the caller's job.
    """

    def __init__(
        self,
        agent_id: Hashable,
        position: Optional[np.ndarray] = None,
        config: Optional[AgentConfig] = None,
        rng: Optional[np.random.Generator] = None,
        role_switch_period: Optional[float] = None,
        start_time: float = 0.0,
    ):
        self.config = config or AgentConfig()
        self.config.validate()

        self._id = agent_id
        self.position = np.asarray(
            position if position is not None else (0.0, 0.0), dtype=np.float64
        )

        if role_switch_period is None:
            rng = rng or np.random.default_rng()
            low, high = self.config.role_switch_range
            role_switch_period = float(rng.uniform(low, high))
        elif role_switch_period <= 0:
            raise ConfigurationError(
                f"role_switch_period must be positive, got {role_switch_period}"
            )
        self.role_switch_period = float(role_switch_period)

        self.role = Role.EMITTING
        self.last_role_switch_time = float(start_time)

        # Connection sub-state
        self.connected_to: Optional[Hashable] = None
        self.disconnect_deadline: Optional[float] = None

    @property
    def id(self) -> Hashable:
        return self._id

    @property
    def connected(self) -> bool:
        """True iff a disconnect deadline is pending."""
        return self.disconnect_deadline is not None

    # ==================== Transitions ====================

    def advance_role(self, now: float) -> bool:
        """
        Flip role once the private period has elapsed.

        Returns True if a flip happened. Calling again within the same
        period is a no-op, since the switch time resets to `now`.
        """
        if now - self.last_role_switch_time >= self.role_switch_period:
            self.role = self.role.flipped()
            self.last_role_switch_time = now
            return True
        return False

    def on_signal_received(self, emitter_id: Hashable, now: float) -> Optional[Connected]:
        """
        React to a signal from a nearby emitter.

        Not connected: open an episode, emit Connected, set the deadline.
        Already connected: refresh the deadline (keep-alive), emit nothing.
        """
        if self.role is not Role.RECEIVING:
            raise InvariantViolation(
                f"Agent {self.id} received a signal while {self.role.name}"
            )
        if emitter_id == self.id:
            raise InvariantViolation(f"Agent {self.id} cannot hear itself")

        if not self.connected:
            self.connected_to = emitter_id
            self._schedule_disconnect(now)
            return Connected(receiver_id=self.id, emitter_id=emitter_id)

        if (
            emitter_id != self.connected_to
            and self.config.keep_alive_policy is KeepAlivePolicy.SAME_EMITTER
        ):
            return None

        self.connected_to = emitter_id
        self._schedule_disconnect(now)
        return None

    def expire_connection(self, now: float) -> Optional[Disconnected]:
        """Close the episode if its deadline has lapsed by `now`."""
        if self.disconnect_deadline is None or now < self.disconnect_deadline:
            return None

        self._clear_deadline()
        self.connected_to = None
        return Disconnected(receiver_id=self.id)

    # ==================== Internal Mechanisms ====================

    def _schedule_disconnect(self, now: float) -> None:
        self.disconnect_deadline = now + self.config.disconnect_timeout

    def _clear_deadline(self) -> None:
        if self.disconnect_deadline is None:
            raise InvariantViolation(
                f"Agent {self.id} has no pending disconnect deadline to clear"
            )
        self.disconnect_deadline = None

    # ==================== Utilities ====================

    def distance_to(self, other: SpatialAgent) -> float:
        """Euclidean distance to another agent."""
        return distance(self.position, other.position)

    def __repr__(self) -> str:
        return (
            f"SpatialAgent(id={self.id}, "
            f"pos=[{self.position[0]:.2f}, {self.position[1]:.2f}], "
            f"role={self.role.value}, "
            f"connected={self.connected})"
        )
