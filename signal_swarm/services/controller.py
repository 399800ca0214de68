"""
signal_swarm/services/controller.py

Connection controller service.

The controller is the central brain that watches links form and lapse:
1. Receives Connected / Disconnected events from the simulation
2. Maintains the current receiver -> emitter map
3. Reports the state of connections on request

It never touches agents. Its map changes only in response to events.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Dict, Hashable, List, Optional, Sequence, Tuple

import numpy as np

from signal_swarm.core.agent import AgentConfig, SpatialAgent
from signal_swarm.core.events import ConnectionEvent, EventKind, EventSink
from signal_swarm.environments.signal_field import FieldConfig, SimulationEngine

logger = logging.getLogger(__name__)


# Three agents; C starts out of A's range at radius 10
DEMO_LAYOUT: List[Tuple[str, Tuple[float, float]]] = [
    ("A", (0.0, 0.0)),
    ("B", (5.0, 5.0)),
    ("C", (9.0, 9.0)),
]


@dataclass
class ControllerConfig:
    """Configuration for a controller run."""
    # Simulation parameters
    proximity_radius: float = 10.0
    tick_interval: float = 0.1
    duration: float = 10.0  # Seconds before the run is stopped

    # Population
    num_agents: Optional[int] = None  # None: use DEMO_LAYOUT
    world_size: float = 30.0

    # Agent parameters
    disconnect_timeout: float = 1.0
    role_switch_range: Tuple[float, float] = (0.5, 1.5)

    # Random seed
    seed: int = 42

    # Log current connections every N ticks (0 disables)
    display_every: int = 10


class ConnectionController(EventSink):
    """
    Central coordinator: keeps a view of current links.

    Bookkeeping is idempotent: a reconnection overwrites a stale entry,
    a disconnection removes the entry if present.

    Each entry holds the emitter that opened the episode. Keep-alive
    signals from other emitters raise no event, so the agent-side view
    (SimulationEngine.get_connections) may name a later emitter.
    """

    def __init__(self):
        self.connections: Dict[Hashable, Hashable] = {}
        self.total_connected = 0
        self.total_disconnected = 0
        self._lock = threading.Lock()

    def handle(self, event: ConnectionEvent) -> None:
        with self._lock:
            if event.kind is EventKind.CONNECTED:
                self.connections[event.receiver_id] = event.emitter_id
                self.total_connected += 1
                logger.info(f"Agent {event.receiver_id} connected to {event.emitter_id}.")
            elif event.kind is EventKind.DISCONNECTED:
                self.connections.pop(event.receiver_id, None)
                self.total_disconnected += 1
                logger.info(f"Agent {event.receiver_id} disconnected.")

    def display_state(self) -> Dict[Hashable, Hashable]:
        """Log and return the current connections."""
        with self._lock:
            snapshot = dict(self.connections)
        logger.info(f"Current connections: {snapshot}")
        return snapshot

    def get_status(self) -> Dict[str, Any]:
        """Get current controller status."""
        with self._lock:
            return {
                "active_connections": len(self.connections),
                "total_connected": self.total_connected,
                "total_disconnected": self.total_disconnected,
                "connections": dict(self.connections),
            }

    def __repr__(self) -> str:
        return (
            f"ConnectionController(active={len(self.connections)}, "
            f"connected={self.total_connected}, "
            f"disconnected={self.total_disconnected})"
        )


def create_agents(config: ControllerConfig) -> List[SpatialAgent]:
    """
    Build the population for a run.

    Uses DEMO_LAYOUT unless `num_agents` is set, in which case agents are
    scattered uniformly over a square of side `world_size`.
    """
    rng = np.random.default_rng(config.seed)
    agent_config = AgentConfig(
        role_switch_range=config.role_switch_range,
        disconnect_timeout=config.disconnect_timeout,
    )

    if config.num_agents is None:
        layout: Sequence[Tuple[Hashable, Tuple[float, float]]] = DEMO_LAYOUT
    else:
        half = config.world_size / 2
        layout = [
            (f"agent_{i}", tuple(rng.uniform(-half, half, size=2)))
            for i in range(config.num_agents)
        ]

    return [
        SpatialAgent(agent_id, np.array(position), agent_config, rng=rng)
        for agent_id, position in layout
    ]


def run_controller(config: Optional[ControllerConfig] = None) -> Dict[str, Any]:
    """
    Run the simulation on a wall-clock timer with a controller attached.

    This is the command-line entry point.
    """
    import argparse
    import signal

    if config is None:
        parser = argparse.ArgumentParser(description="Signal Swarm Controller")
        parser.add_argument("--radius", type=float, default=10.0)
        parser.add_argument("--tick-interval", type=float, default=0.1)
        parser.add_argument("--duration", type=float, default=10.0)
        parser.add_argument("--num-agents", type=int, default=None)
        parser.add_argument("--world-size", type=float, default=30.0)
        parser.add_argument("--disconnect-timeout", type=float, default=1.0)
        parser.add_argument("--seed", type=int, default=42)
        args = parser.parse_args()

        config = ControllerConfig(
            proximity_radius=args.radius,
            tick_interval=args.tick_interval,
            duration=args.duration,
            num_agents=args.num_agents,
            world_size=args.world_size,
            disconnect_timeout=args.disconnect_timeout,
            seed=args.seed,
        )

    controller = ConnectionController()
    engine = SimulationEngine(
        create_agents(config),
        controller,
        FieldConfig(
            proximity_radius=config.proximity_radius,
            tick_interval=config.tick_interval,
        ),
    )

    done = threading.Event()

    # Handle signals for graceful shutdown
    def signal_handler(sig, frame):
        logger.info("Received shutdown signal")
        done.set()

    previous_handlers = {}
    if threading.current_thread() is threading.main_thread():
        for sig in (signal.SIGINT, signal.SIGTERM):
            previous_handlers[sig] = signal.signal(sig, signal_handler)

    engine.start()
    deadline = time.monotonic() + config.duration
    last_displayed = 0
    try:
        while not done.wait(config.tick_interval):
            if time.monotonic() >= deadline:
                break
            if config.display_every and engine.tick_count - last_displayed >= config.display_every:
                last_displayed = engine.tick_count
                controller.display_state()
    finally:
        engine.stop()
        for sig, handler in previous_handlers.items():
            signal.signal(sig, handler)

    controller.display_state()
    return controller.get_status()


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    run_controller()


if __name__ == "__main__":
    main()
