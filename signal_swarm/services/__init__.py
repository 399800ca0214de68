"""
signal_swarm/services/

The controller side of the simulation.

Architecture:
- ConnectionController: consumes connection events, keeps the live link map
- run_controller: wall-clock runner wiring agents, engine and controller

The engine pushes events; the controller only listens.
"""

from .controller import ConnectionController, ControllerConfig, create_agents, run_controller

__all__ = [
    "ConnectionController",
    "ControllerConfig",
    "create_agents",
    "run_controller",
]
