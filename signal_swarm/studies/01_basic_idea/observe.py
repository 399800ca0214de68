"""
Study 01: Basic Idea Observation

Run: python -m signal_swarm.studies.01_basic_idea.observe --seconds 10

Watch three agents take turns speaking and listening.
Links emerge from proximity and timing alone.
"""

import argparse
import logging

from signal_swarm.core.agent import Role
from signal_swarm.environments.signal_field import SimulationEngine, FieldConfig
from signal_swarm.observations.visualize import SignalVisualizer
from signal_swarm.services.controller import (
    ConnectionController,
    ControllerConfig,
    create_agents,
)


def run_study(
    seconds: float = 10.0,
    tick_interval: float = 0.1,
    radius: float = 10.0,
    seed: int = 42,
    animate: bool = True
):
    """
    Observe the three-agent demo on simulated time.
    """
    print("=" * 50)
    print("Study 01: Basic Idea")
    print("=" * 50)

    controller = ConnectionController()
    agents = create_agents(ControllerConfig(seed=seed))
    engine = SimulationEngine(
        agents,
        controller,
        FieldConfig(proximity_radius=radius, tick_interval=tick_interval)
    )

    for agent in agents:
        print(f"Created {agent} period={agent.role_switch_period:.2f}s")

    ticks = int(round(seconds / tick_interval))
    print(f"\nRunning {ticks} ticks...")

    # Time each agent spends receiving while connected
    linked_ticks = {agent.id: 0 for agent in agents}

    def observe(eng):
        for agent in eng.agents:
            if agent.connected:
                linked_ticks[agent.id] += 1
        if eng.tick_count % 10 == 0:
            roles = "".join(r.value for r in eng.get_roles().values())
            print(f"  t={eng.time:5.2f}s roles={roles} links={eng.get_connections()}")

    if animate:
        viz = SignalVisualizer(engine)
        try:
            engine.run(ticks, on_tick=lambda eng: (observe(eng), viz.render()))
        finally:
            viz.close()
    else:
        engine.run(ticks, on_tick=observe)

    # Analysis
    print("\n" + "=" * 50)
    print("Observations")
    print("=" * 50)

    status = controller.get_status()
    print(f"\nConnections formed: {status['total_connected']}")
    print(f"Connections lapsed: {status['total_disconnected']}")
    print(f"Still connected:    {status['connections']}")

    for agent_id, count in linked_ticks.items():
        print(f"  {agent_id}: linked {count / max(ticks, 1):.0%} of the time")

    receiving = sum(1 for a in agents if a.role is Role.RECEIVING)
    print(f"\nReceiving at end: {receiving}/{len(agents)}")

    print("\n" + "=" * 50)
    print("Study complete. Who found whom?")
    print("=" * 50)


def main():
    parser = argparse.ArgumentParser(description="Basic Idea Study")
    parser.add_argument("--seconds", type=float, default=10.0)
    parser.add_argument("--tick-interval", type=float, default=0.1)
    parser.add_argument("--radius", type=float, default=10.0)
    parser.add_argument("--seed", type=int, default=42)
    parser.add_argument("--no-animate", action="store_true")
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING)

    run_study(
        seconds=args.seconds,
        tick_interval=args.tick_interval,
        radius=args.radius,
        seed=args.seed,
        animate=not args.no_animate
    )


if __name__ == "__main__":
    main()
