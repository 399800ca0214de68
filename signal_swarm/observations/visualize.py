"""
observations/visualize.py

Watch links form and lapse.

Emitters glow, receivers wait, and a line joins every live link.
The proximity radius is drawn around each emitter so you can see
who is within earshot.
"""

from __future__ import annotations
from typing import Optional, Tuple, TYPE_CHECKING
import numpy as np

from signal_swarm.core.agent import Role

if TYPE_CHECKING:
    from signal_swarm.environments.signal_field import SimulationEngine


ROLE_COLORS = {
    Role.EMITTING: '#f72585',
    Role.RECEIVING: '#4cc9f0',
}


class SignalVisualizer:
    """
    Visualization tools for connection observation.

    Matplotlib is imported lazily so the core never depends on it.
    """

    def __init__(
        self,
        engine: SimulationEngine,
        bounds: Optional[Tuple[float, float]] = None,
        figsize: tuple = (8, 8),
        show_radius: bool = True
    ):
        self.engine = engine
        self.figsize = figsize
        self.show_radius = show_radius
        self.bounds = bounds or self._auto_bounds()

        self._plt = None
        self._fig = None
        self._ax = None

    def _auto_bounds(self) -> Tuple[float, float]:
        positions = self.engine.get_positions()
        margin = self.engine.config.proximity_radius
        if len(positions) == 0:
            return (-margin, margin)
        return (float(positions.min()) - margin, float(positions.max()) + margin)

    def _setup_plot(self):
        """Initialize matplotlib figure."""
        import matplotlib.pyplot as plt
        self._plt = plt

        self._fig, self._ax = plt.subplots(figsize=self.figsize)
        self._fig.patch.set_facecolor('#16213e')

    def render(self) -> None:
        """Render current roles, ranges and live links."""
        if self._plt is None:
            self._setup_plot()

        self._ax.clear()
        self._ax.set_xlim(self.bounds)
        self._ax.set_ylim(self.bounds)
        self._ax.set_aspect('equal')
        self._ax.set_facecolor('#1a1a2e')

        agents = self.engine.agents
        if not agents:
            return

        positions = self.engine.get_positions()
        colors = [ROLE_COLORS[a.role] for a in agents]

        if self.show_radius:
            for agent in agents:
                if agent.role is Role.EMITTING:
                    self._ax.add_patch(self._plt.Circle(
                        agent.position, self.engine.config.proximity_radius,
                        color=ROLE_COLORS[Role.EMITTING], alpha=0.08
                    ))

        self._render_links()

        self._ax.scatter(
            positions[:, 0], positions[:, 1],
            c=colors, s=80, alpha=0.9, edgecolors='white', linewidths=0.5
        )
        for agent in agents:
            self._ax.annotate(
                str(agent.id), agent.position,
                color='white', fontsize=9,
                xytext=(4, 4), textcoords='offset points'
            )

        self._ax.set_title(
            f"Time: {self.engine.time:.2f}s | Agents: {len(agents)} | "
            f"Links: {len(self.engine.get_connections())}",
            color='white', fontsize=12
        )

        self._plt.pause(0.01)

    def _render_links(self) -> None:
        """Draw a line from each connected receiver to its emitter."""
        for receiver_id, emitter_id in self.engine.get_connections().items():
            receiver = self.engine.get_agent(receiver_id)
            emitter = self.engine.get_agent(emitter_id)
            if receiver is None or emitter is None:
                continue
            segment = np.vstack([emitter.position, receiver.position])
            self._ax.plot(
                segment[:, 0], segment[:, 1],
                color='#b5e48c', alpha=0.7, linewidth=1.5
            )

    def save_frame(self, path: str) -> None:
        """Save current frame to file."""
        if self._fig is not None:
            self._fig.savefig(path, dpi=150, facecolor=self._fig.get_facecolor())

    def close(self) -> None:
        """Close the visualization."""
        if self._plt is not None:
            self._plt.close(self._fig)


def animate_study(
    engine: SimulationEngine,
    ticks: int = 100,
    save_path: Optional[str] = None
) -> None:
    """
    Run and animate a study on simulated time.
    """
    viz = SignalVisualizer(engine)

    try:
        engine.run(ticks, on_tick=lambda _: viz.render())

        if save_path:
            viz.save_frame(save_path)

    finally:
        viz.close()
