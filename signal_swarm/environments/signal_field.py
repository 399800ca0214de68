"""
environments/signal_field.py

A flat world where agents take turns speaking and listening.

One tick, three beats:
1. Every agent checks its own tempo (role advance)
2. Stale links lapse, then every listener hears every nearby speaker
3. The controller learns what happened, in the order it happened

Roles settle for the whole population before anyone listens,
so no agent ever hears a half-updated world.

Inspired by:
- Reynolds boids simulation (phase-separated steps)
- Heartbeat failure detectors
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Callable, Dict, Hashable, List, Optional, Sequence
import logging
import threading
import time

import numpy as np

from signal_swarm.core.agent import Role, SpatialAgent
from signal_swarm.core.errors import ConfigurationError, InvariantViolation
from signal_swarm.core.events import ConnectionEvent, EventSink
from signal_swarm.core.proximity import is_close

logger = logging.getLogger(__name__)


@dataclass
class FieldConfig:
    """Configuration for the signal field."""
    proximity_radius: float = 10.0    # How far a signal carries
    tick_interval: float = 0.1        # Seconds between ticks when running on a timer


class SimulationEngine:
    """
    Drives a fixed population of agents one discrete tick at a time.

    Two ways to drive it:
    - tick(now) / run(ticks): caller owns the clock (studies, tests)
    - start() / stop(): a background timer ticks on wall-clock time

    The engine owns the agent sequence for its lifetime; the sink
    owns whatever it builds from the events.
    """

    def __init__(
        self,
        agents: Sequence[SpatialAgent],
        sink: EventSink,
        config: Optional[FieldConfig] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.config = config or FieldConfig()
        self._validate(agents)

        self.agents: List[SpatialAgent] = list(agents)
        self.sink = sink
        self.clock = clock

        self.time = 0.0
        self.tick_count = 0

        # Status
        self.running = False
        self._tick_lock = threading.Lock()
        self._ticking_thread: Optional[threading.Thread] = None
        self._stop_event: Optional[threading.Event] = None
        self._thread: Optional[threading.Thread] = None

    def _validate(self, agents: Sequence[SpatialAgent]) -> None:
        if self.config.proximity_radius <= 0:
            raise ConfigurationError(
                f"proximity_radius must be positive, got {self.config.proximity_radius}"
            )
        if self.config.tick_interval <= 0:
            raise ConfigurationError(
                f"tick_interval must be positive, got {self.config.tick_interval}"
            )

        seen = set()
        for agent in agents:
            if agent.id in seen:
                raise ConfigurationError(f"Duplicate agent id: {agent.id}")
            seen.add(agent.id)

    # ==================== Stepping ====================

    def tick(self, now: float) -> List[ConnectionEvent]:
        """
        Advance the simulation to time `now`.

        Returns the events produced, after they have been handed to the sink.
        """
        with self._tick_lock:
            return self._tick_locked(now)

    def _tick_locked(self, now: float) -> List[ConnectionEvent]:
        self._ticking_thread = threading.current_thread()
        try:
            events = self._step(now)
            self._deliver(events)
        finally:
            self._ticking_thread = None
        return events

    def _tick_unless_stopped(
        self, stop_event: threading.Event, now: Callable[[], float]
    ) -> bool:
        """Tick once unless a stop landed first. The check and the tick share the lock."""
        with self._tick_lock:
            if stop_event.is_set():
                return False
            self._tick_locked(now())
        return True

    def _step(self, now: float) -> List[ConnectionEvent]:
        events: List[ConnectionEvent] = []

        # Phase 1: Roles
        for agent in self.agents:
            if agent.advance_role(now):
                logger.debug(f"t={now:.3f} agent {agent.id} -> {agent.role.name}")

        # Phase 2: Lapsed deadlines
        for agent in self.agents:
            event = agent.expire_connection(now)
            if event is not None:
                events.append(event)

        # Phase 3: Signals, emitters in stable order
        radius = self.config.proximity_radius
        for emitter in self.agents:
            if emitter.role is not Role.EMITTING:
                continue
            for receiver in self.agents:
                if receiver is emitter or receiver.role is not Role.RECEIVING:
                    continue
                if is_close(emitter.position, receiver.position, radius):
                    event = receiver.on_signal_received(emitter.id, now)
                    if event is not None:
                        events.append(event)

        self.time = now
        self.tick_count += 1
        return events

    def _deliver(self, events: List[ConnectionEvent]) -> None:
        """Hand events to the sink. A failing sink never rolls back agent state."""
        for event in events:
            try:
                self.sink.handle(event)
            except Exception as e:
                logger.warning(f"Event sink failed on {event}: {e}")

    def run(
        self,
        ticks: int,
        dt: Optional[float] = None,
        on_tick: Optional[Callable[[SimulationEngine], None]] = None,
    ) -> int:
        """
        Run `ticks` ticks on simulated time, advancing by `dt` each tick.

        Blocking and sleep-free. stop() from a sink or `on_tick` ends the
        run after the current tick. Returns the number of ticks executed.
        """
        dt = dt if dt is not None else self.config.tick_interval
        if dt <= 0:
            raise ConfigurationError(f"dt must be positive, got {dt}")
        if self.running:
            raise InvariantViolation("Engine is already running")

        stop_event = threading.Event()
        self._stop_event = stop_event
        self.running = True
        executed = 0

        try:
            for _ in range(ticks):
                if not self._tick_unless_stopped(stop_event, lambda: self.time + dt):
                    break
                executed += 1
                if on_tick is not None:
                    on_tick(self)
        finally:
            self.running = False
            self._stop_event = None

        return executed

    # ==================== Timer ====================

    def start(self, tick_interval: Optional[float] = None) -> None:
        """
        Start ticking on a background timer.

        Simulated time resumes from `self.time`. Starting an engine that
        is already running is a caller error.
        """
        interval = tick_interval if tick_interval is not None else self.config.tick_interval
        if interval <= 0:
            raise ConfigurationError(f"tick_interval must be positive, got {interval}")
        if self.running:
            raise InvariantViolation("Engine is already running")

        stop_event = threading.Event()
        self._stop_event = stop_event
        self.running = True

        origin = self.clock() - self.time
        self._thread = threading.Thread(
            target=self._loop,
            args=(interval, origin, stop_event),
            name="signal-field-ticker",
            daemon=True,
        )
        self._thread.start()

        logger.info(
            f"Simulation started: {len(self.agents)} agents, "
            f"radius={self.config.proximity_radius}, interval={interval}s"
        )

    def _loop(self, interval: float, origin: float, stop_event: threading.Event) -> None:
        next_at = self.time + interval
        while not stop_event.wait(max(0.0, origin + next_at - self.clock())):
            if not self._tick_unless_stopped(stop_event, lambda: self.clock() - origin):
                break
            next_at += interval
            # Fell behind: skip missed ticks rather than bursting
            if next_at < self.clock() - origin:
                next_at = self.clock() - origin + interval

    def stop(self) -> None:
        """
        Halt future ticks. Idempotent.

        An in-flight tick finishes first, whether driven by start() or by
        run() on another thread; once this returns from outside the tick,
        no further events reach the sink.
        """
        if not self.running:
            return

        self.running = False
        if self._stop_event is not None:
            self._stop_event.set()

        # Wait out an in-flight tick, unless we are inside it (a sink calling stop)
        if self._ticking_thread is not threading.current_thread():
            with self._tick_lock:
                pass

        thread = self._thread
        self._thread = None
        if thread is not None and thread is not threading.current_thread():
            thread.join()

        logger.info(f"Simulation stopped at t={self.time:.3f} after {self.tick_count} ticks")

    # ==================== Snapshots ====================

    def get_agent(self, agent_id: Hashable) -> Optional[SpatialAgent]:
        for agent in self.agents:
            if agent.id == agent_id:
                return agent
        return None

    def get_positions(self) -> np.ndarray:
        """Get positions of all agents as array."""
        return np.array([a.position for a in self.agents])

    def get_roles(self) -> Dict[Hashable, Role]:
        return {a.id: a.role for a in self.agents}

    def get_connections(self) -> Dict[Hashable, Hashable]:
        """Receiver id -> emitter it last accepted a signal from."""
        return {a.id: a.connected_to for a in self.agents if a.connected}

    def __repr__(self) -> str:
        return (
            f"SimulationEngine(agents={len(self.agents)}, "
            f"time={self.time:.3f}, "
            f"ticks={self.tick_count}, "
            f"running={self.running})"
        )
