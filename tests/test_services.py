"""
Tests for signal_swarm/services/

Controller bookkeeping, population building and the timed runner.
"""

import logging

import numpy as np

from signal_swarm.core.agent import Role, SpatialAgent
from signal_swarm.core.events import Connected, Disconnected, EventSink, RecordingSink
from signal_swarm.environments.signal_field import FieldConfig, SimulationEngine
from signal_swarm.services.controller import (
    DEMO_LAYOUT,
    ConnectionController,
    ControllerConfig,
    create_agents,
    run_controller,
)


# ==================== Controller Tests ====================

class TestConnectionController:
    """Tests for ConnectionController."""

    def test_is_event_sink(self):
        assert isinstance(ConnectionController(), EventSink)

    def test_connected_records_link(self):
        controller = ConnectionController()
        controller.handle(Connected("B", "A"))
        assert controller.connections == {"B": "A"}
        assert controller.total_connected == 1

    def test_disconnected_removes_link(self):
        controller = ConnectionController()
        controller.handle(Connected("B", "A"))
        controller.handle(Disconnected("B"))
        assert controller.connections == {}
        assert controller.total_disconnected == 1

    def test_disconnect_unknown_receiver_is_harmless(self):
        controller = ConnectionController()
        controller.handle(Disconnected("ghost"))
        assert controller.connections == {}

    def test_reconnection_overwrites_stale_entry(self):
        controller = ConnectionController()
        controller.handle(Connected("B", "A"))
        controller.handle(Connected("B", "C"))
        assert controller.connections == {"B": "C"}

    def test_display_state_logs_and_copies(self, caplog):
        controller = ConnectionController()
        controller.handle(Connected("B", "A"))

        with caplog.at_level(logging.INFO, logger="signal_swarm.services.controller"):
            snapshot = controller.display_state()

        assert snapshot == {"B": "A"}
        assert "Current connections" in caplog.text
        snapshot["X"] = "Y"
        assert "X" not in controller.connections

    def test_handle_logs_events(self, caplog):
        controller = ConnectionController()
        with caplog.at_level(logging.INFO, logger="signal_swarm.services.controller"):
            controller.handle(Connected("B", "A"))
            controller.handle(Disconnected("B"))
        assert "Agent B connected to A." in caplog.text
        assert "Agent B disconnected." in caplog.text

    def test_get_status(self):
        controller = ConnectionController()
        controller.handle(Connected("B", "A"))
        controller.handle(Connected("C", "A"))
        controller.handle(Disconnected("C"))

        status = controller.get_status()
        assert status["active_connections"] == 1
        assert status["total_connected"] == 2
        assert status["total_disconnected"] == 1
        assert status["connections"] == {"B": "A"}

    def test_repr(self):
        assert "ConnectionController" in repr(ConnectionController())


# ==================== Population Tests ====================

class TestCreateAgents:
    """Tests for create_agents."""

    def test_demo_layout(self):
        agents = create_agents(ControllerConfig())
        assert [a.id for a in agents] == [agent_id for agent_id, _ in DEMO_LAYOUT]
        np.testing.assert_array_equal(agents[1].position, [5.0, 5.0])

    def test_agent_parameters_applied(self):
        config = ControllerConfig(disconnect_timeout=2.0, role_switch_range=(0.2, 0.3))
        for agent in create_agents(config):
            assert agent.config.disconnect_timeout == 2.0
            assert 0.2 <= agent.role_switch_period <= 0.3

    def test_random_population_within_bounds(self):
        agents = create_agents(ControllerConfig(num_agents=25, world_size=40.0))
        assert len(agents) == 25
        assert len({a.id for a in agents}) == 25
        positions = np.array([a.position for a in agents])
        assert np.all(np.abs(positions) <= 20.0)

    def test_seed_reproducible(self):
        first = create_agents(ControllerConfig(num_agents=5, seed=3))
        second = create_agents(ControllerConfig(num_agents=5, seed=3))
        for a, b in zip(first, second):
            np.testing.assert_array_equal(a.position, b.position)
            assert a.role_switch_period == b.role_switch_period


# ==================== Integration Tests ====================

class TestControllerWithEngine:
    """The controller view tracks the agents' own connection state."""

    def test_demo_view_matches_agents(self):
        controller = ConnectionController()
        agents = create_agents(ControllerConfig(seed=1))
        engine = SimulationEngine(agents, controller, FieldConfig(tick_interval=0.01))

        def check(eng):
            assert set(controller.connections) == set(eng.get_connections())

        engine.run(1500, on_tick=check)
        assert controller.total_connected >= 1

    def test_controller_keeps_opening_emitter(self):
        controller = ConnectionController()
        e1 = SpatialAgent("E1", np.array([0.0, 0.0]), role_switch_period=100.0)
        e2 = SpatialAgent("E2", np.array([2.0, 0.0]), role_switch_period=100.0)
        r = SpatialAgent("R", np.array([1.0, 0.0]), role_switch_period=100.0)
        r.role = Role.RECEIVING
        engine = SimulationEngine([e1, e2, r], controller)

        engine.run(3)

        assert controller.connections == {"R": "E1"}
        assert engine.get_connections() == {"R": "E2"}
        assert controller.total_connected == 1

    def test_a_and_c_never_linked(self):
        sink = RecordingSink()
        agents = create_agents(ControllerConfig(seed=5))
        engine = SimulationEngine(agents, sink, FieldConfig(proximity_radius=10.0))
        engine.run(200)

        pairs = {(e.receiver_id, e.emitter_id) for e in sink.events if isinstance(e, Connected)}
        assert ("A", "C") not in pairs
        assert ("C", "A") not in pairs

    def test_connected_and_disconnected_alternate_per_receiver(self):
        sink = RecordingSink()
        agents = create_agents(ControllerConfig(num_agents=8, world_size=20.0, seed=9))
        engine = SimulationEngine(agents, sink)
        engine.run(300)

        open_episodes = {}
        for event in sink.events:
            if isinstance(event, Connected):
                assert not open_episodes.get(event.receiver_id, False)
                open_episodes[event.receiver_id] = True
            else:
                assert open_episodes.get(event.receiver_id, False)
                open_episodes[event.receiver_id] = False


class TestRunController:
    """Tests for the wall-clock runner."""

    def test_short_run_returns_status(self):
        config = ControllerConfig(duration=0.2, tick_interval=0.01, display_every=5)
        status = run_controller(config)
        assert set(status) == {
            "active_connections",
            "total_connected",
            "total_disconnected",
            "connections",
        }
        assert status["total_connected"] >= status["total_disconnected"]
