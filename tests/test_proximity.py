"""
Tests for core/proximity.py

Who can hear whom: inclusive Euclidean range checks.
"""

import numpy as np
import pytest

from signal_swarm.core.proximity import distance, is_close


class TestDistance:
    """Tests for the distance helper."""

    def test_three_four_five(self):
        assert distance(np.array([0.0, 0.0]), np.array([3.0, 4.0])) == pytest.approx(5.0)

    def test_accepts_sequences(self):
        assert distance((1, 1), [4, 5]) == pytest.approx(5.0)

    def test_zero_for_same_point(self):
        assert distance((2.5, -1.0), (2.5, -1.0)) == 0.0


class TestIsClose:
    """Tests for is_close."""

    def test_boundary_is_inclusive(self):
        assert is_close((0.0, 0.0), (10.0, 0.0), 10.0)

    def test_just_outside_boundary(self):
        assert not is_close((0.0, 0.0), (10.0, 0.0), 9.999)

    def test_within_range(self):
        # distance ~7.07
        assert is_close((0.0, 0.0), (5.0, 5.0), 10.0)

    def test_out_of_range(self):
        # distance ~12.73
        assert not is_close((0.0, 0.0), (9.0, 9.0), 10.0)

    def test_zero_radius_matches_only_colocated(self):
        assert is_close((1.0, 1.0), (1.0, 1.0), 0.0)
        assert not is_close((1.0, 1.0), (1.0, 1.000001), 0.0)

    def test_negative_radius_matches_nothing(self):
        assert not is_close((0.0, 0.0), (0.0, 0.0), -1.0)

    def test_symmetry(self):
        rng = np.random.default_rng(7)
        points = rng.uniform(-20, 20, size=(50, 2))
        radii = rng.uniform(0, 30, size=50)
        for a, b, r in zip(points, points[::-1], radii):
            assert is_close(a, b, r) == is_close(b, a, r)

    def test_agrees_with_distance(self):
        rng = np.random.default_rng(11)
        for _ in range(100):
            a, b = rng.uniform(-10, 10, size=(2, 2))
            r = rng.uniform(0, 15)
            assert is_close(a, b, r) == (distance(a, b) <= r)
