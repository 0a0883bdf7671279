"""Tests for Vector."""
import math

import pytest

from openbitmap.core.vector import Vector


class TestVector:

    def test_cartesian_length(self):
        assert Vector.from_components(3, 4).length == pytest.approx(5.0)

    def test_polar_components(self):
        vector = Vector(math.pi / 2, 2.0)

        assert vector.vx == pytest.approx(0.0, abs=1e-12)
        assert vector.vy == pytest.approx(2.0)

    def test_phi_is_normalized(self):
        assert Vector.from_components(0, -1).phi == pytest.approx(3 * math.pi / 2)
        assert 0 <= Vector(-0.5).phi < 2 * math.pi

    def test_adding_scalar_rotates(self):
        rotated = Vector(0.0, 1.0) + math.pi

        assert rotated.vx == pytest.approx(-1.0)
        assert rotated.vy == pytest.approx(0.0, abs=1e-12)
        assert rotated.length == pytest.approx(1.0)

    def test_subtracting_scalar_rotates_back(self):
        rotated = Vector(0.25, 3.0) - 0.25

        assert rotated.vx == pytest.approx(3.0)
        assert rotated.vy == pytest.approx(0.0, abs=1e-12)

    def test_vector_addition(self):
        assert Vector.from_components(1, 2) + Vector.from_components(3, 4) == Vector.from_components(4, 6)
        assert Vector.from_components(1, 2) - Vector.from_components(3, 4) == Vector.from_components(-2, -2)

    def test_scaling(self):
        assert Vector.from_components(1, 2) * 3 == Vector.from_components(3, 6)
        assert Vector.from_components(3, 6) / 3 == Vector.from_components(1, 2)

    def test_ordering_by_length(self):
        assert Vector.from_components(1, 0) < Vector.from_components(0, 2)
        assert Vector(1.0, 5.0) >= Vector(2.0, 5.0)

    def test_mix(self):
        mixed = Vector.from_components(0, 0).mix([(0.5, Vector.from_components(2, 4))])

        assert mixed == Vector.from_components(1, 2)

    def test_invalid(self):
        assert not Vector.invalid().is_valid()
        assert Vector(0.0).is_valid()
