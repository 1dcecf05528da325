"""Tests for geometric ring traits."""

import numpy as np
import pytest

from meshgraph import traits
from meshgraph.errors import GeometryError


def test_cross():
    assert np.allclose(traits.cross([1, 0, 0], [0, 1, 0]), [0, 0, 1])


def test_centroid():
    points = [[0, 0], [2, 0], [2, 2], [0, 2]]
    assert np.allclose(traits.centroid(points), [1, 1])


def test_centroid_rejects_empty():
    with pytest.raises(ValueError):
        traits.centroid([])


class TestNormal:

    def test_triangle(self):
        points = [[0, 0, 0], [1, 0, 0], [0, 1, 0]]
        assert np.allclose(traits.normal(points), [0, 0, 1])

    def test_quad_orientation(self):
        points = [[0, 0, 0], [0, 1, 0], [1, 1, 0], [1, 0, 0]]
        assert np.allclose(traits.normal(points), [0, 0, -1])

    def test_collinear(self):
        with pytest.raises(GeometryError):
            traits.normal([[0, 0, 0], [1, 0, 0], [2, 0, 0]])

    def test_two_dimensional(self):
        with pytest.raises(GeometryError):
            traits.normal([[0, 0], [1, 0], [0, 1]])


class TestPlane:

    def test_fit(self):
        points = [[0, 0, 1], [1, 0, 1], [1, 1, 1], [0, 1, 1]]
        plane = traits.plane(points)

        assert np.allclose(abs(plane.normal[2]), 1.0)
        assert np.allclose(plane.origin, [0.5, 0.5, 1])
        assert abs(plane.distance([0, 0, 3])) == pytest.approx(2.0)

    def test_too_few_points(self):
        with pytest.raises(GeometryError):
            traits.plane([[0, 0, 0], [1, 0, 0]])

    def test_zero_normal(self):
        with pytest.raises(GeometryError):
            traits.Plane([0, 0, 0], [0, 0, 0])


class TestIntersect:

    def test_point(self):
        plane = traits.Plane([0, 0, 0], [0, 0, 2])
        line = traits.Line([1, 2, 5], [0, 0, 1])

        assert np.allclose(traits.intersect(plane, line), [1, 2, 0])

    def test_parallel(self):
        plane = traits.Plane([0, 0, 0], [0, 0, 1])
        line = traits.Line([1, 2, 5], [1, 0, 0])

        assert traits.intersect(plane, line) is None
