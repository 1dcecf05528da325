"""Tests for primitive shapes and polygon indexing."""

import numpy as np
import pytest

from meshgraph.primitives import cube, index_polygons, uv_sphere


def test_cube():
    polygons = cube()
    points, faces = index_polygons(polygons)

    assert len(polygons) == 6
    assert all(len(polygon) == 4 for polygon in polygons)
    assert points.shape == (8, 3)
    assert len(faces) == 6


def test_uv_sphere_counts():
    points, faces = index_polygons(uv_sphere(3, 2))

    assert len(points) == 5
    assert len(faces) == 6
    assert all(len(face) == 3 for face in faces)


def test_uv_sphere_quads():
    points, faces = index_polygons(uv_sphere(4, 3, radius=2.0))

    assert len(points) == 2 + 4 * 2
    assert sorted(len(face) for face in faces) == [3] * 8 + [4] * 4
    assert np.allclose(np.linalg.norm(points, axis=1), 2.0)


def test_uv_sphere_too_coarse():
    with pytest.raises(ValueError):
        uv_sphere(2, 2)

    with pytest.raises(ValueError):
        uv_sphere(3, 1)


def test_index_polygons_merges_positions():
    polygons = [[(0, 0), (1, 0), (0, 1)],
                [(1, 0), (1, 1), (0, 1)]]
    points, faces = index_polygons(polygons)

    assert len(points) == 4
    assert faces == [[0, 1, 2], [1, 3, 2]]


def test_index_polygons_signed_zero():
    points, faces = index_polygons([[(0.0, 0.0), (1, 0), (0, 1)],
                                    [(-0.0, 0.0), (0, 1), (-1, 0)]])

    assert len(points) == 4
    assert faces[1][0] == 0
