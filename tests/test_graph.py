"""Tests for mesh graph construction and bulk operations."""

import logging

import numpy as np
import pytest

from meshgraph.errors import TopologyConflict
from meshgraph.graph import (EdgeViewMut, FaceViewMut, MeshGraph, RingMut,
                             VertexViewMut)
from meshgraph.primitives import uv_sphere
from meshgraph.storage import ArcKey
from meshgraph.views import FaceView


def counts(graph):
    return (graph.vertex_count(), graph.arc_count(), graph.edge_count(),
            graph.face_count())


class TestConstruction:

    def test_empty(self):
        graph = MeshGraph()

        assert counts(graph) == (0, 0, 0, 0)
        assert graph.name is None

    def test_square(self, square):
        assert counts(square) == (4, 8, 4, 1)
        assert square.name == 'square'
        square._check()

    def test_index_array(self):
        points = np.array([(0, 0), (1, 0), (1, 1), (0, 1)])
        graph = MeshGraph(points, np.array([[0, 1, 2, 3]]))

        assert counts(graph) == (4, 8, 4, 1)
        graph._check()

    def test_points_only(self):
        graph = MeshGraph([(0, 0, 0), (1, 0, 0)])

        assert counts(graph) == (2, 0, 0, 0)
        assert all(v.is_isolated() for v in graph.vertices())

    def test_faces_without_points(self):
        with pytest.raises(ValueError):
            MeshGraph(faces=[[0, 1, 2]])

    def test_bad_points(self):
        with pytest.raises(ValueError):
            MeshGraph([0, 1, 2])

    def test_bad_index(self):
        with pytest.raises(IndexError):
            MeshGraph([(0, 0), (1, 0), (0, 1)], [[0, 1, 3]])

    def test_conflicting_faces(self):
        with pytest.raises(TopologyConflict):
            MeshGraph([(0, 0), (1, 0), (0, 1)], [[0, 1, 2], [0, 1, 2]])

    def test_cube(self, box):
        assert counts(box) == (8, 24, 12, 6)
        assert not any(arc.is_boundary_arc() for arc in box.arcs())
        box._check()

    def test_sphere(self, sphere):
        assert counts(sphere) == (5, 18, 9, 6)
        sphere._check()

    def test_fine_sphere(self):
        graph = MeshGraph.from_polygons(uv_sphere(8, 4))

        assert graph.vertex_count() == 26
        assert graph.face_count() == 32
        assert graph.edge_count() == 56
        assert not any(edge.is_boundary_edge() for edge in graph.edges())
        graph._check()

    def test_raw_buffers(self):
        vertices = [(0, 0), (1, 0), (1, 1), (0, 1)]
        graph = MeshGraph.from_raw_buffers([(0, 1, 2), (0, 2, 3)], vertices)

        assert counts(graph) == (4, 10, 5, 2)
        graph._check()

    def test_raw_buffers_with_arity(self):
        vertices = [(0, 0), (1, 0), (1, 1), (0, 1)]
        graph = MeshGraph.from_raw_buffers_with_arity(
            [0, 1, 2, 0, 2, 3], vertices, 3)

        assert graph.face_count() == 2
        assert all(face.arity() == 3 for face in graph.faces())

    def test_raw_buffers_with_bad_arity(self):
        vertices = [(0, 0), (1, 0), (1, 1), (0, 1)]

        with pytest.raises(ValueError):
            MeshGraph.from_raw_buffers_with_arity([0, 1, 2, 3], vertices, 3)

    def test_isolated_vertex_warning(self, caplog):
        points = [(0, 0), (1, 0), (0, 1), (5, 5)]

        with caplog.at_level(logging.WARNING, logger='meshgraph.graph'):
            MeshGraph(points, [[0, 1, 2]])

        assert 'isolated vertices' in caplog.text


class TestAccess:

    def test_mutable_views(self, square):
        vertex = next(square.vertices())
        arc = next(square.arcs())
        edge = next(square.edges())
        face = next(square.faces())

        assert isinstance(square.vertex_mut(vertex.key), VertexViewMut)
        assert isinstance(square.edge_mut(edge.key), EdgeViewMut)
        assert isinstance(square.face_mut(face.key), FaceViewMut)
        assert square.arc_mut(arc.key).key == arc.key

    def test_navigation_keeps_mutability(self, square):
        face = square.face_mut(next(square.faces()).key)

        assert isinstance(face.ring(), RingMut)
        assert all(isinstance(v, VertexViewMut) for v in face.vertices())

    def test_into_ref(self, square):
        face = square.face_mut(next(square.faces()).key)
        ref = face.into_ref()

        assert type(ref) is FaceView
        assert ref == square.face(face.key)

    def test_geometry(self, square):
        face = square.face_mut(next(square.faces()).key)
        face.geometry = {'color': 'red'}

        assert square.face(face.key).geometry == {'color': 'red'}

    def test_position(self, square):
        vertex = square.vertex_mut(next(square.vertices()).key)
        vertex.position = (2, 3)

        assert isinstance(vertex.position, np.ndarray)
        assert np.allclose(square.vertex(vertex.key).position, [2, 3])

    def test_neighboring_orphans(self, box):
        vertex = box.vertex_mut(next(box.vertices()).key)

        for orphan in vertex.neighboring_vertex_orphans():
            orphan.position = orphan.position * 0.0

        assert len(list(vertex.neighboring_face_orphans())) == 3
        assert sum(np.allclose(v.position, 0) for v in box.vertices()) == 4

    def test_face_orphans(self, box):
        face = box.face_mut(next(box.faces()).key)

        assert len(list(face.vertex_orphans())) == 4
        assert len(list(face.interior_arc_orphans())) == 4
        assert len(list(face.neighboring_face_orphans())) == 4


class TestBulk:

    def test_insert_vertex(self, square):
        key = square.insert_vertex([2, 2])

        assert square.vertex(key).is_isolated()
        assert np.allclose(square.vertex(key).position, [2, 2])

    def test_triangulate(self, box):
        box.triangulate()

        assert box.face_count() == 12
        box._check()

    def test_triangulate_commits_once(self, box, caplog):
        with caplog.at_level(logging.DEBUG, logger='meshgraph.mutation'):
            box.triangulate()

        assert caplog.text.count('committed mutation') == 1

    def test_clear(self, box):
        box.clear()

        assert counts(box) == (0, 0, 0, 0)

    def test_copy(self, box):
        other = box.copy()
        other.face_mut(next(other.faces()).key).remove()

        assert box.face_count() == 6
        assert other.face_count() == 5
        assert other.name == box.name

    def test_copy_geometry(self, square):
        other = square.copy()

        for orphan in other.vertex_orphans():
            orphan.position = orphan.position + 1.0

        assert np.allclose(min(v.position.min() for v in square.vertices()),
                           0)

    def test_path(self, square):
        k0, k1, k2, _ = square.vertex_storage.keys()
        path = square.path([k0, k1, k2])

        assert path.front().key == k2
        assert ArcKey(k0, k1) in {arc.key for arc in path.arcs()}

    def test_repr(self, square):
        assert repr(square) == "MeshGraph(name='square', vertices=4, faces=1)"
