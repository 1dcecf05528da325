"""Tests for read-only views, rings, and orphans."""

import numpy as np
import pytest

from meshgraph.errors import GeometryError, TopologyNotFound
from meshgraph.storage import ArcKey, FaceKey, VertexKey
from meshgraph.views import FaceView, Ring, VertexOrphan


def first_face(graph):
    return graph.face(next(iter(graph.face_storage.keys())))


class TestVertexView:

    def test_position(self, square):
        keys = list(square.vertex_storage.keys())
        assert np.allclose(square.vertex(keys[2]).position, [1, 1])

    def test_unknown_key(self, square):
        with pytest.raises(TopologyNotFound):
            square.vertex(VertexKey(100))

    def test_boundary(self, square, box):
        assert all(v.is_boundary_vertex() for v in square.vertices())
        assert not any(v.is_boundary_vertex() for v in box.vertices())

    def test_neighbors(self, square):
        k0, k1, k2, k3 = square.vertex_storage.keys()
        vertex = square.vertex(k0)

        assert {v.key for v in vertex.neighboring_vertices()} == {k1, k3}
        assert len(list(vertex.neighboring_faces())) == 1
        assert all(arc.destination_vertex().key == k0
                   for arc in vertex.incoming_arcs())

    def test_cube_vertex(self, box):
        vertex = next(box.vertices())

        assert len(list(vertex.outgoing_arcs())) == 3
        assert len(list(vertex.neighboring_vertices())) == 3
        assert len(list(vertex.neighboring_faces())) == 3

    def test_isolated(self, square):
        vertex = square.vertex(square.insert_vertex((2, 2)))

        assert vertex.is_isolated()
        assert vertex.outgoing_arc() is None
        assert list(vertex.outgoing_arcs()) == []


class TestArcView:

    def test_navigation(self, square):
        k0, k1, k2, k3 = square.vertex_storage.keys()
        arc = square.arc(ArcKey(k0, k1))

        assert arc.source_vertex().key == k0
        assert arc.destination_vertex().key == k1
        assert arc.opposite_arc().key == ArcKey(k1, k0)
        assert arc.next_arc().key == ArcKey(k1, k2)
        assert arc.previous_arc().key == ArcKey(k3, k0)
        assert arc.next_arc().previous_arc() == arc
        assert arc.edge() == arc.opposite_arc().edge()

    def test_boundary(self, square):
        k0, k1, _, _ = square.vertex_storage.keys()

        assert not square.arc(ArcKey(k0, k1)).is_boundary_arc()
        assert square.arc(ArcKey(k1, k0)).is_boundary_arc()
        assert square.arc(ArcKey(k1, k0)).face() is None

    def test_boundary_ring(self, square):
        k0, k1, _, _ = square.vertex_storage.keys()
        ring = square.arc(ArcKey(k1, k0)).ring()

        assert isinstance(ring, Ring)
        assert ring.is_boundary_ring()
        assert ring.face() is None
        assert ring.arity() == 4

    def test_midpoint(self, square):
        k0, k1, _, _ = square.vertex_storage.keys()
        assert np.allclose(square.arc(ArcKey(k0, k1)).midpoint(), [0.5, 0])


class TestEdgeView:

    def test_vertices(self, square):
        edge = next(square.edges())
        a, b = edge.vertices()

        assert edge.arc().key == ArcKey(a.key, b.key)

    def test_boundary(self, square, box):
        assert all(edge.is_boundary_edge() for edge in square.edges())
        assert not any(edge.is_boundary_edge() for edge in box.edges())

    def test_interior_edge(self, strip):
        k0, _, _, k3, _, _ = strip.vertex_storage.keys()
        edge = strip.arc(ArcKey(k0, k3)).edge()

        assert not edge.is_boundary_edge()
        assert np.allclose(edge.midpoint(), [0, 0.5])


class TestFaceView:

    def test_arity(self, square, box, sphere):
        assert first_face(square).arity() == 4
        assert all(face.arity() == 4 for face in box.faces())
        assert all(face.arity() == 3 for face in sphere.faces())

    def test_interior_arcs(self, square):
        face = first_face(square)
        arcs = list(face.interior_arcs())

        assert len(arcs) == face.arity()
        assert all(arc.face() == face for arc in arcs)

    def test_vertices(self, square):
        face = first_face(square)
        assert {v.key for v in face.vertices()} == set(
            square.vertex_storage.keys())

    def test_distance(self, square):
        face = first_face(square)

        assert face.distance(0, 2) == 2
        assert face.distance(0, 3) == 1
        assert face.distance(0, 0) == 0

    def test_distance_by_key(self, square):
        k0, k1, k2, k3 = square.vertex_storage.keys()
        face = first_face(square)

        assert face.distance(k0, k2) == 2
        assert face.distance(k1, k0) == 1

    def test_distance_bad_selector(self, square):
        face = first_face(square)

        with pytest.raises(TopologyNotFound):
            face.distance(0, 4)

        with pytest.raises(TopologyNotFound):
            face.distance(0, VertexKey(100))

        with pytest.raises(TypeError):
            face.distance(True, 0)

    def test_resolve(self, square):
        face = first_face(square)
        assert face.resolve(0) == next(face.vertices()).key

    def test_centroid(self, square):
        assert np.allclose(first_face(square).centroid(), [0.5, 0.5])

    def test_normal_points_outward(self, box):
        center = np.array([0.5, 0.5, 0.5])

        for face in box.faces():
            assert face.normal().dot(face.centroid() - center) > 0

    def test_normal_requires_3d(self, square):
        with pytest.raises(GeometryError):
            first_face(square).normal()

    def test_plane(self, box):
        for face in box.faces():
            plane = face.plane()
            assert abs(plane.normal.dot(face.normal())) == pytest.approx(1.0)

    def test_neighbors(self, square, box, strip):
        assert list(first_face(square).neighboring_faces()) == []
        assert all(len(list(f.neighboring_faces())) == 4
                   for f in box.faces())
        assert len(list(first_face(strip).neighboring_faces())) == 1

    def test_traversal(self, box):
        face = first_face(box)
        faces = list(face.traverse_by_breadth())

        assert faces[0] == face
        assert len(faces) == 6
        assert {f.key for f in face.traverse_by_depth()} == {
            f.key for f in faces}

    def test_ring(self, square):
        face = first_face(square)
        ring = face.ring()

        assert not ring.is_boundary_ring()
        assert ring.face() == face
        assert ring.arity() == face.arity()


class TestIdentity:

    def test_equality(self, square):
        key = next(iter(square.face_storage.keys()))

        assert square.face(key) == square.face(key)
        assert hash(square.face(key)) == hash(square.face(key))
        assert square.face(key) != square.copy().face(key)

    def test_stale_view(self, square):
        face = first_face(square)
        square.face_mut(face.key).remove()

        with pytest.raises(TopologyNotFound):
            face.arity()

        with pytest.raises(TopologyNotFound):
            square.face(face.key)

    def test_bound_to_core(self, square):
        key = next(iter(square.face_storage.keys()))
        face = FaceView(square._core, key)

        assert face.arity() == 4

    def test_unknown_face(self, square):
        with pytest.raises(TopologyNotFound):
            square.face(FaceKey(7))


class TestOrphans:

    def test_vertex_orphans(self, box):
        for orphan in box.vertex_orphans():
            orphan.position = orphan.position + 1.0

        positions = np.array([v.position for v in box.vertices()])
        assert positions.min() == 1.0
        assert positions.max() == 2.0

    def test_position_is_array(self, square):
        key = next(iter(square.vertex_storage.keys()))
        orphan = VertexOrphan(square, key)
        orphan.position = [3, 4]

        assert isinstance(square.vertex(key).position, np.ndarray)
        assert np.allclose(square.vertex(key).position, [3, 4])

    def test_face_orphans(self, box):
        for i, orphan in enumerate(box.face_orphans()):
            orphan.geometry = i

        assert [face.geometry for face in box.faces()] == list(range(6))

    def test_arc_and_edge_orphans(self, square):
        assert len(list(square.arc_orphans())) == 8
        assert len(list(square.edge_orphans())) == 4

    def test_unknown_key(self, square):
        with pytest.raises(TopologyNotFound):
            VertexOrphan(square, VertexKey(100))

    def test_orphans_follow_transactions(self, square):
        orphans = list(square.vertex_orphans())
        square.insert_vertex((5, 5))
        orphans[0].geometry = (9, 9)

        assert np.allclose(square.vertex(orphans[0].key).position, [9, 9])

    def test_removed_item(self, square):
        orphan = next(square.face_orphans())
        square.face_mut(orphan.key).remove()

        with pytest.raises(TopologyNotFound):
            orphan.geometry = 1
