"""Tests for circulators and face traversals."""

from meshgraph.graph import MeshGraph
from meshgraph.iterators import (ArcCirculator, BreadthTraversal,
                                 DepthTraversal, FaceCirculator,
                                 OutgoingArcCirculator, VertexCirculator)


def leading_arc(graph, index=0):
    key = list(graph.face_storage.keys())[index]
    return graph.face_storage.get(key).arc


class TestArcCirculator:

    def test_visits_ring_once(self, square):
        arcs = list(ArcCirculator(square, leading_arc(square)))

        assert len(arcs) == 4
        assert len(set(arcs)) == 4
        assert arcs[0] == leading_arc(square)

    def test_ring_is_closed(self, box):
        start = leading_arc(box)
        arcs = list(ArcCirculator(box, start))

        assert box.arc_storage.get(arcs[-1]).next == start

    def test_broken_link_terminates(self, square):
        start = leading_arc(square)
        arcs = list(ArcCirculator(square, start))

        square.arc_storage.get(arcs[1]).next = None

        assert list(ArcCirculator(square, start)) == arcs[:2]

    def test_none(self, square):
        assert list(ArcCirculator(square, None)) == []


def test_vertex_circulator(square):
    start = leading_arc(square)
    arcs = list(ArcCirculator(square, start))

    assert list(VertexCirculator(square, start)) == [
        ab.destination for ab in arcs]


class TestFaceCirculator:

    def test_boundary_is_skipped(self, square):
        assert list(FaceCirculator(square, leading_arc(square))) == []

    def test_closed(self, box):
        faces = list(FaceCirculator(box, leading_arc(box)))

        assert len(faces) == 4
        assert len(set(faces)) == 4


class TestOutgoingArcCirculator:

    def test_interior_vertex(self, box):
        for a in box.vertex_storage.keys():
            arcs = list(OutgoingArcCirculator(box, a))

            assert len(arcs) == 3
            assert all(ab.source == a for ab in arcs)

    def test_boundary_vertex(self, square):
        a = next(iter(square.vertex_storage.keys()))
        arcs = list(OutgoingArcCirculator(square, a))

        assert len(arcs) == 2

    def test_isolated_vertex(self, square):
        a = square.insert_vertex((5, 5))
        assert list(OutgoingArcCirculator(square, a)) == []


class TestTraversal:

    def test_breadth(self, box):
        seed = next(iter(box.face_storage.keys()))
        faces = list(BreadthTraversal(box, seed))

        assert faces[0] == seed
        assert set(faces) == set(box.face_storage.keys())

    def test_depth(self, box):
        seed = next(iter(box.face_storage.keys()))
        faces = list(DepthTraversal(box, seed))

        assert faces[0] == seed
        assert len(faces) == 6
        assert set(faces) == set(box.face_storage.keys())

    def test_breadth_visits_neighbors_first(self, box):
        seed = next(iter(box.face_storage.keys()))
        faces = list(BreadthTraversal(box, seed))
        neighbors = set(FaceCirculator(box, box.face_storage.get(seed).arc))

        assert set(faces[1:5]) == neighbors

    def test_disconnected(self):
        points = [(0, 0), (1, 0), (0, 1), (5, 5), (6, 5), (5, 6)]
        graph = MeshGraph(points, [[0, 1, 2], [3, 4, 5]])
        seed = next(iter(graph.face_storage.keys()))

        assert list(BreadthTraversal(graph, seed)) == [seed]
        assert list(DepthTraversal(graph, seed)) == [seed]
