# Copyright 2024, m3shware
#
# Permission is hereby granted, free of charge, to any person obtaining a
# copy of this software and associated documentation files (the "Software"),
# to deal in the Software without restriction, including without limitation
# the rights to use, copy, modify, merge, publish, distribute, sublicense,
# and/or sell copies of the Software, and to permit persons to whom the
# Software is furnished to do so, subject to the following conditions:
#
# The above copyright notice and this permission notice shall be included in
# all copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
# IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
# FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
# AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
# LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING
# FROM, OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS
# IN THE SOFTWARE.

""" Mesh graph.

A :class:`MeshGraph` stores vertices, arcs (halfedges), edges, and faces
in keyed storages. Items are looked up by key and returned as views.
Structural changes are made through mutable views. Each editing operation
takes a snapshot of its preconditions and then runs as a transaction that
either completes or leaves the graph untouched.

Note
----
The :meth:`MeshGraph._check` method verifies connectivity invariants by
assertions. You can disable assertions by running in optimized mode via
the "-O" command line argument.
"""

import logging
from copy import copy

import numpy as np

from meshgraph.errors import TopologyNotFound
from meshgraph.iterators import ArcCirculator
from meshgraph.mutation import Replace
from meshgraph.path import Path
from meshgraph.primitives import index_polygons
from meshgraph.storage import Core, FaceKey, VertexKey
from meshgraph.topology import (ArcBridgeCache, ArcExtrudeCache,
                                EdgeRemoveCache, EdgeSplitCache,
                                FaceBridgeCache, FaceExtrudeCache,
                                FaceInsertCache, FaceMergeCache,
                                FacePokeCache, FaceRemoveCache,
                                FaceSplitCache, VertexRemoveCache,
                                arc_bridge, arc_extrude, edge_remove,
                                edge_split, face_bridge, face_extrude,
                                face_flatten, face_insert, face_merge,
                                face_poke, face_remove, face_split,
                                face_triangulate, vertex_remove)
from meshgraph.views import (ArcOrphan, ArcView, EdgeOrphan, EdgeView,
                             FaceOrphan, FaceView, Ring, VertexOrphan,
                             VertexView, View)


logger = logging.getLogger(__name__)


class MeshGraph:
    """ Halfedge mesh graph.

    Parameters
    ----------
    points : array_like, shape (n, k), optional
        Vertex positions.
    faces : iterable of sequence of int, optional
        Face definitions, 0-based indices into `points`.
    name : str, optional
        Name tag.

    Raises
    ------
    ValueError
        If faces are given without points.
    IndexError
        If a face refers to a point that does not exist.
    TopologyConflict
        If a face can't be inserted into the faces defined before it.

    Examples
    --------
    A unit square:

    >>> graph = MeshGraph([(0, 0), (1, 0), (1, 1), (0, 1)], [[0, 1, 2, 3]])
    >>> graph.face_count()
    1
    """

    def __init__(self, points=None, faces=None, *, name=None):
        if points is None and faces is not None:
            msg = "face definitions require 'points' argument != None"
            raise ValueError(msg)

        self._core = Core.default()
        self._name = name

        if points is None:
            return

        points = np.asarray(points, dtype=float)

        if points.ndim != 2:
            raise ValueError('points have to be an (n, k) array')

        def build(mutation):
            keys = [mutation.insert_vertex(np.array(p)) for p in points]

            if faces is None:
                return

            for face in faces:
                perimeter = [keys[i] for i in face]
                cache = FaceInsertCache.snapshot(mutation, perimeter)
                face_insert(mutation, cache)

        Replace(self).commit_with(build)

        # Typically one does not expect isolated vertices in a mesh.
        if faces is not None and any(v.arc is None
                                     for v in self.vertex_storage.values()):
            logger.warning('%r has isolated vertices', self)

    def __repr__(self):
        return (f'MeshGraph(name={self._name!r}, '
                f'vertices={self.vertex_count()}, '
                f'faces={self.face_count()})')

    def __copy__(self):
        graph = MeshGraph(name=self._name)
        graph._core = self._core.copy()

        return graph

    @classmethod
    def from_raw_buffers(cls, indices, vertices, *, name=None):
        """ Build from an index buffer of polygons and a vertex buffer.

        Parameters
        ----------
        indices : iterable of sequence of int
            One sequence of vertex indices per polygon.
        vertices : array_like, shape (n, k)
            Vertex positions.

        Returns
        -------
        MeshGraph
        """
        return cls(vertices, [list(polygon) for polygon in indices],
                   name=name)

    @classmethod
    def from_raw_buffers_with_arity(cls, indices, vertices, arity, *,
                                    name=None):
        """ Build from a flat index buffer of polygons of uniform arity.

        Parameters
        ----------
        indices : sequence of int
            Flat index buffer, `arity` consecutive indices per polygon.
        vertices : array_like, shape (n, k)
            Vertex positions.
        arity : int
            Number of vertices per polygon.

        Raises
        ------
        ValueError
            If the length of `indices` is not a multiple of `arity`.
        """
        indices = list(indices)

        if arity < 3 or len(indices) % arity:
            raise ValueError(f'index buffer does not hold polygons of '
                             f'arity {arity}')

        faces = [indices[i:i + arity] for i in range(0, len(indices), arity)]

        return cls(vertices, faces, name=name)

    @classmethod
    def from_polygons(cls, polygons, *, name=None):
        """ Build from polygons given by vertex positions.

        Coinciding positions are merged into a single vertex.

        Parameters
        ----------
        polygons : iterable of array_like
            Each polygon is a sequence of positions.
        """
        points, faces = index_polygons(polygons)
        return cls(points, faces, name=name)

    @property
    def name(self):
        """ Name tag of the graph.

        :type: str
        """
        return self._name

    @name.setter
    def name(self, value):
        self._name = value

    @property
    def vertex_storage(self):
        return self._core.vertex_storage

    @property
    def arc_storage(self):
        return self._core.arc_storage

    @property
    def edge_storage(self):
        return self._core.edge_storage

    @property
    def face_storage(self):
        return self._core.face_storage

    def vertex_count(self):
        return len(self._core.vertex_storage)

    def arc_count(self):
        return len(self._core.arc_storage)

    def edge_count(self):
        return len(self._core.edge_storage)

    def face_count(self):
        return len(self._core.face_storage)

    def vertex(self, key):
        """ Vertex view.

        Raises
        ------
        TopologyNotFound
            If there is no vertex with the given key.
        """
        return VertexView(self, key)

    def vertex_mut(self, key):
        return VertexViewMut(self, key)

    def arc(self, key):
        return ArcView(self, key)

    def arc_mut(self, key):
        return ArcViewMut(self, key)

    def edge(self, key):
        return EdgeView(self, key)

    def edge_mut(self, key):
        return EdgeViewMut(self, key)

    def face(self, key):
        return FaceView(self, key)

    def face_mut(self, key):
        return FaceViewMut(self, key)

    def vertices(self):
        """ Iterate over all vertices in insertion order.

        Yields
        ------
        VertexView
        """
        for key in list(self.vertex_storage.keys()):
            yield VertexView(self, key)

    def arcs(self):
        for key in list(self.arc_storage.keys()):
            yield ArcView(self, key)

    def edges(self):
        for key in list(self.edge_storage.keys()):
            yield EdgeView(self, key)

    def faces(self):
        """ Iterate over all faces in insertion order.

        Yields
        ------
        FaceView
        """
        for key in list(self.face_storage.keys()):
            yield FaceView(self, key)

    def vertex_orphans(self):
        """ Iterate over all vertices for geometry updates.

        Yields
        ------
        VertexOrphan
        """
        for key in list(self.vertex_storage.keys()):
            yield VertexOrphan(self, key)

    def arc_orphans(self):
        for key in list(self.arc_storage.keys()):
            yield ArcOrphan(self, key)

    def edge_orphans(self):
        for key in list(self.edge_storage.keys()):
            yield EdgeOrphan(self, key)

    def face_orphans(self):
        for key in list(self.face_storage.keys()):
            yield FaceOrphan(self, key)

    def insert_vertex(self, position):
        """ Add an isolated vertex.

        Parameters
        ----------
        position : array_like
            Vertex position.

        Returns
        -------
        VertexKey
        """
        position = np.array(position, dtype=float)

        return Replace(self).commit_with(
            lambda mutation: mutation.insert_vertex(position))

    def insert_face(self, perimeter, geometry=None):
        """ Add a face.

        Parameters
        ----------
        perimeter : iterable of VertexKey
            At least three distinct vertices in ring order.
        geometry : object, optional
            Face geometry.

        Returns
        -------
        FaceKey

        Raises
        ------
        TopologyMalformed
            If the perimeter is degenerate.
        TopologyNotFound
            If a vertex does not exist.
        TopologyConflict
            If the face intrudes on existing faces.
        """
        cache = FaceInsertCache.snapshot(self, perimeter)

        return Replace(self).commit_with(
            lambda mutation: face_insert(mutation, cache, face=geometry))

    def path(self, keys):
        """ Path through the given vertices.

        Parameters
        ----------
        keys : iterable of VertexKey

        Returns
        -------
        Path
        """
        return Path(self, keys)

    def triangulate(self):
        """ Triangulate all faces.

        Faces that are already triangles are left alone.
        """
        def triangulate(mutation):
            for abc in list(mutation.face_storage.keys()):
                face_triangulate(mutation, abc)

        Replace(self).commit_with(triangulate)

    def clear(self):
        """ Remove all mesh items.
        """
        self._core = Core.default()

    def copy(self):
        return copy(self)

    def _check(self):
        """ Perform sanity checks.
        """
        vertices, arcs, edges, faces = self._core.unfuse()

        for a, vertex in vertices.items():
            if vertex.arc is not None:
                assert vertex.arc in arcs
                assert vertex.arc.source == a

        for ab, arc in arcs.items():
            a, b = ab
            ba = ab.opposite()

            assert a in vertices and b in vertices
            assert ba in arcs
            assert arc.edge in edges
            assert arcs.get(ba).edge == arc.edge

            # Rings are closed.
            assert arc.next is not None and arc.previous is not None
            assert arc.next.source == b
            assert arc.previous.destination == a
            assert arcs.get(arc.next).previous == ab
            assert arcs.get(arc.previous).next == ab

            if arc.face is not None:
                assert arc.face in faces
                assert arcs.get(arc.next).face == arc.face

        for ab_ba, edge in edges.items():
            assert edge.arc in arcs
            assert arcs.get(edge.arc).edge == ab_ba

        for abc, face in faces.items():
            ring = list(ArcCirculator(self, face.arc))

            assert len(ring) >= 3
            assert arcs.get(ring[-1]).next == face.arc

            for ab in ring:
                assert arcs.get(ab).face == abc


class _Mutable:
    """ Editing support for views bound to a mesh graph.
    """

    _family = None

    @property
    def geometry(self):
        return self._payload().geometry

    @geometry.setter
    def geometry(self, value):
        self._payload().geometry = value

    def into_ref(self):
        """ Read-only view of the same item.
        """
        return View._family[self._kind](self._source, self._key)

    def _replace(self, f):
        return Replace(self._source).commit_with(f)


class VertexViewMut(_Mutable, VertexView):
    """ Mutable vertex view.
    """

    @property
    def geometry(self):
        return self._payload().geometry

    @geometry.setter
    def geometry(self, value):
        self._payload().geometry = np.asarray(value, dtype=float)

    @property
    def position(self):
        return self._payload().geometry

    @position.setter
    def position(self, value):
        self._payload().geometry = np.asarray(value, dtype=float)

    def neighboring_vertex_orphans(self):
        keys = [vertex.key for vertex in self.neighboring_vertices()]

        for key in keys:
            yield VertexOrphan(self._source, key)

    def neighboring_face_orphans(self):
        keys = [face.key for face in self.neighboring_faces()]

        for key in keys:
            yield FaceOrphan(self._source, key)

    def remove(self):
        """ Remove the vertex, its incident edges, and adjacent faces.

        Returns
        -------
        ~numpy.ndarray
            Position of the removed vertex.
        """
        cache = VertexRemoveCache.snapshot(self._source, self._key)
        vertex = self._replace(lambda mutation: vertex_remove(mutation, cache))

        return vertex.geometry


class ArcViewMut(_Mutable, ArcView):
    """ Mutable arc view.
    """

    def split_with(self, f):
        """ Split the edge of the arc at a new vertex.

        Parameters
        ----------
        f : callable
            Called without arguments, returns the position of the new
            vertex.

        Returns
        -------
        VertexViewMut
            The inserted vertex.
        """
        cache = EdgeSplitCache.snapshot(self._source, self._key, f())
        m = self._replace(lambda mutation: edge_split(mutation, cache))

        return VertexViewMut(self._source, m)

    def split_at_midpoint(self):
        midpoint = self.midpoint()
        return self.split_with(lambda: midpoint)

    def bridge(self, destination):
        """ Connect two boundary arcs with a quad.

        Parameters
        ----------
        destination : ArcKey
            The arc ``(c, d)``. The quad ``[a, b, c, d]`` is inserted.

        Returns
        -------
        FaceViewMut
        """
        cache = ArcBridgeCache.snapshot(self._source, self._key, destination)
        abc = self._replace(lambda mutation: arc_bridge(mutation, cache))

        return FaceViewMut(self._source, abc)

    def extrude(self, translation):
        """ Extrude a boundary arc.

        Parameters
        ----------
        translation : array_like
            Offset of the extruded arc.

        Returns
        -------
        ArcViewMut
            The extruded arc.

        Raises
        ------
        TopologyConflict
            If the arc is not a boundary arc.
        """
        cache = ArcExtrudeCache.snapshot(self._source, self._key, translation)
        cd = self._replace(lambda mutation: arc_extrude(mutation, cache))

        return ArcViewMut(self._source, cd)

    def remove(self):
        """ Remove the edge of the arc.

        Returns
        -------
        VertexViewMut
            The source vertex of the arc.
        """
        cache = EdgeRemoveCache.snapshot(self._source, self._key)
        self._replace(lambda mutation: edge_remove(mutation, cache))

        return VertexViewMut(self._source, self._key.source)


class EdgeViewMut(_Mutable, EdgeView):
    """ Mutable edge view.
    """

    def split_with(self, f):
        return self.arc().split_with(f)

    def split_at_midpoint(self):
        return self.arc().split_at_midpoint()

    def remove(self):
        """ Remove the edge and the faces on either side.
        """
        self.arc().remove()


class FaceViewMut(_Mutable, FaceView):
    """ Mutable face view.
    """

    def vertex_orphans(self):
        keys = [vertex.key for vertex in self.vertices()]

        for key in keys:
            yield VertexOrphan(self._source, key)

    def interior_arc_orphans(self):
        keys = [arc.key for arc in self.interior_arcs()]

        for key in keys:
            yield ArcOrphan(self._source, key)

    def neighboring_face_orphans(self):
        keys = [face.key for face in self.neighboring_faces()]

        for key in keys:
            yield FaceOrphan(self._source, key)

    def split(self, a, b):
        """ Split the face into two faces.

        Parameters
        ----------
        a, b : VertexKey or int
            Vertices of the face (keys or ring indices). Their ring
            distance has to be at least two.

        Returns
        -------
        ArcViewMut
            The new arc from `a` to `b`.
        """
        cache = FaceSplitCache.snapshot(self._source, self._key, a, b)
        ab = self._replace(lambda mutation: face_split(mutation, cache))

        return ArcViewMut(self._source, ab)

    def merge(self, destination):
        """ Merge with a neighboring face.

        Parameters
        ----------
        destination : FaceKey or int
            Key of a neighboring face or its index among the neighbors.

        Returns
        -------
        FaceViewMut
            The merged face.
        """
        cache = FaceMergeCache.snapshot(self._source, self._key, destination)
        abc = self._replace(lambda mutation: face_merge(mutation, cache))

        return FaceViewMut(self._source, abc)

    def bridge(self, destination):
        """ Connect this face and another face by a band of quads.

        Both faces are removed.

        Parameters
        ----------
        destination : FaceKey
            A face of the same arity.

        Returns
        -------
        list of FaceViewMut
            The quads of the band.

        Raises
        ------
        ArityNonUniform
            If the arities of both faces differ.
        """
        cache = FaceBridgeCache.snapshot(self._source, self._key, destination)
        quads = self._replace(lambda mutation: face_bridge(mutation, cache))

        return [FaceViewMut(self._source, abc) for abc in quads]

    def triangulate(self):
        """ Split the face into triangles.

        Returns
        -------
        FaceViewMut
            The last triangle split off.
        """
        abc = self._replace(
            lambda mutation: face_triangulate(mutation, self._key))

        return FaceViewMut(self._source, abc)

    def poke_with(self, f):
        """ Replace the face by a fan of triangles around a new vertex.

        Parameters
        ----------
        f : callable
            Called without arguments, returns the position of the new
            vertex.

        Returns
        -------
        VertexViewMut
            The new vertex.
        """
        cache = FacePokeCache.snapshot(self._source, self._key)
        position = f()
        c = self._replace(
            lambda mutation: face_poke(mutation, cache, position))

        return VertexViewMut(self._source, c)

    def poke_at_centroid(self):
        centroid = self.centroid()
        return self.poke_with(lambda: centroid)

    def poke_with_offset(self, offset):
        """ Poke at the centroid translated along the face normal.

        Raises
        ------
        GeometryError
            If the face normal can't be computed.
        """
        position = self.centroid() + offset * self.normal()
        return self.poke_with(lambda: position)

    def extrude_with(self, f):
        """ Extrude the face.

        Parameters
        ----------
        f : callable
            Maps each vertex position of the face to the position of the
            corresponding extruded vertex.

        Returns
        -------
        FaceViewMut
            The extruded face.
        """
        cache = FaceExtrudeCache.snapshot(self._source, self._key)
        abc = self._replace(lambda mutation: face_extrude(mutation, cache, f))

        return FaceViewMut(self._source, abc)

    def extrude(self, offset):
        """ Extrude the face along its normal.

        Parameters
        ----------
        offset : float
            Distance of the extruded face.

        Raises
        ------
        GeometryError
            If the face normal can't be computed.
        """
        translation = offset * self.normal()
        return self.extrude_with(lambda position: position + translation)

    def flatten(self):
        """ Project the vertices of the face onto its best-fit plane.

        Raises
        ------
        GeometryError
            If a vertex can't be projected. No vertex is moved.
        """
        self._replace(lambda mutation: face_flatten(mutation, self._key))

    def remove(self):
        """ Remove the face.

        Returns
        -------
        RingMut
            The ring formerly occupied by the face.
        """
        cache = FaceRemoveCache.snapshot(self._source, self._key)
        face = self._replace(lambda mutation: face_remove(mutation, cache))

        return RingMut(self._source, face.arc)


class RingMut(_Mutable, Ring):
    """ Mutable ring view.
    """

    def get_or_insert_face(self, geometry=None):
        """ Face occupying the ring.

        A new face is inserted if the ring is unoccupied.

        Returns
        -------
        FaceViewMut
        """
        face = self.face()

        if face is not None:
            return FaceViewMut(self._source, face.key)

        perimeter = [arc.key.source for arc in self.interior_arcs()]

        return FaceViewMut(self._source,
                           self._source.insert_face(perimeter, geometry))


_Mutable._family = {
    'vertex': VertexViewMut,
    'arc': ArcViewMut,
    'edge': EdgeViewMut,
    'face': FaceViewMut,
    'ring': RingMut,
}
