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

""" Views and orphans.

A view binds a storage source and a key. Views never own mesh items.
They expose the key, the geometry, and navigation methods that return
further views. Views refuse to bind keys that do not exist and raise
:class:`~meshgraph.errors.TopologyNotFound` on access once their key went
stale.

Orphans bind a single storage and a key. They only give access to the
geometry of a mesh item and can't navigate. Orphans are handed out when
the geometry of many items is modified while iterating.

Note
----
The read-only views defined here are bound to any storage source,
including the contexts of a running mutation. Mutable views that add
editing operations are bound to a :class:`~meshgraph.graph.MeshGraph`
and live in :mod:`meshgraph.graph`.
"""

from numbers import Integral

import numpy as np

import meshgraph.traits as traits
from meshgraph.errors import TopologyNotFound
from meshgraph.iterators import (ArcCirculator, FaceCirculator,
                                 OutgoingArcCirculator, BreadthTraversal,
                                 DepthTraversal)
from meshgraph.storage import VertexKey


class View:
    """ View base class.

    Parameters
    ----------
    source : object
        Storage source, e.g., a :class:`~meshgraph.graph.MeshGraph` or a
        :class:`~meshgraph.storage.Core`.
    key : OpaqueKey
        Key of the viewed item.

    Raises
    ------
    TopologyNotFound
        If `key` does not refer to an existing item.
    """

    # Name of the storage attribute of the source and item kind, set by
    # subclasses.
    _storage = None
    _kind = None

    # Maps item kinds to the view classes returned by navigation methods.
    _family = None

    def __init__(self, source, key):
        if key not in getattr(source, self._storage):
            raise TopologyNotFound(f'{key!r} not found')

        self._source = source
        self._key = key

    def __repr__(self):
        return f'{type(self).__name__}({self._key!r})'

    def __eq__(self, other):
        if not isinstance(other, View):
            return NotImplemented

        return (self._kind == other._kind and self._key == other._key and
                self._source is other._source)

    def __hash__(self):
        return hash(self._key)

    @property
    def key(self):
        """ Key of the viewed item.
        """
        return self._key

    @property
    def geometry(self):
        """ Geometry of the viewed item.
        """
        return self._payload().geometry

    def _payload(self):
        payload = getattr(self._source, self._storage).get(self._key)

        if payload is None:
            raise TopologyNotFound(f'{self._key!r} is stale')

        return payload

    def _bind(self, kind, key):
        return self._family[kind](self._source, key)


class VertexView(View):
    """ Vertex view.
    """

    _storage = 'vertex_storage'
    _kind = 'vertex'

    @property
    def position(self):
        """ Vertex position, same as :attr:`geometry`.

        :type: ~numpy.ndarray
        """
        return self._payload().geometry

    def is_isolated(self):
        """ Check if the vertex has no outgoing arc.
        """
        return self._payload().arc is None

    def is_boundary_vertex(self):
        """ Check if any arc leaving the vertex is a boundary arc.
        """
        return any(arc.is_boundary_arc() for arc in self.outgoing_arcs())

    def outgoing_arc(self):
        """ Leading outgoing arc.

        Returns
        -------
        ArcView or None
            :obj:`None` for isolated vertices.
        """
        key = self._payload().arc
        return None if key is None else self._bind('arc', key)

    def outgoing_arcs(self):
        """ Iterate over arcs leaving the vertex.

        Yields
        ------
        ArcView
        """
        self._payload()

        for key in OutgoingArcCirculator(self._source, self._key):
            yield self._bind('arc', key)

    def incoming_arcs(self):
        """ Iterate over arcs arriving at the vertex.

        Yields
        ------
        ArcView
            The opposite arcs of the arcs yielded by
            :meth:`outgoing_arcs`.
        """
        for arc in self.outgoing_arcs():
            yield arc.opposite_arc()

    def neighboring_vertices(self):
        """ Iterate over adjacent vertices.

        Yields
        ------
        VertexView
        """
        for arc in self.outgoing_arcs():
            yield arc.destination_vertex()

    def neighboring_faces(self):
        """ Iterate over incident faces.

        Yields
        ------
        FaceView
        """
        for arc in self.outgoing_arcs():
            face = arc.face()

            if face is not None:
                yield face


class ArcView(View):
    """ Arc view.
    """

    _storage = 'arc_storage'
    _kind = 'arc'

    def source_vertex(self):
        return self._bind('vertex', self._key.source)

    def destination_vertex(self):
        return self._bind('vertex', self._key.destination)

    def opposite_arc(self):
        return self._bind('arc', self._key.opposite())

    def next_arc(self):
        """ Successor in the ring.

        Returns
        -------
        ArcView or None
            :obj:`None` if the link is not set.
        """
        key = self._payload().next
        return None if key is None else self._bind('arc', key)

    def previous_arc(self):
        """ Predecessor in the ring.

        Returns
        -------
        ArcView or None
            :obj:`None` if the link is not set.
        """
        key = self._payload().previous
        return None if key is None else self._bind('arc', key)

    def edge(self):
        key = self._payload().edge
        return None if key is None else self._bind('edge', key)

    def face(self):
        """ Face occupying the ring of the arc.

        Returns
        -------
        FaceView or None
            :obj:`None` for boundary arcs.
        """
        key = self._payload().face
        return None if key is None else self._bind('face', key)

    def ring(self):
        return self._bind('ring', self._key)

    def is_boundary_arc(self):
        return self._payload().face is None

    def midpoint(self):
        """ Midpoint of the arc.

        Returns
        -------
        ~numpy.ndarray
        """
        a = self.source_vertex().position
        b = self.destination_vertex().position

        return 0.5 * (np.asarray(a, dtype=float) + np.asarray(b, dtype=float))


class EdgeView(View):
    """ Edge view.
    """

    _storage = 'edge_storage'
    _kind = 'edge'

    def arc(self):
        return self._bind('arc', self._payload().arc)

    def vertices(self):
        """ Endpoints of the edge.

        Returns
        -------
        tuple
            Two :class:`VertexView` instances.
        """
        arc = self.arc()
        return arc.source_vertex(), arc.destination_vertex()

    def is_boundary_edge(self):
        arc = self.arc()
        return arc.is_boundary_arc() or arc.opposite_arc().is_boundary_arc()

    def midpoint(self):
        return self.arc().midpoint()


class Ringoid:
    """ Behavior shared by faces and rings.

    Subclasses implement :meth:`into_arc` and :meth:`interior_arcs`. All
    other methods are derived from the interior arcs.
    """

    def into_arc(self):
        raise NotImplementedError

    def interior_arcs(self):
        raise NotImplementedError

    def vertices(self):
        """ Iterate over the vertices of the ring.

        Yields
        ------
        VertexView
            The destination vertex of each interior arc.
        """
        for arc in self.interior_arcs():
            yield arc.destination_vertex()

    def arity(self):
        """ Number of interior arcs.

        :rtype: int
        """
        return sum(1 for _ in self.interior_arcs())

    def distance(self, source, destination):
        """ Ring distance of two vertices.

        Parameters
        ----------
        source, destination : VertexKey or int
            Vertex key or 0-based index into the vertices of the ring.

        Returns
        -------
        int
            Number of arcs between both vertices along the shorter
            direction of the ring.

        Raises
        ------
        TopologyNotFound
            If a key does not belong to the ring or if an index is out of
            range.
        """
        keys = [vertex.key for vertex in self.vertices()]

        i = self._index(keys, source)
        j = self._index(keys, destination)
        d = abs(i - j)

        return min(d, len(keys) - d)

    def positions(self):
        """ Vertex positions in ring order.

        Returns
        -------
        ~numpy.ndarray, shape (n, k)
        """
        return np.array([vertex.position for vertex in self.vertices()],
                        dtype=float)

    def centroid(self):
        return traits.centroid(self.positions())

    def normal(self):
        """ Unit normal.

        Raises
        ------
        GeometryError
            If positions are not three-dimensional or degenerate.
        """
        return traits.normal(self.positions())

    def plane(self):
        """ Best-fit plane of the vertex positions.

        Returns
        -------
        ~meshgraph.traits.Plane
        """
        return traits.plane(self.positions())

    def resolve(self, selector):
        """ Vertex key for a selector.

        Parameters
        ----------
        selector : VertexKey or int

        Returns
        -------
        VertexKey
        """
        keys = [vertex.key for vertex in self.vertices()]
        return keys[self._index(keys, selector)]

    @staticmethod
    def _index(keys, selector):
        if isinstance(selector, VertexKey):
            try:
                return keys.index(selector)
            except ValueError:
                raise TopologyNotFound(f'{selector!r} not in ring') from None
        elif isinstance(selector, Integral) and not isinstance(selector, bool):
            if not 0 <= selector < len(keys):
                raise TopologyNotFound(f'index {selector} out of range')

            return int(selector)

        raise TypeError(f'invalid selector {selector!r}')


class FaceView(Ringoid, View):
    """ Face view.
    """

    _storage = 'face_storage'
    _kind = 'face'

    def arc(self):
        """ Leading arc of the face.
        """
        return self._bind('arc', self._payload().arc)

    def into_arc(self):
        return self.arc()

    def ring(self):
        return self._bind('ring', self._payload().arc)

    def interior_arcs(self):
        """ Iterate over the arcs of the ring occupied by the face.

        Yields
        ------
        ArcView
        """
        for key in ArcCirculator(self._source, self._payload().arc):
            yield self._bind('arc', key)

    def neighboring_faces(self):
        """ Iterate over faces that share an edge with this face.

        Yields
        ------
        FaceView
        """
        for key in FaceCirculator(self._source, self._payload().arc):
            yield self._bind('face', key)

    def traverse_by_breadth(self):
        """ Breadth-first traversal of the faces reachable from this face.

        Yields
        ------
        FaceView
            Starting with this face.
        """
        self._payload()

        for key in BreadthTraversal(self._source, self._key):
            yield self._bind('face', key)

    def traverse_by_depth(self):
        """ Depth-first traversal of the faces reachable from this face.

        Yields
        ------
        FaceView
            Starting with this face.
        """
        self._payload()

        for key in DepthTraversal(self._source, self._key):
            yield self._bind('face', key)


class Ring(Ringoid, View):
    """ Ring view.

    A ring is the closed loop of arcs reachable by following ``next``
    links. It is bound to any of its arcs and may or may not be occupied
    by a face.
    """

    _storage = 'arc_storage'
    _kind = 'ring'

    def arc(self):
        return self._bind('arc', self._key)

    def into_arc(self):
        return self.arc()

    def interior_arcs(self):
        self._payload()

        for key in ArcCirculator(self._source, self._key):
            yield self._bind('arc', key)

    def face(self):
        """ Face occupying the ring.

        Returns
        -------
        FaceView or None
        """
        key = self._payload().face
        return None if key is None else self._bind('face', key)

    def is_boundary_ring(self):
        return self._payload().face is None


View._family = {
    'vertex': VertexView,
    'arc': ArcView,
    'edge': EdgeView,
    'face': FaceView,
    'ring': Ring,
}


class Orphan:
    """ Geometry-only access to a mesh item.

    The storage is looked up on the source at every access, so an orphan
    follows the source across transactions.

    Parameters
    ----------
    source : object
        Storage source.
    key : OpaqueKey
        Key of the item.

    Raises
    ------
    TopologyNotFound
        If `key` does not refer to an existing item.
    """

    __slots__ = ('_source', '_key')

    # Name of the storage attribute of the source, set by subclasses.
    _storage = None

    def __init__(self, source, key):
        if key not in getattr(source, self._storage):
            raise TopologyNotFound(f'{key!r} not found')

        self._source = source
        self._key = key

    def __repr__(self):
        return f'{type(self).__name__}({self._key!r})'

    @property
    def key(self):
        return self._key

    @property
    def geometry(self):
        return self._payload().geometry

    @geometry.setter
    def geometry(self, value):
        self._payload().geometry = value

    def _payload(self):
        payload = getattr(self._source, self._storage).get(self._key)

        if payload is None:
            raise TopologyNotFound(f'{self._key!r} is stale')

        return payload


class VertexOrphan(Orphan):
    __slots__ = ()
    _storage = 'vertex_storage'

    @property
    def position(self):
        return self._payload().geometry

    @position.setter
    def position(self, value):
        self._payload().geometry = np.asarray(value, dtype=float)

    @Orphan.geometry.setter
    def geometry(self, value):
        self._payload().geometry = np.asarray(value, dtype=float)


class ArcOrphan(Orphan):
    __slots__ = ()
    _storage = 'arc_storage'


class EdgeOrphan(Orphan):
    __slots__ = ()
    _storage = 'edge_storage'


class FaceOrphan(Orphan):
    __slots__ = ()
    _storage = 'face_storage'
