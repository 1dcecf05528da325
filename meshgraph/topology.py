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

""" Topological mutations.

Every structural operation is split into two phases. A *cache* is taken
with the ``snapshot`` class method of the operation. Snapshots validate
all preconditions against the current state of a storage source and
capture the keys and data the operation needs. Nothing is modified by a
snapshot. A *commit function* then performs the edit on a
:class:`~meshgraph.mutation.Mutation` using the cache.

Snapshots can also be taken from a running mutation. Composite
operations (split, poke, bridge, extrude, merge) commit several simpler
operations this way.
"""

from copy import copy

import numpy as np

import meshgraph.traits as traits
from meshgraph.errors import (ArityNonUniform, GeometryError,
                              TopologyConflict, TopologyMalformed,
                              TopologyNotFound)
from meshgraph.iterators import ArcCirculator, OutgoingArcCirculator
from meshgraph.payload import Face
from meshgraph.storage import ArcKey, FaceKey
from meshgraph.views import ArcView, FaceView, VertexView


def _perimeter(keys):
    """ Pairs of cyclically consecutive items.
    """
    n = len(keys)
    return [(keys[i], keys[(i + 1) % n]) for i in range(n)]


def _arc(source, ab):
    arc = source.arc_storage.get(ab)

    if arc is None:
        raise TopologyNotFound(f'{ab!r} not found')

    return arc


def _boundary_arc(source, a):
    """ Some boundary arc leaving a vertex.

    Returns
    -------
    ArcKey or None
        :obj:`None` if no linked arc leaves the vertex.

    Raises
    ------
    TopologyConflict
        If all arcs leaving the vertex are occupied by faces.
    """
    arcs = [ab for ab in OutgoingArcCirculator(source, a)
            if source.arc_storage.get(ab).next is not None]

    for ab in arcs:
        if source.arc_storage.get(ab).face is None:
            return ab

    if arcs:
        raise TopologyConflict(f'{a!r} is not a boundary vertex')

    return None


# Faces.

class FaceInsertCache:
    """ Snapshot for inserting a face.

    Attributes
    ----------
    perimeter : list of VertexKey
        Vertices of the new face in ring order.
    boundaries : dict
        Maps each vertex of the perimeter to a boundary arc leaving it,
        :obj:`None` if the vertex has no linked arcs.
    """

    def __init__(self, perimeter, boundaries):
        self.perimeter = perimeter
        self.boundaries = boundaries

    @classmethod
    def snapshot(cls, source, perimeter):
        """ Validate a face perimeter.

        Parameters
        ----------
        source : object
            Storage source.
        perimeter : iterable of VertexKey
            At least three distinct vertices in ring order.

        Raises
        ------
        TopologyMalformed
            If vertices are repeated or if there are fewer than three.
        TopologyNotFound
            If a vertex does not exist.
        TopologyConflict
            If an arc of the perimeter is occupied by a face, if a vertex
            is not on the boundary, or if the new face would bisect an
            existing ring.
        """
        perimeter = list(perimeter)
        keys = set(perimeter)

        if len(keys) != len(perimeter):
            raise TopologyMalformed('perimeter contains duplicate vertices')

        if len(perimeter) < 3:
            raise TopologyMalformed('perimeter has less than three vertices')

        boundaries = {}

        for key in perimeter:
            if key not in source.vertex_storage:
                raise TopologyNotFound(f'{key!r} not found')

            boundaries[key] = _boundary_arc(source, key)

        arcs = [ArcKey(a, b) for a, b in _perimeter(perimeter)]

        for ab, bc in _perimeter(arcs):
            previous = source.arc_storage.get(ab)

            if previous is None:
                continue

            if previous.face is not None:
                raise TopologyConflict(f'{ab!r} is occupied')

            # An arc that does not exist yet must not cut an existing ring
            # in two.
            if bc not in source.arc_storage and previous.next is not None:
                if previous.next.destination in keys:
                    raise TopologyConflict(f'face bisects ring at {ab!r}')

        return cls(perimeter, boundaries)


def face_insert(mutation, cache, arc=None, face=None):
    """ Insert a face.

    Parameters
    ----------
    mutation : Mutation
    cache : FaceInsertCache
    arc : object, optional
        Geometry of newly created arcs.
    face : object, optional
        Face geometry.

    Returns
    -------
    FaceKey
    """
    arcs = []

    for a, b in _perimeter(cache.perimeter):
        _, (ab, _) = mutation.get_or_insert_edge(a, b, arc=arc)
        arcs.append(ab)

    mutation.connect_face_exterior(arcs, cache.boundaries)

    abc = mutation.face_storage.insert(Face(arcs[0], face))
    mutation.connect_face_interior(arcs, abc)

    return abc


class FaceRemoveCache:
    """ Snapshot for removing a face.
    """

    def __init__(self, abc, arcs):
        self.abc = abc
        self.arcs = arcs

    @classmethod
    def snapshot(cls, source, abc):
        face = FaceView(source, abc)
        return cls(abc, [arc.key for arc in face.interior_arcs()])


def face_remove(mutation, cache):
    """ Remove a face.

    The arcs of the face become boundary arcs. Arcs, edges, and vertices
    are kept.

    Returns
    -------
    Face
        The removed payload.
    """
    mutation.disconnect_face_interior(cache.arcs)
    return mutation.remove_face(cache.abc)


class FaceSplitCache:
    """ Snapshot for splitting a face.
    """

    def __init__(self, face, left, right, geometry):
        self.face = face
        self.left = left
        self.right = right
        self.geometry = geometry

    @classmethod
    def snapshot(cls, source, abc, a, b):
        """ Validate a face split.

        Parameters
        ----------
        source : object
            Storage source.
        abc : FaceKey
            Face to split.
        a, b : VertexKey or int
            Vertices of the face (keys or ring indices) connected by the
            new arc.

        Raises
        ------
        TopologyNotFound
            If the face does not exist or a vertex does not belong to it.
        TopologyMalformed
            If the ring distance of both vertices is less than two.
        """
        face = FaceView(source, abc)

        if face.distance(a, b) <= 1:
            raise TopologyMalformed('split vertices are too close')

        keys = [vertex.key for vertex in face.vertices()]
        n = len(keys)
        i = keys.index(face.resolve(a))
        j = keys.index(face.resolve(b))

        left = [keys[k % n] for k in range(i, i + (j - i) % n + 1)]
        right = [keys[k % n] for k in range(j, j + (i - j) % n + 1)]

        return cls(FaceRemoveCache.snapshot(source, abc), left, right,
                   face.geometry)


def face_split(mutation, cache):
    """ Split a face into two faces.

    Returns
    -------
    ArcKey
        The new arc pointing from the first to the second split vertex.
    """
    face_remove(mutation, cache.face)

    left = FaceInsertCache.snapshot(mutation, cache.left)
    right = FaceInsertCache.snapshot(mutation, cache.right)

    face_insert(mutation, left, face=copy(cache.geometry))
    face_insert(mutation, right, face=copy(cache.geometry))

    return ArcKey(cache.left[0], cache.right[0])


class FacePokeCache:
    """ Snapshot for poking a face.
    """

    def __init__(self, face, vertices, geometry):
        self.face = face
        self.vertices = vertices
        self.geometry = geometry

    @classmethod
    def snapshot(cls, source, abc):
        face = FaceView(source, abc)
        vertices = [vertex.key for vertex in face.vertices()]

        return cls(FaceRemoveCache.snapshot(source, abc), vertices,
                   face.geometry)


def face_poke(mutation, cache, position):
    """ Replace a face by a triangle fan around a new vertex.

    Parameters
    ----------
    mutation : Mutation
    cache : FacePokeCache
    position : array_like
        Position of the new vertex.

    Returns
    -------
    VertexKey
        The new vertex.
    """
    face_remove(mutation, cache.face)
    c = mutation.insert_vertex(np.asarray(position, dtype=float))

    for a, b in _perimeter(cache.vertices):
        triangle = FaceInsertCache.snapshot(mutation, [a, b, c])
        face_insert(mutation, triangle, face=copy(cache.geometry))

    return c


class FaceBridgeCache:
    """ Snapshot for bridging two faces.
    """

    def __init__(self, source, destination, faces):
        self.source = source
        self.destination = destination
        self.faces = faces

    @classmethod
    def snapshot(cls, source, abc, xyz):
        """ Validate a face bridge.

        Raises
        ------
        TopologyNotFound
            If one of the faces does not exist.
        ArityNonUniform
            If both faces differ in arity.
        """
        faces = (FaceRemoveCache.snapshot(source, abc),
                 FaceRemoveCache.snapshot(source, xyz))

        if abc == xyz:
            raise TopologyMalformed('cannot bridge a face with itself')

        if len(faces[0].arcs) != len(faces[1].arcs):
            raise ArityNonUniform('faces differ in arity')

        return cls(list(faces[0].arcs), list(faces[1].arcs), faces)


def face_bridge(mutation, cache):
    """ Connect two faces by a band of quads.

    Both faces are removed.

    Returns
    -------
    list of FaceKey
        The quads of the band.
    """
    face_remove(mutation, cache.faces[0])
    face_remove(mutation, cache.faces[1])

    quads = []

    for ab, cd in zip(cache.source, reversed(cache.destination)):
        bridge = ArcBridgeCache.snapshot(mutation, ab, cd)
        quads.append(arc_bridge(mutation, bridge))

    return quads


class FaceExtrudeCache:
    """ Snapshot for extruding a face.
    """

    def __init__(self, face, sources, geometry):
        self.face = face
        self.sources = sources
        self.geometry = geometry

    @classmethod
    def snapshot(cls, source, abc):
        face = FaceView(source, abc)
        sources = [vertex.key for vertex in face.vertices()]

        return cls(FaceRemoveCache.snapshot(source, abc), sources,
                   face.geometry)


def face_extrude(mutation, cache, f):
    """ Extrude a face.

    Parameters
    ----------
    mutation : Mutation
    cache : FaceExtrudeCache
    f : callable
        Maps the position of each vertex of the face to the position of
        the corresponding vertex of the extruded face.

    Returns
    -------
    FaceKey
        The extruded face.

    Raises
    ------
    TopologyNotFound
        If a vertex of the face vanished.
    """
    face_remove(mutation, cache.face)

    positions = []

    for a in cache.sources:
        vertex = mutation.vertex_storage.get(a)

        if vertex is not None:
            positions.append(np.asarray(f(vertex.geometry), dtype=float))

    if len(positions) != len(cache.sources):
        raise TopologyNotFound('vertex of extruded face not found')

    destinations = [mutation.insert_vertex(p) for p in positions]

    extrusion = face_insert(mutation,
                            FaceInsertCache.snapshot(mutation, destinations),
                            face=copy(cache.geometry))

    pairs = list(zip(cache.sources, destinations))

    for (a, c), (b, d) in _perimeter(pairs):
        quad = FaceInsertCache.snapshot(mutation, [a, b, d, c])
        face_insert(mutation, quad)

    return extrusion


class FaceMergeCache:
    """ Snapshot for merging two neighboring faces.
    """

    def __init__(self, edge, geometry):
        self.edge = edge
        self.geometry = geometry

    @classmethod
    def snapshot(cls, source, abc, destination):
        """ Validate a face merge.

        Parameters
        ----------
        source : object
            Storage source.
        abc : FaceKey
            The face that is merged into.
        destination : FaceKey or int
            Key of a neighboring face or index into the neighboring faces
            of `abc`.

        Raises
        ------
        TopologyNotFound
            If `destination` is no neighbor of `abc`.
        """
        face = FaceView(source, abc)

        if not isinstance(destination, FaceKey):
            neighbors = [f.key for f in face.neighboring_faces()]

            if not 0 <= destination < len(neighbors):
                raise TopologyNotFound(f'index {destination} out of range')

            destination = neighbors[destination]

        for arc in face.interior_arcs():
            opposite = arc.opposite_arc().face()

            if opposite is not None and opposite.key == destination:
                ab = arc.key
                break
        else:
            raise TopologyNotFound(f'{destination!r} is no neighbor')

        return cls(EdgeRemoveCache.snapshot(source, ab), face.geometry)


def face_merge(mutation, cache):
    """ Merge two faces by removing their shared edge.

    Returns
    -------
    FaceKey
        The merged face.
    """
    bx = cache.edge.arc.bx

    edge_remove(mutation, cache.edge)

    perimeter = [ab.source for ab in ArcCirculator(mutation, bx)]
    merged = FaceInsertCache.snapshot(mutation, perimeter)

    return face_insert(mutation, merged, face=cache.geometry)


def face_triangulate(mutation, abc):
    """ Split a face into triangles.

    Triangles are split off at the vertices with ring index 0 and 2 until
    the face itself is a triangle.

    Returns
    -------
    FaceKey
        The last remaining triangle.
    """
    while FaceView(mutation, abc).arity() > 3:
        ab = face_split(mutation, FaceSplitCache.snapshot(mutation, abc, 0, 2))
        abc = _arc(mutation, ab).face

    return abc


def face_flatten(mutation, abc):
    """ Project the vertices of a face onto its best-fit plane.

    Vertices are moved along the plane normal. Triangles are left alone.

    Raises
    ------
    GeometryError
        If the plane can't be computed or a projection fails. No vertex
        is moved in this case.
    """
    face = FaceView(mutation, abc)

    if face.arity() == 3:
        return

    plane = face.plane()
    positions = {}

    for vertex in face.vertices():
        line = traits.Line(vertex.position, plane.normal)
        point = traits.intersect(plane, line)

        if point is None:
            raise GeometryError(f'cannot project {vertex.key!r}')

        positions[vertex.key] = point

    for key, point in positions.items():
        mutation.vertex_storage.get(key).geometry = point


# Edges and arcs.

class ArcRemoveCache:
    """ Snapshot of the neighborhood of an arc that is removed.

    Neighbors that are the opposite arc are recorded as :obj:`None`.
    """

    def __init__(self, ab, xa, bx, face):
        self.ab = ab
        self.xa = xa
        self.bx = bx
        self.face = face

    @classmethod
    def snapshot(cls, source, ab):
        arc = ArcView(source, ab)
        payload = _arc(source, ab)
        ba = ab.opposite()

        xa = payload.previous
        bx = payload.next
        face = arc.face()

        return cls(ab, None if xa == ba else xa, None if bx == ba else bx,
                   None if face is None else
                   FaceRemoveCache.snapshot(source, face.key))


class EdgeRemoveCache:
    """ Snapshot for removing an edge.
    """

    def __init__(self, a, b, ab_ba, arc, opposite):
        self.a = a
        self.b = b
        self.ab_ba = ab_ba
        self.arc = arc
        self.opposite = opposite

    @classmethod
    def snapshot(cls, source, ab):
        """ Validate an edge removal.

        Parameters
        ----------
        source : object
            Storage source.
        ab : ArcKey
            Either arc of the edge.

        Raises
        ------
        TopologyNotFound
            If the arc does not exist.
        TopologyMalformed
            If the arc is not bound to an edge or has no opposite.
        """
        payload = _arc(source, ab)
        ba = ab.opposite()

        if payload.edge is None or ba not in source.arc_storage:
            raise TopologyMalformed(f'{ab!r} is not bound to an edge')

        a, b = ab

        return cls(a, b, payload.edge, ArcRemoveCache.snapshot(source, ab),
                   ArcRemoveCache.snapshot(source, ba))


def edge_remove(mutation, cache):
    """ Remove an edge and its arcs.

    Faces occupying the rings of both arcs are removed first. The rings
    on either side are joined. A vertex left without arcs becomes
    isolated, it is not removed.

    Returns
    -------
    Edge
        The removed edge payload.
    """
    a, b = cache.a, cache.b
    arc, opposite = cache.arc, cache.opposite

    for key, bx in ((a, opposite.bx), (b, arc.bx)):
        if bx is None:
            mutation.disconnect_outgoing_arc(key)
        else:
            mutation.connect_outgoing_arc(key, bx)

    if arc.xa is not None and opposite.bx is not None:
        mutation.connect_neighboring_arcs(arc.xa, opposite.bx)

    if opposite.xa is not None and arc.bx is not None:
        mutation.connect_neighboring_arcs(opposite.xa, arc.bx)

    edge = mutation.remove_edge(cache.ab_ba)

    for item in (arc, opposite):
        # Both arcs may belong to the same ring.
        if item.face is not None and item.face.abc in mutation.face_storage:
            face_remove(mutation, item.face)

        mutation.remove_arc(item.ab)

    return edge


class EdgeSplitCache:
    """ Snapshot for splitting an edge.
    """

    def __init__(self, a, b, ab, ba, ab_ba, geometry):
        self.a = a
        self.b = b
        self.ab = ab
        self.ba = ba
        self.ab_ba = ab_ba
        self.geometry = geometry

    @classmethod
    def snapshot(cls, source, ab, position):
        """ Validate an edge split.

        Parameters
        ----------
        source : object
            Storage source.
        ab : ArcKey
            Either arc of the edge.
        position : array_like
            Position of the inserted vertex.

        Raises
        ------
        TopologyNotFound
            If the arc does not exist.
        TopologyMalformed
            If the arc has no opposite or is not bound to an edge.
        """
        payload = _arc(source, ab)
        ba = ab.opposite()

        if ba not in source.arc_storage:
            raise TopologyMalformed(f'{ab!r} has no opposite arc')

        if payload.edge is None:
            raise TopologyMalformed(f'{ab!r} is not bound to an edge')

        a, b = ab

        return cls(a, b, ab, ba, payload.edge,
                   np.asarray(position, dtype=float))


def edge_split(mutation, cache):
    """ Insert a vertex into an edge.

    The arcs ``(a, b)`` and ``(b, a)`` are replaced by the arcs
    ``(a, m)``, ``(m, b)`` and ``(b, m)``, ``(m, a)``. Ring links, faces
    and geometry carry over to the new arcs.

    Returns
    -------
    VertexKey
        The new vertex ``m``.
    """
    a, b, ab, ba = cache.a, cache.b, cache.ab, cache.ba

    arc = mutation.remove_arc(ab)
    opposite = mutation.remove_arc(ba)
    edge = mutation.remove_edge(cache.ab_ba)

    m = mutation.insert_vertex(cache.geometry)

    _, (am, ma) = mutation.get_or_insert_edge(a, m, arc=arc.geometry,
                                              edge=edge.geometry)
    _, (mb, bm) = mutation.get_or_insert_edge(m, b, arc=copy(arc.geometry),
                                              edge=copy(edge.geometry))

    mutation.arc_storage.get(ma).geometry = opposite.geometry
    mutation.arc_storage.get(bm).geometry = copy(opposite.geometry)

    mutation.connect_neighboring_arcs(am, mb)
    mutation.connect_neighboring_arcs(bm, ma)

    # Links to a removed arc are redirected to its replacement. Dangling
    # edges link to themselves at their free end.
    first = {ab: am, ba: bm}
    last = {ab: mb, ba: ma}

    if arc.previous is not None:
        xa = last.get(arc.previous, arc.previous)
        mutation.connect_neighboring_arcs(xa, am)

    if arc.next is not None:
        bx = first.get(arc.next, arc.next)
        mutation.connect_neighboring_arcs(mb, bx)

    if opposite.previous is not None:
        xb = last.get(opposite.previous, opposite.previous)
        mutation.connect_neighboring_arcs(xb, bm)

    if opposite.next is not None:
        ax = first.get(opposite.next, opposite.next)
        mutation.connect_neighboring_arcs(ma, ax)

    for payload, (first, second) in ((arc, (am, mb)), (opposite, (bm, ma))):
        if payload.face is not None:
            mutation.connect_arc_to_face(first, payload.face)
            mutation.connect_arc_to_face(second, payload.face)

            if mutation.face_storage.get(payload.face).arc in (ab, ba):
                mutation.connect_face_to_arc(first, payload.face)

    return m


class ArcBridgeCache:
    """ Snapshot for bridging two arcs with a quad.
    """

    def __init__(self, a, b, c, d, arc, face):
        self.perimeter = [a, b, c, d]
        self.arc = arc
        self.face = face

    @classmethod
    def snapshot(cls, source, ab, cd):
        """ Validate an arc bridge.

        Parameters
        ----------
        source : object
            Storage source.
        ab, cd : ArcKey
            The quad ``[a, b, c, d]`` is inserted.

        Raises
        ------
        TopologyNotFound
            If an arc does not exist.
        TopologyConflict
            If an existing arc of the quad is occupied by a face.
        """
        arc = ArcView(source, ab)
        ArcView(source, cd)

        a, b = ab
        c, d = cd

        for xy in (ArcKey(x, y) for x, y in _perimeter([a, b, c, d])
                   if x != y):
            payload = source.arc_storage.get(xy)

            if payload is not None and payload.face is not None:
                raise TopologyConflict(f'{xy!r} is not a boundary arc')

        face = arc.opposite_arc().face()

        return cls(a, b, c, d, copy(arc.geometry),
                   None if face is None else copy(face.geometry))


def arc_bridge(mutation, cache):
    """ Insert the bridging quad.

    Returns
    -------
    FaceKey
    """
    quad = FaceInsertCache.snapshot(mutation, cache.perimeter)
    return face_insert(mutation, quad, arc=cache.arc, face=cache.face)


class ArcExtrudeCache:
    """ Snapshot for extruding a boundary arc.
    """

    def __init__(self, ab, vertices, arc):
        self.ab = ab
        self.vertices = vertices
        self.arc = arc

    @classmethod
    def snapshot(cls, source, ab, translation):
        """ Validate an arc extrusion.

        Parameters
        ----------
        source : object
            Storage source.
        ab : ArcKey
            A boundary arc.
        translation : array_like
            Offset of the extruded arc.

        Raises
        ------
        TopologyNotFound
            If the arc does not exist.
        TopologyConflict
            If the arc is not a boundary arc.
        """
        arc = ArcView(source, ab)

        if not arc.is_boundary_arc():
            raise TopologyConflict(f'{ab!r} is not a boundary arc')

        translation = np.asarray(translation, dtype=float)
        vertices = (arc.destination_vertex().position + translation,
                    arc.source_vertex().position + translation)

        return cls(ab, vertices, copy(arc.geometry))


def arc_extrude(mutation, cache):
    """ Extrude a boundary arc into a quad.

    Returns
    -------
    ArcKey
        The extruded arc ``(c, d)`` of the new quad. Its opposite arc is a
        boundary arc.
    """
    c = mutation.insert_vertex(cache.vertices[0])
    d = mutation.insert_vertex(cache.vertices[1])

    _, (cd, _) = mutation.get_or_insert_edge(c, d, arc=cache.arc)

    arc_bridge(mutation, ArcBridgeCache.snapshot(mutation, cache.ab, cd))

    return cd


# Vertices.

class VertexRemoveCache:
    """ Snapshot for removing a vertex.
    """

    def __init__(self, a, arcs):
        self.a = a
        self.arcs = arcs

    @classmethod
    def snapshot(cls, source, a):
        VertexView(source, a)
        return cls(a, list(OutgoingArcCirculator(source, a)))


def vertex_remove(mutation, cache):
    """ Remove a vertex and all incident edges.

    Faces occupying rings of removed edges are removed as well.
    Neighboring vertices left without arcs are kept.

    Returns
    -------
    Vertex
        The removed vertex payload.
    """
    for ab in cache.arcs:
        # Edges are removed one at a time, each snapshot sees the result
        # of the previous removal.
        if ab in mutation.arc_storage:
            edge_remove(mutation, EdgeRemoveCache.snapshot(mutation, ab))

    return mutation.remove_vertex(cache.a)
