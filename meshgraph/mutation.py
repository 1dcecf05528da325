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

""" Mutation contexts and transactions.

Structural edits are staged in a mutation context that owns the storages
of a mesh graph for the duration of an operation. Contexts are layered:
:class:`VertexMutation` owns the vertex storage, :class:`EdgeMutation`
adds the arc and edge storages, :class:`FaceMutation` adds the face
storage. Each layer provides the primitive connect and disconnect
operations on the items it owns.

A :class:`Replace` transaction takes the core out of a mesh graph and
puts an empty placeholder in its place. The mutation works on a copy of
the core. Committing installs the mutated core, aborting restores the
original one. Leaving the transaction without committing aborts.

Note
----
Primitive operations raise :class:`~meshgraph.errors.TopologyMalformed`
for missing items. The commit functions in :mod:`meshgraph.topology`
only use keys whose existence was established before the mutation
started, so a missing item means a stale snapshot.
"""

import logging

from meshgraph.errors import TopologyMalformed
from meshgraph.payload import Arc, Edge, Vertex
from meshgraph.storage import ArcKey, Core


logger = logging.getLogger(__name__)


class VertexMutation:
    """ Vertex mutation layer.

    Parameters
    ----------
    core : Core
        Core holding (at least) a vertex storage.
    """

    def __init__(self, core):
        self._vertices = core.vertex_storage

    @property
    def vertex_storage(self):
        return self._vertices

    def insert_vertex(self, geometry):
        """ Add an isolated vertex.

        Returns
        -------
        VertexKey
        """
        return self._vertices.insert(Vertex(geometry))

    def remove_vertex(self, a):
        """ Remove a vertex payload.

        Returns
        -------
        Vertex
            The removed payload.
        """
        vertex = self._vertices.remove(a)

        if vertex is None:
            raise TopologyMalformed(f'{a!r} not found')

        return vertex

    def connect_outgoing_arc(self, a, ab):
        self._vertex(a).arc = ab

    def disconnect_outgoing_arc(self, a):
        """ Clear the leading arc of a vertex.

        Returns
        -------
        ArcKey or None
            The previous leading arc.
        """
        vertex = self._vertex(a)
        ab, vertex.arc = vertex.arc, None

        return ab

    def commit(self):
        return Core.empty().fuse(self._vertices)

    def _vertex(self, a):
        vertex = self._vertices.get(a)

        if vertex is None:
            raise TopologyMalformed(f'{a!r} not found')

        return vertex


class EdgeMutation(VertexMutation):
    """ Arc and edge mutation layer.
    """

    def __init__(self, core):
        super().__init__(core)
        self._arcs = core.arc_storage
        self._edges = core.edge_storage

    @property
    def arc_storage(self):
        return self._arcs

    @property
    def edge_storage(self):
        return self._edges

    def get_or_insert_edge(self, a, b, arc=None, edge=None):
        """ Get or create the edge between two vertices.

        Parameters
        ----------
        a, b : VertexKey
            Endpoints of the edge.
        arc : object, optional
            Geometry of newly created arcs.
        edge : object, optional
            Geometry of a newly created edge.

        Returns
        -------
        EdgeKey
            Key of the edge.
        tuple
            Keys of the arcs ``(a, b)`` and ``(b, a)``.

        Raises
        ------
        TopologyMalformed
            If exactly one of both arcs exists, or if both exist but are
            bound to different edges.
        """
        e1, ab = self._get_or_insert_arc(a, b, arc)
        e2, ba = self._get_or_insert_arc(b, a, arc)

        if e1 is not None and e1 == e2:
            return e1, (ab, ba)

        if e1 is None and e2 is None:
            ab_ba = self._edges.insert(Edge(ab, edge))

            self.connect_arc_to_edge(ab, ab_ba)
            self.connect_arc_to_edge(ba, ab_ba)

            return ab_ba, (ab, ba)

        raise TopologyMalformed(f'arcs {ab!r} and {ba!r} are not paired')

    def _get_or_insert_arc(self, a, b, geometry):
        ab = ArcKey(a, b)
        arc = self._arcs.get(ab)

        if arc is not None:
            return arc.edge, ab

        # Both endpoints have to exist.
        self._vertex(a)
        self._vertex(b)

        self._arcs.insert_with_key(ab, Arc(geometry))
        self.connect_outgoing_arc(a, ab)

        return None, ab

    def remove_arc(self, ab):
        arc = self._arcs.remove(ab)

        if arc is None:
            raise TopologyMalformed(f'{ab!r} not found')

        return arc

    def remove_edge(self, ab_ba):
        edge = self._edges.remove(ab_ba)

        if edge is None:
            raise TopologyMalformed(f'{ab_ba!r} not found')

        return edge

    def connect_neighboring_arcs(self, ab, bc):
        """ Link two arcs, `bc` becomes the successor of `ab`.
        """
        self._arc(ab).next = bc
        self._arc(bc).previous = ab

    def connect_arc_to_edge(self, ab, ab_ba):
        self._arc(ab).edge = ab_ba

    def connect_arc_to_face(self, ab, abc):
        self._arc(ab).face = abc

    def disconnect_arc_from_face(self, ab):
        arc = self._arc(ab)
        abc, arc.face = arc.face, None

        return abc

    def commit(self):
        return super().commit().fuse(self._arcs).fuse(self._edges)

    def _arc(self, ab):
        arc = self._arcs.get(ab)

        if arc is None:
            raise TopologyMalformed(f'{ab!r} not found')

        return arc


class FaceMutation(EdgeMutation):
    """ Face mutation layer.
    """

    def __init__(self, core):
        super().__init__(core)
        self._faces = core.face_storage

    @property
    def face_storage(self):
        return self._faces

    def remove_face(self, abc):
        face = self._faces.remove(abc)

        if face is None:
            raise TopologyMalformed(f'{abc!r} not found')

        return face

    def connect_face_to_arc(self, ab, abc):
        """ Make `ab` the leading arc of face `abc`.
        """
        face = self._faces.get(abc)

        if face is None:
            raise TopologyMalformed(f'{abc!r} not found')

        face.arc = ab

    def connect_face_interior(self, arcs, abc):
        """ Stamp the arcs of a closed ring with a face.

        Parameters
        ----------
        arcs : sequence of ArcKey
            Arcs in ring order.
        abc : FaceKey
            The occupying face.
        """
        for ab in arcs:
            self.connect_arc_to_face(ab, abc)

    def disconnect_face_interior(self, arcs):
        for ab in arcs:
            self.disconnect_arc_from_face(ab)

    def connect_face_exterior(self, arcs, boundaries):
        """ Link the arcs of a new face and the rings around it.

        Has to be called after all arcs of the face exist and before they
        are stamped with the face. Arcs without a ``next`` link are new.
        Consider the vertex ``v`` between the arcs ``inner_prev`` and
        ``inner_next`` of the face. If only one of them is new, the
        boundary ring passing ``v`` is routed around the opposite of the
        new arc. If both are new, they are spliced into the boundary of
        ``v`` (or form the boundary of an isolated ``v``). If both exist
        but are not linked yet, the patch of arcs between them is moved to
        another gap around ``v``.

        Parameters
        ----------
        arcs : sequence of ArcKey
            Arcs of the new face in ring order.
        boundaries : dict
            Maps each vertex of the face to a linked boundary arc leaving
            it, :obj:`None` for vertices without linked arcs.

        Raises
        ------
        TopologyMalformed
            If a ring is broken or no free gap is found for a patch.
        """
        n = len(arcs)
        new = [self._arc(ab).next is None for ab in arcs]
        links = []

        # All links are computed on the unmodified rings.
        for i in range(n):
            j = (i + 1) % n
            inner_prev, inner_next = arcs[i], arcs[j]
            outer_prev = inner_next.opposite()
            outer_next = inner_prev.opposite()

            if new[i] and new[j]:
                boundary_next = boundaries[inner_next.source]

                if boundary_next is None:
                    links.append((outer_prev, outer_next))
                else:
                    boundary_prev = self._arc(boundary_next).previous
                    links.append((boundary_prev, outer_next))
                    links.append((outer_prev, boundary_next))
            elif new[i]:
                boundary_prev = self._arc(inner_next).previous
                links.append((boundary_prev, outer_next))
            elif new[j]:
                boundary_next = self._arc(inner_prev).next
                links.append((outer_prev, boundary_next))
            elif self._arc(inner_prev).next != inner_next:
                links.extend(self._relink_patch(inner_prev, inner_next))
                continue
            else:
                continue

            links.append((inner_prev, inner_next))

        for ab, bc in links:
            self.connect_neighboring_arcs(ab, bc)

    def _relink_patch(self, inner_prev, inner_next):
        # Rotate about the common vertex until an incoming boundary arc
        # other than inner_prev is found.
        start = inner_next.opposite()
        boundary_prev = start

        while True:
            bx = self._arc(boundary_prev).next

            if bx is None:
                raise TopologyMalformed(f'broken ring at {boundary_prev!r}')

            boundary_prev = bx.opposite()

            if self._arc(boundary_prev).face is None:
                break

            if boundary_prev == start:
                msg = f'no free gap at vertex {inner_next.source!r}'
                raise TopologyMalformed(msg)

        if boundary_prev == inner_prev:
            msg = f'no free gap at vertex {inner_next.source!r}'
            raise TopologyMalformed(msg)

        patch_start = self._arc(inner_prev).next
        patch_end = self._arc(inner_next).previous
        boundary_next = self._arc(boundary_prev).next

        return [(boundary_prev, patch_start), (patch_end, boundary_next),
                (inner_prev, inner_next)]

    def commit(self):
        return super().commit().fuse(self._faces)


class Mutation(FaceMutation):
    """ Mutation of a complete mesh graph core.
    """

    def __init__(self, core):
        if not core.is_complete():
            raise TypeError('mutation requires a core with four storages')

        super().__init__(core)


class Replace:
    """ Transaction on the core of a mesh graph.

    Parameters
    ----------
    graph : MeshGraph
        The graph to mutate. Its core is replaced by an empty placeholder
        until the transaction is committed or aborted.

    Examples
    --------
    Used as a context manager, the transaction aborts unless committed::

        transaction = Replace(graph)

        with transaction as mutation:
            key = mutation.insert_vertex(position)
            transaction.commit()

    The :meth:`commit_with` method runs a function on the mutation and
    commits on success::

        key = Replace(graph).commit_with(
            lambda mutation: mutation.insert_vertex(position))

    Note
    ----
    The core is copied when the transaction starts, so a single
    transaction takes time linear in the size of the mesh. Many edits are
    best run as one transaction, e.g. with :meth:`commit_with`.
    """

    def __init__(self, graph):
        self._graph = graph
        self._original = graph._core
        self._mutation = Mutation(self._original.copy())
        self._finished = False

        graph._core = Core.default()

    def __enter__(self):
        return self._mutation

    def __exit__(self, exc_type, exc_value, traceback):
        if not self._finished:
            if exc_type is not None:
                logger.debug('aborting mutation of %r: %s', self._graph,
                             exc_value)

            self.abort()

        return False

    @property
    def mutation(self):
        return self._mutation

    def commit(self):
        """ Install the mutated core.

        Returns
        -------
        MeshGraph
            The mutated graph.
        """
        self._check_pending()

        core = self._mutation.commit()
        self._graph._core = core
        self._finished = True

        logger.debug('committed mutation of %r', self._graph)

        return self._graph

    def abort(self):
        """ Restore the original core.
        """
        self._check_pending()

        self._graph._core = self._original
        self._finished = True

    def commit_with(self, f):
        """ Apply a function to the mutation and commit.

        Parameters
        ----------
        f : callable
            Called with the :class:`Mutation` as its only argument.

        Returns
        -------
        object
            The value returned by `f`.

        Note
        ----
        Any exception raised by `f` aborts the transaction and is
        propagated.
        """
        with self as mutation:
            output = f(mutation)
            self.commit()

        return output

    def _check_pending(self):
        if self._finished:
            raise RuntimeError('transaction already finished')
