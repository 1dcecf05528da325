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

""" Paths.

A path is an ordered sequence of arcs that does not intersect itself. It
runs from its *back* vertex to its *front* vertex and is closed if both
coincide. Paths grow and shrink at either end.
"""

from collections import deque
from numbers import Integral

from meshgraph.errors import TopologyMalformed, TopologyNotFound
from meshgraph.storage import ArcKey, VertexKey
from meshgraph.views import ArcView, VertexView


class Path:
    """ Path view.

    Parameters
    ----------
    source : object
        Storage source.
    keys : iterable of VertexKey
        Keys of at least two vertices, consecutive vertices have to be
        connected by an arc.

    Raises
    ------
    TopologyMalformed
        If fewer than two vertices are given, if two consecutive vertices
        are not adjacent, or if the path intersects itself.
    TopologyNotFound
        If the first two vertices are not connected by an arc.
    """

    def __init__(self, source, keys):
        keys = iter(keys)

        try:
            a = next(keys)
            b = next(keys)
        except StopIteration:
            raise TopologyMalformed('a path requires two vertices') from None

        ab = ArcKey(a, b)

        if ab not in source.arc_storage:
            raise TopologyNotFound(f'{ab!r} not found')

        self._source = source
        self._arcs = deque([ab])

        for key in keys:
            self.push_front(key)

    def __repr__(self):
        keys = ', '.join(str(v.key.value) for v in self.vertices())
        return f'Path([{keys}])'

    def __eq__(self, other):
        if not isinstance(other, Path):
            return NotImplemented

        return set(self._arcs) == set(other._arcs)

    def __len__(self):
        return len(self._arcs)

    def back(self):
        """ First vertex of the path.

        :rtype: VertexView
        """
        return VertexView(self._source, self._arcs[0].source)

    def front(self):
        """ Last vertex of the path.

        :rtype: VertexView
        """
        return VertexView(self._source, self._arcs[-1].destination)

    def arcs(self):
        """ Iterate over the arcs of the path, back to front.

        Yields
        ------
        ArcView
        """
        for key in list(self._arcs):
            yield ArcView(self._source, key)

    def vertices(self):
        """ Iterate over the vertices of the path, back to front.

        The back vertex of a closed path is reported twice, first and
        last.

        Yields
        ------
        VertexView
        """
        yield self.back()

        for arc in self.arcs():
            yield arc.destination_vertex()

    def is_closed(self):
        return self._arcs[0].source == self._arcs[-1].destination

    def is_open(self):
        return not self.is_closed()

    def is_boundary_path(self):
        """ Check if all arcs of the path are boundary arcs.
        """
        return all(arc.is_boundary_arc() for arc in self.arcs())

    def push_front(self, destination):
        """ Extend the path at its front.

        Parameters
        ----------
        destination : VertexKey or int
            Key of a vertex adjacent to the front vertex or the index of
            that vertex among the neighbors of the front vertex.

        Returns
        -------
        ArcKey
            Key of the appended arc.

        Raises
        ------
        TopologyMalformed
            If the path is closed, if the vertex is not adjacent to the
            front vertex, or if the path would intersect itself.
        TopologyNotFound
            If a neighbor index is out of range.
        """
        if self.is_closed():
            raise TopologyMalformed('cannot extend a closed path')

        front = self.front()
        x = self._neighbor(front, destination)
        bx = ArcKey(front.key, x)

        if any(key.destination == x for key in self._arcs):
            raise TopologyMalformed(f'path intersects itself at {x!r}')

        self._arcs.append(bx)

        return bx

    def push_back(self, source):
        """ Extend the path at its back.

        Parameters
        ----------
        source : VertexKey or int
            Key of a vertex adjacent to the back vertex or the index of
            that vertex among the neighbors of the back vertex.

        Returns
        -------
        ArcKey
            Key of the prepended arc.

        Raises
        ------
        TopologyMalformed
            If the path is closed, if the vertex is not adjacent to the
            back vertex, or if the path would intersect itself.
        TopologyNotFound
            If a neighbor index is out of range.
        """
        if self.is_closed():
            raise TopologyMalformed('cannot extend a closed path')

        back = self.back()
        x = self._neighbor(back, source)
        xa = ArcKey(x, back.key)

        if any(key.source == x for key in self._arcs):
            raise TopologyMalformed(f'path intersects itself at {x!r}')

        self._arcs.appendleft(xa)

        return xa

    def pop_front(self):
        """ Remove the arc at the front.

        Returns
        -------
        ArcKey or None
            :obj:`None` if the path consists of a single arc. Paths are
            never emptied.
        """
        if len(self._arcs) > 1:
            return self._arcs.pop()

        return None

    def pop_back(self):
        """ Remove the arc at the back.

        Returns
        -------
        ArcKey or None
            :obj:`None` if the path consists of a single arc.
        """
        if len(self._arcs) > 1:
            return self._arcs.popleft()

        return None

    def bisected_ring(self):
        """ Boundary ring split by the path.

        An open path that is not a boundary path bisects a boundary ring
        if both of its end vertices lie on that ring.

        Returns
        -------
        Ring or None
        """
        if self.is_closed() or self.is_boundary_path():
            return None

        front = self.front().key

        for arc in self.back().outgoing_arcs():
            if arc.is_boundary_arc():
                ring = arc.ring()

                if any(v.key == front for v in ring.vertices()):
                    return ring

        return None

    def is_bisecting_path(self):
        return self.is_closed() or self.bisected_ring() is not None

    def _neighbor(self, vertex, selector):
        if isinstance(selector, VertexKey):
            if ArcKey(vertex.key, selector) not in self._source.arc_storage:
                raise TopologyMalformed(
                    f'{selector!r} is not adjacent to {vertex.key!r}')

            return selector

        if isinstance(selector, Integral) and not isinstance(selector, bool):
            neighbors = [v.key for v in vertex.neighboring_vertices()]

            if not 0 <= selector < len(neighbors):
                raise TopologyNotFound(f'index {selector} out of range')

            return neighbors[selector]

        raise TypeError(f'invalid selector {selector!r}')
