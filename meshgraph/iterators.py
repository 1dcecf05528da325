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

""" Circulators and face traversals.

Circulators walk the connectivity links of a mesh graph and yield keys.
They are bound to a *source*, i.e., any object that exposes the storages
of a mesh graph through its ``vertex_storage``, ``arc_storage``,
``edge_storage``, and ``face_storage`` attributes.

All circulators terminate on a corrupted mesh. Iteration stops as soon as
a link is missing or the first visited key comes around again.
"""

from collections import deque


class ArcCirculator:
    """ Circulate over the arcs of a ring.

    Parameters
    ----------
    source : object
        Storage source.
    key : ArcKey or None
        Key of the first arc to visit.

    Yields
    ------
    ArcKey
        Keys of the arcs in the ring, following ``next`` links.
    """

    def __init__(self, source, key):
        self._arcs = source.arc_storage
        self._current = key
        self._first = None

    def __iter__(self):
        return self

    def __next__(self):
        key = self._current

        if key is None or key == self._first:
            raise StopIteration

        if self._first is None:
            self._first = key

        arc = self._arcs.get(key)
        self._current = None if arc is None else arc.next

        return key


class VertexCirculator:
    """ Circulate over the destination vertices of the arcs of a ring.
    """

    def __init__(self, source, key):
        self._inner = ArcCirculator(source, key)

    def __iter__(self):
        return self

    def __next__(self):
        return next(self._inner).destination


class FaceCirculator:
    """ Circulate over the faces adjacent to a ring.

    For each arc of the ring the face of its opposite arc is yielded.
    Arcs whose opposite arc is a boundary arc are skipped.
    """

    def __init__(self, source, key):
        self._arcs = source.arc_storage
        self._inner = ArcCirculator(source, key)

    def __iter__(self):
        return self

    def __next__(self):
        for ab in self._inner:
            opposite = self._arcs.get(ab.opposite())

            if opposite is not None and opposite.face is not None:
                return opposite.face

        raise StopIteration


class OutgoingArcCirculator:
    """ Circulate over the arcs leaving a vertex.

    Starting at the leading arc of the vertex, the next outgoing arc of
    ``ab`` is the successor of its opposite arc ``ba``.

    Parameters
    ----------
    source : object
        Storage source.
    key : VertexKey
        Key of the center vertex.
    """

    def __init__(self, source, key):
        self._arcs = source.arc_storage

        vertex = source.vertex_storage.get(key)
        self._current = None if vertex is None else vertex.arc
        self._first = None

    def __iter__(self):
        return self

    def __next__(self):
        key = self._current

        if key is None or key == self._first:
            raise StopIteration

        if self._first is None:
            self._first = key

        opposite = self._arcs.get(key.opposite())
        self._current = None if opposite is None else opposite.next

        return key


def _adjacent_faces(source, key):
    face = source.face_storage.get(key)

    if face is None:
        return iter(())

    return FaceCirculator(source, face.arc)


class BreadthTraversal:
    """ Breadth-first traversal over face adjacency.

    Parameters
    ----------
    source : object
        Storage source.
    key : FaceKey
        The seed face. It is the first face reported.

    Yields
    ------
    FaceKey
    """

    def __init__(self, source, key):
        self._source = source
        self._visited = {key}
        self._queue = deque([key])

    def __iter__(self):
        return self

    def __next__(self):
        if not self._queue:
            raise StopIteration

        key = self._queue.popleft()

        for neighbor in _adjacent_faces(self._source, key):
            if neighbor not in self._visited:
                self._visited.add(neighbor)
                self._queue.append(neighbor)

        return key


class DepthTraversal:
    """ Depth-first traversal over face adjacency.

    Same as :class:`BreadthTraversal` but with a stack instead of a
    queue.
    """

    def __init__(self, source, key):
        self._source = source
        self._visited = {key}
        self._stack = [key]

    def __iter__(self):
        return self

    def __next__(self):
        if not self._stack:
            raise StopIteration

        key = self._stack.pop()

        for neighbor in _adjacent_faces(self._source, key):
            if neighbor not in self._visited:
                self._visited.add(neighbor)
                self._stack.append(neighbor)

        return key
