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

""" Mesh item payloads.

Payloads are plain records stored in a :class:`~meshgraph.storage.Storage`.
Connectivity is expressed by keys, never by references to other payloads.
Vertex geometry is the vertex position. Arc, edge, and face geometry is
arbitrary user data and defaults to :obj:`None`.
"""

from copy import copy


class Vertex:
    """ Vertex payload.

    Parameters
    ----------
    geometry : ~numpy.ndarray
        Vertex position.
    arc : ArcKey, optional
        Leading outgoing arc. :obj:`None` for isolated vertices.
    """

    __slots__ = ('geometry', 'arc')

    def __init__(self, geometry, arc=None):
        self.geometry = geometry
        self.arc = arc

    def __repr__(self):
        return f'Vertex({self.geometry}, arc={self.arc})'

    def __copy__(self):
        return Vertex(copy(self.geometry), self.arc)


class Arc:
    """ Arc (halfedge) payload.

    The key of an arc is the pair of its endpoints and is not part of the
    payload.
    """

    __slots__ = ('geometry', 'next', 'previous', 'edge', 'face')

    def __init__(self, geometry=None, next=None, previous=None, edge=None,
                 face=None):
        self.geometry = geometry
        self.next = next
        self.previous = previous
        self.edge = edge
        self.face = face

    def __repr__(self):
        return (f'Arc(next={self.next}, previous={self.previous}, '
                f'edge={self.edge}, face={self.face})')

    def __copy__(self):
        return Arc(copy(self.geometry), self.next, self.previous, self.edge,
                   self.face)


class Edge:
    """ Edge payload.

    Parameters
    ----------
    arc : ArcKey
        One of the two arcs bound to the edge.
    geometry : object, optional
        User data.
    """

    __slots__ = ('geometry', 'arc')

    def __init__(self, arc, geometry=None):
        self.arc = arc
        self.geometry = geometry

    def __repr__(self):
        return f'Edge(arc={self.arc})'

    def __copy__(self):
        return Edge(self.arc, copy(self.geometry))


class Face:
    """ Face payload.

    Parameters
    ----------
    arc : ArcKey
        Some arc of the ring occupied by the face.
    geometry : object, optional
        User data.
    """

    __slots__ = ('geometry', 'arc')

    def __init__(self, arc, geometry=None):
        self.arc = arc
        self.geometry = geometry

    def __repr__(self):
        return f'Face(arc={self.arc})'

    def __copy__(self):
        return Face(self.arc, copy(self.geometry))
