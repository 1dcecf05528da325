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

""" Keyed storage.

Mesh items are addressed by opaque keys. Vertex, edge, and face keys
wrap an integer drawn from a monotonic generator owned by the storage
that created them. Removed keys are never handed out again. Arc keys
are derived from the ordered pair of vertex keys an arc connects.

A :class:`Core` composes up to four storages, one per item kind. Mutation
contexts take a core apart, edit the storages, and fuse them back
together on commit.
"""

from copy import copy


class OpaqueKey:
    """ Key base class.

    Keys are immutable and hashable. Two keys compare equal only if they
    are of the same type and wrap the same value.
    """

    __slots__ = ('_value',)

    def __init__(self, value):
        self._value = value

    def __repr__(self):
        return f'{type(self).__name__}({self._value})'

    def __eq__(self, other):
        if type(other) is not type(self):
            return NotImplemented

        return self._value == other._value

    def __hash__(self):
        return hash((type(self).__name__, self._value))

    @property
    def value(self):
        """ Wrapped key value.
        """
        return self._value


class VertexKey(OpaqueKey):
    __slots__ = ()


class EdgeKey(OpaqueKey):
    __slots__ = ()


class FaceKey(OpaqueKey):
    __slots__ = ()


class ArcKey(OpaqueKey):
    """ Arc key.

    Derived from the ordered pair of vertex keys ``(a, b)`` of the arc
    pointing from vertex `a` to vertex `b`. Arc keys unpack into their
    endpoints, i.e., ``a, b = ab`` works as expected.

    Parameters
    ----------
    a : VertexKey
        Source vertex key.
    b : VertexKey
        Destination vertex key.
    """

    __slots__ = ()

    def __init__(self, a, b):
        if not isinstance(a, VertexKey) or not isinstance(b, VertexKey):
            raise TypeError('arc keys are built from vertex keys')

        super().__init__((a, b))

    def __repr__(self):
        a, b = self._value
        return f'ArcKey({a.value}, {b.value})'

    def __iter__(self):
        return iter(self._value)

    @property
    def source(self):
        """ Key of the source vertex.

        :type: VertexKey
        """
        return self._value[0]

    @property
    def destination(self):
        """ Key of the destination vertex.

        :type: VertexKey
        """
        return self._value[1]

    def opposite(self):
        """ Key of the opposite arc.

        Returns
        -------
        ArcKey
            The key ``(b, a)`` of the arc ``(a, b)``.
        """
        a, b = self._value
        return ArcKey(b, a)


# Storage kinds and the key types they hand out.
KINDS = {
    'vertex': VertexKey,
    'arc': ArcKey,
    'edge': EdgeKey,
    'face': FaceKey,
}


class Storage:
    """ Map from keys to payloads.

    Parameters
    ----------
    kind : str
        One of ``'vertex'``, ``'arc'``, ``'edge'``, or ``'face'``.

    Note
    ----
    Lookups of absent keys return :obj:`None`. Deciding whether absence
    is an error is left to the caller.
    """

    def __init__(self, kind):
        if kind not in KINDS:
            raise ValueError(f'unknown storage kind {kind!r}')

        self._kind = kind
        self._data = dict()
        self._counter = 0

    def __repr__(self):
        return f'Storage({self._kind!r}, len={len(self._data)})'

    def __len__(self):
        return len(self._data)

    def __contains__(self, key):
        return key in self._data

    def __iter__(self):
        return iter(self._data)

    def __copy__(self):
        other = Storage(self._kind)
        other._counter = self._counter
        other._data = {key: copy(payload)
                       for key, payload in self._data.items()}

        return other

    @property
    def kind(self):
        """ Storage kind.

        :type: str
        """
        return self._kind

    def insert(self, payload):
        """ Store payload under a fresh key.

        Parameters
        ----------
        payload : object
            Vertex, edge, or face payload.

        Returns
        -------
        VertexKey or EdgeKey or FaceKey
            Newly generated key.

        Raises
        ------
        TypeError
            If called on arc storage. Arc keys are not generated.
        """
        if self._kind == 'arc':
            raise TypeError('arc keys are derived from their endpoints')

        key = KINDS[self._kind](self._counter)
        self._counter += 1
        self._data[key] = payload

        return key

    def insert_with_key(self, key, payload):
        """ Store payload under the given key.
        """
        if not isinstance(key, KINDS[self._kind]):
            raise TypeError(f'{key!r} is not a {self._kind} key')

        self._data[key] = payload

    def get(self, key):
        return self._data.get(key)

    def remove(self, key):
        return self._data.pop(key, None)

    def keys(self):
        return self._data.keys()

    def values(self):
        return self._data.values()

    def items(self):
        return self._data.items()

    def copy(self):
        """ Copy of the storage.

        Payloads are copied, keys and the state of the key generator are
        preserved.

        Returns
        -------
        Storage
        """
        return copy(self)


_SLOTS = {
    'vertex': 'vertex_storage',
    'arc': 'arc_storage',
    'edge': 'edge_storage',
    'face': 'face_storage',
}


class Core:
    """ Composition of storages.

    A core holds zero to four storages. Empty slots are :obj:`None`.
    Cores are never modified in place, :meth:`fuse` returns a new core.
    """

    __slots__ = tuple(_SLOTS.values())

    def __init__(self, vertices=None, arcs=None, edges=None, faces=None):
        self.vertex_storage = vertices
        self.arc_storage = arcs
        self.edge_storage = edges
        self.face_storage = faces

    def __repr__(self):
        kinds = [kind for kind, slot in _SLOTS.items()
                 if getattr(self, slot) is not None]

        return f'Core({", ".join(kinds)})'

    def __copy__(self):
        return Core(*(None if storage is None else storage.copy()
                      for storage in self.unfuse()))

    @classmethod
    def empty(cls):
        """ Core without any storage.
        """
        return cls()

    @classmethod
    def default(cls):
        """ Core with four empty storages.
        """
        return cls(Storage('vertex'), Storage('arc'),
                   Storage('edge'), Storage('face'))

    def fuse(self, storage):
        """ Fill an empty slot.

        Parameters
        ----------
        storage : Storage
            Storage to put into the slot matching its kind.

        Returns
        -------
        Core
            New core holding the storages of this core plus `storage`.

        Raises
        ------
        TypeError
            If the slot is already occupied.
        """
        slot = _SLOTS[storage.kind]

        if getattr(self, slot) is not None:
            raise TypeError(f'{storage.kind} storage already fused')

        core = Core(*self.unfuse())
        setattr(core, slot, storage)

        return core

    def unfuse(self):
        """ Storages of the core.

        Returns
        -------
        tuple
            Vertex, arc, edge, and face storage, :obj:`None` for empty
            slots.
        """
        return (self.vertex_storage, self.arc_storage,
                self.edge_storage, self.face_storage)

    def is_complete(self):
        return all(storage is not None for storage in self.unfuse())

    def copy(self):
        return copy(self)
