"""Tests for keys, storages, and cores."""

import numpy as np
import pytest

from meshgraph.payload import Arc, Vertex
from meshgraph.storage import (ArcKey, Core, EdgeKey, FaceKey, Storage,
                               VertexKey)


class TestKeys:

    def test_equality_requires_same_kind(self):
        assert VertexKey(1) == VertexKey(1)
        assert VertexKey(1) != VertexKey(2)
        assert VertexKey(1) != FaceKey(1)
        assert EdgeKey(0) != FaceKey(0)

    def test_hashable(self):
        keys = {VertexKey(1), VertexKey(1), FaceKey(1)}
        assert len(keys) == 2

    def test_arc_key_endpoints(self):
        a, b = VertexKey(0), VertexKey(1)
        ab = ArcKey(a, b)

        assert ab.source == a
        assert ab.destination == b
        assert tuple(ab) == (a, b)
        assert ab.opposite() == ArcKey(b, a)
        assert ab.opposite().opposite() == ab
        assert ab != ab.opposite()

    def test_arc_key_requires_vertex_keys(self):
        with pytest.raises(TypeError):
            ArcKey(0, 1)

        with pytest.raises(TypeError):
            ArcKey(VertexKey(0), FaceKey(1))


class TestStorage:

    def test_unknown_kind(self):
        with pytest.raises(ValueError):
            Storage('halfedge')

    def test_insert_get_remove(self):
        storage = Storage('vertex')
        k0 = storage.insert('a')
        k1 = storage.insert('b')

        assert isinstance(k0, VertexKey)
        assert len(storage) == 2
        assert k0 in storage
        assert storage.get(k1) == 'b'
        assert storage.remove(k0) == 'a'
        assert storage.get(k0) is None
        assert storage.remove(k0) is None
        assert list(storage.keys()) == [k1]

    def test_keys_are_not_reused(self):
        storage = Storage('face')
        k0 = storage.insert('a')
        storage.remove(k0)
        k1 = storage.insert('b')

        assert k1 != k0
        assert k1.value > k0.value

    def test_arc_storage_requires_explicit_keys(self):
        storage = Storage('arc')
        ab = ArcKey(VertexKey(0), VertexKey(1))

        with pytest.raises(TypeError):
            storage.insert(Arc())

        storage.insert_with_key(ab, Arc())
        assert ab in storage

    def test_insert_with_wrong_key_type(self):
        storage = Storage('vertex')

        with pytest.raises(TypeError):
            storage.insert_with_key(FaceKey(0), Vertex(np.zeros(3)))

    def test_copy_is_independent(self):
        storage = Storage('vertex')
        key = storage.insert(Vertex(np.zeros(3)))
        other = storage.copy()

        other.get(key).geometry[0] = 1.0

        assert storage.get(key).geometry[0] == 0.0
        assert other.kind == 'vertex'

    def test_copy_keeps_generator_state(self):
        storage = Storage('edge')
        storage.insert('a')
        other = storage.copy()

        assert storage.insert('b') == other.insert('c')


class TestCore:

    def test_default_is_complete(self):
        assert Core.default().is_complete()
        assert not Core.empty().is_complete()

    def test_fuse(self):
        vertices = Storage('vertex')
        core = Core.empty().fuse(vertices)

        assert core.vertex_storage is vertices
        assert core.arc_storage is None

        with pytest.raises(TypeError):
            core.fuse(Storage('vertex'))

    def test_fuse_returns_new_core(self):
        core = Core.empty()
        fused = core.fuse(Storage('face'))

        assert core.face_storage is None
        assert fused.face_storage is not None

    def test_unfuse(self):
        core = Core.default()
        vertices, arcs, edges, faces = core.unfuse()

        assert vertices.kind == 'vertex'
        assert arcs.kind == 'arc'
        assert edges.kind == 'edge'
        assert faces.kind == 'face'

    def test_copy(self):
        core = Core.default()
        core.vertex_storage.insert(Vertex(np.zeros(2)))
        other = core.copy()

        assert len(other.vertex_storage) == 1
        assert other.vertex_storage is not core.vertex_storage
