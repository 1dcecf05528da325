import pytest

from meshgraph.graph import MeshGraph
from meshgraph.primitives import cube, uv_sphere


@pytest.fixture
def square():
    """Unit square, a single quad."""
    return MeshGraph([(0, 0), (1, 0), (1, 1), (0, 1)], [[0, 1, 2, 3]],
                     name='square')


@pytest.fixture
def strip():
    """Two quads sharing the edge between vertices 0 and 3."""
    points = [(0, 0), (1, 0), (1, 1), (0, 1), (-1, 1), (-1, 0)]
    return MeshGraph(points, [[0, 1, 2, 3], [0, 3, 4, 5]], name='strip')


@pytest.fixture
def box():
    """Closed unit cube made of six quads."""
    return MeshGraph.from_polygons(cube(), name='cube')


@pytest.fixture
def sphere():
    """UV sphere with six triangles."""
    return MeshGraph.from_polygons(uv_sphere(3, 2), name='sphere')
