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

""" Geometric ring traits.

Small numeric helpers consumed by faces and rings of a mesh graph. Each
function takes the positions of the vertices of a ring, one position per
row, in ring order.
"""

import math
import numpy as np

from meshgraph.errors import GeometryError


# Lengths and determinants below this threshold are considered zero.
EPSILON = 1e-12


def cross(u, v):
    r""" Cross product.

    Parameters
    ----------
    u, v : array_like, shape (3, )
        Vector in :math:`\mathbb{R}^3`.

    Returns
    -------
    ~numpy.ndarray, shape (3, )
        Cross product of vectors :math:`\mathbf{u}` and :math:`\mathbf{v}`.
    """
    # Unpack the arrays. This will also catch any problem with array shape.
    u0, u1, u2 = u
    v0, v1, v2 = v

    return np.array([u1*v2 - u2*v1,
                     u2*v0 - u0*v2,
                     u0*v1 - u1*v0])


def norm(u):
    """ Euclidean length of a vector.
    """
    return math.sqrt(u.dot(u))


def unit(u):
    """ Normalized copy of a vector.

    Raises
    ------
    GeometryError
        If the vector has (numerically) zero length.
    """
    length = norm(u)

    if length < EPSILON:
        raise GeometryError('cannot normalize zero length vector')

    return u / length


def _positions(points):
    points = np.asarray(points, dtype=float)

    if points.ndim != 2 or len(points) == 0:
        raise ValueError('expected a non-empty (n, k) array of positions')

    return points


def centroid(points):
    """ Arithmetic mean of positions.

    Parameters
    ----------
    points : array_like, shape (n, k)
        Vertex positions.

    Returns
    -------
    ~numpy.ndarray, shape (k, )
    """
    return _positions(points).mean(axis=0)


def normal(points):
    """ Ring normal.

    Computed as the normalized cross product of consecutive edge vectors.

    Parameters
    ----------
    points : array_like, shape (n, 3)
        Vertex positions in ring order.

    Returns
    -------
    ~numpy.ndarray, shape (3, )
        Unit normal vector.

    Raises
    ------
    GeometryError
        For positions that are not three-dimensional or if the ring is
        degenerate (collinear vertices).

    Note
    ----
    For a non-triangular ring the normal is computed by averaging
    vectors obtained as cross products of consecutive edges around
    the ring.
    """
    points = _positions(points)

    if points.shape[1] != 3:
        raise GeometryError('normal requires three-dimensional positions')

    vectors = np.roll(points, -1, axis=0) - points

    if len(points) == 3:
        return unit(cross(vectors[0], vectors[1]))

    vector = np.zeros(3, dtype=float)

    for u, v in zip(vectors, np.roll(vectors, -1, axis=0)):
        w = cross(u, v)

        # Collinear consecutive edges do not contribute.
        if norm(w) >= EPSILON:
            vector += w / norm(w)

    return unit(vector)


class Plane:
    """ Hyperplane given by a point and a unit normal.

    Parameters
    ----------
    origin : array_like, shape (k, )
        Point on the plane.
    normal : array_like, shape (k, )
        Plane normal, normalized on construction.
    """

    def __init__(self, origin, normal):
        self._origin = np.asarray(origin, dtype=float)
        self._normal = unit(np.asarray(normal, dtype=float))

    def __repr__(self):
        return f'Plane(origin={self._origin}, normal={self._normal})'

    @property
    def origin(self):
        """ :type: ~numpy.ndarray
        """
        return self._origin

    @property
    def normal(self):
        """ :type: ~numpy.ndarray
        """
        return self._normal

    def distance(self, point):
        """ Signed distance of a point to the plane.
        """
        return float(self._normal.dot(np.asarray(point) - self._origin))


class Line:
    """ Line given by a point and a direction.
    """

    def __init__(self, origin, direction):
        self._origin = np.asarray(origin, dtype=float)
        self._direction = np.asarray(direction, dtype=float)

    def __repr__(self):
        return f'Line(origin={self._origin}, direction={self._direction})'

    @property
    def origin(self):
        return self._origin

    @property
    def direction(self):
        return self._direction


def plane(points):
    """ Best-fit plane.

    The plane passes through the centroid of the positions. Its normal
    is the right singular vector that belongs to the smallest singular
    value of the centered positions.

    Parameters
    ----------
    points : array_like, shape (n, k)
        Vertex positions, at least three.

    Returns
    -------
    Plane

    Raises
    ------
    GeometryError
        If there are fewer than three positions.
    """
    points = _positions(points)

    if len(points) < 3:
        raise GeometryError('a plane requires at least three positions')

    origin = points.mean(axis=0)
    _, _, vt = np.linalg.svd(points - origin)

    return Plane(origin, vt[-1])


def intersect(plane, line):
    """ Intersection of a plane and a line.

    Parameters
    ----------
    plane : Plane
    line : Line

    Returns
    -------
    ~numpy.ndarray or None
        Point of intersection, :obj:`None` if line and plane are
        parallel.
    """
    denom = plane.normal.dot(line.direction)

    if abs(denom) < EPSILON:
        return None

    t = plane.normal.dot(plane.origin - line.origin) / denom

    return line.origin + t * line.direction
