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

""" Primitive shapes and polygon soups.

Functions return polygons as lists of positions. Use
:func:`index_polygons` or :meth:`~meshgraph.graph.MeshGraph.from_polygons`
to turn them into indexed buffers or graphs.
"""

import math
import numpy as np


def cube():
    """ Unit cube.

    Returns
    -------
    list of ~numpy.ndarray
        Six quads, consistently oriented with outward normals.
    """
    points = np.array([[0, 0, 0], [1, 0, 0], [1, 1, 0], [0, 1, 0],
                       [0, 0, 1], [1, 0, 1], [1, 1, 1], [0, 1, 1]],
                      dtype=float)

    faces = [[0, 3, 2, 1], [4, 5, 6, 7], [0, 1, 5, 4],
             [1, 2, 6, 5], [2, 3, 7, 6], [3, 0, 4, 7]]

    return [points[face] for face in faces]


def uv_sphere(nu, nv, radius=1.0):
    """ UV sphere.

    Parameters
    ----------
    nu : int
        Number of subdivisions around the polar axis, at least 3.
    nv : int
        Number of subdivisions from pole to pole, at least 2.
    radius : float, optional
        Sphere radius.

    Returns
    -------
    list of ~numpy.ndarray
        Triangles at the poles and quads in between, consistently
        oriented with outward normals.

    Raises
    ------
    ValueError
        If `nu` or `nv` are too small.
    """
    if nu < 3 or nv < 2:
        raise ValueError('sphere requires nu >= 3 and nv >= 2')

    def point(j, i):
        phi = math.pi * j / nv
        theta = 2.0 * math.pi * (i % nu) / nu

        return np.array([radius * math.sin(phi) * math.cos(theta),
                         radius * math.sin(phi) * math.sin(theta),
                         radius * math.cos(phi)])

    north = np.array([0.0, 0.0, radius])
    south = np.array([0.0, 0.0, -radius])

    polygons = []

    for i in range(nu):
        polygons.append(np.array([north, point(1, i), point(1, i + 1)]))

    for j in range(1, nv - 1):
        for i in range(nu):
            polygons.append(np.array([point(j, i), point(j + 1, i),
                                      point(j + 1, i + 1), point(j, i + 1)]))

    for i in range(nu):
        polygons.append(np.array([south, point(nv - 1, i + 1),
                                  point(nv - 1, i)]))

    return polygons


def index_polygons(polygons, decimals=9):
    """ Index buffers of a polygon soup.

    Positions that agree after rounding to `decimals` digits are merged
    into a single point.

    Parameters
    ----------
    polygons : iterable of array_like
        Each polygon is a sequence of positions.
    decimals : int, optional
        Rounding precision used to identify positions.

    Returns
    -------
    points : ~numpy.ndarray, shape (n, k)
        Unique positions in order of first appearance.
    faces : list of list of int
        Indices into `points`, one list per polygon.
    """
    index = {}
    points = []
    faces = []

    for polygon in polygons:
        face = []

        for position in np.asarray(polygon, dtype=float):
            # Adding 0.0 maps -0.0 to 0.0.
            key = tuple(np.round(position, decimals) + 0.0)

            if key not in index:
                index[key] = len(points)
                points.append(position)

            face.append(index[key])

        faces.append(face)

    return np.array(points, dtype=float), faces
