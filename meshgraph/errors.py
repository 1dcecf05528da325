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

""" Topology and geometry exceptions.

Every error raised by a mesh graph operation derives from
:class:`GraphError`. Snapshot functions raise before anything is
mutated, errors raised while committing roll back the whole mutation.
"""


class GraphError(Exception):
    """ Mesh graph exception base class.
    """
    pass


class TopologyNotFound(GraphError, LookupError):
    """ Raised if a key does not reference an existing mesh item or if a
    selector (key or ring index) cannot be resolved.
    """
    pass


class TopologyMalformed(GraphError):
    """ Raised if an operation violates a structural precondition.

    Also raised by commit functions that encounter a missing mesh item
    whose existence was established during the snapshot phase.
    """
    pass


class TopologyConflict(GraphError):
    """ Raised if an operation would intrude on existing topology, e.g.,
    inserting a face over an arc that is already occupied.
    """
    pass


class ArityNonUniform(GraphError):
    """ Raised if faces of differing arity are bridged.
    """
    pass


class GeometryError(GraphError):
    """ Raised if a geometric computation has no solution.
    """
    pass
