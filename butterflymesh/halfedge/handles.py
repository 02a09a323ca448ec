# SPDX-FileCopyrightText: Copyright (c) 2023 - 2026 NVIDIA CORPORATION & AFFILIATES.
# SPDX-FileCopyrightText: All rights reserved.
# SPDX-License-Identifier: Apache-2.0
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Index-backed handles for navigating a half-edge mesh.

A handle is a ``(mesh, index)`` pair pointing into the integer arenas of a
:class:`~butterflymesh.halfedge.mesh.HalfEdgeMesh`. Handles never own data;
every relation is resolved by a single tensor lookup, so chains such as
``edge.next.twin.prev.start`` cost O(1) per hop.

Two handles are equal when they point at the same element of the same mesh
object. This makes them usable as identity keys.
"""

from typing import TYPE_CHECKING

import torch

if TYPE_CHECKING:
    from butterflymesh.halfedge.mesh import HalfEdgeMesh


class _Handle:
    __slots__ = ("mesh", "index")

    def __init__(self, mesh: "HalfEdgeMesh", index: int) -> None:
        self.mesh = mesh
        self.index = int(index)

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self.mesh is other.mesh and self.index == other.index

    def __hash__(self) -> int:
        return hash((type(self).__name__, id(self.mesh), self.index))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.index})"


class Vertex(_Handle):
    """A vertex of a half-edge mesh."""

    __slots__ = ()

    @property
    def position(self) -> torch.Tensor:
        return self.mesh.vertex_positions[self.index]

    @property
    def half_edge(self) -> "HalfEdge | None":
        """One outgoing half-edge, or ``None`` for an isolated vertex."""
        index = int(self.mesh.vertex_half_edge[self.index])
        if index < 0:
            return None
        return HalfEdge(self.mesh, index)


class HalfEdge(_Handle):
    """A directed half-edge of a half-edge mesh.

    Besides the short pointer names (``next``, ``prev``, ``twin``) the handle
    offers ``next_around_face``, ``prev_around_face`` and ``opposite``. The
    latter raises on boundary half-edges instead of returning ``None``, which
    is what stencil code wants: a missing neighbor is a precondition failure,
    not a value.
    """

    __slots__ = ()

    @property
    def start(self) -> Vertex:
        return Vertex(self.mesh, int(self.mesh.half_edge_origin[self.index]))

    @property
    def end(self) -> Vertex:
        return self.next.start

    @property
    def next(self) -> "HalfEdge":
        return HalfEdge(self.mesh, int(self.mesh.half_edge_next[self.index]))

    @property
    def prev(self) -> "HalfEdge":
        return HalfEdge(self.mesh, int(self.mesh.half_edge_prev[self.index]))

    @property
    def twin(self) -> "HalfEdge | None":
        """The oppositely directed half-edge, or ``None`` on a boundary."""
        index = int(self.mesh.half_edge_twin[self.index])
        if index < 0:
            return None
        return HalfEdge(self.mesh, index)

    @property
    def face(self) -> "Face":
        return Face(self.mesh, int(self.mesh.half_edge_face[self.index]))

    @property
    def is_boundary(self) -> bool:
        return int(self.mesh.half_edge_twin[self.index]) < 0

    @property
    def undirected_index(self) -> int:
        """Index shared by this half-edge and its twin (the smaller of the two)."""
        twin_index = int(self.mesh.half_edge_twin[self.index])
        if twin_index < 0:
            return self.index
        return min(self.index, twin_index)

    next_around_face = next
    prev_around_face = prev

    @property
    def opposite(self) -> "HalfEdge":
        """The twin half-edge.

        Raises
        ------
        ValueError
            If this half-edge lies on the mesh boundary.
        """
        twin = self.twin
        if twin is None:
            raise ValueError(
                f"Half-edge {self.index} ({self.start.index} -> {self.end.index}) "
                f"is a boundary edge and has no opposite half-edge."
            )
        return twin


class Face(_Handle):
    """A face of a half-edge mesh."""

    __slots__ = ()

    @property
    def half_edge(self) -> HalfEdge:
        return HalfEdge(self.mesh, int(self.mesh.face_half_edge[self.index]))

    @property
    def half_edges(self) -> tuple[HalfEdge, ...]:
        """The boundary loop of the face, starting at ``face.half_edge``.

        Raises
        ------
        ValueError
            If the ``next`` links do not close into a loop.
        """
        first = self.half_edge
        loop = [first]
        edge = first.next
        while edge != first:
            if len(loop) > self.mesh.n_half_edges:
                raise ValueError(
                    f"The boundary loop of face {self.index} does not close."
                )
            loop.append(edge)
            edge = edge.next
        return tuple(loop)

    @property
    def vertices(self) -> tuple[Vertex, ...]:
        return tuple(edge.start for edge in self.half_edges)
