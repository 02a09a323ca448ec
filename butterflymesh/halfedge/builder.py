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

"""Incremental construction of a half-edge mesh.

The builder separates *what* triangles exist from *how* they connect.
Vertices and triangles are accumulated in insertion order; adjacency (next,
prev, twin, per-vertex outgoing half-edge) is derived once by
:meth:`HalfEdgeMeshBuilder.finalize`.

While accumulating, the builder keeps a destination index from the source
element that generated each vertex (a vertex or a half-edge of another mesh)
to the destination vertex, so the same source is never materialized twice.
The index is bound to the mesh of the first registered source; handles of
any other mesh are rejected, since their indices would collide.
Half-edges are keyed by :attr:`HalfEdge.undirected_index`, so a half-edge and
its twin resolve to the same destination vertex.
"""

import logging

import torch
from tensordict import TensorDict

from butterflymesh.halfedge._connectivity import build_half_edge_connectivity
from butterflymesh.halfedge.handles import HalfEdge, Vertex
from butterflymesh.halfedge.mesh import HalfEdgeMesh

logger = logging.getLogger(__name__)

SourceElement = Vertex | HalfEdge


def _source_key(source: SourceElement) -> tuple[str, int]:
    """Index key of a source element within its mesh, independent of half-edge orientation."""
    if isinstance(source, Vertex):
        return ("vertex", source.index)
    if isinstance(source, HalfEdge):
        return ("edge", source.undirected_index)
    raise TypeError(
        f"Source elements must be Vertex or HalfEdge handles, got {type(source)=}."
    )


class HalfEdgeMeshBuilder:
    """Accumulate vertices and triangles into an empty :class:`HalfEdgeMesh`.

    Parameters
    ----------
    mesh : HalfEdgeMesh
        Destination mesh. Must be empty; it is populated in place by
        :meth:`finalize`.

    Raises
    ------
    ValueError
        If ``mesh`` already holds vertices, half-edges or faces.

    Examples
    --------
    >>> mesh = HalfEdgeMesh.empty()
    >>> builder = HalfEdgeMeshBuilder(mesh)
    >>> a = builder.insert_vertex(torch.tensor([0.0, 0.0, 0.0]))
    >>> b = builder.insert_vertex(torch.tensor([1.0, 0.0, 0.0]))
    >>> c = builder.insert_vertex(torch.tensor([0.0, 1.0, 0.0]))
    >>> builder.insert_triangle(a, b, c)
    0
    >>> builder.finalize().n_faces
    1
    """

    def __init__(self, mesh: HalfEdgeMesh) -> None:
        if mesh.n_vertices > 0 or mesh.n_half_edges > 0 or mesh.n_faces > 0:
            raise ValueError(
                f"The destination mesh must be empty, but got "
                f"{mesh.n_vertices=}, {mesh.n_half_edges=}, {mesh.n_faces=}."
            )
        self.mesh = mesh
        self._positions: list[torch.Tensor] = []
        self._triangles: list[tuple[int, int, int]] = []
        self._dst_index: dict[tuple[str, int], int] = {}
        self._sources: list[SourceElement | None] = []
        self._source_mesh: HalfEdgeMesh | None = None
        self._finalized = False

    @property
    def n_vertices(self) -> int:
        return len(self._positions)

    @property
    def n_triangles(self) -> int:
        return len(self._triangles)

    @property
    def is_finalized(self) -> bool:
        return self._finalized

    def _check_open(self) -> None:
        if self._finalized:
            raise RuntimeError("The builder has already been finalized.")

    def _check_vertex(self, vertex: Vertex) -> int:
        if not isinstance(vertex, Vertex) or vertex.mesh is not self.mesh:
            raise ValueError(f"{vertex!r} was not created by this builder.")
        if not 0 <= vertex.index < self.n_vertices:
            raise ValueError(
                f"{vertex!r} is out of range for a builder with {self.n_vertices} vertices."
            )
        return vertex.index

    def _key_of(self, source: SourceElement) -> tuple[str, int]:
        key = _source_key(source)
        if self._source_mesh is not None and source.mesh is not self._source_mesh:
            raise ValueError(
                f"{source!r} belongs to a different source mesh than the elements "
                f"already registered with this builder."
            )
        return key

    def find_dst_vertex_of(self, source: SourceElement) -> Vertex | None:
        """Return the destination vertex generated from ``source``, if any.

        Parameters
        ----------
        source : Vertex or HalfEdge
            Element of the source mesh. A half-edge and its twin are the same
            source.

        Returns
        -------
        Vertex or None
            The previously inserted destination vertex, or ``None``.

        Raises
        ------
        ValueError
            If ``source`` belongs to another mesh than the registered sources.
        """
        index = self._dst_index.get(self._key_of(source))
        if index is None:
            return None
        return Vertex(self.mesh, index)

    def insert_vertex(
        self,
        position: torch.Tensor,
        source: SourceElement | None = None,
    ) -> Vertex:
        """Insert a destination vertex, optionally registered under its source.

        If ``source`` is already registered, the existing vertex is returned
        and ``position`` is ignored.

        Parameters
        ----------
        position : torch.Tensor
            Vertex coordinates, shape (n_spatial_dims,).
        source : Vertex or HalfEdge, optional
            Element of the source mesh that generated this vertex.

        Returns
        -------
        Vertex
            Handle into the destination mesh. Its position becomes readable
            after :meth:`finalize`.
        """
        self._check_open()
        if position.ndim != 1:
            raise ValueError(
                f"`position` must be a single coordinate vector, but got {position.shape=}."
            )
        if self._positions and position.shape != self._positions[0].shape:
            raise ValueError(
                f"All positions must share one spatial dimension, but got "
                f"{position.shape=} after {self._positions[0].shape=}."
            )

        if source is not None:
            key = self._key_of(source)
            existing = self._dst_index.get(key)
            if existing is not None:
                return Vertex(self.mesh, existing)
            self._source_mesh = source.mesh
            self._dst_index[key] = self.n_vertices

        self._positions.append(position)
        self._sources.append(source)
        return Vertex(self.mesh, self.n_vertices - 1)

    def insert_triangle(self, v0: Vertex, v1: Vertex, v2: Vertex) -> int:
        """Insert the triangle ``(v0, v1, v2)``, counter-clockwise.

        Returns
        -------
        int
            Index of the new face in the destination mesh.

        Raises
        ------
        ValueError
            If a vertex does not belong to this builder or the triangle is
            degenerate (repeated vertex).
        """
        self._check_open()
        triangle = (self._check_vertex(v0), self._check_vertex(v1), self._check_vertex(v2))
        if len(set(triangle)) != 3:
            raise ValueError(f"Degenerate triangle with repeated vertex: {triangle}.")
        self._triangles.append(triangle)
        return self.n_triangles - 1

    def source_of(self, vertex: Vertex) -> SourceElement | None:
        """Return the source element a destination vertex was registered under."""
        return self._sources[self._check_vertex(vertex)]

    def finalize(self) -> HalfEdgeMesh:
        """Write vertices and derived adjacency into the destination mesh.

        Returns
        -------
        HalfEdgeMesh
            The destination mesh, now populated.

        Raises
        ------
        RuntimeError
            If called twice.
        ValueError
            If the inserted triangles share a directed edge (non-manifold or
            inconsistently oriented).
        """
        self._check_open()

        if self._positions:
            positions = torch.stack(self._positions)
        else:
            positions = self.mesh.vertex_positions
        faces = torch.tensor(
            self._triangles, dtype=torch.long, device=positions.device
        ).reshape(-1, 3)

        connectivity = build_half_edge_connectivity(faces, n_vertices=len(positions))

        mesh = self.mesh
        mesh.vertex_positions = positions
        for name, tensor in connectivity.items():
            setattr(mesh, name, tensor)
        mesh.vertex_data = TensorDict(
            {}, batch_size=torch.Size([len(positions)]), device=positions.device
        )
        mesh.face_data = TensorDict(
            {}, batch_size=torch.Size([len(faces)]), device=positions.device
        )
        self._finalized = True

        logger.debug(
            "Finalized half-edge mesh: %d vertices (%d registered sources), "
            "%d faces, %d boundary half-edges.",
            mesh.n_vertices,
            len(self._dst_index),
            mesh.n_faces,
            mesh.n_boundary_half_edges,
        )
        return mesh
