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

r"""Modified Butterfly subdivision of closed half-edge triangle meshes.

Each coarse face is replaced by four children built from its three corner
images and its three edge points::

                 V2                          A2
                 /\                          /\
                /  \                        /  \
               /    \                   M2 /____\ M1
              /      \                    /\    /\
             /        \                  /  \  /  \
            /__________\                /____\/____\
          V0            V1            A0     M0     A1

Corner and edge points are created lazily through the builder's destination
index, so a coarse vertex or edge shared by several faces yields exactly one
refined vertex. Face iteration is sequential: later faces reuse what earlier
faces registered.
"""

import logging

import torch

from butterflymesh.halfedge.builder import HalfEdgeMeshBuilder
from butterflymesh.halfedge.handles import HalfEdge, Vertex
from butterflymesh.halfedge.mesh import HalfEdgeMesh
from butterflymesh.subdivision._data import (
    propagate_face_data_to_children,
    transfer_vertex_data,
)
from butterflymesh.subdivision.rules import (
    BUTTERFLY_TENSION,
    check_tension,
    edge_rule,
    vertex_rule,
)
from butterflymesh.validation import check_mesh_invariants

logger = logging.getLogger(__name__)


def _source_endpoints(
    builder: HalfEdgeMeshBuilder, device: torch.device
) -> torch.Tensor:
    """Coarse endpoints ``[a, b]`` of the source of every refined vertex."""
    endpoints = []
    for index in range(builder.n_vertices):
        source = builder.source_of(Vertex(builder.mesh, index))
        if isinstance(source, HalfEdge):
            endpoints.append((source.start.index, source.end.index))
        else:
            endpoints.append((source.index, source.index))
    return torch.tensor(endpoints, dtype=torch.long, device=device).reshape(-1, 2)


def butterfly_subdivision(
    src_mesh: HalfEdgeMesh,
    w: float,
    dst_mesh: HalfEdgeMesh,
) -> None:
    """Populate ``dst_mesh`` with one level of modified Butterfly refinement of ``src_mesh``.

    For every coarse face ``(V0, V1, V2)`` with edges ``E0 = V0V1``,
    ``E1 = V1V2``, ``E2 = V2V0``, the corner images ``A_i`` come from
    :func:`vertex_rule` and the edge points ``M_i`` from :func:`edge_rule`.
    Four triangles are emitted with the parent's orientation:
    ``(A0, M0, M2)``, ``(M0, A1, M1)``, ``(M2, M1, A2)`` and ``(M0, M1, M2)``.
    Child ``4f + k`` is the ``k``-th child of coarse face ``f``.

    After all faces are processed the adjacency of ``dst_mesh`` is finalized,
    vertex and face data are carried over, and the half-edge invariants are
    checked.

    Parameters
    ----------
    src_mesh : HalfEdgeMesh
        Closed coarse triangle mesh (read only).
    w : float
        Stencil tension, typically :data:`BUTTERFLY_TENSION`.
    dst_mesh : HalfEdgeMesh
        Empty mesh to populate.

    Raises
    ------
    ValueError
        If ``src_mesh`` has no faces, ``dst_mesh`` is not empty, ``w`` is not
        finite, a face is not a triangle, or an edge stencil reaches the
        boundary of an open mesh. ``dst_mesh`` is left empty in these cases.

    Examples
    --------
        >>> from butterflymesh.primitives import octahedron
        >>> coarse = octahedron.load()
        >>> fine = HalfEdgeMesh.empty()
        >>> butterfly_subdivision(coarse, BUTTERFLY_TENSION, fine)
        >>> fine.n_faces, fine.n_vertices
        (32, 18)
    """
    if src_mesh.n_faces == 0:
        raise ValueError(
            f"Cannot subdivide a mesh without faces, got {src_mesh.n_faces=}."
        )
    check_tension(w)
    builder = HalfEdgeMeshBuilder(dst_mesh)

    n_reused = 0
    for face in src_mesh.iter_faces():
        face_edges = face.half_edges
        if len(face_edges) != 3:
            raise ValueError(
                f"Butterfly subdivision requires triangular faces, but face "
                f"{face.index} has {len(face_edges)} edges."
            )

        ### Corner images A0, A1, A2
        corners = []
        for vertex in (edge.start for edge in face_edges):
            dst_vertex = builder.find_dst_vertex_of(vertex)
            if dst_vertex is None:
                dst_vertex = builder.insert_vertex(vertex_rule(vertex), vertex)
            else:
                n_reused += 1
            corners.append(dst_vertex)

        ### Edge points M0, M1, M2 (shared with the twin's face)
        midpoints = []
        for edge in face_edges:
            dst_vertex = builder.find_dst_vertex_of(edge)
            if dst_vertex is None:
                dst_vertex = builder.insert_vertex(edge_rule(edge, w), edge)
            else:
                n_reused += 1
            midpoints.append(dst_vertex)

        a0, a1, a2 = corners
        m0, m1, m2 = midpoints
        builder.insert_triangle(a0, m0, m2)
        builder.insert_triangle(m0, a1, m1)
        builder.insert_triangle(m2, m1, a2)
        builder.insert_triangle(m0, m1, m2)

    logger.debug(
        "Butterfly pass over %d faces: %d refined vertices created, %d lookups reused.",
        src_mesh.n_faces,
        builder.n_vertices,
        n_reused,
    )

    builder.finalize()

    ### Carry attached data over to the refined mesh
    device = dst_mesh.vertex_positions.device
    dst_mesh.vertex_data = transfer_vertex_data(
        src_mesh.vertex_data, _source_endpoints(builder, device)
    )
    parent_indices = torch.arange(
        src_mesh.n_faces, device=device
    ).repeat_interleave(4)
    dst_mesh.face_data = propagate_face_data_to_children(
        src_mesh.face_data, parent_indices
    )

    check_mesh_invariants(dst_mesh)


def subdivide_butterfly(
    mesh: HalfEdgeMesh,
    w: float = BUTTERFLY_TENSION,
    levels: int = 1,
) -> HalfEdgeMesh:
    """Apply :func:`butterfly_subdivision` ``levels`` times.

    Parameters
    ----------
    mesh : HalfEdgeMesh
        Closed coarse triangle mesh.
    w : float, optional
        Stencil tension, 1/16 by default.
    levels : int, optional
        Number of refinement passes. ``0`` returns ``mesh`` unchanged.

    Returns
    -------
    HalfEdgeMesh
        Mesh with ``4**levels`` times as many faces.

    Raises
    ------
    ValueError
        If ``levels`` is negative, or for any error raised by
        :func:`butterfly_subdivision`.

    Examples
    --------
        >>> from butterflymesh.primitives import icosahedron
        >>> refined = subdivide_butterfly(icosahedron.load(), levels=2)
        >>> refined.n_faces
        320
    """
    if levels < 0:
        raise ValueError(f"levels must be >= 0, got {levels=}")

    for level in range(levels):
        refined = HalfEdgeMesh.empty(
            n_spatial_dims=mesh.n_spatial_dims,
            device=mesh.vertex_positions.device,
            dtype=mesh.vertex_positions.dtype,
        )
        butterfly_subdivision(mesh, w, refined)
        logger.info(
            "Butterfly level %d/%d: %d -> %d faces, %d -> %d vertices.",
            level + 1,
            levels,
            mesh.n_faces,
            refined.n_faces,
            mesh.n_vertices,
            refined.n_vertices,
        )
        mesh = refined

    return mesh
