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

r"""Vertex and edge rules of the modified Butterfly scheme.

Butterfly is interpolating, so the vertex rule is the identity. The edge rule
places the new vertex of an interior edge with the 8-point stencil of Dyn,
Gregory & Levin (1990)::

                 c ------- a ------- d
                   \     /   \     /
                    \   /     \   /
                     v0 ------- v1
                    /   \     /   \
                   /     \   /     \
                 e ------- b ------- f

- Edge endpoints ``v0``, ``v1``: weight 1/2 each
- Opposite vertices ``a``, ``b`` of the two incident triangles: weight 2w each
- Four wing vertices ``c``, ``d``, ``e``, ``f``: weight -w each

The weights sum to exactly 1 for every tension ``w``; ``w = 1/16`` gives the
classical scheme and ``w = 0`` collapses to the edge midpoint.
"""

import math
import warnings

import torch

from butterflymesh.halfedge.handles import HalfEdge, Vertex
from butterflymesh.halfedge.mesh import HalfEdgeMesh

BUTTERFLY_TENSION = 1.0 / 16.0


def check_tension(w: float) -> None:
    """Validate a stencil tension.

    Raises
    ------
    ValueError
        If ``w`` is not a finite number.
    """
    if not math.isfinite(w):
        raise ValueError(f"tension must be finite, got {w=}")
    if not 0.0 <= w <= 0.125:
        warnings.warn(
            f"Butterfly tension {w=} is outside [0, 1/8]; the refined surface "
            f"will not converge to a smooth limit.",
            stacklevel=3,
        )


def butterfly_stencil_weights(
    w: float,
    dtype: torch.dtype | None = None,
    device: torch.device | str | None = None,
) -> torch.Tensor:
    """Weights of the 8-point stencil, in :func:`butterfly_stencil` order.

    Examples
    --------
    >>> butterfly_stencil_weights(1 / 16).tolist()
    [0.5, 0.5, 0.125, 0.125, -0.0625, -0.0625, -0.0625, -0.0625]
    """
    return torch.tensor(
        [0.5, 0.5, 2 * w, 2 * w, -w, -w, -w, -w], dtype=dtype, device=device
    )


def vertex_rule(vertex: Vertex) -> torch.Tensor:
    """Position of the refined-mesh image of a coarse vertex.

    Modified Butterfly interpolates, so this is an exact copy of the coarse
    position.
    """
    return vertex.position.clone()


def butterfly_stencil(edge: HalfEdge) -> tuple[Vertex, ...]:
    """Collect the 8 stencil vertices of an interior half-edge.

    Order: ``start``, ``end``, the two opposite vertices, then the four wings
    ``next.twin.prev.start``, ``prev.twin.prev.start``,
    ``twin.prev.twin.prev.start``, ``twin.next.twin.prev.start``.

    Raises
    ------
    ValueError
        If ``edge`` or any half-edge the stencil crosses lies on a boundary.
    """
    twin = edge.opposite
    return (
        edge.start,
        edge.end,
        edge.next_around_face.end,
        twin.next_around_face.end,
        edge.next_around_face.opposite.prev_around_face.start,
        edge.prev_around_face.opposite.prev_around_face.start,
        twin.prev_around_face.opposite.prev_around_face.start,
        twin.next_around_face.opposite.prev_around_face.start,
    )


def edge_rule(edge: HalfEdge, w: float) -> torch.Tensor:
    """Position of the vertex inserted on ``edge`` by the modified Butterfly scheme.

    Parameters
    ----------
    edge : HalfEdge
        Interior half-edge of a closed triangle mesh. The result is the same
        for ``edge`` and ``edge.twin``.
    w : float
        Stencil tension.

    Returns
    -------
    torch.Tensor
        Position, shape (n_spatial_dims,), with the dtype of the mesh.

    Raises
    ------
    ValueError
        If the stencil reaches a boundary edge.
    """
    stencil = butterfly_stencil(edge)
    positions = edge.mesh.vertex_positions[[vertex.index for vertex in stencil]]
    weights = butterfly_stencil_weights(
        w, dtype=positions.dtype, device=positions.device
    )
    return (weights.unsqueeze(-1) * positions).sum(dim=0)


def compute_butterfly_edge_points(
    mesh: HalfEdgeMesh,
    w: float,
    half_edges: torch.Tensor | None = None,
) -> torch.Tensor:
    """Evaluate the edge rule for many half-edges at once.

    This is the vectorized counterpart of :func:`edge_rule`: it only reads the
    mesh, so it can compute every edge point ahead of triangle emission.

    Parameters
    ----------
    mesh : HalfEdgeMesh
        Closed triangle mesh.
    w : float
        Stencil tension.
    half_edges : torch.Tensor, optional
        Half-edge indices, shape (n,). Defaults to all half-edges.

    Returns
    -------
    torch.Tensor
        Edge points, shape (n, n_spatial_dims).

    Raises
    ------
    ValueError
        If the stencil of any requested half-edge reaches a boundary edge.
    """
    device = mesh.vertex_positions.device
    if half_edges is None:
        half_edges = torch.arange(mesh.n_half_edges, device=device)
    half_edges = half_edges.to(device=device, dtype=torch.long)

    origin = mesh.half_edge_origin
    nxt = mesh.half_edge_next
    prv = mesh.half_edge_prev
    twn = mesh.half_edge_twin

    ### Check that every twin hop of the stencil exists
    twin = twn[half_edges]
    crossed = torch.stack(
        [half_edges, nxt[half_edges], prv[half_edges]], dim=1
    )  # (n, 3)
    has_twins = (twn[crossed] >= 0).all(dim=1)
    safe_twin = twin.clamp(min=0)
    twin_crossed = torch.stack([nxt[safe_twin], prv[safe_twin]], dim=1)  # (n, 2)
    has_twins &= (twn[twin_crossed] >= 0).all(dim=1)
    if not has_twins.all():
        bad = half_edges[~has_twins]
        raise ValueError(
            f"The Butterfly stencil of {len(bad)} half-edges reaches the mesh boundary.\n"
            f"First few half-edges: {bad.tolist()[:10]}"
        )

    ### Gather the 8 stencil vertices, shape (n, 8)
    def _wing(h: torch.Tensor) -> torch.Tensor:
        return origin[prv[twn[h]]]

    stencil = torch.stack(
        [
            origin[half_edges],
            origin[nxt[half_edges]],
            origin[prv[half_edges]],
            origin[prv[twin]],
            _wing(nxt[half_edges]),
            _wing(prv[half_edges]),
            _wing(prv[twin]),
            _wing(nxt[twin]),
        ],
        dim=1,
    )

    positions = mesh.vertex_positions[stencil]  # (n, 8, n_spatial_dims)
    weights = butterfly_stencil_weights(
        w, dtype=positions.dtype, device=positions.device
    )
    return (weights.view(1, 8, 1) * positions).sum(dim=1)
