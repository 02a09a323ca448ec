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

"""Vectorized half-edge connectivity for triangle meshes.

Given triangle connectivity, derives every half-edge relation in one pass.
Twins are paired by hashing each directed edge ``(origin, destination)`` and
matching it against the hash of its reverse with a sorted binary search.
"""

import torch


def _directed_edge_hash(
    origin: torch.Tensor, destination: torch.Tensor, n_vertices: int
) -> torch.Tensor:
    """Hash directed edges as ``origin * n_vertices + destination``."""
    return origin * n_vertices + destination


def build_half_edge_connectivity(
    faces: torch.Tensor,
    n_vertices: int,
) -> dict[str, torch.Tensor]:
    """Derive half-edge adjacency from triangle connectivity.

    Face ``f`` owns half-edges ``3f``, ``3f + 1`` and ``3f + 2``; half-edge
    ``3f + k`` runs from ``faces[f, k]`` to ``faces[f, (k + 1) % 3]``.

    Parameters
    ----------
    faces : torch.Tensor
        Triangle connectivity, shape (n_faces, 3), integer dtype.
    n_vertices : int
        Number of vertices the face indices refer to.

    Returns
    -------
    dict[str, torch.Tensor]
        ``half_edge_origin``, ``half_edge_next``, ``half_edge_prev``,
        ``half_edge_twin`` (``-1`` for boundary half-edges),
        ``half_edge_face``, ``face_half_edge`` and ``vertex_half_edge``
        (``-1`` for vertices without an outgoing half-edge).

    Raises
    ------
    ValueError
        If ``faces`` is not of shape (n_faces, 3), references vertices out of
        range, or contains the same directed edge twice (non-manifold edge or
        inconsistent face orientation).

    Examples
    --------
    >>> faces = torch.tensor([[0, 1, 2], [0, 2, 3]])
    >>> conn = build_half_edge_connectivity(faces, n_vertices=4)
    >>> conn["half_edge_twin"].tolist()
    [-1, -1, 3, 2, -1, -1]
    """
    if faces.ndim != 2 or faces.shape[-1] != 3:
        raise ValueError(
            f"`faces` must have shape (n_faces, 3), but got {faces.shape=}."
        )

    device = faces.device
    faces = faces.to(torch.long)
    n_faces = faces.shape[0]
    n_half_edges = 3 * n_faces

    if n_faces > 0 and (faces.min() < 0 or faces.max() >= n_vertices):
        raise ValueError(
            f"Face indices must be in range [0, {n_vertices}), "
            f"but got {faces.min().item()=} and {faces.max().item()=}."
        )

    ### Per-face layout: half-edge 3f + k starts at faces[f, k]
    face_ids = torch.arange(n_faces, device=device)
    local = torch.arange(3, device=device).repeat(n_faces)
    base = (3 * face_ids).repeat_interleave(3)

    half_edge_origin = faces.reshape(-1)
    half_edge_next = base + (local + 1) % 3
    half_edge_prev = base + (local + 2) % 3
    half_edge_face = face_ids.repeat_interleave(3)
    face_half_edge = 3 * face_ids
    half_edge_destination = half_edge_origin[half_edge_next]

    ### Pair twins by matching each directed edge against its reverse
    half_edge_twin = torch.full(
        (n_half_edges,), -1, dtype=torch.long, device=device
    )
    if n_half_edges > 0:
        forward_hash = _directed_edge_hash(
            half_edge_origin, half_edge_destination, n_vertices
        )
        reverse_hash = _directed_edge_hash(
            half_edge_destination, half_edge_origin, n_vertices
        )

        sorted_hash, sort_perm = torch.sort(forward_hash)
        is_repeated = sorted_hash[1:] == sorted_hash[:-1]
        if is_repeated.any():
            repeated = sort_perm[1:][is_repeated]
            raise ValueError(
                f"Found {int(is_repeated.sum())} directed edges shared by more than one face.\n"
                f"The mesh is non-manifold or inconsistently oriented.\n"
                f"First few half-edges: {repeated.tolist()[:10]}"
            )

        positions = torch.searchsorted(sorted_hash, reverse_hash)
        positions = positions.clamp(max=n_half_edges - 1)
        matches = sorted_hash[positions] == reverse_hash
        half_edge_twin = torch.where(
            matches, sort_perm[positions], half_edge_twin
        )

    ### One outgoing half-edge per vertex (the lowest index, deterministically)
    vertex_half_edge = torch.full(
        (n_vertices,), n_half_edges, dtype=torch.long, device=device
    )
    if n_half_edges > 0:
        vertex_half_edge = vertex_half_edge.scatter_reduce(
            0,
            half_edge_origin,
            torch.arange(n_half_edges, device=device),
            reduce="amin",
            include_self=True,
        )
    vertex_half_edge = torch.where(
        vertex_half_edge == n_half_edges,
        torch.full_like(vertex_half_edge, -1),
        vertex_half_edge,
    )

    return {
        "half_edge_origin": half_edge_origin,
        "half_edge_next": half_edge_next,
        "half_edge_prev": half_edge_prev,
        "half_edge_twin": half_edge_twin,
        "half_edge_face": half_edge_face,
        "face_half_edge": face_half_edge,
        "vertex_half_edge": vertex_half_edge,
    }
