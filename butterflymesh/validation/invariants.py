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

"""Structural invariants of half-edge meshes.

Checks the pointer identities every consumer of a half-edge mesh relies on:

- ``twin.twin == e`` and ``start == twin.end`` for every interior half-edge
- ``next.prev == e`` and ``prev.next == e``
- ``next.next.next == e`` (triangular faces)
- ``next`` and ``twin`` stay within one face / cross between faces correctly
- ``face.half_edge.face == face`` and ``vertex.half_edge.start == vertex``
"""

from collections.abc import Mapping
from typing import TYPE_CHECKING

import torch

if TYPE_CHECKING:
    from butterflymesh.halfedge.mesh import HalfEdgeMesh


def _record(
    results: dict,
    name: str,
    violations: torch.Tensor,
    message: str,
    raise_on_error: bool,
) -> None:
    """Store the count and indices of violations of one invariant."""
    indices = torch.where(violations)[0]
    results[f"n_{name}"] = len(indices)
    if len(indices) == 0:
        return
    results["valid"] = False
    results[f"{name}_indices"] = indices
    if raise_on_error:
        raise ValueError(
            f"Found {len(indices)} {message}.\n"
            f"First few offending indices: {indices.tolist()[:10]}"
        )


def validate_halfedge_mesh(
    mesh: "HalfEdgeMesh",
    check_triangles: bool = True,
    check_closed: bool = False,
    check_isolated_vertices: bool = True,
    raise_on_error: bool = False,
) -> Mapping[str, bool | int | torch.Tensor]:
    """Validate the adjacency arenas of a half-edge mesh.

    Parameters
    ----------
    mesh : HalfEdgeMesh
        Mesh to validate.
    check_triangles : bool
        Require every face loop to have exactly three half-edges.
    check_closed : bool
        Require every half-edge to have a twin.
    check_isolated_vertices : bool
        Require every vertex to have an outgoing half-edge.
    raise_on_error : bool
        If True, raise ValueError on the first failed check. If False,
        return a report with all results.

    Returns
    -------
    Mapping[str, bool | int | torch.Tensor]
        Dictionary with ``"valid"`` plus, per check, ``"n_<check>"`` and, when
        violations were found, ``"<check>_indices"``:

            - ``out_of_bounds_half_edges``: arena entries outside valid ranges
            - ``broken_twins``: ``twin.twin != e`` or endpoints do not swap
            - ``broken_next_prev``: ``next.prev != e`` or ``prev.next != e``
            - ``non_triangular_loops``: ``next.next.next != e``
            - ``broken_face_links``: ``next`` leaves the face or ``twin`` stays in it
            - ``broken_face_half_edges``: ``face.half_edge.face != face``
            - ``broken_vertex_half_edges``: ``vertex.half_edge.start != vertex``
            - ``isolated_vertices``: vertices without an outgoing half-edge
            - ``boundary_half_edges``: half-edges without a twin

    Raises
    ------
    ValueError
        If ``raise_on_error`` is True and a check fails.

    Examples
    --------
    >>> from butterflymesh.primitives import octahedron
    >>> report = validate_halfedge_mesh(octahedron.load(), check_closed=True)
    >>> assert report["valid"]
    """
    results = {"valid": True}
    n_v, n_h, n_f = mesh.n_vertices, mesh.n_half_edges, mesh.n_faces

    origin = mesh.half_edge_origin
    nxt = mesh.half_edge_next
    prv = mesh.half_edge_prev
    twn = mesh.half_edge_twin
    face = mesh.half_edge_face

    ### Check index ranges FIRST (everything below dereferences them)
    out_of_bounds = (
        (origin < 0)
        | (origin >= n_v)
        | (nxt < 0)
        | (nxt >= n_h)
        | (prv < 0)
        | (prv >= n_h)
        | (twn < -1)
        | (twn >= n_h)
        | (face < 0)
        | (face >= n_f)
    )
    _record(
        results,
        "out_of_bounds_half_edges",
        out_of_bounds,
        f"half-edges with indices outside [0, {n_h}) / [0, {n_v}) / [0, {n_f})",
        raise_on_error,
    )
    bad_faces = (mesh.face_half_edge < 0) | (mesh.face_half_edge >= n_h)
    bad_vertices = (mesh.vertex_half_edge < -1) | (mesh.vertex_half_edge >= n_h)
    if bad_faces.any() or bad_vertices.any():
        results["valid"] = False
        if raise_on_error:
            raise ValueError(
                f"Found out-of-range face or vertex half-edge references: "
                f"faces {torch.where(bad_faces)[0].tolist()[:10]}, "
                f"vertices {torch.where(bad_vertices)[0].tolist()[:10]}"
            )
    if not results["valid"]:
        # Can't dereference the arenas safely
        return results

    ### Twin involution and endpoint swap
    has_twin = twn >= 0
    safe_twin = torch.where(has_twin, twn, torch.arange(n_h, device=twn.device))
    destination = origin[nxt]
    broken_twins = has_twin & (
        (twn[safe_twin] != torch.arange(n_h, device=twn.device))
        | (origin[safe_twin] != destination)
        | (destination[safe_twin] != origin)
    )
    _record(
        results,
        "broken_twins",
        broken_twins,
        "half-edges whose twin does not point back with swapped endpoints",
        raise_on_error,
    )

    ### next / prev are inverse permutations
    half_edge_ids = torch.arange(n_h, device=nxt.device)
    _record(
        results,
        "broken_next_prev",
        (prv[nxt] != half_edge_ids) | (nxt[prv] != half_edge_ids),
        "half-edges where next.prev or prev.next is not the half-edge itself",
        raise_on_error,
    )

    if check_triangles:
        _record(
            results,
            "non_triangular_loops",
            nxt[nxt[nxt]] != half_edge_ids,
            "half-edges whose face loop is not a triangle",
            raise_on_error,
        )

    ### Face membership
    _record(
        results,
        "broken_face_links",
        (face[nxt] != face) | (has_twin & (face[safe_twin] == face)),
        "half-edges whose next leaves the face or whose twin stays in it",
        raise_on_error,
    )
    _record(
        results,
        "broken_face_half_edges",
        face[mesh.face_half_edge] != torch.arange(n_f, device=face.device),
        "faces whose half-edge belongs to another face",
        raise_on_error,
    )

    ### Vertex outgoing half-edges
    has_half_edge = mesh.vertex_half_edge >= 0
    safe_vertex_half_edge = mesh.vertex_half_edge.clamp(min=0)
    vertex_ids = torch.arange(n_v, device=origin.device)
    _record(
        results,
        "broken_vertex_half_edges",
        has_half_edge & (origin[safe_vertex_half_edge] != vertex_ids)
        if n_h > 0
        else has_half_edge,
        "vertices whose half-edge does not start at the vertex",
        raise_on_error,
    )
    if check_isolated_vertices:
        _record(
            results,
            "isolated_vertices",
            ~has_half_edge,
            "isolated vertices without an outgoing half-edge",
            raise_on_error,
        )

    if check_closed:
        _record(
            results,
            "boundary_half_edges",
            ~has_twin,
            "boundary half-edges (the mesh is not closed)",
            raise_on_error,
        )

    return results


def check_mesh_invariants(
    mesh: "HalfEdgeMesh",
    require_closed: bool = False,
) -> None:
    """Raise if ``mesh`` violates any half-edge invariant.

    Parameters
    ----------
    mesh : HalfEdgeMesh
        Mesh to check, typically fresh out of a builder.
    require_closed : bool
        Also require every half-edge to have a twin.

    Raises
    ------
    ValueError
        Describing the first violated invariant.
    """
    validate_halfedge_mesh(
        mesh,
        check_triangles=True,
        check_closed=require_closed,
        check_isolated_vertices=True,
        raise_on_error=True,
    )
