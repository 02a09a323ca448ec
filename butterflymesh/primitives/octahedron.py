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

"""Regular octahedron surface in 3D space.

Dimensional: 2D manifold in 3D space (closed, no boundary).
"""

import torch

from butterflymesh.halfedge.mesh import HalfEdgeMesh


def load(
    radius: float = 1.0,
    device: torch.device | str = "cpu",
    dtype: torch.dtype = torch.float32,
) -> HalfEdgeMesh:
    """Create an octahedron with vertices on the coordinate axes.

    Vertex order is ``+x, -x, +y, -y, +z, -z``. Every vertex has valence 4.

    Parameters
    ----------
    radius : float
        Distance from the origin to each vertex.
    device : torch.device or str
        Compute device ('cpu' or 'cuda').
    dtype : torch.dtype
        Floating-point dtype of the vertex positions.

    Returns
    -------
    HalfEdgeMesh
        6 vertices, 12 edges, 8 outward-facing triangles.

    Examples
    --------
    >>> mesh = load()
    >>> mesh.n_vertices, mesh.n_edges, mesh.n_faces
    (6, 12, 8)
    """
    if radius <= 0:
        raise ValueError(f"radius must be positive, got {radius=}")

    points = radius * torch.tensor(
        [
            [1.0, 0.0, 0.0],
            [-1.0, 0.0, 0.0],
            [0.0, 1.0, 0.0],
            [0.0, -1.0, 0.0],
            [0.0, 0.0, 1.0],
            [0.0, 0.0, -1.0],
        ],
        dtype=dtype,
        device=device,
    )
    faces = torch.tensor(
        [
            # Upper half (+z)
            [0, 2, 4],
            [2, 1, 4],
            [1, 3, 4],
            [3, 0, 4],
            # Lower half (-z)
            [2, 0, 5],
            [1, 2, 5],
            [3, 1, 5],
            [0, 3, 5],
        ],
        dtype=torch.long,
        device=device,
    )
    return HalfEdgeMesh.from_triangles(points, faces)
