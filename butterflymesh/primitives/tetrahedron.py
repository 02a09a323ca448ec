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

"""Regular tetrahedron surface in 3D space.

Dimensional: 2D manifold in 3D space (closed, no boundary).
"""

import math

import torch

from butterflymesh.halfedge.mesh import HalfEdgeMesh


def load(
    side_length: float = 1.0,
    device: torch.device | str = "cpu",
    dtype: torch.dtype = torch.float32,
) -> HalfEdgeMesh:
    """Create a regular tetrahedron centered at the origin.

    Parameters
    ----------
    side_length : float
        Length of each edge.
    device : torch.device or str
        Compute device ('cpu' or 'cuda').
    dtype : torch.dtype
        Floating-point dtype of the vertex positions.

    Returns
    -------
    HalfEdgeMesh
        4 vertices, 6 edges, 4 outward-facing triangles.
    """
    if side_length <= 0:
        raise ValueError(f"side_length must be positive, got {side_length=}")

    # Alternate corners of a cube; their edges have length 2 * sqrt(2)
    scale = side_length / (2 * math.sqrt(2))
    points = torch.tensor(
        [
            [1.0, 1.0, 1.0],
            [1.0, -1.0, -1.0],
            [-1.0, 1.0, -1.0],
            [-1.0, -1.0, 1.0],
        ],
        dtype=dtype,
        device=device,
    )
    faces = torch.tensor(
        [[0, 1, 2], [0, 3, 1], [0, 2, 3], [1, 3, 2]],
        dtype=torch.long,
        device=device,
    )
    return HalfEdgeMesh.from_triangles(points * scale, faces)
