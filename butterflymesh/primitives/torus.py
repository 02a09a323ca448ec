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
"""Closed torus built from a wrapped quad grid.

Each grid cell is split along the same diagonal, so every vertex has valence
6: the regular case of the Butterfly stencil. The surface has genus 1
(Euler characteristic 0).
"""

import torch

from butterflymesh.halfedge.mesh import HalfEdgeMesh


def load(
    major_radius: float = 1.0,
    minor_radius: float = 0.3,
    n_major: int = 48,
    n_minor: int = 24,
    device: torch.device | str = "cpu",
    dtype: torch.dtype = torch.float32,
) -> HalfEdgeMesh:
    """Torus of revolution around the z-axis.

    Parameters
    ----------
    major_radius : float
        Distance from the z-axis to the center of the tube.
    minor_radius : float
        Tube radius. Must be smaller than ``major_radius``.
    n_major : int
        Grid columns around the z-axis.
    n_minor : int
        Grid rows around the tube.
    device : torch.device or str
        Compute device ('cpu' or 'cuda').
    dtype : torch.dtype
        Floating-point dtype of the vertex positions.

    Returns
    -------
    HalfEdgeMesh
        ``n_major * n_minor`` vertices, three times as many edges and twice
        as many outward-facing triangles.
    """
    if n_major < 3:
        raise ValueError(f"n_major must be at least 3, got {n_major=}")
    if n_minor < 3:
        raise ValueError(f"n_minor must be at least 3, got {n_minor=}")
    if minor_radius >= major_radius:
        raise ValueError(
            f"minor_radius must be < major_radius, got {minor_radius=}, {major_radius=}"
        )

    ### Vertex (i, j) sits at angle theta_i around z and phi_j around the tube
    theta = torch.arange(n_major, device=device, dtype=dtype) * (2 * torch.pi / n_major)
    phi = torch.arange(n_minor, device=device, dtype=dtype) * (2 * torch.pi / n_minor)
    theta, phi = theta[:, None], phi[None, :]

    ring = major_radius + minor_radius * torch.cos(phi)
    points = torch.stack(
        torch.broadcast_tensors(
            ring * torch.cos(theta),
            ring * torch.sin(theta),
            minor_radius * torch.sin(phi),
        ),
        dim=-1,
    ).reshape(-1, 3)

    ### Split every wrapped grid cell into two triangles
    grid = torch.arange(n_major * n_minor, device=device).reshape(n_major, n_minor)
    corner = grid
    across = grid.roll(-1, dims=0)  # (i + 1, j)
    around = grid.roll(-1, dims=1)  # (i, j + 1)
    diagonal = across.roll(-1, dims=1)  # (i + 1, j + 1)

    lower = torch.stack([corner, across, around], dim=-1).reshape(-1, 3)
    upper = torch.stack([around, across, diagonal], dim=-1).reshape(-1, 3)

    return HalfEdgeMesh.from_triangles(points, torch.cat([lower, upper]))
