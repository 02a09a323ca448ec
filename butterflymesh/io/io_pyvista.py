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

from typing import TYPE_CHECKING

import numpy as np
import torch

from butterflymesh.halfedge.mesh import HalfEdgeMesh
from butterflymesh.utilities._version_check import require_version_spec

if TYPE_CHECKING:
    import pyvista


@require_version_spec("pyvista", ">=0.43")
def from_pyvista(
    pyvista_mesh: "pyvista.PolyData",
    dtype: torch.dtype = torch.float32,
) -> HalfEdgeMesh:
    """Convert a PyVista surface to a half-edge mesh.

    Non-triangular faces are triangulated first. Point and cell arrays become
    ``vertex_data`` and ``face_data``.

    Parameters
    ----------
    pyvista_mesh : pv.PolyData
        Input surface. Faces must be consistently oriented.
    dtype : torch.dtype
        Floating-point dtype of the vertex positions.

    Returns
    -------
    HalfEdgeMesh
        Mesh on CPU.

    Raises
    ------
    ValueError
        If the surface has no faces, or faces are non-manifold or
        inconsistently oriented.
    ImportError
        If pyvista is not installed.
    """
    import importlib

    pv = importlib.import_module("pyvista")

    if not isinstance(pyvista_mesh, pv.PolyData):
        pyvista_mesh = pyvista_mesh.extract_surface()
    if not pyvista_mesh.is_all_triangles:
        pyvista_mesh = pyvista_mesh.triangulate()
    triangles = np.asarray(pyvista_mesh.regular_faces).reshape(-1, 3)
    if len(triangles) == 0:
        raise ValueError(
            f"Expected a surface with faces, but got {pyvista_mesh.n_cells=} cells "
            f"and no polygons."
        )

    points = torch.from_numpy(np.asarray(pyvista_mesh.points)).to(dtype)
    faces = torch.from_numpy(triangles).long()

    vertex_data = {
        str(k): torch.from_numpy(np.asarray(pyvista_mesh.point_data[k]))
        for k in pyvista_mesh.point_data.keys()
    }
    face_data = {
        str(k): torch.from_numpy(np.asarray(pyvista_mesh.cell_data[k]))
        for k in pyvista_mesh.cell_data.keys()
    }

    return HalfEdgeMesh.from_triangles(
        points, faces, vertex_data=vertex_data, face_data=face_data
    )


@require_version_spec("pyvista", ">=0.43")
def to_pyvista(mesh: HalfEdgeMesh) -> "pyvista.PolyData":
    """Convert a half-edge mesh to a PyVista surface.

    Parameters
    ----------
    mesh : HalfEdgeMesh
        Input mesh, 2D or 3D positions.

    Returns
    -------
    pv.PolyData
        Triangle surface with ``vertex_data`` / ``face_data`` leaves attached
        as point / cell arrays.

    Raises
    ------
    ImportError
        If pyvista is not installed.
    """
    import importlib

    pv = importlib.import_module("pyvista")

    ### PyVista requires 3D points
    points_np = mesh.vertex_positions.detach().cpu().numpy()
    if mesh.n_spatial_dims < 3:
        points_np = np.pad(
            points_np,
            ((0, 0), (0, 3 - mesh.n_spatial_dims)),
            mode="constant",
            constant_values=0.0,
        )

    triangles = mesh.triangles.cpu().numpy()
    faces_array = np.column_stack(
        [np.full(len(triangles), 3, dtype=triangles.dtype), triangles]
    ).ravel()
    pv_mesh = pv.PolyData(points_np, faces=faces_array)

    for k, v in mesh.vertex_data.items(include_nested=True, leaves_only=True):
        pv_mesh.point_data[str(k)] = v.detach().cpu().numpy()
    for k, v in mesh.face_data.items(include_nested=True, leaves_only=True):
        pv_mesh.cell_data[str(k)] = v.detach().cpu().numpy()

    return pv_mesh
