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
"""Text summaries of half-edge meshes for ``repr`` and logging."""

import torch
from tensordict import TensorDict


def format_halfedge_mesh_repr(mesh) -> str:
    """Summarize a HalfEdgeMesh as a header line plus one line per data container.

    Examples
    --------
    >>> from butterflymesh.primitives import octahedron
    >>> print(format_halfedge_mesh_repr(octahedron.load()))
    HalfEdgeMesh(spatial_dim=3, n_vertices=6, n_edges=12, n_faces=8, closed=True)
        vertex_data: {}
        face_data  : {}
    """
    header = (
        f"{type(mesh).__name__}(spatial_dim={mesh.n_spatial_dims}, "
        f"n_vertices={mesh.n_vertices}, n_edges={mesh.n_edges}, "
        f"n_faces={mesh.n_faces}, closed={mesh.is_closed}"
    )
    # The tensorclass device stays None until .to(device) is called
    if mesh.device is not None:
        header += f", device={mesh.device}"
    header += ")"

    return "\n".join(
        [
            header,
            f"    vertex_data: {_format_tensordict_fields(mesh.vertex_data)}",
            f"    face_data  : {_format_tensordict_fields(mesh.face_data)}",
        ]
    )


def _format_tensordict_fields(td: TensorDict) -> str:
    """``{key: per-element shape}`` for every entry, recursing into nested TensorDicts."""
    n_batch_dims = td.batch_dims
    entries = []
    for key in sorted(td.keys()):
        value = td.get(key)
        if isinstance(value, TensorDict):
            entries.append(f"{key}: {_format_tensordict_fields(value)}")
        elif isinstance(value, torch.Tensor):
            entries.append(f"{key}: {tuple(value.shape[n_batch_dims:])}")
        else:
            entries.append(f"{key}: <{type(value).__name__}>")
    return "{" + ", ".join(entries) + "}"
