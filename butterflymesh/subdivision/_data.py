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

"""Data transfer from a coarse mesh to its refinement.

Vertex data follows the source element that generated each refined vertex;
face data is inherited by every child triangle.
"""

import torch
from tensordict import TensorDict


def transfer_vertex_data(
    vertex_data: TensorDict,
    source_endpoints: torch.Tensor,
) -> TensorDict:
    """Carry vertex data onto refined vertices.

    Parameters
    ----------
    vertex_data : TensorDict
        Coarse vertex data, batch_size=(n_coarse_vertices,).
    source_endpoints : torch.Tensor
        Shape (n_refined_vertices, 2). For a vertex generated from a coarse
        vertex ``v`` the row is ``[v, v]``; for one generated from a coarse
        edge it holds the edge's two endpoints.

    Returns
    -------
    TensorDict
        Refined vertex data, batch_size=(n_refined_vertices,). Floating and
        complex fields are averaged over the two endpoints (an exact copy for
        vertex-generated rows). Other dtypes are copied for vertex-generated
        rows and zero-filled for edge-generated rows.

    Examples
    --------
        >>> import torch
        >>> from tensordict import TensorDict
        >>> vertex_data = TensorDict({"temperature": torch.tensor([100., 200.])}, batch_size=[2])
        >>> endpoints = torch.tensor([[0, 0], [1, 1], [0, 1]])
        >>> transfer_vertex_data(vertex_data, endpoints)["temperature"].tolist()
        [100.0, 200.0, 150.0]
    """
    n_refined = len(source_endpoints)
    if len(vertex_data.keys()) == 0:
        return TensorDict(
            {},
            batch_size=torch.Size([n_refined]),
            device=source_endpoints.device,
        )

    from_vertex = source_endpoints[:, 0] == source_endpoints[:, 1]

    def transfer_tensor(tensor: torch.Tensor) -> torch.Tensor:
        if tensor.dtype.is_floating_point or tensor.dtype.is_complex:
            return tensor[source_endpoints].mean(dim=1)
        copied = tensor[source_endpoints[:, 0]]
        mask = from_vertex.view(-1, *([1] * (copied.ndim - 1)))
        return torch.where(mask, copied, torch.zeros_like(copied))

    return vertex_data.apply(
        transfer_tensor,
        batch_size=torch.Size([n_refined]),
    )


def propagate_face_data_to_children(
    face_data: TensorDict,
    parent_indices: torch.Tensor,
) -> TensorDict:
    """Propagate face data from parent faces to child faces.

    Parameters
    ----------
    face_data : TensorDict
        Coarse face data, batch_size=(n_parent_faces,).
    parent_indices : torch.Tensor
        Parent face index for each child, shape (n_children,).

    Returns
    -------
    TensorDict
        Child face data, batch_size=(n_children,).
    """
    n_children = len(parent_indices)
    if len(face_data.keys()) == 0:
        return TensorDict(
            {},
            batch_size=torch.Size([n_children]),
            device=parent_indices.device,
        )

    return face_data.apply(
        lambda tensor: tensor[parent_indices],
        batch_size=torch.Size([n_children]),
    )
