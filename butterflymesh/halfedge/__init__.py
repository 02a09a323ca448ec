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

"""Half-edge mesh container, handles and builder.

Example:
    >>> import torch
    >>> from butterflymesh.halfedge import HalfEdgeMesh
    >>> points = torch.tensor([[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [0.0, 1.0, 0.0]])
    >>> mesh = HalfEdgeMesh.from_triangles(points, torch.tensor([[0, 1, 2]]))
    >>> mesh.face(0).vertices
    (Vertex(0), Vertex(1), Vertex(2))
"""

from butterflymesh.halfedge.builder import HalfEdgeMeshBuilder
from butterflymesh.halfedge.handles import Face, HalfEdge, Vertex
from butterflymesh.halfedge.mesh import HalfEdgeMesh
