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

"""Modified Butterfly subdivision on half-edge triangle meshes.

Example:
    >>> from butterflymesh import subdivide_butterfly
    >>> from butterflymesh.primitives import octahedron
    >>> refined = subdivide_butterfly(octahedron.load(), w=1 / 16, levels=2)
    >>> refined.n_faces
    128
"""

from butterflymesh.halfedge import (
    Face,
    HalfEdge,
    HalfEdgeMesh,
    HalfEdgeMeshBuilder,
    Vertex,
)
from butterflymesh.subdivision import (
    BUTTERFLY_TENSION,
    butterfly_subdivision,
    edge_rule,
    subdivide_butterfly,
    vertex_rule,
)
from butterflymesh.validation import check_mesh_invariants

__version__ = "0.1.0"
