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

"""Modified Butterfly subdivision for closed half-edge triangle meshes.

The scheme is interpolating: coarse vertices keep their positions and one new
vertex per coarse edge is placed by an 8-point stencil. Each triangle is split
into 4 children, so one level maps (V, E, F) to (V + E, 2E + 3F, 4F).

Example:
    >>> from butterflymesh.primitives import octahedron
    >>> from butterflymesh.subdivision import subdivide_butterfly
    >>> mesh = octahedron.load()
    >>> refined = subdivide_butterfly(mesh, w=1 / 16)
    >>> assert refined.n_faces == mesh.n_faces * 4
"""

from butterflymesh.subdivision.butterfly import (
    butterfly_subdivision,
    subdivide_butterfly,
)
from butterflymesh.subdivision.rules import (
    BUTTERFLY_TENSION,
    butterfly_stencil,
    butterfly_stencil_weights,
    compute_butterfly_edge_points,
    edge_rule,
    vertex_rule,
)
