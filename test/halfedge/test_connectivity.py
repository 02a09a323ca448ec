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

"""Tests for vectorized half-edge connectivity construction."""

import pytest
import torch

from butterflymesh.halfedge._connectivity import build_half_edge_connectivity


class TestLayout:
    """Tests for the per-face half-edge layout."""

    def test_single_triangle(self, device):
        """A lone triangle has three boundary half-edges in a 3-cycle."""
        faces = torch.tensor([[0, 1, 2]], device=device)
        conn = build_half_edge_connectivity(faces, n_vertices=3)

        assert conn["half_edge_origin"].tolist() == [0, 1, 2]
        assert conn["half_edge_next"].tolist() == [1, 2, 0]
        assert conn["half_edge_prev"].tolist() == [2, 0, 1]
        assert conn["half_edge_twin"].tolist() == [-1, -1, -1]
        assert conn["half_edge_face"].tolist() == [0, 0, 0]
        assert conn["face_half_edge"].tolist() == [0]
        assert conn["vertex_half_edge"].tolist() == [0, 1, 2]

    def test_two_triangles_share_diagonal(self, device):
        """The shared diagonal of a quad is paired, the rest is boundary."""
        faces = torch.tensor([[0, 1, 2], [0, 2, 3]], device=device)
        conn = build_half_edge_connectivity(faces, n_vertices=4)

        # Half-edge 2 is 2 -> 0, half-edge 3 is 0 -> 2
        assert conn["half_edge_twin"].tolist() == [-1, -1, 3, 2, -1, -1]

    def test_vertex_half_edge_is_lowest_outgoing(self, device):
        """Each vertex points at its lowest-index outgoing half-edge."""
        faces = torch.tensor([[0, 1, 2], [0, 2, 3]], device=device)
        conn = build_half_edge_connectivity(faces, n_vertices=5)

        # Vertex 0 starts half-edges 0 and 3; vertex 4 is isolated
        assert conn["vertex_half_edge"].tolist() == [0, 1, 2, 5, -1]

    def test_empty_faces(self, device):
        """No faces yields empty half-edge arenas."""
        faces = torch.zeros((0, 3), dtype=torch.long, device=device)
        conn = build_half_edge_connectivity(faces, n_vertices=2)

        assert len(conn["half_edge_origin"]) == 0
        assert len(conn["face_half_edge"]) == 0
        assert conn["vertex_half_edge"].tolist() == [-1, -1]


class TestTwinPairing:
    """Tests for twin pairing on closed surfaces."""

    def test_tetrahedron_is_fully_paired(self, device):
        """Every half-edge of a closed tetrahedron has a reciprocal twin."""
        faces = torch.tensor(
            [[0, 1, 2], [0, 3, 1], [0, 2, 3], [1, 3, 2]], device=device
        )
        conn = build_half_edge_connectivity(faces, n_vertices=4)
        twin = conn["half_edge_twin"]
        origin = conn["half_edge_origin"]
        destination = origin[conn["half_edge_next"]]

        assert (twin >= 0).all()
        assert torch.equal(twin[twin], torch.arange(12, device=device))
        assert torch.equal(origin[twin], destination)


class TestErrors:
    """Tests for rejected inputs."""

    def test_wrong_shape(self):
        """Quads are rejected."""
        with pytest.raises(ValueError, match="shape"):
            build_half_edge_connectivity(torch.tensor([[0, 1, 2, 3]]), n_vertices=4)

    def test_out_of_range(self):
        """Indices past n_vertices are rejected."""
        with pytest.raises(ValueError, match="range"):
            build_half_edge_connectivity(torch.tensor([[0, 1, 7]]), n_vertices=3)

    def test_inconsistent_orientation(self):
        """Two faces traversing the same directed edge are rejected."""
        faces = torch.tensor([[0, 1, 2], [0, 1, 3]])
        with pytest.raises(ValueError, match="inconsistently oriented"):
            build_half_edge_connectivity(faces, n_vertices=4)
