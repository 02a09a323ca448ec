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

"""Tests for half-edge invariant validation."""

import pytest
import torch

from butterflymesh.halfedge import HalfEdgeMesh
from butterflymesh.validation import check_mesh_invariants, validate_halfedge_mesh


class TestValidMeshes:
    """Tests that well-formed meshes pass."""

    def test_octahedron(self, octahedron_mesh):
        """A closed octahedron passes every check."""
        report = validate_halfedge_mesh(octahedron_mesh, check_closed=True)

        assert report["valid"]
        assert report["n_broken_twins"] == 0
        assert report["n_boundary_half_edges"] == 0
        check_mesh_invariants(octahedron_mesh, require_closed=True)

    def test_open_patch(self, fan_patch):
        """Open meshes are valid unless closure is required."""
        assert validate_halfedge_mesh(fan_patch)["valid"]

        report = validate_halfedge_mesh(fan_patch, check_closed=True)
        assert not report["valid"]
        assert report["n_boundary_half_edges"] == 6

    def test_empty_mesh(self):
        """The empty mesh is trivially valid."""
        assert validate_halfedge_mesh(HalfEdgeMesh.empty())["valid"]

    def test_isolated_vertex(self):
        """Isolated vertices are reported unless the check is disabled."""
        mesh = HalfEdgeMesh.from_triangles(torch.rand(4, 3), torch.tensor([[0, 1, 2]]))

        report = validate_halfedge_mesh(mesh)
        assert not report["valid"]
        assert report["isolated_vertices_indices"].tolist() == [3]
        assert validate_halfedge_mesh(mesh, check_isolated_vertices=False)["valid"]


class TestCorruptedMeshes:
    """Tests that corrupted arenas are detected."""

    def test_broken_twin(self, octahedron_mesh):
        """A twin pointing at the wrong half-edge is reported."""
        octahedron_mesh.half_edge_twin[0] = 1

        report = validate_halfedge_mesh(octahedron_mesh)

        assert not report["valid"]
        assert 0 in report["broken_twins_indices"].tolist()

    def test_broken_next(self, octahedron_mesh):
        """Breaking next without prev is reported."""
        octahedron_mesh.half_edge_next[0] = 2

        report = validate_halfedge_mesh(octahedron_mesh)

        assert not report["valid"]
        assert report["n_broken_next_prev"] > 0

    def test_broken_prev(self, octahedron_mesh):
        """A prev pointer into another face is reported."""
        octahedron_mesh.half_edge_prev[0] = 5

        report = validate_halfedge_mesh(octahedron_mesh)

        assert not report["valid"]
        assert 0 in report["broken_next_prev_indices"].tolist()

    def test_broken_face_half_edge(self, octahedron_mesh):
        """A face pointing at another face's half-edge is reported."""
        octahedron_mesh.face_half_edge[0] = 3

        report = validate_halfedge_mesh(octahedron_mesh)

        assert report["broken_face_half_edges_indices"].tolist() == [0]

    def test_broken_vertex_half_edge(self, octahedron_mesh):
        """A vertex pointing at a half-edge it does not start is reported."""
        octahedron_mesh.vertex_half_edge[0] = 1

        report = validate_halfedge_mesh(octahedron_mesh)

        assert report["broken_vertex_half_edges_indices"].tolist() == [0]

    def test_out_of_bounds(self, octahedron_mesh):
        """Out-of-range references stop validation early."""
        octahedron_mesh.half_edge_origin[0] = 99

        report = validate_halfedge_mesh(octahedron_mesh)

        assert not report["valid"]
        assert report["out_of_bounds_half_edges_indices"].tolist() == [0]
        assert "n_broken_twins" not in report

    def test_raise_on_error(self, octahedron_mesh):
        """raise_on_error turns the first failure into a ValueError."""
        octahedron_mesh.half_edge_twin[0] = 1

        with pytest.raises(ValueError, match="twin"):
            validate_halfedge_mesh(octahedron_mesh, raise_on_error=True)
        with pytest.raises(ValueError):
            check_mesh_invariants(octahedron_mesh)

    def test_require_closed(self, fan_patch):
        """check_mesh_invariants can require a closed surface."""
        check_mesh_invariants(fan_patch)

        with pytest.raises(ValueError, match="not closed"):
            check_mesh_invariants(fan_patch, require_closed=True)
