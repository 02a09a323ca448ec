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

"""Tests for incremental half-edge mesh construction."""

import pytest
import torch

from butterflymesh.halfedge import HalfEdgeMesh, HalfEdgeMeshBuilder, Vertex


def _position(*coords):
    return torch.tensor(coords, dtype=torch.float64)


class TestDestinationIndex:
    """Tests for source-to-destination vertex deduplication."""

    def test_vertex_source_is_reused(self, octahedron_mesh):
        """Inserting the same source vertex twice yields one vertex."""
        builder = HalfEdgeMeshBuilder(HalfEdgeMesh.empty())
        source = octahedron_mesh.vertex(3)

        first = builder.insert_vertex(_position(0, 0, 0), source)
        second = builder.insert_vertex(_position(9, 9, 9), source)

        assert first == second
        assert builder.n_vertices == 1
        assert builder.find_dst_vertex_of(source) == first
        assert builder.source_of(first) == source

    def test_twins_share_a_vertex(self, octahedron_mesh):
        """A half-edge and its twin resolve to the same destination vertex."""
        builder = HalfEdgeMeshBuilder(HalfEdgeMesh.empty())
        edge = octahedron_mesh.half_edge(0)

        inserted = builder.insert_vertex(_position(1, 1, 0), edge)

        assert builder.find_dst_vertex_of(edge.twin) == inserted
        assert builder.find_dst_vertex_of(edge.next) is None

    def test_unregistered_vertices_are_distinct(self):
        """Vertices inserted without a source are never merged."""
        builder = HalfEdgeMeshBuilder(HalfEdgeMesh.empty())

        a = builder.insert_vertex(_position(0, 0, 0))
        b = builder.insert_vertex(_position(0, 0, 0))

        assert a != b
        assert builder.source_of(a) is None

    def test_sources_from_two_meshes_are_rejected(self, octahedron_mesh):
        """Equal indices of different source meshes never alias one vertex."""
        from butterflymesh.primitives import icosahedron

        other = icosahedron.load(dtype=torch.float64)
        builder = HalfEdgeMeshBuilder(HalfEdgeMesh.empty())
        builder.insert_vertex(_position(1, 0, 0), octahedron_mesh.vertex(0))

        with pytest.raises(ValueError, match="different source mesh"):
            builder.find_dst_vertex_of(other.vertex(0))
        with pytest.raises(ValueError, match="different source mesh"):
            builder.insert_vertex(_position(0, 1, 0), other.half_edge(0))
        assert builder.n_vertices == 1

    def test_first_source_mesh_is_unbound_until_registered(self, octahedron_mesh):
        """Lookups before any registration accept any mesh."""
        builder = HalfEdgeMeshBuilder(HalfEdgeMesh.empty())

        assert builder.find_dst_vertex_of(octahedron_mesh.vertex(0)) is None

    def test_bad_source_type(self):
        """Only vertex and half-edge handles can be sources."""
        builder = HalfEdgeMeshBuilder(HalfEdgeMesh.empty())

        with pytest.raises(TypeError, match="Vertex or HalfEdge"):
            builder.insert_vertex(_position(0, 0, 0), source=3)


class TestFinalize:
    """Tests for writing accumulated triangles into the mesh."""

    def test_square(self):
        """Two triangles sharing a diagonal are linked by twins."""
        mesh = HalfEdgeMesh.empty()
        builder = HalfEdgeMeshBuilder(mesh)
        v = [
            builder.insert_vertex(_position(x, y, 0))
            for x, y in [(0, 0), (1, 0), (1, 1), (0, 1)]
        ]
        assert builder.insert_triangle(v[0], v[1], v[2]) == 0
        assert builder.insert_triangle(v[0], v[2], v[3]) == 1

        result = builder.finalize()

        assert result is mesh
        assert builder.is_finalized
        assert mesh.n_vertices == 4
        assert mesh.n_faces == 2
        assert mesh.n_edges == 5
        assert mesh.n_boundary_half_edges == 4
        assert mesh.vertex_positions.dtype == torch.float64
        assert mesh.vertex_data.batch_size == torch.Size([4])
        assert mesh.face_data.batch_size == torch.Size([2])
        assert mesh.validate()["valid"]

    def test_mesh_unchanged_before_finalize(self):
        """The destination stays empty while triangles accumulate."""
        mesh = HalfEdgeMesh.empty()
        builder = HalfEdgeMeshBuilder(mesh)
        a, b, c = (builder.insert_vertex(_position(i, i * i, 0)) for i in range(3))
        builder.insert_triangle(a, b, c)

        assert mesh.n_vertices == 0
        assert mesh.n_faces == 0
        assert builder.n_triangles == 1

    def test_finalize_twice(self):
        """A finalized builder refuses further use."""
        builder = HalfEdgeMeshBuilder(HalfEdgeMesh.empty())
        builder.finalize()

        with pytest.raises(RuntimeError, match="finalized"):
            builder.finalize()
        with pytest.raises(RuntimeError, match="finalized"):
            builder.insert_vertex(_position(0, 0, 0))

    def test_inconsistent_orientation(self):
        """Triangles traversing the same directed edge are rejected."""
        builder = HalfEdgeMeshBuilder(HalfEdgeMesh.empty())
        v = [builder.insert_vertex(_position(i, i % 2, 0)) for i in range(4)]
        builder.insert_triangle(v[0], v[1], v[2])
        builder.insert_triangle(v[0], v[1], v[3])

        with pytest.raises(ValueError, match="inconsistently oriented"):
            builder.finalize()


class TestPreconditions:
    """Tests for rejected inputs."""

    def test_non_empty_destination(self, octahedron_mesh):
        """A populated mesh cannot be the destination."""
        with pytest.raises(ValueError, match="must be empty"):
            HalfEdgeMeshBuilder(octahedron_mesh)

    def test_degenerate_triangle(self):
        """A triangle with a repeated vertex is rejected."""
        builder = HalfEdgeMeshBuilder(HalfEdgeMesh.empty())
        a = builder.insert_vertex(_position(0, 0, 0))
        b = builder.insert_vertex(_position(1, 0, 0))

        with pytest.raises(ValueError, match="Degenerate"):
            builder.insert_triangle(a, b, a)

    def test_foreign_vertex(self, octahedron_mesh):
        """Vertices of another mesh cannot be used in triangles."""
        builder = HalfEdgeMeshBuilder(HalfEdgeMesh.empty())
        a = builder.insert_vertex(_position(0, 0, 0))
        b = builder.insert_vertex(_position(1, 0, 0))

        with pytest.raises(ValueError, match="not created by this builder"):
            builder.insert_triangle(a, b, octahedron_mesh.vertex(0))

    def test_out_of_range_vertex(self):
        """Handles past the inserted vertices are rejected."""
        mesh = HalfEdgeMesh.empty()
        builder = HalfEdgeMeshBuilder(mesh)
        a = builder.insert_vertex(_position(0, 0, 0))
        b = builder.insert_vertex(_position(1, 0, 0))

        with pytest.raises(ValueError, match="out of range"):
            builder.insert_triangle(a, b, Vertex(mesh, 5))

    def test_position_shape(self):
        """Positions must be vectors of one shared dimension."""
        builder = HalfEdgeMeshBuilder(HalfEdgeMesh.empty())
        with pytest.raises(ValueError, match="single coordinate vector"):
            builder.insert_vertex(torch.zeros((1, 3)))

        builder.insert_vertex(torch.zeros(3))
        with pytest.raises(ValueError, match="one spatial dimension"):
            builder.insert_vertex(torch.zeros(2))
