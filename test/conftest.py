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

"""Pytest configuration and shared fixtures for butterflymesh tests.

All fixtures defined here are automatically available to all test files
without explicit imports.
"""

import pytest
import torch

### Pytest Hooks ###


def pytest_configure(config):
    """Register custom pytest markers."""
    config.addinivalue_line(
        "markers", "cuda: mark test as requiring CUDA (skipped if unavailable)"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow-running (for optional exclusion)"
    )


def pytest_collection_modifyitems(config, items):
    """Skip tests marked with 'cuda' if CUDA is not available."""
    if torch.cuda.is_available():
        return  # CUDA available, run all tests

    skip_cuda = pytest.mark.skip(reason="CUDA not available")
    for item in items:
        if "cuda" in item.keywords:
            item.add_marker(skip_cuda)


### Mesh Helpers ###


def make_fan_patch(device: torch.device | str = "cpu"):
    """Open hexagonal fan of six triangles around a center vertex.

    Every outer edge is a boundary edge, so no edge of this patch has a
    complete Butterfly stencil.
    """
    from butterflymesh.halfedge import HalfEdgeMesh

    angles = torch.arange(6, dtype=torch.float64, device=device) * (torch.pi / 3)
    ring = torch.stack([torch.cos(angles), torch.sin(angles), torch.zeros_like(angles)], dim=1)
    points = torch.cat([torch.zeros((1, 3), dtype=torch.float64, device=device), ring])
    faces = torch.tensor(
        [[0, 1 + i, 1 + (i + 1) % 6] for i in range(6)], device=device
    )
    return HalfEdgeMesh.from_triangles(points, faces)


### Pytest Fixtures ###


@pytest.fixture(
    params=[
        "cpu",
        pytest.param("cuda", marks=pytest.mark.cuda),
    ]
)
def device(request):
    """Parametrize tests over all available devices (CPU, CUDA).

    CUDA tests are automatically skipped if CUDA is not available via
    the pytest_collection_modifyitems hook.
    """
    return request.param


@pytest.fixture
def octahedron_mesh(device):
    """Unit octahedron in float64."""
    from butterflymesh.primitives import octahedron

    return octahedron.load(device=device, dtype=torch.float64)


@pytest.fixture
def fan_patch(device):
    """Open six-triangle fan (all outer edges on the boundary)."""
    return make_fan_patch(device)
