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

from collections.abc import Iterator
from typing import TYPE_CHECKING, Any, Self

import torch
from tensordict import TensorDict, tensorclass

from butterflymesh.halfedge._connectivity import build_half_edge_connectivity
from butterflymesh.halfedge.handles import Face, HalfEdge, Vertex
from butterflymesh.utilities.mesh_repr import format_halfedge_mesh_repr

_INDEX_FIELDS = (
    "vertex_half_edge",
    "half_edge_origin",
    "half_edge_next",
    "half_edge_prev",
    "half_edge_twin",
    "half_edge_face",
    "face_half_edge",
)


def _as_tensordict(
    data: TensorDict | dict[str, torch.Tensor] | None,
    n: int,
    device: torch.device,
) -> TensorDict:
    if isinstance(data, TensorDict):
        data.batch_size = torch.Size([n])  # Ensure shape-compatible
        return data
    return TensorDict(
        {} if data is None else dict(data),
        batch_size=torch.Size([n]),
        device=device,
    )


@tensorclass(tensor_only=True)
class HalfEdgeMesh:
    r"""A triangle mesh stored as a half-edge (doubly-connected edge list) arena.

    Every element is an integer index into flat tensors, so adjacency queries
    are single lookups rather than searches:

    ==================  ===============  ======================================
    Field               Shape            Meaning
    ==================  ===============  ======================================
    vertex_positions    (N_v, D_s)       Vertex coordinates
    vertex_half_edge    (N_v,)           One outgoing half-edge (``-1``: none)
    half_edge_origin    (N_h,)           Start vertex
    half_edge_next      (N_h,)           Next half-edge around the same face
    half_edge_prev      (N_h,)           Previous half-edge around the face
    half_edge_twin      (N_h,)           Opposing half-edge (``-1``: boundary)
    half_edge_face      (N_h,)           Owning face
    face_half_edge      (N_f,)           One half-edge of the face's loop
    ==================  ===============  ======================================

    Per-element field data can be attached through ``vertex_data`` and
    ``face_data`` (``TensorDict`` containers with batch sizes ``N_v`` and
    ``N_f``). All tensors move together under ``.to(device)``.

    Navigation is usually done through handles::

        >>> from butterflymesh.primitives import octahedron
        >>> mesh = octahedron.load()
        >>> edge = mesh.face(0).half_edge
        >>> edge.next.twin.prev.start
        Vertex(1)

    :meth:`HalfEdgeMesh.empty` creates a mesh without elements, the expected
    destination for :class:`~butterflymesh.halfedge.builder.HalfEdgeMeshBuilder`.

    Parameters
    ----------
    vertex_positions : torch.Tensor
        Vertex coordinates with shape :math:`(N_v, D_s)`. Must be floating-point.
    vertex_half_edge, half_edge_origin, half_edge_next, half_edge_prev,
    half_edge_twin, half_edge_face, face_half_edge : torch.Tensor
        Integer adjacency arenas as listed above.
    vertex_data : TensorDict or dict[str, torch.Tensor], optional
        Per-vertex data. Dicts are automatically converted to TensorDict.
    face_data : TensorDict or dict[str, torch.Tensor], optional
        Per-face data. Dicts are automatically converted to TensorDict.

    Raises
    ------
    ValueError
        If any arena has the wrong number of dimensions or a length that is
        inconsistent with the others.
    TypeError
        If ``vertex_positions`` is not floating-point or an arena is not integer.
    """

    vertex_positions: torch.Tensor  # shape: (n_vertices, n_spatial_dims)
    vertex_half_edge: torch.Tensor  # shape: (n_vertices,)
    half_edge_origin: torch.Tensor  # shape: (n_half_edges,)
    half_edge_next: torch.Tensor  # shape: (n_half_edges,)
    half_edge_prev: torch.Tensor  # shape: (n_half_edges,)
    half_edge_twin: torch.Tensor  # shape: (n_half_edges,)
    half_edge_face: torch.Tensor  # shape: (n_half_edges,)
    face_half_edge: torch.Tensor  # shape: (n_faces,)
    vertex_data: TensorDict
    face_data: TensorDict

    def __init__(
        self,
        vertex_positions: torch.Tensor,
        vertex_half_edge: torch.Tensor,
        half_edge_origin: torch.Tensor,
        half_edge_next: torch.Tensor,
        half_edge_prev: torch.Tensor,
        half_edge_twin: torch.Tensor,
        half_edge_face: torch.Tensor,
        face_half_edge: torch.Tensor,
        vertex_data: TensorDict | dict[str, torch.Tensor] | None = None,
        face_data: TensorDict | dict[str, torch.Tensor] | None = None,
    ) -> None:
        ### Assign tensorclass fields
        self.vertex_positions = vertex_positions
        self.vertex_half_edge = vertex_half_edge
        self.half_edge_origin = half_edge_origin
        self.half_edge_next = half_edge_next
        self.half_edge_prev = half_edge_prev
        self.half_edge_twin = half_edge_twin
        self.half_edge_face = half_edge_face
        self.face_half_edge = face_half_edge
        self.vertex_data = _as_tensordict(
            vertex_data, self.n_vertices, self.vertex_positions.device
        )
        self.face_data = _as_tensordict(
            face_data, self.n_faces, self.vertex_positions.device
        )

        ### Validate shapes and dtypes
        if not torch.compiler.is_compiling():
            if self.vertex_positions.ndim != 2:
                raise ValueError(
                    f"`vertex_positions` must have shape (n_vertices, n_spatial_dims), "
                    f"but got {self.vertex_positions.shape=}."
                )
            if not self.vertex_positions.dtype.is_floating_point:
                raise TypeError(
                    f"`vertex_positions` must be floating-point, "
                    f"but got {self.vertex_positions.dtype=}."
                )
            for name in _INDEX_FIELDS:
                tensor = getattr(self, name)
                if tensor.ndim != 1:
                    raise ValueError(
                        f"`{name}` must be one-dimensional, but got {tensor.shape=}."
                    )
                if tensor.dtype.is_floating_point or tensor.dtype == torch.bool:
                    raise TypeError(
                        f"`{name}` must have an integer dtype, but got {tensor.dtype=}."
                    )
            if len(self.vertex_half_edge) != self.n_vertices:
                raise ValueError(
                    f"`vertex_half_edge` must have one entry per vertex, but got "
                    f"{len(self.vertex_half_edge)=} and {self.n_vertices=}."
                )
            for name in _INDEX_FIELDS[2:6]:
                if len(getattr(self, name)) != self.n_half_edges:
                    raise ValueError(
                        f"`{name}` must have one entry per half-edge, but got "
                        f"{len(getattr(self, name))=} and {self.n_half_edges=}."
                    )

    if TYPE_CHECKING:
        # Type stub for the `to` method dynamically added by @tensorclass.
        def to(self, *args: Any, **kwargs: Any) -> Self:
            """Move the mesh and all attached data to a device and/or dtype."""
            ...

    @classmethod
    def empty(
        cls,
        n_spatial_dims: int = 3,
        device: torch.device | str = "cpu",
        dtype: torch.dtype = torch.float32,
    ) -> "HalfEdgeMesh":
        """Create a mesh with no vertices, half-edges or faces.

        Parameters
        ----------
        n_spatial_dims : int
            Width of the (zero-row) position tensor.
        device : torch.device or str
            Device of every arena.
        dtype : torch.dtype
            Floating-point dtype of the vertex positions.

        Examples
        --------
        >>> mesh = HalfEdgeMesh.empty()
        >>> mesh.n_vertices, mesh.n_faces, mesh.vertex_positions.shape
        (0, 0, torch.Size([0, 3]))
        """
        no_indices = torch.zeros((0,), dtype=torch.long, device=device)
        return cls(
            vertex_positions=torch.zeros(
                (0, n_spatial_dims), dtype=dtype, device=device
            ),
            vertex_half_edge=no_indices,
            half_edge_origin=no_indices.clone(),
            half_edge_next=no_indices.clone(),
            half_edge_prev=no_indices.clone(),
            half_edge_twin=no_indices.clone(),
            half_edge_face=no_indices.clone(),
            face_half_edge=no_indices.clone(),
        )

    @classmethod
    def from_triangles(
        cls,
        points: torch.Tensor,
        faces: torch.Tensor,
        vertex_data: TensorDict | dict[str, torch.Tensor] | None = None,
        face_data: TensorDict | dict[str, torch.Tensor] | None = None,
    ) -> "HalfEdgeMesh":
        """Build a half-edge mesh from a triangle soup with shared vertices.

        Parameters
        ----------
        points : torch.Tensor
            Vertex coordinates, shape (n_vertices, n_spatial_dims).
        faces : torch.Tensor
            Triangle connectivity, shape (n_faces, 3). Faces must be
            consistently oriented.
        vertex_data, face_data : TensorDict or dict, optional
            Data to attach to vertices and faces.

        Returns
        -------
        HalfEdgeMesh
            Mesh whose face ``k`` is ``faces[k]`` with half-edge ``3k`` running
            from ``faces[k, 0]`` to ``faces[k, 1]``.

        Examples
        --------
        >>> points = torch.tensor([[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [0.0, 1.0, 0.0]])
        >>> mesh = HalfEdgeMesh.from_triangles(points, torch.tensor([[0, 1, 2]]))
        >>> mesh.n_faces, mesh.n_edges, mesh.is_closed
        (1, 3, False)
        """
        connectivity = build_half_edge_connectivity(
            faces.to(points.device), n_vertices=points.shape[0]
        )
        return cls(
            vertex_positions=points,
            vertex_data=vertex_data,
            face_data=face_data,
            **connectivity,
        )

    @property
    def n_vertices(self) -> int:
        return self.vertex_positions.shape[0]

    @property
    def n_spatial_dims(self) -> int:
        return self.vertex_positions.shape[-1]

    @property
    def n_half_edges(self) -> int:
        return self.half_edge_origin.shape[0]

    @property
    def n_faces(self) -> int:
        return self.face_half_edge.shape[0]

    @property
    def n_boundary_half_edges(self) -> int:
        return int((self.half_edge_twin < 0).sum())

    @property
    def n_edges(self) -> int:
        """Number of undirected edges (twin pairs plus boundary half-edges)."""
        n_boundary = self.n_boundary_half_edges
        return n_boundary + (self.n_half_edges - n_boundary) // 2

    @property
    def is_closed(self) -> bool:
        """True if every half-edge has a twin (no boundary)."""
        return self.n_faces > 0 and self.n_boundary_half_edges == 0

    @property
    def euler_characteristic(self) -> int:
        return self.n_vertices - self.n_edges + self.n_faces

    @property
    def half_edge_destination(self) -> torch.Tensor:
        """End vertex of every half-edge, shape (n_half_edges,)."""
        return self.half_edge_origin[self.half_edge_next]

    @property
    def triangles(self) -> torch.Tensor:
        """Triangle connectivity, shape (n_faces, 3).

        Row ``f`` lists ``face.half_edge.start``, ``.end`` and ``.next.end``.
        """
        first = self.face_half_edge
        second = self.half_edge_next[first]
        third = self.half_edge_next[second]
        return torch.stack(
            [
                self.half_edge_origin[first],
                self.half_edge_origin[second],
                self.half_edge_origin[third],
            ],
            dim=1,
        )

    def vertex(self, index: int) -> Vertex:
        return Vertex(self, index)

    def half_edge(self, index: int) -> HalfEdge:
        return HalfEdge(self, index)

    def face(self, index: int) -> Face:
        return Face(self, index)

    def iter_vertices(self) -> Iterator[Vertex]:
        return (Vertex(self, i) for i in range(self.n_vertices))

    def iter_half_edges(self) -> Iterator[HalfEdge]:
        return (HalfEdge(self, i) for i in range(self.n_half_edges))

    def iter_faces(self) -> Iterator[Face]:
        """Iterate faces in index order."""
        return (Face(self, i) for i in range(self.n_faces))

    def validate(self, **kwargs):
        """Run :func:`~butterflymesh.validation.validate_halfedge_mesh` on this mesh."""
        from butterflymesh.validation import validate_halfedge_mesh

        return validate_halfedge_mesh(self, **kwargs)

    def subdivide(
        self,
        levels: int = 1,
        w: float | None = None,
    ) -> "HalfEdgeMesh":
        """Refine the mesh with the modified Butterfly scheme.

        Parameters
        ----------
        levels : int, optional
            Number of subdivision passes; each pass quadruples the face count.
        w : float, optional
            Stencil tension. Defaults to
            :data:`~butterflymesh.subdivision.BUTTERFLY_TENSION` (1/16).

        Returns
        -------
        HalfEdgeMesh
            The refined mesh. The original mesh is not modified.
        """
        from butterflymesh.subdivision import BUTTERFLY_TENSION, subdivide_butterfly

        return subdivide_butterfly(
            self,
            w=BUTTERFLY_TENSION if w is None else w,
            levels=levels,
        )


### Override the tensorclass __repr__ with custom formatting
# Note: Must be done after class definition because @tensorclass overrides __repr__
# even when defined inside the class body
def _halfedge_mesh_repr(self) -> str:
    return format_halfedge_mesh_repr(self)


HalfEdgeMesh.__repr__ = _halfedge_mesh_repr  # type: ignore
