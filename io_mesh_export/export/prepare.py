# Scene export core: flatten extruded-shape scenes into STL, OBJ, GLB and 3MF.
# Copyright (C) 2020 Ghostkeeper
# Copyright (C) 2025 Jack (modernization for Blender 4.2+)
# This program is free software; you can redistribute it and/or modify it under the terms of the GNU General Public
# License as published by the Free Software Foundation; either version 2 of the License, or (at your option) any later
# version.
# This program is distributed in the hope that it will be useful, but WITHOUT ANY WARRANTY; without even the implied
# warranty of MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the GNU General Public License for more details.
# You should have received a copy of the GNU General Public License along with this program; if not, write to the Free
# Software Foundation, Inc., 51 Franklin Street, Fifth Floor, Boston, MA 02110-1301 USA.

# <pep8 compliant>

"""
Prepare stage shared by every format.

Flattens the scene, drops leaves that can't be exported, moves the rest into
world space and registers their colours.  The serializers only ever see a
:class:`PreparedScene`.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import numpy as np

from ..common.colors import RGB8, hex_to_rgb8
from ..common.constants import MAX_UINT32
from ..common.errors import (
    EmptyInputError,
    InvalidGeometryError,
    SerializationError,
    UnsupportedMaterialError,
)
from ..common.logging import debug
from ..scene.flatten import flatten_scene
from ..scene.materials import Material, MaterialRegistry
from ..scene.transform import scale_matrix, transform_vertices
from ..scene.types import Colorless, HasColor, LeafRecord, SceneNode
from .context import ExportContext

__all__ = ["PreparedLeaf", "PreparedScene", "prepare_scene", "validate_leaf"]


@dataclass
class PreparedLeaf:
    """A leaf in world space, bound to its shared material."""

    vertices: np.ndarray  # (N, 3) float64, owned
    triangles: np.ndarray  # (M, 3) int64, indices into vertices
    material: Material
    name: str


@dataclass
class PreparedScene:
    leaves: List[PreparedLeaf] = field(default_factory=list)
    registry: MaterialRegistry = field(default_factory=MaterialRegistry)

    @property
    def num_vertices(self) -> int:
        return sum(leaf.vertices.shape[0] for leaf in self.leaves)

    @property
    def num_triangles(self) -> int:
        return sum(leaf.triangles.shape[0] for leaf in self.leaves)

    def merged(self) -> Tuple[np.ndarray, np.ndarray]:
        """
        Concatenate all leaves into one vertex list and one triangle list.

        Each leaf's triangle indices are shifted by the number of vertices
        that come before it.
        """
        vertex_arrays = []
        triangle_arrays = []
        offset = 0
        for leaf in self.leaves:
            vertex_arrays.append(leaf.vertices)
            triangle_arrays.append(leaf.triangles + offset)
            offset += leaf.vertices.shape[0]
        if not vertex_arrays:
            return np.zeros((0, 3), dtype=np.float64), np.zeros((0, 3), dtype=np.int64)
        return np.concatenate(vertex_arrays), np.concatenate(triangle_arrays)


def validate_leaf(record: LeafRecord) -> None:
    """
    Check that a flattened leaf can be written.

    :raises InvalidGeometryError: Describing the first problem found.
    """
    if record.problem is not None:
        raise InvalidGeometryError(record.problem)
    if record.triangle_count == 0:
        raise InvalidGeometryError("No triangles")
    if not np.all(np.isfinite(record.vertices_local)):
        raise InvalidGeometryError("Vertex positions contain NaN or infinity")
    lowest = int(record.triangles.min())
    highest = int(record.triangles.max())
    if lowest < 0 or highest >= record.vertex_count:
        raise InvalidGeometryError(
            f"Triangle index out of range [0, {record.vertex_count}): found {lowest}..{highest}"
        )


def _leaf_color(record: LeafRecord) -> Optional[RGB8]:
    """The leaf's own colour, or None if it has no material at all.

    :raises UnsupportedMaterialError: If a material is set but has no usable colour.
    """
    if isinstance(record.color, HasColor):
        return record.color.rgb
    if isinstance(record.color, Colorless) and not record.color.assigned:
        return None
    raise UnsupportedMaterialError(record.color.reason)


def prepare_scene(scene: SceneNode, ctx: ExportContext) -> PreparedScene:
    """
    Turn a scene tree into world-space leaves with registered materials.

    Leaves with unreadable geometry are skipped and reported as warnings on
    ``ctx``.  Leaves whose material has no usable colour get the default
    colour.  Leaves without vertices are dropped silently.

    :raises InvalidGeometryError: If the scene is not a tree.
    :raises EmptyInputError: If no leaf is left to export.
    :raises SerializationError: If the totals don't fit in 32-bit counts.
    """
    options = ctx.options
    default_color = hex_to_rgb8(options.default_color)
    global_matrix = scale_matrix(options.global_scale)
    prepared = PreparedScene()

    for record in flatten_scene(scene):
        if record.problem is None and record.is_empty:
            debug(f"Skipping empty leaf '{record.name}'")
            continue
        try:
            validate_leaf(record)
        except InvalidGeometryError as e:
            ctx.safe_report({"WARNING"}, f"Skipping leaf '{record.name}': {e}")
            continue

        try:
            color = _leaf_color(record)
        except UnsupportedMaterialError as e:
            ctx.safe_report({"WARNING"}, f"Leaf '{record.name}' material unsupported ({e}), using default colour")
            color = None
        if color is None:
            color = default_color

        world = global_matrix @ record.world_matrix
        material_id = prepared.registry.register(color)
        prepared.leaves.append(
            PreparedLeaf(
                vertices=transform_vertices(record.vertices_local, world),
                triangles=record.triangles.copy(),
                material=prepared.registry.material(material_id),
                name=record.name,
            )
        )

    if not prepared.leaves:
        raise EmptyInputError("The scene contains no exportable geometry")

    if prepared.num_vertices > MAX_UINT32 or prepared.num_triangles > MAX_UINT32:
        raise SerializationError(
            f"Scene too large: {prepared.num_vertices} vertices, {prepared.num_triangles} triangles"
        )

    debug(
        f"Prepared {len(prepared.leaves)} leaves, {prepared.num_vertices} vertices, "
        f"{len(prepared.registry)} materials"
    )
    return prepared
