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
Scene flattening.

Walks a :class:`SceneNode` tree depth-first, pre-order, and turns every leaf
into a :class:`LeafRecord` carrying its world transform.  World transforms are
composed during the walk from each node's local transform; the tree itself is
never written to.

Leaves whose geometry can't be read are still returned.  A missing or empty
position stream gives an empty record; malformed arrays give an empty record
with ``problem`` set.  Deciding what to do with them is up to the caller.
"""

from typing import List, Optional, Tuple

import numpy as np

from ..common.errors import InvalidGeometryError
from ..common.logging import debug
from .types import LeafRecord, Mesh, SceneNode, resolve_color

__all__ = ["flatten_scene", "read_geometry"]


def _empty_geometry() -> Tuple[np.ndarray, np.ndarray]:
    return np.zeros((0, 3), dtype=np.float64), np.zeros((0, 3), dtype=np.int64)


def read_geometry(mesh: Mesh) -> Tuple[np.ndarray, np.ndarray]:
    """
    Copy a mesh's positions and triangles into ``(N, 3)`` arrays.

    Non-indexed meshes get triangles ``(0, 1, 2), (3, 4, 5), ...``.

    :return: ``(vertices, triangles)``; both empty when positions are missing.
    :raises InvalidGeometryError: If an array can't be split into triplets.
    """
    if mesh.positions is None:
        return _empty_geometry()

    try:
        flat_positions = np.array(mesh.positions, dtype=np.float64).reshape(-1)
    except (TypeError, ValueError) as e:
        raise InvalidGeometryError(f"Unreadable positions: {e}") from e
    if flat_positions.size == 0:
        return _empty_geometry()
    if flat_positions.size % 3 != 0:
        raise InvalidGeometryError(
            f"Position stream has {flat_positions.size} values, not a multiple of three"
        )
    vertices = flat_positions.reshape(-1, 3)

    if mesh.indices is None:
        if vertices.shape[0] % 3 != 0:
            raise InvalidGeometryError(
                f"Non-indexed mesh has {vertices.shape[0]} vertices, not a multiple of three"
            )
        triangles = np.arange(vertices.shape[0], dtype=np.int64).reshape(-1, 3)
        return vertices, triangles

    try:
        flat_indices = np.array(mesh.indices).reshape(-1)
    except (TypeError, ValueError) as e:
        raise InvalidGeometryError(f"Unreadable indices: {e}") from e
    if flat_indices.size and not np.issubdtype(flat_indices.dtype, np.integer):
        raise InvalidGeometryError(f"Indices must be integers, got {flat_indices.dtype}")
    if flat_indices.size % 3 != 0:
        raise InvalidGeometryError(
            f"Index stream has {flat_indices.size} values, not a multiple of three"
        )
    triangles = flat_indices.astype(np.int64).reshape(-1, 3)
    return vertices, triangles


def flatten_scene(root: SceneNode) -> List[LeafRecord]:
    """
    Collect every leaf below ``root`` (inclusive) with its world transform.

    Children are visited in their stored order.  A node that also holds a mesh
    is emitted before its children.  Leaves without a name are called
    ``Mesh_<n>``, counting leaves from 1.

    :param root: The scene root.
    :return: Leaf records in depth-first pre-order.
    :raises InvalidGeometryError: If a node is reached twice, i.e. the scene is
        not a tree.
    """
    result: List[LeafRecord] = []
    seen: set = set()

    def _walk(node: SceneNode, parent_matrix: Optional[np.ndarray]) -> None:
        if id(node) in seen:
            raise InvalidGeometryError(
                f"Scene node '{node.name}' is reachable more than once; the scene must be a tree"
            )
        seen.add(id(node))

        local = node.transform.to_matrix()
        world = local if parent_matrix is None else parent_matrix @ local

        if node.mesh is not None:
            result.append(_make_record(node, world, len(result) + 1))

        for child in node.children:
            _walk(child, world)

    _walk(root, None)
    debug(f"Flattened scene into {len(result)} leaves")
    return result


def _make_record(node: SceneNode, world: np.ndarray, ordinal: int) -> LeafRecord:
    mesh = node.mesh
    name = mesh.name or node.name or f"Mesh_{ordinal}"
    color = resolve_color(mesh.material)
    problem = None

    try:
        vertices, triangles = read_geometry(mesh)
    except InvalidGeometryError as e:
        vertices, triangles = _empty_geometry()
        problem = str(e)

    if problem is None and vertices.shape[0] == 0:
        debug(f"Leaf '{name}' has no vertex positions")

    return LeafRecord(
        vertices_local=vertices,
        triangles=triangles,
        world_matrix=world.copy(),
        color=color,
        name=name,
        problem=problem,
    )
