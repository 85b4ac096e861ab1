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

"""
Data types for the scene side of the exporter.

The input is a tree of :class:`SceneNode` objects.  Group nodes carry
``children``; leaf nodes carry one :class:`Mesh`.  Flattening the tree
produces :class:`LeafRecord` values in world space order.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple, Union

import numpy as np

from ..common.colors import RGB8, to_rgb8

__all__ = [
    "Transform",
    "Mesh",
    "SceneNode",
    "HasColor",
    "Colorless",
    "ColorCapability",
    "resolve_color",
    "LeafRecord",
]

Vector3 = Tuple[float, float, float]


@dataclass
class Transform:
    """A node's local transform.

    Composes as ``T · R · S``.  ``rotation`` holds Euler angles in radians,
    applied as the matrix ``Rx · Ry · Rz``.  If ``matrix`` is given it wins
    over the other three fields.
    """

    translation: Vector3 = (0.0, 0.0, 0.0)
    rotation: Vector3 = (0.0, 0.0, 0.0)
    scale: Vector3 = (1.0, 1.0, 1.0)
    matrix: Optional[Sequence[Sequence[float]]] = None

    def to_matrix(self) -> np.ndarray:
        """Return a new 4×4 float64 affine matrix."""
        if self.matrix is not None:
            result = np.array(self.matrix, dtype=np.float64)
            if result.shape != (4, 4):
                raise ValueError(f"Transform matrix must be 4x4, got {result.shape}")
            return result

        rx, ry, rz = (float(angle) for angle in self.rotation)
        cx, sx = math.cos(rx), math.sin(rx)
        cy, sy = math.cos(ry), math.sin(ry)
        cz, sz = math.cos(rz), math.sin(rz)
        rot_x = np.array([[1, 0, 0], [0, cx, -sx], [0, sx, cx]], dtype=np.float64)
        rot_y = np.array([[cy, 0, sy], [0, 1, 0], [-sy, 0, cy]], dtype=np.float64)
        rot_z = np.array([[cz, -sz, 0], [sz, cz, 0], [0, 0, 1]], dtype=np.float64)

        result = np.identity(4)
        result[:3, :3] = rot_x @ rot_y @ rot_z @ np.diag([float(s) for s in self.scale])
        result[:3, 3] = [float(t) for t in self.translation]
        return result

    @classmethod
    def identity(cls) -> "Transform":
        return cls()


@dataclass
class Mesh:
    """Geometry payload of a leaf node.

    ``positions`` is an ``(N, 3)`` array or a flat list of ``3N`` floats; None
    means the position stream is missing.  ``indices`` is an ``(M, 3)`` array or
    a flat list of ``3M`` ints; None means the mesh is non-indexed and every
    three consecutive vertices form a triangle.  ``material`` is anything
    :func:`resolve_color` understands.
    """

    positions: Optional[Union[np.ndarray, Sequence]] = None
    indices: Optional[Union[np.ndarray, Sequence]] = None
    material: object = None
    name: Optional[str] = None


@dataclass(eq=False)
class SceneNode:
    """A node in the scene tree: a group with children, or a leaf with a mesh."""

    name: str = ""
    transform: Transform = field(default_factory=Transform)
    children: List["SceneNode"] = field(default_factory=list)
    mesh: Optional[Mesh] = None

    @property
    def is_leaf(self) -> bool:
        return self.mesh is not None

    def add(self, *nodes: "SceneNode") -> "SceneNode":
        """Append child nodes and return self, for building trees inline."""
        self.children.extend(nodes)
        return self


# ---------------------------------------------------------------------------
#  Colour capability
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class HasColor:
    """The leaf's material supplies this 8-bit colour."""

    rgb: RGB8


@dataclass(frozen=True)
class Colorless:
    """The leaf can't supply a colour; ``reason`` says why.

    ``assigned`` is False when the leaf simply has no material, and True when
    a material is set but doesn't carry a usable colour.
    """

    reason: str = "no material"
    assigned: bool = False


ColorCapability = Union[HasColor, Colorless]


def resolve_color(material) -> ColorCapability:
    """
    Work out once whether a leaf's material can supply a colour.

    Accepts a colour value directly (``"#RRGGBB"``, an 8-bit triple or a 0-1
    float triple) or any object with a ``color`` attribute holding one.
    """
    if material is None:
        return Colorless()
    if isinstance(material, (HasColor, Colorless)):
        return material

    value = material
    if not isinstance(material, (str, list, tuple, np.ndarray)):
        if not hasattr(material, "color"):
            return Colorless(f"{type(material).__name__} has no color", assigned=True)
        value = material.color
        if value is None:
            return Colorless(f"{type(material).__name__} color is unset", assigned=True)

    try:
        return HasColor(to_rgb8(value))
    except ValueError as e:
        return Colorless(str(e), assigned=True)


# ---------------------------------------------------------------------------
#  Flattened leaf
# ---------------------------------------------------------------------------


@dataclass
class LeafRecord:
    """One leaf of the scene with its composed world transform.

    ``vertices_local`` is ``(N, 3)`` float64 and ``triangles`` is ``(M, 3)``
    int64; both are copies owned by the record.  ``problem`` is set when the
    leaf's geometry couldn't be read.
    """

    vertices_local: np.ndarray
    triangles: np.ndarray
    world_matrix: np.ndarray
    color: ColorCapability
    name: str
    problem: Optional[str] = None

    @property
    def vertex_count(self) -> int:
        return int(self.vertices_local.shape[0])

    @property
    def triangle_count(self) -> int:
        return int(self.triangles.shape[0])

    @property
    def is_empty(self) -> bool:
        return self.vertex_count == 0
