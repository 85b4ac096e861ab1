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
Scene model: node tree, flattening, vertex transforms and the material table.
"""

from .types import (
    Transform,
    Mesh,
    SceneNode,
    HasColor,
    Colorless,
    ColorCapability,
    resolve_color,
    LeafRecord,
)
from .flatten import flatten_scene, read_geometry
from .transform import transform_vertices, scale_matrix
from .materials import Material, MaterialRegistry, DEFAULT_COLOR

__all__ = [
    "Transform",
    "Mesh",
    "SceneNode",
    "HasColor",
    "Colorless",
    "ColorCapability",
    "resolve_color",
    "LeafRecord",
    "flatten_scene",
    "read_geometry",
    "transform_vertices",
    "scale_matrix",
    "Material",
    "MaterialRegistry",
    "DEFAULT_COLOR",
]
