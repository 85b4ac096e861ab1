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
glTF 2.0 binary (GLB) exporter.

Unlike STL and OBJ, leaves are not merged: each becomes its own trimesh
geometry and scene node, tagged with the PBR material of its colour.  trimesh
lays out the binary container.

glTF colours are linear, so every registry colour is converted from sRGB
before it goes into ``baseColorFactor``.  trimesh stores that factor as 8-bit
RGBA.
"""

from typing import Dict, Set

import numpy as np
import trimesh
from trimesh.visual.material import PBRMaterial
from trimesh.visual.texture import TextureVisuals

from ..common.colors import rgb8_to_linear
from ..common.errors import SerializationError
from ..common.logging import debug, error
from ..scene.materials import Material
from .base import BaseExporter
from .prepare import PreparedScene

__all__ = ["GlbExporter", "build_material"]


def build_material(material: Material) -> PBRMaterial:
    """
    Build the glTF material for one registry entry.

    The base colour is the linear form of the entry's sRGB colour, rounded to
    8 bits, with full alpha.
    """
    linear = [int(round(channel * 255)) for channel in rgb8_to_linear(material.color)]
    return PBRMaterial(
        name=material.name,
        baseColorFactor=np.array(linear + [255], dtype=np.uint8),
        metallicFactor=0.0,
        roughnessFactor=1.0,
        doubleSided=False,
    )


def _unique_name(name: str, used: Set[str]) -> str:
    candidate = name or "leaf"
    index = 1
    while candidate in used:
        candidate = f"{name or 'leaf'}_{index}"
        index += 1
    used.add(candidate)
    return candidate


class GlbExporter(BaseExporter):
    """Exports one glTF node per leaf with a base-colour material each."""

    format_name = "GLB"
    file_extension = ".glb"

    def execute(self, prepared: PreparedScene) -> bytes:
        ctx = self.ctx
        scene = self.build_scene(prepared)
        try:
            data = scene.export(file_type="glb")
        except (ValueError, TypeError, KeyError) as e:
            error(f"Unable to write GLB data: {e}")
            raise SerializationError(f"Unable to write GLB data: {e}") from e

        ctx.num_written = len(prepared.leaves)
        debug(f"GLB: {len(scene.geometry)} meshes, {len(prepared.registry)} materials, {len(data)} bytes")
        ctx.report_finished(self.format_name)
        return data

    def build_scene(self, prepared: PreparedScene) -> trimesh.Scene:
        """Build a trimesh scene with one geometry per leaf, in leaf order."""
        materials: Dict[int, PBRMaterial] = {
            material.id: build_material(material) for material in prepared.registry.materials
        }

        scene = trimesh.Scene()
        used_names: Set[str] = set()
        for leaf in prepared.leaves:
            # Leaves of one colour share the material object, so trimesh writes it once.
            geometry = trimesh.Trimesh(
                vertices=leaf.vertices,
                faces=leaf.triangles,
                visual=TextureVisuals(material=materials[leaf.material.id]),
                process=False,
            )
            name = _unique_name(leaf.name, used_names)
            scene.add_geometry(geometry, node_name=name, geom_name=name)
        return scene
