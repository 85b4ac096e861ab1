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
Colour deduplication into a material table.

Each distinct 8-bit colour becomes one :class:`Material`.  Ids start at 0 and
extruder numbers at 1, both in first-seen order.  Colours are compared for
exact equality of all three channels.
"""

from dataclasses import dataclass
from typing import List

from ..common.colors import RGB8, rgb8_to_hex, to_rgb8
from ..common.logging import debug

__all__ = ["Material", "MaterialRegistry", "DEFAULT_COLOR"]

DEFAULT_COLOR: RGB8 = (128, 128, 128)  # #808080


@dataclass(frozen=True)
class Material:
    """An entry of the material table."""

    id: int
    color: RGB8
    name: str
    extruder: int

    @property
    def hex_color(self) -> str:
        return rgb8_to_hex(self.color)


class MaterialRegistry:
    """
    Insertion-ordered table of unique colours for one export call.

    Leaves that share a colour get the same :class:`Material` object back from
    :meth:`material`.
    """

    def __init__(self):
        self._materials: List[Material] = []

    def register(self, color) -> int:
        """
        Return the material id for ``color``, adding a new entry if needed.

        :param color: Anything :func:`to_rgb8` accepts.
        :return: The 0-based material id.
        """
        rgb = to_rgb8(color)
        for material in self._materials:
            if material.color == rgb:
                return material.id

        material_id = len(self._materials)
        extruder = material_id + 1
        self._materials.append(
            Material(id=material_id, color=rgb, name=f"material_{extruder}", extruder=extruder)
        )
        debug(f"Registered material {material_id} ({rgb8_to_hex(rgb)}) on extruder {extruder}")
        return material_id

    def material(self, material_id: int) -> Material:
        """Look up an entry by id.

        :raises KeyError: If no material has that id.
        """
        if not 0 <= material_id < len(self._materials):
            raise KeyError(material_id)
        return self._materials[material_id]

    @property
    def materials(self) -> List[Material]:
        """The entries in insertion order (a copy of the list)."""
        return list(self._materials)

    def hex_colors(self) -> List[str]:
        return [material.hex_color for material in self._materials]

    def __len__(self) -> int:
        return len(self._materials)

    def __iter__(self):
        return iter(list(self._materials))
