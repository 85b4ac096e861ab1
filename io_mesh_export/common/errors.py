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
Exception types raised by the export pipeline.

Only :class:`EmptyInputError` and :class:`SerializationError` ever reach the
caller.  :class:`InvalidGeometryError` and :class:`UnsupportedMaterialError`
are recoverable: the prepare stage turns them into warnings and carries on,
except for cycles in the scene tree, which are fatal.
"""

__all__ = [
    "ExportError",
    "EmptyInputError",
    "InvalidGeometryError",
    "UnsupportedMaterialError",
    "SerializationError",
]


class ExportError(Exception):
    """Base class for every error raised while exporting a scene."""


class EmptyInputError(ExportError):
    """The scene holds no renderable leaf, so there is nothing to write."""


class InvalidGeometryError(ExportError):
    """A leaf's geometry can't be exported (missing positions, bad indices, cycles)."""


class UnsupportedMaterialError(ExportError):
    """A leaf's material can't supply a colour."""


class SerializationError(ExportError):
    """Writing the output blob failed; no partial output is returned."""
