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
Export extruded-shape scenes as STL, OBJ, GLB and 3MF files.
"""

from . import api, common, export, scene

from .api import (
    export_scene,
    export_scene_async,
    export_to_file,
    inspect_export,
    batch_export,
    ExportResult,
    InspectResult,
)
from .export.context import ExportOptions
from .scene.types import Mesh, SceneNode, Transform

__version__ = "1.0.0"

# IDE and Documentation support.
__all__ = [
    "export_scene",
    "export_scene_async",
    "export_to_file",
    "inspect_export",
    "batch_export",
    "ExportResult",
    "InspectResult",
    "ExportOptions",
    "Mesh",
    "SceneNode",
    "Transform",
]
