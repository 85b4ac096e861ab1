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
Exporters and the shared export pipeline.

``EXPORTERS`` maps a format key to the exporter class that writes it.
"""

from typing import Type

from .archive import package_archive, content_types_xml, relationships_xml
from .base import BaseExporter
from .context import ExportContext, ExportOptions, THREEMF_MODES
from .glb import GlbExporter
from .obj import ObjExporter
from .prepare import PreparedLeaf, PreparedScene, prepare_scene
from .stl import StlExporter
from .threemf import ThreeMFExporter

EXPORTERS = {
    "stl": StlExporter,
    "obj": ObjExporter,
    "glb": GlbExporter,
    "3mf": ThreeMFExporter,
}


def get_exporter(fmt: str) -> Type[BaseExporter]:
    """
    Look up the exporter class for a format key such as ``"3mf"``.

    :raises ValueError: For unknown formats.
    """
    try:
        return EXPORTERS[fmt.lower().lstrip(".")]
    except KeyError:
        raise ValueError(f"Unknown export format {fmt!r}, expected one of {sorted(EXPORTERS)}") from None


__all__ = [
    "EXPORTERS",
    "get_exporter",
    "BaseExporter",
    "ExportContext",
    "ExportOptions",
    "THREEMF_MODES",
    "PreparedLeaf",
    "PreparedScene",
    "prepare_scene",
    "package_archive",
    "content_types_xml",
    "relationships_xml",
    "StlExporter",
    "ObjExporter",
    "GlbExporter",
    "ThreeMFExporter",
]
