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
Constants for the output formats' file structure.

Most of these belong to 3MF's Open Packaging Conventions layout; the rest are
glTF binary framing values and the limits shared by all four formats.
"""

from typing import Dict

# IDE and Documentation support.
__all__ = [
    "MODEL_LOCATION",
    "OBJECTS_MODEL_LOCATION",
    "CONTENT_TYPES_LOCATION",
    "RELS_LOCATION",
    "MODEL_RELS_LOCATION",
    "MODEL_SETTINGS_LOCATION",
    "PROJECT_SETTINGS_LOCATION",
    "MODEL_REL",
    "RELS_MIMETYPE",
    "MODEL_MIMETYPE",
    "PNG_MIMETYPE",
    "GCODE_MIMETYPE",
    "MODEL_NAMESPACE",
    "PRODUCTION_NAMESPACE",
    "BAMBU_NAMESPACE",
    "MODEL_DEFAULT_UNIT",
    "CONTENT_TYPES_NAMESPACE",
    "RELS_NAMESPACE",
    "MODEL_NAMESPACES",
    "IDENTITY_TRANSFORM",
    "MAX_UINT32",
    "GLB_MAGIC",
    "STL_HEADER_SIZE",
    "STL_RECORD_SIZE",
]

# Default storage locations.
MODEL_LOCATION: str = "3D/3dmodel.model"  # Conventional location for the 3D model data.
OBJECTS_MODEL_LOCATION: str = "3D/Objects/object_1.model"  # Mesh objects in the slicer layout.
CONTENT_TYPES_LOCATION: str = "[Content_Types].xml"  # Location of the content types definition.
RELS_LOCATION: str = "_rels/.rels"  # Package-level relationships.
MODEL_RELS_LOCATION: str = "3D/_rels/3dmodel.model.rels"  # Relationships of the root model part.
MODEL_SETTINGS_LOCATION: str = "Metadata/model_settings.config"
PROJECT_SETTINGS_LOCATION: str = "Metadata/project_settings.config"

# Relationship types.
MODEL_REL: str = "http://schemas.microsoft.com/3dmanufacturing/2013/01/3dmodel"  # Relationship type of 3D models.

# MIME types of files in the archive.
RELS_MIMETYPE: str = "application/vnd.openxmlformats-package.relationships+xml"  # MIME type of .rels files.
MODEL_MIMETYPE: str = "application/vnd.ms-package.3dmanufacturing-3dmodel+xml"  # MIME type of .model files.
PNG_MIMETYPE: str = "image/png"
GCODE_MIMETYPE: str = "text/x.gcode"

# Constants in the 3D model file.
MODEL_NAMESPACE: str = "http://schemas.microsoft.com/3dmanufacturing/core/2015/02"
# Production extension for multi-file structure (used by Orca/BambuStudio)
PRODUCTION_NAMESPACE: str = "http://schemas.microsoft.com/3dmanufacturing/production/2015/06"
# BambuStudio/Orca vendor namespace
BAMBU_NAMESPACE: str = "http://schemas.bambulab.com/package/2021"
MODEL_NAMESPACES: Dict[str, str] = {
    "3mf": MODEL_NAMESPACE,
    "p": PRODUCTION_NAMESPACE,
    "BambuStudio": BAMBU_NAMESPACE,
}
MODEL_DEFAULT_UNIT: str = "millimeter"

# Constants in the ContentTypes file.
CONTENT_TYPES_NAMESPACE: str = "http://schemas.openxmlformats.org/package/2006/content-types"

# Constants in the .rels files.
RELS_NAMESPACE: str = "http://schemas.openxmlformats.org/package/2006/relationships"

IDENTITY_TRANSFORM: str = "1 0 0 0 1 0 0 0 1 0 0 0"

# Vertex and triangle counts are written as 32-bit unsigned integers in every format.
MAX_UINT32: int = 2**32 - 1

# glTF binary container.
GLB_MAGIC: int = 0x46546C67  # b"glTF" little-endian

# Binary STL layout.
STL_HEADER_SIZE: int = 84  # 80-byte header + uint32 triangle count
STL_RECORD_SIZE: int = 50  # normal + 3 vertices (12 float32) + uint16 attribute
