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
Common utilities shared by the scene and export packages.

Re-exports the most frequently used symbols for convenient access::

    from ..common import debug, warn, error
    from ..common import hex_to_rgb8, rgb8_to_hex, srgb_to_linear
    from ..common import ExportError, SerializationError
"""

# Logging
from .logging import DEBUG_MODE, debug, warn, error, safe_report

# Color helpers
from .colors import (
    RGB8,
    srgb_to_linear,
    linear_to_srgb,
    hex_to_rgb,
    hex_to_rgb8,
    rgb_to_hex,
    rgb8_to_hex,
    rgb8_to_linear,
    to_rgb8,
)

# Errors
from .errors import (
    ExportError,
    EmptyInputError,
    InvalidGeometryError,
    UnsupportedMaterialError,
    SerializationError,
)

# Constants: the most commonly used subset
from .constants import (
    MODEL_NAMESPACE,
    MODEL_NAMESPACES,
    MODEL_DEFAULT_UNIT,
    PRODUCTION_NAMESPACE,
    BAMBU_NAMESPACE,
    CONTENT_TYPES_LOCATION,
    MODEL_LOCATION,
    MODEL_MIMETYPE,
    RELS_MIMETYPE,
    MAX_UINT32,
)

__all__ = [
    # Logging
    "DEBUG_MODE",
    "debug",
    "warn",
    "error",
    "safe_report",
    # Colors
    "RGB8",
    "srgb_to_linear",
    "linear_to_srgb",
    "hex_to_rgb",
    "hex_to_rgb8",
    "rgb_to_hex",
    "rgb8_to_hex",
    "rgb8_to_linear",
    "to_rgb8",
    # Errors
    "ExportError",
    "EmptyInputError",
    "InvalidGeometryError",
    "UnsupportedMaterialError",
    "SerializationError",
    # Constants (subset)
    "MODEL_NAMESPACE",
    "MODEL_NAMESPACES",
    "MODEL_DEFAULT_UNIT",
    "PRODUCTION_NAMESPACE",
    "BAMBU_NAMESPACE",
    "CONTENT_TYPES_LOCATION",
    "MODEL_LOCATION",
    "MODEL_MIMETYPE",
    "RELS_MIMETYPE",
    "MAX_UINT32",
]
