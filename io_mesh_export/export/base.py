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
Base class shared by the format exporters.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .context import ExportContext
    from .prepare import PreparedScene


class BaseExporter:
    """Base class for format-specific exporters.

    An exporter holds nothing but its context, so a new one is made for
    every export call.
    """

    format_name: str = ""
    file_extension: str = ""

    def __init__(self, ctx: ExportContext):
        """
        Initialize with reference to the export context.

        :param ctx: The ExportContext with settings and state.
        """
        self.ctx = ctx

    def execute(self, prepared: PreparedScene) -> bytes:
        """Serialize a prepared scene and return the file contents."""
        raise NotImplementedError
