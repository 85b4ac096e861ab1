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
Wavefront OBJ exporter: one merged mesh, ``v`` lines then ``f`` lines.
"""

import io

from ..common.logging import debug
from .base import BaseExporter
from .prepare import PreparedScene

__all__ = ["ObjExporter"]


class ObjExporter(BaseExporter):
    """Exports a merged, materialless OBJ text file."""

    format_name = "OBJ"
    file_extension = ".obj"

    def execute(self, prepared: PreparedScene) -> bytes:
        ctx = self.ctx
        vertices, triangles = prepared.merged()

        out = io.StringIO()
        # repr() is the shortest string that reads back to the same float.
        for x, y, z in vertices.tolist():
            out.write(f"v {x!r} {y!r} {z!r}\n")
        for a, b, c in (triangles + 1).tolist():
            out.write(f"f {a} {b} {c}\n")

        ctx.num_written = len(prepared.leaves)
        debug(f"OBJ: {vertices.shape[0]} vertices, {triangles.shape[0]} faces")
        ctx.report_finished(self.format_name)
        return out.getvalue().encode("utf-8")
