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
Binary STL exporter.

All leaves are merged into one triangle soup.  Normals are written as zeros
and left for the reading application to compute.
"""

import io

import numpy as np
import stl
from stl import mesh

from ..common.constants import STL_HEADER_SIZE, STL_RECORD_SIZE
from ..common.errors import SerializationError
from ..common.logging import debug, error
from .base import BaseExporter
from .prepare import PreparedScene

__all__ = ["StlExporter", "build_stl_mesh"]


def build_stl_mesh(vertices: np.ndarray, triangles: np.ndarray) -> mesh.Mesh:
    """
    Build a numpy-stl mesh from a merged vertex and triangle list.

    Normals and attribute bytes stay zero.
    """
    data = np.zeros(triangles.shape[0], dtype=mesh.Mesh.dtype)
    data["vectors"] = vertices[triangles].astype(np.float32)
    return mesh.Mesh(data, calculate_normals=False)


class StlExporter(BaseExporter):
    """Exports a merged, materialless binary STL."""

    format_name = "STL"
    file_extension = ".stl"

    def execute(self, prepared: PreparedScene) -> bytes:
        ctx = self.ctx
        vertices, triangles = prepared.merged()
        stl_mesh = build_stl_mesh(vertices, triangles)

        buffer = io.BytesIO()
        try:
            stl_mesh.save(
                ctx.options.stl_header or ctx.options.application,
                fh=buffer,
                mode=stl.Mode.BINARY,
                update_normals=False,
            )
        except (OSError, ValueError, TypeError, AssertionError) as e:
            error(f"Unable to write STL data: {e}")
            raise SerializationError(f"Unable to write STL data: {e}") from e

        data = buffer.getvalue()
        expected = STL_HEADER_SIZE + STL_RECORD_SIZE * triangles.shape[0]
        if len(data) != expected:
            raise SerializationError(
                f"STL output is {len(data)} bytes, expected {expected} for {triangles.shape[0]} triangles"
            )

        ctx.num_written = len(prepared.leaves)
        debug(f"STL: {triangles.shape[0]} triangles, {len(data)} bytes")
        ctx.report_finished(self.format_name)
        return data
