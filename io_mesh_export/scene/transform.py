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
Vertex transformation with numpy.
"""

import numpy as np

__all__ = ["transform_vertices", "scale_matrix"]


def transform_vertices(vertices, matrix) -> np.ndarray:
    """
    Apply a 4×4 affine matrix to a list of vertices.

    Neither argument is modified.  The result is always a freshly allocated
    ``(N, 3)`` float64 array, even for an identity matrix.

    :param vertices: ``(N, 3)`` array-like of local positions.
    :param matrix: 4×4 array-like world transform.
    :return: World-space positions.
    """
    local = np.asarray(vertices, dtype=np.float64).reshape(-1, 3)
    world = np.asarray(matrix, dtype=np.float64)
    if world.shape != (4, 4):
        raise ValueError(f"Expected a 4x4 matrix, got {world.shape}")
    # Row vectors, so multiply by the transpose.
    result = local @ world[:3, :3].T
    result += world[:3, 3]
    return result


def scale_matrix(factor: float) -> np.ndarray:
    """Uniform scale about the origin as a 4×4 matrix."""
    result = np.identity(4)
    result[0, 0] = result[1, 1] = result[2, 2] = float(factor)
    return result
