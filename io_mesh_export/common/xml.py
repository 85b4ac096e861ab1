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
XML and number formatting helpers for the 3MF writer.

``format_transformation`` turns a 4×4 numpy matrix into the 12-number string
3MF stores on ``<item>`` and ``<component>`` elements.
"""

import io
import xml.etree.ElementTree

import numpy as np

__all__ = [
    "format_number",
    "format_coordinate",
    "format_transformation",
    "xml_to_bytes",
]


def format_number(value: float, decimals: int = 9) -> str:
    """Format a float with at most ``decimals`` places and no trailing zeros.

    ``-0`` is written as ``0`` so identity matrices print cleanly.
    """
    text = f"{value:.{decimals}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    if text in ("-0", ""):
        text = "0"
    return text


def format_coordinate(value: float, decimals: int) -> str:
    """Format a vertex coordinate with exactly ``decimals`` places."""
    return f"{value:.{decimals}f}"


def format_transformation(transformation: np.ndarray, decimals: int = 9) -> str:
    """Format a 4×4 affine matrix as a 3MF transformation string.

    3MF stores the upper three rows column by column: the 3×3 linear part
    followed by the translation.

    :param transformation: The transformation matrix to format.
    :param decimals: Maximum number of decimals per value.
    :return: Space-separated string of 12 numbers.
    """
    matrix = np.asarray(transformation, dtype=np.float64)
    cells = matrix[:3, :4].T.reshape(-1)
    return " ".join(format_number(float(cell), decimals) for cell in cells)


def xml_to_bytes(root: xml.etree.ElementTree.Element) -> bytes:
    """Serialise an element tree with an XML declaration, UTF-8 encoded."""
    document = xml.etree.ElementTree.ElementTree(root)
    buffer = io.BytesIO()
    document.write(buffer, xml_declaration=True, encoding="UTF-8")
    return buffer.getvalue()
