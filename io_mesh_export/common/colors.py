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
Colour helpers.

Colours travel through the exporter as 8-bit sRGB triples ``(r, g, b)``.
Inputs may arrive as ``#RRGGBB`` strings, 8-bit integer triples or 0-1 float
triples; :func:`to_rgb8` normalises all of them.
"""

import math
import numbers
from typing import Sequence, Tuple

RGB8 = Tuple[int, int, int]


# ---------------------------------------------------------------------------
#  Color space conversion
# ---------------------------------------------------------------------------


def srgb_to_linear(c: float) -> float:
    """Convert a single sRGB gamma component to linear.

    Hex colours are sRGB.  glTF ``baseColorFactor`` is linear, so apply this
    when writing material colours into a GLB.
    """
    if c <= 0.04045:
        return c / 12.92
    return pow((c + 0.055) / 1.055, 2.4)


def linear_to_srgb(c: float) -> float:
    """Convert a single linear component to sRGB gamma."""
    if c <= 0.0031308:
        return c * 12.92
    return 1.055 * pow(c, 1.0 / 2.4) - 0.055


# ---------------------------------------------------------------------------
#  Hex / RGB helpers
# ---------------------------------------------------------------------------


def hex_to_rgb(hex_str: str) -> Tuple[float, float, float]:
    """Convert ``#RRGGBB`` hex string to an ``(r, g, b)`` tuple of 0-1 floats.

    Returns **raw sRGB** values, no gamma conversion.  Leading ``#`` is optional.
    """
    r, g, b = hex_to_rgb8(hex_str)
    return (r / 255.0, g / 255.0, b / 255.0)


def hex_to_rgb8(hex_str: str) -> RGB8:
    """Convert ``#RRGGBB`` (or ``#RGB``) to an 8-bit ``(r, g, b)`` tuple.

    :raises ValueError: If the string isn't a valid hex colour.
    """
    digits = hex_str.strip().lstrip("#")
    if len(digits) == 3:
        digits = "".join(ch * 2 for ch in digits)
    if len(digits) != 6:
        raise ValueError(f"Not a hex colour: {hex_str!r}")
    return (
        int(digits[0:2], 16),
        int(digits[2:4], 16),
        int(digits[4:6], 16),
    )


def rgb_to_hex(r: float, g: float, b: float) -> str:
    """Convert 0-1 float RGB values to a ``#RRGGBB`` hex string."""
    return "#%02X%02X%02X" % (
        min(255, max(0, int(r * 255 + 0.5))),
        min(255, max(0, int(g * 255 + 0.5))),
        min(255, max(0, int(b * 255 + 0.5))),
    )


def rgb8_to_hex(rgb: Sequence[int]) -> str:
    """Convert an 8-bit ``(r, g, b)`` triple to ``#RRGGBB``."""
    return "#%02X%02X%02X" % tuple(rgb[:3])


def rgb8_to_linear(rgb: Sequence[int]) -> Tuple[float, float, float]:
    """Convert an 8-bit sRGB triple to linear 0-1 floats."""
    return tuple(srgb_to_linear(channel / 255.0) for channel in rgb[:3])


def to_rgb8(value) -> RGB8:
    """
    Normalise a colour value to an 8-bit ``(r, g, b)`` triple.

    Accepts ``#RRGGBB`` strings, sequences of three (or four) integers in
    0-255, or sequences of floats in 0-1.  Floats are quantised with
    round-half-up, so two float colours are the same material only if they
    land on the same bytes.

    :raises ValueError: If the value can't be read as a colour.
    """
    if isinstance(value, str):
        return hex_to_rgb8(value)

    try:
        channels = list(value)[:3]
    except TypeError:
        raise ValueError(f"Not a colour: {value!r}") from None
    if len(channels) != 3 or not all(isinstance(c, numbers.Real) for c in channels):
        raise ValueError(f"Not a colour: {value!r}")

    if all(isinstance(c, numbers.Integral) for c in channels):
        if not all(0 <= c <= 255 for c in channels):
            raise ValueError(f"8-bit colour channel out of range: {value!r}")
        return (int(channels[0]), int(channels[1]), int(channels[2]))

    if not all(math.isfinite(c) for c in channels):
        raise ValueError(f"Colour channel is not finite: {value!r}")
    return tuple(min(255, max(0, int(float(c) * 255 + 0.5))) for c in channels)
