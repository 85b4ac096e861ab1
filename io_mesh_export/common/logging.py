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
Console logging helpers shared by every export module.

``debug`` is silent unless :data:`DEBUG_MODE` is switched on; ``warn`` and
``error`` always print.  ``safe_report`` forwards a message to anything with a
``report(level, message)`` method and falls back to the console when that
fails.
"""

from typing import Set

DEBUG_MODE = False
"""Set to True to enable verbose console output for development/debugging."""


def debug(*args, **kwargs):
    """Print to console only when DEBUG_MODE is enabled."""
    if DEBUG_MODE:
        print(*args, **kwargs)


def warn(*args, **kwargs):
    """Always print a warning message to the console."""
    print("WARNING:", *args, **kwargs)


def error(*args, **kwargs):
    """Always print an error message to the console."""
    print("ERROR:", *args, **kwargs)


def safe_report(reporter, level: Set[str], message: str) -> None:
    """
    Report a message through ``reporter.report()``, or log it to the console.

    :param reporter: Any object with a ``report(level, message)`` method, or None.
    :param level: The report level, e.g. ``{"ERROR"}``, ``{"WARNING"}``, ``{"INFO"}``.
    :param message: The message to report.
    """
    try:
        reporter.report(level, message)
    except (AttributeError, RuntimeError):
        if "ERROR" in level:
            error(message)
        elif "WARNING" in level:
            warn(message)
        else:
            debug(message)
