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
Export context: the bag of state threaded through one export call.

Every exporter takes a ``ctx`` and nothing else.  A context is created per
call and thrown away afterwards, so two exports never share state.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, List, Optional, Set, Tuple

from ..common.colors import hex_to_rgb8
from ..common.extensions import ExtensionManager
from ..common.logging import debug, warn, error, safe_report as _safe_report

__all__ = ["ExportOptions", "ExportContext", "THREEMF_MODES"]

THREEMF_MODES = ("MINIMAL", "SLICER")


# ---------------------------------------------------------------------------
# Options
# ---------------------------------------------------------------------------

@dataclass
class ExportOptions:
    """User-facing export options (API keyword args)."""

    global_scale: float = 1.0
    coordinate_precision: int = 7
    threemf_mode: str = "SLICER"  # "MINIMAL" | "SLICER"
    min_filament_slots: int = 2
    filament_pad_color: str = "#FFFFFF"
    default_color: str = "#808080"
    build_offset: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    title: str = ""
    application: str = "io_mesh_export"
    compresslevel: int = 9
    stl_header: str = ""

    def validate(self) -> None:
        """
        Check the options before an export starts.

        :raises ValueError: On the first option that is out of range.
        """
        if self.threemf_mode not in THREEMF_MODES:
            raise ValueError(f"Unknown 3MF mode {self.threemf_mode!r}, expected one of {THREEMF_MODES}")
        if not self.global_scale > 0:
            raise ValueError(f"global_scale must be positive, got {self.global_scale}")
        if self.coordinate_precision < 0:
            raise ValueError(f"coordinate_precision can't be negative, got {self.coordinate_precision}")
        if self.min_filament_slots < 1:
            raise ValueError(f"min_filament_slots must be at least 1, got {self.min_filament_slots}")
        if not 0 <= self.compresslevel <= 9:
            raise ValueError(f"compresslevel must be between 0 and 9, got {self.compresslevel}")
        if len(self.build_offset) != 3:
            raise ValueError(f"build_offset needs three values, got {self.build_offset!r}")
        if len(self.stl_header.encode("utf-8")) > 80:
            raise ValueError("stl_header doesn't fit in 80 bytes")
        hex_to_rgb8(self.default_color)
        hex_to_rgb8(self.filament_pad_color)


# ---------------------------------------------------------------------------
# ExportContext: the state bag
# ---------------------------------------------------------------------------

@dataclass
class ExportContext:
    """All mutable state accumulated during a single export call.

    Create one in ``api.export_scene()``, pass it to the exporter and discard
    it when the export is done.
    """

    # --- User options -------------------------------------------------------
    options: ExportOptions = field(default_factory=ExportOptions)

    # --- Reporter (for safe_report) -----------------------------------------
    reporter: object = None  # Anything with report(level, message), or None.
    on_warning: Optional[Callable[[str], None]] = None

    # --- Collected messages -------------------------------------------------
    warnings: List[str] = field(default_factory=list)

    # --- Resource tracking (populated during export) ------------------------
    next_resource_id: int = 1
    num_written: int = 0

    # --- Extension tracking -------------------------------------------------
    extension_manager: ExtensionManager = field(default_factory=ExtensionManager)

    # --- Helpers ------------------------------------------------------------

    def safe_report(self, level: Set[str], message: str) -> None:
        """Report a message through the reporter if available, or log it.

        WARNING and ERROR messages are also kept in :attr:`warnings` so the
        caller gets them back with the result.
        """
        if "WARNING" in level or "ERROR" in level:
            self.warnings.append(message)
            if self.on_warning is not None:
                self.on_warning(message)

        if self.reporter is not None:
            _safe_report(self.reporter, level, message)
        elif "ERROR" in level:
            error(message)
        elif "WARNING" in level:
            warn(message)
        else:
            debug(message)

    def allocate_resource_id(self) -> int:
        """Hand out the next 3MF resource id."""
        resource_id = self.next_resource_id
        self.next_resource_id += 1
        return resource_id

    def report_finished(self, format_name: str, filepath: Optional[str] = None) -> None:
        target = f" to {filepath}" if filepath else ""
        debug(f"Exported {self.num_written} objects as {format_name}{target}.")
        self.safe_report({"INFO"}, f"Exported {self.num_written} objects{target}")
