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
Orca Slicer / BambuStudio configuration files.

``Metadata/project_settings.config`` is JSON despite its name; it is loaded
from a bundled template and the filament arrays are sized to the material
table.  ``Metadata/model_settings.config`` is XML and assigns each part its
name and extruder.
"""

from __future__ import annotations

import copy
import json
import os
import xml.etree.ElementTree
from dataclasses import dataclass
from typing import Dict, List, Sequence

from ..common.logging import debug
from ..common.xml import xml_to_bytes
from ..scene.materials import MaterialRegistry
from .context import ExportOptions

__all__ = [
    "TEMPLATE_PATH",
    "PRINTER_DEFAULTS",
    "load_project_template",
    "filament_colors",
    "generate_project_settings",
    "generate_model_settings",
    "SlicerPart",
]

TEMPLATE_PATH = os.path.join(os.path.dirname(os.path.realpath(__file__)), "project_template.json")

# Fixed printer and process values; these override whatever the template holds.
PRINTER_DEFAULTS: Dict[str, object] = {
    "printable_area": ["0x0", "180x0", "180x180", "0x180"],
    "printable_height": "180",
    "nozzle_diameter": ["0.4"],
    "layer_height": "0.2",
}

# Per-filament arrays outside the filament_ prefix that must match the filament count.
FILAMENT_SIZED_KEYS = (
    "additional_cooling_fan_speed",
    "close_fan_the_first_x_layers",
    "cool_plate_temp",
    "cool_plate_temp_initial_layer",
    "default_filament_colour",
    "eng_plate_temp",
    "eng_plate_temp_initial_layer",
    "hot_plate_temp",
    "hot_plate_temp_initial_layer",
    "nozzle_temperature",
    "nozzle_temperature_initial_layer",
    "textured_plate_temp",
    "textured_plate_temp_initial_layer",
)

FLUSH_VOLUME = "280"
FLUSH_VECTOR_VOLUME = "140"


def load_project_template() -> dict:
    """Read the bundled project settings template (a fresh dict every call)."""
    with open(TEMPLATE_PATH, "r", encoding="utf-8") as f:
        return json.load(f)


def filament_colors(registry: MaterialRegistry, options: ExportOptions) -> List[str]:
    """
    One ``#RRGGBB`` entry per material, in extruder order, padded to the
    minimum slot count with ``options.filament_pad_color``.
    """
    colors = registry.hex_colors()
    pad = options.filament_pad_color.upper()
    while len(colors) < options.min_filament_slots:
        colors.append(pad)
    return colors


def _resize(values: list, count: int) -> list:
    if len(values) < count:
        return values + [values[-1]] * (count - len(values))
    return values[:count]


def generate_project_settings(registry: MaterialRegistry, options: ExportOptions) -> dict:
    """
    Build the project settings dict for the given material table.

    Every ``filament_*`` list in the template is stretched (repeating its last
    value) or cut to the number of filament slots.
    """
    settings = load_project_template()
    colors = filament_colors(registry, options)
    count = len(colors)

    for key, value in list(settings.items()):
        if not isinstance(value, list) or not value:
            continue
        if key.startswith("filament_") or key in FILAMENT_SIZED_KEYS:
            settings[key] = _resize(value, count)

    settings["filament_colour"] = colors
    settings["flush_volumes_matrix"] = [
        "0" if row == col else FLUSH_VOLUME for row in range(count) for col in range(count)
    ]
    settings["flush_volumes_vector"] = [FLUSH_VECTOR_VOLUME] * (2 * count)
    settings.update(copy.deepcopy(PRINTER_DEFAULTS))

    debug(f"Project settings with {count} filament slots: {colors}")
    return settings


@dataclass
class SlicerPart:
    """A part of the assembly object as listed in model_settings.config."""

    object_id: int
    name: str
    extruder: int
    face_count: int


def _metadata(parent, key: str, value) -> None:
    xml.etree.ElementTree.SubElement(parent, "metadata", key=key, value=str(value))


def generate_model_settings(
    assembly_id: int,
    assembly_name: str,
    parts: Sequence[SlicerPart],
    build_transform: str,
) -> bytes:
    """Generate the model_settings.config XML for Orca Slicer."""
    root = xml.etree.ElementTree.Element("config")

    object_elem = xml.etree.ElementTree.SubElement(root, "object", id=str(assembly_id))
    _metadata(object_elem, "name", assembly_name)
    _metadata(object_elem, "extruder", parts[0].extruder if parts else 1)

    identity_4x4 = "1 0 0 0 0 1 0 0 0 0 1 0 0 0 0 1"
    for part in parts:
        part_elem = xml.etree.ElementTree.SubElement(
            object_elem, "part", id=str(part.object_id), subtype="normal_part"
        )
        _metadata(part_elem, "name", part.name)
        _metadata(part_elem, "matrix", identity_4x4)
        _metadata(part_elem, "extruder", part.extruder)
        mesh_stat = xml.etree.ElementTree.SubElement(part_elem, "mesh_stat")
        mesh_stat.set("face_count", str(part.face_count))
        mesh_stat.set("edges_fixed", "0")
        mesh_stat.set("degenerate_facets", "0")
        mesh_stat.set("facets_removed", "0")
        mesh_stat.set("facets_reversed", "0")
        mesh_stat.set("backwards_edges", "0")

    plate_elem = xml.etree.ElementTree.SubElement(root, "plate")
    _metadata(plate_elem, "plater_id", 1)
    _metadata(plate_elem, "plater_name", "")
    _metadata(plate_elem, "locked", "false")
    _metadata(plate_elem, "filament_map_mode", "Auto For Flush")
    model_instance = xml.etree.ElementTree.SubElement(plate_elem, "model_instance")
    _metadata(model_instance, "object_id", assembly_id)
    _metadata(model_instance, "instance_id", 0)
    _metadata(model_instance, "identify_id", assembly_id)

    assemble_elem = xml.etree.ElementTree.SubElement(root, "assemble")
    xml.etree.ElementTree.SubElement(
        assemble_elem,
        "assemble_item",
        object_id=str(assembly_id),
        instance_id="0",
        transform=build_transform,
        offset="0 0 0",
    )

    return xml_to_bytes(root)
