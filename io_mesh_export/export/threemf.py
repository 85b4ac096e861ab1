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
3MF exporter.

One exporter, two layouts, picked by ``options.threemf_mode``:

``MINIMAL``
    A single ``3D/3dmodel.model`` with a ``<basematerials>`` group and one
    object per leaf pointing into it.

``SLICER``
    The Production Extension layout Orca Slicer and BambuStudio read: the
    meshes live in ``3D/Objects/object_1.model``, the root model holds one
    assembly object with a component per leaf, and ``Metadata/`` carries the
    per-part extruder assignment and the filament colours.
"""

from __future__ import annotations

import datetime
import json
import uuid
import xml.etree.ElementTree
from typing import Dict, List, Tuple

import numpy as np

from ..common.constants import (
    CONTENT_TYPES_LOCATION,
    IDENTITY_TRANSFORM,
    MODEL_DEFAULT_UNIT,
    MODEL_LOCATION,
    MODEL_NAMESPACE,
    MODEL_RELS_LOCATION,
    MODEL_SETTINGS_LOCATION,
    OBJECTS_MODEL_LOCATION,
    PROJECT_SETTINGS_LOCATION,
    RELS_LOCATION,
)
from ..common.errors import SerializationError
from ..common.extensions import ORCA_EXTENSION, PRODUCTION_EXTENSION
from ..common.logging import debug, error
from ..common.xml import format_coordinate, format_transformation, xml_to_bytes
from .archive import SLICER_CONTENT_TYPES, content_types_xml, package_archive, relationships_xml
from .base import BaseExporter
from .prepare import PreparedLeaf, PreparedScene
from .slicer import SlicerPart, generate_model_settings, generate_project_settings

__all__ = ["ThreeMFExporter"]

Part = Tuple[str, bytes]


class ThreeMFExporter(BaseExporter):
    """Exports 3MF archives in the minimal or the slicer-compatible layout."""

    format_name = "3MF"
    file_extension = ".3mf"

    def execute(self, prepared: PreparedScene) -> bytes:
        ctx = self.ctx
        mode = ctx.options.threemf_mode

        if mode == "SLICER":
            ctx.extension_manager.activate(PRODUCTION_EXTENSION.namespace)
            ctx.extension_manager.activate(ORCA_EXTENSION.namespace)
            debug("Activated Orca Slicer extensions: Production + BambuStudio")
            parts = self.slicer_parts(prepared)
        else:
            parts = self.minimal_parts(prepared)

        data = package_archive(parts, compresslevel=ctx.options.compresslevel)
        ctx.num_written = len(prepared.leaves)
        ctx.report_finished(f"{mode.lower()} 3MF")
        return data

    # --- Shared pieces -----------------------------------------------------

    def model_root(self) -> xml.etree.ElementTree.Element:
        """A ``<model>`` element declaring every active extension."""
        ctx = self.ctx
        attrib = {
            "unit": MODEL_DEFAULT_UNIT,
            "xml:lang": "en-US",
            "xmlns": MODEL_NAMESPACE,
        }
        attrib.update(ctx.extension_manager.get_namespace_declarations())
        required = ctx.extension_manager.get_required_extensions_string()
        if required:
            attrib["requiredextensions"] = required
        return xml.etree.ElementTree.Element("model", attrib=attrib)

    def write_metadata(self, root: xml.etree.ElementTree.Element, entries: Dict[str, str]) -> None:
        for name, value in entries.items():
            meta = xml.etree.ElementTree.SubElement(root, "metadata", attrib={"name": name})
            meta.text = value

    def write_mesh(self, object_element: xml.etree.ElementTree.Element, leaf: PreparedLeaf) -> None:
        """Write a leaf's world-space vertices and its triangles."""
        decimals = self.ctx.options.coordinate_precision
        mesh_element = xml.etree.ElementTree.SubElement(object_element, "mesh")

        vertices_element = xml.etree.ElementTree.SubElement(mesh_element, "vertices")
        for x, y, z in leaf.vertices.tolist():
            xml.etree.ElementTree.SubElement(
                vertices_element,
                "vertex",
                attrib={
                    "x": format_coordinate(x, decimals),
                    "y": format_coordinate(y, decimals),
                    "z": format_coordinate(z, decimals),
                },
            )

        triangles_element = xml.etree.ElementTree.SubElement(mesh_element, "triangles")
        for v1, v2, v3 in leaf.triangles.tolist():
            xml.etree.ElementTree.SubElement(
                triangles_element,
                "triangle",
                attrib={"v1": str(v1), "v2": str(v2), "v3": str(v3)},
            )

    def build_transform(self) -> str:
        """Placement of the build items: identity plus ``options.build_offset``."""
        matrix = np.identity(4)
        matrix[:3, 3] = [float(v) for v in self.ctx.options.build_offset]
        return format_transformation(matrix)

    def title(self, prepared: PreparedScene) -> str:
        return self.ctx.options.title or prepared.leaves[0].name

    # --- MINIMAL -----------------------------------------------------------

    def minimal_parts(self, prepared: PreparedScene) -> List[Part]:
        """All archive entries of the single-model layout, in write order."""
        ctx = self.ctx
        root = self.model_root()
        self.write_metadata(
            root,
            {
                "Application": ctx.options.application,
                "Title": self.title(prepared),
            },
        )
        resources = xml.etree.ElementTree.SubElement(root, "resources")

        material_resource_id = ctx.allocate_resource_id()
        basematerials = xml.etree.ElementTree.SubElement(
            resources, "basematerials", attrib={"id": str(material_resource_id)}
        )
        for material in prepared.registry.materials:
            xml.etree.ElementTree.SubElement(
                basematerials,
                "base",
                attrib={"name": material.name, "displaycolor": material.hex_color},
            )

        build = xml.etree.ElementTree.Element("build")
        transform = self.build_transform()
        for leaf in prepared.leaves:
            object_id = ctx.allocate_resource_id()
            object_element = xml.etree.ElementTree.SubElement(
                resources,
                "object",
                attrib={
                    "id": str(object_id),
                    "type": "model",
                    "name": leaf.name,
                    "pid": str(material_resource_id),
                    "pindex": str(leaf.material.id),
                },
            )
            self.write_mesh(object_element, leaf)
            xml.etree.ElementTree.SubElement(
                build, "item", attrib={"objectid": str(object_id), "transform": transform}
            )
        root.append(build)

        debug(f"Minimal 3MF: {len(prepared.leaves)} objects, {len(prepared.registry)} base materials")
        return [
            (CONTENT_TYPES_LOCATION, content_types_xml()),
            (RELS_LOCATION, relationships_xml(["/" + MODEL_LOCATION])),
            (MODEL_LOCATION, xml_to_bytes(root)),
            (MODEL_RELS_LOCATION, relationships_xml([])),
        ]

    # --- SLICER ------------------------------------------------------------

    def slicer_parts(self, prepared: PreparedScene) -> List[Part]:
        """All archive entries of the Production Extension layout, in write order."""
        ctx = self.ctx
        object_path = "/" + OBJECTS_MODEL_LOCATION

        mesh_ids = [ctx.allocate_resource_id() for _ in prepared.leaves]
        assembly_id = ctx.allocate_resource_id()
        transform = self.build_transform()
        title = self.title(prepared)

        objects_model = self.write_object_model(prepared, mesh_ids)
        main_model = self.write_main_model(prepared, mesh_ids, assembly_id, object_path, title, transform)

        slicer_parts = [
            SlicerPart(
                object_id=mesh_id,
                name=leaf.name,
                extruder=leaf.material.extruder,
                face_count=int(leaf.triangles.shape[0]),
            )
            for mesh_id, leaf in zip(mesh_ids, prepared.leaves)
        ]
        model_settings = generate_model_settings(assembly_id, title, slicer_parts, transform)

        try:
            project_settings = json.dumps(
                generate_project_settings(prepared.registry, ctx.options), indent=4
            ).encode("utf-8")
        except (OSError, TypeError, ValueError) as e:
            error(f"Failed to write Orca metadata: {e}")
            ctx.safe_report({"ERROR"}, f"Failed to write Orca metadata: {e}")
            raise SerializationError(f"Failed to write project settings: {e}") from e

        return [
            (CONTENT_TYPES_LOCATION, content_types_xml(SLICER_CONTENT_TYPES)),
            (RELS_LOCATION, relationships_xml(["/" + MODEL_LOCATION])),
            (MODEL_LOCATION, main_model),
            (MODEL_RELS_LOCATION, relationships_xml([object_path], id_prefix="rel-")),
            (OBJECTS_MODEL_LOCATION, objects_model),
            (MODEL_SETTINGS_LOCATION, model_settings),
            (PROJECT_SETTINGS_LOCATION, project_settings),
        ]

    def write_object_model(self, prepared: PreparedScene, mesh_ids: List[int]) -> bytes:
        """The model part holding every leaf mesh; its build is left empty."""
        root = self.model_root()
        self.write_metadata(root, self.ctx.extension_manager.get_vendor_attributes())
        resources = xml.etree.ElementTree.SubElement(root, "resources")

        for mesh_id, leaf in zip(mesh_ids, prepared.leaves):
            object_element = xml.etree.ElementTree.SubElement(
                resources,
                "object",
                attrib={
                    "id": str(mesh_id),
                    "p:UUID": _object_uuid(mesh_id, "81cb-4c03-9d28-80fed5dfa1dc"),
                    "type": "model",
                },
            )
            self.write_mesh(object_element, leaf)

        xml.etree.ElementTree.SubElement(root, "build")
        debug(f"Wrote object model with {len(mesh_ids)} meshes")
        return xml_to_bytes(root)

    def write_main_model(
        self,
        prepared: PreparedScene,
        mesh_ids: List[int],
        assembly_id: int,
        object_path: str,
        title: str,
        transform: str,
    ) -> bytes:
        """The root model: metadata, the assembly object and the build."""
        ctx = self.ctx
        root = self.model_root()

        today = datetime.datetime.now().strftime("%Y-%m-%d")
        metadata = {"Application": ctx.options.application}
        metadata.update(ctx.extension_manager.get_vendor_attributes())
        metadata.update(
            {
                "CreationDate": today,
                "ModificationDate": today,
                "Title": title,
            }
        )
        self.write_metadata(root, metadata)

        resources = xml.etree.ElementTree.SubElement(root, "resources")
        assembly = xml.etree.ElementTree.SubElement(
            resources,
            "object",
            attrib={
                "id": str(assembly_id),
                "p:UUID": _object_uuid(assembly_id, "61cb-4c03-9d28-80fed5dfa1dc"),
                "type": "model",
            },
        )
        components = xml.etree.ElementTree.SubElement(assembly, "components")
        for mesh_id in mesh_ids:
            xml.etree.ElementTree.SubElement(
                components,
                "component",
                attrib={
                    "p:path": object_path,
                    "objectid": str(mesh_id),
                    "p:UUID": _object_uuid(mesh_id, "b206-40ff-9872-83e8017abed1"),
                    "transform": IDENTITY_TRANSFORM,
                },
            )

        build = xml.etree.ElementTree.SubElement(
            root, "build", attrib={"p:UUID": str(uuid.uuid4())}
        )
        xml.etree.ElementTree.SubElement(
            build,
            "item",
            attrib={
                "objectid": str(assembly_id),
                "p:UUID": _object_uuid(assembly_id, "b1ec-4553-aec9-835e5b724bb4"),
                "transform": transform,
                "printable": "1",
            },
        )
        debug(f"Wrote main model with assembly {assembly_id} of {len(mesh_ids)} parts")
        return xml_to_bytes(root)


def _object_uuid(counter: int, suffix: str) -> str:
    """UUIDs that only need to be unique inside one archive."""
    return f"{counter:08x}-{suffix}"
