"""
Integration tests for the 3MF exporter in both layouts.
"""

import json
import unittest
import uuid

import numpy as np

from io_mesh_export.api import export_scene, inspect_export
from io_mesh_export.common.constants import (
    BAMBU_NAMESPACE,
    MODEL_NAMESPACE,
    MODEL_NAMESPACES,
    PRODUCTION_NAMESPACE,
    RELS_NAMESPACE,
)
from io_mesh_export.common.errors import EmptyInputError
from io_mesh_export.scene import SceneNode

from test_base import ExportTestCase, mixed_scene, square_mesh, two_orange_squares

P_UUID = f"{{{PRODUCTION_NAMESPACE}}}UUID"
P_PATH = f"{{{PRODUCTION_NAMESPACE}}}path"
IDENTITY = "1 0 0 0 1 0 0 0 1 0 0 0"


# ============================================================================
# MINIMAL layout
# ============================================================================


class MinimalLayoutTest(ExportTestCase):

    def setUp(self):
        super().setUp()
        self.result = export_scene(mixed_scene(), "3mf", threemf_mode="MINIMAL")
        self.archive = self.open_archive(self.result.data)
        self.model = self.read_xml(self.archive, "3D/3dmodel.model")

    def test_entries(self):
        self.assertEqual(
            self.archive.namelist(),
            ["[Content_Types].xml", "_rels/.rels", "3D/3dmodel.model", "3D/_rels/3dmodel.model.rels"],
        )

    def test_root_relationship(self):
        rels = self.read_xml(self.archive, "_rels/.rels")
        (rel,) = rels.findall(f"{{{RELS_NAMESPACE}}}Relationship")
        self.assertEqual(rel.attrib["Target"], "/3D/3dmodel.model")

    def test_model_header(self):
        self.assertEqual(self.model.tag, f"{{{MODEL_NAMESPACE}}}model")
        self.assertEqual(self.model.attrib["unit"], "millimeter")
        self.assertNotIn("requiredextensions", self.model.attrib)

    def test_base_materials(self):
        bases = self.model.findall("./3mf:resources/3mf:basematerials/3mf:base", MODEL_NAMESPACES)
        self.assertEqual([b.attrib["displaycolor"] for b in bases], ["#FF0000", "#00FF00"])

    def test_objects_point_at_materials(self):
        objects = self.model_objects(self.model)
        self.assertEqual([o.attrib["name"] for o in objects], ["cube", "green", "red_square"])
        self.assertEqual([o.attrib["pindex"] for o in objects], ["0", "1", "0"])
        group_id = self.model.find("./3mf:resources/3mf:basematerials", MODEL_NAMESPACES).attrib["id"]
        for obj in objects:
            self.assertEqual(obj.attrib["pid"], group_id)

    def test_build_items(self):
        items = self.model.findall("./3mf:build/3mf:item", MODEL_NAMESPACES)
        object_ids = [o.attrib["id"] for o in self.model_objects(self.model)]
        self.assertEqual([i.attrib["objectid"] for i in items], object_ids)
        for item in items:
            self.assertEqual(item.attrib["transform"], IDENTITY)

    def test_seven_decimals(self):
        vertex = self.model.find(".//3mf:vertex", MODEL_NAMESPACES)
        self.assertEqual(vertex.attrib["x"], "0.0000000")

    def test_world_vertices(self):
        red_square = self.model_objects(self.model)[2]
        vertices = self.model_vertices(red_square)
        np.testing.assert_allclose(vertices[2], [20, 20, 5])

    def test_build_offset(self):
        result = export_scene(two_orange_squares(), "3mf", threemf_mode="MINIMAL", build_offset=(90, 90, 0))
        model = self.read_xml(self.open_archive(result.data), "3D/3dmodel.model")
        item = model.find("./3mf:build/3mf:item", MODEL_NAMESPACES)
        self.assertEqual(item.attrib["transform"], "1 0 0 0 1 0 0 0 1 90 90 0")

    def test_title_metadata(self):
        metadata = self.model_metadata(self.model)
        self.assertEqual(metadata["Title"], "cube")
        self.assertEqual(metadata["Application"], "io_mesh_export")


# ============================================================================
# SLICER layout
# ============================================================================


class SlicerLayoutTest(ExportTestCase):

    def setUp(self):
        super().setUp()
        self.result = export_scene(mixed_scene(), "3mf", threemf_mode="SLICER")
        self.archive = self.open_archive(self.result.data)
        self.main = self.read_xml(self.archive, "3D/3dmodel.model")
        self.objects = self.read_xml(self.archive, "3D/Objects/object_1.model")

    def test_entries(self):
        self.assertEqual(
            self.archive.namelist(),
            [
                "[Content_Types].xml",
                "_rels/.rels",
                "3D/3dmodel.model",
                "3D/_rels/3dmodel.model.rels",
                "3D/Objects/object_1.model",
                "Metadata/model_settings.config",
                "Metadata/project_settings.config",
            ],
        )

    def test_content_types(self):
        types = self.read_xml(self.archive, "[Content_Types].xml")
        self.assertEqual([d.attrib["Extension"] for d in types], ["rels", "model", "png", "gcode"])

    def test_model_rels_point_at_objects(self):
        rels = self.read_xml(self.archive, "3D/_rels/3dmodel.model.rels")
        self.assertEqual([r.attrib["Target"] for r in rels], ["/3D/Objects/object_1.model"])

    def test_required_production(self):
        self.assertEqual(self.main.attrib["requiredextensions"], "p")
        self.assertEqual(self.model_metadata(self.main)["BambuStudio:3mfVersion"], "1")

    def test_namespace_declarations(self):
        raw = self.archive.read("3D/3dmodel.model").decode("utf-8")
        self.assertIn(f'xmlns:p="{PRODUCTION_NAMESPACE}"', raw)
        self.assertIn(f'xmlns:BambuStudio="{BAMBU_NAMESPACE}"', raw)

    def test_meshes_in_object_model(self):
        objects = self.model_objects(self.objects)
        self.assertEqual([o.attrib["id"] for o in objects], ["1", "2", "3"])
        self.assertEqual([len(self.model_triangles(o)) for o in objects], [12, 2, 2])
        self.assertEqual(self.objects.findall("./3mf:build/3mf:item", MODEL_NAMESPACES), [])

    def test_assembly_components(self):
        (assembly,) = self.model_objects(self.main)
        self.assertEqual(assembly.attrib["id"], "4")
        components = assembly.findall("./3mf:components/3mf:component", MODEL_NAMESPACES)
        self.assertEqual([c.attrib["objectid"] for c in components], ["1", "2", "3"])
        for component in components:
            self.assertEqual(component.attrib[P_PATH], "/3D/Objects/object_1.model")
            self.assertEqual(component.attrib["transform"], IDENTITY)

    def test_build_item(self):
        build = self.main.find("./3mf:build", MODEL_NAMESPACES)
        uuid.UUID(build.attrib[P_UUID])
        (item,) = build.findall("./3mf:item", MODEL_NAMESPACES)
        self.assertEqual(item.attrib["objectid"], "4")
        self.assertEqual(item.attrib["printable"], "1")

    def test_uuids_unique(self):
        uuids = [
            node.attrib[P_UUID]
            for root in (self.main, self.objects)
            for node in root.iter()
            if P_UUID in node.attrib
        ]
        self.assertEqual(len(uuids), len(set(uuids)))

    def test_part_extruders(self):
        config = self.read_xml(self.archive, "Metadata/model_settings.config")
        extruders = [
            meta.attrib["value"]
            for meta in config.iterfind("./object/part/metadata")
            if meta.attrib["key"] == "extruder"
        ]
        self.assertEqual(extruders, ["1", "2", "1"])
        names = [
            meta.attrib["value"]
            for meta in config.iterfind("./object/part/metadata")
            if meta.attrib["key"] == "name"
        ]
        self.assertEqual(names, ["cube", "green", "red_square"])

    def test_project_settings(self):
        settings = json.loads(self.archive.read("Metadata/project_settings.config"))
        self.assertEqual(settings["filament_colour"], ["#FF0000", "#00FF00"])
        self.assertEqual(settings["printable_area"], ["0x0", "180x0", "180x180", "0x180"])
        self.assertEqual(settings["printable_height"], "180")
        self.assertEqual(settings["nozzle_diameter"], ["0.4"])
        self.assertEqual(settings["layer_height"], "0.2")

    def test_single_material_padded(self):
        result = export_scene(SceneNode("one", mesh=square_mesh(material="#123456")), "3mf")
        settings = json.loads(self.open_archive(result.data).read("Metadata/project_settings.config"))
        self.assertEqual(settings["filament_colour"], ["#123456", "#FFFFFF"])

    def test_exports_independent(self):
        second = export_scene(two_orange_squares(), "3mf")
        settings = json.loads(self.open_archive(second.data).read("Metadata/project_settings.config"))
        self.assertEqual(settings["filament_colour"], ["#FFA500", "#FFFFFF"])
        model = self.read_xml(self.open_archive(second.data), "3D/3dmodel.model")
        (assembly,) = self.model_objects(model)
        self.assertEqual(assembly.attrib["id"], "3")


# ============================================================================
# Shared behaviour
# ============================================================================


class ThreeMFSharedTest(ExportTestCase):

    def test_round_trip_both_layouts(self):
        for mode in ("MINIMAL", "SLICER"):
            with self.subTest(mode=mode):
                info = inspect_export(export_scene(two_orange_squares(), "3mf", threemf_mode=mode).data, "3mf")
                self.assertEqual(info.status, "OK")
                self.assertEqual(info.num_vertices_total, 8)
                self.assertEqual(info.num_triangles_total, 4)
                self.assertEqual(info.materials, ["#FFA500"])
                np.testing.assert_allclose(info.vertices[6], [30, 10, 0], atol=1e-7)

    def test_precision_option(self):
        result = export_scene(two_orange_squares(), "3mf", threemf_mode="MINIMAL", coordinate_precision=2)
        model = self.read_xml(self.open_archive(result.data), "3D/3dmodel.model")
        vertex = model.find(".//3mf:vertex", MODEL_NAMESPACES)
        self.assertEqual(vertex.attrib["y"], "0.00")

    def test_empty_scene_raises(self):
        for mode in ("MINIMAL", "SLICER"):
            with self.subTest(mode=mode):
                with self.assertRaises(EmptyInputError):
                    export_scene(SceneNode("root"), "3mf", threemf_mode=mode)


if __name__ == "__main__":
    unittest.main()
