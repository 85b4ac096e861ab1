"""
Unit tests for ``io_mesh_export.scene.flatten``.

Tests geometry reading and the depth-first walk of the scene tree.
"""

import unittest

import numpy as np

from io_mesh_export.common.errors import InvalidGeometryError
from io_mesh_export.scene.flatten import flatten_scene, read_geometry
from io_mesh_export.scene.types import Mesh, SceneNode, Transform, HasColor, Colorless


def _triangle(**kwargs) -> Mesh:
    return Mesh(positions=[(0, 0, 0), (1, 0, 0), (0, 1, 0)], indices=[(0, 1, 2)], **kwargs)


# ============================================================================
# read_geometry
# ============================================================================


class TestReadGeometry(unittest.TestCase):

    def test_indexed(self):
        vertices, triangles = read_geometry(_triangle())
        self.assertEqual(vertices.shape, (3, 3))
        self.assertEqual(vertices.dtype, np.float64)
        np.testing.assert_array_equal(triangles, [[0, 1, 2]])

    def test_flat_streams(self):
        mesh = Mesh(positions=[0, 0, 0, 1, 0, 0, 0, 1, 0], indices=[0, 1, 2])
        vertices, triangles = read_geometry(mesh)
        self.assertEqual(vertices.shape, (3, 3))
        self.assertEqual(triangles.shape, (1, 3))

    def test_non_indexed(self):
        mesh = Mesh(positions=np.zeros((6, 3)))
        _, triangles = read_geometry(mesh)
        np.testing.assert_array_equal(triangles, [[0, 1, 2], [3, 4, 5]])

    def test_missing_positions(self):
        vertices, triangles = read_geometry(Mesh())
        self.assertEqual(vertices.shape, (0, 3))
        self.assertEqual(triangles.shape, (0, 3))

    def test_copies_input(self):
        positions = np.zeros((3, 3))
        vertices, _ = read_geometry(Mesh(positions=positions, indices=[0, 1, 2]))
        vertices[0, 0] = 5.0
        self.assertEqual(positions[0, 0], 0.0)

    def test_positions_not_triplets(self):
        with self.assertRaises(InvalidGeometryError):
            read_geometry(Mesh(positions=[0, 0, 0, 1]))

    def test_non_indexed_not_triplets(self):
        with self.assertRaises(InvalidGeometryError):
            read_geometry(Mesh(positions=np.zeros((4, 3))))

    def test_indices_not_triplets(self):
        with self.assertRaises(InvalidGeometryError):
            read_geometry(Mesh(positions=np.zeros((3, 3)), indices=[0, 1]))

    def test_float_indices(self):
        with self.assertRaises(InvalidGeometryError):
            read_geometry(Mesh(positions=np.zeros((3, 3)), indices=[0.0, 1.0, 2.0]))


# ============================================================================
# flatten_scene
# ============================================================================


class TestFlattenScene(unittest.TestCase):

    def test_single_leaf(self):
        records = flatten_scene(SceneNode("only", mesh=_triangle()))
        self.assertEqual(len(records), 1)
        self.assertEqual(records[0].name, "only")

    def test_pre_order(self):
        root = SceneNode("root").add(
            SceneNode("g1").add(SceneNode("a", mesh=_triangle()), SceneNode("b", mesh=_triangle())),
            SceneNode("c", mesh=_triangle()),
        )
        self.assertEqual([r.name for r in flatten_scene(root)], ["a", "b", "c"])

    def test_mesh_before_children(self):
        parent = SceneNode("parent", mesh=_triangle()).add(SceneNode("child", mesh=_triangle()))
        self.assertEqual([r.name for r in flatten_scene(parent)], ["parent", "child"])

    def test_world_matrix_composed(self):
        leaf = SceneNode("leaf", transform=Transform(translation=(0, 5, 0)), mesh=_triangle())
        root = SceneNode("root", transform=Transform(translation=(10, 0, 0))).add(leaf)
        (record,) = flatten_scene(root)
        np.testing.assert_allclose(record.world_matrix[:3, 3], [10, 5, 0])

    def test_parent_scale_applies_to_child_translation(self):
        leaf = SceneNode("leaf", transform=Transform(translation=(1, 0, 0)), mesh=_triangle())
        root = SceneNode("root", transform=Transform(scale=(3, 3, 3))).add(leaf)
        (record,) = flatten_scene(root)
        np.testing.assert_allclose(record.world_matrix[:3, 3], [3, 0, 0])

    def test_vertices_stay_local(self):
        leaf = SceneNode("leaf", transform=Transform(translation=(100, 0, 0)), mesh=_triangle())
        (record,) = flatten_scene(SceneNode("root").add(leaf))
        self.assertEqual(record.vertices_local[1, 0], 1.0)

    def test_default_names(self):
        root = SceneNode().add(SceneNode(mesh=_triangle()), SceneNode(mesh=_triangle(name="named")))
        self.assertEqual([r.name for r in flatten_scene(root)], ["Mesh_1", "named"])

    def test_colors_resolved(self):
        root = SceneNode().add(SceneNode("a", mesh=_triangle(material="#FF0000")), SceneNode("b", mesh=_triangle()))
        a, b = flatten_scene(root)
        self.assertEqual(a.color, HasColor((255, 0, 0)))
        self.assertIsInstance(b.color, Colorless)

    def test_empty_leaf_kept(self):
        (record,) = flatten_scene(SceneNode("empty", mesh=Mesh()))
        self.assertTrue(record.is_empty)
        self.assertIsNone(record.problem)

    def test_broken_leaf_has_problem(self):
        (record,) = flatten_scene(SceneNode("broken", mesh=Mesh(positions=[0, 1])))
        self.assertTrue(record.is_empty)
        self.assertIsNotNone(record.problem)

    def test_group_only_scene(self):
        self.assertEqual(flatten_scene(SceneNode("root").add(SceneNode("g"))), [])

    def test_shared_node_raises(self):
        shared = SceneNode("shared", mesh=_triangle())
        root = SceneNode("root").add(SceneNode("a").add(shared), SceneNode("b").add(shared))
        with self.assertRaises(InvalidGeometryError):
            flatten_scene(root)

    def test_cycle_raises(self):
        root = SceneNode("root")
        child = SceneNode("child")
        root.add(child)
        child.add(root)
        with self.assertRaises(InvalidGeometryError):
            flatten_scene(root)

    def test_tree_not_modified(self):
        leaf = SceneNode("leaf", transform=Transform(translation=(1, 2, 3)), mesh=_triangle())
        root = SceneNode("root", transform=Transform(scale=(2, 2, 2))).add(leaf)
        flatten_scene(root)
        self.assertEqual(leaf.transform.translation, (1, 2, 3))
        self.assertEqual(root.children, [leaf])


if __name__ == "__main__":
    unittest.main()
