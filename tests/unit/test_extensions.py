"""
Unit tests for ``io_mesh_export.common.extensions``.

Tests the Extension registry and ExtensionManager.
"""

import unittest

from io_mesh_export.common.constants import BAMBU_NAMESPACE, PRODUCTION_NAMESPACE
from io_mesh_export.common.extensions import (
    ExtensionType,
    ExtensionManager,
    EXTENSION_REGISTRY,
    PRODUCTION_EXTENSION,
    ORCA_EXTENSION,
)


# ============================================================================
# Registry
# ============================================================================


class TestRegistry(unittest.TestCase):
    """Known extensions and their declared properties."""

    def test_production_required(self):
        self.assertEqual(PRODUCTION_EXTENSION.prefix, "p")
        self.assertTrue(PRODUCTION_EXTENSION.required)
        self.assertEqual(PRODUCTION_EXTENSION.namespace, PRODUCTION_NAMESPACE)

    def test_orca_is_vendor(self):
        self.assertEqual(ORCA_EXTENSION.extension_type, ExtensionType.VENDOR)
        self.assertFalse(ORCA_EXTENSION.required)
        self.assertEqual(ORCA_EXTENSION.namespace, BAMBU_NAMESPACE)

    def test_registry_keyed_by_namespace(self):
        for namespace, ext in EXTENSION_REGISTRY.items():
            with self.subTest(prefix=ext.prefix):
                self.assertEqual(ext.namespace, namespace)


# ============================================================================
# ExtensionManager
# ============================================================================


class TestExtensionManager(unittest.TestCase):

    def setUp(self):
        self.manager = ExtensionManager()

    def test_starts_empty(self):
        self.assertEqual(self.manager.get_active_extensions(), [])
        self.assertEqual(self.manager.get_required_extensions_string(), "")
        self.assertEqual(self.manager.get_namespace_declarations(), {})
        self.assertEqual(self.manager.get_vendor_attributes(), {})

    def test_activate_unknown_raises(self):
        with self.assertRaises(ValueError):
            self.manager.activate("http://example.com/unknown")

    def test_activate_is_idempotent(self):
        self.manager.activate(PRODUCTION_NAMESPACE)
        self.manager.activate(PRODUCTION_NAMESPACE)
        self.assertEqual(len(self.manager.get_active_extensions()), 1)

    def test_slicer_pair(self):
        self.manager.activate(PRODUCTION_NAMESPACE)
        self.manager.activate(BAMBU_NAMESPACE)
        self.assertEqual(self.manager.get_required_extensions_string(), "p")
        self.assertEqual(
            self.manager.get_namespace_declarations(),
            {"xmlns:p": PRODUCTION_NAMESPACE, "xmlns:BambuStudio": BAMBU_NAMESPACE},
        )
        self.assertEqual(self.manager.get_vendor_attributes(), {"BambuStudio:3mfVersion": "1"})

    def test_activation_order_kept(self):
        self.manager.activate(BAMBU_NAMESPACE)
        self.manager.activate(PRODUCTION_NAMESPACE)
        prefixes = [ext.prefix for ext in self.manager.get_active_extensions()]
        self.assertEqual(prefixes, ["BambuStudio", "p"])


if __name__ == "__main__":
    unittest.main()
