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
Registry of the 3MF extensions the packaged writer can emit.

The slicer-compatible layout needs the Production extension (external object
files referenced by path) and the BambuStudio vendor namespace that Orca Slicer
and BambuStudio look for. The minimal layout uses neither.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional

from .constants import BAMBU_NAMESPACE, PRODUCTION_NAMESPACE


class ExtensionType(Enum):
    """Type of 3MF extension."""

    OFFICIAL = "official"  # Official 3MF Consortium extension
    VENDOR = "vendor"  # Vendor-specific extension


@dataclass
class Extension:
    """
    A 3MF extension the writer knows how to declare.

    Attributes:
        namespace: XML namespace URI for this extension
        prefix: Preferred XML namespace prefix
        name: Human-readable name
        extension_type: Whether this is an official or vendor-specific extension
        required: Whether this extension must be declared in requiredextensions
        vendor_attribute: Optional metadata entry the vendor expects, with its value
    """

    namespace: str
    prefix: str
    name: str
    extension_type: ExtensionType
    required: bool = False
    vendor_attribute: Optional[str] = None
    vendor_value: str = "1"


PRODUCTION_EXTENSION = Extension(
    namespace=PRODUCTION_NAMESPACE,
    prefix="p",
    name="Production",
    extension_type=ExtensionType.OFFICIAL,
    required=True,  # Required when using multi-file structure (Orca/BambuStudio)
)

ORCA_EXTENSION = Extension(
    namespace=BAMBU_NAMESPACE,
    prefix="BambuStudio",
    name="Orca Slicer / BambuStudio",
    extension_type=ExtensionType.VENDOR,
    required=False,
    vendor_attribute="BambuStudio:3mfVersion",
)

# Maps namespace URI to Extension object
EXTENSION_REGISTRY: Dict[str, Extension] = {
    PRODUCTION_EXTENSION.namespace: PRODUCTION_EXTENSION,
    ORCA_EXTENSION.namespace: ORCA_EXTENSION,
}


class ExtensionManager:
    """
    Tracks the extensions active for one export call.

    Activation order is kept so the generated attributes are stable.
    """

    def __init__(self):
        self._active_extensions: List[str] = []

    def activate(self, namespace: str) -> None:
        """
        Activate an extension by its namespace URI.

        Raises:
            ValueError: If the namespace is not registered
        """
        if namespace not in EXTENSION_REGISTRY:
            raise ValueError(f"Unknown extension namespace: {namespace}")
        if namespace not in self._active_extensions:
            self._active_extensions.append(namespace)

    def get_active_extensions(self) -> List[Extension]:
        return [EXTENSION_REGISTRY[ns] for ns in self._active_extensions]

    def get_required_extensions_string(self) -> str:
        """
        Build the ``requiredextensions`` attribute value for the model element.

        3MF lists prefixes here, not namespace URIs, e.g. ``"p"``.
        Returns an empty string if no required extension is active.
        """
        return " ".join(ext.prefix for ext in self.get_active_extensions() if ext.required)

    def get_namespace_declarations(self) -> Dict[str, str]:
        """``xmlns:<prefix>`` attributes for every active extension."""
        return {f"xmlns:{ext.prefix}": ext.namespace for ext in self.get_active_extensions()}

    def get_vendor_attributes(self) -> Dict[str, str]:
        """
        Vendor metadata entries for the root model, as ``{name: value}``.
        """
        attrs = {}
        for ext in self.get_active_extensions():
            if ext.extension_type == ExtensionType.VENDOR and ext.vendor_attribute:
                attrs[ext.vendor_attribute] = ext.vendor_value
        return attrs


# IDE and Documentation support.
__all__ = [
    "Extension",
    "ExtensionType",
    "ExtensionManager",
    "EXTENSION_REGISTRY",
    "PRODUCTION_EXTENSION",
    "ORCA_EXTENSION",
]
