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
Archive management for 3MF export.

Functions for building the 3MF ZIP container:
- package_archive: Zip a list of (path, content) parts into bytes
- content_types_xml: The [Content_Types].xml part
- relationships_xml: A .rels part
"""

import io
import xml.etree.ElementTree
import zipfile
from typing import Iterable, List, Sequence, Tuple, Union

from ..common.constants import (
    CONTENT_TYPES_NAMESPACE,
    GCODE_MIMETYPE,
    MODEL_MIMETYPE,
    MODEL_REL,
    PNG_MIMETYPE,
    RELS_MIMETYPE,
    RELS_NAMESPACE,
)
from ..common.errors import SerializationError
from ..common.logging import debug, error
from ..common.xml import xml_to_bytes

__all__ = [
    "package_archive",
    "content_types_xml",
    "relationships_xml",
    "check_part_path",
    "SLICER_CONTENT_TYPES",
]

PartContent = Union[str, bytes]


def check_part_path(path: str) -> None:
    """
    Refuse archive paths that strict 3MF consumers would misread.

    Paths are kept exactly as given, so they have to be relative and use
    forward slashes already.

    :raises SerializationError: For an empty, absolute or backslashed path.
    """
    if not path or path.endswith("/"):
        raise SerializationError(f"Invalid archive path: {path!r}")
    if path.startswith("/"):
        raise SerializationError(f"Archive paths must be relative: {path!r}")
    if "\\" in path:
        raise SerializationError(f"Archive paths must use forward slashes: {path!r}")
    if any(segment in ("", ".", "..") for segment in path.split("/")):
        raise SerializationError(f"Invalid archive path: {path!r}")


def package_archive(
    parts: Iterable[Tuple[str, PartContent]],
    compresslevel: int = 9,
) -> bytes:
    """
    Write parts into a Deflate-compressed zip held in memory.

    Entries keep the given order and path casing.  Text content is encoded
    as UTF-8.

    :param parts: ``(archive_path, content)`` pairs.
    :param compresslevel: zlib level, 0-9.
    :return: The finished archive.
    :raises SerializationError: On a bad or repeated path, or if zipping fails.
    """
    seen = set()
    buffer = io.BytesIO()
    try:
        with zipfile.ZipFile(
            buffer, "w", compression=zipfile.ZIP_DEFLATED, compresslevel=compresslevel
        ) as archive:
            for path, content in parts:
                check_part_path(path)
                if path in seen:
                    raise SerializationError(f"Duplicate archive path: {path}")
                seen.add(path)
                if isinstance(content, str):
                    content = content.encode("UTF-8")
                archive.writestr(path, content)
                debug(f"Wrote {path} ({len(content)} bytes)")
    except SerializationError:
        raise
    except (zipfile.BadZipFile, zipfile.LargeZipFile, OSError, ValueError, TypeError) as e:
        error(f"Unable to assemble archive: {e}")
        raise SerializationError(f"Unable to assemble archive: {e}") from e
    return buffer.getvalue()


def content_types_xml(extra_defaults: Sequence[Tuple[str, str]] = ()) -> bytes:
    """
    Build ``[Content_Types].xml``.

    ``rels`` and ``model`` are always declared; ``extra_defaults`` adds more
    ``(extension, mimetype)`` pairs after them.
    """
    root = xml.etree.ElementTree.Element("Types", attrib={"xmlns": CONTENT_TYPES_NAMESPACE})
    defaults: List[Tuple[str, str]] = [("rels", RELS_MIMETYPE), ("model", MODEL_MIMETYPE)]
    defaults.extend(extra_defaults)
    for extension, mimetype in defaults:
        xml.etree.ElementTree.SubElement(
            root, "Default", attrib={"Extension": extension, "ContentType": mimetype}
        )
    return xml_to_bytes(root)


SLICER_CONTENT_TYPES = (("png", PNG_MIMETYPE), ("gcode", GCODE_MIMETYPE))


def relationships_xml(targets: Sequence[str], id_prefix: str = "rel") -> bytes:
    """
    Build a ``.rels`` part with one 3D model relationship per target.

    Targets are absolute package paths such as ``/3D/3dmodel.model``.
    An empty ``targets`` gives an empty ``<Relationships>`` element.
    """
    root = xml.etree.ElementTree.Element("Relationships", attrib={"xmlns": RELS_NAMESPACE})
    for index, target in enumerate(targets):
        xml.etree.ElementTree.SubElement(
            root,
            "Relationship",
            attrib={"Target": target, "Id": f"{id_prefix}{index}", "Type": MODEL_REL},
        )
    return xml_to_bytes(root)
