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
Public API for programmatic scene export.

These entry points turn a :class:`~io_mesh_export.scene.SceneNode` tree into
STL, OBJ, GLB or 3MF bytes.  They build the export context, run the shared
prepare stage and the chosen exporter, and return lightweight result
dataclasses.

Quick start::

    from io_mesh_export.api import export_scene, export_to_file
    from io_mesh_export.scene import SceneNode, Mesh, Transform

    square = Mesh(
        positions=[(0, 0, 0), (10, 0, 0), (10, 10, 0), (0, 10, 0)],
        indices=[(0, 1, 2), (0, 2, 3)],
        material="#FFA500",
    )
    root = SceneNode("root", children=[SceneNode("square", mesh=square)])

    result = export_scene(root, "3mf", threemf_mode="SLICER")
    print(result.status, len(result.data), result.materials)

    export_to_file(root, "/tmp/square.glb")

Async::

    result = await export_scene_async(root, "stl")

Inspect produced bytes::

    from io_mesh_export.api import inspect_export

    info = inspect_export(result.data, "3mf")
    print(info.num_objects, info.num_vertices_total, info.filament_colors)
"""

from __future__ import annotations

import asyncio
import dataclasses
import io
import json
import os
import struct
import xml.etree.ElementTree
import zipfile
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence, Tuple

import numpy as np
import trimesh
from stl import mesh as stl_mesh

from .common.colors import linear_to_srgb, rgb_to_hex
from .common.constants import (
    GLB_MAGIC,
    MODEL_DEFAULT_UNIT,
    MODEL_NAMESPACES,
    MODEL_SETTINGS_LOCATION,
    PROJECT_SETTINGS_LOCATION,
    STL_HEADER_SIZE,
)
from .common.errors import SerializationError
from .common.logging import debug, error
from .export import EXPORTERS, get_exporter
from .export.context import ExportContext, ExportOptions
from .export.prepare import prepare_scene
from .scene.types import SceneNode

__all__ = [
    # --- Core functions ---
    "export_scene",
    "export_scene_async",
    "export_to_file",
    "inspect_export",
    "batch_export",
    # --- Result types ---
    "ExportResult",
    "InspectResult",
]


# ═══════════════════════════════════════════════════════════════════════════
# Result dataclasses
# ═══════════════════════════════════════════════════════════════════════════

@dataclass
class ExportResult:
    """Return value from :func:`export_scene`.

    Attributes:
        status: ``"FINISHED"`` on success, ``"CANCELLED"`` on failure (only
            :func:`batch_export` produces cancelled results).
        format: Format key the scene was exported as (``"3mf"`` etc.).
        data: The serialised file contents.
        filepath: Absolute path of the written file, if one was written.
        num_written: Number of mesh leaves in the output.
        num_vertices: Total vertex count over all written leaves.
        num_triangles: Total triangle count over all written leaves.
        materials: ``#RRGGBB`` colour of each distinct material, in id order.
        warnings: Accumulated warning messages (if any).
    """

    status: str = "FINISHED"
    format: str = ""
    data: bytes = b""
    filepath: str = ""
    num_written: int = 0
    num_vertices: int = 0
    num_triangles: int = 0
    materials: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


@dataclass
class InspectResult:
    """Return value from :func:`inspect_export`.

    A read-back summary of an exported blob.

    Attributes:
        status: ``"OK"`` on success, ``"ERROR"`` on failure.
        error_message: Human-readable error string when ``status == "ERROR"``.
        format: The format the blob was read as.
        unit: The unit declared in a 3MF model file.
        metadata: Top-level ``<metadata>`` key/value pairs of a 3MF model.
        objects: Per-mesh summary dicts with ``"name"``, ``"num_vertices"``
            and ``"num_triangles"`` keys.
        materials: Distinct ``#RRGGBB`` colours referenced by the meshes.
        filament_colors: The full filament colour list of a slicer 3MF.
        archive_files: Entry names of a 3MF archive, in archive order.
        num_objects: Number of mesh objects.
        num_vertices_total: Sum of all vertex counts.
        num_triangles_total: Sum of all triangle counts.
        vertices: All vertex positions as an ``(N, 3)`` array.
        warnings: Accumulated warnings during inspection.
    """

    status: str = "OK"
    error_message: str = ""
    format: str = ""
    unit: str = ""
    metadata: Dict[str, str] = field(default_factory=dict)
    objects: List[Dict] = field(default_factory=list)
    materials: List[str] = field(default_factory=list)
    filament_colors: List[str] = field(default_factory=list)
    archive_files: List[str] = field(default_factory=list)
    num_objects: int = 0
    num_vertices_total: int = 0
    num_triangles_total: int = 0
    vertices: np.ndarray = field(default_factory=lambda: np.zeros((0, 3)))
    warnings: List[str] = field(default_factory=list)


# ═══════════════════════════════════════════════════════════════════════════
# Callback type aliases (for documentation clarity)
# ═══════════════════════════════════════════════════════════════════════════

# Called with (warning_message: str)
WarningCallback = Callable[[str], None]


# ═══════════════════════════════════════════════════════════════════════════
# export_scene: the synchronous pipeline
# ═══════════════════════════════════════════════════════════════════════════

def _build_options(options: Optional[ExportOptions], overrides: Dict) -> ExportOptions:
    if options is None:
        options = ExportOptions(**overrides)
    elif overrides:
        options = dataclasses.replace(options, **overrides)
    options.validate()
    return options


def export_scene(
    scene: SceneNode,
    fmt: str,
    options: Optional[ExportOptions] = None,
    *,
    reporter=None,
    on_warning: Optional[WarningCallback] = None,
    **option_overrides,
) -> ExportResult:
    """Export a scene tree to bytes in the given format.

    :param scene: Root :class:`SceneNode` of the tree to export.
    :param fmt: ``"stl"``, ``"obj"``, ``"glb"`` or ``"3mf"``.
    :param options: Export options; defaults to :class:`ExportOptions()`.
    :param reporter: Anything with ``report(level, message)``.
    :param on_warning: Called with each warning message as it happens.
    :param option_overrides: Individual :class:`ExportOptions` fields.
    :return: :class:`ExportResult` holding the serialised bytes.
    :raises ValueError: For unknown formats or invalid options.
    :raises EmptyInputError: When no leaf has any usable geometry.
    :raises SerializationError: When the output can't be written.

    Example::

        result = export_scene(root, "3mf", threemf_mode="MINIMAL")
        with open("out.3mf", "wb") as f:
            f.write(result.data)
    """
    exporter_class = get_exporter(fmt)
    options = _build_options(options, option_overrides)
    ctx = ExportContext(options=options, reporter=reporter, on_warning=on_warning)

    prepared = prepare_scene(scene, ctx)
    exporter = exporter_class(ctx)
    data = exporter.execute(prepared)

    return ExportResult(
        status="FINISHED",
        format=fmt.lower().lstrip("."),
        data=data,
        num_written=ctx.num_written,
        num_vertices=prepared.num_vertices,
        num_triangles=prepared.num_triangles,
        materials=prepared.registry.hex_colors(),
        warnings=list(ctx.warnings),
    )


async def export_scene_async(
    scene: SceneNode,
    fmt: str,
    options: Optional[ExportOptions] = None,
    **kwargs,
) -> ExportResult:
    """Awaitable :func:`export_scene`.

    The export runs on a worker thread so the event loop stays responsive.
    Exceptions propagate to the awaiting caller.
    """
    return await asyncio.to_thread(export_scene, scene, fmt, options, **kwargs)


def _format_from_path(filepath: str) -> str:
    extension = os.path.splitext(filepath)[1].lower()
    for key, exporter_class in EXPORTERS.items():
        if exporter_class.file_extension == extension:
            return key
    raise ValueError(f"Can't infer the export format from {filepath!r}")


def export_to_file(
    scene: SceneNode,
    filepath: str,
    fmt: Optional[str] = None,
    options: Optional[ExportOptions] = None,
    **kwargs,
) -> ExportResult:
    """Export a scene and write it to ``filepath``.

    The format is taken from the file extension when ``fmt`` is omitted.
    Nothing is written when the export fails.

    :raises SerializationError: When the file can't be written.
    """
    if fmt is None:
        fmt = _format_from_path(filepath)
    result = export_scene(scene, fmt, options, **kwargs)

    filepath = os.path.abspath(filepath)
    try:
        with open(filepath, "wb") as f:
            f.write(result.data)
    except EnvironmentError as e:
        error(f"Unable to write to {filepath}: {e}")
        raise SerializationError(f"Unable to write to {filepath}: {e}") from e

    result.filepath = filepath
    debug(f"Wrote {len(result.data)} bytes to {filepath}")
    return result


# ═══════════════════════════════════════════════════════════════════════════
# Batch operations
# ═══════════════════════════════════════════════════════════════════════════

def batch_export(
    items: Sequence[Tuple[SceneNode, str]],
    *,
    on_warning: Optional[WarningCallback] = None,
    **export_kwargs,
) -> List[ExportResult]:
    """Export multiple scenes in sequence with per-file error isolation.

    :param items: Sequence of ``(scene, filepath)`` tuples.
    :param on_warning: Warning callback forwarded to each export.
    :param export_kwargs: Keyword arguments forwarded to :func:`export_to_file`.
    :return: List of :class:`ExportResult`, one per item (same order).
    """
    results: List[ExportResult] = []
    for scene, fp in items:
        try:
            r = export_to_file(scene, fp, on_warning=on_warning, **export_kwargs)
        except Exception as e:
            error(f"batch_export: Failed on {fp}: {e}")
            r = ExportResult(status="CANCELLED", filepath=fp, warnings=[str(e)])
        results.append(r)
    return results


# ═══════════════════════════════════════════════════════════════════════════
# inspect_export: read-back summary of produced bytes
# ═══════════════════════════════════════════════════════════════════════════

def inspect_export(data: bytes, fmt: str) -> InspectResult:
    """Summarise an exported blob without any other tooling.

    :param data: The bytes returned by :func:`export_scene`.
    :param fmt: The format the bytes are in.
    :return: :class:`InspectResult` with counts, colours and vertices.

    Example::

        info = inspect_export(result.data, "glb")
        if info.status == "OK":
            print(info.num_objects, info.materials)
    """
    fmt = fmt.lower().lstrip(".")
    result = InspectResult(format=fmt)
    readers = {
        "stl": _inspect_stl,
        "obj": _inspect_obj,
        "glb": _inspect_glb,
        "3mf": _inspect_3mf,
    }
    reader = readers.get(fmt)
    if reader is None:
        result.status = "ERROR"
        result.error_message = f"Unknown format {fmt!r}"
        return result

    try:
        reader(data, result)
    except (ValueError, KeyError, IndexError, struct.error, zipfile.BadZipFile,
            xml.etree.ElementTree.ParseError) as e:
        result.status = "ERROR"
        result.error_message = f"Unable to read {fmt.upper()} data: {e}"
        return result

    result.num_objects = len(result.objects)
    result.num_vertices_total = sum(o["num_vertices"] for o in result.objects)
    result.num_triangles_total = sum(o["num_triangles"] for o in result.objects)
    return result


# ═══════════════════════════════════════════════════════════════════════════
# Internal helpers
# ═══════════════════════════════════════════════════════════════════════════

def _inspect_stl(data: bytes, result: InspectResult) -> None:
    """Binary STL: one triangle soup, three vertices per facet."""
    (count,) = struct.unpack_from("<I", data, STL_HEADER_SIZE - 4)
    records = np.frombuffer(data, dtype=stl_mesh.Mesh.dtype, count=count, offset=STL_HEADER_SIZE)
    result.vertices = records["vectors"].reshape(-1, 3).astype(np.float64)
    result.objects.append(
        {"name": "", "num_vertices": count * 3, "num_triangles": count}
    )


def _inspect_obj(data: bytes, result: InspectResult) -> None:
    vertices = []
    num_faces = 0
    for line in data.decode("utf-8").splitlines():
        parts = line.split()
        if not parts:
            continue
        if parts[0] == "v":
            vertices.append([float(p) for p in parts[1:4]])
        elif parts[0] == "f":
            num_faces += 1
    result.vertices = np.array(vertices, dtype=np.float64).reshape(-1, 3)
    result.objects.append(
        {"name": "", "num_vertices": len(vertices), "num_triangles": num_faces}
    )


def _inspect_glb(data: bytes, result: InspectResult) -> None:
    magic, _version, length = struct.unpack_from("<III", data, 0)
    if magic != GLB_MAGIC:
        raise ValueError("Not a GLB file")
    if length != len(data):
        raise ValueError(f"Header says {length} bytes, got {len(data)}")

    loaded = trimesh.load(io.BytesIO(data), file_type="glb", process=False)
    scene = loaded if isinstance(loaded, trimesh.Scene) else trimesh.Scene(loaded)

    all_vertices = []
    for name, geometry in scene.geometry.items():
        vertices = np.asarray(geometry.vertices, dtype=np.float64).reshape(-1, 3)
        all_vertices.append(vertices)
        result.objects.append(
            {"name": name, "num_vertices": len(vertices), "num_triangles": len(geometry.faces)}
        )
        color = _glb_base_color(geometry)
        if color is not None and color not in result.materials:
            result.materials.append(color)

    if all_vertices:
        result.vertices = np.concatenate(all_vertices)


def _glb_base_color(geometry) -> Optional[str]:
    """sRGB hex of a geometry's linear ``baseColorFactor``, if it has one."""
    material = getattr(geometry.visual, "material", None)
    factor = getattr(material, "baseColorFactor", None)
    if factor is None:
        return None
    factor = np.asarray(factor)
    linear = factor[:3] / 255.0 if factor.dtype.kind in "ui" else factor[:3]
    return rgb_to_hex(*(linear_to_srgb(float(c)) for c in linear))


def _inspect_3mf(data: bytes, result: InspectResult) -> None:
    with zipfile.ZipFile(io.BytesIO(data), "r") as archive:
        result.archive_files = archive.namelist()
        model_paths = [name for name in result.archive_files if name.lower().endswith(".model")]
        if not model_paths:
            raise ValueError("No .model files found in archive")

        all_vertices = []
        base_colors: Dict[Tuple[str, int], str] = {}
        object_materials: List[Tuple[str, int]] = []
        for model_path in model_paths:
            root = xml.etree.ElementTree.fromstring(archive.read(model_path))
            if not result.unit:
                result.unit = root.attrib.get("unit", MODEL_DEFAULT_UNIT)
            for meta_node in root.iterfind("./3mf:metadata", MODEL_NAMESPACES):
                name = meta_node.attrib.get("name", "")
                if name:
                    result.metadata[name] = meta_node.text or ""

            for group in root.iterfind("./3mf:resources/3mf:basematerials", MODEL_NAMESPACES):
                for index, base in enumerate(group.iterfind("./3mf:base", MODEL_NAMESPACES)):
                    base_colors[(group.attrib["id"], index)] = base.attrib.get("displaycolor", "")[:7].upper()

            for obj_node in root.iterfind("./3mf:resources/3mf:object", MODEL_NAMESPACES):
                if obj_node.find("./3mf:mesh", MODEL_NAMESPACES) is None:
                    continue  # Assemblies only hold components.
                vertex_nodes = obj_node.findall("./3mf:mesh/3mf:vertices/3mf:vertex", MODEL_NAMESPACES)
                triangle_nodes = obj_node.findall("./3mf:mesh/3mf:triangles/3mf:triangle", MODEL_NAMESPACES)
                all_vertices.extend(
                    [float(v.attrib["x"]), float(v.attrib["y"]), float(v.attrib["z"])] for v in vertex_nodes
                )
                result.objects.append(
                    {
                        "name": obj_node.attrib.get("name", ""),
                        "num_vertices": len(vertex_nodes),
                        "num_triangles": len(triangle_nodes),
                    }
                )
                if "pid" in obj_node.attrib:
                    object_materials.append((obj_node.attrib["pid"], int(obj_node.attrib.get("pindex", "0"))))

        result.vertices = np.array(all_vertices, dtype=np.float64).reshape(-1, 3)

        if PROJECT_SETTINGS_LOCATION in result.archive_files:
            settings = json.loads(archive.read(PROJECT_SETTINGS_LOCATION).decode("utf-8"))
            result.filament_colors = [c.upper() for c in settings.get("filament_colour", [])]
        extruders = []
        if MODEL_SETTINGS_LOCATION in result.archive_files:
            config = xml.etree.ElementTree.fromstring(archive.read(MODEL_SETTINGS_LOCATION))
            for meta in config.iterfind("./object/part/metadata"):
                if meta.attrib.get("key") == "extruder":
                    extruders.append(int(meta.attrib["value"]))

    for key in object_materials:
        color = base_colors.get(key)
        if color and color not in result.materials:
            result.materials.append(color)
    for extruder in sorted(set(extruders)):
        if 0 < extruder <= len(result.filament_colors):
            color = result.filament_colors[extruder - 1]
            if color not in result.materials:
                result.materials.append(color)
