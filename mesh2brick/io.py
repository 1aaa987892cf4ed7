"""Mesh file loading (OBJ, STL) and OBJ export of grids and bricks.

Loading
-------
:func:`load_obj`
    ``v`` and ``f`` records only; faces must be triangles.  Everything else
    (``vn``, ``vt``, ``o``, ``g``, ``usemtl``, comments) is ignored.
:func:`load_stl`
    Binary or ASCII STL.  Binary is detected by the size invariant
    ``len == 84 + 50 * F`` rather than the ``solid`` keyword, which some CAD
    tools also write at the start of binary files.

Export
------
Each brick or filled voxel becomes one cuboid object (8 vertices, 12
triangles with outward winding) in a plain-text OBJ file for viewing.
"""

from __future__ import annotations

import logging
import struct
from pathlib import Path
from typing import Iterable, List, Sequence, Tuple, Union

import numpy as np

from .errors import MeshFormatError
from .geometry import Mesh
from .grid import OccupancyGrid
from .placement import Brick

logger = logging.getLogger(__name__)

__all__ = [
    "load_obj",
    "load_stl",
    "load_mesh",
    "export_bricks_obj",
    "export_voxels_obj",
]

_PathLike = Union[str, Path]


# ---------------------------------------------------------------------------
# OBJ loading
# ---------------------------------------------------------------------------

def _parse_float(token: str, what: str) -> float:
    try:
        return float(token)
    except ValueError:
        raise MeshFormatError(f"Invalid number for {what}: {token}") from None


def _parse_index(token: str, vertex_count: int) -> int:
    """Resolve an OBJ face element (``i``, ``i/j``, ``i//k``, ``i/j/k``) to a 0-based index."""
    head = token.split("/")[0]
    try:
        index = int(head)
    except ValueError:
        raise MeshFormatError(f"Invalid vertex index: {token}") from None
    if index == 0:
        raise MeshFormatError("Vertex index must be non-zero (OBJ is 1-based)")
    resolved = index - 1 if index > 0 else vertex_count + index
    if not 0 <= resolved < vertex_count:
        raise MeshFormatError(
            f"Vertex index {index} is out of range (only {vertex_count} vertices defined)"
        )
    return resolved


def load_obj(path: _PathLike) -> Mesh:
    """Load a triangulated OBJ file.

    Raises
    ------
    MeshFormatError
        On a malformed vertex or face line, with the offending line number.
    """
    path = Path(path)
    vertices: List[Tuple[float, float, float]] = []
    faces: List[Tuple[int, int, int]] = []

    with path.open(encoding="utf-8", errors="replace") as fh:
        for lineno, raw in enumerate(fh, start=1):
            line = raw.strip()
            if not line or line.startswith("#"):
                continue
            tokens = line.split()
            try:
                if tokens[0] == "v":
                    if len(tokens) < 4:
                        raise MeshFormatError("Vertex line must have at least 3 coordinates")
                    vertices.append((
                        _parse_float(tokens[1], "vertex x"),
                        _parse_float(tokens[2], "vertex y"),
                        _parse_float(tokens[3], "vertex z"),
                    ))
                elif tokens[0] == "f":
                    if len(tokens) < 4:
                        raise MeshFormatError("Face must have at least 3 vertices")
                    if len(tokens) > 4:
                        raise MeshFormatError(
                            f"Only triangulated faces are supported; face has "
                            f"{len(tokens) - 1} vertices"
                        )
                    faces.append(tuple(  # type: ignore[arg-type]
                        _parse_index(t, len(vertices)) for t in tokens[1:4]
                    ))
            except MeshFormatError as exc:
                raise MeshFormatError(f"{path.name}, line {lineno}: {exc}") from exc

    if not faces:
        return Mesh(())
    verts = np.asarray(vertices, dtype=np.float64)
    mesh = Mesh.from_array(verts[np.asarray(faces)])
    logger.debug("Loaded %s: %d vertices, %d triangles", path, len(vertices), len(faces))
    return mesh


# ---------------------------------------------------------------------------
# STL loading
# ---------------------------------------------------------------------------

def _load_binary_stl(raw: bytes) -> np.ndarray:
    count = struct.unpack_from("<I", raw, 80)[0]
    # Each record: 12 bytes normal + 36 bytes vertices + 2 bytes attr = 50 bytes
    dtype = np.dtype([
        ("normal", "<f4", (3,)),
        ("vertices", "<f4", (3, 3)),
        ("attr", "<u2"),
    ])
    records = np.frombuffer(raw, dtype=dtype, count=count, offset=84)
    return records["vertices"].astype(np.float64)  # (F, 3, 3)


def _load_ascii_stl(text: str) -> np.ndarray:
    verts: list[list[float]] = []
    for line in text.splitlines():
        line = line.strip()
        if line.startswith("vertex"):
            parts = line.split()
            if len(parts) < 4:
                raise MeshFormatError(f"Malformed STL vertex line: {line!r}")
            verts.append([
                _parse_float(parts[1], "vertex x"),
                _parse_float(parts[2], "vertex y"),
                _parse_float(parts[3], "vertex z"),
            ])
    if len(verts) % 3:
        raise MeshFormatError(f"STL vertex count {len(verts)} is not a multiple of 3")
    return np.array(verts, dtype=np.float64).reshape(-1, 3, 3)


def load_stl(path: _PathLike) -> Mesh:
    """Load a binary or ASCII STL file.  Facet normals are discarded."""
    path = Path(path)
    raw = path.read_bytes()
    if len(raw) >= 84:
        count = struct.unpack_from("<I", raw, 80)[0]
        if len(raw) == 84 + 50 * count:
            return Mesh.from_array(_load_binary_stl(raw))
    return Mesh.from_array(_load_ascii_stl(raw.decode("ascii", errors="replace")))


def load_mesh(path: _PathLike) -> Mesh:
    """Load ``.obj`` or ``.stl`` by file suffix."""
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix == ".obj":
        return load_obj(path)
    if suffix == ".stl":
        return load_stl(path)
    raise MeshFormatError(f"Unsupported mesh format {suffix!r} (expected .obj or .stl)")


# ---------------------------------------------------------------------------
# OBJ export
# ---------------------------------------------------------------------------

# Corner order: 1..4 bottom (z0) counter-clockwise from (x0, y0), 5..8 top.
_CUBOID_FACES: Tuple[Tuple[int, int, int], ...] = (
    (1, 3, 2), (1, 4, 3),   # -Z
    (5, 6, 7), (5, 7, 8),   # +Z
    (1, 2, 6), (1, 6, 5),   # -Y
    (2, 3, 7), (2, 7, 6),   # +X
    (3, 4, 8), (3, 8, 7),   # +Y
    (4, 1, 5), (4, 5, 8),   # -X
)


def _fmt(value: float) -> str:
    return repr(float(value))


def _cuboid_lines(
    name: str,
    lo: Sequence[float],
    hi: Sequence[float],
    vertex_offset: int,
) -> List[str]:
    x0, y0, z0 = lo
    x1, y1, z1 = hi
    corners = (
        (x0, y0, z0), (x1, y0, z0), (x1, y1, z0), (x0, y1, z0),
        (x0, y0, z1), (x1, y0, z1), (x1, y1, z1), (x0, y1, z1),
    )
    lines = ["", f"o {name}"]
    lines += [f"v {_fmt(x)} {_fmt(y)} {_fmt(z)}" for x, y, z in corners]
    lines += [
        f"f {vertex_offset + a - 1} {vertex_offset + b - 1} {vertex_offset + c - 1}"
        for a, b, c in _CUBOID_FACES
    ]
    return lines


def _write_obj(path: Path, header: Iterable[str], body: List[str]) -> None:
    if path.parent != Path(""):
        path.parent.mkdir(parents=True, exist_ok=True)
    text = "\n".join([*header, *body]) + "\n"
    path.write_text(text, encoding="utf-8")


def export_bricks_obj(bricks: Sequence[Brick], path: _PathLike) -> None:
    """Write *bricks* as one cuboid object (``brick_<i>``) each."""
    if bricks is None:
        raise ValueError("bricks must not be None")
    path = Path(path)
    body: List[str] = []
    offset = 1
    for i, brick in enumerate(bricks):
        body += _cuboid_lines(
            f"brick_{i}",
            (brick.x, brick.y, brick.z),
            (brick.max_x, brick.max_y, brick.max_z),
            offset,
        )
        offset += 8
    _write_obj(path, ["# mesh2brick brick export", f"# brick_count {len(bricks)}"], body)
    logger.info("Exported %d bricks to %s", len(bricks), path)


def export_voxels_obj(grid: OccupancyGrid, path: _PathLike) -> None:
    """Write each filled voxel of *grid* as a unit cube (``voxel_<i>``)."""
    if grid is None:
        raise ValueError("grid must not be None")
    path = Path(path)
    body: List[str] = []
    offset = 1
    count = 0
    for i, (x, y, z) in enumerate(grid.filled_voxels()):
        body += _cuboid_lines(f"voxel_{i}", (x, y, z), (x + 1, y + 1, z + 1), offset)
        offset += 8
        count += 1
    _write_obj(path, ["# mesh2brick voxel export", f"# voxel_count {count}"], body)
    logger.info("Exported %d voxels to %s", count, path)
