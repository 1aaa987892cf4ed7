"""Geometry value types, bounding boxes and mesh normalization.

The value types are immutable and compared by value.  Numerical work is done
on the ``(F, 3, 3)`` float64 view returned by :attr:`Mesh.vertices`, the
same triangle layout the STL loader produces.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import cached_property
from typing import Iterator, Tuple

import numpy as np
import numpy.typing as npt

from .errors import (
    DegenerateGeometryError,
    EmptyGeometryError,
    check_resolution,
)

logger = logging.getLogger(__name__)

_Array = npt.NDArray[np.float64]

__all__ = [
    "Point3",
    "Triangle",
    "Mesh",
    "Bounds",
    "compute_bounds",
    "normalize_mesh",
]


# ===========================================================================
# Value types
# ===========================================================================

@dataclass(frozen=True)
class Point3:
    """A point in 3-D space."""

    x: float
    y: float
    z: float

    def as_tuple(self) -> Tuple[float, float, float]:
        return (self.x, self.y, self.z)


@dataclass(frozen=True)
class Triangle:
    """Ordered vertex triple.  Order only matters for export winding."""

    v1: Point3
    v2: Point3
    v3: Point3

    def __post_init__(self) -> None:
        for name in ("v1", "v2", "v3"):
            if getattr(self, name) is None:
                raise ValueError(f"Triangle vertex {name} cannot be None")

    def __iter__(self) -> Iterator[Point3]:
        return iter((self.v1, self.v2, self.v3))


@dataclass(frozen=True)
class Mesh:
    """Immutable, ordered collection of triangles.

    A mesh with zero triangles is legal and represents empty geometry.
    Any iterable of :class:`Triangle` is accepted and stored as a tuple.
    """

    triangles: Tuple[Triangle, ...] = ()

    def __post_init__(self) -> None:
        if self.triangles is None:
            raise ValueError("Mesh triangles cannot be None")
        tris = tuple(self.triangles)
        for i, tri in enumerate(tris):
            if not isinstance(tri, Triangle):
                raise ValueError(
                    f"Mesh triangle at index {i} must be a Triangle, "
                    f"got {type(tri).__name__}"
                )
        object.__setattr__(self, "triangles", tris)

    def __len__(self) -> int:
        return len(self.triangles)

    def __iter__(self) -> Iterator[Triangle]:
        return iter(self.triangles)

    @property
    def triangle_count(self) -> int:
        return len(self.triangles)

    @property
    def is_empty(self) -> bool:
        return not self.triangles

    @cached_property
    def vertices(self) -> _Array:
        """Read-only ``(F, 3, 3)`` float64 array; ``vertices[i, j]`` is vertex j of triangle i."""
        arr = np.array(
            [[v.as_tuple() for v in tri] for tri in self.triangles],
            dtype=np.float64,
        ).reshape(-1, 3, 3)
        arr.flags.writeable = False
        return arr

    def to_array(self) -> _Array:
        """Return a writable copy of :attr:`vertices`."""
        return self.vertices.copy()

    @classmethod
    def from_array(cls, triangles: npt.ArrayLike) -> Mesh:
        """Build a mesh from an ``(F, 3, 3)`` array of vertex coordinates."""
        arr = np.asarray(triangles, dtype=np.float64)
        if arr.size == 0:
            return cls(())
        if arr.ndim != 3 or arr.shape[1:] != (3, 3):
            raise ValueError(f"Expected an (F, 3, 3) array, got shape {arr.shape}")
        return cls(
            Triangle(*(Point3(float(x), float(y), float(z)) for x, y, z in tri))
            for tri in arr
        )


# ===========================================================================
# BoundsCalculator
# ===========================================================================

@dataclass(frozen=True)
class Bounds:
    """Axis-aligned bounding box of a mesh."""

    min_x: float
    min_y: float
    min_z: float
    max_x: float
    max_y: float
    max_z: float

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    @property
    def depth(self) -> float:
        return self.max_z - self.min_z

    @property
    def min_corner(self) -> Point3:
        return Point3(self.min_x, self.min_y, self.min_z)

    @property
    def max_corner(self) -> Point3:
        return Point3(self.max_x, self.max_y, self.max_z)

    @property
    def extents(self) -> Tuple[float, float, float]:
        return (self.width, self.height, self.depth)

    @property
    def max_dimension(self) -> float:
        return max(self.extents)


def compute_bounds(mesh: Mesh) -> Bounds:
    """Component-wise min/max over every vertex of every triangle.

    Raises
    ------
    EmptyGeometryError
        If *mesh* contains no triangles.
    """
    if mesh is None:
        raise TypeError("Mesh cannot be None")
    if mesh.is_empty:
        raise EmptyGeometryError("Mesh must contain at least one triangle")

    pts = mesh.vertices.reshape(-1, 3)
    lo  = pts.min(axis=0)
    hi  = pts.max(axis=0)
    return Bounds(
        float(lo[0]), float(lo[1]), float(lo[2]),
        float(hi[0]), float(hi[1]), float(hi[2]),
    )


# ===========================================================================
# MeshNormalizer
# ===========================================================================

def normalize_mesh(mesh: Mesh, resolution: int) -> Mesh:
    """Map *mesh* into voxel space ``[0, resolution]`` on its largest axis.

    The mesh is translated so its bounding-box minimum is the origin, then
    scaled by the single factor ``resolution / max(width, height, depth)``.
    The same factor applies to all three axes, so aspect ratio is preserved;
    the smaller axes span proportionally less than ``resolution``.

    Parameters
    ----------
    mesh:
        Input mesh with at least one triangle.
    resolution:
        Target voxel grid resolution, ``>= 2``.

    Returns
    -------
    Mesh
        A new mesh with minimum corner ``(0, 0, 0)`` and largest extent
        exactly ``resolution``.

    Raises
    ------
    InvalidResolutionError
        If ``resolution < 2``.
    EmptyGeometryError
        If the mesh has no triangles.
    DegenerateGeometryError
        If the largest bounding-box dimension is zero.
    """
    if mesh is None:
        raise TypeError("Mesh cannot be None")
    resolution = check_resolution(resolution)

    box = compute_bounds(mesh)
    max_dim = box.max_dimension
    if not max_dim > 0.0:
        raise DegenerateGeometryError("Mesh is degenerate (zero size)")

    scale  = resolution / max_dim
    origin = np.array([box.min_x, box.min_y, box.min_z])
    hi     = np.array([box.max_x, box.max_y, box.max_z])

    tris = (mesh.to_array() - origin) * scale

    # (max - min) * (R / (max - min)) can land one ulp off R; pin every
    # axis tied for largest so its extent is exactly the resolution.
    for axis in np.flatnonzero((hi - origin) == max_dim):
        tris[..., axis][mesh.vertices[..., axis] == hi[axis]] = float(resolution)

    logger.debug(
        "Normalized %d triangles: scale=%.6g, extents=%s",
        mesh.triangle_count, scale, tuple(np.round((hi - origin) * scale, 6)),
    )
    return Mesh.from_array(tris)
