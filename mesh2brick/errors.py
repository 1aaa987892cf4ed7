"""Exception taxonomy for mesh2brick.

Every error derives from :class:`Mesh2BrickError` *and* from the builtin it
refines, so callers may catch either ``Mesh2BrickError`` or e.g. ``ValueError``.
Nothing in the core retries or suppresses these; they propagate to the caller.
"""

from __future__ import annotations

import numbers

__all__ = [
    "Mesh2BrickError",
    "InvalidResolutionError",
    "EmptyGeometryError",
    "DegenerateGeometryError",
    "CatalogError",
    "PlacementError",
    "GridIndexError",
    "MeshFormatError",
]


class Mesh2BrickError(Exception):
    """Base class for all mesh2brick errors."""


class InvalidResolutionError(Mesh2BrickError, ValueError):
    """Grid resolution is not an integer >= 2."""


class EmptyGeometryError(Mesh2BrickError, ValueError):
    """An operation that needs bounds was given a mesh with no triangles."""


class DegenerateGeometryError(Mesh2BrickError, ValueError):
    """The mesh bounding box has zero extent on its largest axis."""


class CatalogError(Mesh2BrickError, ValueError):
    """The parts catalog is malformed or yields no usable footprints."""


class PlacementError(Mesh2BrickError, RuntimeError):
    """A filled, uncovered shell cell admits no footprint at all."""


class GridIndexError(Mesh2BrickError, IndexError):
    """Write to a grid coordinate outside ``[0, dimension)``."""


class MeshFormatError(Mesh2BrickError, ValueError):
    """A mesh file could not be parsed."""


def check_resolution(resolution: int) -> int:
    """Return *resolution* as an ``int`` or raise :class:`InvalidResolutionError`."""
    if isinstance(resolution, bool) or not isinstance(resolution, numbers.Integral):
        raise InvalidResolutionError(
            f"Resolution must be an integer, got {type(resolution).__name__}"
        )
    if resolution < 2:
        raise InvalidResolutionError(f"Resolution must be >= 2, got {resolution}")
    return int(resolution)
