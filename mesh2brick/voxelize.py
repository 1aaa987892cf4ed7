"""Ray-casting parity voxelization of a normalized mesh.

Coordinate convention
---------------------
A normalized mesh spans ``[0, resolution]`` on its largest axis (see
:func:`mesh2brick.geometry.normalize_mesh`).  Voxel ``(x, y, z)`` covers
``[x, x+1] × [y, y+1] × [z, z+1]``.

Sampling
--------
``mode="single"``
    One sample at the cell centre.  The two axes orthogonal to the +X ray are
    nudged by :data:`RAY_BIAS_Y` and :data:`RAY_BIAS_Z` so the ray origin never
    lies exactly on a shared triangle edge or vertex.  The biases are of the
    same magnitude (mirror symmetry of symmetric meshes survives) but not
    identical (identical biases keep origins on 45° diagonals, where the two
    halves of a split quad meet).
``mode="supersample"``
    ``4 × 4 × 4`` samples per cell at the symmetric offsets
    :data:`SAMPLE_OFFSETS`, with the same orthogonal biases.  A cell is
    filled when at least ``ceil(fill_threshold * 64)`` samples are inside.
    Smoother on sloped surfaces, 64× the counting work.

Both modes are deterministic: the same mesh and resolution always produce
the same grid.
"""

from __future__ import annotations

import logging
import math
from typing import Literal

import numpy as np
import numpy.typing as npt

from ._math import _EPSILON, _parity_grid, _points_inside
from .errors import check_resolution
from .geometry import Mesh
from .grid import OccupancyGrid

logger = logging.getLogger(__name__)

__all__ = [
    "EPSILON",
    "RAY_BIAS_Y",
    "RAY_BIAS_Z",
    "SAMPLE_OFFSETS",
    "DEFAULT_FILL_THRESHOLD",
    "voxelize",
    "points_inside",
]

SamplingMode = Literal["single", "supersample"]

EPSILON: float = _EPSILON
RAY_BIAS_Y: float = 1.1e-6
RAY_BIAS_Z: float = 1.2e-6
SAMPLE_OFFSETS: tuple = (0.125, 0.375, 0.625, 0.875)
DEFAULT_FILL_THRESHOLD: float = 0.25


def _sample_axis(resolution: int, offsets: np.ndarray, bias: float = 0.0) -> np.ndarray:
    """Sorted sample coordinates ``cell + offset + bias`` along one axis."""
    cells = np.arange(resolution, dtype=np.float64)
    return (cells[:, None] + offsets[None, :]).ravel() + bias


def _required_samples(fill_threshold: float, per_cell: int) -> int:
    if not 0.0 < fill_threshold <= 1.0:
        raise ValueError(f"fill_threshold must be in (0, 1], got {fill_threshold}")
    return max(1, math.ceil(fill_threshold * per_cell - 1e-12))


def voxelize(
    mesh: Mesh,
    resolution: int,
    *,
    mode: SamplingMode = "single",
    fill_threshold: float = DEFAULT_FILL_THRESHOLD,
) -> OccupancyGrid:
    """Rasterize a normalized *mesh* into a ``resolution³`` occupancy grid.

    Parameters
    ----------
    mesh:
        Mesh already normalized to *resolution*.  An empty mesh yields an
        all-empty grid.
    resolution:
        Grid resolution, ``>= 2``.
    mode:
        ``"single"`` (default) or ``"supersample"``.
    fill_threshold:
        Fraction of the 64 sub-samples that must be inside for a cell to be
        filled.  Only used with ``mode="supersample"``.

    Returns
    -------
    OccupancyGrid
        Fresh grid with shape ``(resolution, resolution, resolution)``.

    Raises
    ------
    TypeError
        If *mesh* is ``None``.
    InvalidResolutionError
        If ``resolution < 2``.
    ValueError
        On an unknown *mode* or a *fill_threshold* outside ``(0, 1]``.
    """
    if mesh is None:
        raise TypeError("Mesh cannot be None")
    resolution = check_resolution(resolution)
    if mode not in ("single", "supersample"):
        raise ValueError(f"Unknown sampling mode {mode!r}; expected 'single' or 'supersample'")

    if mesh.is_empty:
        logger.debug("Empty mesh: returning empty %d^3 grid", resolution)
        return OccupancyGrid.cube(resolution)

    tris = mesh.vertices

    if mode == "single":
        centre = np.array([0.5])
        xs = _sample_axis(resolution, centre)
        ys = _sample_axis(resolution, centre, RAY_BIAS_Y)
        zs = _sample_axis(resolution, centre, RAY_BIAS_Z)
        filled = _parity_grid(tris, xs, ys, zs)
    else:
        offsets  = np.asarray(SAMPLE_OFFSETS, dtype=np.float64)
        n        = len(offsets)
        required = _required_samples(fill_threshold, n ** 3)
        xs = _sample_axis(resolution, offsets)
        ys = _sample_axis(resolution, offsets, RAY_BIAS_Y)
        zs = _sample_axis(resolution, offsets, RAY_BIAS_Z)
        inside = _parity_grid(tris, xs, ys, zs)
        counts = inside.reshape(resolution, n, resolution, n, resolution, n).sum(axis=(1, 3, 5))
        filled = counts >= required

    grid = OccupancyGrid.from_array(filled)
    logger.info(
        "Voxelized %d triangles at %d^3 (%s): %d filled",
        mesh.triangle_count, resolution, mode, grid.count_filled(),
    )
    return grid


def points_inside(mesh: Mesh, points: npt.ArrayLike) -> np.ndarray:
    """Parity occupancy test for arbitrary ``(N, 3)`` points.

    Uses the same +X ray and tolerances as :func:`voxelize`, one
    Möller–Trumbore solve per point and triangle.  Returns an ``(N,)``
    boolean array.
    """
    if mesh is None:
        raise TypeError("Mesh cannot be None")
    P = np.asarray(points, dtype=np.float64).reshape(-1, 3)
    if mesh.is_empty:
        return np.zeros(len(P), dtype=bool)
    return _points_inside(P, mesh.vertices)
