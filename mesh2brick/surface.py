"""Hollow-shell extraction from a solid occupancy grid."""

from __future__ import annotations

import logging

import numpy as np

from .grid import OccupancyGrid

logger = logging.getLogger(__name__)

__all__ = ["extract_surface"]


def extract_surface(solid: OccupancyGrid) -> OccupancyGrid:
    """Keep only filled voxels with at least one empty 6-neighbour.

    Neighbours outside the grid count as empty, so filled voxels on the grid
    boundary are always kept and an isolated voxel is its own shell.  A voxel
    whose six face neighbours are all filled is interior and dropped.

    Returns a new grid of the same shape; *solid* is not modified.
    """
    if solid is None:
        raise TypeError("OccupancyGrid cannot be None")

    cells  = solid.data
    padded = np.pad(cells, 1, mode="constant", constant_values=False)
    core   = (slice(1, -1),) * 3

    interior = cells.copy()
    for axis in range(3):
        for step in (-1, 1):
            neighbour = list(core)
            neighbour[axis] = slice(1 + step, padded.shape[axis] - 1 + step)
            interior &= padded[tuple(neighbour)]

    shell = OccupancyGrid.from_array(cells & ~interior)
    logger.debug(
        "Surface extraction: %d solid -> %d shell voxels",
        solid.count_filled(), shell.count_filled(),
    )
    return shell
