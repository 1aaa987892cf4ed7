"""Deterministic greedy brick placement over a shell grid.

Algorithm
---------
Layers are processed bottom-up (z ascending); each layer is scanned y
ascending, then x ascending, always in that one direction.  At every filled
cell not yet covered the footprints are tried in the given priority order
and the first one that fits is placed:

* every cell of ``[x, x+W) × [y, y+D)`` on layer z is inside the grid,
* filled in the shell,
* and not covered by an earlier brick.

Bricks are one layer tall; nothing is merged across layers.  With a ``1x1``
footprint in the list a fit always exists, so running out of candidates is
an internal-consistency failure (:class:`PlacementError`).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Sequence

import numpy as np

from .catalog import FORBIDDEN_FOOTPRINT, Footprint
from .errors import PlacementError
from .grid import OccupancyGrid

logger = logging.getLogger(__name__)

__all__ = ["Brick", "place_bricks"]


@dataclass(frozen=True)
class Brick:
    """A footprint placed at voxel ``(x, y, z)``, one layer tall.

    Upper bounds :attr:`max_x`, :attr:`max_y`, :attr:`max_z` are exclusive.
    """

    x: int
    y: int
    z: int
    width: int
    depth: int
    height: int = 1

    def __post_init__(self) -> None:
        for name in ("x", "y", "z"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be >= 0, got: {getattr(self, name)}")
        for name in ("width", "depth", "height"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be > 0, got: {getattr(self, name)}")

    @classmethod
    def at(cls, x: int, y: int, z: int, footprint: Footprint) -> Brick:
        return cls(x, y, z, footprint.width, footprint.depth)

    @property
    def footprint(self) -> Footprint:
        return Footprint(self.width, self.depth)

    @property
    def max_x(self) -> int:
        return self.x + self.width

    @property
    def max_y(self) -> int:
        return self.y + self.depth

    @property
    def max_z(self) -> int:
        return self.z + self.height

    @property
    def volume(self) -> int:
        return self.width * self.depth * self.height

    def overlaps(self, other: Brick) -> bool:
        """True if the two axis-aligned volumes share any cell."""
        return not (
            self.max_x <= other.x or self.x >= other.max_x
            or self.max_y <= other.y or self.y >= other.max_y
            or self.max_z <= other.z or self.z >= other.max_z
        )

    def cells(self):
        """Yield every ``(x, y, z)`` voxel covered by the brick."""
        for z in range(self.z, self.max_z):
            for y in range(self.y, self.max_y):
                for x in range(self.x, self.max_x):
                    yield x, y, z


def _check_footprints(footprints: Sequence[Footprint]) -> List[Footprint]:
    if footprints is None:
        raise ValueError("footprints must not be None")
    footprints = list(footprints)
    if not footprints:
        raise ValueError("footprints must not be empty")
    if FORBIDDEN_FOOTPRINT in footprints:
        raise ValueError(f"footprint {FORBIDDEN_FOOTPRINT} is a forbidden orientation")
    return footprints


def place_bricks(shell: OccupancyGrid, footprints: Sequence[Footprint]) -> List[Brick]:
    """Tile every filled voxel of *shell* with exactly one brick.

    Parameters
    ----------
    shell:
        Grid to cover, usually from :func:`mesh2brick.surface.extract_surface`.
    footprints:
        Candidate footprints, highest priority first (see
        :func:`mesh2brick.catalog.allowed_footprints`).

    Returns
    -------
    list of Brick
        In placement order: layer, then row, then column.

    Raises
    ------
    ValueError
        If *footprints* is empty or contains the forbidden ``1x2``.
    PlacementError
        If some filled, uncovered cell admits no footprint.
    """
    if shell is None:
        raise TypeError("shell must not be None")
    footprints = _check_footprints(footprints)

    filled  = shell.data
    width, height, depth = shell.shape
    bricks: List[Brick] = []

    for z in range(depth):
        # cells still to cover on this layer
        free = filled[:, :, z].copy()
        if not free.any():
            continue
        for y in range(height):
            for x in range(width):
                if not free[x, y]:
                    continue
                for fp in footprints:
                    x1 = x + fp.width
                    y1 = y + fp.depth
                    if x1 > width or y1 > height:
                        continue
                    if free[x:x1, y:y1].all():
                        break
                else:
                    raise PlacementError(
                        f"Cannot place any brick at ({x}, {y}, {z}); "
                        f"footprints {', '.join(map(str, footprints))} must include 1x1"
                    )
                free[x:x1, y:y1] = False
                bricks.append(Brick.at(x, y, z, fp))

    logger.info(
        "Placed %d bricks over %d shell voxels",
        len(bricks), int(np.count_nonzero(filled)),
    )
    return bricks
