"""Boolean occupancy grid shared by the voxelizer, shell extractor and placer."""

from __future__ import annotations

import os
from typing import Iterator, Tuple

import numpy as np
import numpy.typing as npt

from .errors import GridIndexError

_Mask = npt.NDArray[np.bool_]
_Shape3D = Tuple[int, int, int]

__all__ = ["OccupancyGrid", "save_npy"]


class OccupancyGrid:
    """Three-dimensional boolean field over ``[0, W) × [0, H) × [0, D)``.

    Cells are addressed ``(x, y, z)``.  Reads outside the grid return
    ``False``; writes outside the grid raise :class:`GridIndexError`.

    The producing stage fills the grid through :meth:`set_filled` (or hands
    over a finished mask via :meth:`from_array`); consumers only see the
    read-only :attr:`data` view.
    """

    def __init__(self, width: int, height: int, depth: int) -> None:
        if width <= 0 or height <= 0 or depth <= 0:
            raise ValueError(
                f"All dimensions must be > 0: width={width}, "
                f"height={height}, depth={depth}"
            )
        self._cells: _Mask = np.zeros((width, height, depth), dtype=bool)

    @classmethod
    def from_array(cls, mask: npt.ArrayLike) -> OccupancyGrid:
        """Wrap a copy of a ``(W, H, D)`` boolean array."""
        arr = np.array(mask, dtype=bool)
        if arr.ndim != 3:
            raise ValueError(f"Expected a 3-D mask, got shape {arr.shape}")
        grid = cls(*arr.shape)
        grid._cells[...] = arr
        return grid

    @classmethod
    def cube(cls, resolution: int) -> OccupancyGrid:
        return cls(resolution, resolution, resolution)

    # ------------------------------------------------------------------
    # Shape
    # ------------------------------------------------------------------

    @property
    def shape(self) -> _Shape3D:
        return self._cells.shape  # type: ignore[return-value]

    @property
    def width(self) -> int:
        return self._cells.shape[0]

    @property
    def height(self) -> int:
        return self._cells.shape[1]

    @property
    def depth(self) -> int:
        return self._cells.shape[2]

    def in_bounds(self, x: int, y: int, z: int) -> bool:
        w, h, d = self._cells.shape
        return 0 <= x < w and 0 <= y < h and 0 <= z < d

    # ------------------------------------------------------------------
    # Access
    # ------------------------------------------------------------------

    @property
    def data(self) -> _Mask:
        """Read-only view of the cells, indexed ``[x, y, z]``."""
        view = self._cells.view()
        view.flags.writeable = False
        return view

    def to_array(self) -> _Mask:
        return self._cells.copy()

    def is_filled(self, x: int, y: int, z: int) -> bool:
        if not self.in_bounds(x, y, z):
            return False
        return bool(self._cells[x, y, z])

    def set_filled(self, x: int, y: int, z: int, filled: bool = True) -> None:
        if not self.in_bounds(x, y, z):
            raise GridIndexError(
                f"Voxel coordinates out of bounds: x={x}, y={y}, z={z} "
                f"(shape {self.shape})"
            )
        self._cells[x, y, z] = filled

    def count_filled(self) -> int:
        return int(np.count_nonzero(self._cells))

    def filled_voxels(self) -> Iterator[Tuple[int, int, int]]:
        """Yield filled ``(x, y, z)`` coordinates, z slowest then y then x."""
        zyx = np.argwhere(self._cells.transpose(2, 1, 0))
        for z, y, x in zyx:
            yield int(x), int(y), int(z)

    # ------------------------------------------------------------------
    # Dunder
    # ------------------------------------------------------------------

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, OccupancyGrid):
            return NotImplemented
        return self.shape == other.shape and bool(np.array_equal(self._cells, other._cells))

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        w, h, d = self.shape
        return f"OccupancyGrid({w}x{h}x{d}, filled={self.count_filled()})"


def save_npy(path: str, grid: OccupancyGrid) -> None:
    """Save the cells of *grid* to *path* (creates parent directories if needed)."""
    out_dir = os.path.dirname(path)
    if out_dir:
        os.makedirs(out_dir, exist_ok=True)
    np.save(path, grid.to_array())
