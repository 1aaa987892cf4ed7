"""Tests for mesh2brick.surface."""
from __future__ import annotations

import numpy as np
import numpy.testing as npt
import pytest

from mesh2brick.grid import OccupancyGrid
from mesh2brick.surface import extract_surface


def _brute_force_shell(mask: np.ndarray) -> np.ndarray:
    W, H, D = mask.shape
    out = np.zeros_like(mask)
    for x in range(W):
        for y in range(H):
            for z in range(D):
                if not mask[x, y, z]:
                    continue
                for dx, dy, dz in [(1,0,0),(-1,0,0),(0,1,0),(0,-1,0),(0,0,1),(0,0,-1)]:
                    nx, ny, nz = x + dx, y + dy, z + dz
                    if not (0 <= nx < W and 0 <= ny < H and 0 <= nz < D) or not mask[nx, ny, nz]:
                        out[x, y, z] = True
                        break
    return out


class TestExtractSurface:
    def test_full_cube_drops_interior(self):
        shell = extract_surface(OccupancyGrid.from_array(np.ones((4, 4, 4), dtype=bool)))
        assert shell.count_filled() == 64 - 8
        assert not shell.is_filled(1, 1, 1)
        assert not shell.is_filled(2, 2, 2)

    def test_small_cube_all_boundary(self):
        shell = extract_surface(OccupancyGrid.from_array(np.ones((2, 2, 2), dtype=bool)))
        assert shell.count_filled() == 8

    def test_isolated_voxel_kept(self):
        grid = OccupancyGrid(5, 5, 5)
        grid.set_filled(2, 2, 2)
        shell = extract_surface(grid)
        assert shell.is_filled(2, 2, 2)
        assert shell.count_filled() == 1

    def test_interior_block_in_larger_grid(self):
        mask = np.zeros((7, 7, 7), dtype=bool)
        mask[1:6, 1:6, 1:6] = True
        shell = extract_surface(OccupancyGrid.from_array(mask))
        assert shell.count_filled() == 125 - 27

    def test_empty(self):
        assert extract_surface(OccupancyGrid(3, 3, 3)).count_filled() == 0

    def test_matches_brute_force(self):
        rng  = np.random.default_rng(42)
        mask = rng.random((6, 5, 7)) < 0.7
        shell = extract_surface(OccupancyGrid.from_array(mask))
        npt.assert_array_equal(shell.to_array(), _brute_force_shell(mask))

    def test_subset_of_input(self):
        rng  = np.random.default_rng(7)
        mask = rng.random((8, 8, 8)) < 0.8
        shell = extract_surface(OccupancyGrid.from_array(mask)).to_array()
        assert not (shell & ~mask).any()

    def test_input_not_modified(self):
        grid   = OccupancyGrid.from_array(np.ones((3, 3, 3), dtype=bool))
        before = grid.to_array()
        extract_surface(grid)
        npt.assert_array_equal(grid.to_array(), before)

    def test_none(self):
        with pytest.raises(TypeError):
            extract_surface(None)
