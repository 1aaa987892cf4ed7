"""Tests for mesh2brick.voxelize."""
from __future__ import annotations

import numpy as np
import numpy.testing as npt
import pytest

from conftest import make_box_triangles
from mesh2brick.errors import InvalidResolutionError
from mesh2brick.geometry import Mesh, normalize_mesh
from mesh2brick.voxelize import (
    DEFAULT_FILL_THRESHOLD,
    RAY_BIAS_Y,
    RAY_BIAS_Z,
    SAMPLE_OFFSETS,
    points_inside,
    voxelize,
)


def _voxelize(mesh, res, **kwargs):
    return voxelize(normalize_mesh(mesh, res), res, **kwargs)


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

class TestConstants:
    def test_biases_close_but_distinct(self):
        assert RAY_BIAS_Y != RAY_BIAS_Z
        assert 0.5 < RAY_BIAS_Y / RAY_BIAS_Z < 2.0

    def test_offsets_symmetric(self):
        offsets = np.asarray(SAMPLE_OFFSETS)
        npt.assert_allclose(offsets + offsets[::-1], 1.0)

    def test_default_threshold(self):
        assert DEFAULT_FILL_THRESHOLD == 0.25


# ---------------------------------------------------------------------------
# Single-sample mode
# ---------------------------------------------------------------------------

class TestVoxelizeSingle:
    def test_unit_cube_res2(self, unit_cube):
        grid = _voxelize(unit_cube, 2)
        assert grid.shape == (2, 2, 2)
        assert grid.count_filled() == 8

    def test_unit_cube_fills_grid(self, unit_cube):
        grid = _voxelize(unit_cube, 5)
        assert grid.count_filled() == 125

    def test_flat_box_fills_proportionally(self):
        # 4 x 2 x 1 box at resolution 8 spans 8 x 4 x 2 voxels
        mesh = Mesh.from_array(make_box_triangles((0, 0, 0), (4, 2, 1)))
        grid = _voxelize(mesh, 8)
        expected = np.zeros((8, 8, 8), dtype=bool)
        expected[:8, :4, :2] = True
        npt.assert_array_equal(grid.to_array(), expected)

    def test_sphere_volume(self, sphere):
        res  = 20
        grid = _voxelize(sphere, res)
        expected = 4.0 / 3.0 * np.pi * (res / 2) ** 3
        assert abs(grid.count_filled() - expected) / expected < 0.1

    def test_sphere_centre_filled_corners_empty(self, sphere):
        grid = _voxelize(sphere, 10)
        assert grid.is_filled(5, 5, 5)
        assert not grid.is_filled(0, 0, 0)
        assert not grid.is_filled(9, 9, 9)

    def test_deterministic(self, sphere):
        assert _voxelize(sphere, 12) == _voxelize(sphere, 12)

    def test_pyramid_mirror_symmetry(self, pyramid):
        data = _voxelize(pyramid, 8).to_array()
        assert data.any()
        npt.assert_array_equal(data, data[::-1, :, :])
        npt.assert_array_equal(data, data[:, ::-1, :])

    def test_pyramid_layers_shrink(self, pyramid):
        data   = _voxelize(pyramid, 8).to_array()
        counts = data.sum(axis=(0, 1))
        assert counts[0] > 0
        assert all(a >= b for a, b in zip(counts, counts[1:]))


# ---------------------------------------------------------------------------
# Supersampling mode
# ---------------------------------------------------------------------------

class TestVoxelizeSupersample:
    def test_unit_cube_res2(self, unit_cube):
        assert _voxelize(unit_cube, 2, mode="supersample").count_filled() == 8

    def test_pyramid_mirror_symmetry(self, pyramid):
        data = _voxelize(pyramid, 8, mode="supersample").to_array()
        assert data.any()
        npt.assert_array_equal(data, data[::-1, :, :])
        npt.assert_array_equal(data, data[:, ::-1, :])

    def test_threshold_monotone(self, sphere):
        loose  = _voxelize(sphere, 10, mode="supersample", fill_threshold=0.1)
        medium = _voxelize(sphere, 10, mode="supersample", fill_threshold=0.5)
        strict = _voxelize(sphere, 10, mode="supersample", fill_threshold=1.0)
        assert loose.count_filled() >= medium.count_filled() >= strict.count_filled()
        # strict cells are fully inside, hence also filled in the looser grids
        assert not (strict.to_array() & ~medium.to_array()).any()

    def test_half_threshold_close_to_single(self, sphere):
        single = _voxelize(sphere, 16).count_filled()
        half   = _voxelize(sphere, 16, mode="supersample", fill_threshold=0.5).count_filled()
        assert abs(single - half) / single < 0.1

    def test_partial_cell(self):
        # slab covering the lower half of each cell in z at resolution 2:
        # 0..2 x 0..2 x 0..1.5 -> top layer is half covered
        mesh = Mesh.from_array(make_box_triangles((0, 0, 0), (2, 2, 1.5)))
        half = voxelize(mesh, 2, mode="supersample", fill_threshold=0.5)
        more = voxelize(mesh, 2, mode="supersample", fill_threshold=0.75)
        assert half.count_filled() == 8
        assert more.count_filled() == 4

    @pytest.mark.parametrize("bad", [0.0, -0.1, 1.5])
    def test_bad_threshold(self, unit_cube, bad):
        with pytest.raises(ValueError):
            _voxelize(unit_cube, 2, mode="supersample", fill_threshold=bad)


# ---------------------------------------------------------------------------
# Edge cases
# ---------------------------------------------------------------------------

class TestVoxelizeEdgeCases:
    def test_empty_mesh(self):
        grid = voxelize(Mesh(), 6)
        assert grid.shape == (6, 6, 6)
        assert grid.count_filled() == 0

    @pytest.mark.parametrize("mode", ["single", "supersample"])
    def test_empty_mesh_both_modes(self, mode):
        assert voxelize(Mesh(), 3, mode=mode).count_filled() == 0

    def test_resolution_one(self, unit_cube):
        with pytest.raises(InvalidResolutionError):
            voxelize(unit_cube, 1)

    def test_none_mesh(self):
        with pytest.raises(TypeError):
            voxelize(None, 4)

    def test_unknown_mode(self, unit_cube):
        with pytest.raises(ValueError, match="mode"):
            voxelize(unit_cube, 4, mode="stochastic")

    def test_fresh_grid_each_call(self, unit_cube):
        mesh = normalize_mesh(unit_cube, 3)
        assert voxelize(mesh, 3) is not voxelize(mesh, 3)


class TestPointsInside:
    def test_box(self, unit_cube):
        # off the y == z face diagonals
        pts = np.array([[0.5, 0.4, 0.6], [1.5, 0.4, 0.6], [0.5, 0.5, -0.2], [0.1, 0.9, 0.3]])
        assert list(points_inside(unit_cube, pts)) == [True, False, False, True]

    def test_empty_mesh(self):
        assert points_inside(Mesh(), np.zeros((3, 3))).tolist() == [False] * 3
