"""Tests for the mesh2brick command line."""
from __future__ import annotations

import logging

import numpy as np
import pytest

from conftest import make_box_triangles
from mesh2brick.cli import build_parser, main


def _write_cube_obj(path, size=1.0):
    tris  = make_box_triangles((0, 0, 0), (size, size, size))
    lines = []
    for i, tri in enumerate(tris):
        for v in tri:
            lines.append(f"v {v[0]} {v[1]} {v[2]}")
        lines.append(f"f {3 * i + 1} {3 * i + 2} {3 * i + 3}")
    path.write_text("\n".join(lines) + "\n")
    return path


@pytest.fixture(autouse=True)
def _reset_package_logger():
    yield
    logger = logging.getLogger("mesh2brick")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def cube_obj(tmp_path):
    return _write_cube_obj(tmp_path / "cube.obj")


class TestParser:
    def test_defaults(self):
        args = build_parser().parse_args(["m.obj", "8"])
        assert args.resolution == 8
        assert args.export == "brick"
        assert args.mode == "single"
        assert args.catalog is None
        assert args.fill_threshold == 0.25

    def test_bad_mode_exits_2(self, capsys):
        with pytest.raises(SystemExit) as exc:
            main(["m.obj", "8", "--mode", "random"])
        assert exc.value.code == 2

    def test_non_integer_resolution_exits_2(self):
        with pytest.raises(SystemExit) as exc:
            main(["m.obj", "eight"])
        assert exc.value.code == 2

    @pytest.mark.parametrize("value", ["0", "1.5", "-0.25", "abc"])
    def test_bad_fill_threshold_exits_2(self, cube_obj, value, capsys):
        with pytest.raises(SystemExit) as exc:
            main([str(cube_obj), "2", "--mode", "supersample", "--fill-threshold", value])
        assert exc.value.code == 2
        assert "--fill-threshold" in capsys.readouterr().err

    def test_fill_threshold_upper_bound_accepted(self):
        args = build_parser().parse_args(["m.obj", "8", "--fill-threshold", "1"])
        assert args.fill_threshold == 1.0


class TestMain:
    def test_report(self, cube_obj, capsys):
        assert main([str(cube_obj), "2"]) == 0
        out = capsys.readouterr().out
        assert "Triangles:       12" in out
        assert "Shell voxels:    8" in out
        assert "Bricks:          2" in out

    def test_brick_export(self, cube_obj, tmp_path, capsys):
        out_path = tmp_path / "out" / "bricks.obj"
        assert main([str(cube_obj), "2", "--out", str(out_path)]) == 0
        assert out_path.read_text().count("o brick_") == 2
        assert "Wrote brick export" in capsys.readouterr().out

    @pytest.mark.parametrize("kind, count", [("voxel-surface", 26), ("voxel-solid", 27)])
    def test_voxel_exports(self, cube_obj, tmp_path, kind, count):
        out_path = tmp_path / f"{kind}.obj"
        assert main([str(cube_obj), "3", "--out", str(out_path), "--export", kind]) == 0
        assert out_path.read_text().count("o voxel_") == count

    def test_custom_catalog(self, cube_obj, tmp_path, capsys):
        catalog = tmp_path / "parts.csv"
        catalog.write_text(
            "category_name,stud_x,stud_y,height_units,active\n"
            "Bricks,1,1,1,true\n"
        )
        assert main([str(cube_obj), "2", "--catalog", str(catalog)]) == 0
        assert "Bricks:          8" in capsys.readouterr().out

    def test_supersample(self, cube_obj, capsys):
        assert main([str(cube_obj), "2", "--mode", "supersample", "--fill-threshold", "0.5"]) == 0
        assert "Solid voxels:    8" in capsys.readouterr().out

    def test_invalid_resolution(self, cube_obj, capsys):
        assert main([str(cube_obj), "1"]) == 1
        assert "Resolution must be >= 2" in capsys.readouterr().err

    def test_missing_mesh(self, tmp_path, capsys):
        assert main([str(tmp_path / "missing.obj"), "4"]) == 1
        assert "error" in capsys.readouterr().err

    def test_bad_catalog(self, cube_obj, tmp_path, capsys):
        catalog = tmp_path / "parts.csv"
        catalog.write_text("category_name,stud_x,stud_y,height_units,active\nBricks,2,2,1,true\n")
        assert main([str(cube_obj), "2", "--catalog", str(catalog)]) == 1
        assert "1x1" in capsys.readouterr().err

    def test_npy_export(self, cube_obj, tmp_path, capsys):
        out = tmp_path / "shell.npy"
        assert main([str(cube_obj), "2", "--npy", str(out)]) == 0
        grid = np.load(out)
        assert grid.dtype == np.bool_
        assert grid.shape == (2, 2, 2)
        assert int(grid.sum()) == 8
        assert f"Wrote shell grid to {out}" in capsys.readouterr().out

    def test_log_file(self, cube_obj, tmp_path):
        log_path = tmp_path / "run.log"
        assert main([str(cube_obj), "2", "-v", "--log-file", str(log_path)]) == 0
        assert "Placed 2 bricks" in log_path.read_text()
