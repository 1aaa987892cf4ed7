"""Convert a few procedural meshes to bricks and render them on one page.

Each shape is normalized, voxelized, hollowed and tiled with the bundled
catalog; the bricks are drawn with matplotlib's 3-D voxels, coloured by
footprint.

Usage::

    python scripts/brick_gallery.py                    # saves brick_gallery.png
    python scripts/brick_gallery.py --out my_file.png
    python scripts/brick_gallery.py --res 12           # faster, coarser
    python scripts/brick_gallery.py --mode supersample

Requirements: numpy, matplotlib
"""
from __future__ import annotations

import argparse
import logging
import os
import sys

# Ensure the repo root (parent of scripts/) is importable regardless of cwd
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import numpy as np

from mesh2brick import Mesh, footprints_from_csv, run_pipeline
from mesh2brick.logging_config import setup_logging


# ---------------------------------------------------------------------------
# Shape catalogue  (label, (F, 3, 3) triangles)
# ---------------------------------------------------------------------------

def _box(hx: float, hy: float, hz: float) -> np.ndarray:
    v = np.array([
        [-hx, -hy, -hz], [ hx, -hy, -hz], [ hx,  hy, -hz], [-hx,  hy, -hz],
        [-hx, -hy,  hz], [ hx, -hy,  hz], [ hx,  hy,  hz], [-hx,  hy,  hz],
    ])
    faces = [
        (0, 2, 1), (0, 3, 2), (4, 5, 6), (4, 6, 7),
        (0, 4, 7), (0, 7, 3), (1, 2, 6), (1, 6, 5),
        (0, 1, 5), (0, 5, 4), (3, 7, 6), (3, 6, 2),
    ]
    return np.array([[v[i], v[j], v[k]] for i, j, k in faces])


def _pyramid(base: float, height: float) -> np.ndarray:
    a, b = np.array([0., 0., 0.]), np.array([base, 0., 0.])
    c, d = np.array([base, base, 0.]), np.array([0., base, 0.])
    apex = np.array([base / 2, base / 2, height])
    return np.array([[a, c, b], [a, d, c], [a, b, apex], [b, c, apex], [c, d, apex], [d, a, apex]])


def _surface_of_revolution(profile, n_u: int, n_v: int, closed_v: bool) -> np.ndarray:
    """Triangulate ``profile(u, v) -> (x, y, z)`` on a (u, v) grid, u periodic."""
    us = np.linspace(0.0, 2.0 * np.pi, n_u + 1)[:-1]
    vs = (np.linspace(0.0, 2.0 * np.pi, n_v + 1)[:-1] if closed_v
          else np.linspace(0.0, np.pi, n_v + 1))
    rows = len(vs) if closed_v else len(vs) - 1
    tris = []
    for j in range(rows):
        j1 = (j + 1) % len(vs)
        for i in range(n_u):
            i1 = (i + 1) % n_u
            p00, p10 = profile(us[i], vs[j]), profile(us[i1], vs[j])
            p01, p11 = profile(us[i], vs[j1]), profile(us[i1], vs[j1])
            if closed_v or j > 0:
                tris.append([p00, p01, p10])
            if closed_v or j < rows - 1:
                tris.append([p10, p01, p11])
    return np.array(tris)


def _sphere(r: float) -> np.ndarray:
    return _surface_of_revolution(
        lambda u, v: r * np.array([np.sin(v) * np.cos(u), np.sin(v) * np.sin(u), np.cos(v)]),
        32, 16, closed_v=False,
    )


def _torus(R: float, r: float) -> np.ndarray:
    return _surface_of_revolution(
        lambda u, v: np.array([
            (R + r * np.cos(v)) * np.cos(u),
            (R + r * np.cos(v)) * np.sin(u),
            r * np.sin(v),
        ]),
        48, 24, closed_v=True,
    )


def _make_shapes() -> list[tuple[str, np.ndarray]]:
    return [
        ("box 3:2:1",  _box(0.75, 0.5, 0.25)),
        ("pyramid",    _pyramid(1.0, 0.8)),
        ("sphere",     _sphere(0.5)),
        ("torus",      _torus(0.35, 0.15)),
    ]


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------

def render_gallery(shapes, out_path: str, res: int, mode: str, ncols: int = 2) -> None:
    footprints = footprints_from_csv()
    cmap       = plt.get_cmap("tab10")
    palette    = {fp: cmap(i % 10) for i, fp in enumerate(footprints)}

    nrows = (len(shapes) + ncols - 1) // ncols
    fig   = plt.figure(figsize=(ncols * 4.5, nrows * 4.5))

    for idx, (label, tris) in enumerate(shapes):
        result = run_pipeline(Mesh.from_array(tris), res, footprints, mode=mode)

        filled = np.zeros(result.shell.shape, dtype=bool)
        colors = np.zeros(result.shell.shape + (4,))
        for b in result.bricks:
            sl = (slice(b.x, b.max_x), slice(b.y, b.max_y), slice(b.z, b.max_z))
            filled[sl] = True
            colors[sl] = palette[b.footprint]

        ax = fig.add_subplot(nrows, ncols, idx + 1, projection="3d")
        ax.voxels(filled, facecolors=colors, edgecolor="k", linewidth=0.15)
        ax.set_axis_off()
        ax.view_init(elev=25, azim=35)
        ax.set_title(
            f"{label}\n{result.shell_voxels} voxels -> {result.brick_count} bricks",
            fontsize=8,
        )
        print(f"  {label:<12} shell={result.shell_voxels:5d}  bricks={result.brick_count:5d}")

    fig.tight_layout()
    fig.savefig(out_path, dpi=130)
    plt.close(fig)


def main():
    parser = argparse.ArgumentParser(description="Brick gallery of procedural meshes")
    parser.add_argument("--out", default="brick_gallery.png", help="Output PNG path")
    parser.add_argument("--res", type=int, default=16, help="Voxel resolution (default 16)")
    parser.add_argument("--mode", choices=("single", "supersample"), default="single")
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args()

    setup_logging(logging.DEBUG if args.verbose else logging.WARNING)

    shapes = _make_shapes()
    print(f"Converting {len(shapes)} shapes at {args.res}^3 ({args.mode}) ...")
    render_gallery(shapes, args.out, args.res, args.mode)
    print(f"Saved -> {args.out}")


if __name__ == "__main__":
    main()
