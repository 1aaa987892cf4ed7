"""Matplotlib previews of grids and brick assemblies.

matplotlib is an optional dependency (``pip install mesh2brick[plot]``) and
is imported only when a figure is drawn.  The Agg backend is selected so
rendering works without a display.
"""

from __future__ import annotations

import os
from typing import Optional, Sequence

import numpy as np

from .grid import OccupancyGrid
from .placement import Brick

__all__ = ["plot_bricks", "plot_grid"]


def _pyplot():
    try:
        import matplotlib
    except ImportError as exc:
        raise ImportError(
            "Plotting requires matplotlib: pip install mesh2brick[plot]"
        ) from exc
    matplotlib.use("Agg")
    import matplotlib.pyplot as plt
    return plt


def _prepare(path: str) -> None:
    out_dir = os.path.dirname(path)
    if out_dir:
        os.makedirs(out_dir, exist_ok=True)


def _extent(bricks: Sequence[Brick]) -> tuple:
    if not bricks:
        return (1, 1, 1)
    return (
        max(b.max_x for b in bricks),
        max(b.max_y for b in bricks),
        max(b.max_z for b in bricks),
    )


def plot_bricks(
    bricks: Sequence[Brick],
    path: str,
    title: Optional[str] = None,
) -> None:
    """Render *bricks* as 3-D voxels coloured by footprint and save a PNG."""
    plt = _pyplot()
    _prepare(path)

    shape  = _extent(bricks)
    filled = np.zeros(shape, dtype=bool)
    colors = np.zeros(shape + (4,))

    footprints = sorted({b.footprint for b in bricks}, key=lambda fp: fp.priority_key())
    cmap    = plt.get_cmap("tab10")
    palette = {fp: cmap(i % 10) for i, fp in enumerate(footprints)}

    for brick in bricks:
        sl = (
            slice(brick.x, brick.max_x),
            slice(brick.y, brick.max_y),
            slice(brick.z, brick.max_z),
        )
        filled[sl] = True
        colors[sl] = palette[brick.footprint]

    fig = plt.figure(figsize=(7, 7))
    ax  = fig.add_subplot(111, projection="3d")
    if bricks:
        ax.voxels(filled, facecolors=colors, edgecolor="k", linewidth=0.2)
    ax.set_xlabel("x")
    ax.set_ylabel("y")
    ax.set_zlabel("z")
    ax.set_box_aspect(shape)
    ax.set_title(title or f"{len(bricks)} bricks")

    handles = [
        plt.Line2D([0], [0], marker="s", linestyle="", color=palette[fp], label=str(fp))
        for fp in footprints
    ]
    if handles:
        ax.legend(handles=handles, loc="upper left", fontsize=8)

    fig.savefig(path, dpi=120, bbox_inches="tight")
    plt.close(fig)


def plot_grid(grid: OccupancyGrid, path: str, title: Optional[str] = None) -> None:
    """Render the filled cells of *grid* and save a PNG."""
    plt = _pyplot()
    _prepare(path)

    fig = plt.figure(figsize=(7, 7))
    ax  = fig.add_subplot(111, projection="3d")
    ax.voxels(grid.data, facecolors="tab:orange", edgecolor="k", linewidth=0.2)
    ax.set_xlabel("x")
    ax.set_ylabel("y")
    ax.set_zlabel("z")
    ax.set_box_aspect(grid.shape)
    ax.set_title(title or repr(grid))

    fig.savefig(path, dpi=120, bbox_inches="tight")
    plt.close(fig)
