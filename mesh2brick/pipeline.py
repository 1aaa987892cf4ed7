"""End-to-end conversion: normalize, voxelize, extract shell, place bricks."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from .catalog import Footprint
from .errors import check_resolution
from .geometry import Mesh, normalize_mesh
from .grid import OccupancyGrid
from .placement import Brick, place_bricks
from .surface import extract_surface
from .voxelize import DEFAULT_FILL_THRESHOLD, SamplingMode, voxelize

logger = logging.getLogger(__name__)

__all__ = ["PipelineResult", "run_pipeline"]


@dataclass(frozen=True)
class PipelineResult:
    """Everything produced by one :func:`run_pipeline` call."""

    triangle_count: int
    resolution: int
    solid: OccupancyGrid
    shell: OccupancyGrid
    bricks: List[Brick] = field(default_factory=list)

    @property
    def total_voxels(self) -> int:
        """Cells in the grid, ``resolution³``."""
        return self.resolution ** 3

    @property
    def solid_voxels(self) -> int:
        return self.solid.count_filled()

    @property
    def shell_voxels(self) -> int:
        return self.shell.count_filled()

    @property
    def brick_count(self) -> int:
        return len(self.bricks)

    @property
    def reduction_percent(self) -> Optional[float]:
        """Percentage of shell voxels saved by merging; ``None`` for an empty shell."""
        shell = self.shell_voxels
        if shell == 0:
            return None
        return 100.0 * (shell - self.brick_count) / shell

    def footprint_counts(self) -> dict:
        """``{"WxD": count}`` over the placed bricks, largest footprint first."""
        counts: dict = {}
        for brick in sorted(self.bricks, key=lambda b: b.footprint.priority_key()):
            key = str(brick.footprint)
            counts[key] = counts.get(key, 0) + 1
        return counts

    def summary_lines(self) -> List[str]:
        reduction = self.reduction_percent
        lines = [
            f"Triangles:       {self.triangle_count}",
            f"Resolution:      {self.resolution}^3",
            f"Total voxels:    {self.total_voxels}",
            f"Solid voxels:    {self.solid_voxels}",
            f"Shell voxels:    {self.shell_voxels}",
            f"Bricks:          {self.brick_count}",
            "Reduction:       "
            + ("n/a" if reduction is None else f"{reduction:.1f}%"),
        ]
        for name, count in self.footprint_counts().items():
            lines.append(f"  {name:>5}: {count}")
        return lines


def run_pipeline(
    mesh: Mesh,
    resolution: int,
    footprints: Sequence[Footprint],
    *,
    mode: SamplingMode = "single",
    fill_threshold: float = DEFAULT_FILL_THRESHOLD,
) -> PipelineResult:
    """Convert *mesh* into a one-layer brick assembly.

    Parameters
    ----------
    mesh:
        Input mesh in any coordinate system.  An empty mesh yields empty
        grids and no bricks.
    resolution:
        Voxel resolution, ``>= 2``.
    footprints:
        Priority-ordered footprints, e.g. from
        :func:`mesh2brick.catalog.allowed_footprints`.
    mode, fill_threshold:
        Passed through to :func:`mesh2brick.voxelize.voxelize`.

    Raises
    ------
    InvalidResolutionError, DegenerateGeometryError, PlacementError
        From the individual stages.
    """
    if mesh is None:
        raise TypeError("Mesh cannot be None")
    resolution = check_resolution(resolution)

    t0 = time.perf_counter()
    if mesh.is_empty:
        # No bounds exist, so normalization is skipped.
        logger.warning("Mesh has no triangles; producing an empty result")
        normalized = mesh
    else:
        normalized = normalize_mesh(mesh, resolution)

    solid  = voxelize(normalized, resolution, mode=mode, fill_threshold=fill_threshold)
    shell  = extract_surface(solid)
    bricks = place_bricks(shell, footprints)

    result = PipelineResult(
        triangle_count=mesh.triangle_count,
        resolution=resolution,
        solid=solid,
        shell=shell,
        bricks=bricks,
    )
    logger.info(
        "Pipeline finished in %.2f s: %d triangles -> %d shell voxels -> %d bricks",
        time.perf_counter() - t0, result.triangle_count,
        result.shell_voxels, result.brick_count,
    )
    return result
