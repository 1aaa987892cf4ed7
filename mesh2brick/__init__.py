"""mesh2brick — triangle mesh to one-layer brick assembly (pure numpy).

Converts a closed triangle mesh into a hollow shell of voxels and tiles that
shell with rectangular brick footprints taken from a parts catalog.

Quick start
-----------
>>> from mesh2brick import load_mesh, footprints_from_csv, run_pipeline
>>> mesh = load_mesh("my_mesh.obj")
>>> result = run_pipeline(mesh, 32, footprints_from_csv())
>>> result.brick_count <= result.shell_voxels
True

Stages
------
``normalize_mesh`` → ``voxelize`` → ``extract_surface`` → ``place_bricks``.
Each stage is a plain function and can be run on its own.

Watertight requirement
----------------------
Occupancy uses +X ray-casting parity (Möller–Trumbore intersections).  The
result is only meaningful for **watertight** meshes; open or self-intersecting
meshes give inconsistent interiors.

Performance
-----------
One triangle solve per ``(y, z)`` sample row, with rows culled by each
triangle's bounding box.  A 10 K-triangle mesh at 40³ takes seconds on a
single core; ``mode="supersample"`` costs roughly 64× the counting work.
"""

__version__ = "0.1.0"

from .catalog import (
    CatalogPart,
    Footprint,
    allowed_footprints,
    footprints_from_csv,
    load_catalog_csv,
    load_default_catalog,
)
from .errors import (
    CatalogError,
    DegenerateGeometryError,
    EmptyGeometryError,
    GridIndexError,
    InvalidResolutionError,
    Mesh2BrickError,
    MeshFormatError,
    PlacementError,
)
from .geometry import Bounds, Mesh, Point3, Triangle, compute_bounds, normalize_mesh
from .grid import OccupancyGrid
from .io import export_bricks_obj, export_voxels_obj, load_mesh, load_obj, load_stl
from .pipeline import PipelineResult, run_pipeline
from .placement import Brick, place_bricks
from .surface import extract_surface
from .voxelize import voxelize

__all__ = [
    "__version__",
    # geometry
    "Point3", "Triangle", "Mesh", "Bounds", "compute_bounds", "normalize_mesh",
    # stages
    "OccupancyGrid", "voxelize", "extract_surface", "Brick", "place_bricks",
    # catalog
    "Footprint", "CatalogPart", "allowed_footprints", "load_catalog_csv",
    "load_default_catalog", "footprints_from_csv",
    # io / pipeline
    "load_obj", "load_stl", "load_mesh", "export_bricks_obj", "export_voxels_obj",
    "PipelineResult", "run_pipeline",
    # errors
    "Mesh2BrickError", "InvalidResolutionError", "EmptyGeometryError",
    "DegenerateGeometryError", "CatalogError", "MeshFormatError",
    "PlacementError", "GridIndexError",
]
