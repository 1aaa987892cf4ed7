"""Command-line entry point.

Usage::

    mesh2brick model.obj 32                          # report only
    mesh2brick model.stl 40 --out bricks.obj         # export bricks
    mesh2brick model.obj 24 --export voxel-surface --out shell.obj
    mesh2brick model.obj 24 --catalog parts.csv --mode supersample
    mesh2brick model.obj 24 --png bricks.png         # needs matplotlib
    mesh2brick model.obj 24 --npy shell.npy          # boolean shell grid
"""
from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from . import __version__
from .catalog import DEFAULT_CATEGORY, footprints_from_csv
from .errors import Mesh2BrickError
from .grid import save_npy
from .io import export_bricks_obj, export_voxels_obj, load_mesh
from .logging_config import setup_logging
from .pipeline import run_pipeline
from .voxelize import DEFAULT_FILL_THRESHOLD

logger = logging.getLogger(__name__)

EXPORT_KINDS = ("brick", "voxel-surface", "voxel-solid")


def _fill_fraction(text: str) -> float:
    """argparse type for ``--fill-threshold``: a float in ``(0, 1]``."""
    try:
        value = float(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid float value: {text!r}") from None
    if not 0.0 < value <= 1.0:
        raise argparse.ArgumentTypeError(f"must be in (0, 1], got {value}")
    return value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mesh2brick",
        description="Convert a triangle mesh into a hollow, one-layer brick assembly.",
    )
    parser.add_argument("mesh", help="input mesh (.obj or .stl)")
    parser.add_argument("resolution", type=int, help="voxels along the largest axis (>= 2)")
    parser.add_argument("--out", default=None, help="write an OBJ export to this path")
    parser.add_argument(
        "--export", choices=EXPORT_KINDS, default="brick",
        help="what --out contains (default: brick)",
    )
    parser.add_argument(
        "--catalog", default=None,
        help="parts catalog CSV (default: bundled catalog)",
    )
    parser.add_argument(
        "--category", default=DEFAULT_CATEGORY,
        help=f"standard brick category label (default: {DEFAULT_CATEGORY})",
    )
    parser.add_argument(
        "--mode", choices=("single", "supersample"), default="single",
        help="voxel sampling mode (default: single)",
    )
    parser.add_argument(
        "--fill-threshold", type=_fill_fraction, default=DEFAULT_FILL_THRESHOLD,
        help=f"supersample fill fraction in (0, 1] (default: {DEFAULT_FILL_THRESHOLD})",
    )
    parser.add_argument("--png", default=None, help="save a matplotlib preview of the bricks")
    parser.add_argument("--npy", default=None, help="save the shell grid as a boolean .npy array")
    parser.add_argument("--log-file", default=None, help="also write logs to this file")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(logging.DEBUG if args.verbose else logging.WARNING, args.log_file)

    try:
        footprints = footprints_from_csv(args.catalog, category=args.category)
        mesh = load_mesh(args.mesh)
        result = run_pipeline(
            mesh,
            args.resolution,
            footprints,
            mode=args.mode,
            fill_threshold=args.fill_threshold,
        )

        if args.out:
            if args.export == "brick":
                export_bricks_obj(result.bricks, args.out)
            elif args.export == "voxel-surface":
                export_voxels_obj(result.shell, args.out)
            else:
                export_voxels_obj(result.solid, args.out)

        if args.npy:
            save_npy(args.npy, result.shell)

        if args.png:
            from .plot import plot_bricks
            plot_bricks(result.bricks, args.png)
    except (Mesh2BrickError, OSError, ImportError) as exc:
        logger.debug("Conversion failed", exc_info=True)
        print(f"mesh2brick: error: {exc}", file=sys.stderr)
        return 1

    for line in result.summary_lines():
        print(line)
    if args.out:
        print(f"Wrote {args.export} export to {args.out}")
    if args.npy:
        print(f"Wrote shell grid to {args.npy}")
    if args.png:
        print(f"Wrote preview to {args.png}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
