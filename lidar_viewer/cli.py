"""
cli.py
------
Command line entry point: load a LAS/LAZ file and print a summary, a
cross-section profile or a colorization summary.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

import numpy as np

from . import __version__, config
from .core.builder import PointCloudBuilder
from .core.colorize import colorize_points, get_available_schemes
from .core.colormaps import COLORMAP_NAMES
from .core.exceptions import LidarError
from .core.file_operations import get_las_files_from_directory
from .core.loader import load_point_cloud
from .core.models import SCHEMES, PointCloudData
from .core.profile import extract_profile, profile_extent
from .core.projection import GeodeticProjection
from .utils.validators import parse_lnglat, validate_epsg_code, validate_profile_inputs


def resolve_path(text: str) -> Path:
    """A file/directory path, or the id of a catalogued dataset."""
    path = Path(text)
    if path.exists():
        return path
    try:
        return config.get_dataset(text).path
    except KeyError:
        return path


def positive_int(text: str) -> int:
    try:
        value = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"'{text}' is not an integer")
    if value <= 0:
        raise argparse.ArgumentTypeError(f"'{text}' must be positive")
    return value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lidar-viewer", description="LIDAR point cloud processing"
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--log-level", default="INFO", help="Logging level (DEBUG, INFO, WARNING, ERROR)"
    )
    parser.add_argument(
        "--source-epsg",
        default=str(config.SOURCE_EPSG),
        help="EPSG code of the point coordinates",
    )
    parser.add_argument(
        "--max-points", type=positive_int, default=config.MAX_POINTS, help="Subsampling cap"
    )
    sub = parser.add_subparsers(dest="command", required=True)

    info = sub.add_parser("info", help="Load files and print a summary")
    info.add_argument("path", type=resolve_path, help="LAS/LAZ file, directory or dataset id")

    profile = sub.add_parser("profile", help="Print a corridor cross-section as CSV")
    profile.add_argument("path", type=resolve_path)
    profile.add_argument("--start", required=True, help="lng,lat")
    profile.add_argument("--end", required=True, help="lng,lat")
    profile.add_argument(
        "--width", default=str(config.DEFAULT_PROFILE_WIDTH), help="Corridor width (m)"
    )

    colorize = sub.add_parser("colorize", help="Summarize a colorization")
    colorize.add_argument("path", type=resolve_path)
    colorize.add_argument("--scheme", choices=SCHEMES, default="elevation")
    colorize.add_argument("--colormap", choices=COLORMAP_NAMES, default="viridis")
    colorize.add_argument(
        "--hide", type=int, nargs="*", default=[], help="Classification codes to hide"
    )
    return parser


def setup_logging(log_level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.INFO),
        format="%(asctime)s - %(levelname)s - %(message)s",
    )


def summarize(data: PointCloudData, name: str) -> str:
    b = data.bounds
    schemes = ", ".join(s for s, ok in get_available_schemes(data).items() if ok)
    return "\n".join(
        [
            f"{name}: {data.point_count:,} points",
            f"  origin: {data.coordinate_origin[0]:.6f}, {data.coordinate_origin[1]:.6f}",
            f"  lng: {b.min_x:.6f} .. {b.max_x:.6f}",
            f"  lat: {b.min_y:.6f} .. {b.max_y:.6f}",
            f"  z:   {b.min_z:.2f} .. {b.max_z:.2f} m",
            f"  schemes: {schemes}",
        ]
    )


def _cmd_info(args, builder: PointCloudBuilder) -> int:
    files = get_las_files_from_directory(args.path) if args.path.is_dir() else [args.path]
    if not files:
        logging.error(f"No LAS files found in {args.path}")
        return 1
    for idx, file_path in enumerate(files, start=1):
        logging.info(f"Loading {idx}/{len(files)}: {file_path.name}")
        data = load_point_cloud(file_path, builder=builder)
        print(summarize(data, file_path.name))
    return 0


def _cmd_profile(args, builder: PointCloudBuilder) -> int:
    try:
        start = parse_lnglat(args.start)
        end = parse_lnglat(args.end)
    except ValueError as exc:
        logging.error(str(exc))
        return 2
    valid, error_msg = validate_profile_inputs(*map(str, (*start, *end)), args.width)
    if not valid:
        logging.error(error_msg)
        return 2

    data = load_point_cloud(args.path, builder=builder)
    profile = extract_profile(data, start, end, float(args.width))
    extent = profile_extent(profile)
    if extent is None:
        logging.info("No points inside the corridor.")
    else:
        logging.info(
            f"{len(profile):,} points, distance {extent.min_distance:.1f}-"
            f"{extent.max_distance:.1f}m, elevation {extent.min_elevation:.1f}-"
            f"{extent.max_elevation:.1f}m"
        )

    print("distance,elevation,classification,intensity,r,g,b")
    for p in profile:
        print(
            f"{p.distance:.3f},{p.elevation:.3f},{p.classification},"
            f"{p.intensity:.4f},{p.color[0]},{p.color[1]},{p.color[2]}"
        )
    return 0


def _cmd_colorize(args, builder: PointCloudBuilder) -> int:
    data = load_point_cloud(args.path, builder=builder)
    visibility = {code: False for code in args.hide}
    rgba = colorize_points(data, args.scheme, args.colormap, visibility).reshape(-1, 4)

    hidden = int(np.count_nonzero(rgba[:, 3] == 0))
    distinct = len(np.unique(rgba[:, :3], axis=0)) if len(rgba) else 0
    print(f"scheme: {args.scheme} ({args.colormap})")
    print(f"points: {data.point_count:,}, hidden: {hidden:,}, distinct colors: {distinct:,}")
    return 0


COMMANDS = {
    "info": _cmd_info,
    "profile": _cmd_profile,
    "colorize": _cmd_colorize,
}


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level)

    source_epsg = validate_epsg_code(args.source_epsg, "Source CRS")
    if source_epsg is None:
        return 2

    try:
        builder = PointCloudBuilder(
            forward=GeodeticProjection(source_epsg=source_epsg).forward,
            max_points=args.max_points,
        )
        return COMMANDS[args.command](args, builder)
    except LidarError as exc:
        logging.error(f"{type(exc).__name__}: {exc}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
