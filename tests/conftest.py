from pathlib import Path
from typing import Optional

import laspy
import numpy as np
import pytest

from lidar_viewer.core.builder import PointCloudBuilder
from lidar_viewer.core.geometry import LocalFrame
from lidar_viewer.core.models import Bounds, DecodedPoints, PointCloudData

ORIGIN_LNG = 7.62
ORIGIN_LAT = 51.96


def identity_forward(easting, northing):
    return np.asarray(easting, dtype=np.float64), np.asarray(northing, dtype=np.float64)


@pytest.fixture
def identity_builder() -> PointCloudBuilder:
    return PointCloudBuilder(forward=identity_forward, max_points=10, chunk_size=4)


def make_decoded(
    n: int,
    colors: Optional[np.ndarray] = None,
    intensities: Optional[np.ndarray] = None,
    classifications: Optional[np.ndarray] = None,
) -> DecodedPoints:
    """n points on a small lng/lat grid near Münster, z = 50 + i."""
    i = np.arange(n, dtype=np.float64)
    positions = np.column_stack(
        (ORIGIN_LNG + i * 1e-5, ORIGIN_LAT + (i % 7) * 1e-5, 50.0 + i)
    )
    return DecodedPoints(
        vertex_count=n,
        positions=positions,
        colors=colors,
        intensities=intensities,
        classifications=classifications,
    )


def cloud_from_meters(
    points_m,
    colors=None,
    intensities=None,
    classifications=None,
    origin=(ORIGIN_LNG, ORIGIN_LAT),
) -> PointCloudData:
    """Build a PointCloudData from (x, y, z) positions in meters around origin."""
    frame = LocalFrame(*origin)
    pts = np.asarray(points_m, dtype=np.float64).reshape(-1, 3)
    dlng = pts[:, 0] / frame.meters_per_deg_lng
    dlat = pts[:, 1] / frame.meters_per_deg_lat
    positions = np.column_stack((dlng, dlat, pts[:, 2])).astype(np.float32).reshape(-1)
    n = len(pts)
    bounds = Bounds(
        min_x=float(origin[0] + dlng.min()),
        max_x=float(origin[0] + dlng.max()),
        min_y=float(origin[1] + dlat.min()),
        max_y=float(origin[1] + dlat.max()),
        min_z=float(pts[:, 2].min()),
        max_z=float(pts[:, 2].max()),
    )
    return PointCloudData(
        positions=positions,
        coordinate_origin=(origin[0], origin[1], 0.0),
        colors=None if colors is None else np.asarray(colors, dtype=np.uint8).reshape(-1),
        intensities=None if intensities is None else np.asarray(intensities, dtype=np.float32),
        classifications=None
        if classifications is None
        else np.asarray(classifications, dtype=np.uint8),
        point_count=n,
        bounds=bounds,
    )


def lnglat_at(x: float, y: float, origin=(ORIGIN_LNG, ORIGIN_LAT)):
    frame = LocalFrame(*origin)
    lng, lat = frame.meters_to_lnglat(x, y)
    return float(lng), float(lat)


def write_las(path: Path, n: int = 100, point_format: int = 2) -> Path:
    """Write a small UTM 32N LAS file with color, intensity and classification."""
    header = laspy.LasHeader(point_format=point_format, version="1.2")
    header.offsets = np.array([404000.0, 5758000.0, 0.0])
    header.scales = np.array([0.01, 0.01, 0.01])

    i = np.arange(n, dtype=np.float64)
    las = laspy.LasData(header)
    las.x = 404500.0 + i
    las.y = 5758500.0 + (i % 10)
    las.z = 60.0 + i * 0.5
    las.intensity = (i * 100).astype(np.uint16)
    las.classification = np.where(i % 2 == 0, 2, 6).astype(np.uint8)
    if point_format in (2, 3):
        las.red = np.full(n, 65535, dtype=np.uint16)
        las.green = np.full(n, 32768, dtype=np.uint16)
        las.blue = np.zeros(n, dtype=np.uint16)
    las.write(str(path))
    return path


@pytest.fixture
def las_file(tmp_path: Path) -> Path:
    return write_las(tmp_path / "tile.las")
