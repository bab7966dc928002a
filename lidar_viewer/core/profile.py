"""
profile.py
----------
Corridor cross-section extraction: select the points within a rectangular
corridor around a line segment and order them by distance along its axis.
"""

import math
from typing import List, NamedTuple, Optional, Sequence

import numpy as np

from .. import config
from .exceptions import GeometryError
from .geometry import LngLat, LocalFrame, calculate_corridor_polygon, points_in_bounds
from .models import PointCloudData, ProfilePoint

# Meters; keeps boundary points that the prefilter box would lose to rounding
_PREFILTER_TOLERANCE = 1e-6


class ProfileExtent(NamedTuple):
    min_distance: float
    max_distance: float
    min_elevation: float
    max_elevation: float


def _check_corridor(start: LngLat, end: LngLat, width: float) -> None:
    values = [*start, *end, width]
    if not all(math.isfinite(v) for v in values):
        raise GeometryError(f"Corridor parameters must be finite: {values}")
    if width < 0:
        raise GeometryError(f"Corridor width must not be negative: {width}")


def extract_profile(
    data: PointCloudData,
    start: LngLat,
    end: LngLat,
    width: float = 2.0,
) -> List[ProfilePoint]:
    """
    Extract the points inside a corridor, sorted by distance along the axis.

    Args:
        data: Point cloud to sample.
        start, end: Corridor axis as (longitude, latitude) pairs.
        width: Full corridor width in meters; points with
            |perpendicular offset| <= width / 2 are kept.

    Returns:
        ProfilePoints ordered by ascending distance. Empty if start == end.

    Raises:
        GeometryError: If coordinates are not finite or width is negative.
    """
    _check_corridor(start, end, width)

    frame = LocalFrame.for_cloud(data)
    x1, y1 = frame.lnglat_to_meters(*start)
    x2, y2 = frame.lnglat_to_meters(*end)

    dx = x2 - x1
    dy = y2 - y1
    length = math.hypot(dx, dy)
    if length == 0:
        return []

    ux, uy = dx / length, dy / length
    nx, ny = -uy, ux
    half_width = width / 2

    xyz = data.positions.reshape(-1, 3)
    px, py = frame.offsets_to_meters(xyz[:, 0], xyz[:, 1])

    corridor = calculate_corridor_polygon(x1, y1, x2, y2, half_width)
    candidates = np.flatnonzero(points_in_bounds(px, py, corridor, _PREFILTER_TOLERANCE))

    vx = px[candidates] - x1
    vy = py[candidates] - y1
    distance = vx * ux + vy * uy
    offset = vx * nx + vy * ny

    inside = (distance >= 0) & (distance <= length) & (np.abs(offset) <= half_width)
    order = np.argsort(distance[inside], kind="stable")
    selected = candidates[inside][order]
    distances = distance[inside][order]

    profile = []
    for i, dist in zip(selected, distances):
        if data.colors is not None:
            color = tuple(int(c) for c in data.colors[i * 4 : i * 4 + 3])
        else:
            color = config.DEFAULT_PROFILE_COLOR
        profile.append(
            ProfilePoint(
                distance=float(dist),
                elevation=float(xyz[i, 2]),
                classification=int(data.classifications[i])
                if data.classifications is not None
                else 0,
                intensity=float(data.intensities[i]) if data.intensities is not None else 0.0,
                color=color,
            )
        )
    return profile


def profile_extent(
    profile: Sequence[ProfilePoint], z_padding: float = 0.1
) -> Optional[ProfileExtent]:
    """
    Distance and elevation ranges of a profile, for charting.

    The elevation range is padded on both sides by z_padding times its span.
    Returns None for an empty profile.
    """
    if not profile:
        return None
    distances = [p.distance for p in profile]
    elevations = [p.elevation for p in profile]
    min_z, max_z = min(elevations), max(elevations)
    pad = (max_z - min_z) * z_padding
    return ProfileExtent(min(distances), max(distances), min_z - pad, max_z + pad)
