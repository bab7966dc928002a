"""
geometry.py
-----------
Geometry helpers for corridor cross-sections: a local equirectangular
meter frame around the cloud origin, corridor polygons and a vectorised
bounding-box prefilter.
"""

import math
from typing import Optional, Tuple

import numpy as np
from shapely import ops as shapely_ops
from shapely.geometry import Polygon

from .. import config
from .models import PointCloudData

LngLat = Tuple[float, float]


class LocalFrame:
    """
    Equirectangular approximation around a reference longitude/latitude.

    Valid for corridor lengths on the order of kilometers; not geodesically
    exact over long distances.
    """

    def __init__(self, origin_lng: float, origin_lat: float) -> None:
        self.origin_lng = origin_lng
        self.origin_lat = origin_lat
        self.meters_per_deg_lat = config.METERS_PER_DEGREE
        self.meters_per_deg_lng = config.METERS_PER_DEGREE * math.cos(
            math.radians(origin_lat)
        )

    @classmethod
    def for_cloud(cls, data: PointCloudData) -> "LocalFrame":
        return cls(data.coordinate_origin[0], data.coordinate_origin[1])

    def offsets_to_meters(self, dlng, dlat):
        """Degree offsets from the origin -> (x, y) meters."""
        return (
            np.asarray(dlng, dtype=np.float64) * self.meters_per_deg_lng,
            np.asarray(dlat, dtype=np.float64) * self.meters_per_deg_lat,
        )

    def lnglat_to_meters(self, lng: float, lat: float) -> Tuple[float, float]:
        return (
            (lng - self.origin_lng) * self.meters_per_deg_lng,
            (lat - self.origin_lat) * self.meters_per_deg_lat,
        )

    def meters_to_lnglat(self, x, y):
        return (
            np.asarray(x, dtype=np.float64) / self.meters_per_deg_lng + self.origin_lng,
            np.asarray(y, dtype=np.float64) / self.meters_per_deg_lat + self.origin_lat,
        )


def calculate_corridor_polygon(
    x_start: float,
    y_start: float,
    x_end: float,
    y_end: float,
    corridor_half_width: float,
) -> Polygon:
    """
    Calculate the corridor polygon given a start/end line segment and a half-width.
    The corridor is the rectangle around the segment, without end caps.

    Args:
        x_start, y_start: Start coordinates.
        x_end, y_end: End coordinates.
        corridor_half_width: Half-width of the corridor.

    Returns:
        A shapely Polygon representing the corridor.
    """
    angle = math.atan2(y_end - y_start, x_end - x_start)
    perpendicular_angle = angle + (math.pi / 2)

    buffer_x = corridor_half_width * math.cos(perpendicular_angle)
    buffer_y = corridor_half_width * math.sin(perpendicular_angle)

    corners = [
        (x_start + buffer_x, y_start + buffer_y),
        (x_start - buffer_x, y_start - buffer_y),
        (x_end - buffer_x, y_end - buffer_y),
        (x_end + buffer_x, y_end + buffer_y),
    ]
    return Polygon(corners)


def corridor_polygon_lnglat(
    data: PointCloudData, start: LngLat, end: LngLat, width: float
) -> Optional[Polygon]:
    """
    Corridor outline in longitude/latitude, e.g. for drawing on a map.

    Args:
        data: Point cloud whose origin defines the local frame.
        start, end: Corridor axis end points as (lng, lat).
        width: Full corridor width in meters.

    Returns:
        The corridor Polygon, or None for a zero-length axis.
    """
    if tuple(start) == tuple(end):
        return None
    frame = LocalFrame.for_cloud(data)
    x1, y1 = frame.lnglat_to_meters(*start)
    x2, y2 = frame.lnglat_to_meters(*end)
    corridor = calculate_corridor_polygon(x1, y1, x2, y2, width / 2)
    return shapely_ops.transform(frame.meters_to_lnglat, corridor)


def points_in_bounds(
    x_coords: np.ndarray, y_coords: np.ndarray, polygon: Polygon, tolerance: float = 0.0
) -> np.ndarray:
    """
    Boolean mask of points inside the polygon's bounding box.

    Args:
        x_coords: X-coordinates of points.
        y_coords: Y-coordinates of points.
        polygon: Polygon whose bounds are tested.
        tolerance: Padding added to every side of the box.
    """
    min_x, min_y, max_x, max_y = polygon.bounds
    min_x, min_y = min_x - tolerance, min_y - tolerance
    max_x, max_y = max_x + tolerance, max_y + tolerance
    return (
        (x_coords >= min_x)
        & (x_coords <= max_x)
        & (y_coords >= min_y)
        & (y_coords <= max_y)
    )
