"""
validators.py
-------------
Functions for validating user inputs (corridor coordinates, widths, EPSG codes).
"""

import logging
import math
from typing import Optional, Tuple

from pyproj import CRS
from pyproj.exceptions import CRSError


def parse_lnglat(text: str) -> Tuple[float, float]:
    """
    Parse "lng,lat" into a float pair.

    Raises:
        ValueError: If the text is not two comma-separated numbers.
    """
    parts = [p.strip() for p in text.split(",")]
    if len(parts) != 2:
        raise ValueError(f"Expected 'lng,lat', got '{text}'")
    return float(parts[0]), float(parts[1])


def validate_profile_inputs(
    start_lng_str: str,
    start_lat_str: str,
    end_lng_str: str,
    end_lat_str: str,
    width_str: str,
) -> Tuple[bool, Optional[str]]:
    """
    Validate user inputs for a cross-section corridor.

    Args:
        start_lng_str, start_lat_str, end_lng_str, end_lat_str: Axis end points as strings.
        width_str: Full corridor width in meters as a string.

    Returns:
        (True, None) if valid, otherwise (False, error_message).
    """
    try:
        start_lng = float(start_lng_str)
        start_lat = float(start_lat_str)
        end_lng = float(end_lng_str)
        end_lat = float(end_lat_str)
        width = float(width_str)
    except ValueError as exc:
        return False, f"Invalid input: {exc}"

    if not all(math.isfinite(v) for v in (start_lng, start_lat, end_lng, end_lat, width)):
        return False, "Coordinates and width must be finite numbers."
    for lng, lat in ((start_lng, start_lat), (end_lng, end_lat)):
        if not (-180.0 <= lng <= 180.0 and -90.0 <= lat <= 90.0):
            return False, f"Coordinate out of range: ({lng}, {lat})"
    if width <= 0:
        return False, "Corridor width must be a positive number."

    return True, None


def validate_epsg_code(epsg_str: str, field_name: str) -> Optional[int]:
    """
    Validate an EPSG code is a positive integer known to pyproj. If invalid, log an error and return None.

    Args:
        epsg_str: The EPSG code as a string.
        field_name: The field name for error messaging.

    Returns:
        The EPSG code as an integer if valid, otherwise None.
    """
    try:
        code = int(epsg_str)
    except ValueError:
        logging.error(f"Invalid EPSG for {field_name}: '{epsg_str}' is not an integer.")
        return None
    if code <= 0:
        logging.error(f"Invalid EPSG for {field_name}: '{epsg_str}' must be positive.")
        return None
    try:
        CRS.from_epsg(code)
    except CRSError as exc:
        logging.error(f"Invalid EPSG for {field_name}: {exc}")
        return None
    return code
