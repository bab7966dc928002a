"""
colorize.py
-----------
Attribute-to-color mapping for point clouds. Every function here is pure:
it reads an immutable PointCloudData and returns a new RGBA buffer.
"""

from types import MappingProxyType
from typing import Dict, Mapping, Optional

import numpy as np

from .. import config
from .colormaps import sample_colormap_array
from .models import DEFAULT_SETTINGS, SCHEMES, PointCloudData, ViewSettings

# ASPRS classification code -> RGB
CLASSIFICATION_COLORS = MappingProxyType(
    {
        0: (180, 180, 180),  # Created, never classified
        1: (180, 180, 180),  # Unassigned
        2: (139, 90, 43),  # Ground
        3: (0, 200, 0),  # Low vegetation
        4: (0, 150, 0),  # Medium vegetation
        5: (0, 100, 0),  # High vegetation
        6: (255, 165, 0),  # Building
        7: (255, 0, 0),  # Low point (noise)
        9: (0, 100, 255),  # Water
        17: (200, 200, 0),  # Bridge deck
    }
)


def _classification_lut() -> np.ndarray:
    lut = np.empty((256, 3), dtype=np.uint8)
    lut[:] = config.NEUTRAL_GRAY
    for code, rgb in CLASSIFICATION_COLORS.items():
        lut[code] = rgb
    lut.flags.writeable = False
    return lut


_CLASSIFICATION_LUT = _classification_lut()


def _solid(count: int, rgb) -> np.ndarray:
    colors = np.empty((count, 4), dtype=np.uint8)
    colors[:, :3] = rgb
    colors[:, 3] = 255
    return colors


def _from_values(values: np.ndarray, low: float, high: float, colormap: str) -> np.ndarray:
    value_range = (high - low) or 1.0
    t = (values.astype(np.float64) - low) / value_range
    colors = np.empty((len(values), 4), dtype=np.uint8)
    colors[:, :3] = sample_colormap_array(colormap, t)
    colors[:, 3] = 255
    return colors


def _elevation(data: PointCloudData, colormap: str) -> np.ndarray:
    z = data.positions.reshape(-1, 3)[:, 2]
    return _from_values(z, data.bounds.min_z, data.bounds.max_z, colormap)


def _intensity(data: PointCloudData, colormap: str) -> np.ndarray:
    if data.intensities is None:
        return _solid(data.point_count, config.NEUTRAL_GRAY)
    if data.point_count == 0:
        return _solid(0, config.NEUTRAL_GRAY)
    # Observed range, not the nominal [0, 1]
    low = float(data.intensities.min())
    high = float(data.intensities.max())
    return _from_values(data.intensities, low, high, colormap)


def _classification(
    data: PointCloudData, visibility: Optional[Mapping[int, bool]]
) -> np.ndarray:
    if data.classifications is None:
        return _solid(data.point_count, config.NEUTRAL_GRAY)

    codes = data.classifications
    colors = np.empty((data.point_count, 4), dtype=np.uint8)
    colors[:, :3] = _CLASSIFICATION_LUT[codes]
    colors[:, 3] = 255

    hidden = [
        int(code)
        for code, shown in (visibility or {}).items()
        if shown is not None and not shown
    ]
    if hidden:
        colors[np.isin(codes, hidden), 3] = 0
    return colors


def _rgb(data: PointCloudData) -> np.ndarray:
    colors = data.colors.reshape(-1, 4).copy()
    colors[:, 3] = 255
    return colors


def colorize_points(
    data: PointCloudData,
    scheme: str = "elevation",
    colormap: str = "viridis",
    classification_visibility: Optional[Mapping[int, bool]] = None,
) -> np.ndarray:
    """
    Compute a per-point RGBA buffer.

    Args:
        data: Point cloud to color.
        scheme: One of "elevation", "intensity", "classification", "rgb".
        colormap: Colormap name used by the elevation and intensity schemes.
        classification_visibility: Class code -> visible flag. Only codes
            explicitly mapped to False are hidden (alpha 0).

    Returns:
        uint8 array of length 4 * point_count.

    Raises:
        ValueError: If scheme is unknown.
        KeyError: If colormap is unknown.
    """
    if scheme == "elevation":
        colors = _elevation(data, colormap)
    elif scheme == "intensity":
        colors = _intensity(data, colormap)
    elif scheme == "classification":
        colors = _classification(data, classification_visibility)
    elif scheme == "rgb":
        if data.colors is not None:
            colors = _rgb(data)
        else:
            colors = _elevation(data, colormap)
    else:
        raise ValueError(f"Unknown color scheme: {scheme}")
    return colors.reshape(-1)


def colorize_with_settings(
    data: PointCloudData, settings: ViewSettings = DEFAULT_SETTINGS
) -> np.ndarray:
    return colorize_points(
        data,
        settings.color_scheme,
        settings.colormap,
        settings.classification_visibility,
    )


def get_available_schemes(data: Optional[PointCloudData]) -> Dict[str, bool]:
    """Which color schemes have the attributes they need."""
    available = dict.fromkeys(SCHEMES, False)
    available["elevation"] = True
    if data is not None:
        available["intensity"] = data.intensities is not None
        available["classification"] = data.classifications is not None
        available["rgb"] = data.colors is not None
    return available
