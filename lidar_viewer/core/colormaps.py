"""
colormaps.py
------------
Named gradient colormaps and sampling.

Each colormap is a sequence of ColorStops with strictly increasing positions
from 0.0 to 1.0; values between stops are linearly interpolated.
"""

import math
from types import MappingProxyType
from typing import Mapping, Sequence, Tuple

import numpy as np

from .models import ColorStop

RGB = Tuple[int, int, int]


def _stops(*rows: Tuple[float, int, int, int]) -> Tuple[ColorStop, ...]:
    return tuple(ColorStop(*row) for row in rows)


COLORMAPS: Mapping[str, Tuple[ColorStop, ...]] = MappingProxyType(
    {
        "viridis": _stops(
            (0.0, 68, 1, 84),
            (0.1, 72, 35, 116),
            (0.2, 64, 67, 135),
            (0.3, 52, 94, 141),
            (0.4, 41, 120, 142),
            (0.5, 32, 144, 140),
            (0.6, 34, 167, 132),
            (0.7, 68, 190, 112),
            (0.8, 121, 209, 81),
            (0.9, 189, 222, 38),
            (1.0, 253, 231, 37),
        ),
        "plasma": _stops(
            (0.0, 13, 8, 135),
            (0.1, 75, 3, 161),
            (0.2, 125, 3, 168),
            (0.3, 168, 34, 150),
            (0.4, 203, 70, 121),
            (0.5, 229, 107, 93),
            (0.6, 248, 148, 65),
            (0.7, 253, 195, 40),
            (0.8, 240, 228, 66),
            (0.9, 222, 244, 113),
            (1.0, 240, 249, 33),
        ),
        "inferno": _stops(
            (0.0, 0, 0, 4),
            (0.1, 22, 11, 57),
            (0.2, 66, 10, 104),
            (0.3, 106, 23, 110),
            (0.4, 147, 38, 103),
            (0.5, 188, 55, 84),
            (0.6, 221, 81, 58),
            (0.7, 243, 118, 27),
            (0.8, 252, 165, 10),
            (0.9, 246, 215, 70),
            (1.0, 252, 255, 164),
        ),
        "turbo": _stops(
            (0.0, 48, 18, 59),
            (0.1, 67, 85, 189),
            (0.2, 45, 150, 228),
            (0.3, 24, 196, 193),
            (0.4, 68, 227, 135),
            (0.5, 147, 244, 73),
            (0.6, 209, 234, 43),
            (0.7, 249, 195, 35),
            (0.8, 253, 141, 33),
            (0.9, 228, 74, 25),
            (1.0, 163, 16, 16),
        ),
        "magma": _stops(
            (0.0, 0, 0, 4),
            (0.1, 23, 11, 58),
            (0.2, 66, 15, 117),
            (0.3, 114, 31, 129),
            (0.4, 163, 50, 120),
            (0.5, 211, 67, 94),
            (0.6, 248, 107, 78),
            (0.7, 254, 155, 87),
            (0.8, 252, 205, 127),
            (0.9, 252, 253, 191),
            (1.0, 252, 253, 255),
        ),
        "cividis": _stops(
            (0.0, 0, 32, 77),
            (0.2, 0, 53, 107),
            (0.4, 65, 77, 107),
            (0.6, 124, 123, 120),
            (0.8, 190, 186, 118),
            (1.0, 255, 234, 70),
        ),
        "jet": _stops(
            (0.0, 0, 0, 128),
            (0.125, 0, 0, 255),
            (0.375, 0, 255, 255),
            (0.625, 255, 255, 0),
            (0.875, 255, 0, 0),
            (1.0, 128, 0, 0),
        ),
        "rainbow": _stops(
            (0.0, 0, 0, 255),
            (0.2, 0, 255, 255),
            (0.4, 0, 255, 0),
            (0.6, 255, 255, 0),
            (0.8, 255, 0, 0),
            (1.0, 255, 0, 255),
        ),
        "coolwarm": _stops(
            (0.0, 59, 76, 192),
            (0.25, 119, 154, 229),
            (0.5, 221, 221, 221),
            (0.75, 241, 142, 105),
            (1.0, 180, 4, 38),
        ),
        "terrain": _stops(
            (0.0, 51, 128, 51),
            (0.2, 102, 179, 102),
            (0.3, 179, 204, 102),
            (0.4, 204, 179, 102),
            (0.6, 179, 128, 77),
            (0.8, 204, 179, 153),
            (1.0, 255, 255, 255),
        ),
        "gray": _stops(
            (0.0, 0, 0, 0),
            (1.0, 255, 255, 255),
        ),
    }
)

COLORMAP_NAMES: Tuple[str, ...] = tuple(COLORMAPS)


def validate_colormap(stops: Sequence[ColorStop]) -> None:
    """
    Check that stops span [0, 1] with strictly increasing positions and
    channel values in 0-255.

    Raises:
        ValueError: If the colormap is malformed.
    """
    if len(stops) < 2:
        raise ValueError("A colormap needs at least two stops")
    if stops[0].position != 0.0 or stops[-1].position != 1.0:
        raise ValueError("Colormap stops must start at 0.0 and end at 1.0")
    for prev, cur in zip(stops, stops[1:]):
        if cur.position <= prev.position:
            raise ValueError(
                f"Colormap positions must strictly increase ({prev.position} -> {cur.position})"
            )
    for stop in stops:
        if not all(0 <= c <= 255 for c in stop.rgb):
            raise ValueError(f"Channel out of range in stop at {stop.position}")


def _round_channel(value: float) -> int:
    # Round half up, matching the browser's Math.round
    return int(math.floor(value + 0.5))


def sample_colormap(name: str, t: float) -> RGB:
    """
    Sample a colormap at t (clamped to [0, 1]).

    Raises:
        KeyError: If no colormap with that name exists.
    """
    stops = COLORMAPS[name]
    t = max(0.0, min(1.0, t))

    for stop0, stop1 in zip(stops, stops[1:]):
        if stop0.position <= t <= stop1.position:
            fraction = (t - stop0.position) / (stop1.position - stop0.position)
            return (
                _round_channel(stop0.r + (stop1.r - stop0.r) * fraction),
                _round_channel(stop0.g + (stop1.g - stop0.g) * fraction),
                _round_channel(stop0.b + (stop1.b - stop0.b) * fraction),
            )

    return stops[-1].rgb


def sample_colormap_array(name: str, values: np.ndarray) -> np.ndarray:
    """
    Vectorised sample_colormap: returns a uint8 (n, 3) array for n values.

    Uses the same per-segment blend as sample_colormap, so both agree
    exactly. NaN values map to the first stop.
    """
    stops = COLORMAPS[name]
    t = np.clip(np.nan_to_num(np.asarray(values, dtype=np.float64), nan=0.0), 0.0, 1.0)
    positions = np.array([s.position for s in stops], dtype=np.float64)
    anchors = np.array([s.rgb for s in stops], dtype=np.float64)

    segment = np.clip(np.searchsorted(positions, t, side="right") - 1, 0, len(stops) - 2)
    pos0 = positions[segment]
    fraction = (t - pos0) / (positions[segment + 1] - pos0)

    start = anchors[segment]
    end = anchors[segment + 1]
    blended = start + (end - start) * fraction[:, None]
    return np.clip(np.floor(blended + 0.5), 0, 255).astype(np.uint8)


for _name, _stops_ in COLORMAPS.items():
    validate_colormap(_stops_)
del _name, _stops_
