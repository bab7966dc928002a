"""
models.py
---------
Data structures shared by the ingestion, colorization and profile modules.

`PointCloudData` is the render-ready representation produced by the builder.
Its numpy buffers are flagged read-only so consumers cannot mutate a cloud
after construction. `DecodedPoints` is the strictly typed adapter for the
output of the LAS decoder.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

import numpy as np

SCHEMES = ("elevation", "intensity", "classification", "rgb")


def _readonly(array: Optional[np.ndarray]) -> Optional[np.ndarray]:
    if array is not None:
        array.flags.writeable = False
    return array


@dataclass(frozen=True)
class Bounds:
    """Axis-aligned box in reprojected space (X=longitude, Y=latitude, Z=meters)."""

    min_x: float
    max_x: float
    min_y: float
    max_y: float
    min_z: float
    max_z: float

    def contains(self, x: float, y: float, z: float) -> bool:
        return (
            self.min_x <= x <= self.max_x
            and self.min_y <= y <= self.max_y
            and self.min_z <= z <= self.max_z
        )


@dataclass(frozen=True)
class PointCloudData:
    """
    Immutable, subsampled and reprojected point cloud.

    Attributes:
        positions: float32, length 3 * point_count, [dx, dy, z, ...] where dx/dy
            are degree offsets from coordinate_origin and z is absolute meters.
        coordinate_origin: (longitude, latitude, 0.0) reference point.
        colors: uint8 RGBA, length 4 * point_count, or None.
        intensities: float32 in [0, 1], length point_count, or None.
        classifications: uint8 class codes, length point_count, or None.
        point_count: Number of retained points.
        bounds: Tight bounds of the reprojected (absolute) coordinates.
    """

    positions: np.ndarray
    coordinate_origin: Tuple[float, float, float]
    colors: Optional[np.ndarray]
    intensities: Optional[np.ndarray]
    classifications: Optional[np.ndarray]
    point_count: int
    bounds: Bounds

    def __post_init__(self) -> None:
        n = self.point_count
        if self.positions.shape != (3 * n,):
            raise ValueError(
                f"positions must have {3 * n} entries, got {self.positions.shape}"
            )
        if self.colors is not None and self.colors.shape != (4 * n,):
            raise ValueError(f"colors must have {4 * n} entries, got {self.colors.shape}")
        for name in ("intensities", "classifications"):
            buffer = getattr(self, name)
            if buffer is not None and buffer.shape != (n,):
                raise ValueError(f"{name} must have {n} entries, got {buffer.shape}")
        for buffer in (self.positions, self.colors, self.intensities, self.classifications):
            _readonly(buffer)

    def absolute_positions(self) -> np.ndarray:
        """Return an (n, 3) float64 array with the origin added back."""
        xyz = self.positions.reshape(-1, 3).astype(np.float64)
        xyz[:, 0] += self.coordinate_origin[0]
        xyz[:, 1] += self.coordinate_origin[1]
        return xyz


@dataclass(frozen=True)
class DecodedPoints:
    """
    Typed view of a decoded LAS record set.

    positions is float64 (n, 3) in the source CRS; colors are uint8 (n, 3) or
    (n, 4); intensities are the raw uint16 values.
    """

    vertex_count: int
    positions: Optional[np.ndarray]
    colors: Optional[np.ndarray] = None
    intensities: Optional[np.ndarray] = None
    classifications: Optional[np.ndarray] = None
    version: str = ""
    point_format: int = -1


@dataclass(frozen=True)
class ColorStop:
    position: float
    r: int
    g: int
    b: int

    @property
    def rgb(self) -> Tuple[int, int, int]:
        return (self.r, self.g, self.b)


@dataclass(frozen=True)
class ProfilePoint:
    """A point retained by a corridor cross-section."""

    distance: float
    elevation: float
    classification: int
    intensity: float
    color: Tuple[int, int, int]


@dataclass(frozen=True)
class ViewSettings:
    color_scheme: str = "elevation"
    colormap: str = "viridis"
    classification_visibility: Mapping[int, bool] = field(
        default_factory=lambda: MappingProxyType({})
    )


@dataclass
class Layer:
    """Caller-side owner of a loaded point cloud."""

    id: str
    name: str
    source: str
    point_cloud: Optional[PointCloudData] = None
    visible: bool = True


DEFAULT_SETTINGS = ViewSettings()
