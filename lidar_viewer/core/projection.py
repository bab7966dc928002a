"""
projection.py
-------------
Geodetic reprojection from the projected source CRS to longitude/latitude.
"""

from typing import Callable, Tuple

import numpy as np
from pyproj import CRS, Transformer

from .. import config

ForwardFn = Callable[[np.ndarray, np.ndarray], Tuple[np.ndarray, np.ndarray]]


class GeodeticProjection:
    """
    Forward projection for a single fixed source/target CRS pair.

    Args:
        source_epsg: EPSG code of the native point coordinates.
        target_epsg: EPSG code of the output (geographic) coordinates.
    """

    def __init__(
        self,
        source_epsg: int = config.SOURCE_EPSG,
        target_epsg: int = config.TARGET_EPSG,
    ) -> None:
        self.source_crs = CRS.from_epsg(source_epsg)
        self.target_crs = CRS.from_epsg(target_epsg)
        self._transformer = Transformer.from_crs(
            self.source_crs, self.target_crs, always_xy=True
        )

    def forward(self, easting, northing):
        """
        Transform easting/northing (scalars or arrays) to (longitude, latitude).
        """
        return self._transformer.transform(easting, northing)

    def __call__(self, easting, northing):
        return self.forward(easting, northing)

    def __repr__(self) -> str:
        return (
            f"GeodeticProjection(EPSG:{self.source_crs.to_epsg()} -> "
            f"EPSG:{self.target_crs.to_epsg()})"
        )
