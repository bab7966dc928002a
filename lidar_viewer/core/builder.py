"""
builder.py
----------
Core ingestion logic turning decoded LAS records into PointCloudData:
- Deterministic nth-point subsampling to a fixed point budget
- Reprojection to longitude/latitude in chunks, with progress reporting
  and cancellation between chunks
- Bounding box accumulation and origin derivation
- Offset encoding into float32 positions
- Attribute copy (intensity rescale, classification, RGBA colors)
"""

import logging
import math
import threading
import time
from typing import Callable, Optional

import numpy as np

from .. import config
from .exceptions import FormatError, IngestCancelled
from .models import Bounds, DecodedPoints, PointCloudData
from .projection import ForwardFn, GeodeticProjection

ProgressSink = Callable[[float], None]


def monotonic_sink(progress_sink: Optional[ProgressSink]) -> ProgressSink:
    """Wrap a sink so it only sees strictly increasing values."""
    last = [-1.0]

    def report(value: float) -> None:
        if value > last[0]:
            last[0] = value
            if progress_sink is not None:
                progress_sink(value)

    return report


def sampling_stride(vertex_count: int, max_points: int = config.MAX_POINTS) -> int:
    """Return the nth-point stride keeping at most max_points points."""
    return max(1, math.ceil(vertex_count / max_points))


def sampled_point_count(vertex_count: int, step: int) -> int:
    return math.ceil(vertex_count / step)


class PointCloudBuilder:
    """
    Builds an immutable PointCloudData from a decoded record set.

    Args:
        forward: Projection function (easting, northing) -> (lng, lat),
            vectorised over numpy arrays. Defaults to EPSG:25832 -> EPSG:4326.
        max_points: Subsampling cap.
        chunk_size: Points processed between progress reports / cancel checks.
    """

    def __init__(
        self,
        forward: Optional[ForwardFn] = None,
        max_points: int = config.MAX_POINTS,
        chunk_size: int = config.CHUNK_SIZE,
    ) -> None:
        if max_points <= 0 or chunk_size <= 0:
            raise ValueError("max_points and chunk_size must be positive")
        self.forward = forward if forward is not None else GeodeticProjection().forward
        self.max_points = max_points
        self.chunk_size = chunk_size

    def build(
        self,
        raw: DecodedPoints,
        vertex_count: int,
        progress_sink: Optional[ProgressSink] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> PointCloudData:
        """
        Subsample, reproject and encode a decoded record set.

        Args:
            raw: Decoded attributes (positions required).
            vertex_count: Declared number of points in the record set.
            progress_sink: Called with monotonically increasing values in [0, 1],
                ending with exactly 1.0.
            cancel_event: Checked after every chunk; when set the build aborts.

        Returns:
            PointCloudData with point_count <= max_points.

        Raises:
            FormatError: If positions are missing or vertex_count is not positive.
            IngestCancelled: If cancel_event is set during processing.
        """
        if raw.positions is None:
            raise FormatError("Point data has no POSITION attribute")
        if vertex_count <= 0:
            raise FormatError(f"Invalid vertex count: {vertex_count}")

        raw_positions = np.asarray(raw.positions, dtype=np.float64).reshape(-1, 3)
        if len(raw_positions) < vertex_count:
            raise FormatError(
                f"Declared {vertex_count} points but only {len(raw_positions)} positions present"
            )

        report = monotonic_sink(progress_sink)
        report(config.PROGRESS_START)
        start_time = time.time()

        step = sampling_stride(vertex_count, self.max_points)
        point_count = sampled_point_count(vertex_count, step)
        logging.info(
            f"Point cloud: {vertex_count:,} total -> sampling every {step}th "
            f"-> {point_count:,} points"
        )
        source_index = np.arange(point_count, dtype=np.int64) * step

        report(config.PROGRESS_ATTRIBUTES)

        lng_lat = np.empty((point_count, 3), dtype=np.float64)
        last_logged_progress = -1

        for chunk_start in range(0, point_count, self.chunk_size):
            chunk_end = min(chunk_start + self.chunk_size, point_count)
            src = raw_positions[source_index[chunk_start:chunk_end]]

            lng, lat = self.forward(src[:, 0], src[:, 1])
            lng_lat[chunk_start:chunk_end, 0] = lng
            lng_lat[chunk_start:chunk_end, 1] = lat
            lng_lat[chunk_start:chunk_end, 2] = src[:, 2]

            fraction = chunk_end / point_count
            report(
                config.PROGRESS_ATTRIBUTES
                + (config.PROGRESS_REPROJECTED - config.PROGRESS_ATTRIBUTES) * fraction
            )
            progress = int(fraction * 100)
            if progress >= last_logged_progress + 10:
                logging.info(f"Reprojection - {progress}% complete")
                last_logged_progress = progress

            if cancel_event is not None and cancel_event.is_set():
                logging.info("Ingestion canceled.")
                raise IngestCancelled("Point cloud ingestion was canceled")
            # Let other threads (e.g. a GUI polling the progress queue) run
            time.sleep(0)

        mins = lng_lat.min(axis=0)
        maxs = lng_lat.max(axis=0)
        bounds = Bounds(
            min_x=float(mins[0]),
            max_x=float(maxs[0]),
            min_y=float(mins[1]),
            max_y=float(maxs[1]),
            min_z=float(mins[2]),
            max_z=float(maxs[2]),
        )
        origin = (
            (bounds.min_x + bounds.max_x) / 2,
            (bounds.min_y + bounds.max_y) / 2,
            0.0,
        )

        positions = self._encode_positions(lng_lat, origin)
        del lng_lat
        report(config.PROGRESS_REPROJECTED)

        data = PointCloudData(
            positions=positions,
            coordinate_origin=origin,
            colors=self._copy_colors(raw.colors, source_index),
            intensities=self._copy_intensities(raw.intensities, source_index),
            classifications=self._copy_classifications(raw.classifications, source_index),
            point_count=point_count,
            bounds=bounds,
        )

        report(config.PROGRESS_DONE)
        logging.info(
            f"Built point cloud: {point_count:,} points, origin "
            f"({origin[0]:.6f}, {origin[1]:.6f}) in {time.time() - start_time:.2f}s"
        )
        return data

    @staticmethod
    def _encode_positions(lng_lat: np.ndarray, origin) -> np.ndarray:
        # Subtract in float64, then narrow; absolute degrees would exhaust float32 precision
        offsets = lng_lat.copy()
        offsets[:, 0] -= origin[0]
        offsets[:, 1] -= origin[1]
        return offsets.astype(np.float32).reshape(-1)

    @staticmethod
    def _copy_intensities(raw: Optional[np.ndarray], index: np.ndarray) -> Optional[np.ndarray]:
        if raw is None:
            return None
        return (np.asarray(raw)[index] / config.INTENSITY_MAX).astype(np.float32)

    @staticmethod
    def _copy_classifications(
        raw: Optional[np.ndarray], index: np.ndarray
    ) -> Optional[np.ndarray]:
        if raw is None:
            return None
        return np.asarray(raw)[index].astype(np.uint8)

    @staticmethod
    def _copy_colors(raw: Optional[np.ndarray], index: np.ndarray) -> Optional[np.ndarray]:
        if raw is None:
            return None
        raw = np.asarray(raw)
        channels = raw.shape[1] if raw.ndim == 2 else 3
        raw = raw.reshape(-1, channels)

        rgba = np.zeros((len(index), 4), dtype=np.uint8)
        rgba[:, 3] = 255
        if channels >= 4:
            # Source alpha is kept; only 3-channel sources get 255
            rgba[:] = raw[index, :4]
        elif channels == 3:
            rgba[:, :3] = raw[index]
        return rgba.reshape(-1)


def build_point_cloud(
    raw: DecodedPoints,
    progress_sink: Optional[ProgressSink] = None,
    cancel_event: Optional[threading.Event] = None,
    forward: Optional[ForwardFn] = None,
) -> PointCloudData:
    """Build with default settings, using the record set's own vertex count."""
    builder = PointCloudBuilder(forward=forward)
    return builder.build(raw, raw.vertex_count, progress_sink, cancel_event)
