"""
file_operations.py
------------------
LAS/LAZ handling for point-cloud ingestion, including:
- Listing LAS files in directories
- Header compatibility checks on raw bytes
- Decoding through laspy into a typed DecodedPoints record
- Inspection reports
"""

import io
import logging
from datetime import datetime
from pathlib import Path
from typing import List, Tuple, Union

import laspy
import numpy as np
from laspy.errors import LaspyException

from .. import config
from .exceptions import FormatError, SourceIOError
from .models import DecodedPoints

LAS_SIGNATURE = b"LASF"
VERSION_MAJOR_OFFSET = 24
VERSION_MINOR_OFFSET = 25
POINT_FORMAT_OFFSET = 104
# Bits 6 and 7 of the point format byte flag LAZ compression
POINT_FORMAT_MASK = 0x3F
MIN_HEADER_SIZE = 227

Source = Union[str, Path, bytes, bytearray]


def get_las_files_from_directory(directory: Path) -> List[Path]:
    """
    Retrieve all LAS and LAZ files from a specified directory.

    Args:
        directory: The directory to search.

    Returns:
        A sorted list of file paths for all LAS/LAZ files found.
    """
    if not directory.exists():
        logging.warning(f"Directory {directory} does not exist. Please check the path.")
        return []
    return sorted(f for ext in ("*.las", "*.laz") for f in directory.glob(ext))


def get_classification_name(code: int) -> str:
    """
    Return a human-readable classification name for a given LAS classification code.
    Uses standard ASPRS classification codes where possible.
    """
    standard_classifications = {
        0: "Created, never classified",
        1: "Unassigned",
        2: "Ground",
        3: "Low Vegetation",
        4: "Medium Vegetation",
        5: "High Vegetation",
        6: "Building",
        7: "Low Point (noise)",
        8: "Model Key-point",
        9: "Water",
        10: "Rail",
        11: "Road Surface",
        12: "Overlap Points",
        13: "Wire - Guard (Shield)",
        14: "Wire - Conductor (Phase)",
        15: "Transmission Tower",
        16: "Wire-structure Connector",
        17: "Bridge Deck",
        18: "High Noise",
        19: "Overhead Structure",
        20: "Ignored Ground",
        21: "Snow",
        22: "Temporal Exclusion",
    }

    if 23 <= code <= 63:
        return f"Reserved (ASPRS) [{code}]"
    if 64 <= code <= 255:
        return f"User Defined [{code}]"
    return standard_classifications.get(code, f"Unknown [{code}]")


def check_las_header(data: bytes) -> Tuple[int, int, int]:
    """
    Validate the LAS public header block before any decoding is attempted.

    Args:
        data: Raw container bytes.

    Returns:
        (version_major, version_minor, point_format_id)

    Raises:
        FormatError: Bad signature, truncated header, or unsupported
            version / point record format.
    """
    if len(data) < MIN_HEADER_SIZE:
        raise FormatError(f"Truncated LAS header ({len(data)} bytes)")
    if data[:4] != LAS_SIGNATURE:
        raise FormatError("Missing LASF file signature")

    major = data[VERSION_MAJOR_OFFSET]
    minor = data[VERSION_MINOR_OFFSET]
    point_format = data[POINT_FORMAT_OFFSET] & POINT_FORMAT_MASK

    if major != config.SUPPORTED_VERSION_MAJOR or minor not in config.SUPPORTED_VERSION_MINORS:
        raise FormatError(f"LAS version {major}.{minor} is not supported")
    if point_format not in config.SUPPORTED_POINT_FORMATS:
        supported = ", ".join(str(f) for f in config.SUPPORTED_POINT_FORMATS)
        raise FormatError(
            f"LAS {major}.{minor} with Point Format {point_format} is not supported. "
            f"Only formats {supported} are supported."
        )
    return major, minor, point_format


def read_source_bytes(source: Source) -> bytes:
    """Return the raw bytes of a path or pass bytes through."""
    if isinstance(source, (bytes, bytearray)):
        return bytes(source)
    path = Path(source)
    try:
        return path.read_bytes()
    except OSError as exc:
        raise SourceIOError(f"Cannot read {path}: {exc}") from exc


def _reduce_colors(red: np.ndarray, green: np.ndarray, blue: np.ndarray) -> np.ndarray:
    rgb = np.column_stack((red, green, blue)).astype(np.uint16)
    # LAS stores 16-bit channels; some writers only fill the low byte
    if rgb.size and rgb.max() > 255:
        rgb = rgb >> 8
    return rgb.astype(np.uint8)


def decode_las_bytes(data: bytes) -> DecodedPoints:
    """
    Decode LAS/LAZ bytes with laspy into a DecodedPoints record.

    Raises:
        FormatError: If the header is unsupported or laspy cannot decode the data.
    """
    major, minor, point_format = check_las_header(data)
    logging.info(f"LAS Version: {major}.{minor}, Point Format: {point_format}")

    try:
        las = laspy.read(io.BytesIO(data))
    except (LaspyException, ValueError) as exc:
        raise FormatError(f"Failed to decode LAS data: {exc}") from exc

    dimensions = set(las.point_format.dimension_names)
    positions = np.vstack((las.x, las.y, las.z)).T.astype(np.float64)

    colors = None
    if {"red", "green", "blue"} <= dimensions:
        colors = _reduce_colors(las.red, las.green, las.blue)

    intensities = np.asarray(las.intensity, dtype=np.uint16) if "intensity" in dimensions else None
    classifications = (
        np.asarray(las.classification, dtype=np.uint8)
        if "classification" in dimensions
        else None
    )

    return DecodedPoints(
        vertex_count=int(las.header.point_count),
        positions=positions,
        colors=colors,
        intensities=intensities,
        classifications=classifications,
        version=f"{major}.{minor}",
        point_format=point_format,
    )


def read_las_source(source: Source) -> DecodedPoints:
    """
    Read and decode a LAS/LAZ source (file path or raw bytes).

    Raises:
        SourceIOError: If the source cannot be read.
        FormatError: If the container is unsupported or malformed.
    """
    label = "bytes buffer" if isinstance(source, (bytes, bytearray)) else str(source)
    logging.info(f"Starting load for source: {label}")
    return decode_las_bytes(read_source_bytes(source))


def inspect_decoded_points(points: DecodedPoints) -> str:
    """
    Generate a textual report about decoded points: header info, coordinate
    ranges and classification counts.
    """
    report = [
        "\nInspecting decoded point records",
        f"Timestamp: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}",
        "-" * 80,
        "FILE INFORMATION:",
        f"Version: {points.version or 'unknown'}",
        f"Point Format ID: {points.point_format}",
        f"Point Count: {points.vertex_count:,}",
    ]

    if points.positions is not None and len(points.positions):
        mins = points.positions.min(axis=0)
        maxs = points.positions.max(axis=0)
        report.append("\nCOORDINATE SYSTEM:")
        report.append(f"X range: {mins[0]:.3f} to {maxs[0]:.3f}")
        report.append(f"Y range: {mins[1]:.3f} to {maxs[1]:.3f}")
        report.append(f"Z range: {mins[2]:.3f} to {maxs[2]:.3f}")

    report.append("\nATTRIBUTES:")
    report.append(f"Colors: {'yes' if points.colors is not None else 'no'}")
    report.append(f"Intensity: {'yes' if points.intensities is not None else 'no'}")

    if points.classifications is not None and len(points.classifications):
        unique_classes, class_counts = np.unique(points.classifications, return_counts=True)
        total_points = len(points.classifications)

        report.append("\nClassifications Found:")
        report.append("-" * 80)
        report.append(f"{'Code':<6} {'Name':<30} {'Count':<15} {'Percentage'}")
        report.append("-" * 80)
        for class_code, count in zip(unique_classes, class_counts):
            name = get_classification_name(int(class_code))
            percentage = (count / total_points) * 100
            report.append(
                f"{int(class_code):<6} {name:<30} {count:<15,} {percentage:>6.2f}%"
            )
    else:
        report.append("Classification: no")

    return "\n".join(report)
