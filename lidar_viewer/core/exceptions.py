"""
exceptions.py
-------------
Error taxonomy for point-cloud ingestion and processing.
"""


class LidarError(Exception):
    """Base class for all errors raised by lidar_viewer."""


class SourceIOError(LidarError, OSError):
    """The source bytes could not be read (missing file, permissions, transport)."""


class FormatError(LidarError):
    """Unsupported LAS version/point format, or required position data is absent."""


class GeometryError(LidarError):
    """Invalid corridor parameters (non-finite coordinates or negative width)."""


class IngestCancelled(LidarError):
    """Ingestion was aborted because the cancel token was set."""
