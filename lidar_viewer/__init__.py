"""
lidar_viewer
------------
Point-cloud ingestion and geometric processing for a LIDAR map viewer:
reprojection into a precision-preserving local-offset representation,
attribute colorization and corridor cross-section extraction.

This top-level package defines the version and exposes the core API.
"""

__version__ = "0.1.0"
