"""
Core modules for lidar_viewer.
------------------------------
This package contains the essential functionality:
- LAS decoding and header checks
- Point cloud building (subsampling, reprojection, offset encoding)
- Colormaps and colorization
- Corridor geometry and cross-section profiles
"""

from .exceptions import (
    LidarError,
    SourceIOError,
    FormatError,
    GeometryError,
    IngestCancelled,
)

from .models import (
    Bounds,
    PointCloudData,
    DecodedPoints,
    ColorStop,
    ProfilePoint,
    ViewSettings,
    Layer,
    DEFAULT_SETTINGS,
)

from .file_operations import (
    check_las_header,
    read_las_source,
    get_las_files_from_directory,
    get_classification_name,
    inspect_decoded_points,
)

from .projection import GeodeticProjection
from .builder import PointCloudBuilder, build_point_cloud

from .colormaps import (
    COLORMAPS,
    COLORMAP_NAMES,
    sample_colormap,
    sample_colormap_array,
)

from .colorize import (
    colorize_points,
    colorize_with_settings,
    get_available_schemes,
)

from .geometry import LocalFrame, corridor_polygon_lnglat
from .profile import extract_profile, profile_extent
from .loader import load_point_cloud, make_layer, LoadWorker
