"""
Utility modules for lidar_viewer.
---------------------------------
Input validators and the queue logging handler, kept apart from the core
processing code.
"""

from .validators import (
    parse_lnglat,
    validate_profile_inputs,
    validate_epsg_code,
)
from .logging_handler import QueueHandler
