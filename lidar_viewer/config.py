"""
config.py
---------
Static defaults for ingestion, projection and display. Values here are
read-only; callers override them through function/constructor arguments.
"""

from pathlib import Path
from typing import NamedTuple, Tuple

# Subsampling cap and cooperative-yield chunk size (points)
MAX_POINTS = 500_000
CHUNK_SIZE = 50_000

# Source datasets are ETRS89 / UTM zone 32N; output is WGS84 lon/lat
SOURCE_EPSG = 25832
TARGET_EPSG = 4326

# LAS header compatibility
SUPPORTED_VERSION_MAJOR = 1
SUPPORTED_VERSION_MINORS: Tuple[int, ...] = (0, 1, 2, 3, 4)
SUPPORTED_POINT_FORMATS: Tuple[int, ...] = (0, 1, 2, 3)

# Progress milestones reported during ingestion
PROGRESS_START = 0.05
PROGRESS_DECODED = 0.4
PROGRESS_ATTRIBUTES = 0.5
PROGRESS_REPROJECTED = 0.9
PROGRESS_DONE = 1.0

# Intensity is stored as unsigned 16 bit in LAS
INTENSITY_MAX = 65535.0

METERS_PER_DEGREE = 111320.0
DEFAULT_PROFILE_WIDTH = 5.0

NEUTRAL_GRAY: Tuple[int, int, int] = (180, 180, 180)
DEFAULT_PROFILE_COLOR: Tuple[int, int, int] = (255, 255, 255)

DATA_DIR = Path("data")


class Dataset(NamedTuple):
    id: str
    label: str
    path: Path


DATASETS: Tuple[Dataset, ...] = (
    Dataset("muenster-center", "Münster Center", DATA_DIR / "3dm_32_404_5758_1_nw.laz"),
    Dataset("muenster-east", "Münster East", DATA_DIR / "3dm_32_405_5758_1_nw.laz"),
)


def get_dataset(dataset_id: str) -> Dataset:
    """Return the catalogued dataset with the given id."""
    for dataset in DATASETS:
        if dataset.id == dataset_id:
            return dataset
    raise KeyError(f"Unknown dataset: {dataset_id}")
