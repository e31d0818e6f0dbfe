"""Ingestion package: scene rasters, sensor band layouts and study sites."""

from .scenes import (
    GridMismatchError,
    Scene,
    SceneDateError,
    SceneReadError,
    discover_scenes,
    parse_acquisition_date,
    read_scene,
)
from .sensorspec import SensorSpec
from .sites import SiteLoadError, load_sites

__all__ = [
    "GridMismatchError",
    "Scene",
    "SceneDateError",
    "SceneReadError",
    "SensorSpec",
    "SiteLoadError",
    "discover_scenes",
    "load_sites",
    "parse_acquisition_date",
    "read_scene",
]
