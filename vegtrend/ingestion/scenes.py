from __future__ import annotations

"""Reading dated multi-band scenes from a local directory of rasters."""

import os
import re
from dataclasses import dataclass, field
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np
import rasterio
from rasterio.errors import RasterioIOError

from vegtrend.core.logger import Logger
from vegtrend.ingestion.sensorspec import SensorSpec

logger = Logger.get_logger(__name__)

# Stand-alone 8-digit YYYYMMDD tokens; longer digit runs are not dates.
_DATE_TOKEN = re.compile(r"(?<!\d)(\d{8})(?!\d)")


class SceneReadError(OSError):
    """Raised when a scene file is missing, unreadable or lacks bands."""


class SceneDateError(ValueError):
    """Raised when an acquisition date cannot be derived from a label."""


class GridMismatchError(ValueError):
    """Raised when grids (shape or CRS) that must align do not."""


def parse_acquisition_date(label: str | os.PathLike, position: int = 0) -> date:
    """
    Return the acquisition date encoded in *label*.

    *label* is a file path or layer label holding one or more 8-digit
    ``YYYYMMDD`` tokens; ``position`` selects which token carries the
    acquisition date (Landsat names carry a processing date after it).
    """
    name = Path(str(label)).name
    tokens = _DATE_TOKEN.findall(name)
    try:
        token = tokens[position]
    except IndexError as exc:
        raise SceneDateError(
            f"No date token at position {position} in '{name}' (found {tokens})"
        ) from exc
    try:
        return datetime.strptime(token, "%Y%m%d").date()
    except ValueError as exc:
        raise SceneDateError(f"Invalid date token '{token}' in '{name}'") from exc


@dataclass
class Scene:
    """One multi-band capture; no-data cells are NaN in every band."""

    date: date
    bands: Dict[str, np.ndarray]
    transform: Any = None
    crs: Any = None
    path: Optional[str] = None
    shape: Tuple[int, ...] = field(init=False)

    def __post_init__(self):
        if not self.bands:
            raise ValueError("A scene needs at least one band")
        shapes = {alias: np.shape(arr) for alias, arr in self.bands.items()}
        distinct = set(shapes.values())
        if len(distinct) != 1:
            raise GridMismatchError(f"Bands of scene {self.date} differ in shape: {shapes}")
        self.shape = distinct.pop()

    def band(self, alias: str) -> np.ndarray:
        """Return the band array stored under *alias*."""
        key = alias.lower()
        if key not in self.bands:
            raise ValueError(
                f"Scene {self.date} has no band '{alias}'. Available: {list(self.bands)}"
            )
        return self.bands[key]


def read_scene(
    path: str | os.PathLike,
    sensor: SensorSpec,
    *,
    acquired: date | None = None,
    nodata: float | None = None,
    position: int = 0,
) -> Scene:
    """
    Read every band defined by *sensor* from the raster at *path*.

    The nodata marker is, in order of precedence: *nodata*, the file's own
    nodata value, the sensor default. Marked and non-finite cells become NaN;
    the remaining cells are scaled to reflectance.
    """
    if acquired is None:
        acquired = parse_acquisition_date(path, position)
    try:
        src = rasterio.open(path)
    except (RasterioIOError, OSError) as exc:
        raise SceneReadError(f"Cannot open scene {path}: {exc}") from exc

    with src:
        if src.count < sensor.band_count:
            raise SceneReadError(
                f"Scene {path} has {src.count} bands; sensor '{sensor.name}' "
                f"needs {sensor.band_count}"
            )
        if nodata is not None:
            marker = nodata
        elif src.nodata is not None:
            marker = src.nodata
        else:
            marker = sensor.nodata

        bands: Dict[str, np.ndarray] = {}
        for alias in sensor.bands:
            raw = src.read(sensor.band_index(alias)).astype("float64")
            invalid = ~np.isfinite(raw)
            if marker is not None:
                invalid |= raw == marker
            values = raw * sensor.scale_factor + sensor.offset
            values[invalid] = np.nan
            bands[alias] = values
        transform, crs = src.transform, src.crs

    logger.debug("Read scene %s (%s) with bands %s", path, acquired, list(bands))
    return Scene(
        date=acquired, bands=bands, transform=transform, crs=crs, path=str(path)
    )


def discover_scenes(
    scene_dir: str | os.PathLike,
    extensions: Sequence[str] = (".tif", ".tiff"),
    position: int = 0,
) -> List[Tuple[date, str]]:
    """
    Pair every raster in *scene_dir* with the date parsed from its name.

    Returns ``(date, path)`` tuples sorted by date. Listing order plays no
    part in which date a file gets.
    """
    if not os.path.isdir(scene_dir):
        raise SceneReadError(f"Scene directory not found: {scene_dir}")
    exts = {e.lower() for e in extensions}
    paths = [
        os.path.join(scene_dir, fname)
        for fname in os.listdir(scene_dir)
        if os.path.splitext(fname)[1].lower() in exts
    ]
    if not paths:
        raise SceneReadError(f"No raster files ({sorted(exts)}) found in {scene_dir}")

    dated = [(parse_acquisition_date(p, position), p) for p in paths]
    dated.sort()
    seen: Dict[date, str] = {}
    for acquired, p in dated:
        if acquired in seen:
            raise SceneDateError(
                f"Scenes {seen[acquired]} and {p} share acquisition date {acquired}"
            )
        seen[acquired] = p
    logger.info("Found %d scenes in %s", len(dated), scene_dir)
    return dated
