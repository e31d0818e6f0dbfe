"""
Compute spectral indices in memory on scene band arrays.

No-data policy: cells that are NaN in any input band, and cells whose
denominator is exactly zero, come out as NaN. Inputs are never modified.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, Dict, Tuple

import numpy as np
import rasterio

from vegtrend.core.logger import Logger
from vegtrend.ingestion.scenes import GridMismatchError, Scene

log = Logger.get_logger(__name__)


def _as_float(*arrays):
    arrs = [np.asarray(a, dtype="float64") for a in arrays]
    shapes = {a.shape for a in arrs}
    if len(shapes) != 1:
        raise GridMismatchError(f"Band arrays differ in shape: {sorted(shapes)}")
    return arrs


def _quiet():
    # non-finite cells end up NaN; the arithmetic on them must not warn
    return np.errstate(divide="ignore", invalid="ignore", over="ignore")


def _safe_ratio(num: np.ndarray, den: np.ndarray) -> np.ndarray:
    return np.where(den == 0, np.nan, num / den)


def normalized_difference(a, b) -> np.ndarray:
    """Return ``(a - b) / (a + b)`` cell-wise."""
    a, b = _as_float(a, b)
    with _quiet():
        return _safe_ratio(a - b, a + b)


def ndvi(red, nir) -> np.ndarray:
    """Normalized Difference Vegetation Index."""
    return normalized_difference(nir, red)


def ndwi(green, nir) -> np.ndarray:
    """Normalized Difference Water Index (McFeeters)."""
    return normalized_difference(green, nir)


def ndmi(nir, swir1) -> np.ndarray:
    """Normalized Difference Moisture Index."""
    return normalized_difference(nir, swir1)


def nbr(nir, swir2) -> np.ndarray:
    """Normalized Burn Ratio."""
    return normalized_difference(nir, swir2)


def evi(red, nir, blue, G=2.5, C1=6.0, C2=7.5, L=1.0) -> np.ndarray:
    """Enhanced Vegetation Index."""
    red, nir, blue = _as_float(red, nir, blue)
    with _quiet():
        return G * _safe_ratio(nir - red, nir + C1 * red - C2 * blue + L)


# index name -> (function, band aliases in argument order)
INDEX_REGISTRY: Dict[str, Tuple[Callable[..., np.ndarray], Tuple[str, ...]]] = {
    "ndvi": (ndvi, ("red", "nir")),
    "ndwi": (ndwi, ("green", "nir")),
    "ndmi": (ndmi, ("nir", "swir1")),
    "nbr": (nbr, ("nir", "swir2")),
    "evi": (evi, ("red", "nir", "blue")),
}


@dataclass
class IndexLayer:
    """A derived index grid tagged with its scene's acquisition date."""

    name: str
    date: date
    data: np.ndarray
    transform: Any = None
    crs: Any = None

    @property
    def label(self) -> str:
        """Layer tag, e.g. ``ndvi_20200115``."""
        return f"{self.name}_{self.date:%Y%m%d}"


def compute_index(scene: Scene, index: str = "ndvi") -> IndexLayer:
    """
    Compute a named spectral index for *scene*.

    Args:
        scene: Scene whose bands carry the standard lowercase aliases.
        index: one of the keys in INDEX_REGISTRY (case-insensitive).

    Returns:
        IndexLayer on the scene's grid, named by the lowercase index key.
    """
    key = index.lower()
    if key not in INDEX_REGISTRY:
        raise ValueError(
            f"Index '{index}' not supported. Choose from: {list(INDEX_REGISTRY)}"
        )
    func, aliases = INDEX_REGISTRY[key]
    data = func(*(scene.band(alias) for alias in aliases))
    log.debug("Computed %s for scene %s", key, scene.date)
    return IndexLayer(
        name=key, date=scene.date, data=data, transform=scene.transform, crs=scene.crs
    )


def write_layer(layer: IndexLayer, path: str) -> str:
    """Write *layer* as a single-band float32 GeoTIFF with NaN nodata."""
    height, width = layer.data.shape
    with rasterio.open(
        path,
        "w",
        driver="GTiff",
        height=height,
        width=width,
        count=1,
        dtype="float32",
        crs=layer.crs,
        transform=layer.transform,
        nodata=np.nan,
        compress="deflate",
    ) as dst:
        dst.write(layer.data.astype("float32"), 1)
        dst.update_tags(index=layer.name, acquired=layer.date.isoformat())
    log.info("Wrote %s layer to %s", layer.label, path)
    return path
