"""
Module `ingestion.sites` loads the study-site polygons, each labelled with
its vegetation-community type, into a cleaned GeoDataFrame.
"""

import os

import geopandas as gpd

from vegtrend.core.config import ConfigManager
from vegtrend.core.logger import Logger


class SiteLoadError(ValueError):
    """Raised when the study-site vector file cannot be used."""


def load_sites(
    path: str,
    id_col: str = "id",
    label_col: str = "veg_type",
    target_crs=None,
    exts: list[str] | None = None,
    logger=None,
) -> gpd.GeoDataFrame:
    """
    Read study sites from *path* and return a GeoDataFrame.

    Steps:
      - Check the extension against the supported vector formats
      - Read with GeoPandas; require ``label_col``
      - Ensure a unique ``id_col`` (sequential from 1 when absent)
      - Repair invalid geometries, drop null/empty ones
      - Assume ``target_crs`` (or EPSG:4326) when the file carries no CRS,
        then reproject to ``target_crs`` when given
    """
    log = logger or Logger.get_logger(__name__)
    exts = exts or [e.lower() for e in ConfigManager.SUPPORTED_INPUT_FORMATS]
    ext = os.path.splitext(path)[1].lower()
    if ext not in exts:
        raise SiteLoadError(f"Unsupported site file format '{ext}' for {path}")
    if not os.path.exists(path):
        raise FileNotFoundError(f"Site file not found: {path}")

    gdf = gpd.read_file(path)
    if gdf.empty:
        raise SiteLoadError(f"No features found in {path}")
    if label_col not in gdf.columns:
        raise SiteLoadError(
            f"Site file {path} lacks label column '{label_col}'; "
            f"columns are {list(gdf.columns)}"
        )

    if id_col not in gdf.columns:
        gdf[id_col] = gdf.index.astype(int) + 1
        log.info("Added sequential '%s' field to sites", id_col)
    dupes = gdf[id_col][gdf[id_col].duplicated()].tolist()
    if dupes:
        raise SiteLoadError(f"Duplicate site ids in {path}: {dupes}")

    gdf["geometry"] = gdf.geometry.buffer(0)
    keep = gdf.geometry.notnull() & ~gdf.geometry.is_empty
    if not keep.all():
        log.warning(
            "Dropping %d sites without usable geometry: %s",
            int((~keep).sum()),
            gdf.loc[~keep, id_col].tolist(),
        )
        gdf = gdf[keep]

    if gdf.crs is None:
        assumed = target_crs if target_crs is not None else "EPSG:4326"
        log.warning("No CRS on %s, assuming %s", path, assumed)
        gdf = gdf.set_crs(assumed)
    if target_crs is not None:
        gdf = gdf.to_crs(target_crs)

    log.info("Loaded %d sites from %s", len(gdf), path)
    return gdf.reset_index(drop=True)
