"""
Module `analytics.zonal` reduces dated index layers to per-site means and
reshapes the resulting wide table into a long time series.
"""

from __future__ import annotations

from datetime import date
from typing import List, Sequence

import numpy as np
import pandas as pd
import geopandas as gpd
from rasterio.features import geometry_mask
from shapely.geometry import mapping
from shapely.geometry.base import BaseGeometry

from vegtrend.analytics.indices import IndexLayer
from vegtrend.core.logger import Logger
from vegtrend.ingestion.scenes import GridMismatchError, parse_acquisition_date

log = Logger.get_logger(__name__)


def zonal_mean(data: np.ndarray, transform, geometry: BaseGeometry) -> float:
    """
    Mean of the cells of *data* whose centers fall inside *geometry*.

    NaN cells count neither in the sum nor in the cell count. Returns NaN
    when the geometry covers no valid cell.
    """
    if geometry is None or geometry.is_empty:
        return float("nan")
    inside = geometry_mask(
        [mapping(geometry)],
        out_shape=data.shape,
        transform=transform,
        all_touched=False,
        invert=True,
    )
    values = data[inside]
    values = values[~np.isnan(values)]
    if values.size == 0:
        return float("nan")
    return float(values.mean())


def _check_crs(layer: IndexLayer, sites: gpd.GeoDataFrame) -> None:
    if layer.crs is None and sites.crs is None:
        return
    if (
        layer.crs is None
        or sites.crs is None
        or not sites.crs.equals(layer.crs, ignore_axis_order=True)
    ):
        raise GridMismatchError(
            f"Layer {layer.label} CRS ({layer.crs}) does not match sites CRS "
            f"({sites.crs})"
        )


def zonal_means(
    layers: Sequence[IndexLayer],
    sites: gpd.GeoDataFrame,
    id_col: str = "id",
    label_col: str | None = "veg_type",
) -> pd.DataFrame:
    """
    Build the wide site x layer table of zonal means.

    One row per site (input order) holding ``id_col``, ``label_col`` (when
    the sites carry it) and one column per layer label (layer order).
    """
    labels = [layer.label for layer in layers]
    dup_labels = sorted({lbl for lbl in labels if labels.count(lbl) > 1})
    if dup_labels:
        raise ValueError(f"Duplicate layer labels: {dup_labels}")
    if id_col not in sites.columns:
        raise ValueError(f"Sites lack id column '{id_col}'")
    if sites[id_col].duplicated().any():
        raise ValueError(f"Duplicate site ids in column '{id_col}'")

    columns = {id_col: sites[id_col].tolist()}
    if label_col and label_col in sites.columns:
        columns[label_col] = sites[label_col].tolist()

    geoms = list(sites.geometry)
    for layer in layers:
        _check_crs(layer, sites)
        means = [zonal_mean(layer.data, layer.transform, geom) for geom in geoms]
        empty = [sid for sid, m in zip(columns[id_col], means) if np.isnan(m)]
        if empty:
            log.warning("No valid cells for sites %s in layer %s", empty, layer.label)
        columns[layer.label] = means
        log.debug("Aggregated layer %s over %d sites", layer.label, len(geoms))

    return pd.DataFrame(columns)


def parse_layer_date(label: str) -> date:
    """Calendar date from a layer label such as ``ndvi_20200115``."""
    return parse_acquisition_date(label, position=0)


def wide_to_long(
    wide: pd.DataFrame,
    id_cols: List[str],
    value_col: str,
) -> pd.DataFrame:
    """
    Melt the wide table into one row per (site, layer).

    Rows are layer-major, then in the wide table's site order. The layer
    label is replaced by a ``date`` column (datetime64).
    """
    layer_cols = [c for c in wide.columns if c not in id_cols]
    dates = {col: parse_layer_date(col) for col in layer_cols}
    long_df = wide.melt(
        id_vars=id_cols,
        value_vars=layer_cols,
        var_name="layer",
        value_name=value_col,
    )
    long_df["date"] = pd.to_datetime(long_df["layer"].map(dates))
    return long_df[id_cols + ["date", value_col]]


def long_to_wide(
    long_df: pd.DataFrame,
    id_cols: List[str],
    value_col: str,
    index_name: str,
) -> pd.DataFrame:
    """Inverse of :func:`wide_to_long`; layer columns are named ``<index>_<YYYYMMDD>``."""
    dates = pd.unique(long_df["date"])
    wide = long_df.pivot(index=id_cols, columns="date", values=value_col)
    wide = wide.reindex(columns=dates)
    wide.columns = [f"{index_name}_{pd.Timestamp(d):%Y%m%d}" for d in dates]
    wide = wide.reset_index()
    site_keys = long_df[id_cols].drop_duplicates().reset_index(drop=True)
    return site_keys.merge(wide, on=id_cols, how="left")
