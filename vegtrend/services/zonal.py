from __future__ import annotations

"""Service turning a scene directory and study sites into a site time series."""

import logging
import os
from typing import Iterator, List

import geopandas as gpd
from pandas import DataFrame

from vegtrend.analytics.indices import IndexLayer, compute_index, write_layer
from vegtrend.analytics.zonal import wide_to_long, zonal_means
from vegtrend.core.config import ConfigManager
from vegtrend.core.logger import Logger
from vegtrend.ingestion.scenes import discover_scenes, read_scene
from vegtrend.ingestion.sensorspec import SensorSpec
from vegtrend.ingestion.sites import load_sites
from vegtrend.services.base import BaseService


class ZonalStatsService(BaseService):
    """Compute per-site index means for every scene in a directory."""

    def __init__(
        self,
        *,
        config: ConfigManager | None = None,
        sensor: SensorSpec | None = None,
        logger=None,
    ) -> None:
        super().__init__(logger)
        self.config = config or ConfigManager()
        self.sensor = sensor or SensorSpec.from_name(self.config.get("sensor"))

    def iter_layers(self, scene_dir: str, index: str) -> Iterator[IndexLayer]:
        """Yield one index layer per scene, in acquisition-date order."""
        scenes = discover_scenes(
            scene_dir,
            extensions=self.config.get("raster_extensions"),
            position=int(self.config.get("date_token_position", 0)),
        )
        for acquired, path in scenes:
            scene = read_scene(
                path,
                self.sensor,
                acquired=acquired,
                nodata=self.config.get("nodata"),
            )
            self.logger.info("Computing %s for %s (%s)", index, acquired, path)
            yield compute_index(scene, index)

    def load_layers(self, scene_dir: str, index: str) -> List[IndexLayer]:
        return list(self.iter_layers(scene_dir, index))

    def export_layers(self, scene_dir: str, out_dir: str, index: str) -> List[str]:
        """Write every derived layer to ``out_dir/<label>.tif``."""
        os.makedirs(out_dir, exist_ok=True)
        return [
            write_layer(layer, os.path.join(out_dir, f"{layer.label}.tif"))
            for layer in self.iter_layers(scene_dir, index)
        ]

    def site_timeseries(
        self, scene_dir: str, sites: str | gpd.GeoDataFrame, index: str
    ) -> DataFrame:
        """
        Return the long table ``[id, veg_type, date, mean_<index>]`` holding
        one row per (site, scene), sorted by date.
        """
        id_col = self.config.get("site_id_col", "id")
        label_col = self.config.get("site_label_col", "veg_type")
        layers = self.load_layers(scene_dir, index)
        target_crs = layers[0].crs

        if isinstance(sites, gpd.GeoDataFrame):
            gdf = sites
            if target_crs is not None and gdf.crs is not None:
                gdf = gdf.to_crs(target_crs)
        else:
            gdf = load_sites(
                sites,
                id_col=id_col,
                label_col=label_col,
                target_crs=target_crs,
                exts=self.config.get("supported_input_formats"),
                logger=self.logger,
            )

        wide = zonal_means(layers, gdf, id_col=id_col, label_col=label_col)
        id_cols = [c for c in (id_col, label_col) if c in wide.columns]
        long_df = wide_to_long(wide, id_cols, self.config.get_value_col(index))
        return long_df.sort_values("date", kind="stable").reset_index(drop=True)


def compute_site_timeseries(
    scene_dir: str,
    sites: str | gpd.GeoDataFrame,
    *,
    index: str | None = None,
    config: ConfigManager | None = None,
    logger: logging.Logger | None = None,
    output: str | None = None,
) -> DataFrame:
    """Compute the per-site index time series for every scene in ``scene_dir``.

    Parameters
    ----------
    scene_dir:
        Directory of multi-band rasters, one per acquisition date, each name
        carrying an 8-digit ``YYYYMMDD`` token.
    sites:
        Path to the study-site vector file, or an already loaded GeoDataFrame.
    index:
        Spectral index to compute; defaults to the configured index.
    config:
        Optional :class:`ConfigManager` with naming and sensor settings.
    logger:
        Optional :class:`logging.Logger` for progress messages.
    output:
        Optional CSV output path.
    """
    cfg = config or ConfigManager()
    log = logger or Logger.get_logger(__name__)
    idx = index or cfg.get("default_index", ConfigManager.DEFAULT_INDEX)

    svc = ZonalStatsService(config=cfg, logger=log)
    df = svc.site_timeseries(scene_dir, sites, idx)
    if output:
        log.info("Writing results to %s", output)
        os.makedirs(os.path.dirname(output) or ".", exist_ok=True)
        df.to_csv(output, index=False)
    return df
