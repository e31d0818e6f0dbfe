# pylint: disable=missing-module-docstring,missing-function-docstring
import logging
import os

import numpy as np
import geopandas as gpd
import pandas as pd
import pytest

from vegtrend.core.config import ConfigManager
from vegtrend.ingestion.scenes import GridMismatchError, SceneDateError
from vegtrend.services.zonal import ZonalStatsService, compute_site_timeseries


def _mean_ndvi(red, nir):
    red = np.asarray(red, dtype="float32").astype("float64")
    nir = np.asarray(nir, dtype="float32").astype("float64")
    return float(((nir - red) / (nir + red)).mean())


def test_end_to_end_single_site(scene_dir, sites_gdf, scene_arrays):
    full_grid = sites_gdf.iloc[[0]]
    df = compute_site_timeseries(str(scene_dir), full_grid, index="ndvi")
    assert len(df) == 2
    assert list(df.columns) == ["id", "veg_type", "date", "mean_ndvi"]
    assert df["date"].tolist() == [
        pd.Timestamp("2020-01-15"),
        pd.Timestamp("2020-06-15"),
    ]
    for row, key in zip(df.itertuples(), ["2020-01-15", "2020-06-15"]):
        assert row.mean_ndvi == pytest.approx(_mean_ndvi(*scene_arrays[key]))


def test_site_timeseries_from_file(scene_dir, sites_file, scene_arrays, tmp_path):
    out = tmp_path / "out" / "ndvi.csv"
    df = compute_site_timeseries(str(scene_dir), sites_file, output=str(out))
    # 2 scenes x 2 sites
    assert len(df) == 4
    assert df["id"].tolist() == [1, 2, 1, 2]
    red, nir = scene_arrays["2020-06-15"]
    wetland_june = df[(df["id"] == 2) & (df["date"] == "2020-06-15")]["mean_ndvi"]
    # the wetland site covers only the lower-right cell
    expected = _mean_ndvi([[red[1][1]]], [[nir[1][1]]])
    assert wetland_june.iloc[0] == pytest.approx(expected)
    assert len(pd.read_csv(out)) == 4


def test_custom_value_column(scene_dir, sites_file):
    cfg = ConfigManager()
    cfg.config["value_col_template"] = "{index}_value"
    df = compute_site_timeseries(str(scene_dir), sites_file, index="ndmi", config=cfg)
    assert "ndmi_value" in df.columns


def test_sites_reprojected_to_scene_crs(scene_dir, sites_gdf, tmp_path):
    path = tmp_path / "sites_wgs84.gpkg"
    sites_gdf.to_crs("EPSG:4326").to_file(path, driver="GPKG")
    df = compute_site_timeseries(str(scene_dir), str(path))
    assert df["mean_ndvi"].notna().all()


def test_sites_without_matching_crs(scene_dir, sites_gdf):
    sites = gpd.GeoDataFrame(
        sites_gdf.drop(columns="geometry"), geometry=list(sites_gdf.geometry)
    )
    assert sites.crs is None
    with pytest.raises(GridMismatchError):
        compute_site_timeseries(str(scene_dir), sites)


def test_undated_scene_is_fatal(scene_dir, sites_file, make_scene, stack_bands):
    make_scene(
        scene_dir / "latest.tif", stack_bands([[0.1, 0.1], [0.1, 0.1]], [[0.5] * 2] * 2)
    )
    with pytest.raises(SceneDateError):
        compute_site_timeseries(str(scene_dir), sites_file)


def test_export_layers(scene_dir, tmp_path):
    svc = ZonalStatsService()
    paths = svc.export_layers(str(scene_dir), str(tmp_path / "layers"), "ndvi")
    assert [os.path.basename(p) for p in paths] == [
        "ndvi_20200115.tif",
        "ndvi_20200615.tif",
    ]


def test_service_logger_named_after_module():
    assert ZonalStatsService().logger.name == "vegtrend.services.zonal"
    injected = logging.getLogger("custom")
    assert ZonalStatsService(logger=injected).logger is injected
