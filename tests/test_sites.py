# pylint: disable=missing-module-docstring,missing-function-docstring
import geopandas as gpd
import pytest
from shapely.geometry import Polygon, box

from vegtrend.ingestion.sites import SiteLoadError, load_sites


def test_load_sites(sites_file):
    gdf = load_sites(sites_file)
    assert gdf["id"].tolist() == [1, 2]
    assert gdf["veg_type"].tolist() == ["grassland", "wetland"]
    assert gdf.crs.to_string() == "EPSG:32633"


def test_load_sites_reprojects(sites_file):
    gdf = load_sites(sites_file, target_crs="EPSG:4326")
    assert gdf.crs.to_string() == "EPSG:4326"


def test_load_sites_assigns_ids(tmp_path):
    gdf = gpd.GeoDataFrame(
        {"community": ["heath", "bog"], "geometry": [box(0, 0, 1, 1), box(1, 1, 2, 2)]},
        crs="EPSG:4326",
    )
    path = tmp_path / "sites.geojson"
    gdf.to_file(path, driver="GeoJSON")
    loaded = load_sites(str(path), id_col="site", label_col="community")
    assert loaded["site"].tolist() == [1, 2]


def test_load_sites_repairs_bowtie(tmp_path):
    bowtie = Polygon([(0, 0), (1, 1), (1, 0), (0, 1), (0, 0)])
    gdf = gpd.GeoDataFrame(
        {"id": [1], "veg_type": ["scrub"], "geometry": [bowtie]}, crs="EPSG:4326"
    )
    path = tmp_path / "bowtie.gpkg"
    gdf.to_file(path, driver="GPKG")
    loaded = load_sites(str(path))
    assert loaded.geometry.is_valid.all()


def test_load_sites_missing_label(tmp_path):
    gdf = gpd.GeoDataFrame({"id": [1], "geometry": [box(0, 0, 1, 1)]}, crs="EPSG:4326")
    path = tmp_path / "nolabel.gpkg"
    gdf.to_file(path, driver="GPKG")
    with pytest.raises(SiteLoadError):
        load_sites(str(path))


def test_load_sites_duplicate_ids(tmp_path):
    gdf = gpd.GeoDataFrame(
        {
            "id": [7, 7],
            "veg_type": ["a", "b"],
            "geometry": [box(0, 0, 1, 1), box(1, 1, 2, 2)],
        },
        crs="EPSG:4326",
    )
    path = tmp_path / "dupes.gpkg"
    gdf.to_file(path, driver="GPKG")
    with pytest.raises(SiteLoadError):
        load_sites(str(path))


def test_load_sites_unsupported_format(tmp_path):
    path = tmp_path / "sites.csv"
    path.write_text("id,veg_type\n1,a\n")
    with pytest.raises(SiteLoadError):
        load_sites(str(path))


def test_load_sites_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_sites(str(tmp_path / "missing.gpkg"))
