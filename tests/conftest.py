# pylint: disable=missing-module-docstring,missing-function-docstring,redefined-outer-name
import numpy as np
import pytest
import rasterio
import geopandas as gpd
from rasterio.transform import from_origin
from shapely.geometry import box

from vegtrend.core.logger import Logger

GRID_CRS = "EPSG:32633"
# 2 x 2 grid of 1 m cells spanning x 0..2, y 0..2
GRID_TRANSFORM = from_origin(0, 2, 1, 1)

RED_1 = [[0.1, 0.2], [0.3, 0.4]]
NIR_1 = [[0.5, 0.6], [0.7, 0.8]]
RED_2 = [[0.05, 0.05], [0.1, 0.1]]
NIR_2 = [[0.45, 0.55], [0.3, 0.9]]


def six_bands(red, nir):
    """Stack blue, green, red, nir, swir1, swir2 with fixed fillers."""
    red = np.asarray(red, dtype="float32")
    nir = np.asarray(nir, dtype="float32")
    filler = np.ones_like(red)
    return np.stack(
        [filler * 0.04, filler * 0.07, red, nir, filler * 0.2, filler * 0.12]
    )


@pytest.fixture(autouse=True)
def reset_logger():
    """Let every test configure logging from scratch."""
    Logger._configured = False  # pylint: disable=protected-access
    yield
    Logger._configured = False  # pylint: disable=protected-access


@pytest.fixture
def make_scene():
    """Return a writer for float32 multi-band GeoTIFF scenes."""

    def _write(path, bands, nodata=None, crs=GRID_CRS, transform=GRID_TRANSFORM):
        data = np.asarray(bands, dtype="float32")
        count, height, width = data.shape
        with rasterio.open(
            path,
            "w",
            driver="GTiff",
            height=height,
            width=width,
            count=count,
            dtype="float32",
            crs=crs,
            transform=transform,
            nodata=nodata,
        ) as dst:
            dst.write(data)
        return str(path)

    return _write


@pytest.fixture
def scene_dir(tmp_path, make_scene):
    """Two scenes, deliberately written in reverse date order."""
    d = tmp_path / "scenes"
    d.mkdir()
    make_scene(d / "LC08_044034_20200615_20200823.tif", six_bands(RED_2, NIR_2))
    make_scene(d / "LC08_044034_20200115_20200823.tif", six_bands(RED_1, NIR_1))
    return d


@pytest.fixture
def sites_gdf():
    """A full-grid grassland site and a one-cell wetland site."""
    return gpd.GeoDataFrame(
        {
            "id": [1, 2],
            "veg_type": ["grassland", "wetland"],
            "geometry": [box(0, 0, 2, 2), box(1, 0, 2, 1)],
        },
        crs=GRID_CRS,
    )


@pytest.fixture
def sites_file(tmp_path, sites_gdf):
    path = tmp_path / "sites.gpkg"
    sites_gdf.to_file(path, driver="GPKG")
    return str(path)


@pytest.fixture
def stack_bands():
    return six_bands


@pytest.fixture
def scene_arrays():
    """(red, nir) arrays of the ``scene_dir`` scenes keyed by ISO date."""
    return {"2020-01-15": (RED_1, NIR_1), "2020-06-15": (RED_2, NIR_2)}
