import matplotlib
matplotlib.use('Agg')  # Non-interactive backend for testing

import numpy as np
import pandas as pd
import geopandas as gpd
import pytest
import matplotlib.pyplot as plt
from shapely.geometry import Point, box


@pytest.fixture(autouse=True)
def close_figures():
    yield
    plt.close("all")


@pytest.fixture
def proj_crs():
    return "EPSG:3857"  # web mercator (meters)


@pytest.fixture
def boundary_gdf(proj_crs):
    # 10 km x 10 km square
    return gpd.GeoDataFrame({'name': ['City']}, geometry=[box(0, 0, 10000, 10000)], crs=proj_crs)


@pytest.fixture
def neighborhoods_gdf(proj_crs):
    # Two halves of the city
    return gpd.GeoDataFrame(
        {'name': ['West', 'East']},
        geometry=[box(0, 0, 5000, 10000), box(5000, 0, 10000, 10000)],
        crs=proj_crs
    )


@pytest.fixture
def requests_gdf(proj_crs):
    """100 requests inside the city, 30 of them 'Bulky Items'."""
    rng = np.random.default_rng(0)
    n = 100
    xs = rng.uniform(100, 9900, n)
    ys = rng.uniform(100, 9900, n)
    types = ['Bulky Items'] * 30 + ['Graffiti Removal'] * 50 + ['Illegal Dumping Pickup'] * 20
    dates = pd.date_range("2023-01-01", periods=n, freq="3D")
    return gpd.GeoDataFrame(
        {'RequestType': types, 'CreatedDate': dates},
        geometry=[Point(x, y) for x, y in zip(xs, ys)],
        crs=proj_crs
    )


@pytest.fixture
def data_files(tmp_path, boundary_gdf, neighborhoods_gdf, requests_gdf):
    """Boundary/neighborhood GeoJSON and a request GeoPackage in EPSG:4326."""
    boundary_path = tmp_path / "boundary.geojson"
    hoods_path = tmp_path / "neighborhoods.geojson"
    requests_path = tmp_path / "requests.gpkg"

    boundary_gdf.to_crs("EPSG:4326").to_file(boundary_path, driver="GeoJSON")
    neighborhoods_gdf.to_crs("EPSG:4326").to_file(hoods_path, driver="GeoJSON")
    requests_gdf.to_crs("EPSG:4326").to_file(requests_path, layer="requests", driver="GPKG")

    return {
        "boundary": str(boundary_path),
        "neighborhoods": str(hoods_path),
        "requests": str(requests_path),
    }
