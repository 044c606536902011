import pytest
import geopandas as gpd
import pandas as pd
from shapely.geometry import Point, box

from requestmaps.exceptions import CRSMismatchError
from requestmaps.spatial.crs import check_common_crs, to_common_crs, warn_if_geographic
from requestmaps.spatial.geometry import boundary_geometry


def test_common_crs(boundary_gdf, requests_gdf):
    crs = check_common_crs(boundary_gdf, requests_gdf)
    assert crs == "EPSG:3857"


def test_common_crs_skips_plain_tables(boundary_gdf):
    table = pd.DataFrame({'x': [1.0], 'y': [2.0]})
    assert check_common_crs(table, boundary_gdf) == "EPSG:3857"
    assert check_common_crs(table) is None


def test_mismatched_crs(boundary_gdf, requests_gdf):
    with pytest.raises(CRSMismatchError):
        check_common_crs(boundary_gdf, requests_gdf.to_crs("EPSG:4326"))


def test_missing_crs_mixed_with_crs(boundary_gdf):
    no_crs = gpd.GeoDataFrame(geometry=[Point(0, 0)])
    with pytest.raises(CRSMismatchError):
        check_common_crs(boundary_gdf, no_crs)


def test_to_common_crs(boundary_gdf, requests_gdf):
    a, b = to_common_crs([boundary_gdf.to_crs("EPSG:4326"), requests_gdf], "EPSG:3857")

    assert a.crs == "EPSG:3857"
    assert b is requests_gdf
    assert check_common_crs(a, b) == "EPSG:3857"


def test_warn_if_geographic():
    with pytest.warns(UserWarning):
        assert warn_if_geographic("EPSG:4326")
    assert not warn_if_geographic("EPSG:3857")


def test_boundary_geometry(neighborhoods_gdf):
    geom = boundary_geometry(neighborhoods_gdf)
    assert geom.equals(box(0, 0, 10000, 10000))
