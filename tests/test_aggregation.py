import pytest
import geopandas as gpd
import pandas as pd
from shapely.geometry import Point, box

from requestmaps.exceptions import CRSMismatchError, DataSchemaError
from requestmaps.processing.aggregation import count_requests_to_neighborhoods, requests_per_period


def test_count_requests_to_neighborhoods(proj_crs):
    hoods = gpd.GeoDataFrame(
        {'name': ['A', 'B', 'C']},
        geometry=[box(0, 0, 1, 1), box(1, 0, 2, 1), box(2, 0, 3, 1)],
        crs=proj_crs
    )
    requests = gpd.GeoDataFrame(
        {'RequestType': ['Bulky Items'] * 4},
        geometry=[Point(0.5, 0.5), Point(0.7, 0.7), Point(1.5, 0.5), Point(10, 10)],
        crs=proj_crs
    )

    result = count_requests_to_neighborhoods(requests, hoods)

    assert isinstance(result, gpd.GeoDataFrame)
    counts = dict(zip(result['name'], result['request_count']))
    assert counts == {'A': 2, 'B': 1, 'C': 0}


def test_counts_sum_to_contained_points(requests_gdf, neighborhoods_gdf):
    result = count_requests_to_neighborhoods(requests_gdf, neighborhoods_gdf)
    assert result['request_count'].sum() == len(requests_gdf)


def test_count_requires_name_column(requests_gdf, neighborhoods_gdf):
    with pytest.raises(DataSchemaError):
        count_requests_to_neighborhoods(requests_gdf, neighborhoods_gdf, name_col='NAME')


def test_count_requires_same_crs(requests_gdf, neighborhoods_gdf):
    with pytest.raises(CRSMismatchError):
        count_requests_to_neighborhoods(requests_gdf, neighborhoods_gdf.to_crs("EPSG:4326"))


def test_requests_per_period():
    df = pd.DataFrame({'CreatedDate': pd.to_datetime([
        "2023-01-03", "2023-01-20", "2023-03-02", None
    ])})

    monthly = requests_per_period(df)

    assert list(monthly.index) == list(pd.to_datetime(["2023-01-01", "2023-02-01", "2023-03-01"]))
    assert list(monthly.values) == [2, 0, 1]
