import json

import pytest
import geopandas as gpd
import pandas as pd
from shapely.geometry import Point, box

from requestmaps.exceptions import DataLoadError, DataSchemaError, GeometryTypeError
from requestmaps.io.vector import (
    list_layers,
    load_layer,
    read_boundary,
    read_neighborhoods,
    read_requests,
    resolve_driver,
)


def _write_geojson(path, features):
    with open(path, 'w') as f:
        json.dump({"type": "FeatureCollection", "features": features}, f)


def _feature(geometry, **props):
    return {"type": "Feature", "properties": props, "geometry": geometry}


def test_read_boundary(data_files):
    gdf = read_boundary(data_files["boundary"])

    assert isinstance(gdf, gpd.GeoDataFrame)
    assert len(gdf) > 0
    assert gdf.crs is not None
    assert set(gdf.geom_type) <= {"Polygon", "MultiPolygon"}


def test_read_neighborhoods(data_files):
    gdf = read_neighborhoods(data_files["neighborhoods"])
    assert sorted(gdf['name']) == ['East', 'West']


def test_read_neighborhoods_missing_name_column(data_files):
    with pytest.raises(DataSchemaError):
        read_neighborhoods(data_files["neighborhoods"], name_col="NAME")


def test_read_requests_from_geopackage(data_files):
    gdf = read_requests(data_files["requests"], layer="requests")

    assert len(gdf) == 100
    assert set(gdf.geom_type) == {"Point"}
    assert pd.api.types.is_datetime64_any_dtype(gdf['CreatedDate'])
    assert (gdf['RequestType'] == 'Bulky Items').sum() == 30


def test_list_layers(data_files):
    assert list_layers(data_files["requests"]) == ["requests"]


def test_list_layers_missing_file(tmp_path):
    with pytest.raises(DataLoadError):
        list_layers(str(tmp_path / "nope.gpkg"))


def test_missing_file(tmp_path):
    with pytest.raises(DataLoadError, match="not found"):
        load_layer(tmp_path / "missing.geojson")


def test_unrecognized_extension(tmp_path):
    path = tmp_path / "boundary.txt"
    path.write_text("not a vector file")
    with pytest.raises(DataLoadError, match="Unrecognized"):
        load_layer(path)


def test_unreadable_file(tmp_path):
    path = tmp_path / "broken.geojson"
    path.write_text("{ this is not json")
    with pytest.raises(DataLoadError):
        load_layer(path)


def test_resolve_driver():
    assert resolve_driver("a.geojson") == "GeoJSON"
    assert resolve_driver("a.GPKG") == "GPKG"
    assert resolve_driver("a.data", fmt="geopackage") == "GPKG"
    assert resolve_driver("a.data", fmt="GeoJSON") == "GeoJSON"
    with pytest.raises(DataLoadError):
        resolve_driver("a.data", fmt="kml")


def test_malformed_geometry(tmp_path):
    # Self-intersecting "bowtie" polygon
    bowtie = {"type": "Polygon", "coordinates": [[[0, 0], [1, 1], [1, 0], [0, 1], [0, 0]]]}
    path = tmp_path / "bowtie.geojson"
    _write_geojson(path, [_feature(bowtie, name="bad")])

    with pytest.raises(DataLoadError, match="malformed"):
        read_boundary(path)


def test_boundary_without_geometry(tmp_path):
    path = tmp_path / "empty_geom.geojson"
    _write_geojson(path, [_feature(None, name="nothing")])

    with pytest.raises(DataLoadError):
        read_boundary(path)


def test_boundary_with_points_rejected(tmp_path):
    path = tmp_path / "points.geojson"
    _write_geojson(path, [_feature({"type": "Point", "coordinates": [0, 0]}, name="p")])

    with pytest.raises(GeometryTypeError):
        read_boundary(path)


def test_empty_boundary(tmp_path):
    path = tmp_path / "empty.geojson"
    _write_geojson(path, [])

    with pytest.raises(DataLoadError):
        read_boundary(path)


def test_requests_missing_locations_dropped(tmp_path):
    path = tmp_path / "requests.geojson"
    _write_geojson(path, [
        _feature({"type": "Point", "coordinates": [-118.3, 34.0]}, RequestType="Bulky Items", CreatedDate="2023-01-05"),
        _feature(None, RequestType="Bulky Items", CreatedDate="2023-01-06"),
        _feature({"type": "Point", "coordinates": [-118.2, 34.1]}, RequestType="Feedback", CreatedDate="not a date"),
    ])

    with pytest.warns(UserWarning, match="without geometry"):
        gdf = read_requests(path)

    assert len(gdf) == 2
    assert gdf['CreatedDate'].iloc[0] == pd.Timestamp("2023-01-05")
    assert pd.isna(gdf['CreatedDate'].iloc[1])

    with pytest.raises(DataLoadError):
        read_requests(path, drop_missing=False)


def test_requests_must_be_points(data_files):
    with pytest.raises(GeometryTypeError):
        read_requests(data_files["boundary"], category_col="name")


def test_requests_missing_category_column(data_files):
    with pytest.raises(DataSchemaError):
        read_requests(data_files["requests"], category_col="ServiceType")


def test_missing_crs_assigned_default(tmp_path, mocker):
    path = tmp_path / "nocrs.geojson"
    path.write_text("{}")
    mocker.patch(
        'requestmaps.io.vector.gpd.read_file',
        return_value=gpd.GeoDataFrame({'name': ['x']}, geometry=[box(0, 0, 1, 1)])
    )

    with pytest.warns(UserWarning, match="no CRS"):
        gdf = load_layer(path)

    assert gdf.crs == "EPSG:4326"


def test_explicit_format_must_match_file(data_files):
    with pytest.raises(DataLoadError, match="not GPKG"):
        load_layer(data_files["boundary"], fmt="gpkg")

    with pytest.raises(DataLoadError, match="not GeoJSON"):
        load_layer(data_files["requests"], fmt="geojson", layer="requests")


def test_explicit_format_matching_file(data_files):
    gdf = load_layer(data_files["boundary"], fmt="geojson")
    assert len(gdf) > 0
