"""
Choropleth and interactive mapping of service requests.
"""

import numpy as np
import pandas as pd
import geopandas as gpd

from requestmaps.config import CATEGORY_COL, DATE_COL, NEIGHBORHOOD_NAME_COL
from requestmaps.processing.filters import sample_rows
from requestmaps.spatial.crs import check_common_crs
from requestmaps.spatial.geometry import boundary_geometry
from requestmaps.types import Layer

from .layers import render_layers


def plot_choropleth(gdf, column, title, boundary=None, log1p=False, basemap=None, scale_bar=True, ax=None):
    """
    Create a choropleth map with an optional basemap and boundary outline.

    Parameters

    gdf : GeoDataFrame
        Polygons to plot (must contain the specified column)
    column : str
        Column name to visualize
    title : str
        Map title
    boundary : GeoDataFrame or shapely.geometry, optional
        Area boundary to overlay; also sets the view extent
    log1p : bool, optional
        If True, apply log(1+x) transformation to the data
    basemap : BasemapOptions, optional
        Tiles to draw underneath
    scale_bar : bool, optional
        Add a scale bar

    Returns

    tuple
        (fig, ax) matplotlib figure and axes objects
    """
    d = gdf.copy()
    d[column] = pd.to_numeric(d[column], errors="coerce").fillna(0)
    if log1p:
        d[column] = np.log1p(d[column])

    layers = [Layer(d, kind="choropleth", column=column)]
    extent = None
    if boundary is not None:
        if not isinstance(boundary, gpd.GeoDataFrame):
            boundary = gpd.GeoDataFrame(geometry=[boundary], crs=d.crs)
        layers.append(Layer(boundary, kind="outline", style={"linewidth": 2}))
        extent = boundary.total_bounds

    return render_layers(layers, basemap=basemap, title=title, extent=extent, scale_bar=scale_bar, ax=ax)


def plot_interactive_request_map(requests, boundary=None, neighborhoods=None, sample=None,
                                 category_col=CATEGORY_COL, date_col=DATE_COL,
                                 name_col=NEIGHBORHOOD_NAME_COL, random_state=None):
    """
    Create an interactive Folium map of request locations.

    Parameters

    requests : GeoDataFrame
        Request points
    boundary : GeoDataFrame, optional
        Area boundary outline
    neighborhoods : GeoDataFrame, optional
        Neighborhood polygons, shown with a name tooltip
    sample : int, optional
        Number of requests to draw; large extracts are slow in the browser
    random_state : int, optional
        Seed for the sample

    Returns

    folium.Map
        Interactive map object (use .save('filename.html') to export)
    """
    try:
        import folium
    except ImportError:
        raise ImportError("folium is required. Install with: pip install folium")

    check_common_crs(*[f for f in (requests, boundary, neighborhoods) if f is not None])

    if sample is not None and sample < len(requests):
        requests = sample_rows(requests, sample, random_state=random_state)
    pts = requests.to_crs(epsg=4326)

    if boundary is not None:
        center_geom = boundary_geometry(boundary.to_crs(epsg=4326)).centroid
    else:
        minx, miny, maxx, maxy = pts.total_bounds
        center_geom = gpd.points_from_xy([(minx + maxx) / 2], [(miny + maxy) / 2])[0]
    m = folium.Map(location=[center_geom.y, center_geom.x], zoom_start=11, tiles="CartoDB positron")

    if neighborhoods is not None:
        hoods = neighborhoods.to_crs(epsg=4326)[[name_col, "geometry"]]
        folium.GeoJson(
            hoods,
            name="Neighborhoods",
            style_function=lambda x: {"fillOpacity": 0.05, "color": "grey", "weight": 1},
            tooltip=folium.GeoJsonTooltip(fields=[name_col], aliases=["Neighborhood"]),
        ).add_to(m)

    if boundary is not None:
        folium.GeoJson(
            data=boundary.to_crs(epsg=4326)[["geometry"]].__geo_interface__,
            name="Boundary",
            style_function=lambda x: {"fillOpacity": 0, "color": "black", "weight": 2}
        ).add_to(m)

    layer = folium.FeatureGroup(name="Requests")
    for _, row in pts.iterrows():
        popup = str(row[category_col]) if category_col in pts.columns else None
        if popup is not None and date_col in pts.columns and pd.notna(row[date_col]):
            popup = f"{popup} ({pd.Timestamp(row[date_col]).date()})"
        folium.CircleMarker(
            location=[row.geometry.y, row.geometry.x],
            radius=2,
            color="crimson",
            fill=True,
            fill_opacity=0.6,
            weight=0,
            popup=popup,
        ).add_to(layer)
    layer.add_to(m)

    folium.LayerControl().add_to(m)

    return m
