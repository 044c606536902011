"""
Spatial and temporal aggregation of service requests.
"""

import geopandas as gpd
import pandas as pd

from requestmaps.config import DATE_COL, NEIGHBORHOOD_NAME_COL
from requestmaps.exceptions import DataSchemaError
from requestmaps.spatial.crs import check_common_crs
from requestmaps.spatial.geometry import require_points, require_polygons


def count_requests_to_neighborhoods(requests, neighborhoods, name_col=NEIGHBORHOOD_NAME_COL, count_col="request_count"):
    """
    Count request points per neighborhood polygon.

    Parameters
    ----------
    requests : GeoDataFrame
        Request locations (points)
    neighborhoods : GeoDataFrame
        Neighborhood polygons, same CRS as requests
    name_col : str, optional
        Column identifying each neighborhood
    count_col : str, optional
        Name of the output count column

    Returns
    -------
    GeoDataFrame
        Neighborhoods with a count column (0 where no request falls inside)
    """
    if name_col not in neighborhoods.columns:
        raise DataSchemaError(f"Neighborhoods have no '{name_col}' column.")
    require_points(requests, "count_requests_to_neighborhoods")
    require_polygons(neighborhoods, "count_requests_to_neighborhoods")
    check_common_crs(requests, neighborhoods)

    joined = gpd.sjoin(requests[["geometry"]], neighborhoods[[name_col, "geometry"]], how="inner", predicate="within")
    counts = joined.groupby(name_col).size().reset_index(name=count_col)
    out = neighborhoods.merge(counts, on=name_col, how="left")
    out[count_col] = out[count_col].fillna(0).astype(int)
    return out


def requests_per_period(requests, date_col=DATE_COL, freq="MS"):
    """
    Count requests per time period.

    Parameters
    ----------
    requests : DataFrame
        Requests with a datetime column
    date_col : str, optional
        Timestamp column
    freq : str, optional
        pandas offset alias, month start by default

    Returns
    -------
    Series
        Counts indexed by period start, with empty periods as 0
    """
    if date_col not in requests.columns:
        raise DataSchemaError(f"Requests have no '{date_col}' column.")
    stamps = pd.to_datetime(requests[date_col], errors="coerce").dropna()
    counts = pd.Series(1, index=pd.DatetimeIndex(stamps), name="count")
    return counts.resample(freq).sum().astype(int)
