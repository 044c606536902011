import logging

import numpy as np
import pandas as pd

from requestmaps.config import CATEGORY_COL, DATE_COL, X_COL, Y_COL
from requestmaps.exceptions import DataSchemaError, GeometryTypeError, SampleSizeError
from requestmaps.spatial.crs import check_common_crs
from requestmaps.spatial.geometry import boundary_geometry, require_points

log = logging.getLogger(__name__)


def _require_column(table, column):
    if column not in table.columns:
        raise DataSchemaError(f"Column '{column}' not found. Available: {list(table.columns)}")


def filter_by_category(gdf, value, column=CATEGORY_COL):
    """
    Select the rows whose category equals a value.

    Args:
        gdf (pandas.DataFrame or geopandas.GeoDataFrame): Attribute table.
        value (str or list): Category value, or several values to keep.
        column (str): Categorical column to test.

    Returns:
        Same type as gdf: A new table with the matching rows. Empty if nothing matches.
    """
    _require_column(gdf, column)
    if isinstance(value, (list, tuple, set)):
        mask = gdf[column].isin(list(value))
    else:
        mask = gdf[column] == value
    subset = gdf[mask].copy()
    log.info("Kept %d of %d rows where %s == %r", len(subset), len(gdf), column, value)
    return subset


def filter_by_date(gdf, start=None, end=None, column=DATE_COL):
    """
    Select the rows with start <= timestamp < end.

    Either bound may be None. Rows without a timestamp are dropped when a bound is given.
    """
    _require_column(gdf, column)
    ts = pd.to_datetime(gdf[column], errors="coerce")
    mask = pd.Series(True, index=gdf.index)
    if start is not None:
        mask &= ts >= _bound(start, ts)
    if end is not None:
        mask &= ts < _bound(end, ts)
    return gdf[mask].copy()


def _bound(value, ts):
    """A Timestamp comparable with ts: naive bounds take the column's timezone, and the reverse."""
    bound = pd.Timestamp(value)
    tz = getattr(ts.dt, "tz", None)
    if tz is not None and bound.tzinfo is None:
        return bound.tz_localize(tz)
    if tz is None and bound.tzinfo is not None:
        return bound.tz_convert(None)
    return bound


def clip_to_boundary(gdf, boundary):
    """
    Keep the points that fall within a boundary.

    Args:
        gdf (geopandas.GeoDataFrame): Points.
        boundary (geopandas.GeoDataFrame): Boundary polygons in the same CRS.

    Returns:
        geopandas.GeoDataFrame: Points within the boundary.
    """
    check_common_crs(gdf, boundary)
    geom = boundary_geometry(boundary)
    return gdf[gdf.geometry.within(geom)].copy()


def extract_coordinates(gdf, x_col=X_COL, y_col=Y_COL):
    """
    Project point geometries into a plain two-column table.

    Args:
        gdf (geopandas.GeoDataFrame): Point geometries.
        x_col (str): Name of the horizontal column.
        y_col (str): Name of the vertical column.

    Returns:
        pandas.DataFrame: One row per point with float columns x_col and y_col,
        indexed like the input.

    Raises:
        GeometryTypeError: If any geometry is not a Point, or is null or empty.
    """
    require_points(gdf, "extract_coordinates")
    missing = gdf.geometry.isna() | gdf.geometry.is_empty
    if missing.any():
        raise GeometryTypeError(
            f"extract_coordinates expects Point geometries but found {int(missing.sum())} null or empty one(s)."
        )
    if gdf.empty:
        return pd.DataFrame({x_col: pd.Series(dtype=float), y_col: pd.Series(dtype=float)})
    return pd.DataFrame(
        {x_col: gdf.geometry.x.astype(float), y_col: gdf.geometry.y.astype(float)},
        index=gdf.index,
    )


def sample_indices(n_rows, size, random_state=None):
    """
    Draw sorted positional indices uniformly at random without replacement.

    Raises:
        SampleSizeError: If size is negative or larger than n_rows.
    """
    if size < 0:
        raise SampleSizeError(f"Sample size must be non-negative, got {size}.")
    if size > n_rows:
        raise SampleSizeError(f"Cannot sample {size} rows from {n_rows}.")
    rng = np.random.default_rng(random_state)
    return np.sort(rng.choice(n_rows, size=size, replace=False))


def sample_rows(table, size, random_state=None):
    """
    Uniformly sample rows of a table without replacement.

    Subsampling keeps density and scatter plots fast on large request extracts.

    Args:
        table (pandas.DataFrame): Any table (GeoDataFrame included).
        size (int): Number of rows to keep.
        random_state (int, optional): Seed for a reproducible draw.

    Returns:
        Same type as table: size distinct rows of the table, in their original order.

    Raises:
        SampleSizeError: If size exceeds the rows available.
    """
    positions = sample_indices(len(table), size, random_state=random_state)
    return table.iloc[positions].copy()


def category_counts(gdf, column=CATEGORY_COL, top=None):
    """Number of rows per category, most frequent first."""
    _require_column(gdf, column)
    counts = gdf[column].value_counts()
    counts.index.name = column
    counts.name = "count"
    if top is not None:
        counts = counts.head(top)
    return counts
