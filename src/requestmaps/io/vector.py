import logging
import os
import warnings

import geopandas as gpd
import pandas as pd
import pyogrio

from requestmaps.config import CATEGORY_COL, DATE_COL, DEFAULT_CRS, NEIGHBORHOOD_NAME_COL
from requestmaps.constants import FORMAT_ALIASES, FORMAT_DRIVERS
from requestmaps.exceptions import DataLoadError, DataSchemaError
from requestmaps.spatial.geometry import require_points, require_polygons

log = logging.getLogger(__name__)


def resolve_driver(path, fmt=None):
    """
    Work out the OGR driver for a vector file.

    Args:
        path (str): File path.
        fmt (str, optional): Explicit format ('geojson', 'gpkg', 'geopackage', 'shapefile'
            or a driver name). Defaults to None, which infers it from the extension.

    Returns:
        str: OGR driver name.

    Raises:
        DataLoadError: If the format is not one we read.
    """
    if fmt is not None:
        driver = FORMAT_ALIASES.get(str(fmt).lower())
        if driver is None and fmt in FORMAT_DRIVERS.values():
            driver = fmt
        if driver is None:
            raise DataLoadError(f"Unrecognized vector format '{fmt}'.")
        return driver

    ext = os.path.splitext(str(path))[1].lower()
    if ext not in FORMAT_DRIVERS:
        raise DataLoadError(f"Unrecognized vector format for '{path}' (extension '{ext}').")
    return FORMAT_DRIVERS[ext]


def list_layers(path):
    """Return the layer names stored in a (possibly multi-layer) vector file."""
    if not os.path.exists(path):
        raise DataLoadError(f"File not found: {path}")
    try:
        return [str(name) for name, _ in pyogrio.list_layers(path)]
    except Exception as exc:
        raise DataLoadError(f"Could not list layers of {path}: {exc}") from exc


def _check_driver(path, expected, layer=None):
    """Raise DataLoadError if the file's actual OGR driver is not the expected one."""
    try:
        actual = pyogrio.read_info(path, layer=layer)["driver"]
    except Exception as exc:
        raise DataLoadError(f"Could not read {path} as {expected}: {exc}") from exc
    if actual != expected:
        raise DataLoadError(f"{path} is a {actual} file, not {expected}.")


def load_layer(path, fmt=None, layer=None, drop_missing=False):
    """
    Read a vector file into a GeoDataFrame.

    Args:
        path (str): Path to a GeoJSON, GeoPackage or Shapefile.
        fmt (str, optional): Explicit format, see resolve_driver(). The file must be in it.
        layer (str, optional): Layer name inside a multi-layer package.
        drop_missing (bool): Drop rows with null/empty geometry instead of failing.

    Returns:
        geopandas.GeoDataFrame: Features with their attribute table.

    Raises:
        DataLoadError: If the path is missing, the format is unrecognized, the file cannot
            be read or a geometry is missing/invalid.
    """
    path = os.fspath(path)
    if not os.path.exists(path):
        raise DataLoadError(f"File not found: {path}")

    driver = resolve_driver(path, fmt)
    if fmt is not None:
        _check_driver(path, driver, layer)

    read_kwargs = {}
    if layer is not None:
        read_kwargs["layer"] = layer
    try:
        gdf = gpd.read_file(path, **read_kwargs)
    except Exception as exc:
        raise DataLoadError(f"Could not read {path} as {driver}: {exc}") from exc

    if gdf.empty:
        log.info("%s contains no features", path)
        return gdf

    if gdf.crs is None:
        warnings.warn(f"{os.path.basename(path)} has no CRS. Assuming {DEFAULT_CRS}.")
        gdf = gdf.set_crs(DEFAULT_CRS)

    missing = gdf.geometry.isna() | gdf.geometry.is_empty
    if missing.any():
        if not drop_missing:
            raise DataLoadError(f"{path}: {int(missing.sum())} feature(s) have no geometry.")
        warnings.warn(f"{os.path.basename(path)}: dropping {int(missing.sum())} feature(s) without geometry.")
        gdf = gdf[~missing].copy()

    invalid = ~gdf.geometry.is_valid
    if invalid.any():
        raise DataLoadError(f"{path}: {int(invalid.sum())} feature(s) have malformed geometry.")

    log.info("Read %d features from %s (%s, %s)", len(gdf), path, driver, gdf.crs.to_string())
    return gdf


def read_boundary(path, fmt=None, layer=None):
    """
    Read an administrative boundary (polygon) file.

    Returns:
        geopandas.GeoDataFrame: Non-empty polygon collection in one CRS.
    """
    gdf = load_layer(path, fmt=fmt, layer=layer)
    if gdf.empty:
        raise DataLoadError(f"Boundary file {path} contains no features.")
    require_polygons(gdf, "read_boundary")
    return gdf


def read_neighborhoods(path, name_col=NEIGHBORHOOD_NAME_COL, fmt=None, layer=None):
    """
    Read neighborhood polygons, each identified by a name attribute.

    Args:
        path (str): Neighborhood boundary file.
        name_col (str): Column holding the neighborhood name.

    Returns:
        geopandas.GeoDataFrame: Neighborhood polygons.
    """
    gdf = load_layer(path, fmt=fmt, layer=layer)
    require_polygons(gdf, "read_neighborhoods")
    if name_col not in gdf.columns:
        raise DataSchemaError(f"Neighborhood file {path} has no '{name_col}' column.")
    return gdf


def read_requests(path, category_col=CATEGORY_COL, date_col=DATE_COL, fmt=None, layer=None, drop_missing=True):
    """
    Read 311 service-request points.

    Requests without a location are common in 311 extracts, so by default they are
    dropped with a warning rather than failing the whole load.

    Args:
        path (str): Point-feature package (GeoPackage or GeoJSON).
        category_col (str): Column with the request type.
        date_col (str): Column with the request timestamp. Parsed to datetime if present.
        layer (str, optional): Layer inside the package.
        drop_missing (bool): Drop rows with no geometry (default) instead of failing.

    Returns:
        geopandas.GeoDataFrame: Request points.
    """
    gdf = load_layer(path, fmt=fmt, layer=layer, drop_missing=drop_missing)
    require_points(gdf, "read_requests")

    if category_col not in gdf.columns:
        raise DataSchemaError(f"Request file {path} has no '{category_col}' column.")

    if date_col in gdf.columns:
        gdf[date_col] = pd.to_datetime(gdf[date_col], errors="coerce")
        n_bad = int(gdf[date_col].isna().sum())
        if n_bad:
            log.info("%d request(s) in %s have no parseable '%s'", n_bad, path, date_col)
    else:
        log.info("Request file %s has no '%s' column; date filters are unavailable", path, date_col)

    return gdf
