"""
Density surfaces, 2D bins and density contours for request coordinates.

Estimation is delegated to scipy (gaussian_kde), binning to numpy (histogram2d)
and contour tracing to matplotlib (contourf).
"""

import geopandas as gpd
import numpy as np
from matplotlib.figure import Figure
from scipy.stats import gaussian_kde
from shapely.geometry import Polygon

from requestmaps.config import BIN_COUNT, CONTOUR_LEVELS, KDE_GRIDSIZE, KDE_PADDING, X_COL, Y_COL
from requestmaps.types import BinGrid, BoundingBox, DensityGrid


def _xy(coords, x_col=X_COL, y_col=Y_COL):
    if hasattr(coords, "columns"):
        return coords[x_col].to_numpy(dtype=float), coords[y_col].to_numpy(dtype=float)
    arr = np.asarray(coords, dtype=float)
    return arr[:, 0], arr[:, 1]


def _as_bbox(extent):
    if extent is None or isinstance(extent, BoundingBox):
        return extent
    return BoundingBox.from_bounds(extent)


def kernel_density(coords, bw_method=None, gridsize=KDE_GRIDSIZE, extent=None, normalize=False, padding=KDE_PADDING):
    """
    Evaluate a Gaussian kernel density estimate on a regular grid.

    Parameters
    ----------
    coords : DataFrame or array-like
        Coordinate table with x/y columns, or an (n, 2) array
    bw_method : str, float or callable, optional
        Passed to scipy.stats.gaussian_kde ('scott' when None)
    gridsize : int, optional
        Number of evaluation points along each axis
    extent : BoundingBox or tuple, optional
        (minx, miny, maxx, maxy) of the grid. Defaults to the data bounds plus padding
    normalize : bool, optional
        If True, rescale the density so its maximum is 1
    padding : float, optional
        Fraction of the data range added around the data bounds

    Returns
    -------
    DensityGrid

    Raises
    ------
    ValueError
        Fewer than 2 points, or all points identical or on one line
    """
    x, y = _xy(coords)
    if len(x) < 2:
        raise ValueError("Kernel density estimation needs at least 2 points.")

    bbox = _as_bbox(extent)
    if bbox is None:
        bbox = BoundingBox(x.min(), y.min(), x.max(), y.max()).padded(padding)

    xx, yy = np.mgrid[bbox.minx:bbox.maxx:complex(gridsize), bbox.miny:bbox.maxy:complex(gridsize)]
    try:
        kde = gaussian_kde(np.vstack([x, y]), bw_method=bw_method)
        z = kde(np.vstack([xx.ravel(), yy.ravel()])).reshape(xx.shape)
    except np.linalg.LinAlgError as exc:
        # identical or collinear points give a singular covariance
        raise ValueError(
            f"Kernel density estimation needs points spread in two dimensions ({len(x)} given): {exc}"
        ) from exc

    if normalize:
        zmax = z.max()
        if zmax > 0:
            z = z / zmax
    return DensityGrid(xx=xx, yy=yy, z=z, extent=bbox, normalized=normalize)


def bin_counts(coords, bins=BIN_COUNT, extent=None):
    """
    Count points in a regular 2D grid of rectangular bins.

    Returns
    -------
    BinGrid
        counts has shape (nx, ny), indexed [x_bin, y_bin]
    """
    x, y = _xy(coords)
    bbox = _as_bbox(extent)
    hist_range = None if bbox is None else [[bbox.minx, bbox.maxx], [bbox.miny, bbox.maxy]]
    counts, xedges, yedges = np.histogram2d(x, y, bins=bins, range=hist_range)
    return BinGrid(counts=counts, xedges=xedges, yedges=yedges)


def density_levels(grid, quantiles):
    """Density values at the given quantiles of the grid, sorted ascending."""
    return np.sort(np.quantile(grid.z, quantiles))


def _rings_to_geometry(rings):
    geom = None
    for ring in rings:
        if len(ring) < 4:
            continue
        poly = Polygon(ring)
        if not poly.is_valid:
            poly = poly.buffer(0)
        # contourf paths are filled even-odd: nested rings are holes
        geom = poly if geom is None else geom.symmetric_difference(poly)
    return geom


def density_contours(grid, levels=CONTOUR_LEVELS, crs=None, min_level=None):
    """
    Trace filled density contours into polygons.

    Parameters
    ----------
    grid : DensityGrid
        Output of kernel_density
    levels : int or array-like, optional
        Number of levels or explicit level boundaries, as for matplotlib contourf
    crs : str, optional
        CRS of the coordinates the grid was computed from
    min_level : float, optional
        Drop bands whose upper bound is at or below this density

    Returns
    -------
    GeoDataFrame
        One (Multi)Polygon per density band with level_min and level_max columns,
        ordered from low to high density
    """
    fig = Figure()
    ax = fig.add_subplot()
    cs = ax.contourf(grid.xx, grid.yy, grid.z, levels=levels)

    level_min, level_max, geoms = [], [], []
    bounds = cs.levels
    for i, path in enumerate(cs.get_paths()):
        if i + 1 >= len(bounds):
            break
        lo, hi = float(bounds[i]), float(bounds[i + 1])
        if min_level is not None and hi <= min_level:
            continue
        geom = _rings_to_geometry(path.to_polygons(closed_only=True))
        if geom is None or geom.is_empty:
            continue
        level_min.append(lo)
        level_max.append(hi)
        geoms.append(geom)

    return gpd.GeoDataFrame({"level_min": level_min, "level_max": level_max}, geometry=geoms, crs=crs)
