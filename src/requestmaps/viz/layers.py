"""
Compose a map from an ordered list of drawing layers.
"""

import logging

import matplotlib.pyplot as plt
import numpy as np
from pyproj import CRS

from requestmaps.config import BIN_COUNT, CONTOUR_LEVELS, FIGSIZE, HEXBIN_GRIDSIZE, X_COL, Y_COL
from requestmaps.exceptions import CRSMismatchError
from requestmaps.processing.density import bin_counts
from requestmaps.processing.filters import extract_coordinates
from requestmaps.spatial.crs import check_common_crs
from requestmaps.types import BinGrid, BoundingBox, DensityGrid

from .basemap import add_basemap, add_north_arrow, add_scale_bar

log = logging.getLogger(__name__)


def _coords(data):
    """Plain x/y arrays from a coordinate table or a point GeoDataFrame."""
    if hasattr(data, "geometry") and hasattr(data, "crs"):
        data = extract_coordinates(data)
    return data[X_COL].to_numpy(dtype=float), data[Y_COL].to_numpy(dtype=float)


def _draw_polygons(ax, layer, style):
    style.setdefault("facecolor", "lightgrey")
    style.setdefault("edgecolor", "white")
    style.setdefault("linewidth", 0.5)
    layer.data.plot(ax=ax, **style)


def _draw_outline(ax, layer, style):
    style.setdefault("color", "black")
    style.setdefault("linewidth", 1.5)
    layer.data.boundary.plot(ax=ax, **style)


def _draw_points(ax, layer, style):
    style.setdefault("markersize", 2)
    style.setdefault("alpha", 0.5)
    if layer.column is not None:
        style.setdefault("legend", True)
        layer.data.plot(ax=ax, column=layer.column, **style)
    else:
        style.setdefault("color", "tab:red")
        layer.data.plot(ax=ax, **style)


def _draw_choropleth(ax, layer, style):
    style.setdefault("legend", True)
    style.setdefault("cmap", "viridis")
    style.setdefault("edgecolor", "white")
    style.setdefault("linewidth", 0.35)
    style.setdefault("missing_kwds", {"color": "lightgrey", "label": "No data"})
    layer.data.plot(ax=ax, column=layer.column, **style)


def _draw_bins(ax, layer, style):
    grid = layer.data
    if not isinstance(grid, BinGrid):
        grid = bin_counts(layer.data, bins=style.pop("bins", BIN_COUNT))
    style.setdefault("cmap", "viridis")
    counts = np.ma.masked_equal(grid.counts.T, 0)
    return ax.pcolormesh(grid.xedges, grid.yedges, counts, **style)


def _draw_hexbin(ax, layer, style):
    x, y = _coords(layer.data)
    style.setdefault("gridsize", HEXBIN_GRIDSIZE)
    style.setdefault("cmap", "viridis")
    style.setdefault("mincnt", 1)
    return ax.hexbin(x, y, **style)


def _draw_density(ax, layer, style):
    grid = layer.data
    style.setdefault("cmap", "magma")
    style.setdefault("alpha", 0.7)
    return ax.imshow(grid.z.T, extent=grid.extent.as_extent(), origin="lower", aspect="auto", **style)


def _draw_contours(ax, layer, style):
    grid = layer.data
    style.setdefault("levels", CONTOUR_LEVELS)
    style.setdefault("cmap", "magma")
    return ax.contour(grid.xx, grid.yy, grid.z, **style)


def _draw_filled_contours(ax, layer, style):
    style.setdefault("cmap", "magma")
    style.setdefault("alpha", 0.5)
    if isinstance(layer.data, DensityGrid):
        grid = layer.data
        style.setdefault("levels", CONTOUR_LEVELS)
        return ax.contourf(grid.xx, grid.yy, grid.z, **style)
    # density_contours() output
    style.setdefault("edgecolor", "none")
    column = layer.column or "level_max"
    layer.data.plot(ax=ax, column=column, **style)
    return None


_DRAWERS = {
    "polygons": _draw_polygons,
    "outline": _draw_outline,
    "points": _draw_points,
    "choropleth": _draw_choropleth,
    "bins": _draw_bins,
    "hexbin": _draw_hexbin,
    "density": _draw_density,
    "contours": _draw_contours,
    "filled_contours": _draw_filled_contours,
}


def draw_layer(ax, layer):
    """
    Draw one Layer on an axes.

    A style key ``colorbar`` (bool or label string) adds a colorbar for raster/contour layers.

    Returns

    matplotlib artist or None
        The mappable for bins, hexbin, density and contour layers
    """
    style = dict(layer.style)
    colorbar = style.pop("colorbar", False)
    if layer.label is not None and layer.kind in ("polygons", "points"):
        style.setdefault("label", layer.label)

    mappable = _DRAWERS[layer.kind](ax, layer, style)

    if colorbar and mappable is not None:
        label = colorbar if isinstance(colorbar, str) else (layer.label or "")
        ax.figure.colorbar(mappable, ax=ax, shrink=0.7, label=label)
    return mappable


def _layers_extent(layers):
    bounds = []
    for layer in layers:
        data = layer.data
        if isinstance(data, (DensityGrid, BinGrid)):
            b = data.extent
            bounds.append((b.minx, b.miny, b.maxx, b.maxy))
        elif hasattr(data, "total_bounds") and len(data):
            bounds.append(tuple(data.total_bounds))
    if not bounds:
        return None
    arr = np.array(bounds, dtype=float)
    return BoundingBox(arr[:, 0].min(), arr[:, 1].min(), arr[:, 2].max(), arr[:, 3].max())


def render_layers(layers, crs=None, basemap=None, title=None, ax=None, extent=None,
                  scale_bar=False, north_arrow=False, legend=False, figsize=FIGSIZE):
    """
    Render an ordered list of layers into one map.

    Parameters

    layers : list of Layer
        Drawn in order, first layer at the bottom
    crs : str, optional
        CRS of the figure. Geo layers must share it. Inferred from the layers when None
    basemap : BasemapOptions, optional
        Draw tiles underneath the layers when given
    title : str, optional
        Axes title
    ax : matplotlib.axes.Axes, optional
        Draw into an existing axes instead of a new figure
    extent : BoundingBox or tuple, optional
        (minx, miny, maxx, maxy) view. Defaults to the union of layer extents
    scale_bar, north_arrow, legend : bool, optional
        Map furniture

    Returns

    tuple
        (fig, ax) matplotlib figure and axes objects

    Raises

    CRSMismatchError
        If the layers (or the requested crs) disagree on CRS
    """
    layer_crs = check_common_crs(*[layer.data for layer in layers])
    if crs is not None and layer_crs is not None and CRS.from_user_input(crs) != layer_crs:
        raise CRSMismatchError(f"Layers are in {layer_crs.to_string()} but the figure CRS is {crs}.")
    crs = crs if crs is not None else layer_crs

    if ax is None:
        fig, ax = plt.subplots(figsize=figsize)
    else:
        fig = ax.figure

    for layer in layers:
        draw_layer(ax, layer)

    if extent is not None and not isinstance(extent, BoundingBox):
        extent = BoundingBox.from_bounds(extent)
    extent = extent or _layers_extent(layers)
    if extent is not None:
        ax.set_xlim(extent.minx, extent.maxx)
        ax.set_ylim(extent.miny, extent.maxy)

    if basemap is not None:
        if crs is None:
            raise CRSMismatchError("A basemap needs a CRS, but no layer carries one.")
        add_basemap(ax, crs, basemap)
    if scale_bar:
        add_scale_bar(ax, crs=crs)
    if north_arrow:
        add_north_arrow(ax)
    if legend and ax.get_legend_handles_labels()[0]:
        ax.legend(loc="upper left")

    ax.set_axis_off()
    if title:
        ax.set_title(title)
    log.debug("Rendered %d layer(s) in %s", len(layers), crs)
    return fig, ax
