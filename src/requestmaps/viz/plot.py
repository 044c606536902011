"""
Point, binned and density maps of request locations, plus summary charts.
"""

import logging
import os

import matplotlib.pyplot as plt
import pandas as pd

from requestmaps.config import BIN_COUNT, CONTOUR_LEVELS, DPI, HEXBIN_GRIDSIZE
from requestmaps.types import BinGrid, DensityGrid, Layer

from .layers import render_layers

log = logging.getLogger(__name__)


def _base_layers(boundary, neighborhoods):
    layers = []
    if neighborhoods is not None:
        layers.append(Layer(neighborhoods, kind="outline", style={"color": "grey", "linewidth": 0.4}))
    if boundary is not None:
        layers.append(Layer(boundary, kind="outline"))
    return layers


def plot_points(requests, title, boundary=None, neighborhoods=None, column=None, basemap=None,
                scale_bar=True, markersize=2, ax=None):
    """
    Scatter request locations over boundary outlines.

    Parameters

    requests : GeoDataFrame
        Request points
    title : str
        Plot title
    boundary, neighborhoods : GeoDataFrame, optional
        Outlines drawn above the points
    column : str, optional
        Colour points by this column (e.g. the request type)
    basemap : BasemapOptions, optional
        Tiles to draw underneath

    Returns

    tuple
        (fig, ax) matplotlib figure and axes objects
    """
    layers = [Layer(requests, kind="points", column=column, style={"markersize": markersize})]
    layers += _base_layers(boundary, neighborhoods)
    extent = boundary.total_bounds if boundary is not None else None
    return render_layers(layers, basemap=basemap, title=title, extent=extent, scale_bar=scale_bar, ax=ax)


def plot_bins(grid, title, boundary=None, neighborhoods=None, crs=None, basemap=None, bins=BIN_COUNT,
              scale_bar=True, ax=None):
    """
    Heatmap of request counts in rectangular 2D bins.

    Parameters

    grid : BinGrid or DataFrame
        Output of bin_counts, or a coordinate table to bin
    title : str
        Plot title
    crs : str, optional
        CRS of the coordinates when no outline layer carries one
    bins : int, optional
        Bins per axis when grid is a coordinate table

    Returns

    tuple
        (fig, ax) matplotlib figure and axes objects
    """
    style = {"colorbar": "Requests per bin", "alpha": 0.8}
    if not isinstance(grid, BinGrid):
        style["bins"] = bins
    layers = [Layer(grid, kind="bins", style=style)] + _base_layers(boundary, neighborhoods)
    return render_layers(layers, crs=crs, basemap=basemap, title=title, scale_bar=scale_bar, ax=ax)


def plot_hexbin(coords, title, boundary=None, neighborhoods=None, crs=None, basemap=None,
                gridsize=HEXBIN_GRIDSIZE, scale_bar=True, ax=None):
    """
    Heatmap of request counts in hexagonal bins.

    Returns

    tuple
        (fig, ax) matplotlib figure and axes objects
    """
    layers = [Layer(coords, kind="hexbin", style={"gridsize": gridsize, "alpha": 0.8,
                                                  "colorbar": "Requests per hexagon"})]
    layers += _base_layers(boundary, neighborhoods)
    extent = boundary.total_bounds if boundary is not None else None
    return render_layers(layers, crs=crs, basemap=basemap, title=title, extent=extent,
                         scale_bar=scale_bar, ax=ax)


def plot_density(grid, title, boundary=None, neighborhoods=None, crs=None, basemap=None,
                 scale_bar=True, ax=None):
    """
    Raster of a kernel density surface.

    Parameters

    grid : DensityGrid
        Output of kernel_density

    Returns

    tuple
        (fig, ax) matplotlib figure and axes objects
    """
    label = "Normalized density" if grid.normalized else "Density"
    layers = [Layer(grid, kind="density", style={"colorbar": label})] + _base_layers(boundary, neighborhoods)
    return render_layers(layers, crs=crs, basemap=basemap, title=title, scale_bar=scale_bar, ax=ax)


def plot_density_contours(density, title, boundary=None, neighborhoods=None, crs=None, basemap=None,
                          levels=CONTOUR_LEVELS, filled=False, points=None, scale_bar=True, ax=None):
    """
    Density contours (lines or filled bands), optionally over the request points.

    Parameters

    density : DensityGrid or GeoDataFrame
        A density grid, or contour polygons from density_contours (always drawn filled)
    title : str
        Plot title
    levels : int or array-like, optional
        Contour levels when density is a grid
    filled : bool, optional
        Fill between levels instead of drawing lines
    points : GeoDataFrame, optional
        Request points drawn underneath the contours

    Returns

    tuple
        (fig, ax) matplotlib figure and axes objects
    """
    layers = []
    if points is not None:
        layers.append(Layer(points, kind="points", style={"markersize": 1, "color": "black", "alpha": 0.3}))

    if isinstance(density, DensityGrid):
        label = "Normalized density" if density.normalized else "Density"
        kind = "filled_contours" if filled else "contours"
        layers.append(Layer(density, kind=kind, style={"levels": levels, "colorbar": label}))
    else:
        layers.append(Layer(density, kind="filled_contours", style={"legend": True}))

    layers += _base_layers(boundary, neighborhoods)
    extent = boundary.total_bounds if boundary is not None else None
    return render_layers(layers, crs=crs, basemap=basemap, title=title, extent=extent,
                         scale_bar=scale_bar, ax=ax)


def plot_category_counts(counts, title, top=None):
    """
    Horizontal bar chart of requests per category.

    Parameters

    counts : Series
        Output of category_counts
    top : int, optional
        Only show the most frequent categories

    Returns

    tuple
        (fig, ax) matplotlib figure and axes objects
    """
    s = counts.head(top) if top is not None else counts
    s = s.iloc[::-1]

    fig, ax = plt.subplots(figsize=(8, max(3, 0.35 * len(s))))
    ax.barh([str(i) for i in s.index], s.values, color="steelblue", edgecolor="black")
    ax.set_title(title)
    ax.set_xlabel("Number of requests")
    ax.grid(True, axis="x", alpha=0.3)
    plt.tight_layout()
    return fig, ax


def plot_requests_over_time(series, title, ylabel="Requests per month"):
    """
    Line chart of request counts per period.

    Parameters

    series : Series
        Output of requests_per_period

    Returns

    tuple
        (fig, ax) matplotlib figure and axes objects
    """
    s = pd.Series(series)
    fig, ax = plt.subplots(figsize=(10, 4))
    ax.plot(s.index, s.values, marker="o", linewidth=2, markersize=4)
    ax.set_title(title)
    ax.set_ylabel(ylabel)
    ax.set_ylim(bottom=0)
    ax.grid(True, alpha=0.3)
    fig.autofmt_xdate()
    return fig, ax


def save_figure(fig, path, dpi=DPI):
    """Write a figure to disk, creating the output directory if needed."""
    output_dir = os.path.dirname(path)
    if output_dir and not os.path.exists(output_dir):
        os.makedirs(output_dir)
    fig.savefig(path, dpi=dpi, bbox_inches="tight")
    log.info("Saved figure to %s", path)
    return path
