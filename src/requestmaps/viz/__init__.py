"""
Visualization module for requestmaps.
"""

from .basemap import add_basemap, add_scale_bar, add_north_arrow
from .layers import draw_layer, render_layers
from .choropleth import plot_choropleth, plot_interactive_request_map
from .plot import (
    plot_points,
    plot_bins,
    plot_hexbin,
    plot_density,
    plot_density_contours,
    plot_category_counts,
    plot_requests_over_time,
    save_figure,
)
from .workflows import render_request_maps

__all__ = [
    'add_basemap',
    'add_scale_bar',
    'add_north_arrow',
    'draw_layer',
    'render_layers',
    'plot_choropleth',
    'plot_interactive_request_map',
    'plot_points',
    'plot_bins',
    'plot_hexbin',
    'plot_density',
    'plot_density_contours',
    'plot_category_counts',
    'plot_requests_over_time',
    'save_figure',
    'render_request_maps',
]
