"""
Map furniture: basemap tiles, scale bar and north arrow.
"""

import math
import warnings

import contextily as ctx
from matplotlib.patches import FancyArrowPatch
from mpl_toolkits.axes_grid1.anchored_artists import AnchoredSizeBar
from pyproj import CRS, Transformer

from requestmaps.spatial.crs import warn_if_geographic
from requestmaps.types import BasemapOptions


def resolve_provider(provider):
    """
    Look up a contextily tile provider.

    Parameters

    provider : str or xyzservices.TileProvider
        Dotted provider name such as "CartoDB.Positron", or a provider object

    Returns

    xyzservices.TileProvider
    """
    if not isinstance(provider, str):
        return provider
    return ctx.providers.query_name(provider)


def add_basemap(ax, crs, options=None):
    """
    Draw basemap tiles underneath the current axes content.

    Axis limits must already be set to the data extent so contextily fetches the right tiles.

    Parameters

    ax : matplotlib.axes.Axes
        Target axes
    crs : str or pyproj.CRS
        CRS of the data drawn on ax
    options : BasemapOptions, optional
        Provider, zoom and opacity. Defaults to BasemapOptions()

    Returns

    bool
        True if tiles were drawn
    """
    options = options or BasemapOptions()
    try:
        ctx.add_basemap(
            ax,
            crs=crs,
            source=resolve_provider(options.provider),
            zoom=options.zoom,
            alpha=options.alpha,
            zorder=0,
        )
    except Exception as e:
        if options.required:
            raise
        warnings.warn(f"Failed to add basemap: {e}")
        return False
    return True


def _nice_length(span):
    """Round a target length down to 1, 2 or 5 times a power of ten."""
    if span <= 0:
        return 0
    exp = math.floor(math.log10(span))
    base = 10 ** exp
    for step in (5, 2, 1):
        if step * base <= span:
            return step * base
    return base


def _ground_scale(ax, crs):
    """Ground metres per map unit at the centre of the axes."""
    if crs is None:
        return 1.0
    crs = CRS.from_user_input(crs)
    if crs.to_epsg() != 3857:
        return 1.0
    # Web Mercator stretches distances by 1 / cos(latitude)
    x = sum(ax.get_xlim()) / 2
    y = sum(ax.get_ylim()) / 2
    _, lat = Transformer.from_crs(crs, "EPSG:4326", always_xy=True).transform(x, y)
    return math.cos(math.radians(lat))


def add_scale_bar(ax, crs=None, length=None, location="lower left", color="black"):
    """
    Add a scale bar sized in ground metres (or kilometres).

    Parameters

    ax : matplotlib.axes.Axes
        Target axes with limits already set
    crs : str, optional
        CRS of the axes coordinates. EPSG:3857 is corrected for latitude
    length : float, optional
        Bar length in metres. Defaults to a round number near a fifth of the axes width
    location : str, optional
        Matplotlib legend-style location

    Returns

    AnchoredSizeBar
    """
    if warn_if_geographic(crs, purpose="scale bar lengths"):
        scale = None
    else:
        scale = _ground_scale(ax, crs)

    xmin, xmax = ax.get_xlim()
    width = abs(xmax - xmin)

    if scale is None:
        # degrees, no ground conversion
        size = length if length is not None else _nice_length(width / 5)
        label = f"{size:g}°"
    else:
        metres = length if length is not None else _nice_length(width * scale / 5)
        size = metres / scale
        label = f"{metres / 1000:g} km" if metres >= 1000 else f"{metres:g} m"

    bar = AnchoredSizeBar(
        ax.transData,
        size,
        label,
        location,
        pad=0.5,
        color=color,
        frameon=False,
        size_vertical=abs(ax.get_ylim()[1] - ax.get_ylim()[0]) / 200,
    )
    ax.add_artist(bar)
    return bar


def add_north_arrow(ax, color="black"):
    """
    Add a simple north arrow to the upper right corner of the map.
    """
    xlim = ax.get_xlim()
    ylim = ax.get_ylim()

    x_pos = xlim[1] - 0.08 * (xlim[1] - xlim[0])
    y_pos = ylim[1] - 0.12 * (ylim[1] - ylim[0])
    arrow_length = 0.05 * (ylim[1] - ylim[0])

    arrow = FancyArrowPatch(
        (x_pos, y_pos - arrow_length),
        (x_pos, y_pos),
        arrowstyle='-|>',
        mutation_scale=20,
        color=color,
        linewidth=2,
        zorder=20,
    )
    ax.add_patch(arrow)
    ax.text(x_pos, y_pos + 0.01 * (ylim[1] - ylim[0]), 'N',
            ha='center', va='bottom', fontsize=12, fontweight='bold', color=color, zorder=20)
    return arrow
