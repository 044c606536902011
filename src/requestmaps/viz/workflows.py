"""
Workflow functions producing the full set of request maps.
"""

import logging

from requestmaps.config import BIN_COUNT, CONTOUR_LEVELS
from requestmaps.processing.aggregation import count_requests_to_neighborhoods, requests_per_period
from requestmaps.processing.filters import category_counts

from .choropleth import plot_choropleth
from .plot import (
    plot_bins,
    plot_category_counts,
    plot_density,
    plot_density_contours,
    plot_hexbin,
    plot_points,
    plot_requests_over_time,
)

log = logging.getLogger(__name__)


def render_request_maps(lab, category="Bulky Items", place_label="Los Angeles", sample=None,
                        random_state=None, basemap=None, bins=BIN_COUNT, levels=CONTOUR_LEVELS):
    """
    Generate all maps for one request category.

    Creates the category bar chart, monthly counts, point map, neighborhood choropleth,
    2D bin and hexbin heatmaps, a density raster and density contours.

    Parameters

    lab : RequestMapLab
        Session with boundary and requests loaded (neighborhoods optional)
    category : str, optional
        Request type to map
    place_label : str, optional
        Label for the location (used in plot titles)
    sample : int, optional
        Subsample the category's requests before density estimation
    random_state : int, optional
        Seed for the subsample
    basemap : BasemapOptions, optional
        Tiles under every map; None draws no tiles

    Returns

    dict
        Dictionary containing:
        - subset: requests of the category
        - coords: coordinate table (sampled if requested)
        - counts: requests per category
        - neighborhood_counts: neighborhoods with request_count (or None)
        - density: normalized DensityGrid
        - contours: contour polygons
        - figures: dict of name -> matplotlib figure
    """
    lab.check_crs()
    boundary = lab.boundary
    hoods = lab.neighborhoods
    figures = {}

    # Plot 1: Request types
    counts = category_counts(lab.requests, column=lab.category_col)
    figures["categories"], _ = plot_category_counts(counts, f"Service requests by type — {place_label}", top=15)

    subset = lab.subset(category=category)
    if subset.empty:
        raise ValueError(f"No '{category}' requests to map.")

    # Plot 2: Monthly volume
    if lab.date_col in subset.columns:
        monthly = requests_per_period(subset, date_col=lab.date_col)
        figures["monthly"], _ = plot_requests_over_time(monthly, f"{category} requests per month — {place_label}")

    # Plot 3: Points
    figures["points"], _ = plot_points(subset, f"{category} requests — {place_label}", boundary=boundary,
                                       neighborhoods=hoods, basemap=basemap)

    # Plot 4: Neighborhood choropleth
    hood_counts = None
    if hoods is not None:
        hood_counts = count_requests_to_neighborhoods(subset, hoods, name_col=lab.name_col)
        figures["choropleth"], _ = plot_choropleth(hood_counts, "request_count",
                                                   f"{category} requests per neighborhood — {place_label}",
                                                   boundary=boundary, basemap=basemap)

    # Plot 5-6: Binned heatmaps
    coords = lab.coordinates(category=category, sample=sample, random_state=random_state)
    grid = lab.bins(category=category, bins=bins)
    figures["bins"], _ = plot_bins(grid, f"{category} requests, {bins}x{bins} bins — {place_label}",
                                   boundary=boundary, basemap=basemap)
    figures["hexbin"], _ = plot_hexbin(coords, f"{category} requests, hexagonal bins — {place_label}",
                                       boundary=boundary, crs=lab.target_crs, basemap=basemap)

    # Plot 7-8: Kernel density
    density = lab.density(category=category, sample=sample, random_state=random_state, normalize=True)
    figures["density"], _ = plot_density(density, f"{category} request density — {place_label}",
                                         boundary=boundary, crs=lab.target_crs, basemap=basemap)
    contours = lab.contours(category=category, levels=levels, sample=sample, random_state=random_state,
                            normalize=True)
    figures["contours"], _ = plot_density_contours(contours, f"{category} density contours — {place_label}",
                                                   boundary=boundary, points=subset, basemap=basemap)

    log.info("Rendered %d figures for %d '%s' requests", len(figures), len(subset), category)

    return {
        "subset": subset,
        "coords": coords,
        "counts": counts,
        "neighborhood_counts": hood_counts,
        "density": density,
        "contours": contours,
        "figures": figures,
    }
