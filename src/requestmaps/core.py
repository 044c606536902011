from pyproj import CRS

from requestmaps.config import (
    BIN_COUNT,
    CATEGORY_COL,
    CONTOUR_LEVELS,
    DATE_COL,
    KDE_GRIDSIZE,
    NEIGHBORHOOD_NAME_COL,
    PROJECTED_CRS,
)
from requestmaps.exceptions import CRSMismatchError
from requestmaps.io.vector import read_boundary, read_neighborhoods, read_requests
from requestmaps.processing.filters import (
    clip_to_boundary,
    extract_coordinates,
    filter_by_category,
    filter_by_date,
    sample_rows,
)
from requestmaps.processing.density import kernel_density, density_contours, bin_counts
from requestmaps.spatial.crs import check_common_crs
from requestmaps.spatial.geometry import boundary_geometry


class RequestMapLab:
    """
    Core class for a request-mapping session.
    Holds the boundary, neighborhoods and request points, all projected to one CRS.
    """

    def __init__(self, crs=PROJECTED_CRS, category_col=CATEGORY_COL, date_col=DATE_COL,
                 name_col=NEIGHBORHOOD_NAME_COL):
        """
        Initialize the session.

        Args:
            crs (str): Target CRS for every layer (default EPSG:3857, the basemap tile grid).
            category_col (str): Request type column.
            date_col (str): Request timestamp column.
            name_col (str): Neighborhood name column.
        """
        self.target_crs = crs
        self.category_col = category_col
        self.date_col = date_col
        self.name_col = name_col

        self.boundary = None
        self.neighborhoods = None
        self.requests = None

    def load_boundary(self, path, **kwargs):
        """
        Load the administrative boundary and project it to the target CRS.
        """
        self.boundary = read_boundary(path, **kwargs).to_crs(self.target_crs)
        return self.boundary

    def load_neighborhoods(self, path, **kwargs):
        """
        Load neighborhood polygons and project them to the target CRS.
        """
        self.neighborhoods = read_neighborhoods(path, name_col=self.name_col, **kwargs).to_crs(self.target_crs)
        return self.neighborhoods

    def load_requests(self, path, clip=False, **kwargs):
        """
        Load service-request points and project them to the target CRS.

        Args:
            path (str): Request package (GeoPackage or GeoJSON).
            clip (bool): Keep only requests inside the loaded boundary.

        Returns:
            geopandas.GeoDataFrame: The request points.
        """
        requests = read_requests(path, category_col=self.category_col, date_col=self.date_col, **kwargs)
        requests = requests.to_crs(self.target_crs)
        if clip:
            if self.boundary is None:
                raise ValueError("Boundary not loaded. Call load_boundary() first.")
            requests = clip_to_boundary(requests, self.boundary)
        self.requests = requests
        return self.requests

    def _require_requests(self):
        if self.requests is None:
            raise ValueError("Requests not loaded. Call load_requests() first.")

    def subset(self, category=None, start=None, end=None):
        """
        Requests of one (or several) categories, optionally within a date window.

        Returns:
            geopandas.GeoDataFrame: A new frame; the loaded requests are untouched.
        """
        self._require_requests()
        out = self.requests
        if category is not None:
            out = filter_by_category(out, category, column=self.category_col)
        if start is not None or end is not None:
            out = filter_by_date(out, start=start, end=end, column=self.date_col)
        return out.copy() if out is self.requests else out

    def coordinates(self, category=None, sample=None, random_state=None, **subset_kwargs):
        """
        Coordinate table of the (optionally filtered and subsampled) requests.

        Args:
            category (str or list, optional): Request type(s) to keep.
            sample (int, optional): Number of rows to sample without replacement.
            random_state (int, optional): Seed for the sample.

        Returns:
            pandas.DataFrame: Two float columns, x and y.
        """
        subset = self.subset(category=category, **subset_kwargs)
        coords = extract_coordinates(subset)
        if sample is not None:
            coords = sample_rows(coords, sample, random_state=random_state)
        return coords

    def density(self, category=None, sample=None, random_state=None, normalize=False, bw_method=None,
                gridsize=KDE_GRIDSIZE, clip_extent=True):
        """
        Kernel density surface of the requests.

        Args:
            clip_extent (bool): Evaluate over the boundary extent instead of the data extent.

        Returns:
            DensityGrid
        """
        coords = self.coordinates(category=category, sample=sample, random_state=random_state)
        extent = self.boundary.total_bounds if (clip_extent and self.boundary is not None) else None
        return kernel_density(coords, bw_method=bw_method, gridsize=gridsize, extent=extent, normalize=normalize)

    def contours(self, category=None, levels=CONTOUR_LEVELS, **density_kwargs):
        """
        Density contour polygons of the requests, in the target CRS.
        """
        grid = self.density(category=category, **density_kwargs)
        return density_contours(grid, levels=levels, crs=self.target_crs)

    def bins(self, category=None, bins=BIN_COUNT, sample=None, random_state=None):
        """
        2D histogram of the requests over the boundary extent.
        """
        coords = self.coordinates(category=category, sample=sample, random_state=random_state)
        extent = self.boundary.total_bounds if self.boundary is not None else None
        return bin_counts(coords, bins=bins, extent=extent)

    def boundary_shape(self):
        """The boundary dissolved to a single geometry."""
        if self.boundary is None:
            raise ValueError("Boundary not loaded. Call load_boundary() first.")
        return boundary_geometry(self.boundary)

    def check_crs(self):
        """
        Verify that every loaded layer is in the target CRS.

        Returns:
            pyproj.CRS or None: The target CRS, or None if nothing is loaded.

        Raises:
            CRSMismatchError: If the layers disagree with each other or with the target CRS.
        """
        frames = [f for f in (self.boundary, self.neighborhoods, self.requests) if f is not None]
        common = check_common_crs(*frames)
        if common is None:
            return None
        target = CRS.from_user_input(self.target_crs)
        if common != target:
            raise CRSMismatchError(f"Layers use {common.to_string()}, not the target {target.to_string()}.")
        return target
