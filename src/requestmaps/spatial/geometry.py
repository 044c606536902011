from requestmaps.constants import POINT_TYPES, POLYGON_TYPES
from requestmaps.exceptions import GeometryTypeError


def _unexpected_types(gdf, allowed):
    if len(gdf) == 0:
        return []
    types = set(gdf.geometry.geom_type.dropna().unique())
    return sorted(types - set(allowed))


def require_points(gdf, what="operation"):
    bad = _unexpected_types(gdf, POINT_TYPES)
    if bad:
        raise GeometryTypeError(f"{what} expects Point geometries but found {', '.join(bad)}.")


def require_polygons(gdf, what="operation"):
    bad = _unexpected_types(gdf, POLYGON_TYPES)
    if bad:
        raise GeometryTypeError(f"{what} expects Polygon/MultiPolygon geometries but found {', '.join(bad)}.")


def boundary_geometry(boundary):
    """
    Dissolve a boundary GeoDataFrame (or pass through a shapely geometry) to one geometry.

    Args:
        boundary (geopandas.GeoDataFrame or shapely.Geometry): Boundary polygons.

    Returns:
        shapely.Geometry: Union of all boundary polygons.
    """
    if hasattr(boundary, "geometry") and hasattr(boundary, "crs"):
        require_polygons(boundary, "boundary_geometry")
        return boundary.union_all()
    return boundary
