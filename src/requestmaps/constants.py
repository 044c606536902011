# constants.py

# File extension -> OGR driver
FORMAT_DRIVERS = {
    ".geojson": "GeoJSON",
    ".json": "GeoJSON",
    ".gpkg": "GPKG",
    ".shp": "ESRI Shapefile",
}

# Accepted spellings for an explicit format argument
FORMAT_ALIASES = {
    "geojson": "GeoJSON",
    "gpkg": "GPKG",
    "geopackage": "GPKG",
    "shapefile": "ESRI Shapefile",
    "esri shapefile": "ESRI Shapefile",
}

POINT_TYPES = {"Point"}
POLYGON_TYPES = {"Polygon", "MultiPolygon"}

LAYER_KINDS = (
    "polygons",
    "outline",
    "points",
    "choropleth",
    "bins",
    "hexbin",
    "density",
    "contours",
    "filled_contours",
)
