# config.py
# Defaults for CRS, column names, density/binning and rendering

DEFAULT_CRS = "EPSG:4326"
PROJECTED_CRS = "EPSG:3857"  # Web Mercator, same grid as the basemap tiles

# 311 request package columns
CATEGORY_COL = "RequestType"
DATE_COL = "CreatedDate"
NEIGHBORHOOD_NAME_COL = "name"

# Coordinate table columns
X_COL = "x"
Y_COL = "y"

# Density / binning
KDE_GRIDSIZE = 200
KDE_PADDING = 0.1
CONTOUR_LEVELS = 8
BIN_COUNT = 50
HEXBIN_GRIDSIZE = 60

# Rendering
BASEMAP_PROVIDER = "CartoDB.Positron"
FIGSIZE = (9, 9)
DPI = 150
