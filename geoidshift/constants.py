"""
Centralized configuration knobs and thresholds.
Change values here to tune behavior without touching the modules.
"""

# Reference systems
TARGET_CRS: str = "EPSG:4979"  # WGS 84 (3D), heights above the ellipsoid

# Geoid models: key -> compound source CRS (WGS 84 + gravity-related height)
GEOID_MODELS = {
    "EGM2008": "EPSG:4326+3855",
    "EGM96": "EPSG:4326+5773",
    "EGM84": "EPSG:4326+5798",
}
DEFAULT_GEOID_MODEL: str = "EGM2008"

# Local grids are applied as h = H + multiplier * N
VGRIDSHIFT_MULTIPLIER: float = 1.0
GRID_NODATA: float = -88.8888

# Engine
NETWORK_ENABLED: bool = False  # PROJ CDN grid fetching
ALLOW_BALLPARK: bool = False  # a ballpark vertical op leaves heights untouched

# Environment overrides
ENV_GEOID_MODEL = "GEOIDSHIFT_GEOID_MODEL"
ENV_GEOID_GRID = "GEOIDSHIFT_GEOID_GRID"
ENV_NETWORK = "GEOIDSHIFT_NETWORK"

# Numerics
LAT_MIN_DEG: float = -90.0
LAT_MAX_DEG: float = 90.0
HORIZONTAL_TOL_DEG: float = 1e-9

# Tables
CSV_LAT_COL = "lat"
CSV_LON_COL = "lon"
CSV_HEIGHT_COL = "msl"
CSV_OUT_HEIGHT_COL = "alt_ellip"
CSV_VALID_COL = "geoid_ok"
CSV_CHUNK_SIZE: int = 10_000

# Grid cache
GRID_CACHE_MAX_GB: float = 2.0
# Only these files are quota candidates; cache.db, proj.ini and friends stay.
GRID_FILE_SUFFIXES = (".tif", ".tiff", ".gtx")
